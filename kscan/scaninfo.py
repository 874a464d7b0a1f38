"""Options of a scan and how they turn into policy, exception and input getters."""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from kscan.armoapi import get_armo_api_connector
from kscan.httputils import get_default_path
from kscan.policies import LoadPolicy


class ScanTarget(str, Enum):
    """What a scan looks at."""

    CLUSTER = "cluster"
    LOCAL_FILES = "yaml"


class PolicyKind(str, Enum):
    """Kind of a policy named on the command line."""

    FRAMEWORK = "Framework"
    CONTROL = "Control"


@dataclass
class PolicyIdentifier:
    """A policy to scan, by kind and name."""

    kind: PolicyKind
    name: str


class OptionalBoolFlag:
    """A boolean flag that also remembers whether it was given at all."""

    type_name = "bool"

    def __init__(self, value: bool | None = None) -> None:
        self.value = value

    def set(self, value: str) -> None:
        """Set from text; only ``true`` and ``false`` change the value."""
        if value == "true":
            self.set_bool(True)
        elif value == "false":
            self.set_bool(False)

    def set_bool(self, value: bool) -> None:
        """Set the value."""
        self.value = bool(value)

    def __str__(self) -> str:
        if self.value is None:
            return ""
        return "true" if self.value else "false"


def _extension(path: str) -> str:
    name = os.path.basename(path)
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


@dataclass
class ScanInfo:
    """Everything the user asked of a scan."""

    policy_identifier: list[PolicyIdentifier] = field(default_factory=list)
    use_exceptions: str = ""
    controls_inputs: str = ""
    use_from: list[str] = field(default_factory=list)
    use_default: bool = False
    verbose_mode: bool = False
    format: str = ""
    output: str = ""
    excluded_namespaces: str = ""
    include_namespaces: str = ""
    input_patterns: list[str] = field(default_factory=list)
    silent: bool = False
    fail_threshold: int = 0
    submit: bool = False
    host_sensor: OptionalBoolFlag = field(default_factory=OptionalBoolFlag)
    local: bool = False
    account: str = ""
    framework_scan: bool = False
    scan_all: bool = False
    exceptions_getter: Any = None
    controls_inputs_getter: Any = None
    policy_getter: Any = None

    def init(self) -> None:
        """Derive policy sources, getters and the output file name from the options."""
        self._set_use_from()
        self._set_use_exceptions()
        self._set_account_config()
        self._set_output_file()

    def _set_use_exceptions(self) -> None:
        if self.use_exceptions:
            self.exceptions_getter = LoadPolicy([self.use_exceptions])
        else:
            self.exceptions_getter = get_armo_api_connector()

    def _set_account_config(self) -> None:
        if self.controls_inputs:
            self.controls_inputs_getter = LoadPolicy([self.controls_inputs])
        else:
            self.controls_inputs_getter = get_armo_api_connector()

    def _set_use_from(self) -> None:
        if self.use_default:
            self.use_from.extend(
                get_default_path(policy.name + ".json") for policy in self.policy_identifier
            )

    def _set_output_file(self) -> None:
        if not self.output:
            return
        if self.format == "json" and _extension(self.output) != ".json":
            self.output += ".json"
        if self.format == "junit" and _extension(self.output) != ".xml":
            self.output += ".xml"

    def scanning_environment(self) -> ScanTarget:
        """Files are scanned when input patterns are given, otherwise the cluster."""
        return ScanTarget.LOCAL_FILES if self.input_patterns else ScanTarget.CLUSTER

    def set_policy_identifiers(self, policies: Iterable[str], kind: PolicyKind) -> None:
        """Add each policy not already present, keeping their order."""
        for policy in policies:
            if not self.contains(policy):
                self.policy_identifier.append(PolicyIdentifier(kind=kind, name=policy))

    def contains(self, policy_name: str) -> bool:
        """Return whether a policy with this name is already listed."""
        return any(policy.name == policy_name for policy in self.policy_identifier)