"""Policy getter interfaces and loading policies from local files."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import Any


class PolicyGetter(ABC):
    """Source of frameworks and controls."""

    @abstractmethod
    def get_framework(self, name: str) -> dict[str, Any]:
        """Return the framework called ``name``."""

    @abstractmethod
    def get_control(self, name: str) -> dict[str, Any]:
        """Return the control called ``name``."""


class ExceptionsGetter(ABC):
    """Source of posture exception policies."""

    @abstractmethod
    def get_exceptions(self, customer_guid: str, cluster_name: str) -> list[Any]:
        """Return the exception policies."""


class Backend(ABC):
    """Backend that registers tenants."""

    @abstractmethod
    def get_customer_guid(self, customer_guid: str) -> Any:
        """Return the tenant details for ``customer_guid``."""


class ControlsInputsGetter(ABC):
    """Source of control input arguments."""

    @abstractmethod
    def get_controls_inputs(self, customer_guid: str, cluster_name: str) -> dict[str, list[str]]:
        """Return a mapping of control name to input arguments."""


class PolicyNotFoundError(LookupError):
    """Raised when a file does not hold the requested policy."""


def _same(a: str, b: str) -> bool:
    return a.casefold() == b.casefold()


def _read_json(path: str) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def _read_object(path: str) -> dict[str, Any]:
    data = _read_json(path)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object in '{path}'")
    return data


class LoadPolicy(PolicyGetter, ExceptionsGetter, ControlsInputsGetter):
    """Loads policies, exceptions and control inputs from local JSON files."""

    def __init__(self, file_paths: Iterable[str]) -> None:
        self.file_paths = list(file_paths)

    def _file_path(self) -> str:
        return self.file_paths[0] if self.file_paths else ""

    def get_control(self, control_name: str) -> dict[str, Any]:
        """Return a control from the first file, looking inside it as a framework if needed."""
        control = _read_object(self._file_path())
        if (
            control_name
            and not _same(control_name, control.get("name", ""))
            and not _same(control_name, control.get("controlID", ""))
        ):
            try:
                framework = self.get_framework(control.get("name", ""))
            except PolicyNotFoundError as exc:
                raise PolicyNotFoundError("control from file not matching") from exc
            for candidate in framework.get("controls") or []:
                if _same(candidate.get("name", ""), control_name) or _same(
                    candidate.get("controlID", ""), control_name
                ):
                    return candidate
        return control

    def get_framework(self, framework_name: str) -> dict[str, Any]:
        """Return the first framework among the files whose name matches."""
        framework: dict[str, Any] = {}
        for path in self.file_paths:
            framework = _read_object(path)
            if _same(framework_name, framework.get("name", "")):
                break
        if framework_name and not _same(framework_name, framework.get("name", "")):
            raise PolicyNotFoundError("framework from file not matching")
        return framework

    def get_exceptions(self, customer_guid: str, cluster_name: str) -> list[Any]:
        """Return the exception policies stored in the first file."""
        exceptions = _read_json(self._file_path())
        if exceptions is None:
            return []
        if not isinstance(exceptions, list):
            raise ValueError("expected a JSON array of exceptions")
        return exceptions

    def get_controls_inputs(self, customer_guid: str, cluster_name: str) -> dict[str, list[str]]:
        """Return the control inputs of the account configuration in the first file."""
        account_config = _read_object(self._file_path())
        settings = account_config.get("settings") or {}
        return dict(settings.get("postureControlInputs") or {})