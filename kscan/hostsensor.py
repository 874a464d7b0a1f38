"""Data collected from cluster nodes by the host sensor."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class HostSensorDataEnvelope:
    """Raw JSON data from one node, tagged with its group, version and kind."""

    group: str = ""
    version: str = ""
    resource: str = ""
    node_name: str = ""
    data: bytes = b""
    # Node data is not namespaced; a requested namespace is kept aside only.
    requested_namespace: str = field(default="", init=False, repr=False, compare=False)

    @property
    def name(self) -> str:
        return self.node_name

    @property
    def kind(self) -> str:
        return self.resource

    @property
    def namespace(self) -> str:
        return ""

    @property
    def api_version(self) -> str:
        return self.version

    def set_name(self, value: str) -> None:
        """Set the node name."""
        self.node_name = value

    def set_kind(self, value: str) -> None:
        """Set the resource kind."""
        self.resource = value

    def set_namespace(self, value: str) -> None:
        """Record the requested namespace; node data still reports none."""
        self.requested_namespace = value

    def set_object(self, value: dict[str, Any]) -> None:
        """Store ``value`` as JSON data."""
        self.data = json.dumps(value, sort_keys=True, separators=(",", ":")).encode("utf-8")

    def get_object(self) -> dict[str, Any]:
        """Return the data as a mapping; empty when it is not a JSON object."""
        try:
            parsed = json.loads(self.data)
        except (ValueError, TypeError):
            return {}
        return parsed if isinstance(parsed, dict) else {}

    def get_id(self) -> str:
        """Identifier of the form ``<group>/<version>/<kind>/<name>``."""
        return f"{self.group}/{self.api_version}/{self.kind}/{self.name}"


class HostSensor(ABC):
    """Deploys the sensor, collects node data and removes it again."""

    @abstractmethod
    def init(self) -> None:
        """Deploy the sensor."""

    @abstractmethod
    def tear_down(self) -> None:
        """Remove the sensor."""

    @abstractmethod
    def collect_resources(self) -> list[HostSensorDataEnvelope]:
        """Collect data from all nodes."""

    @abstractmethod
    def get_namespace(self) -> str:
        """Namespace the sensor runs in."""


class HostSensorHandlerMock(HostSensor):
    """Host sensor that deploys nothing and collects nothing."""

    def __init__(self) -> None:
        self.active = False

    def init(self) -> None:
        """Mark the sensor as active without deploying anything."""
        self.active = True

    def tear_down(self) -> None:
        """Mark the sensor as inactive without removing anything."""
        self.active = False

    def collect_resources(self) -> list[HostSensorDataEnvelope]:
        """Return no data."""
        return []

    def get_namespace(self) -> str:
        """No namespace."""
        return ""