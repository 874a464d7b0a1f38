"""Scan session state and the environment it runs in."""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Environment:
    """Settings of the environment the scanner reports to."""

    customer_guid: str = ""
    cluster_name: str = ""
    event_receiver_url: str = ""
    notification_server_url: str = ""
    dashboard_backend_url: str = ""
    rest_api_port: str = "4001"


current_environment = Environment()


@dataclass
class ExceptionConfig:
    """Exception settings of a component."""

    ignore: bool | None = None
    multiple_score: float | None = None
    namespaces: list[str] = field(default_factory=list)
    regex: str = ""


@dataclass
class ComponentConfig:
    """Configuration of a component."""

    exceptions: ExceptionConfig = field(default_factory=ExceptionConfig)


@dataclass
class RegoInputData:
    """Input arguments handed to the policy engine."""

    posture_control_inputs: dict[str, list[str]] | None = None

    def set_controls_inputs(self, controls_inputs: dict[str, list[str]] | None) -> None:
        """Replace the control input arguments."""
        self.posture_control_inputs = controls_inputs

    def to_storage(self) -> dict[str, Any]:
        """Return the data document handed to the policy engine."""
        return json.loads(json.dumps({"postureControlInputs": self.posture_control_inputs}))


@dataclass
class OPASessionObj:
    """Everything a scan gathers: inputs, frameworks and results."""

    k8s_resources: dict[str, list[str]] | None = None
    frameworks: list[dict[str, Any]] | None = None
    all_resources: dict[str, Any] = field(default_factory=dict)
    posture_report: dict[str, Any] = field(default_factory=dict)
    exceptions: list[Any] = field(default_factory=list)
    rego_input_data: RegoInputData = field(default_factory=RegoInputData)


def new_opa_session_obj(
    frameworks: list[dict[str, Any]] | None,
    k8s_resources: dict[str, list[str]] | None,
    environment: Environment | None = None,
) -> OPASessionObj:
    """Start a session whose report carries the environment's cluster and customer."""
    env = environment if environment is not None else current_environment
    return OPASessionObj(
        k8s_resources=k8s_resources,
        frameworks=copy.copy(frameworks),
        posture_report={"clusterName": env.cluster_name, "customerGUID": env.customer_guid},
    )


def new_opa_session_obj_mock() -> OPASessionObj:
    """Start an empty session with a blank report."""
    return OPASessionObj(
        posture_report={"clusterName": "", "customerGUID": "", "reportID": "", "jobID": ""},
    )