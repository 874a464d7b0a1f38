"""Checking whether a newer release of the scanner is available."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Protocol

import requests

from kscan.display import warning_display
from kscan.httputils import http_post

SKIP_VERSION_CHECK = "KUBESCAPE_SKIP_UPDATE_CHECK"
UNKNOWN_BUILD_NUMBER = "unknown"
DEFAULT_VERSION_URL = "https://us-central1-elated-pottery-310110.cloudfunctions.net/ksgf1v1"

_TRUE_VALUES = {"1", "t", "true"}


@dataclass
class VersionCheckRequest:
    """What is sent to the version service."""

    client: str = "kubescape"
    client_version: str = ""
    framework: str = ""
    framework_version: str = ""
    scanning_target: str = ""

    def to_dict(self) -> dict[str, str]:
        """Return the JSON form of the request."""
        return {
            "client": self.client,
            "clientVersion": self.client_version,
            "framework": self.framework,
            "frameworkVersion": self.framework_version,
            "target": self.scanning_target,
        }


@dataclass
class VersionCheckResponse:
    """What the version service answers."""

    client: str = ""
    client_update: str = ""
    framework: str = ""
    framework_update: str = ""
    message: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VersionCheckResponse":
        """Build a response from its JSON form."""
        return cls(
            client=str(data.get("client") or ""),
            client_update=str(data.get("clientUpdate") or ""),
            framework=str(data.get("framework") or ""),
            framework_update=str(data.get("frameworkUpdate") or ""),
            message=str(data.get("message") or ""),
        )


class _VersionChecker(Protocol):
    def check_latest_version(self, request: VersionCheckRequest) -> None: ...


def warning_message(kind: str, release: str) -> str:
    """Message shown when ``kind`` is older than ``release``."""
    return f"Warning: '{kind}' is not updated to the latest release: '{release}'"


class VersionCheckHandler:
    """Asks the version service for the latest release."""

    def __init__(
        self,
        build_number: str = "",
        version_url: str = DEFAULT_VERSION_URL,
        session: requests.Session | None = None,
    ) -> None:
        self.build_number = build_number
        self.version_url = version_url
        self.session = session

    def get_latest_version(self, request: VersionCheckRequest) -> VersionCheckResponse:
        """Post ``request`` and return the service's answer."""
        body = json.dumps(request.to_dict()).encode("utf-8")
        text = http_post(self.session, self.version_url, {"Content-Type": "application/json"}, body)
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object from the version service")
        return VersionCheckResponse.from_dict(data)

    def check_latest_version(self, request: VersionCheckRequest) -> None:
        """Print a warning if a newer release exists, and any service message."""
        try:
            latest = self.get_latest_version(request)
        except (requests.RequestException, ValueError) as exc:
            raise RuntimeError("failed to get latest version") from exc

        if latest.client_update and self.build_number and self.build_number < latest.client_update:
            print(warning_message(latest.client, latest.client_update))
        if latest.message:
            print(latest.message)


class VersionCheckHandlerMock:
    """Version checker that skips the check."""

    def check_latest_version(self, request: VersionCheckRequest) -> None:
        """Report that the check was skipped."""
        print("Skipping version check")


def new_version_check_handler(build_number: str = "") -> VersionCheckHandler | VersionCheckHandlerMock:
    """Return a checker, or a no-op one when the skip variable is true."""
    if not build_number:
        warning_display(
            "Warning: unknown build number, this might affect your scan results. "
            "Please make sure you are updated to latest version.\n"
        )
    value = os.environ.get(SKIP_VERSION_CHECK)
    if value is not None and value.strip().lower() in _TRUE_VALUES:
        return VersionCheckHandlerMock()
    return VersionCheckHandler(build_number)


def new_version_check_request(
    build_number: str,
    framework_name: str,
    framework_version: str,
    scanning_target: str,
) -> VersionCheckRequest:
    """Build a request, using ``unknown`` for a missing build number."""
    return VersionCheckRequest(
        client="kubescape",
        client_version=build_number or UNKNOWN_BUILD_NUMBER,
        framework=framework_name,
        framework_version=framework_version,
        scanning_target=scanning_target,
    )