"""HTTP helpers and local policy file storage."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import requests

DEFAULT_LOCAL_STORE = ".kubescape"
_BODY_PREVIEW = 1024


class HttpRequestError(Exception):
    """Raised when an HTTP response has a non-2xx status."""

    def __init__(self, url: str, status: str, status_code: int, body: str, headers: Mapping[str, str]):
        self.url = url
        self.status = status
        self.status_code = status_code
        self.body = body
        self.headers = dict(headers)
        super().__init__(
            f"HTTP request failed. URL: '{url}', HTTP-ERROR: '{status}', "
            f"BODY: '{body[:_BODY_PREVIEW]}', HTTP-HEADERS: {self.headers}, "
            f"HTTP-BODY-BUFFER-LENGTH: {len(body.encode('utf-8'))}"
        )


def get_default_path(name: str) -> str:
    """Return the path of ``name`` inside the local store in the home directory."""
    relative = Path(DEFAULT_LOCAL_STORE) / name
    try:
        return str(Path.home() / relative)
    except RuntimeError:
        return str(relative)


def _save_json(obj: Any, path: str) -> None:
    encoded = json.dumps(obj, separators=(",", ":"), ensure_ascii=False)
    target = Path(path)
    try:
        target.write_text(encoded, encoding="utf-8")
    except FileNotFoundError:
        os.mkdir(target.parent, 0o744)
        target.write_text(encoded, encoding="utf-8")


def save_control_in_file(control: Any, path: str) -> None:
    """Store a control as JSON, creating its directory if missing."""
    _save_json(control, path)


def save_framework_in_file(framework: Any, path: str) -> None:
    """Store a framework as JSON, creating its directory if missing."""
    _save_json(framework, path)


def _request_uri(url: str) -> str:
    parts = urlsplit(url)
    uri = parts.path or "/"
    if parts.query:
        uri += "?" + parts.query
    return uri


def _response_text(response: requests.Response) -> str:
    body = response.text
    if not 200 <= response.status_code < 300:
        raise HttpRequestError(
            _request_uri(response.url),
            f"{response.status_code} {response.reason}",
            response.status_code,
            body,
            response.headers,
        )
    return body


def http_get(
    session: requests.Session | None,
    url: str,
    headers: Mapping[str, str] | None = None,
) -> str:
    """Send a GET request and return the response body."""
    client = session if session is not None else requests.Session()
    response = client.get(url, headers=dict(headers or {}))
    return _response_text(response)


def http_post(
    session: requests.Session | None,
    url: str,
    headers: Mapping[str, str] | None = None,
    body: bytes | str = b"",
) -> str:
    """Send a POST request with ``body`` and return the response body."""
    client = session if session is not None else requests.Session()
    response = client.post(url, headers=dict(headers or {}), data=body)
    return _response_text(response)