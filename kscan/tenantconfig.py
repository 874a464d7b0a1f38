"""Tenant configuration kept in a local file and in a cluster config map."""

from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from kscan.httputils import get_default_path
from kscan.policies import Backend

_log = logging.getLogger(__name__)

CONFIG_MAP_NAME = "kubescape"
CONFIG_FILE_NAME = "config"

_FILE_MODE = 0o664


class ValueNotExistError(LookupError):
    """Raised when a configuration key is not present."""

    def __init__(self) -> None:
        super().__init__("value does not exist")


@dataclass
class ConfigObj:
    """Tenant details stored between runs."""

    customer_guid: str = ""
    token: str = ""
    customer_admin_email: str = ""
    cluster_name: str = ""

    def _as_json(self) -> dict[str, str]:
        return {
            "customerGUID": self.customer_guid,
            "invitationParam": self.token,
            "adminMail": self.customer_admin_email,
            "clusterName": self.cluster_name,
        }

    def to_json(self) -> bytes:
        """Return the compact JSON form of the whole object."""
        return json.dumps(self._as_json(), separators=(",", ":")).encode("utf-8")

    def config(self) -> bytes:
        """Return the JSON form written to the config file, without the cluster name."""
        data = self._as_json()
        data["clusterName"] = ""
        return json.dumps(data, separators=(",", ":")).encode("utf-8")

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "ConfigObj":
        """Build an object from its JSON form; unknown keys are ignored."""
        data = data or {}
        values = {}
        for field_name, key in (
            ("customer_guid", "customerGUID"),
            ("token", "invitationParam"),
            ("customer_admin_email", "adminMail"),
            ("cluster_name", "clusterName"),
        ):
            value = data.get(key)
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise ValueError(f"expected a string for '{key}'")
            values[field_name] = value
        return cls(**values)


class ConfigMapClient(ABC):
    """Access to config maps of a cluster.

    ``get_config_map`` and ``update_config_map`` raise ``LookupError`` when the
    config map does not exist.
    """

    @abstractmethod
    def get_config_map(self, namespace: str, name: str) -> dict[str, str]:
        """Return the data of a config map."""

    @abstractmethod
    def create_config_map(self, namespace: str, name: str, data: dict[str, str]) -> None:
        """Create a config map holding ``data``."""

    @abstractmethod
    def update_config_map(self, namespace: str, name: str, data: dict[str, str]) -> None:
        """Replace the data of an existing config map."""

    @abstractmethod
    def delete_config_map(self, namespace: str, name: str) -> None:
        """Delete a config map."""


def config_file_full_path() -> str:
    """Path of the local configuration file."""
    return get_default_path(CONFIG_FILE_NAME + ".json")


def _sprint(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "<nil>"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    return json.dumps(value, separators=(",", ":"))


def _read_config_json_object() -> dict[str, Any]:
    data = json.loads(Path(config_file_full_path()).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object in the config file")
    return data


def get_value_from_config_json(key: str) -> str:
    """Return the value of ``key`` in the local config file as text."""
    data = _read_config_json_object()
    if key not in data:
        raise ValueNotExistError()
    return _sprint(data[key])


def set_key_value_in_config_json(key: str, value: str) -> None:
    """Set ``key`` to ``value`` in the local config file."""
    data = _read_config_json_object()
    data[key] = value
    encoded = json.dumps(data, separators=(",", ":"), sort_keys=True, ensure_ascii=False)
    _write_config_file(encoded.encode("utf-8"))


def _write_config_file(content: bytes) -> None:
    path = config_file_full_path()
    with open(path, "wb") as handle:
        handle.write(content)
    try:
        os.chmod(path, _FILE_MODE)
    except OSError:
        pass


def read_config(data: bytes | str) -> ConfigObj | None:
    """Parse a config document; ``None`` when it is empty."""
    if not data:
        return None
    parsed = json.loads(data)
    if parsed is not None and not isinstance(parsed, dict):
        raise ValueError("expected a JSON object for the configuration")
    return ConfigObj.from_dict(parsed)


def load_config_from_file() -> ConfigObj | None:
    """Read the local config file."""
    return read_config(Path(config_file_full_path()).read_bytes())


def _exists_config_file() -> bool:
    return Path(config_file_full_path()).is_file()


def _load_config_file_quietly() -> ConfigObj | None:
    try:
        return load_config_from_file()
    except (OSError, ValueError):
        return None


def _update_config_file(config_obj: ConfigObj) -> None:
    try:
        _write_config_file(config_obj.config())
    except OSError as exc:
        _log.debug("failed to write config file: %s", exc)


def delete_config_map(k8s: ConfigMapClient, namespace: str) -> None:
    """Delete the configuration config map from ``namespace``."""
    k8s.delete_config_map(namespace, CONFIG_MAP_NAME)


def delete_config_file() -> None:
    """Delete the local config file."""
    os.remove(config_file_full_path())


def adopt_cluster_name(cluster_name: str) -> str:
    """Make a cluster name usable as an identifier by replacing ``/``."""
    return cluster_name.replace("/", "-")


def _get_tenant_config_from_backend(backend_api: Backend, config_obj: ConfigObj) -> None:
    try:
        response = backend_api.get_customer_guid(config_obj.customer_guid)
    except Exception as exc:
        if "already exists" not in str(exc):
            raise
        return
    if response is None:
        return
    if response.admin_mail:
        config_obj.customer_admin_email = response.admin_mail
    else:
        config_obj.token = response.token
        config_obj.customer_guid = response.tenant_id


class LocalConfig:
    """Configuration used when scanning files rather than a cluster."""

    def __init__(self, backend_api: Backend, customer_guid: str = "") -> None:
        self.backend_api = backend_api
        self.config_obj = ConfigObj()
        if _exists_config_file():
            loaded = _load_config_file_quietly()
            if loaded is not None:
                self.config_obj = loaded
        if customer_guid:
            self.config_obj.customer_guid = customer_guid
        if self.config_obj.customer_guid:
            try:
                self.set_tenant()
            except Exception as exc:
                print(exc)

    @property
    def customer_guid(self) -> str:
        return self.config_obj.customer_guid

    @property
    def cluster_name(self) -> str:
        return ""

    def is_config_found(self) -> bool:
        """Return whether a local config file exists."""
        return _exists_config_file()

    def set_tenant(self) -> None:
        """Register or look up the tenant and store the result in the config file."""
        _get_tenant_config_from_backend(self.backend_api, self.config_obj)
        _update_config_file(self.config_obj)


def _exists_config_map(k8s: ConfigMapClient | None, namespace: str) -> bool:
    if k8s is None:
        return False
    try:
        k8s.get_config_map(namespace, CONFIG_MAP_NAME)
    except Exception:
        return False
    return True


class ClusterConfig:
    """Configuration used when scanning a cluster."""

    def __init__(
        self,
        k8s: ConfigMapClient | None,
        backend_api: Backend,
        customer_guid: str = "",
        default_namespace: str = "default",
        cluster_name: str = "",
    ) -> None:
        self.k8s = k8s
        self.backend_api = backend_api
        self.default_namespace = default_namespace
        self.config_obj = ConfigObj()

        loaded: ConfigObj | None = None
        if _exists_config_map(k8s, default_namespace):
            loaded = self._load_from_config_map()
        elif _exists_config_file():
            loaded = _load_config_file_quietly()
        if loaded is not None:
            self.config_obj = loaded
        if customer_guid:
            self.config_obj.customer_guid = customer_guid
        if self.config_obj.customer_guid:
            try:
                self.set_tenant()
            except Exception as exc:
                print(exc)
        if not self.config_obj.cluster_name:
            self.config_obj.cluster_name = adopt_cluster_name(cluster_name)

    @property
    def customer_guid(self) -> str:
        return self.config_obj.customer_guid

    @property
    def cluster_name(self) -> str:
        return self.config_obj.cluster_name

    def _load_from_config_map(self) -> ConfigObj | None:
        try:
            data = self.k8s.get_config_map(self.default_namespace, CONFIG_MAP_NAME)
            return ConfigObj.from_dict(data)
        except Exception:
            return None

    def is_config_found(self) -> bool:
        """Return whether a config file or config map exists."""
        return _exists_config_file() or _exists_config_map(self.k8s, self.default_namespace)

    def set_tenant(self) -> None:
        """Register or look up the tenant and store it in the config map and file."""
        _get_tenant_config_from_backend(self.backend_api, self.config_obj)
        try:
            if _exists_config_map(self.k8s, self.default_namespace):
                self._update_config_map()
            else:
                self._create_config_map()
        except Exception as exc:
            _log.debug("failed to store config map: %s", exc)
        _update_config_file(self.config_obj)

    def to_map(self) -> dict[str, Any]:
        """Return the JSON form of the configuration as a mapping."""
        return json.loads(self.config_obj.to_json())

    def _merge_config_data(self, data: dict[str, str]) -> dict[str, str]:
        merged = dict(data)
        for key, value in self.to_map().items():
            if isinstance(value, str):
                merged[key] = value
        return merged

    def _create_config_map(self) -> None:
        if self.k8s is None:
            return
        self.k8s.create_config_map(self.default_namespace, CONFIG_MAP_NAME, self._merge_config_data({}))

    def _update_config_map(self) -> None:
        if self.k8s is None:
            return
        data = self.k8s.get_config_map(self.default_namespace, CONFIG_MAP_NAME) or {}
        self.k8s.update_config_map(self.default_namespace, CONFIG_MAP_NAME, self._merge_config_data(data))

    def get_value_by_key_from_config_map(self, key: str) -> str:
        """Return the value of ``key`` in the config map."""
        data = self.k8s.get_config_map(self.default_namespace, CONFIG_MAP_NAME) or {}
        if key not in data:
            raise ValueNotExistError()
        return data[key]

    def set_key_value_in_config_map(self, key: str, value: str) -> None:
        """Set ``key`` in the config map, creating the map when missing."""
        try:
            data = dict(self.k8s.get_config_map(self.default_namespace, CONFIG_MAP_NAME) or {})
        except Exception:
            self.k8s.create_config_map(self.default_namespace, CONFIG_MAP_NAME, {key: value})
            return
        data[key] = value
        self.k8s.update_config_map(self.default_namespace, CONFIG_MAP_NAME, data)

    def is_submitted(self) -> bool:
        """Return whether a configuration has been stored before."""
        return _exists_config_map(self.k8s, self.default_namespace) or _exists_config_file()

    def is_registered(self) -> bool:
        """Return whether the tenant already belongs to a user."""
        try:
            response = self.backend_api.get_customer_guid(self.customer_guid)
        except Exception:
            return False
        return response is not None and bool(response.admin_mail)

    def delete_config(self) -> None:
        """Delete the config map and the local config file."""
        delete_config_map(self.k8s, self.default_namespace)
        delete_config_file()