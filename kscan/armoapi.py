"""Client for the ARMO backend that serves frameworks, exceptions and tenants."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

import requests

from kscan.httputils import get_default_path, http_get, save_framework_in_file
from kscan.policies import (
    Backend,
    ControlsInputsGetter,
    ExceptionsGetter,
    PolicyGetter,
    PolicyNotFoundError,
)

_log = logging.getLogger(__name__)

ARMO_ER_URL = "report.armo.cloud"
ARMO_BE_URL = "api.armo.cloud"
ARMO_FE_URL = "portal.armo.cloud"

ARMO_DEV_ER_URL = "report.eudev3.cyberarmorsoft.com"
ARMO_DEV_BE_URL = "eggdashbe.eudev3.cyberarmorsoft.com"
ARMO_DEV_FE_URL = "armoui-dev.eudev3.cyberarmorsoft.com"

NATIVE_FRAMEWORKS = ("nsa", "mitre", "armobest")

_REQUEST_TIMEOUT = 61.0


def is_native_framework(name: str) -> bool:
    """Return whether ``name`` is one of the built-in frameworks, ignoring case."""
    folded = name.casefold()
    return any(native.casefold() == folded for native in NATIVE_FRAMEWORKS)


class _TimeoutSession(requests.Session):
    """Session that applies a default timeout to every request."""

    def __init__(self, timeout: float) -> None:
        super().__init__()
        self._timeout = timeout

    def request(self, method, url, **kwargs):  # type: ignore[override]
        kwargs.setdefault("timeout", self._timeout)
        return super().request(method, url, **kwargs)


def _build_url(host: str, path: str, query: dict[str, str] | None = None) -> str:
    url = f"https://{host}{'/' if host and not path.startswith('/') else ''}{path}"
    if query:
        url += "?" + urlencode(sorted(query.items()))
    return url


def _decode(text: str) -> Any:
    return json.loads(text)


@dataclass
class TenantResponse:
    """Tenant details returned by the backend."""

    tenant_id: str = ""
    token: str = ""
    expires: str = ""
    admin_mail: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TenantResponse":
        """Build a response from its JSON form."""
        return cls(
            tenant_id=str(data.get("tenantId") or ""),
            token=str(data.get("token") or ""),
            expires=str(data.get("expires") or ""),
            admin_mail=str(data.get("adminMail") or ""),
        )


class ArmoAPI(PolicyGetter, ExceptionsGetter, ControlsInputsGetter, Backend):
    """Downloads policies and tenant information from the ARMO backend."""

    def __init__(
        self,
        er_url: str = "",
        api_url: str = "",
        fe_url: str = "",
        session: requests.Session | None = None,
    ) -> None:
        self.er_url = er_url
        self.api_url = api_url
        self.fe_url = fe_url
        self.customer_guid = ""
        self.session = session if session is not None else _TimeoutSession(_REQUEST_TIMEOUT)

    def set_customer_guid(self, customer_guid: str) -> None:
        """Set the customer used when fetching frameworks."""
        self.customer_guid = customer_guid

    # URLs

    def framework_url(self, framework_name: str) -> str:
        """URL of a framework; native names are sent upper case."""
        name = framework_name.upper() if is_native_framework(framework_name) else framework_name
        return _build_url(
            self.api_url,
            "api/v1/armoFrameworks",
            {"customerGUID": self.customer_guid, "frameworkName": name},
        )

    def list_framework_url(self) -> str:
        """URL listing all frameworks of the customer."""
        return _build_url(self.api_url, "api/v1/armoFrameworks", {"customerGUID": self.customer_guid})

    def exceptions_url(self, customer_guid: str, cluster_name: str) -> str:
        """URL of the posture exceptions; the cluster name is not sent."""
        return _build_url(self.api_url, "api/v1/armoPostureExceptions", {"customerGUID": customer_guid})

    def account_config_url(self, customer_guid: str, cluster_name: str) -> str:
        """URL of the customer configuration."""
        query = {"customerGUID": customer_guid}
        if cluster_name:
            query["clusterName"] = cluster_name
        return _build_url(self.api_url, "api/v1/armoCustomerConfiguration", query)

    def customer_url(self) -> str:
        """URL that creates or looks up a tenant."""
        return _build_url(self.api_url, "api/v1/createTenant")

    # Requests

    def _get(self, url: str) -> Any:
        return _decode(http_get(self.session, url, None))

    def get_framework(self, name: str) -> dict[str, Any]:
        """Download a framework and cache it in the local store."""
        framework = self._get(self.framework_url(name))
        if not isinstance(framework, dict):
            raise ValueError("expected a JSON object for the framework")
        try:
            save_framework_in_file(framework, get_default_path(name + ".json"))
        except OSError as exc:
            _log.debug("failed to cache framework '%s': %s", name, exc)
        return framework

    def get_control(self, name: str) -> dict[str, Any]:
        """Controls cannot be fetched from this backend."""
        raise PolicyNotFoundError("control api is not public")

    def get_exceptions(self, customer_guid: str, cluster_name: str) -> list[Any]:
        """Return the exception policies of the customer; none without a customer."""
        if not customer_guid:
            return []
        exceptions = self._get(self.exceptions_url(customer_guid, cluster_name))
        if exceptions is None:
            return []
        if not isinstance(exceptions, list):
            raise ValueError("expected a JSON array of exceptions")
        return exceptions

    def get_customer_guid(self, customer_guid: str) -> TenantResponse:
        """Look up, or create when ``customer_guid`` is empty, a tenant."""
        url = self.customer_url()
        if customer_guid:
            url = f"{url}?customerGUID={customer_guid}"
        data = self._get(url)
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object for the tenant")
        return TenantResponse.from_dict(data)

    def get_account_config(self, customer_guid: str, cluster_name: str) -> dict[str, Any]:
        """Return the customer configuration; empty without a customer."""
        if not customer_guid:
            return {}
        config = self._get(self.account_config_url(customer_guid, cluster_name))
        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ValueError("expected a JSON object for the account configuration")
        return config

    def get_controls_inputs(self, customer_guid: str, cluster_name: str) -> dict[str, list[str]]:
        """Return a mapping of control name to input arguments."""
        config = self.get_account_config(customer_guid, cluster_name)
        settings = config.get("settings") or {}
        return dict(settings.get("postureControlInputs") or {})

    def _framework_names(self) -> list[str]:
        frameworks = self._get(self.list_framework_url()) or []
        if not isinstance(frameworks, list):
            raise ValueError("expected a JSON array of frameworks")
        return [str(framework.get("name", "")) for framework in frameworks]

    def list_custom_frameworks(self, customer_guid: str) -> list[str]:
        """Return the names of the frameworks that are not built in."""
        return [name for name in self._framework_names() if not is_native_framework(name)]

    def list_frameworks(self, customer_guid: str) -> list[str]:
        """Return all framework names, built-in ones in lower case."""
        return [name.lower() if is_native_framework(name) else name for name in self._framework_names()]


def new_armo_api_dev() -> ArmoAPI:
    """Connector for the development environment."""
    return ArmoAPI(ARMO_DEV_ER_URL, ARMO_DEV_BE_URL, ARMO_DEV_FE_URL)


def new_armo_api_prod() -> ArmoAPI:
    """Connector for the production environment."""
    return ArmoAPI(ARMO_ER_URL, ARMO_BE_URL, ARMO_FE_URL)


def new_armo_api_customized(er_url: str, api_url: str, fe_url: str) -> ArmoAPI:
    """Connector for custom report receiver, backend and frontend hosts."""
    return ArmoAPI(er_url, api_url, fe_url)


_connector: ArmoAPI | None = None


def set_armo_api_connector(api: ArmoAPI | None) -> None:
    """Set the process-wide connector."""
    global _connector
    _connector = api


def get_armo_api_connector() -> ArmoAPI | None:
    """Return the process-wide connector, logging when none is set."""
    if _connector is None:
        _log.error("returning nil API connector")
    return _connector