import json

import pytest

from kscan.armoapi import TenantResponse
from kscan.policies import Backend
from kscan.tenantconfig import (
    CONFIG_MAP_NAME,
    ClusterConfig,
    ConfigMapClient,
    ConfigObj,
    LocalConfig,
    ValueNotExistError,
    adopt_cluster_name,
    config_file_full_path,
    delete_config_file,
    delete_config_map,
    get_value_from_config_json,
    load_config_from_file,
    read_config,
    set_key_value_in_config_json,
)


class FakeBackend(Backend):
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get_customer_guid(self, customer_guid):
        self.calls.append(customer_guid)
        if self.error is not None:
            raise self.error
        return self.response


class FakeConfigMaps(ConfigMapClient):
    def __init__(self):
        self.maps = {}

    def get_config_map(self, namespace, name):
        return dict(self.maps[(namespace, name)])

    def create_config_map(self, namespace, name, data):
        self.maps[(namespace, name)] = dict(data)

    def update_config_map(self, namespace, name, data):
        if (namespace, name) not in self.maps:
            raise KeyError(name)
        self.maps[(namespace, name)] = dict(data)

    def delete_config_map(self, namespace, name):
        del self.maps[(namespace, name)]


@pytest.fixture
def store(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    directory = tmp_path / ".kubescape"
    directory.mkdir()
    return directory


def write_config(store, data):
    (store / "config.json").write_text(json.dumps(data), encoding="utf-8")


def test_config_obj_json_keys():
    obj = ConfigObj(customer_guid="guid-1", token="token", customer_admin_email="admin@example.com", cluster_name="c1")
    assert json.loads(obj.to_json()) == {
        "customerGUID": "guid-1",
        "invitationParam": "token",
        "adminMail": "admin@example.com",
        "clusterName": "c1",
    }


def test_config_drops_cluster_name_without_changing_object():
    obj = ConfigObj(customer_guid="guid-1", cluster_name="c1")
    saved = json.loads(obj.config())
    assert saved["clusterName"] == ""
    assert saved["customerGUID"] == "guid-1"
    assert obj.cluster_name == "c1"


def test_read_config_round_trip_and_empty():
    obj = ConfigObj(customer_guid="guid-1", token="token")
    assert read_config(obj.to_json()) == obj
    assert read_config(b"") is None


def test_read_config_rejects_invalid():
    with pytest.raises(ValueError):
        read_config(b"not json")
    with pytest.raises(ValueError):
        read_config(b"[1, 2]")


def test_adopt_cluster_name():
    assert adopt_cluster_name("a/b/c") == "a-b-c"
    assert adopt_cluster_name("plain") == "plain"


def test_config_file_full_path(store):
    assert config_file_full_path() == str(store / "config.json")


def test_get_value_from_config_json(store):
    write_config(store, {"customerGUID": "guid-1", "count": 3, "flag": True})
    assert get_value_from_config_json("customerGUID") == "guid-1"
    assert get_value_from_config_json("count") == "3"
    assert get_value_from_config_json("flag") == "true"
    with pytest.raises(ValueNotExistError):
        get_value_from_config_json("missing")


def test_get_value_without_file(store):
    with pytest.raises(FileNotFoundError):
        get_value_from_config_json("customerGUID")


def test_set_key_value_in_config_json(store):
    write_config(store, {"customerGUID": "guid-1"})
    set_key_value_in_config_json("clusterName", "c1")
    assert get_value_from_config_json("clusterName") == "c1"
    assert get_value_from_config_json("customerGUID") == "guid-1"


def test_load_config_from_file(store):
    write_config(store, {"customerGUID": "guid-1", "adminMail": "admin@example.com"})
    obj = load_config_from_file()
    assert obj.customer_guid == "guid-1"
    assert obj.customer_admin_email == "admin@example.com"


def test_local_config_without_guid_does_not_call_backend(store):
    backend = FakeBackend()
    config = LocalConfig(backend, "")
    assert backend.calls == []
    assert config.customer_guid == ""
    assert config.cluster_name == ""
    assert config.is_config_found() is False


def test_local_config_new_tenant(store):
    backend = FakeBackend(TenantResponse(tenant_id="guid-2", token="token"))
    config = LocalConfig(backend, "guid-1")
    assert backend.calls == ["guid-1"]
    assert config.customer_guid == "guid-2"
    assert config.config_obj.token == "token"
    assert load_config_from_file().customer_guid == "guid-2"
    assert config.is_config_found() is True


def test_local_config_registered_tenant(store):
    write_config(store, {"customerGUID": "guid-1"})
    backend = FakeBackend(TenantResponse(tenant_id="other", admin_mail="admin@example.com"))
    config = LocalConfig(backend, "")
    assert config.customer_guid == "guid-1"
    assert config.config_obj.customer_admin_email == "admin@example.com"


def test_local_config_already_exists_error_is_ignored(store):
    backend = FakeBackend(error=RuntimeError("tenant already exists"))
    config = LocalConfig(backend, "guid-1")
    config.set_tenant()
    assert load_config_from_file().customer_guid == "guid-1"


def test_local_config_other_error_is_printed(store, capsys):
    backend = FakeBackend(error=RuntimeError("boom"))
    config = LocalConfig(backend, "guid-1")
    assert "boom" in capsys.readouterr().out
    with pytest.raises(RuntimeError, match="boom"):
        config.set_tenant()


def test_cluster_config_loads_from_config_map(store):
    maps = FakeConfigMaps()
    maps.maps[("default", CONFIG_MAP_NAME)] = {"customerGUID": "guid-1", "clusterName": "prod"}
    backend = FakeBackend(TenantResponse(admin_mail="admin@example.com"))
    config = ClusterConfig(maps, backend, "", "default", "ignored")
    assert config.customer_guid == "guid-1"
    assert config.cluster_name == "prod"
    stored = maps.maps[("default", CONFIG_MAP_NAME)]
    assert stored["adminMail"] == "admin@example.com"
    assert stored["clusterName"] == "prod"


def test_cluster_config_adopts_cluster_name(store):
    maps = FakeConfigMaps()
    config = ClusterConfig(maps, FakeBackend(), "", "default", "ctx/cluster")
    assert config.cluster_name == adopt_cluster_name("ctx/cluster")
    assert maps.maps == {}


def test_cluster_config_set_tenant_creates_config_map(store):
    maps = FakeConfigMaps()
    backend = FakeBackend(TenantResponse(tenant_id="guid-2", token="token"))
    config = ClusterConfig(maps, backend, "guid-1", "ns1", "c1")
    assert config.customer_guid == "guid-2"
    assert config.cluster_name == "c1"
    stored = maps.maps[("ns1", CONFIG_MAP_NAME)]
    assert stored["customerGUID"] == "guid-2"
    assert stored["invitationParam"] == "token"
    assert load_config_from_file().customer_guid == "guid-2"


def test_to_map_matches_config_obj(store):
    config = ClusterConfig(FakeConfigMaps(), FakeBackend(), "", "default", "c1")
    assert ConfigObj.from_dict(config.to_map()) == config.config_obj


def test_set_and_get_value_in_config_map(store):
    maps = FakeConfigMaps()
    config = ClusterConfig(maps, FakeBackend(), "", "default", "c1")
    config.set_key_value_in_config_map("key", "value")
    assert config.get_value_by_key_from_config_map("key") == "value"
    config.set_key_value_in_config_map("other", "second")
    assert maps.maps[("default", CONFIG_MAP_NAME)] == {"key": "value", "other": "second"}
    with pytest.raises(ValueNotExistError):
        config.get_value_by_key_from_config_map("missing")


def test_get_value_without_config_map(store):
    config = ClusterConfig(FakeConfigMaps(), FakeBackend(), "", "default", "c1")
    with pytest.raises(LookupError):
        config.get_value_by_key_from_config_map("key")


def test_is_registered(store):
    config = ClusterConfig(FakeConfigMaps(), FakeBackend(), "", "default", "c1")
    config.backend_api = FakeBackend(TenantResponse(admin_mail="admin@example.com"))
    assert config.is_registered() is True
    config.backend_api = FakeBackend(TenantResponse(tenant_id="guid-2"))
    assert config.is_registered() is False
    config.backend_api = FakeBackend(error=RuntimeError("boom"))
    assert config.is_registered() is False


def test_delete_config(store):
    maps = FakeConfigMaps()
    backend = FakeBackend(TenantResponse(tenant_id="guid-2", token="token"))
    config = ClusterConfig(maps, backend, "guid-1", "default", "c1")
    assert config.is_submitted() is True
    config.delete_config()
    assert maps.maps == {}
    assert not (store / "config.json").exists()
    assert config.is_submitted() is False


def test_delete_helpers_raise_when_missing(store):
    with pytest.raises(FileNotFoundError):
        delete_config_file()
    with pytest.raises(KeyError):
        delete_config_map(FakeConfigMaps(), "default")