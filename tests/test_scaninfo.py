import pytest

from kscan.armoapi import ArmoAPI, get_armo_api_connector, set_armo_api_connector
from kscan.httputils import get_default_path
from kscan.policies import LoadPolicy
from kscan.scaninfo import (
    OptionalBoolFlag,
    PolicyIdentifier,
    PolicyKind,
    ScanInfo,
    ScanTarget,
)


@pytest.fixture
def connector():
    api = ArmoAPI("er", "api", "fe")
    set_armo_api_connector(api)
    yield api
    set_armo_api_connector(None)


def test_optional_bool_flag_unset_is_empty():
    flag = OptionalBoolFlag()
    assert str(flag) == ""
    assert flag.value is None


@pytest.mark.parametrize("text,expected", [("true", True), ("false", False)])
def test_optional_bool_flag_set(text, expected):
    flag = OptionalBoolFlag()
    flag.set(text)
    assert flag.value is expected
    assert str(flag) == text


def test_optional_bool_flag_ignores_other_text():
    flag = OptionalBoolFlag()
    flag.set("yes")
    assert flag.value is None
    flag.set_bool(True)
    flag.set("maybe")
    assert flag.value is True


def test_scanning_environment():
    info = ScanInfo()
    assert info.scanning_environment() is ScanTarget.CLUSTER
    info.input_patterns = ["*.yaml"]
    assert info.scanning_environment() is ScanTarget.LOCAL_FILES
    assert ScanTarget.LOCAL_FILES.value == "yaml"


def test_set_policy_identifiers_skips_duplicates():
    info = ScanInfo()
    info.set_policy_identifiers(["nsa", "mitre", "nsa"], PolicyKind.FRAMEWORK)
    info.set_policy_identifiers(["mitre", "C-0058"], PolicyKind.CONTROL)
    assert info.policy_identifier == [
        PolicyIdentifier(PolicyKind.FRAMEWORK, "nsa"),
        PolicyIdentifier(PolicyKind.FRAMEWORK, "mitre"),
        PolicyIdentifier(PolicyKind.CONTROL, "C-0058"),
    ]
    assert info.contains("mitre")
    assert not info.contains("armobest")


@pytest.mark.parametrize(
    "fmt,output,expected",
    [
        ("json", "results", "results.json"),
        ("json", "results.json", "results.json"),
        ("junit", "results", "results.xml"),
        ("junit", "results.xml", "results.xml"),
        ("pretty-printer", "results", "results"),
    ],
)
def test_init_output_file_extension(connector, fmt, output, expected):
    info = ScanInfo(format=fmt, output=output)
    info.init()
    assert info.output == expected


def test_init_without_output_keeps_it_empty(connector):
    info = ScanInfo(format="json")
    info.init()
    assert info.output == ""


def test_init_uses_connector_without_files(connector):
    info = ScanInfo()
    info.init()
    assert info.exceptions_getter is get_armo_api_connector()
    assert info.controls_inputs_getter is connector


def test_init_loads_from_files(connector):
    info = ScanInfo(use_exceptions="exc.json", controls_inputs="inputs.json")
    info.init()
    assert isinstance(info.exceptions_getter, LoadPolicy)
    assert info.exceptions_getter.file_paths == ["exc.json"]
    assert info.controls_inputs_getter.file_paths == ["inputs.json"]


def test_init_use_default_adds_cached_paths(connector):
    info = ScanInfo(use_default=True)
    info.set_policy_identifiers(["nsa", "mitre"], PolicyKind.FRAMEWORK)
    info.init()
    assert info.use_from == [get_default_path("nsa.json"), get_default_path("mitre.json")]


def test_init_without_use_default_leaves_use_from(connector):
    info = ScanInfo(use_from=["a.json"])
    info.set_policy_identifiers(["nsa"], PolicyKind.FRAMEWORK)
    info.init()
    assert info.use_from == ["a.json"]