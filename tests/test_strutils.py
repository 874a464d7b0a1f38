from kscan.strutils import (
    VALUE_NOT_FOUND,
    convert_labels_to_string,
    convert_string_to_labels,
    string_in_slice,
)


def test_convert_labels_to_string():
    expected = "a=b;c=d".split(";")
    result = convert_labels_to_string({"a": "b", "c": "d"})
    parts = result.split(";")
    assert sorted(parts) == sorted(expected)


def test_convert_string_to_labels():
    assert convert_string_to_labels("a=b;c=d") == {"a": "b", "c": "d"}


def test_convert_string_to_labels_odd_count_is_empty():
    assert convert_string_to_labels("a=b") == {}


def test_convert_string_to_labels_skips_malformed_pairs():
    assert convert_string_to_labels("a=b;cd") == {"a": "b"}


def test_labels_round_trip():
    labels = {"app": "web", "tier": "front"}
    assert convert_string_to_labels(convert_labels_to_string(labels)) == labels


def test_string_in_slice_found():
    assert string_in_slice(["x", "y", "z"], "y") == 1


def test_string_in_slice_missing():
    assert string_in_slice(["x", "y"], "q") == VALUE_NOT_FOUND
    assert VALUE_NOT_FOUND == -1