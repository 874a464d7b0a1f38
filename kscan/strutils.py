"""Helpers for label strings of the form ``a=b;c=d``."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

VALUE_NOT_FOUND = -1


def convert_labels_to_string(labels: Mapping[str, str]) -> str:
    """Join a label mapping into ``k=v`` pairs separated by ``;``."""
    return ";".join(f"{key}={value}" for key, value in labels.items())


def convert_string_to_labels(labels_str: str) -> dict[str, str]:
    """Parse ``"a=b;c=d"`` into ``{"a": "b", "c": "d"}``.

    A string that splits into an odd number of ``;`` parts yields an empty
    mapping; parts that are not exactly ``key=value`` are skipped.
    """
    parts = labels_str.split(";")
    if len(parts) % 2 != 0:
        return {}
    labels: dict[str, str] = {}
    for part in parts:
        key_value = part.split("=")
        if len(key_value) != 2:
            continue
        key, value = key_value
        labels[key] = value
    return labels


def string_in_slice(items: Sequence[str], value: str) -> int:
    """Return the index of ``value`` in ``items`` or ``VALUE_NOT_FOUND``."""
    return next(
        (index for index, item in enumerate(items) if item == value),
        VALUE_NOT_FOUND,
    )