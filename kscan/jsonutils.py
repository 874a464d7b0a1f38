"""Indented JSON encoding."""

from __future__ import annotations

import json
from typing import Any

_INDENT = 2
_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def pretty_json(data: Any) -> bytes:
    """Encode ``data`` as two-space indented JSON followed by a newline.

    HTML-sensitive characters are escaped. Raises ``TypeError`` for values
    that cannot be encoded and ``ValueError`` for NaN or infinities.
    """
    text = json.dumps(data, indent=_INDENT, ensure_ascii=False, allow_nan=False)
    # These characters can only occur inside string literals, so a plain
    # replacement over the whole document is safe.
    for char, escaped in _ESCAPES.items():
        text = text.replace(char, escaped)
    return (text + "\n").encode("utf-8")