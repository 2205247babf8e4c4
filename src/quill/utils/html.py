"""HTML escaping and the Markup safe-string type.

Markup marks a string as already escaped: autoescaping passes it through
unchanged. Escaping uses a single ``str.translate`` pass.
"""

from __future__ import annotations

import re
from typing import Any

_TAG_RE = re.compile(r"<!--.*?-->|<[^>]*>", re.DOTALL)
_ESCAPE_TABLE = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#x27;",
        "/": "&#x2F;",
    }
)


class Markup(str):
    """A string that is safe to insert into HTML without escaping.

    Example:
        >>> Markup("<b>bold</b>")
        Markup('<b>bold</b>')
        >>> html_escape(Markup("<b>"))
        '<b>'
    """

    __slots__ = ()

    def __new__(cls, value: Any = "") -> Markup:
        return super().__new__(cls, value)

    def __html__(self) -> Markup:
        return self

    def __add__(self, other: str) -> Markup:
        if isinstance(other, str):
            return Markup(str.__add__(self, html_escape(other)))
        return NotImplemented

    def __radd__(self, other: str) -> Markup:
        if isinstance(other, str):
            return Markup(str.__add__(html_escape(other), self))
        return NotImplemented

    def __repr__(self) -> str:
        return f"Markup({str.__repr__(self)})"


def html_escape(value: str) -> str:
    """Escape ``& < > " ' /`` in a string; Markup is returned unchanged."""
    if isinstance(value, Markup):
        return value
    return value.translate(_ESCAPE_TABLE)


def strip_tags(value: str) -> str:
    """Remove ``<...>`` tags and collapse runs of whitespace."""
    return " ".join(_TAG_RE.sub("", value).split())
