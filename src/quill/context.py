"""Render input data.

A Context maps root names to template values. It is filled by the caller
before rendering and only read while a render runs, so one Context can be
shared by concurrent renders.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from quill.values import to_value


class Context(Mapping[str, Any]):
    """String-keyed map of root names to template values.

    Values are converted with ``to_value`` on insertion.

    Example:
        >>> ctx = Context()
        >>> ctx.insert("objects", [{"field_a": {"i": 0}}])
        >>> ctx["objects"][0]["field_a"]["i"]
        0
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any] | None = None):
        self._data: dict[str, Any] = {}
        if data:
            self.extend(data)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Context:
        return cls(data)

    def insert(self, key: str, value: Any) -> None:
        """Bind ``key`` to the template value of ``value``, replacing any previous binding."""
        if not isinstance(key, str):
            raise TypeError(f"Context keys must be strings, got {type(key).__name__}")
        self._data[key] = to_value(value)

    def extend(self, data: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> None:
        items = data.items() if isinstance(data, Mapping) else data
        for key, value in items:
            self.insert(key, value)

    def to_dict(self) -> dict[str, Any]:
        """Shallow copy of the bindings."""
        return dict(self._data)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Context({self._data!r})"
