"""Loop iteration metadata for Quill ``{% for %}`` blocks."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

_FIELDS = ("index", "index0", "first", "last", "length")


class LoopContext(Mapping[str, Any]):
    """Loop iteration metadata accessible as ``loop`` inside ``{% for %}``.

    A read-only Object: ``loop.index`` and ``loop["index"]`` both work. Each
    iteration gets its own instance, so a ``loop`` value kept past its
    iteration still reports that position.

    Properties:
        index: 1-based iteration count (1, 2, 3, ...)
        index0: 0-based iteration count (0, 1, 2, ...)
        first: True on the first iteration
        last: True on the final iteration
        length: Total number of items in the sequence

    Example:
            ```jinja
            {% for item in items %}
                {{ loop.index }}/{{ loop.length }}: {{ item }}
                {% if loop.last %}(last){% endif %}
            {% endfor %}
            ```
    """

    __slots__ = ("_index", "_length")

    def __init__(self, length: int, index: int = 0) -> None:
        self._length = length
        self._index = index

    @property
    def index(self) -> int:
        """1-based iteration count."""
        return self._index + 1

    @property
    def index0(self) -> int:
        """0-based iteration count."""
        return self._index

    @property
    def first(self) -> bool:
        return self._index == 0

    @property
    def last(self) -> bool:
        return self._index == self._length - 1

    @property
    def length(self) -> int:
        """Total number of items in the sequence."""
        return self._length

    def __getitem__(self, key: str) -> Any:
        if key not in _FIELDS:
            raise KeyError(key)
        return getattr(self, key)

    def __iter__(self) -> Iterator[str]:
        return iter(_FIELDS)

    def __len__(self) -> int:
        return len(_FIELDS)

    def __repr__(self) -> str:
        return f"LoopContext({self.index}/{self.length})"
