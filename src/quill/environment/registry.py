"""Filter, test and global-function registries for the Quill environment.

Provides a dict-like interface over the Environment's callables.
"""

from __future__ import annotations

from collections.abc import Callable, ItemsView, Iterator, KeysView, Mapping, ValuesView
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from quill.environment.core import Environment


class FilterRegistry:
    """Dict-like view of one of the Environment's callable tables.

    Supports:
        - env.filters['name'] = func
        - env.filters.update({'name': func})
        - func = env.filters['name']
        - 'name' in env.filters

    All mutations are copy-on-write under the Environment's lock: the
    table is copied, changed and swapped in, so a render that already
    holds the previous table keeps a consistent view.
    """

    __slots__ = ("_attr", "_env")

    def __init__(self, env: Environment, attr: str):
        self._env = env
        self._attr = attr

    def _get_dict(self) -> dict[str, Callable[..., Any]]:
        return getattr(self._env, self._attr)

    def _set_dict(self, d: dict[str, Callable[..., Any]]) -> None:
        setattr(self._env, self._attr, d)

    def __getitem__(self, name: str) -> Callable[..., Any]:
        return self._get_dict()[name]

    def __setitem__(self, name: str, func: Callable[..., Any]) -> None:
        self.update({name: func})

    def __delitem__(self, name: str) -> None:
        with self._env._lock:
            new = self._get_dict().copy()
            del new[name]
            self._set_dict(new)

    def __contains__(self, name: object) -> bool:
        return name in self._get_dict()

    def __iter__(self) -> Iterator[str]:
        return iter(self._get_dict())

    def __len__(self) -> int:
        return len(self._get_dict())

    def get(
        self, name: str, default: Callable[..., Any] | None = None
    ) -> Callable[..., Any] | None:
        return self._get_dict().get(name, default)

    def update(self, mapping: Mapping[str, Callable[..., Any]]) -> None:
        """Add or replace several callables in one swap."""
        for name, func in mapping.items():
            if not callable(func):
                raise TypeError(f"{name!r} must be callable, got {type(func).__name__}")
        with self._env._lock:
            new = self._get_dict().copy()
            new.update(mapping)
            self._set_dict(new)

    def copy(self) -> dict[str, Callable[..., Any]]:
        """Return a copy of the underlying dict."""
        return self._get_dict().copy()

    def keys(self) -> KeysView[str]:
        return self._get_dict().keys()

    def values(self) -> ValuesView[Callable[..., Any]]:
        return self._get_dict().values()

    def items(self) -> ItemsView[str, Callable[..., Any]]:
        return self._get_dict().items()
