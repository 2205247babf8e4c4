"""Scope stack for template and macro bodies.

Frames are plain dicts, innermost last. Lookup scans the frames from
innermost to outermost and then falls back to the read-only Context.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from quill.values import UNDEFINED

if TYPE_CHECKING:
    from quill.template.core import Template


class ScopeStack:
    """Variable frames for one template or macro body.

    A macro call builds a fresh ScopeStack holding only its parameters, so
    a macro body never sees its caller's variables.

    Example:
        >>> scope = ScopeStack({"user": "ada"})
        >>> with scope.frame({"item": 1}):
        ...     scope.get("item"), scope.get("user")
        (1, 'ada')
    """

    __slots__ = ("_context", "_frames")

    def __init__(self, context: Mapping[str, Any], frame: dict[str, Any] | None = None):
        self._context = context
        self._frames: list[dict[str, Any]] = [frame if frame is not None else {}]

    @property
    def depth(self) -> int:
        return len(self._frames)

    def get(self, name: str, default: Any = UNDEFINED) -> Any:
        for frame in reversed(self._frames):
            if name in frame:
                return frame[name]
        if name in self._context:
            return self._context[name]
        return default

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not UNDEFINED

    def set(self, name: str, value: Any) -> None:
        """Bind in the innermost frame."""
        self._frames[-1][name] = value

    def set_global(self, name: str, value: Any) -> None:
        """Bind in the outermost frame of this stack."""
        self._frames[0][name] = value

    def push(self, frame: dict[str, Any] | None = None) -> dict[str, Any]:
        frame = frame if frame is not None else {}
        self._frames.append(frame)
        return frame

    def pop(self) -> dict[str, Any]:
        if len(self._frames) == 1:
            raise RuntimeError("Cannot pop the outermost scope frame")
        return self._frames.pop()

    @contextmanager
    def frame(self, bindings: dict[str, Any] | None = None) -> Iterator[dict[str, Any]]:
        """Push a frame for the duration of the with block."""
        pushed = self.push(bindings)
        try:
            yield pushed
        finally:
            self.pop()

    def names(self) -> frozenset[str]:
        """Every visible name (for "Did you mean?" suggestions)."""
        visible: set[str] = set(self._context)
        for frame in self._frames:
            visible.update(frame)
        return frozenset(visible)


@dataclass(slots=True)
class Activation:
    """The template whose code is running, and the scope it runs in.

    ``template`` decides what ``self::`` and import aliases refer to and
    whether output is autoescaped.
    """

    template: Template
    scope: ScopeStack
