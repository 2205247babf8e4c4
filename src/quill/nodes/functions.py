"""Macro definition nodes for the Quill AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from quill.nodes.base import Node
from quill.nodes.expressions import Expr


@dataclass(frozen=True, slots=True)
class MacroParam(Node):
    """A single macro parameter, optionally with a default expression."""

    name: str
    default: Expr | None = None

    @property
    def required(self) -> bool:
        return self.default is None


@dataclass(frozen=True, slots=True)
class Macro(Node):
    """Macro definition: {% macro name(params) %}...{% endmacro name %}"""

    name: str
    params: Sequence[MacroParam]
    body: Sequence[Node]

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.params)
