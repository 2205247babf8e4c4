"""Variable binding nodes for the Quill AST."""

from __future__ import annotations

from dataclasses import dataclass

from quill.nodes.base import Node
from quill.nodes.expressions import Expr


@dataclass(frozen=True, slots=True)
class Set(Node):
    """Binding: {% set x = expr %} or {% set_global x = expr %}

    ``set`` binds in the innermost scope frame; ``set_global`` binds in the
    outermost frame of the current template or macro body.
    """

    name: str
    value: Expr
    is_global: bool = False
