"""Control flow nodes for the Quill AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from quill.nodes.base import Node
from quill.nodes.expressions import Expr


@dataclass(frozen=True, slots=True)
class If(Node):
    """Conditional: {% if a %}...{% elif b %}...{% else %}...{% endif %}

    ``branches`` holds (test, body) pairs in declaration order.
    """

    branches: Sequence[tuple[Expr, Sequence[Node]]]
    else_: Sequence[Node] = ()


@dataclass(frozen=True, slots=True)
class For(Node):
    """For loop: {% for x in items %}...{% else %}...{% endfor %}

    ``key`` is set for the two-target form {% for k, v in obj %}.
    ``uses_loop`` records whether the body reads the ``loop`` variable.
    """

    target: str
    iter: Expr
    body: Sequence[Node]
    key: str | None = None
    else_: Sequence[Node] = ()
    uses_loop: bool = False


@dataclass(frozen=True, slots=True)
class Break(Node):
    """Leave the enclosing loop: {% break %}"""


@dataclass(frozen=True, slots=True)
class Continue(Node):
    """Skip to the next iteration: {% continue %}"""
