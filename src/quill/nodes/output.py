"""Output nodes for the Quill AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from quill.nodes.base import Node
from quill.nodes.expressions import Expr, Filter


@dataclass(frozen=True, slots=True)
class Output(Node):
    """Interpolation: {{ expr }}"""

    expr: Expr


@dataclass(frozen=True, slots=True)
class Data(Node):
    """Literal text between template constructs."""

    value: str


@dataclass(frozen=True, slots=True)
class FilterBlock(Node):
    """Apply a filter to rendered content: {% filter upper %}...{% endfilter %}

    ``filter.value`` is a placeholder; the block's output is filtered instead.
    """

    filter: Filter
    body: Sequence[Node]
