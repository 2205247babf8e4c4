"""Template structure nodes for the Quill AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from quill.nodes.base import Node


@dataclass(frozen=True, slots=True)
class Import(Node):
    """Bind macros of another template to an alias: {% import "macros.html" as m %}

    The target is resolved by name at render time, not at parse time.
    """

    template: str
    alias: str


@dataclass(frozen=True, slots=True)
class Include(Node):
    """Render another template in place: {% include "partial.html" [ignore missing] %}"""

    template: str
    ignore_missing: bool = False


@dataclass(frozen=True, slots=True)
class Template(Node):
    """Root node representing a complete template."""

    body: Sequence[Node]
