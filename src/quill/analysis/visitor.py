"""Shared visitor patterns for Quill AST analysis.

Provides visit_children for generic AST traversal and references_name,
which the parser uses to decide whether a loop body needs ``loop`` bound.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from quill.nodes import For, Include, Name

if TYPE_CHECKING:
    from quill.nodes import Node

# Shared attr lists for generic child traversal
CONTAINER_ATTRS = ("body", "else_", "branches")
EXPR_ATTRS = (
    "expr",
    "value",
    "iter",
    "left",
    "right",
    "operand",
    "obj",
    "key",
    "filter",
    "default",
)
SEQUENCE_ATTRS = ("args", "items", "nodes", "comparators", "values", "keys", "params")


def visit_children(node: Node, visit: Callable[[Node], None]) -> None:
    """Visit all child nodes of a Quill AST node (generic handler).

    Handles container attrs (body, else_, if branches), expression attrs,
    sequence attrs and keyword-argument mappings.
    """
    # Container attributes
    for attr in CONTAINER_ATTRS:
        children = getattr(node, attr, None)
        if children and isinstance(children, (list, tuple)):
            for child in children:
                if hasattr(child, "lineno"):
                    visit(child)
                elif isinstance(child, tuple):
                    test, body = child
                    visit(test)
                    for b in body:
                        visit(b)

    # Expression attributes (string-valued fields like Getattr.attr are skipped)
    for attr in EXPR_ATTRS:
        child = getattr(node, attr, None)
        if child is not None and hasattr(child, "lineno"):
            visit(child)

    # Sequence attributes
    for attr in SEQUENCE_ATTRS:
        children = getattr(node, attr, None)
        if children:
            for child in children:
                if hasattr(child, "lineno"):
                    visit(child)

    # Dict attributes (kwargs)
    mapping = getattr(node, "kwargs", None)
    if mapping:
        for child in mapping.values():
            if hasattr(child, "lineno"):
                visit(child)


def references_name(nodes: Iterable[Node], name: str) -> bool:
    """Return True if ``name`` may be read as a variable within ``nodes``.

    Nested loop bodies are skipped when looking for ``loop``, since they
    bind their own. An include counts as a reference: the included
    template sees the caller's scope.
    """
    found = False

    def visit(node: Node) -> None:
        nonlocal found
        if found:
            return
        if isinstance(node, Name) and node.name == name:
            found = True
        elif isinstance(node, Include):
            found = True
        elif isinstance(node, For) and name == "loop":
            visit(node.iter)
            for child in node.else_:
                visit(child)
        else:
            visit_children(node, visit)

    for node in nodes:
        visit(node)
        if found:
            break
    return found
