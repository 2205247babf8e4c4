"""Base node class for the Quill AST."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all AST nodes.

    Nodes carry their source position for error reporting and are frozen,
    so one compiled tree can be shared by any number of concurrent renders.
    """

    lineno: int
    col_offset: int
