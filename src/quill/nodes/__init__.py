"""Quill AST node definitions.

All nodes are frozen, slotted dataclasses. A compiled tree never changes
after the parser returns it.
"""

from quill.nodes.base import Node
from quill.nodes.control_flow import Break, Continue, For, If
from quill.nodes.expressions import (
    BinOp,
    BoolOp,
    Compare,
    Concat,
    Const,
    Dict,
    Expr,
    Filter,
    FuncCall,
    Getattr,
    Getitem,
    List,
    MacroCall,
    Name,
    Test,
    UnaryOp,
)
from quill.nodes.functions import Macro, MacroParam
from quill.nodes.output import Data, FilterBlock, Output
from quill.nodes.structure import Import, Include, Template
from quill.nodes.variables import Set

__all__ = [
    "BinOp",
    "BoolOp",
    "Break",
    "Compare",
    "Concat",
    "Const",
    "Continue",
    "Data",
    "Dict",
    "Expr",
    "Filter",
    "FilterBlock",
    "For",
    "FuncCall",
    "Getattr",
    "Getitem",
    "If",
    "Import",
    "Include",
    "List",
    "Macro",
    "MacroCall",
    "MacroParam",
    "Name",
    "Node",
    "Output",
    "Set",
    "Template",
    "Test",
    "UnaryOp",
]
