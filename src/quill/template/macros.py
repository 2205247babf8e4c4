"""Per-template macro registry."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from quill.nodes import Import, Macro

if TYPE_CHECKING:
    from quill.nodes import Template as TemplateNode


@dataclass(frozen=True, slots=True)
class MacroTable:
    """Macros defined by one template and the aliases it imports.

    Attributes:
        macros: Macro name → definition
        imports: Alias → imported template name (resolved when rendering)
    """

    macros: Mapping[str, Macro]
    imports: Mapping[str, str]

    @classmethod
    def from_ast(cls, ast: TemplateNode) -> MacroTable:
        """Collect the top-level macro definitions and imports of a template.

        The parser guarantees names and aliases are unique and that both
        only appear at the top level.
        """
        macros: dict[str, Macro] = {}
        imports: dict[str, str] = {}
        for node in ast.body:
            if isinstance(node, Macro):
                macros[node.name] = node
            elif isinstance(node, Import):
                imports[node.alias] = node.template
        return cls(MappingProxyType(macros), MappingProxyType(imports))
