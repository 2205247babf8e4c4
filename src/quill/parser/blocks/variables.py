"""Variable block parsing for the Quill parser.

Provides a mixin for {% set %} and {% set_global %}.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from quill._types import TokenType
from quill.nodes import Set
from quill.parser.blocks.core import BlockStackMixin

if TYPE_CHECKING:
    from quill.nodes import Expr


class VariableBlockParsingMixin(BlockStackMixin):
    """Mixin for parsing variable assignments.

    Required Host Attributes:
        - All from BlockStackMixin
        - _parse_expression, _expect_name
    """

    if TYPE_CHECKING:
        def _parse_expression(self) -> Expr: ...
        def _expect_name(self, what: str = "name") -> str: ...

    def _parse_set(self) -> Set:
        """Parse {% set name = expr %} or {% set_global name = expr %}."""
        start = self._advance()  # consume 'set' / 'set_global'
        name = self._expect_name("variable name")
        if name in ("loop", "self"):
            raise self._error(f"Cannot assign to reserved name '{name}'")

        if self._current.type is not TokenType.ASSIGN:
            raise self._error(
                f"Expected '=' after '{name}'",
                suggestion=f"Assignment syntax: {{% {start.value} {name} = value %}}",
                expected="=",
            )
        self._advance()
        value = self._parse_expression()
        self._expect(TokenType.BLOCK_END)

        return Set(
            lineno=start.lineno,
            col_offset=start.col_offset,
            name=name,
            value=value,
            is_global=start.value == "set_global",
        )
