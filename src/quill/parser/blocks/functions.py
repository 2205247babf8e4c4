"""Macro block parsing for the Quill parser.

Provides a mixin for {% macro name(params) %}...{% endmacro name %}.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from quill._types import Token, TokenType
from quill.environment.exceptions import ErrorCode
from quill.nodes import Macro, MacroParam
from quill.parser.blocks.core import BlockStackMixin

if TYPE_CHECKING:
    from quill.nodes import Expr, Node


class FunctionBlockParsingMixin(BlockStackMixin):
    """Mixin for parsing macro definitions.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks. Inherits block stack management from BlockStackMixin.
    """

    if TYPE_CHECKING:
        # Host attributes (from Parser.__init__)
        _tokens: Sequence[Token]
        _pos: int
        _macro_names: dict[str, int]

        # From TokenNavigationMixin
        def _match(self, *types: TokenType) -> bool: ...
        def _expect_name(self, what: str = "name") -> str: ...

        # From StatementParsingMixin
        def _parse_body(self) -> list[Node]: ...

        # From ExpressionParsingMixin
        def _parse_expression(self) -> Expr: ...

    def _parse_macro(self) -> Macro:
        """Parse {% macro name(params) %}...{% endmacro name %}.

        Macros may only be defined at the top level of a template, and the
        end tag must repeat the macro's name.

        Example:
            {% macro card(title, footer="") %}
                <div>{{ title }}</div>{{ footer }}
            {% endmacro card %}

            {{ self::card(title=page.title) }}
        """
        start = self._advance()  # consume 'macro'
        if self._block_stack:
            kind = self._block_stack[-1][0]
            raise self._error(
                f"Macros must be defined at the top level, not inside '{kind}'",
                token=start,
                code=ErrorCode.INVALID_MACRO,
            )
        self._push_block("macro", start)

        name_token = self._current
        if name_token.type is not TokenType.NAME:
            raise self._error(
                "Expected macro name",
                suggestion="Macro syntax: {% macro name(args) %}...{% endmacro name %}",
                code=ErrorCode.INVALID_MACRO,
            )
        name = self._advance().value
        if name in self._macro_names:
            raise self._error(
                f"Macro '{name}' is already defined on line {self._macro_names[name]}",
                token=name_token,
                code=ErrorCode.INVALID_MACRO,
            )
        self._macro_names[name] = name_token.lineno

        params = self._parse_macro_params()
        self._expect(TokenType.BLOCK_END)

        body = self._parse_body()
        self._consume_end_tag("macro", trailing_name=name)

        return Macro(
            lineno=start.lineno,
            col_offset=start.col_offset,
            name=name,
            params=tuple(params),
            body=tuple(body),
        )

    def _parse_macro_params(self) -> list[MacroParam]:
        """Parse ``(a, b=default, ...)``; parameter names must be unique."""
        params: list[MacroParam] = []
        seen: set[str] = set()

        self._expect(TokenType.LPAREN)
        while not self._match(TokenType.RPAREN):
            if params:
                self._expect(TokenType.COMMA)
                # Trailing comma
                if self._match(TokenType.RPAREN):
                    break

            param_token = self._current
            param_name = self._expect_name("parameter name")
            if param_name in seen:
                raise self._error(
                    f"Duplicate parameter '{param_name}'",
                    token=param_token,
                    code=ErrorCode.INVALID_MACRO,
                )
            seen.add(param_name)

            default: Expr | None = None
            if self._match(TokenType.ASSIGN):
                self._advance()
                default = self._parse_expression()

            params.append(
                MacroParam(
                    lineno=param_token.lineno,
                    col_offset=param_token.col_offset,
                    name=param_name,
                    default=default,
                )
            )
        self._expect(TokenType.RPAREN)
        return params
