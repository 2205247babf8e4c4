"""Statement parsing for the Quill parser.

Dispatches template text, ``{{ }}`` output and ``{% %}`` blocks, and
collects bodies up to the next end or continuation tag.
"""

from __future__ import annotations

from difflib import get_close_matches
from typing import TYPE_CHECKING

from quill._types import TokenType
from quill.environment.exceptions import ErrorCode
from quill.nodes import Data, Output
from quill.parser.errors import describe_token

if TYPE_CHECKING:
    from quill.nodes import Expr, Node


class StatementParsingMixin:
    """Mixin for parsing template bodies and dispatching block keywords.

    Required Host Attributes:
        - All from TokenNavigationMixin and BlockStackMixin
        - The per-family block parsing methods named in _BLOCK_PARSERS
    """

    if TYPE_CHECKING:
        _END_KEYWORDS: frozenset[str]
        _CONTINUATION_KEYWORDS: frozenset[str]

        def _parse_expression(self) -> Expr: ...
        def _at_block_keyword(self, *keywords: str) -> bool: ...

    # Block keyword → parsing method
    _BLOCK_PARSERS = {
        "if": "_parse_if",
        "for": "_parse_for",
        "break": "_parse_break",
        "continue": "_parse_continue",
        "set": "_parse_set",
        "set_global": "_parse_set",
        "macro": "_parse_macro",
        "import": "_parse_import",
        "include": "_parse_include",
        "filter": "_parse_filter_block",
    }

    def _parse_body(self) -> list[Node]:
        """Parse nodes until EOF or a tag that ends/continues the open block."""
        nodes: list[Node] = []
        stop_keywords = self._END_KEYWORDS | self._CONTINUATION_KEYWORDS

        while self._current.type is not TokenType.EOF:
            token = self._current
            if token.type is TokenType.DATA:
                nodes.append(self._parse_data())
            elif token.type is TokenType.VARIABLE_BEGIN:
                nodes.append(self._parse_output())
            elif token.type is TokenType.BLOCK_BEGIN:
                if self._at_block_keyword(*stop_keywords):
                    break
                nodes.append(self._parse_block())
            else:
                raise self._error(f"Unexpected {describe_token(token)} in template body")

        return nodes

    def _parse_data(self) -> Data:
        token = self._advance()
        return Data(token.lineno, token.col_offset, value=token.value)

    def _parse_output(self) -> Output:
        """Parse {{ expression }}."""
        start = self._advance()  # consume '{{'
        if self._match(TokenType.VARIABLE_END):
            raise self._error(
                "Empty expression in '{{ }}'",
                expected="expression",
                code=ErrorCode.INVALID_EXPRESSION,
            )
        expr = self._parse_expression()
        self._expect(TokenType.VARIABLE_END)
        return Output(start.lineno, start.col_offset, expr=expr)

    def _parse_block(self) -> Node:
        """Parse one ``{% keyword ... %}`` statement."""
        self._advance()  # consume '{%'
        keyword = self._current
        if keyword.type is not TokenType.NAME:
            raise self._error("Expected a block keyword after '{%'", expected="keyword")

        method_name = self._BLOCK_PARSERS.get(keyword.value)
        if method_name is None:
            close = get_close_matches(keyword.value, self._BLOCK_PARSERS, n=1, cutoff=0.6)
            raise self._error(
                f"Unknown tag '{keyword.value}'",
                token=keyword,
                suggestion=f"Did you mean '{close[0]}'?" if close else None,
                code=ErrorCode.UNKNOWN_TAG,
            )
        return getattr(self, method_name)()
