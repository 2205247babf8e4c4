"""Quill parser core.

Composes the token navigation, expression, statement and block mixins
into the Parser that turns a token list into a Template node.
"""

from __future__ import annotations

from collections.abc import Iterable

from quill._types import Token, TokenType
from quill.environment.exceptions import ErrorCode
from quill.nodes import Template
from quill.parser.blocks import (
    ControlFlowBlockParsingMixin,
    FunctionBlockParsingMixin,
    SpecialBlockParsingMixin,
    TemplateStructureBlockParsingMixin,
    VariableBlockParsingMixin,
)
from quill.parser.expressions import ExpressionParsingMixin
from quill.parser.statements import StatementParsingMixin
from quill.parser.tokens import TokenNavigationMixin


class Parser(
    TokenNavigationMixin,
    StatementParsingMixin,
    ExpressionParsingMixin,
    ControlFlowBlockParsingMixin,
    VariableBlockParsingMixin,
    FunctionBlockParsingMixin,
    TemplateStructureBlockParsingMixin,
    SpecialBlockParsingMixin,
):
    """Recursive descent parser producing an immutable Template node.

    A Parser is single-use: create one per token stream.

    Example:
        >>> from quill.lexer import tokenize
        >>> Parser(tokenize("Hi {{ name }}")).parse()
        Template(lineno=1, col_offset=0, body=(Data(...), Output(...)))
    """

    __slots__ = (
        "_block_stack",
        "_filename",
        "_import_aliases",
        "_macro_names",
        "_pos",
        "_source",
        "_tokens",
    )

    def __init__(
        self,
        tokens: Iterable[Token],
        name: str | None = None,
        filename: str | None = None,
        source: str | None = None,
    ):
        self._tokens = list(tokens)
        if not self._tokens or self._tokens[-1].type is not TokenType.EOF:
            lineno = self._tokens[-1].lineno if self._tokens else 1
            self._tokens.append(Token(TokenType.EOF, "", lineno, 0))
        self._pos = 0
        self._filename = filename or name
        self._source = source
        self._block_stack: list[tuple[str, int, int]] = []
        self._macro_names: dict[str, int] = {}
        self._import_aliases: dict[str, int] = {}

    def parse(self) -> Template:
        """Parse the whole token stream.

        Raises:
            ParseError: On any grammar violation, unclosed block or stray tag
        """
        body = self._parse_body()

        if self._current.type is not TokenType.EOF:
            # _parse_body only stops early on an end/continuation tag
            keyword = self._peek(1)
            raise self._error(
                f"Unexpected '{{% {keyword.value} %}}' with no open block",
                token=keyword,
                suggestion="Remove the tag or add the block it closes",
                code=ErrorCode.TAG_MISMATCH,
            )

        return Template(lineno=1, col_offset=0, body=tuple(body))
