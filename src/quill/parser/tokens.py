"""Token navigation for the Quill parser."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from quill._types import Token, TokenType
from quill.parser.errors import ParseError, describe_token

if TYPE_CHECKING:
    from quill.environment.exceptions import ErrorCode


class TokenNavigationMixin:
    """Cursor over the token list.

    Required Host Attributes:
        - _tokens: Sequence[Token] (ends with EOF)
        - _pos: int
        - _source: str | None
        - _filename: str | None
    """

    if TYPE_CHECKING:
        _tokens: Sequence[Token]
        _pos: int
        _source: str | None
        _filename: str | None

    @property
    def _current(self) -> Token:
        return self._tokens[self._pos]

    def _peek(self, offset: int = 0) -> Token:
        """Look ahead without consuming; clamps to EOF."""
        index = min(self._pos + offset, len(self._tokens) - 1)
        return self._tokens[index]

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        if token.type is not TokenType.EOF:
            self._pos += 1
        return token

    def _match(self, *types: TokenType) -> bool:
        return self._current.type in types

    def _match_name(self, *values: str) -> bool:
        """True if the current token is a NAME with one of ``values``."""
        token = self._current
        return token.type is TokenType.NAME and token.value in values

    def _expect(self, token_type: TokenType) -> Token:
        if self._current.type is not token_type:
            expected = _DISPLAY.get(token_type, f"'{token_type.value}'")
            raise self._error(
                f"Expected {expected}, found {describe_token(self._current)}",
                expected=expected,
            )
        return self._advance()

    def _expect_name(self, what: str = "name") -> str:
        if self._current.type is not TokenType.NAME:
            raise self._error(
                f"Expected {what}, found {describe_token(self._current)}", expected=what
            )
        return self._advance().value

    def _error(
        self,
        message: str,
        token: Token | None = None,
        suggestion: str | None = None,
        expected: str | None = None,
        code: ErrorCode | None = None,
    ) -> ParseError:
        return ParseError(
            message,
            token or self._current,
            source=self._source,
            filename=self._filename,
            suggestion=suggestion,
            expected=expected,
            code=code,
        )


_DISPLAY = {
    TokenType.BLOCK_END: "'%}'",
    TokenType.VARIABLE_END: "'}}'",
    TokenType.NAME: "a name",
    TokenType.STRING: "a string",
    TokenType.EOF: "end of template",
}
