"""Parser error handling for Quill.

Provides ParseError with source context, expected/found details and
suggestions.
"""

from __future__ import annotations

from quill._types import Token, TokenType
from quill.environment.exceptions import ErrorCode, TemplateSyntaxError


class ParseError(TemplateSyntaxError):
    """Grammar error at a specific token.

    Attributes:
        token: The offending token (position source)
        expected: What the parser was looking for, when known
        found: Display form of the offending token
        suggestion: Optional hint shown under the snippet
    """

    code: ErrorCode | None = ErrorCode.UNEXPECTED_TOKEN

    def __init__(
        self,
        message: str,
        token: Token,
        source: str | None = None,
        filename: str | None = None,
        suggestion: str | None = None,
        expected: str | None = None,
        code: ErrorCode | None = None,
    ):
        self.token = token
        self.expected = expected
        self.found = describe_token(token)
        self.suggestion = suggestion
        super().__init__(
            message,
            lineno=token.lineno,
            name=filename,
            source=source,
            col_offset=token.col_offset,
            code=code,
        )

    def _format_message(self) -> str:
        msg = super()._format_message()
        if self.suggestion:
            msg += f"\n\nSuggestion: {self.suggestion}"
        return msg


def describe_token(token: Token) -> str:
    """Human-readable token description for error messages."""
    if token.type is TokenType.EOF:
        return "end of template"
    if token.type is TokenType.DATA:
        return "template text"
    if token.type is TokenType.STRING:
        return f"string {token.value!r}"
    return f"'{token.value}'"
