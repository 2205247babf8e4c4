"""Quill lexer — template source to token stream.

Splits source into literal text and tag regions:

    ``{{ expr }}``   expression (VARIABLE_BEGIN ... VARIABLE_END)
    ``{% stmt %}``   statement (BLOCK_BEGIN ... BLOCK_END)
    ``{# note #}``   comment (dropped)

A ``-`` on a delimiter trims whitespace in the neighbouring text:
``{%-`` strips the end of the preceding text, ``-%}`` the start of the
following text. ``{% raw %}...{% endraw %}`` passes its body through as
a single DATA token.

Tokens are produced lazily; ``tokenize()`` collects them into a list.

Example:
    >>> [t.type.name for t in tokenize("Hi {{ name }}")]
    ['DATA', 'VARIABLE_BEGIN', 'NAME', 'VARIABLE_END', 'EOF']

"""

from __future__ import annotations

import re
from bisect import bisect_right
from collections.abc import Generator, Iterator

from quill._types import OPERATORS, Token, TokenType
from quill.environment.exceptions import ErrorCode, TemplateSyntaxError

# Compiled once at import (immutable, shared across threads)
_DELIMITER_RE = re.compile(r"\{([{%#])(-?)")
_RAW_START_RE = re.compile(r"\{%-?\s*raw\s*(-?)%\}")
_RAW_END_RE = re.compile(r"\{%(-?)\s*endraw\s*(-?)%\}")
_WHITESPACE_RE = re.compile(r"\s*")
_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_FLOAT_RE = re.compile(r"\d+\.\d+(?:[eE][+-]?\d+)?")
_INTEGER_RE = re.compile(r"\d+")
_OPERATOR_RE = re.compile("|".join(re.escape(text) for text, _ in OPERATORS))
_OPERATOR_TYPES = dict(OPERATORS)

_STRING_QUOTES = frozenset("\"'`")
_ESCAPES = {
    "\\": "\\",
    '"': '"',
    "'": "'",
    "`": "`",
    "n": "\n",
    "t": "\t",
    "r": "\r",
}


class LexerError(TemplateSyntaxError):
    """Tokenization failure: unterminated delimiter, bad escape, stray character."""


class Lexer:
    """Lazy tokenizer for one template source.

    Iterating a Lexer yields Tokens and finishes with EOF. A Lexer holds no
    state beyond the source and its line index, so iterating it twice
    produces the same stream.
    """

    __slots__ = ("_line_starts", "_name", "_source")

    def __init__(self, source: str, name: str | None = None):
        self._source = source
        self._name = name
        self._line_starts = [0]
        self._line_starts.extend(m.end() for m in re.finditer("\n", source))

    def __iter__(self) -> Iterator[Token]:
        return self.tokenize()

    def _position(self, offset: int) -> tuple[int, int]:
        """Offset → (1-based line, 0-based column)."""
        index = bisect_right(self._line_starts, offset)
        return index, offset - self._line_starts[index - 1]

    def _token(self, token_type: TokenType, value: str, offset: int) -> Token:
        lineno, col = self._position(offset)
        return Token(token_type, value, lineno, col)

    def _error(self, message: str, offset: int, code: ErrorCode) -> LexerError:
        lineno, col = self._position(offset)
        return LexerError(
            message,
            lineno=lineno,
            name=self._name,
            source=self._source,
            col_offset=col,
            code=code,
        )

    def tokenize(self) -> Iterator[Token]:
        source = self._source
        length = len(source)
        pos = 0
        lstrip_next = False

        while pos < length:
            match = _DELIMITER_RE.search(source, pos)
            text_end = match.start() if match else length
            text = source[pos:text_end]
            if lstrip_next:
                text = text.lstrip()
                lstrip_next = False
            if match is not None and match.group(2):
                text = text.rstrip()
            if text:
                yield self._token(TokenType.DATA, text, pos)
            if match is None:
                break

            kind = match.group(1)
            if kind == "#":
                pos, lstrip_next = self._skip_comment(match)
            elif kind == "%" and _RAW_START_RE.match(source, match.start()):
                raw_token, pos, lstrip_next = self._lex_raw(match.start())
                if raw_token is not None:
                    yield raw_token
            else:
                pos, lstrip_next = yield from self._lex_tag(match)

        yield self._token(TokenType.EOF, "", length)

    def _skip_comment(self, match: re.Match[str]) -> tuple[int, bool]:
        end = self._source.find("#}", match.end())
        if end == -1:
            raise self._error("Unclosed comment", match.start(), ErrorCode.UNCLOSED_COMMENT)
        trim = end > match.end() and self._source[end - 1] == "-"
        return end + 2, trim

    def _lex_raw(self, start: int) -> tuple[Token | None, int, bool]:
        source = self._source
        opening = _RAW_START_RE.match(source, start)
        assert opening is not None
        closing = _RAW_END_RE.search(source, opening.end())
        if closing is None:
            raise self._error(
                "Unclosed raw block, expected {% endraw %}", start, ErrorCode.UNCLOSED_RAW
            )

        body = source[opening.end() : closing.start()]
        if opening.group(1):
            body = body.lstrip()
        if closing.group(1):
            body = body.rstrip()
        token = self._token(TokenType.DATA, body, opening.end()) if body else None
        return token, closing.end(), bool(closing.group(2))

    def _lex_tag(self, match: re.Match[str]) -> Generator[Token, None, tuple[int, bool]]:
        """Tokenize one ``{{ }}`` or ``{% %}`` region.

        Generator-returns ``(next_offset, lstrip_next)``.
        """
        source = self._source
        length = len(source)
        if match.group(1) == "{":
            begin_type, end_type, closer = (
                TokenType.VARIABLE_BEGIN,
                TokenType.VARIABLE_END,
                "}}",
            )
            unclosed = ErrorCode.UNCLOSED_VARIABLE
        else:
            begin_type, end_type, closer = TokenType.BLOCK_BEGIN, TokenType.BLOCK_END, "%}"
            unclosed = ErrorCode.UNCLOSED_TAG

        yield self._token(begin_type, match.group(0), match.start())
        pos = match.end()
        brace_depth = 0
        previous: TokenType | None = None

        while True:
            pos = _WHITESPACE_RE.match(source, pos).end()  # type: ignore[union-attr]
            if pos >= length:
                raise self._error(
                    f"Unclosed tag, expected '{closer}'", match.start(), unclosed
                )

            if brace_depth <= 0:
                if source.startswith("-" + closer, pos):
                    yield self._token(end_type, "-" + closer, pos)
                    return pos + 3, True
                if source.startswith(closer, pos):
                    yield self._token(end_type, closer, pos)
                    return pos + 2, False

            char = source[pos]
            if char in _STRING_QUOTES:
                value, end = self._lex_string(pos)
                yield self._token(TokenType.STRING, value, pos)
                previous = TokenType.STRING
                pos = end
                continue

            if "0" <= char <= "9":
                # ``items.0.1`` is two index steps, never the float 0.1
                float_match = None if previous is TokenType.DOT else _FLOAT_RE.match(source, pos)
                if float_match is not None:
                    yield self._token(TokenType.FLOAT, float_match.group(), pos)
                    previous = TokenType.FLOAT
                    pos = float_match.end()
                else:
                    int_match = _INTEGER_RE.match(source, pos)
                    assert int_match is not None
                    yield self._token(TokenType.INTEGER, int_match.group(), pos)
                    previous = TokenType.INTEGER
                    pos = int_match.end()
                continue

            name_match = _NAME_RE.match(source, pos)
            if name_match is not None:
                yield self._token(TokenType.NAME, name_match.group(), pos)
                previous = TokenType.NAME
                pos = name_match.end()
                continue

            op_match = _OPERATOR_RE.match(source, pos)
            if op_match is not None:
                op_type = _OPERATOR_TYPES[op_match.group()]
                if op_type is TokenType.LBRACE:
                    brace_depth += 1
                elif op_type is TokenType.RBRACE:
                    brace_depth -= 1
                yield self._token(op_type, op_match.group(), pos)
                previous = op_type
                pos = op_match.end()
                continue

            raise self._error(
                f"Unexpected character {char!r}", pos, ErrorCode.UNEXPECTED_CHARACTER
            )

    def _lex_string(self, start: int) -> tuple[str, int]:
        """Scan a quoted literal starting at ``start``; return (value, end offset)."""
        source = self._source
        quote = source[start]
        parts: list[str] = []
        chunk_start = pos = start + 1
        length = len(source)

        while pos < length:
            char = source[pos]
            if char == quote:
                parts.append(source[chunk_start:pos])
                return "".join(parts), pos + 1
            if char == "\\":
                parts.append(source[chunk_start:pos])
                escape = source[pos + 1] if pos + 1 < length else ""
                if escape not in _ESCAPES:
                    raise self._error(
                        f"Invalid escape sequence '\\{escape}'", pos, ErrorCode.INVALID_ESCAPE
                    )
                parts.append(_ESCAPES[escape])
                pos += 2
                chunk_start = pos
                continue
            pos += 1

        raise self._error("Unterminated string literal", start, ErrorCode.UNCLOSED_STRING)


def tokenize(source: str, name: str | None = None) -> list[Token]:
    """Tokenize template source into a list ending with EOF."""
    return list(Lexer(source, name))
