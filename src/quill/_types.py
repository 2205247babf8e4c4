"""Token types shared by the lexer and parser."""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple


class TokenType(Enum):
    """Lexical token kinds.

    Keywords (``for``, ``in``, ``and``, ``true`` ...) are emitted as NAME
    tokens and recognized by the parser.
    """

    # Template structure
    DATA = "data"
    VARIABLE_BEGIN = "variable_begin"
    VARIABLE_END = "variable_end"
    BLOCK_BEGIN = "block_begin"
    BLOCK_END = "block_end"

    # Literals and identifiers
    NAME = "name"
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"

    # Punctuation
    DOT = "."
    COMMA = ","
    COLON = ":"
    NAMESPACE = "::"
    LPAREN = "("
    RPAREN = ")"
    LBRACKET = "["
    RBRACKET = "]"
    LBRACE = "{"
    RBRACE = "}"
    PIPE = "|"
    ASSIGN = "="

    # Arithmetic
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    FLOORDIV = "//"
    MOD = "%"
    TILDE = "~"

    # Comparison
    EQ = "=="
    NE = "!="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="

    EOF = "eof"


class Token(NamedTuple):
    """A lexical unit with its source position (1-based line, 0-based column)."""

    type: TokenType
    value: str
    lineno: int
    col_offset: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.lineno}:{self.col_offset})"


# Operator text → token type, longest first so "//" wins over "/".
OPERATORS: tuple[tuple[str, TokenType], ...] = (
    ("::", TokenType.NAMESPACE),
    ("==", TokenType.EQ),
    ("!=", TokenType.NE),
    ("<=", TokenType.LE),
    (">=", TokenType.GE),
    ("//", TokenType.FLOORDIV),
    (".", TokenType.DOT),
    (",", TokenType.COMMA),
    (":", TokenType.COLON),
    ("(", TokenType.LPAREN),
    (")", TokenType.RPAREN),
    ("[", TokenType.LBRACKET),
    ("]", TokenType.RBRACKET),
    ("{", TokenType.LBRACE),
    ("}", TokenType.RBRACE),
    ("|", TokenType.PIPE),
    ("=", TokenType.ASSIGN),
    ("+", TokenType.ADD),
    ("-", TokenType.SUB),
    ("*", TokenType.MUL),
    ("/", TokenType.DIV),
    ("%", TokenType.MOD),
    ("~", TokenType.TILDE),
    ("<", TokenType.LT),
    (">", TokenType.GT),
)
