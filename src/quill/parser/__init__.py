"""Quill parser: token stream → immutable AST.

Example:
    >>> from quill.lexer import tokenize
    >>> from quill.parser import Parser
    >>> template = Parser(tokenize("{{ x }}")).parse()
"""

from quill.parser.core import Parser
from quill.parser.errors import ParseError

__all__ = ["ParseError", "Parser"]
