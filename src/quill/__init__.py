"""Quill — a Tera/Jinja-style template engine for Python.

Templates are compiled once into an immutable tree and rendered any number
of times, from any number of threads, against caller-supplied data.

Quickstart:
    >>> from quill import Environment
    >>> env = Environment()
    >>> env.render_str("Hello, {{ name }}!", name="World")
    'Hello, World!'

Registered templates and macros:
    >>> env.register("macros.html", '''
    ... {% macro badge(label, kind="info") %}<b class="{{ kind }}">{{ label }}</b>{% endmacro badge %}
    ... ''')
    >>> env.register("page.html", '''
    ... {%- import "macros.html" as m -%}
    ... {% for user in users %}{{ m::badge(label=user.name) }}{% endfor %}''')
    >>> env.render("page.html", {"users": [{"name": "Ada"}]})
    '<b class="info">Ada</b>'

Architecture:
Template Source → Lexer → Parser → Quill AST → Renderer → text

Pipeline stages:
1. **Lexer**: Tokenizes template source into a token stream
2. **Parser**: Builds an immutable AST from tokens
3. **Template**: Wraps the AST with its macro table and render() interface
4. **Renderer**: Walks the AST against a scope stack and the Context

Thread-Safety:
- Compiled trees are frozen dataclasses shared by every render
- Each render owns its scope stacks, output buffer and RenderContext
- Registration and the filter/test/global registries are copy-on-write

Strict Mode (default):
Undefined variables raise ``UndefinedError`` instead of rendering as
empty. Use ``| default(value=...)`` for optional values, or
``Environment(strict_undefined=False)``:

    >>> env.render_str("{{ missing }}")  # Raises UndefinedError
    >>> env.render_str('{{ missing | default(value="N/A") }}')
    'N/A'
"""

from quill._types import Token, TokenType
from quill.environment import (
    CompileError,
    Environment,
    ErrorCode,
    ImportNotFoundError,
    LoopControlError,
    MacroArgumentError,
    RecursionLimitError,
    RenderError,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    TypeMismatchError,
    UndefinedError,
    UndefinedMacroError,
)
from quill.environment.exceptions import SourceSnippet, build_source_snippet
from quill.context import Context
from quill.lexer import Lexer, LexerError, tokenize
from quill.parser import ParseError, Parser
from quill.render_context import RenderContext, get_render_context, render_context
from quill.runtime import LoopContext
from quill.template import Template
from quill.utils.html import Markup, html_escape
from quill.values import ValueKind, kind_of, to_value

__version__ = "0.1.0"

__all__ = [
    "CompileError",
    "Context",
    "Environment",
    "ErrorCode",
    "ImportNotFoundError",
    "Lexer",
    "LexerError",
    "LoopContext",
    "LoopControlError",
    "MacroArgumentError",
    "Markup",
    "ParseError",
    "Parser",
    "RecursionLimitError",
    "RenderContext",
    "RenderError",
    "SourceSnippet",
    "Template",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "Token",
    "TokenType",
    "TypeMismatchError",
    "UndefinedError",
    "UndefinedMacroError",
    "ValueKind",
    "__version__",
    "build_source_snippet",
    "get_render_context",
    "html_escape",
    "kind_of",
    "render_context",
    "to_value",
    "tokenize",
]
