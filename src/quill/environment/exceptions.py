"""Exceptions for the Quill template system.

Exception Hierarchy:
TemplateError (base)
├── TemplateSyntaxError          # Compile-time error (never leaves a partial registration)
│   ├── LexerError               # Tokenization failure (quill.lexer)
│   └── ParseError               # Grammar failure (quill.parser.errors)
└── TemplateRuntimeError         # Render-time error, aborts the render
    ├── UndefinedError           # Variable, key or index not found
    ├── TypeMismatchError        # Operator or indexing on the wrong value kind
    ├── TemplateNotFoundError    # No template registered under that name
    ├── UndefinedMacroError      # Macro alias/name does not resolve
    │   └── ImportNotFoundError  # Import alias points at an unregistered template
    ├── MacroArgumentError       # Bad or missing macro arguments
    ├── RecursionLimitError      # Macro or include depth exceeded
    └── LoopControlError         # break/continue with no enclosing loop

Every error carries an ErrorCode and, where known, the template name and
line. Runtime errors can also carry a source snippet and the macro/include
call stack:

    ```
    Runtime Error: Undefined variable 'titl'
      Location: article.html:5
       |
    >  5 | <h1>{{ titl }}</h1>
       |
      Suggestion: Did you mean 'title'?
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from difflib import get_close_matches
from enum import Enum
from typing import Any

from quill.environment import terminal

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------


class ErrorCode(Enum):
    """Searchable error codes.

    Format: Q-{CATEGORY}-{NUMBER}
    Categories: LEX (lexer), PAR (parser), RUN (runtime), TPL (template registry)
    """

    # Lexer errors (Q-LEX-xxx)
    UNCLOSED_TAG = "Q-LEX-001"
    UNCLOSED_COMMENT = "Q-LEX-002"
    UNCLOSED_VARIABLE = "Q-LEX-003"
    UNCLOSED_STRING = "Q-LEX-004"
    INVALID_ESCAPE = "Q-LEX-005"
    UNEXPECTED_CHARACTER = "Q-LEX-006"
    UNCLOSED_RAW = "Q-LEX-007"

    # Parser errors (Q-PAR-xxx)
    UNEXPECTED_TOKEN = "Q-PAR-001"
    UNCLOSED_BLOCK = "Q-PAR-002"
    INVALID_EXPRESSION = "Q-PAR-003"
    UNKNOWN_TAG = "Q-PAR-004"
    TAG_MISMATCH = "Q-PAR-005"
    INVALID_MACRO = "Q-PAR-006"
    INVALID_IMPORT = "Q-PAR-007"

    # Runtime errors (Q-RUN-xxx)
    UNDEFINED_VARIABLE = "Q-RUN-001"
    TYPE_MISMATCH = "Q-RUN-002"
    UNDEFINED_MACRO = "Q-RUN-003"
    IMPORT_NOT_FOUND = "Q-RUN-004"
    MACRO_ARGUMENT = "Q-RUN-005"
    RECURSION_LIMIT = "Q-RUN-006"
    LOOP_CONTROL = "Q-RUN-007"
    FILTER_ERROR = "Q-RUN-008"
    RUNTIME_ERROR = "Q-RUN-009"

    # Template registry errors (Q-TPL-xxx)
    TEMPLATE_NOT_FOUND = "Q-TPL-001"
    SYNTAX_ERROR = "Q-TPL-002"

    @property
    def category(self) -> str:
        """Error category ('lexer', 'parser', 'runtime' or 'template')."""
        prefix = self.value.split("-")[1]
        return {
            "LEX": "lexer",
            "PAR": "parser",
            "RUN": "runtime",
            "TPL": "template",
        }.get(prefix, "unknown")


# ---------------------------------------------------------------------------
# Source snippets
# ---------------------------------------------------------------------------


def format_template_stack(stack: list[tuple[str, int]] | None) -> str:
    """Format the macro/include call chain for error messages.

    Example:
        >>> print(format_template_stack([("page.html", 4), ("macros.html", 2)]))
        Template stack:
          • page.html:4
          • macros.html:2
    """
    if not stack:
        return ""

    lines = [terminal.dim_text("Template stack:")]
    for template_name, line_num in stack:
        lines.append(f"  • {terminal.location(f'{template_name}:{line_num}')}")
    return "\n".join(lines)


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Template source lines around an error.

    Attributes:
        lines: (line_number, line_content) pairs around the error.
        error_line: 1-based line number of the error.
        column: Optional column offset for a caret pointer.
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int
    column: int | None = None

    def format(self) -> str:
        parts: list[str] = [terminal.dim_text("   |")]
        for lineno, content in self.lines:
            parts.append(
                terminal.format_source_line(lineno, content, is_error=lineno == self.error_line)
            )
        if self.column is not None:
            caret = " " * self.column + "^"
            parts.append(f"{terminal.dim_text('   |')} {terminal.error_line(caret)}")
        parts.append(terminal.dim_text("   |"))
        return "\n".join(parts)


def build_source_snippet(
    source: str,
    error_line: int,
    *,
    context_lines: int = 2,
    column: int | None = None,
) -> SourceSnippet:
    """Build a SourceSnippet with ``context_lines`` lines either side of the error."""
    all_lines = source.splitlines()
    start = max(0, error_line - 1 - context_lines)
    end = min(len(all_lines), error_line + context_lines)
    lines = tuple((i + 1, all_lines[i]) for i in range(start, end))
    return SourceSnippet(lines=lines, error_line=error_line, column=column)


class TemplateError(Exception):
    """Base exception for all Quill template errors.

        >>> try:
        ...     env.render("page.html", ctx)
        ... except TemplateError as e:
        ...     log.error("Template error: %s", e.format_compact())

    Attributes:
        code: ErrorCode identifying the failure.
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Format as ``CODE: message`` without Python traceback noise."""
        header = str(self)
        if self.code and self.code.value not in header:
            header = f"{self.code.value}: {header}"
        return header


# ---------------------------------------------------------------------------
# Compile-time errors
# ---------------------------------------------------------------------------


class TemplateSyntaxError(TemplateError):
    """Compile-time error in template source.

    When ``source`` and ``lineno`` are provided, the message includes the
    offending line, with a caret when ``col_offset`` is also known.
    """

    code: ErrorCode | None = ErrorCode.SYNTAX_ERROR

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        name: str | None = None,
        filename: str | None = None,
        source: str | None = None,
        col_offset: int | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.lineno = lineno
        self.name = name
        self.filename = filename
        self.source = source
        self.col_offset = col_offset
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    def _location(self) -> str:
        location = self.filename or self.name or "<template>"
        if self.lineno:
            location += f":{self.lineno}"
            if self.col_offset is not None:
                location += f":{self.col_offset}"
        return location

    def _format_message(self) -> str:
        header = f"Syntax Error: {self.message}\n  --> {self._location()}"

        if self.source and self.lineno:
            lines = self.source.splitlines()
            if 0 < self.lineno <= len(lines):
                snippet = f"\n   |\n{self.lineno:>3} | {lines[self.lineno - 1]}"
                if self.col_offset is not None:
                    snippet += f"\n   | {' ' * self.col_offset}^"
                return header + snippet

        return header

    def format_compact(self) -> str:
        code_prefix = f"{self.code.value}: " if self.code else ""
        parts = [f"{code_prefix}{self.message}", f"  --> {self._location()}"]
        if self.source and self.lineno:
            lines = self.source.splitlines()
            if 0 < self.lineno <= len(lines):
                parts.append("   |")
                parts.append(f"{self.lineno:>3} | {lines[self.lineno - 1]}")
                if self.col_offset is not None:
                    parts.append(f"   | {' ' * self.col_offset}^")
                parts.append("   |")
        return "\n".join(parts)


# ---------------------------------------------------------------------------
# Render-time errors
# ---------------------------------------------------------------------------


class TemplateRuntimeError(TemplateError):
    """Render-time error with debugging context.

    Output Format:
            ```
            Runtime Error: Cannot compare string with number using '>'
              Location: list.html:3
              Expression: item.count > 2
              Values:
                left = 'ten' (str)
              Suggestion: Convert one side with | int or | string
            ```

    Attributes:
        message: Error description
        expression: Template expression that failed
        values: Names → values shown for context
        template_name: Name of the template
        lineno: Line number in template source
        suggestion: Actionable fix suggestion
    """

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        values: dict[str, Any] | None = None,
        template_name: str | None = None,
        lineno: int | None = None,
        suggestion: str | None = None,
        source_snippet: SourceSnippet | None = None,
        template_stack: list[tuple[str, int]] | None = None,
    ):
        self.message = message
        self.expression = expression
        self.values = values or {}
        self.template_name = template_name
        self.lineno = lineno
        self.suggestion = suggestion
        self.source_snippet = source_snippet
        self.template_stack = template_stack or []
        super().__init__(self._format_message())

    def with_location(
        self,
        template_name: str | None,
        lineno: int | None,
        source_snippet: SourceSnippet | None = None,
        template_stack: list[tuple[str, int]] | None = None,
    ) -> TemplateRuntimeError:
        """Attach position information if the error does not carry it yet.

        Returns self so callers can ``raise err.with_location(...)``.
        """
        if self.template_name is None and self.lineno is None:
            self.template_name = template_name
            self.lineno = lineno
            self.source_snippet = source_snippet
            if template_stack:
                self.template_stack = list(template_stack)
            self.args = (self._format_message(),)
        return self

    def _format_message(self) -> str:
        parts = [f"Runtime Error: {self.message}"]

        if self.template_name or self.lineno:
            loc = self.template_name or "<template>"
            if self.lineno:
                loc += f":{self.lineno}"
            parts.append(f"  Location: {terminal.location(loc)}")

        if self.source_snippet:
            parts.append(self.source_snippet.format())

        if self.template_stack:
            parts.append("")
            parts.append(format_template_stack(self.template_stack))

        if self.expression:
            parts.append(f"  Expression: {self.expression}")

        if self.values:
            parts.append("  Values:")
            for name, value in self.values.items():
                value_repr = repr(value)
                if len(value_repr) > 80:
                    value_repr = value_repr[:77] + "..."
                parts.append(f"    {name} = {value_repr} ({type(value).__name__})")

        if self.suggestion:
            parts.append(f"\n  {terminal.hint('Suggestion:')} {self.suggestion}")

        return "\n".join(parts)

    def format_compact(self) -> str:
        loc = self.template_name or "<template>"
        if self.lineno:
            loc += f":{self.lineno}"
        parts = [
            terminal.format_error_header(self.code.value if self.code else None, self.message),
            f"  Location: {terminal.location(loc)}",
        ]
        if self.source_snippet:
            parts.append(self.source_snippet.format())
        if self.template_stack:
            parts.append("")
            parts.append(format_template_stack(self.template_stack))
        if self.expression:
            parts.append(f"  Expression: {self.expression}")
        if self.suggestion:
            parts.append(f"  {terminal.hint('Hint:')} {self.suggestion}")
        return "\n".join(parts)


class UndefinedError(TemplateRuntimeError):
    """A variable, object key or array index could not be resolved.

    Strict mode is the default. When ``available_names`` is given, a
    "Did you mean?" suggestion is added for close matches.

    Example:
            >>> env.render_str("{{ usernme }}", username="ada")
        UndefinedError: Undefined variable 'usernme'
          Suggestion: Did you mean 'username'?

    To fix:
        - Insert the variable into the Context
        - Use the default filter: {{ usernme | default(value="") }}
        - Or build the Environment with strict_undefined=False
    """

    code: ErrorCode | None = ErrorCode.UNDEFINED_VARIABLE

    def __init__(
        self,
        name: str,
        *,
        kind: str = "variable",
        available_names: frozenset[str] | None = None,
        **kwargs: Any,
    ):
        self.name = name
        self.kind = kind
        suggestion = kwargs.pop("suggestion", None)
        if suggestion is None and available_names:
            matches = get_close_matches(name, available_names, n=1, cutoff=0.6)
            if matches:
                suggestion = f"Did you mean '{terminal.suggestion(matches[0])}'?"
        if suggestion is None and kind == "variable":
            suggestion = f'Use {{{{ {name} | default(value="") }}}} for optional variables'
        super().__init__(f"Undefined {kind} '{name}'", suggestion=suggestion, **kwargs)


class TypeMismatchError(TemplateRuntimeError):
    """An operator, index or filter was applied to an incompatible value kind."""

    code: ErrorCode | None = ErrorCode.TYPE_MISMATCH


class TemplateNotFoundError(TemplateRuntimeError):
    """No template is registered under the requested name.

    Example:
            >>> env.render("missing.html", {})
        TemplateNotFoundError: Template 'missing.html' not found. Did you mean 'mising.html'?
    """

    code: ErrorCode | None = ErrorCode.TEMPLATE_NOT_FOUND

    def __init__(self, name: str, available: list[str] | None = None, **kwargs: Any):
        self.name = name
        msg = f"Template '{name}' not found"
        if available:
            matches = get_close_matches(name, available, n=1, cutoff=0.6)
            if matches:
                msg += f". Did you mean '{matches[0]}'?"
            else:
                msg += f". Available: {', '.join(available[:10])}"
                if len(available) > 10:
                    msg += f" ... ({len(available)} total)"
        super().__init__(msg, **kwargs)


class UndefinedMacroError(TemplateRuntimeError):
    """A ``namespace::macro`` call does not resolve to a macro definition."""

    code: ErrorCode | None = ErrorCode.UNDEFINED_MACRO

    def __init__(self, message: str, namespace: str, macro_name: str, **kwargs: Any):
        self.namespace = namespace
        self.macro_name = macro_name
        super().__init__(message, **kwargs)


class ImportNotFoundError(UndefinedMacroError):
    """The import alias is unknown, or its target template is not registered."""

    code: ErrorCode | None = ErrorCode.IMPORT_NOT_FOUND


class MacroArgumentError(TemplateRuntimeError):
    """Macro arguments do not match the macro's parameter list."""

    code: ErrorCode | None = ErrorCode.MACRO_ARGUMENT


class RecursionLimitError(TemplateRuntimeError):
    """Macro call or include nesting went deeper than the configured maximum."""

    code: ErrorCode | None = ErrorCode.RECURSION_LIMIT


class LoopControlError(TemplateRuntimeError):
    """``{% break %}`` or ``{% continue %}`` reached a template or macro body.

    Loop control never crosses a macro call or include boundary.
    """

    code: ErrorCode | None = ErrorCode.LOOP_CONTROL


# Family aliases
CompileError = TemplateSyntaxError
RenderError = TemplateRuntimeError
