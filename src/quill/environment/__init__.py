"""Quill environment: configuration, registration and rendering."""

from quill.environment.exceptions import (
    CompileError,
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
from quill.environment.core import DEFAULT_AUTOESCAPE, Environment
from quill.environment.registry import FilterRegistry

__all__ = [
    "DEFAULT_AUTOESCAPE",
    "CompileError",
    "Environment",
    "ErrorCode",
    "FilterRegistry",
    "ImportNotFoundError",
    "LoopControlError",
    "MacroArgumentError",
    "RecursionLimitError",
    "RenderError",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "TypeMismatchError",
    "UndefinedError",
    "UndefinedMacroError",
]
