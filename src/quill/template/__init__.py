"""Quill template objects."""

from quill.template.core import Template
from quill.template.macros import MacroTable

__all__ = ["MacroTable", "Template"]
