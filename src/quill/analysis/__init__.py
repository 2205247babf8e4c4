"""Static analysis helpers for Quill templates."""

from quill.analysis.visitor import references_name, visit_children

__all__ = ["references_name", "visit_children"]
