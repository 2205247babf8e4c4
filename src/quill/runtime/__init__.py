"""Quill runtime: tree-walking evaluation of compiled templates."""

from quill.runtime.core import Renderer
from quill.runtime.loop_context import LoopContext
from quill.runtime.scope import Activation, ScopeStack
from quill.runtime.statements import Signal

__all__ = ["Activation", "LoopContext", "Renderer", "ScopeStack", "Signal"]
