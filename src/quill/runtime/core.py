"""Quill Renderer: walks a compiled template tree to produce text.

Architecture:
    ```
    Renderer (one per top-level render call)
    ├── StatementRenderingMixin    # Data, Output, If, For, Set, Include, ...
    ├── ExpressionEvaluationMixin  # Const, Name, Getattr, BinOp, Filter, ...
    └── MacroCallMixin             # ns::macro(args) resolution and binding
    ```

Statement handlers append to a shared output list and return a Signal.
Loops consume BREAK and CONTINUE; every other construct hands the signal
back to its caller unchanged. A signal that reaches a template, macro or
include body is a LoopControlError, so loop control never crosses a call
boundary.

Thread-Safety:
    The tree and the template snapshot are shared and never mutated. All
    mutable state (scope stacks, buffers, depth counters) belongs to one
    Renderer and its RenderContext.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from quill.environment.exceptions import LoopControlError
from quill.runtime.expressions import ExpressionEvaluationMixin
from quill.runtime.macros import MacroCallMixin
from quill.runtime.scope import Activation, ScopeStack
from quill.runtime.statements import Signal, StatementRenderingMixin

if TYPE_CHECKING:
    from quill.environment.core import Environment
    from quill.nodes import Node
    from quill.render_context import RenderContext
    from quill.template.core import Template


class Renderer(StatementRenderingMixin, ExpressionEvaluationMixin, MacroCallMixin):
    """Evaluates templates for one render call.

    Args:
        env: Environment supplying filters, tests, globals and settings
        templates: Snapshot of registered templates, used for every import
            and include during this render
        context: Root data (read-only)
        render_ctx: Position and depth tracking for this render
    """

    def __init__(
        self,
        env: Environment,
        templates: Mapping[str, Template],
        context: Mapping[str, Any],
        render_ctx: RenderContext,
    ):
        self._env = env
        self._templates = templates
        self._context = context
        self._render_ctx = render_ctx
        self._strict = env.strict_undefined
        # Registries are swapped, never mutated, so these dicts stay fixed for the render
        self._filters: Mapping[str, Callable[..., Any]] = env._filters
        self._tests: Mapping[str, Callable[..., bool]] = env._tests
        self._globals: Mapping[str, Callable[..., Any]] = env._globals
        self._node_dispatch = self._get_node_dispatch()
        self._expr_dispatch = self._get_expr_dispatch()

    def render(self, template: Template) -> str:
        """Render a template's top-level body and return the output."""
        buf: list[str] = []
        activation = Activation(template, ScopeStack(self._context))
        self.render_body(template.body, activation, buf, "template")
        return "".join(buf)

    def render_body(
        self, nodes: Sequence[Node], activation: Activation, buf: list[str], where: str
    ) -> None:
        """Render a template, macro or include body; loop signals may not escape it."""
        signal = self._render_nodes(nodes, activation, buf)
        if signal is not Signal.NORMAL:
            raise LoopControlError(
                f"'{{% {signal.value} %}}' used outside of a for loop in {where} body",
                suggestion=f"Move {{% {signal.value} %}} inside a {{% for %}} block",
            )

    def _render_nodes(
        self, nodes: Sequence[Node], activation: Activation, buf: list[str]
    ) -> Signal:
        dispatch = self._node_dispatch
        render_ctx = self._render_ctx
        for node in nodes:
            render_ctx.line = node.lineno
            signal = dispatch[type(node).__name__](node, activation, buf)
            if signal is not Signal.NORMAL:
                return signal
        return Signal.NORMAL

    def _eval(self, expr: Node, activation: Activation) -> Any:
        return self._expr_dispatch[type(expr).__name__](expr, activation)

    def _get_node_dispatch(self) -> dict[str, Callable[..., Signal]]:
        return {
            "Data": self._render_data,
            "Output": self._render_output,
            "If": self._render_if,
            "For": self._render_for,
            "Break": self._render_break,
            "Continue": self._render_continue,
            "Set": self._render_set,
            "Macro": self._render_definition,
            "Import": self._render_definition,
            "Include": self._render_include,
            "FilterBlock": self._render_filter_block,
        }

    def _get_expr_dispatch(self) -> dict[str, Callable[..., Any]]:
        return {
            "Const": self._eval_const,
            "Name": self._eval_name,
            "List": self._eval_list,
            "Dict": self._eval_dict,
            "Getattr": self._eval_getattr,
            "Getitem": self._eval_getitem,
            "FuncCall": self._eval_func_call,
            "MacroCall": self._eval_macro_call,
            "Filter": self._eval_filter,
            "Test": self._eval_test,
            "BinOp": self._eval_binop,
            "UnaryOp": self._eval_unaryop,
            "Compare": self._eval_compare,
            "BoolOp": self._eval_boolop,
            "Concat": self._eval_concat,
        }
