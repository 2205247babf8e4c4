"""Statement rendering for the Quill Renderer.

Each handler takes ``(node, activation, buf)``, appends output to ``buf``
and returns a Signal.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import TYPE_CHECKING, Any

from quill.environment.exceptions import TemplateNotFoundError, TypeMismatchError
from quill.runtime.loop_context import LoopContext
from quill.runtime.scope import Activation
from quill.utils.html import Markup, html_escape
from quill.values import is_truthy, stringify, type_name

if TYPE_CHECKING:
    from quill.nodes import (
        Break,
        Continue,
        Data,
        Filter,
        FilterBlock,
        For,
        If,
        Include,
        Node,
        Output,
        Set,
    )
    from quill.render_context import RenderContext
    from quill.template.core import Template


class Signal(Enum):
    """Control-flow outcome of rendering a statement."""

    NORMAL = "normal"
    BREAK = "break"
    CONTINUE = "continue"


class StatementRenderingMixin:
    """Mixin for rendering statement nodes.

    Required Host Attributes:
        - _templates: Mapping[str, Template]
        - _strict: bool
        - _render_ctx: RenderContext
        - _render_nodes, render_body, _eval, _apply_filter
    """

    if TYPE_CHECKING:
        _templates: Mapping[str, Template]
        _strict: bool
        _render_ctx: RenderContext

        def _render_nodes(
            self, nodes: Sequence[Node], activation: Activation, buf: list[str]
        ) -> Signal: ...
        def render_body(
            self, nodes: Sequence[Node], activation: Activation, buf: list[str], where: str
        ) -> None: ...
        def _eval(self, expr: Node, activation: Activation) -> Any: ...
        def _apply_filter(self, node: Filter, value: Any, activation: Activation) -> Any: ...

    def _render_data(self, node: Data, activation: Activation, buf: list[str]) -> Signal:
        buf.append(node.value)
        return Signal.NORMAL

    def _render_output(self, node: Output, activation: Activation, buf: list[str]) -> Signal:
        """{{ expr }}: stringify, escaping unless the value is Markup."""
        value = self._eval(node.expr, activation)
        text = stringify(value)
        if activation.template.autoescape and not isinstance(text, Markup):
            text = html_escape(text)
        buf.append(text)
        return Signal.NORMAL

    def _render_if(self, node: If, activation: Activation, buf: list[str]) -> Signal:
        for test, body in node.branches:
            if is_truthy(self._eval(test, activation)):
                return self._render_nodes(body, activation, buf)
        if node.else_:
            return self._render_nodes(node.else_, activation, buf)
        return Signal.NORMAL

    def _render_for(self, node: For, activation: Activation, buf: list[str]) -> Signal:
        """Iterate an Array or Object, one scope frame per item.

        BREAK ends the loop and CONTINUE moves to the next item. ``else``
        renders only when there is nothing to iterate.
        """
        iterable = self._eval(node.iter, activation)
        items = self._loop_items(node, iterable)

        if not items:
            if node.else_:
                return self._render_nodes(node.else_, activation, buf)
            return Signal.NORMAL

        scope = activation.scope
        target, key = node.target, node.key
        uses_loop = node.uses_loop
        length = len(items)
        body = node.body

        for index, item in enumerate(items):
            if key is None:
                frame = {target: item}
            else:
                frame = {key: item[0], target: item[1]}
            if uses_loop:
                frame["loop"] = LoopContext(length, index)
            scope.push(frame)
            try:
                signal = self._render_nodes(body, activation, buf)
            finally:
                scope.pop()
            if signal is Signal.BREAK:
                break
        return Signal.NORMAL

    def _loop_items(self, node: For, iterable: Any) -> Sequence[Any]:
        if isinstance(iterable, (list, tuple)):
            if node.key is not None:
                raise TypeMismatchError(
                    f"Cannot unpack array items into '{node.key}, {node.target}'",
                    suggestion=f"Use a single loop variable: {{% for {node.target} in ... %}}",
                )
            return iterable
        if isinstance(iterable, Mapping):
            if node.key is None:
                return list(iterable)
            return list(iterable.items())
        if iterable is None and not self._strict:
            return ()
        raise TypeMismatchError(
            f"Cannot iterate over {type_name(iterable)}",
            values={"iterable": iterable},
            suggestion="A for loop needs an array or an object",
        )

    def _render_break(self, node: Break, activation: Activation, buf: list[str]) -> Signal:
        return Signal.BREAK

    def _render_continue(self, node: Continue, activation: Activation, buf: list[str]) -> Signal:
        return Signal.CONTINUE

    def _render_set(self, node: Set, activation: Activation, buf: list[str]) -> Signal:
        value = self._eval(node.value, activation)
        if node.is_global:
            activation.scope.set_global(node.name, value)
        else:
            activation.scope.set(node.name, value)
        return Signal.NORMAL

    def _render_definition(self, node: Node, activation: Activation, buf: list[str]) -> Signal:
        # Macros and imports are collected when the template is compiled
        return Signal.NORMAL

    def _render_include(self, node: Include, activation: Activation, buf: list[str]) -> Signal:
        """Render another template against the current scope, in a new frame."""
        template = self._templates.get(node.template)
        if template is None:
            if node.ignore_missing:
                return Signal.NORMAL
            raise TemplateNotFoundError(node.template, available=sorted(self._templates))

        render_ctx = self._render_ctx
        render_ctx.check_include_depth(node.template)
        scope = activation.scope
        with render_ctx.entering(template.name, template.source), scope.frame():
            self.render_body(
                template.body, Activation(template, scope), buf, f"included template '{template.name}'"
            )
        return Signal.NORMAL

    def _render_filter_block(
        self, node: FilterBlock, activation: Activation, buf: list[str]
    ) -> Signal:
        inner: list[str] = []
        signal = self._render_nodes(node.body, activation, inner)
        result = self._apply_filter(node.filter, "".join(inner), activation)
        buf.append(stringify(result))
        return signal

