"""Macro calls for the Quill Renderer.

``alias::name(args)`` resolves at render time: ``self`` is the template
whose code is running, any other alias is looked up in that template's
imports and then in the render's template snapshot. The macro body runs
in a fresh scope holding only its parameters (plus the Context), with its
own template as ``self``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from difflib import get_close_matches
from typing import TYPE_CHECKING, Any

from quill.environment.exceptions import (
    ImportNotFoundError,
    MacroArgumentError,
    UndefinedMacroError,
)
from quill.runtime.scope import Activation, ScopeStack
from quill.utils.html import Markup

if TYPE_CHECKING:
    from quill.nodes import Macro, MacroCall, Node
    from quill.render_context import RenderContext
    from quill.template.core import Template


class MacroCallMixin:
    """Mixin for evaluating MacroCall expressions.

    Required Host Attributes:
        - _templates: Mapping[str, Template]
        - _context: Mapping[str, Any]
        - _render_ctx: RenderContext
        - _eval, render_body
    """

    if TYPE_CHECKING:
        _templates: Mapping[str, Template]
        _context: Mapping[str, Any]
        _render_ctx: RenderContext

        def _eval(self, expr: Node, activation: Activation) -> Any: ...
        def render_body(
            self, nodes: Sequence[Node], activation: Activation, buf: list[str], where: str
        ) -> None: ...

    def _eval_macro_call(self, node: MacroCall, activation: Activation) -> Markup:
        """Call a macro and return its output as Markup."""
        owner, macro = self._resolve_macro(node, activation.template)

        # Arguments are evaluated in the caller's scope
        args = [self._eval(arg, activation) for arg in node.args]
        kwargs = {name: self._eval(value, activation) for name, value in node.kwargs.items()}
        bound = bind_arguments(macro, args, kwargs, f"{node.namespace}::{node.name}")

        render_ctx = self._render_ctx
        render_ctx.check_call_depth(f"{node.namespace}::{node.name}")

        buf: list[str] = []
        with render_ctx.entering(owner.name, owner.source, macro=True):
            render_ctx.line = macro.lineno
            scope = ScopeStack(self._context, bound)
            callee = Activation(owner, scope)
            # Defaults see the context and the parameters before them
            for param in macro.params:
                if param.default is not None and param.name not in bound:
                    bound[param.name] = self._eval(param.default, callee)
            self.render_body(macro.body, callee, buf, f"macro '{macro.name}'")
        return Markup("".join(buf))

    def _resolve_macro(self, node: MacroCall, current: Template) -> tuple[Template, Macro]:
        """Find the template defining ``node``'s macro, and the macro itself."""
        if node.namespace == "self":
            owner = current
        else:
            target_name = current.imports.get(node.namespace)
            if target_name is None:
                matches = get_close_matches(node.namespace, list(current.imports), n=1, cutoff=0.6)
                raise ImportNotFoundError(
                    f"Unknown import alias '{node.namespace}' in macro call "
                    f"'{node.namespace}::{node.name}'",
                    node.namespace,
                    node.name,
                    suggestion=(
                        f"Did you mean '{matches[0]}'?"
                        if matches
                        else f'Add {{% import "..." as {node.namespace} %}} at the top level'
                    ),
                )
            owner = self._templates.get(target_name)
            if owner is None:
                raise ImportNotFoundError(
                    f"Template '{target_name}' imported as '{node.namespace}' is not registered",
                    node.namespace,
                    node.name,
                    suggestion=f"Register '{target_name}' before rendering",
                )

        macro = owner.macros.get(node.name)
        if macro is None:
            matches = get_close_matches(node.name, list(owner.macros), n=1, cutoff=0.6)
            raise UndefinedMacroError(
                f"Macro '{node.name}' is not defined in '{owner.name}'",
                node.namespace,
                node.name,
                suggestion=f"Did you mean '{node.namespace}::{matches[0]}'?" if matches else None,
            )
        return owner, macro


def bind_arguments(
    macro: Macro, args: Sequence[Any], kwargs: Mapping[str, Any], display: str
) -> dict[str, Any]:
    """Bind positional then named arguments to ``macro``'s parameters.

    Parameters left unbound all have defaults; the caller evaluates them.

    Raises:
        MacroArgumentError: Too many positional arguments, an unknown or
            duplicated name, or a required parameter left unbound
    """
    names = macro.param_names
    if len(args) > len(names):
        raise MacroArgumentError(
            f"Macro '{display}' takes {len(names)} argument(s) but {len(args)} were given"
        )
    bound = dict(zip(names, args))

    for name, value in kwargs.items():
        if name not in names:
            matches = get_close_matches(name, names, n=1, cutoff=0.6)
            raise MacroArgumentError(
                f"Macro '{display}' has no parameter '{name}'",
                suggestion=(
                    f"Did you mean '{matches[0]}'?"
                    if matches
                    else f"Parameters: {', '.join(names) or '(none)'}"
                ),
            )
        if name in bound:
            raise MacroArgumentError(f"Macro '{display}' got multiple values for '{name}'")
        bound[name] = value

    missing = [p.name for p in macro.params if p.required and p.name not in bound]
    if missing:
        raise MacroArgumentError(
            f"Macro '{display}' is missing required argument(s): {', '.join(missing)}"
        )
    return bound
