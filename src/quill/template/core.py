"""Quill Template: a compiled, immutable template ready for rendering.

Architecture:
    ```
    Template
    ├── _env_ref: WeakRef[Environment]  # Prevents circular refs
    ├── _ast: nodes.Template            # Compiled tree, never mutated
    ├── _table: MacroTable              # Macros and imports of this template
    └── _name, _source                  # For error messages
    ```

Memory Safety:
Uses ``weakref.ref(env)`` to break potential cycles:
``Template → (weak) → Environment → templates → Template``

Thread-Safety:
Templates are immutable after construction. Every ``render()`` creates its
own Renderer, so any number of threads may render one Template at once.
"""

from __future__ import annotations

import weakref
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from quill.template.macros import MacroTable

if TYPE_CHECKING:
    from quill.environment.core import Environment
    from quill.nodes import Macro, Node
    from quill.nodes import Template as TemplateNode


class Template:
    """Compiled template ready for rendering.

    Attributes:
        name: Template identifier (None for unnamed ``from_string`` templates)
        source: Template source (for runtime error snippets)
        macros: Macro name → definition for macros defined here
        imports: Alias → template name for this template's imports
        autoescape: Whether ``{{ }}`` output is HTML-escaped

    Example:
            >>> from quill import Environment
            >>> env = Environment()
            >>> t = env.from_string("Hello, {{ name | upper }}!")
            >>> t.render(name="World")
            'Hello, WORLD!'

            >>> t.render({"name": "World"})  # Mapping context also works
            'Hello, WORLD!'
    """

    __slots__ = ("_ast", "_autoescape", "_env_ref", "_name", "_source", "_table")

    def __init__(
        self,
        env: Environment,
        ast: TemplateNode,
        name: str | None,
        source: str | None = None,
    ):
        # Use weakref to prevent circular reference: Template <-> Environment
        self._env_ref: weakref.ref[Environment] = weakref.ref(env)
        self._ast = ast
        self._name = name
        self._source = source
        self._table = MacroTable.from_ast(ast)
        self._autoescape = env.select_autoescape(name)

    @property
    def _env(self) -> Environment:
        """Get the Environment (dereferences weak reference)."""
        env = self._env_ref()
        if env is None:
            raise RuntimeError(
                f"Environment has been garbage collected (template: {self._name or 'unknown'})"
            )
        return env

    @property
    def name(self) -> str:
        return self._name or "<string>"

    @property
    def source(self) -> str | None:
        return self._source

    @property
    def ast(self) -> TemplateNode:
        return self._ast

    @property
    def body(self) -> Sequence[Node]:
        return self._ast.body

    @property
    def macros(self) -> Mapping[str, Macro]:
        return self._table.macros

    @property
    def imports(self) -> Mapping[str, str]:
        return self._table.imports

    @property
    def autoescape(self) -> bool:
        return self._autoescape

    def render(self, context: Mapping[str, Any] | None = None, /, **kwargs: Any) -> str:
        """Render with a Context or mapping, plus keyword variables.

        Imports resolve against the templates registered in the Environment
        when the call starts.

        Example:
            >>> t.render(name="World")
            'Hello, World!'
        """
        return self._env._render_template(self, context, kwargs)

    def __repr__(self) -> str:
        return f"<Template {self.name!r}>"
