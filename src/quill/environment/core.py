"""Quill Environment: template registration, configuration and rendering.

Registration compiles the source first and only then swaps a new template
map in under a lock, so a failed compile leaves the previous registration
untouched and readers never see a half-updated map. Every render takes
the map current at the start of the call and resolves all of its imports
and includes against that snapshot.

Example:
    >>> env = Environment()
    >>> env.register("macros.html", '{% macro hi(name) %}Hi {{ name }}{% endmacro hi %}')
    <Template 'macros.html'>
    >>> env.register("page.txt", '{% import "macros.html" as m %}{{ m::hi(name="Ada") }}')
    <Template 'page.txt'>
    >>> env.render("page.txt")
    'Hi Ada'
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any

from quill.context import Context
from quill.environment.exceptions import (
    RecursionLimitError,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
)
from quill.environment.filters import DEFAULT_FILTERS
from quill.environment.globals import DEFAULT_GLOBALS
from quill.environment.registry import FilterRegistry
from quill.environment.tests import DEFAULT_TESTS
from quill.lexer import tokenize
from quill.parser import Parser
from quill.render_context import RenderContext, render_context
from quill.runtime import Renderer
from quill.template import Template

logger = logging.getLogger(__name__)

DEFAULT_AUTOESCAPE = (".html", ".htm", ".xml")


class Environment:
    """Central registry and configuration for templates.

    Args:
        strict_undefined: Raise UndefinedError for unresolved names, keys
            and indices (default). When False they evaluate to none and a
            none iterable loops zero times.
        autoescape_on: Template name suffixes whose output is HTML-escaped
        max_call_depth: Maximum macro call nesting per render
        max_include_depth: Maximum include nesting per render

    Thread-Safety:
        ``register`` and the filter/test/global registries are
        copy-on-write under one lock. Rendering takes no lock.
    """

    def __init__(
        self,
        *,
        strict_undefined: bool = True,
        autoescape_on: Iterable[str] = DEFAULT_AUTOESCAPE,
        max_call_depth: int = 50,
        max_include_depth: int = 50,
    ):
        if max_call_depth < 1 or max_include_depth < 1:
            raise ValueError("max_call_depth and max_include_depth must be at least 1")
        self.strict_undefined = strict_undefined
        self.autoescape_on = tuple(autoescape_on)
        self.max_call_depth = max_call_depth
        self.max_include_depth = max_include_depth

        self._lock = threading.Lock()
        self._templates: Mapping[str, Template] = MappingProxyType({})
        self._filters: dict[str, Callable[..., Any]] = DEFAULT_FILTERS.copy()
        self._tests: dict[str, Callable[..., bool]] = DEFAULT_TESTS.copy()
        self._globals: dict[str, Callable[..., Any]] = DEFAULT_GLOBALS.copy()

    # ─────────────────────────────────────────────────────────────────────────
    # Registries
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def filters(self) -> FilterRegistry:
        return FilterRegistry(self, "_filters")

    @property
    def tests(self) -> FilterRegistry:
        return FilterRegistry(self, "_tests")

    @property
    def globals(self) -> FilterRegistry:
        return FilterRegistry(self, "_globals")

    def add_filter(self, name: str, func: Callable[..., Any]) -> None:
        """Register a filter: ``func(value, *args, **kwargs)``."""
        self.filters[name] = func

    def add_test(self, name: str, func: Callable[..., bool]) -> None:
        self.tests[name] = func

    def add_global(self, name: str, func: Callable[..., Any]) -> None:
        """Register a function callable as ``{{ name(args) }}``."""
        self.globals[name] = func

    def select_autoescape(self, name: str | None) -> bool:
        return name is not None and name.endswith(self.autoescape_on)

    # ─────────────────────────────────────────────────────────────────────────
    # Compilation and registration
    # ─────────────────────────────────────────────────────────────────────────

    def _compile(self, source: str, name: str | None) -> Template:
        try:
            ast = Parser(tokenize(source, name), name=name, source=source).parse()
        except TemplateSyntaxError as e:
            logger.debug("Failed to compile template %r: %s", name, e.message)
            raise
        except RecursionError:
            error = TemplateSyntaxError(
                "Template nesting is too deep to compile", name=name, filename=name, source=source
            )
            logger.debug("Failed to compile template %r: %s", name, error.message)
            raise error from None
        return Template(self, ast, name, source)

    def from_string(self, source: str, name: str | None = None) -> Template:
        """Compile a template without registering it.

        Its own ``self::`` macros work; import aliases resolve against the
        registered templates.
        """
        return self._compile(source, name)

    def register(self, name: str, source: str) -> Template:
        """Compile ``source`` and store it under ``name``.

        Replaces any template already registered under ``name`` once the
        new source has compiled.

        Raises:
            TemplateSyntaxError: The source does not compile; the previous
                registration (if any) is kept
        """
        template = self._compile(source, name)
        with self._lock:
            replaced = name in self._templates
            updated = dict(self._templates)
            updated[name] = template
            self._templates = MappingProxyType(updated)
        logger.debug("%s template %r", "Replaced" if replaced else "Registered", name)
        return template

    def register_many(
        self, sources: Mapping[str, str] | Iterable[tuple[str, str]]
    ) -> list[Template]:
        """Compile every source, then register them all in a single swap.

        If any source fails to compile, nothing is registered.
        """
        items = list(sources.items() if isinstance(sources, Mapping) else sources)
        compiled = [self._compile(source, name) for name, source in items]
        with self._lock:
            updated = dict(self._templates)
            updated.update((t.name, t) for t in compiled)
            self._templates = MappingProxyType(updated)
        logger.debug("Registered %d templates: %s", len(compiled), ", ".join(n for n, _ in items))
        return compiled

    def get_template(self, name: str) -> Template:
        """Return a registered template.

        Raises:
            TemplateNotFoundError: Nothing is registered under ``name``
        """
        templates = self._templates
        template = templates.get(name)
        if template is None:
            raise TemplateNotFoundError(name, available=sorted(templates))
        return template

    def list_templates(self) -> list[str]:
        return sorted(self._templates)

    # ─────────────────────────────────────────────────────────────────────────
    # Rendering
    # ─────────────────────────────────────────────────────────────────────────

    def render(self, name: str, context: Mapping[str, Any] | None = None, /, **kwargs: Any) -> str:
        """Render a registered template.

        Raises:
            TemplateNotFoundError: Nothing is registered under ``name``
            TemplateRuntimeError: Or one of its subclasses, on any render failure
        """
        templates = self._templates
        template = templates.get(name)
        if template is None:
            raise TemplateNotFoundError(name, available=sorted(templates))
        return self._render(template, templates, context, kwargs)

    def render_str(
        self, source: str, context: Mapping[str, Any] | None = None, /, **kwargs: Any
    ) -> str:
        """Compile and render ``source`` in one step without registering it."""
        return self._render(self._compile(source, None), self._templates, context, kwargs)

    def _render_template(
        self, template: Template, context: Mapping[str, Any] | None, kwargs: dict[str, Any]
    ) -> str:
        return self._render(template, self._templates, context, kwargs)

    def _render(
        self,
        template: Template,
        templates: Mapping[str, Template],
        context: Mapping[str, Any] | None,
        kwargs: dict[str, Any],
    ) -> str:
        data = _build_context(context, kwargs)
        with render_context(
            template.name,
            template.source,
            max_call_depth=self.max_call_depth,
            max_include_depth=self.max_include_depth,
        ) as render_ctx:
            try:
                return Renderer(self, templates, data, render_ctx).render(template)
            except TemplateRuntimeError as e:
                render_ctx.annotate(e)
                raise
            except TemplateError:
                raise
            except Exception as e:
                raise _enhance_error(e, render_ctx) from e

    def __repr__(self) -> str:
        return f"<Environment templates={len(self._templates)} strict={self.strict_undefined}>"


def _build_context(context: Mapping[str, Any] | None, kwargs: dict[str, Any]) -> Mapping[str, Any]:
    if isinstance(context, Context) and not kwargs:
        return context
    data = Context(context)
    if kwargs:
        data.extend(kwargs)
    return data


def _enhance_error(error: Exception, render_ctx: RenderContext) -> TemplateRuntimeError:
    """Convert a Python exception into a TemplateRuntimeError at the current position."""
    message = str(error).strip() or f"{type(error).__name__} (no details available)"
    if isinstance(error, RecursionError):
        return render_ctx.annotate(
            RecursionLimitError(
                "Template nesting exceeded the Python recursion limit",
                suggestion="Lower max_call_depth or max_include_depth",
            )
        )
    return render_ctx.annotate(TemplateRuntimeError(message))
