"""Quill RenderContext: per-render state isolated from user data.

Holds the current template name, source and line for error messages, the
macro/include call chain, and the depth counters that bound recursion.
One RenderContext is created per top-level render and stored in a
ContextVar, so concurrent renders in different threads never share it.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field

from quill.environment.exceptions import (
    RecursionLimitError,
    TemplateRuntimeError,
    build_source_snippet,
)


@dataclass
class RenderContext:
    """Per-render state.

    Attributes:
        template_name: Template whose code is executing
        source: That template's source (for runtime error snippets)
        line: Line of the statement being rendered
        call_depth: Current macro call nesting
        max_call_depth: Maximum allowed macro call nesting
        include_depth: Current include nesting
        max_include_depth: Maximum allowed include nesting
        template_stack: (template_name, line) of each enclosing call site
    """

    template_name: str | None = None
    source: str | None = None
    line: int = 0

    call_depth: int = 0
    max_call_depth: int = 50
    include_depth: int = 0
    max_include_depth: int = 50

    template_stack: list[tuple[str, int]] = field(default_factory=list)

    def check_call_depth(self, macro_name: str) -> None:
        if self.call_depth >= self.max_call_depth:
            raise RecursionLimitError(
                f"Maximum macro call depth exceeded ({self.max_call_depth}) "
                f"when calling '{macro_name}'",
                suggestion="Check for a macro that calls itself without a stopping condition",
            )

    def check_include_depth(self, template_name: str) -> None:
        if self.include_depth >= self.max_include_depth:
            raise RecursionLimitError(
                f"Maximum include depth exceeded ({self.max_include_depth}) "
                f"when including '{template_name}'",
                suggestion="Check for circular includes: A → B → A",
            )

    def annotate(self, error: TemplateRuntimeError) -> TemplateRuntimeError:
        """Attach the current position to ``error`` unless it already has one."""
        snippet = None
        if self.source and self.line:
            snippet = build_source_snippet(self.source, self.line)
        return error.with_location(
            self.template_name, self.line or None, snippet, self.template_stack
        )

    @contextmanager
    def entering(
        self, template_name: str, source: str | None, *, macro: bool = False
    ) -> Iterator[None]:
        """Switch to another template's code for a macro call or include.

        Errors raised inside are annotated with the innermost position
        before the caller's position is restored.
        """
        saved = (self.template_name, self.source, self.line)
        if self.template_name is not None:
            self.template_stack.append((self.template_name, self.line))
        if macro:
            self.call_depth += 1
        else:
            self.include_depth += 1
        self.template_name, self.source, self.line = template_name, source, 0
        try:
            yield
        except TemplateRuntimeError as e:
            self.annotate(e)
            raise
        finally:
            if macro:
                self.call_depth -= 1
            else:
                self.include_depth -= 1
            if saved[0] is not None:
                self.template_stack.pop()
            self.template_name, self.source, self.line = saved


# Module-level ContextVar
_render_context: ContextVar[RenderContext | None] = ContextVar(
    "render_context",
    default=None,
)


def get_render_context() -> RenderContext | None:
    """Get current render context (None if not in render)."""
    return _render_context.get()


@contextmanager
def render_context(
    template_name: str | None = None,
    source: str | None = None,
    *,
    max_call_depth: int = 50,
    max_include_depth: int = 50,
) -> Iterator[RenderContext]:
    """Context manager for render-scoped state.

    Creates a new RenderContext and sets it as the current context for the
    duration of the with block, restoring the previous one on exit.

    Example:
        with render_context(template_name="page.html") as ctx:
            html = renderer.render(template)
            # ctx.line tracks the statement being rendered
    """
    ctx = RenderContext(
        template_name=template_name,
        source=source,
        max_call_depth=max_call_depth,
        max_include_depth=max_include_depth,
    )
    token: Token[RenderContext | None] = _render_context.set(ctx)
    try:
        yield ctx
    finally:
        _render_context.reset(token)
