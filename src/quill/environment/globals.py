"""Default global functions for templates.

Globals are called like functions: ``{{ range(end=3) }}``. They are
registered in every Environment and can be extended with
``env.add_global(name, func)``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from quill.environment.exceptions import TemplateRuntimeError, TypeMismatchError
from quill.values import is_number, stringify, type_name


def _global_range(end: Any, start: Any = 0, step_by: Any = 1) -> list[int]:
    """Integers from ``start`` up to, but not including, ``end``.

    Usage:
        {% for i in range(end=5) %}{{ i }}{% endfor %}      → 01234
        {% for i in range(end=10, step_by=5) %}{{ i }}{% endfor %}  → 05
    """
    for label, value in (("end", end), ("start", start), ("step_by", step_by)):
        if not is_number(value) or int(value) != value:
            raise TypeMismatchError(
                f"range() argument '{label}' must be an integer, got {type_name(value)}"
            )
    if step_by == 0:
        raise TemplateRuntimeError("range() argument 'step_by' must not be zero")
    return list(range(int(start), int(end), int(step_by)))


def _global_throw(message: Any = "") -> Any:
    """Abort the render with ``message``.

    Usage:
        {% if not user %}{{ throw(message="user is required") }}{% endif %}
    """
    raise TemplateRuntimeError(stringify(message) or "throw() called")


DEFAULT_GLOBALS: dict[str, Callable[..., Any]] = {
    "range": _global_range,
    "throw": _global_throw,
}
