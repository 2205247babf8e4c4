"""Quill value model.

Template data is plain Python: the closed union

    None | bool | int | float | str | list | dict

classified as Null, Bool, Number, String, Array and Object. Any Mapping
counts as an Object, so read-only views (such as the ``loop`` variable)
need no copying. Host objects enter through ``to_value`` at the Context
boundary.
"""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping
from enum import Enum
from typing import Any

from quill.environment.exceptions import TypeMismatchError


class ValueKind(Enum):
    """The six kinds of template value."""

    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


class _Undefined:
    """Marker for a name, key or index that does not resolve.

    Only seen by the filters and tests that accept undefined input
    (``default``, ``defined``, ``undefined``).
    """

    __slots__ = ()

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNDEFINED"


UNDEFINED: Any = _Undefined()


def kind_of(value: Any) -> ValueKind:
    """Classify a template value.

    Raises:
        TypeMismatchError: If ``value`` is not a template value
    """
    if value is None:
        return ValueKind.NULL
    # bool before int: True is an int in Python
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (list, tuple)):
        return ValueKind.ARRAY
    if isinstance(value, Mapping):
        return ValueKind.OBJECT
    raise TypeMismatchError(
        f"{type(value).__name__} is not a template value",
        suggestion="Convert host objects with quill.to_value() before rendering",
    )


def type_name(value: Any) -> str:
    """Kind name for error messages (falls back to the Python type name)."""
    try:
        return kind_of(value).value
    except TypeMismatchError:
        return type(value).__name__


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def to_value(obj: Any) -> Any:
    """Convert a host object into a template value.

    - None, bool, int, float and str pass through unchanged
    - Mappings become dicts; integer keys are converted to strings
    - Dataclass instances become dicts of their fields
    - lists and tuples become lists

    Conversion is recursive.

    Raises:
        TypeError: For objects with no template representation

    Example:
        >>> @dataclass
        ... class Field:
        ...     i: int
        >>> to_value({"objects": [Field(0), Field(1)]})
        {'objects': [{'i': 0}, {'i': 1}]}
    """
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, Mapping):
        converted: dict[str, Any] = {}
        for key, item in obj.items():
            if isinstance(key, bool) or not isinstance(key, (str, int)):
                raise TypeError(
                    f"Object keys must be strings, got {type(key).__name__} key {key!r}"
                )
            converted[str(key)] = to_value(item)
        return converted
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_value(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, (list, tuple)):
        return [to_value(item) for item in obj]
    raise TypeError(f"Cannot convert {type(obj).__name__} to a template value")


def is_truthy(value: Any) -> bool:
    """Template truthiness.

    Null is false, Bool is itself, a Number is true when non-zero, and a
    String, Array or Object is true when non-empty. Python's own truth
    rules agree on every template value.
    """
    return bool(value)


def stringify(value: Any) -> str:
    """Render a value as output text.

    Null → ``""``, Bool → ``true``/``false``, Number → Python ``str``,
    String as-is, Array → JSON-style list, Object → ``[object]``.
    """
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, tuple)):
        return json.dumps(value, ensure_ascii=False, default=_json_default)
    if isinstance(value, Mapping):
        return "[object]"
    return str(value)


def _json_default(value: Any) -> Any:
    if isinstance(value, Mapping):
        return dict(value)
    raise TypeError(f"{type(value).__name__} is not JSON serializable")


def values_equal(left: Any, right: Any) -> bool:
    """Structural equality with kind checks.

    Values of different kinds are never equal (``true != 1``); numbers
    compare by value (``1 == 1.0``). Never raises.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if is_number(left) and is_number(right):
        return left == right
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        return len(left) == len(right) and all(
            values_equal(a, b) for a, b in zip(left, right)
        )
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        if left.keys() != right.keys():
            return False
        return all(values_equal(left[key], right[key]) for key in left)
    if left is None or right is None:
        return left is right
    return False
