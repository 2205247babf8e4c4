"""Built-in tests for Quill templates.

Tests are boolean predicates used with ``is`` in conditionals:
``{% if value is test %}`` or ``{% if value is test(arg) %}``

Categories:
**Definition Tests**:
    - ``defined``: The name, key or index resolves (even to none)
    - ``undefined``: It does not
    - ``none``: Value is none

**Type Tests**:
    - ``number``, ``string``, ``array``, ``object``
    - ``iterable``: Value can be looped over (array or object)

**Number Tests**:
    - ``odd``, ``even``: Integer parity
    - ``divisibleby(n)``: Integer is divisible by n

**String and Container Tests**:
    - ``starting_with(prefix)``, ``ending_with(suffix)``
    - ``containing(item)``: Substring, array element or object key

Negation:
Use ``is not`` for negated tests:
``{% if user is not defined %}`` or ``{% if count is not even %}``

Example:
    ```jinja
    {% if posts is defined and posts is iterable %}
        {% for post in posts %}
            {% if loop.index is odd %}<div class="odd">{{ post.title }}</div>{% endif %}
        {% endfor %}
    {% endif %}
    ```

Custom Tests:
    >>> env.add_test("prime", lambda n: n > 1 and all(n % i for i in range(2, n)))
    >>> # {% if 17 is prime %}Yes{% endif %}
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from quill.environment.exceptions import TypeMismatchError
from quill.values import UNDEFINED, is_number, type_name, values_equal


def _require_integer(value: Any, test: str) -> int:
    if not is_number(value) or int(value) != value:
        raise TypeMismatchError(f"Test '{test}' needs an integer, got {type_name(value)}")
    return int(value)


def _require_string(value: Any, test: str) -> str:
    if not isinstance(value, str):
        raise TypeMismatchError(f"Test '{test}' needs a string, got {type_name(value)}")
    return value


def _test_defined(value: Any) -> bool:
    """Test if the value resolved (null counts as defined)."""
    return value is not UNDEFINED


def _test_undefined(value: Any) -> bool:
    return value is UNDEFINED


def _test_none(value: Any) -> bool:
    """Test if value is None."""
    return value is None


def _test_odd(value: Any) -> bool:
    return _require_integer(value, "odd") % 2 == 1


def _test_even(value: Any) -> bool:
    return _require_integer(value, "even") % 2 == 0


def _test_divisible_by(value: Any, num: Any) -> bool:
    """Test if value is divisible by num."""
    divisor = _require_integer(num, "divisibleby")
    if divisor == 0:
        return False
    return _require_integer(value, "divisibleby") % divisor == 0


def _test_number(value: Any) -> bool:
    """Test if value is a number."""
    return is_number(value)


def _test_string(value: Any) -> bool:
    return isinstance(value, str)


def _test_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _test_object(value: Any) -> bool:
    return isinstance(value, Mapping)


def _test_iterable(value: Any) -> bool:
    """Test if a for loop accepts the value."""
    return isinstance(value, (list, tuple, Mapping))


def _test_starting_with(value: Any, prefix: Any) -> bool:
    return _require_string(value, "starting_with").startswith(
        _require_string(prefix, "starting_with")
    )


def _test_ending_with(value: Any, suffix: Any) -> bool:
    return _require_string(value, "ending_with").endswith(_require_string(suffix, "ending_with"))


def _test_containing(value: Any, item: Any) -> bool:
    """Test for a substring, an array element or an object key."""
    if isinstance(value, str):
        return isinstance(item, str) and item in value
    if isinstance(value, (list, tuple)):
        return any(values_equal(item, element) for element in value)
    if isinstance(value, Mapping):
        return isinstance(item, str) and item in value
    raise TypeMismatchError(
        f"Test 'containing' needs a string, array or object, got {type_name(value)}"
    )


# Default tests
DEFAULT_TESTS: dict[str, Callable[..., bool]] = {
    "array": _test_array,
    "containing": _test_containing,
    "defined": _test_defined,
    "divisibleby": _test_divisible_by,
    "ending_with": _test_ending_with,
    "even": _test_even,
    "iterable": _test_iterable,
    "none": _test_none,
    "number": _test_number,
    "object": _test_object,
    "odd": _test_odd,
    "starting_with": _test_starting_with,
    "string": _test_string,
    "undefined": _test_undefined,
}
