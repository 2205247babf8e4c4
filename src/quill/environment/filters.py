"""Built-in filters for Quill templates.

Filters transform a value with the pipe syntax: ``{{ name | upper }}``,
``{{ items | join(sep=", ") }}``. The piped value is the first positional
argument; any arguments in parentheses follow it.

Categories:
**Strings**: upper, lower, capitalize, title, trim, replace, truncate,
    wordcount, split, striptags
**Sequences**: length, first, last, reverse, join, sort, unique
**Objects**: keys, values
**Numbers**: round, abs, int, float
**Conversion and safety**: string, json_encode, safe, escape, default

Filters check their input kind and raise TypeMismatchError for anything
else, so ``{{ 3 | upper }}`` is an error rather than ``"3"``.

Custom Filters:
    >>> env.add_filter("double", lambda value: value * 2)
    >>> env.render_str("{{ 21 | double }}")
    '42'
"""

from __future__ import annotations

import json
import math
from collections.abc import Callable, Mapping
from typing import Any

from quill.environment.exceptions import TypeMismatchError
from quill.utils.html import Markup, html_escape, strip_tags
from quill.values import UNDEFINED, is_number, stringify, type_name, values_equal


def _require_string(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise TypeMismatchError(
            f"Filter '{name}' needs a string, got {type_name(value)}",
            values={"value": value},
            suggestion="Convert the value first with | string",
        )
    return value


def _require_array(value: Any, name: str) -> list[Any] | tuple[Any, ...]:
    if not isinstance(value, (list, tuple)):
        raise TypeMismatchError(
            f"Filter '{name}' needs an array, got {type_name(value)}",
            values={"value": value},
        )
    return value


def _require_object(value: Any, name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise TypeMismatchError(
            f"Filter '{name}' needs an object, got {type_name(value)}",
            values={"value": value},
        )
    return value


def _require_number(value: Any, name: str) -> int | float:
    if not is_number(value):
        raise TypeMismatchError(
            f"Filter '{name}' needs a number, got {type_name(value)}",
            values={"value": value},
        )
    return value


# ─────────────────────────────────────────────────────────────────────────────
# Strings
# ─────────────────────────────────────────────────────────────────────────────


def _filter_upper(value: Any) -> str:
    return _require_string(value, "upper").upper()


def _filter_lower(value: Any) -> str:
    return _require_string(value, "lower").lower()


def _filter_capitalize(value: Any) -> str:
    """First character upper case, the rest lower case."""
    return _require_string(value, "capitalize").capitalize()


def _filter_title(value: Any) -> str:
    return _require_string(value, "title").title()


def _filter_trim(value: Any) -> str:
    return _require_string(value, "trim").strip()


def _filter_replace(value: Any, old: Any = None, new: Any = None, **kwargs: Any) -> str:
    """Replace every occurrence of a substring.

    Usage:
        {{ name | replace(from="Robert", to="Bob") }}
        {{ name | replace("Robert", "Bob") }}
    """
    old = kwargs.pop("from", old)
    new = kwargs.pop("to", new)
    if kwargs:
        raise TypeError(f"unexpected argument(s): {', '.join(kwargs)}")
    if old is None or new is None:
        raise TypeError("replace needs 'from' and 'to'")
    return _require_string(value, "replace").replace(
        _require_string(old, "replace"), _require_string(new, "replace")
    )


def _filter_truncate(value: Any, length: Any = 255, end: Any = "…") -> str:
    """Cut the string to ``length`` characters, appending ``end`` when cut."""
    text = _require_string(value, "truncate")
    limit = int(_require_number(length, "truncate"))
    if len(text) <= limit:
        return text
    return text[:limit] + _require_string(end, "truncate")


def _filter_wordcount(value: Any) -> int:
    return len(_require_string(value, "wordcount").split())


def _filter_split(value: Any, pat: Any = None) -> list[str]:
    """Split on ``pat``, or on runs of whitespace when no pattern is given."""
    text = _require_string(value, "split")
    if pat is None:
        return text.split()
    return text.split(_require_string(pat, "split"))


def _filter_striptags(value: Any) -> str:
    return strip_tags(_require_string(value, "striptags"))


# ─────────────────────────────────────────────────────────────────────────────
# Sequences and objects
# ─────────────────────────────────────────────────────────────────────────────


def _filter_length(value: Any) -> int:
    if isinstance(value, (str, list, tuple, Mapping)):
        return len(value)
    raise TypeMismatchError(
        f"Filter 'length' needs a string, array or object, got {type_name(value)}",
        values={"value": value},
    )


def _filter_first(value: Any) -> Any:
    items = _require_array(value, "first")
    return items[0] if items else None


def _filter_last(value: Any) -> Any:
    items = _require_array(value, "last")
    return items[-1] if items else None


def _filter_reverse(value: Any) -> Any:
    if isinstance(value, str):
        return value[::-1]
    return list(reversed(_require_array(value, "reverse")))


def _filter_join(value: Any, sep: Any = "") -> str:
    """Join array items (stringified) with ``sep``.

    Usage:
        {{ tags | join(sep=", ") }}
    """
    items = _require_array(value, "join")
    return _require_string(sep, "join").join(stringify(item) for item in items)


def _attribute_getter(attribute: str | None) -> Callable[[Any], Any]:
    """Key function for a dotted ``attribute`` path (identity when None)."""
    if attribute is None:
        return lambda item: item
    parts = attribute.split(".")

    def get(item: Any) -> Any:
        for part in parts:
            if isinstance(item, Mapping) and part in item:
                item = item[part]
            elif isinstance(item, (list, tuple)) and part.isdigit() and int(part) < len(item):
                item = item[int(part)]
            else:
                raise TypeMismatchError(f"Item {stringify(item)!r} has no attribute '{attribute}'")
        return item

    return get


def _filter_sort(value: Any, attribute: str | None = None) -> list[Any]:
    """Sort numbers or strings ascending, optionally by an item attribute.

    Usage:
        {{ people | sort(attribute="age") }}
    """
    items = list(_require_array(value, "sort"))
    if not items:
        return items
    key = _attribute_getter(attribute)
    keys = [key(item) for item in items]
    if not (all(is_number(k) for k in keys) or all(isinstance(k, str) for k in keys)):
        raise TypeMismatchError(
            "Filter 'sort' needs all numbers or all strings",
            suggestion="Pass attribute=... to sort objects by one of their fields",
        )
    order = sorted(range(len(items)), key=keys.__getitem__)
    return [items[i] for i in order]


def _filter_unique(
    value: Any, case_sensitive: bool = False, attribute: str | None = None
) -> list[Any]:
    """Remove duplicates, keeping the first occurrence.

    String comparison ignores case unless ``case_sensitive=true``.
    """
    key = _attribute_getter(attribute)
    seen: list[Any] = []
    result: list[Any] = []
    for item in _require_array(value, "unique"):
        marker = key(item)
        if isinstance(marker, str) and not case_sensitive:
            marker = marker.casefold()
        if any(values_equal(marker, other) for other in seen):
            continue
        seen.append(marker)
        result.append(item)
    return result


def _filter_keys(value: Any) -> list[str]:
    return list(_require_object(value, "keys"))


def _filter_values(value: Any) -> list[Any]:
    return list(_require_object(value, "values").values())


# ─────────────────────────────────────────────────────────────────────────────
# Numbers
# ─────────────────────────────────────────────────────────────────────────────


def _filter_round(value: Any, method: str = "common", precision: int = 0) -> int | float:
    """Round a number.

    ``method`` is ``common`` (half away from zero), ``ceil`` or ``floor``.
    With ``precision=0`` the result is an integer.
    """
    number = _require_number(value, "round")
    factor = 10 ** int(precision)
    scaled = number * factor
    if method == "common":
        rounded = math.floor(abs(scaled) + 0.5) * (1 if scaled >= 0 else -1)
    elif method == "ceil":
        rounded = math.ceil(scaled)
    elif method == "floor":
        rounded = math.floor(scaled)
    else:
        raise TypeError(f"unknown rounding method {method!r}, use common, ceil or floor")
    if precision == 0:
        return int(rounded)
    return rounded / factor


def _filter_abs(value: Any) -> int | float:
    return abs(_require_number(value, "abs"))


def _filter_int(value: Any, default: int = 0, base: int = 10) -> int:
    """Convert to an integer, returning ``default`` when conversion fails."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else default
    if isinstance(value, str):
        try:
            return int(value.strip(), base)
        except ValueError:
            try:
                return int(float(value))
            except (ValueError, OverflowError):
                return default
    return default


def _filter_float(value: Any, default: float = 0.0) -> float:
    if isinstance(value, (bool, int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return default
    return default


# ─────────────────────────────────────────────────────────────────────────────
# Conversion and safety
# ─────────────────────────────────────────────────────────────────────────────


def _filter_string(value: Any) -> str:
    return stringify(value)


def _json_default(value: Any) -> Any:
    if isinstance(value, Mapping):
        return dict(value)
    raise TypeError(f"{type(value).__name__} is not JSON serializable")


def _filter_json_encode(value: Any, pretty: bool = False) -> str:
    """Serialize to JSON.

    Usage:
        <script>const data = {{ data | json_encode | safe }};</script>
    """
    return json.dumps(
        value, ensure_ascii=False, indent=2 if pretty else None, default=_json_default
    )


def _filter_safe(value: Any) -> Markup:
    """Mark the value as safe so autoescaping leaves it alone."""
    return Markup(stringify(value))


def _filter_escape(value: Any) -> Markup:
    return Markup(html_escape(stringify(value)))


def _filter_default(subject: Any, /, value: Any = "") -> Any:
    """Fallback for an undefined or none value.

    Usage:
        {{ user.nickname | default(value="anonymous") }}
    """
    if subject is UNDEFINED or subject is None:
        return value
    return subject


# Default filters
DEFAULT_FILTERS: dict[str, Callable[..., Any]] = {
    "abs": _filter_abs,
    "capitalize": _filter_capitalize,
    "default": _filter_default,
    "escape": _filter_escape,
    "first": _filter_first,
    "float": _filter_float,
    "int": _filter_int,
    "join": _filter_join,
    "json_encode": _filter_json_encode,
    "keys": _filter_keys,
    "last": _filter_last,
    "length": _filter_length,
    "lower": _filter_lower,
    "replace": _filter_replace,
    "reverse": _filter_reverse,
    "round": _filter_round,
    "safe": _filter_safe,
    "sort": _filter_sort,
    "split": _filter_split,
    "string": _filter_string,
    "striptags": _filter_striptags,
    "title": _filter_title,
    "trim": _filter_trim,
    "truncate": _filter_truncate,
    "unique": _filter_unique,
    "upper": _filter_upper,
    "values": _filter_values,
    "wordcount": _filter_wordcount,
}
