"""Expression evaluation for the Quill Renderer.

Path lookup, operators, filters, tests and global function calls.
Operators are type-checked: a mismatch raises TypeMismatchError whether
or not the environment is strict about undefined values.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from difflib import get_close_matches
from typing import TYPE_CHECKING, Any

from quill.environment.exceptions import (
    ErrorCode,
    TemplateError,
    TemplateRuntimeError,
    TypeMismatchError,
    UndefinedError,
)
from quill.values import (
    UNDEFINED,
    is_number,
    is_truthy,
    stringify,
    type_name,
    values_equal,
)

if TYPE_CHECKING:
    from quill.nodes import (
        BinOp,
        BoolOp,
        Compare,
        Concat,
        Const,
        Dict,
        Expr,
        Filter,
        FuncCall,
        Getattr,
        Getitem,
        List,
        Name,
        Node,
        Test,
        UnaryOp,
    )
    from quill.runtime.scope import Activation

# Filters and tests that receive UNDEFINED instead of failing on a miss
_UNDEFINED_TOLERANT_FILTERS = frozenset({"default"})
_UNDEFINED_TOLERANT_TESTS = frozenset({"defined", "undefined"})


class ExpressionEvaluationMixin:
    """Mixin for evaluating expression nodes.

    Required Host Attributes:
        - _strict: bool
        - _filters, _tests, _globals: Mapping[str, Callable]
        - _eval
    """

    if TYPE_CHECKING:
        _strict: bool
        _filters: Mapping[str, Callable[..., Any]]
        _tests: Mapping[str, Callable[..., bool]]
        _globals: Mapping[str, Callable[..., Any]]

        def _eval(self, expr: Node, activation: Activation) -> Any: ...

    # ─────────────────────────────────────────────────────────────────────────
    # Literals and lookup
    # ─────────────────────────────────────────────────────────────────────────

    def _eval_const(self, node: Const, activation: Activation) -> Any:
        return node.value

    def _eval_name(self, node: Name, activation: Activation) -> Any:
        scope = activation.scope
        value = scope.get(node.name)
        if value is UNDEFINED:
            if self._strict:
                raise UndefinedError(node.name, available_names=scope.names())
            return None
        return value

    def _eval_list(self, node: List, activation: Activation) -> list[Any]:
        return [self._eval(item, activation) for item in node.items]

    def _eval_dict(self, node: Dict, activation: Activation) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key_node, value_node in zip(node.keys, node.values):
            key = self._eval(key_node, activation)
            if not isinstance(key, str):
                raise TypeMismatchError(
                    f"Object keys must be strings, got {type_name(key)}",
                    expression=expression_text(key_node),
                )
            result[key] = self._eval(value_node, activation)
        return result

    def _eval_getattr(self, node: Getattr, activation: Activation) -> Any:
        container = self._eval(node.obj, activation)
        key: str | int = int(node.attr) if node.attr.isdigit() else node.attr
        return self._lookup_member(container, key, node)

    def _eval_getitem(self, node: Getitem, activation: Activation) -> Any:
        container = self._eval(node.obj, activation)
        key = self._eval(node.key, activation)
        return self._lookup_member(container, key, node)

    def _lookup_member(self, container: Any, key: Any, node: Expr, probing: bool = False) -> Any:
        """Index an Object by string key or an Array by integer index.

        Misses raise UndefinedError and non-containers TypeMismatchError;
        both evaluate to None when the environment is not strict. With
        ``probing`` a missing key or index returns UNDEFINED instead.
        """
        if isinstance(container, Mapping):
            if is_number(key) and not isinstance(key, float):
                key = str(key)
            if not isinstance(key, str):
                raise TypeMismatchError(
                    f"Object keys are strings, cannot index with {type_name(key)}",
                    expression=expression_text(node),
                )
            try:
                return container[key]
            except KeyError:
                if probing:
                    return UNDEFINED
                if not self._strict:
                    return None
                raise UndefinedError(
                    key,
                    kind="key",
                    available_names=frozenset(container),
                    expression=expression_text(node),
                ) from None

        if isinstance(container, (list, tuple)):
            if isinstance(key, bool) or not isinstance(key, int):
                if not self._strict:
                    return None
                raise TypeMismatchError(
                    f"Arrays are indexed by integers, not {type_name(key)} {key!r}",
                    expression=expression_text(node),
                    suggestion="Use a position such as .0 or [0]",
                )
            if 0 <= key < len(container):
                return container[key]
            if probing:
                return UNDEFINED
            if not self._strict:
                return None
            raise UndefinedError(
                str(key),
                kind="index",
                expression=expression_text(node),
                suggestion=f"The array has {len(container)} items",
            )

        if not self._strict:
            return None
        raise TypeMismatchError(
            f"Cannot look up {key!r} on {type_name(container)}",
            expression=expression_text(node),
            values={"value": container},
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Calls, filters and tests
    # ─────────────────────────────────────────────────────────────────────────

    def _eval_func_call(self, node: FuncCall, activation: Activation) -> Any:
        func = self._globals.get(node.name)
        if func is None:
            raise UndefinedError(
                node.name, kind="function", available_names=frozenset(self._globals)
            )
        args = [self._eval(arg, activation) for arg in node.args]
        kwargs = {name: self._eval(value, activation) for name, value in node.kwargs.items()}
        return self._call(func, args, kwargs, f"function '{node.name}'")

    def _eval_filter(self, node: Filter, activation: Activation) -> Any:
        if node.name in _UNDEFINED_TOLERANT_FILTERS:
            value = self._probe(node.value, activation)
        else:
            value = self._eval(node.value, activation)
        return self._apply_filter(node, value, activation)

    def _apply_filter(self, node: Filter, value: Any, activation: Activation) -> Any:
        func = self._filters.get(node.name)
        if func is None:
            matches = get_close_matches(node.name, self._filters, n=1, cutoff=0.6)
            raise TemplateRuntimeError(
                f"Unknown filter '{node.name}'",
                suggestion=f"Did you mean '{matches[0]}'?" if matches else None,
            )
        args = [self._eval(arg, activation) for arg in node.args]
        kwargs = {name: self._eval(arg, activation) for name, arg in node.kwargs.items()}
        return self._call(func, [value, *args], kwargs, f"filter '{node.name}'")

    def _eval_test(self, node: Test, activation: Activation) -> bool:
        func = self._tests.get(node.name)
        if func is None:
            matches = get_close_matches(node.name, self._tests, n=1, cutoff=0.6)
            raise TemplateRuntimeError(
                f"Unknown test '{node.name}'",
                suggestion=f"Did you mean '{matches[0]}'?" if matches else None,
            )
        if node.name in _UNDEFINED_TOLERANT_TESTS:
            value = self._probe(node.value, activation)
        else:
            value = self._eval(node.value, activation)
        args = [self._eval(arg, activation) for arg in node.args]
        result = bool(self._call(func, [value, *args], {}, f"test '{node.name}'"))
        return not result if node.negated else result

    def _probe(self, expr: Expr, activation: Activation) -> Any:
        """Evaluate ``expr``, returning UNDEFINED when a path misses.

        Only a variable path (``a``, ``a.b``, ``a[k]``) is probed: an unbound
        name or a missing key or index gives UNDEFINED in both strict and
        tolerant environments. Anything else, including subscript keys and
        macro or filter calls, evaluates normally and its errors propagate.
        """
        kind = type(expr).__name__
        if kind == "Name":
            return activation.scope.get(expr.name)
        if kind in ("Getattr", "Getitem"):
            container = self._probe(expr.obj, activation)
            if container is UNDEFINED:
                return UNDEFINED
            if kind == "Getattr":
                key: Any = int(expr.attr) if expr.attr.isdigit() else expr.attr
            else:
                key = self._eval(expr.key, activation)
            return self._lookup_member(container, key, expr, probing=True)
        return self._eval(expr, activation)

    def _call(
        self, func: Callable[..., Any], args: list[Any], kwargs: dict[str, Any], what: str
    ) -> Any:
        try:
            return func(*args, **kwargs)
        except (TemplateError, RecursionError):
            raise
        except TypeError as e:
            raise TemplateRuntimeError(
                f"Invalid arguments for {what}: {e}",
                suggestion="Check the argument names and count",
            ) from e
        except Exception as e:
            error = TemplateRuntimeError(f"{what[0].upper()}{what[1:]} failed: {e}")
            error.code = ErrorCode.FILTER_ERROR
            raise error from e

    # ─────────────────────────────────────────────────────────────────────────
    # Operators
    # ─────────────────────────────────────────────────────────────────────────

    def _eval_binop(self, node: BinOp, activation: Activation) -> Any:
        left = self._eval(node.left, activation)
        right = self._eval(node.right, activation)
        return arithmetic(node.op, left, right, node)

    def _eval_unaryop(self, node: UnaryOp, activation: Activation) -> Any:
        operand = self._eval(node.operand, activation)
        if node.op == "not":
            return not is_truthy(operand)
        if not is_number(operand):
            raise TypeMismatchError(
                f"Cannot apply unary '{node.op}' to {type_name(operand)}",
                expression=expression_text(node),
                values={"operand": operand},
            )
        return -operand if node.op == "-" else operand

    def _eval_compare(self, node: Compare, activation: Activation) -> bool:
        left = self._eval(node.left, activation)
        for op, comparator in zip(node.ops, node.comparators):
            right = self._eval(comparator, activation)
            if not compare(op, left, right, node):
                return False
            left = right
        return True

    def _eval_boolop(self, node: BoolOp, activation: Activation) -> bool:
        if node.op == "and":
            return all(is_truthy(self._eval(value, activation)) for value in node.values)
        return any(is_truthy(self._eval(value, activation)) for value in node.values)

    def _eval_concat(self, node: Concat, activation: Activation) -> str:
        return "".join(stringify(self._eval(part, activation)) for part in node.nodes)


def arithmetic(op: str, left: Any, right: Any, node: Expr) -> Any:
    """Apply ``+ - * / // %``.

    Numbers only, except that ``+`` also joins two strings or two arrays.
    ``/`` always produces a float.
    """
    if op == "+":
        if isinstance(left, str) and isinstance(right, str):
            return left + right
        if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
            return [*left, *right]

    if not (is_number(left) and is_number(right)):
        raise TypeMismatchError(
            f"Cannot apply '{op}' to {type_name(left)} and {type_name(right)}",
            expression=expression_text(node),
            values={"left": left, "right": right},
            suggestion="Convert operands with the int or float filter",
        )

    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right

    if right == 0:
        raise TemplateRuntimeError(
            "Division by zero",
            expression=expression_text(node),
            values={"left": left, "right": right},
        )
    if op == "/":
        return left / right
    if op == "//":
        return left // right
    return left % right


def compare(op: str, left: Any, right: Any, node: Expr) -> bool:
    """Apply one comparison operator; equality never raises."""
    if op == "==":
        return values_equal(left, right)
    if op == "!=":
        return not values_equal(left, right)
    if op == "in":
        return contains(right, left, node)
    if op == "not in":
        return not contains(right, left, node)

    if not (
        (is_number(left) and is_number(right))
        or (isinstance(left, str) and isinstance(right, str))
    ):
        raise TypeMismatchError(
            f"Cannot compare {type_name(left)} with {type_name(right)} using '{op}'",
            expression=expression_text(node),
            values={"left": left, "right": right},
        )
    if op == "<":
        return left < right
    if op == ">":
        return left > right
    if op == "<=":
        return left <= right
    return left >= right


def contains(container: Any, item: Any, node: Expr) -> bool:
    """``item in container`` for strings, arrays and objects."""
    if isinstance(container, str):
        if not isinstance(item, str):
            raise TypeMismatchError(
                f"Cannot search a string for {type_name(item)}",
                expression=expression_text(node),
            )
        return item in container
    if isinstance(container, (list, tuple)):
        return any(values_equal(item, element) for element in container)
    if isinstance(container, Mapping):
        return isinstance(item, str) and item in container
    raise TypeMismatchError(
        f"'in' needs a string, array or object, got {type_name(container)}",
        expression=expression_text(node),
        values={"container": container},
    )


def expression_text(node: Any) -> str:
    """Approximate source text of an expression, for error messages."""
    kind = type(node).__name__
    if kind == "Name":
        return node.name
    if kind == "Const":
        return repr(node.value) if isinstance(node.value, str) else stringify(node.value)
    if kind == "Getattr":
        return f"{expression_text(node.obj)}.{node.attr}"
    if kind == "Getitem":
        return f"{expression_text(node.obj)}[{expression_text(node.key)}]"
    if kind == "BinOp":
        return f"{expression_text(node.left)} {node.op} {expression_text(node.right)}"
    if kind == "UnaryOp":
        sep = " " if node.op == "not" else ""
        return f"{node.op}{sep}{expression_text(node.operand)}"
    if kind == "Compare":
        parts = [expression_text(node.left)]
        for op, comparator in zip(node.ops, node.comparators):
            parts.extend((op, expression_text(comparator)))
        return " ".join(parts)
    if kind == "Filter":
        return f"{expression_text(node.value)} | {node.name}"
    if kind == "FuncCall":
        return f"{node.name}(...)"
    if kind == "MacroCall":
        return f"{node.namespace}::{node.name}(...)"
    return kind
