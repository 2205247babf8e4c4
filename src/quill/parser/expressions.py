"""Expression parsing for the Quill parser.

Recursive descent, lowest precedence first::

    or → and → not → comparison (== != < > <= >= in, not in, is)
       → concat (~) → additive (+ -) → multiplicative (* / // %)
       → unary (- +) → postfix (.attr .0 [key] |filter) → primary
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from quill._types import Token, TokenType
from quill.environment.exceptions import ErrorCode
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
    MacroCall,
    Name,
    Test,
    UnaryOp,
)
from quill.parser.errors import describe_token

if TYPE_CHECKING:
    from quill.parser.errors import ParseError

_COMPARE_OPS = {
    TokenType.EQ: "==",
    TokenType.NE: "!=",
    TokenType.LT: "<",
    TokenType.GT: ">",
    TokenType.LE: "<=",
    TokenType.GE: ">=",
}
_ADDITIVE_OPS = {TokenType.ADD: "+", TokenType.SUB: "-"}
_MULTIPLICATIVE_OPS = {
    TokenType.MUL: "*",
    TokenType.DIV: "/",
    TokenType.FLOORDIV: "//",
    TokenType.MOD: "%",
}
_CONSTANTS: dict[str, bool | None] = {
    "true": True,
    "True": True,
    "false": False,
    "False": False,
    "none": None,
    "None": None,
}


class ExpressionParsingMixin:
    """Mixin for parsing expressions.

    Required Host Attributes:
        - All from TokenNavigationMixin
    """

    if TYPE_CHECKING:
        _tokens: Sequence[Token]
        _pos: int

        @property
        def _current(self) -> Token: ...
        def _advance(self) -> Token: ...
        def _peek(self, offset: int = 0) -> Token: ...
        def _match(self, *types: TokenType) -> bool: ...
        def _match_name(self, *values: str) -> bool: ...
        def _expect(self, token_type: TokenType) -> Token: ...
        def _expect_name(self, what: str = "name") -> str: ...
        def _error(
            self,
            message: str,
            token: Token | None = None,
            suggestion: str | None = None,
            expected: str | None = None,
            code: ErrorCode | None = None,
        ) -> ParseError: ...

    def _parse_expression(self) -> Expr:
        return self._parse_or()

    def _parse_or(self) -> Expr:
        start = self._current
        values = [self._parse_and()]
        while self._match_name("or"):
            self._advance()
            values.append(self._parse_and())
        if len(values) == 1:
            return values[0]
        return BoolOp(start.lineno, start.col_offset, op="or", values=tuple(values))

    def _parse_and(self) -> Expr:
        start = self._current
        values = [self._parse_not()]
        while self._match_name("and"):
            self._advance()
            values.append(self._parse_not())
        if len(values) == 1:
            return values[0]
        return BoolOp(start.lineno, start.col_offset, op="and", values=tuple(values))

    def _parse_not(self) -> Expr:
        if self._match_name("not"):
            token = self._advance()
            return UnaryOp(token.lineno, token.col_offset, op="not", operand=self._parse_not())
        return self._parse_comparison()

    def _parse_comparison(self) -> Expr:
        start = self._current
        left = self._parse_test_operand()
        ops: list[str] = []
        comparators: list[Expr] = []

        while True:
            token = self._current
            if token.type in _COMPARE_OPS:
                op = _COMPARE_OPS[token.type]
                self._advance()
            elif self._match_name("in"):
                op = "in"
                self._advance()
            elif self._match_name("not") and self._peek(1).type is TokenType.NAME and (
                self._peek(1).value == "in"
            ):
                op = "not in"
                self._advance()
                self._advance()
            else:
                break
            ops.append(op)
            comparators.append(self._parse_test_operand())

        if not ops:
            return left
        return Compare(
            start.lineno,
            start.col_offset,
            left=left,
            ops=tuple(ops),
            comparators=tuple(comparators),
        )

    def _parse_test_operand(self) -> Expr:
        """Parse a concat expression followed by any ``is [not] test`` suffixes."""
        expr = self._parse_concat()
        while self._match_name("is"):
            token = self._advance()
            negated = False
            if self._match_name("not"):
                self._advance()
                negated = True
            name = self._expect_name("test name")
            args: tuple[Expr, ...] = ()
            if self._match(TokenType.LPAREN):
                positional, keywords = self._parse_call_args()
                if keywords:
                    raise self._error(
                        f"Test '{name}' takes positional arguments only", token=token
                    )
                args = tuple(positional)
            expr = Test(
                token.lineno,
                token.col_offset,
                value=expr,
                name=name,
                args=args,
                negated=negated,
            )
        return expr

    def _parse_concat(self) -> Expr:
        start = self._current
        nodes = [self._parse_additive()]
        while self._match(TokenType.TILDE):
            self._advance()
            nodes.append(self._parse_additive())
        if len(nodes) == 1:
            return nodes[0]
        return Concat(start.lineno, start.col_offset, nodes=tuple(nodes))

    def _parse_additive(self) -> Expr:
        left = self._parse_multiplicative()
        while self._current.type in _ADDITIVE_OPS:
            token = self._advance()
            right = self._parse_multiplicative()
            left = BinOp(
                token.lineno, token.col_offset, op=_ADDITIVE_OPS[token.type], left=left, right=right
            )
        return left

    def _parse_multiplicative(self) -> Expr:
        left = self._parse_unary()
        while self._current.type in _MULTIPLICATIVE_OPS:
            token = self._advance()
            right = self._parse_unary()
            left = BinOp(
                token.lineno,
                token.col_offset,
                op=_MULTIPLICATIVE_OPS[token.type],
                left=left,
                right=right,
            )
        return left

    def _parse_unary(self) -> Expr:
        if self._match(TokenType.SUB, TokenType.ADD):
            token = self._advance()
            operand = self._parse_unary()
            # Fold signed numeric literals
            if (
                isinstance(operand, Const)
                and isinstance(operand.value, (int, float))
                and not isinstance(operand.value, bool)
            ):
                value = -operand.value if token.type is TokenType.SUB else operand.value
                return Const(token.lineno, token.col_offset, value=value)
            return UnaryOp(token.lineno, token.col_offset, op=token.value, operand=operand)
        return self._parse_postfix(self._parse_primary())

    def _parse_postfix(self, expr: Expr) -> Expr:
        while True:
            token = self._current
            if token.type is TokenType.DOT:
                self._advance()
                attr = self._current
                if attr.type not in (TokenType.NAME, TokenType.INTEGER):
                    raise self._error(
                        f"Expected attribute name or index after '.', found {describe_token(attr)}",
                        expected="name",
                    )
                self._advance()
                expr = Getattr(token.lineno, token.col_offset, obj=expr, attr=attr.value)
            elif token.type is TokenType.LBRACKET:
                self._advance()
                key = self._parse_expression()
                self._expect(TokenType.RBRACKET)
                expr = Getitem(token.lineno, token.col_offset, obj=expr, key=key)
            elif token.type is TokenType.PIPE:
                self._advance()
                expr = self._parse_filter(expr)
            else:
                return expr

    def _parse_filter(self, value: Expr) -> Filter:
        """Parse ``name`` or ``name(args)`` of a filter applied to ``value``."""
        token = self._current
        name = self._expect_name("filter name")
        args: Sequence[Expr] = ()
        kwargs: dict[str, Expr] = {}
        if self._match(TokenType.LPAREN):
            args, kwargs = self._parse_call_args()
        return Filter(
            token.lineno,
            token.col_offset,
            value=value,
            name=name,
            args=tuple(args),
            kwargs=kwargs,
        )

    def _parse_primary(self) -> Expr:
        token = self._current

        if token.type is TokenType.STRING:
            self._advance()
            return Const(token.lineno, token.col_offset, value=token.value)
        if token.type is TokenType.INTEGER:
            self._advance()
            return Const(token.lineno, token.col_offset, value=int(token.value))
        if token.type is TokenType.FLOAT:
            self._advance()
            return Const(token.lineno, token.col_offset, value=float(token.value))

        if token.type is TokenType.NAME:
            if token.value in _CONSTANTS:
                self._advance()
                return Const(token.lineno, token.col_offset, value=_CONSTANTS[token.value])
            following = self._peek(1).type
            if following is TokenType.NAMESPACE:
                return self._parse_macro_call()
            self._advance()
            if following is TokenType.LPAREN:
                args, kwargs = self._parse_call_args()
                return FuncCall(
                    token.lineno, token.col_offset, name=token.value, args=tuple(args), kwargs=kwargs
                )
            return Name(token.lineno, token.col_offset, name=token.value)

        if token.type is TokenType.LBRACKET:
            return self._parse_list()
        if token.type is TokenType.LBRACE:
            return self._parse_dict()
        if token.type is TokenType.LPAREN:
            self._advance()
            expr = self._parse_expression()
            self._expect(TokenType.RPAREN)
            return expr

        raise self._error(
            f"Expected an expression, found {describe_token(token)}",
            expected="expression",
            code=ErrorCode.INVALID_EXPRESSION,
        )

    def _parse_macro_call(self) -> MacroCall:
        """Parse ``namespace::name(args)``."""
        start = self._advance()  # namespace
        self._advance()  # consume '::'
        name = self._expect_name("macro name")
        if not self._match(TokenType.LPAREN):
            raise self._error(
                f"Expected '(' after macro '{start.value}::{name}'",
                suggestion=f"Call macros with parentheses: {start.value}::{name}()",
                expected="(",
            )
        args, kwargs = self._parse_call_args()
        return MacroCall(
            start.lineno,
            start.col_offset,
            namespace=start.value,
            name=name,
            args=tuple(args),
            kwargs=kwargs,
        )

    def _parse_call_args(self) -> tuple[list[Expr], dict[str, Expr]]:
        """Parse ``(a, b, name=c)``; positional arguments must come first."""
        self._expect(TokenType.LPAREN)
        args: list[Expr] = []
        kwargs: dict[str, Expr] = {}

        while not self._match(TokenType.RPAREN):
            if args or kwargs:
                self._expect(TokenType.COMMA)
                if self._match(TokenType.RPAREN):
                    break

            if self._current.type is TokenType.NAME and self._peek(1).type is TokenType.ASSIGN:
                name_token = self._advance()
                self._advance()  # consume '='
                if name_token.value in kwargs:
                    raise self._error(
                        f"Duplicate keyword argument '{name_token.value}'", token=name_token
                    )
                kwargs[name_token.value] = self._parse_expression()
            else:
                if kwargs:
                    raise self._error(
                        "Positional argument follows keyword argument",
                        suggestion="Pass positional arguments before name=value arguments",
                    )
                args.append(self._parse_expression())

        self._expect(TokenType.RPAREN)
        return args, kwargs

    def _parse_list(self) -> List:
        start = self._advance()  # consume '['
        items: list[Expr] = []
        while not self._match(TokenType.RBRACKET):
            if items:
                self._expect(TokenType.COMMA)
                if self._match(TokenType.RBRACKET):
                    break
            items.append(self._parse_expression())
        self._expect(TokenType.RBRACKET)
        return List(start.lineno, start.col_offset, items=tuple(items))

    def _parse_dict(self) -> Dict:
        """Parse ``{key: value, ...}``; keys must evaluate to strings."""
        start = self._advance()  # consume '{'
        keys: list[Expr] = []
        values: list[Expr] = []
        while not self._match(TokenType.RBRACE):
            if keys:
                self._expect(TokenType.COMMA)
                if self._match(TokenType.RBRACE):
                    break
            keys.append(self._parse_expression())
            self._expect(TokenType.COLON)
            values.append(self._parse_expression())
        self._expect(TokenType.RBRACE)
        return Dict(start.lineno, start.col_offset, keys=tuple(keys), values=tuple(values))
