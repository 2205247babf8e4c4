"""Control flow block parsing for the Quill parser.

Provides a mixin for if/elif/else, for/else, break and continue.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from quill._types import TokenType
from quill.analysis.visitor import references_name
from quill.nodes import Break, Continue, For, If
from quill.parser.blocks.core import BlockStackMixin

if TYPE_CHECKING:
    from quill.nodes import Expr, Node


class ControlFlowBlockParsingMixin(BlockStackMixin):
    """Mixin for parsing control flow blocks.

    Required Host Attributes:
        - All from BlockStackMixin
        - _parse_body, _parse_expression
    """

    if TYPE_CHECKING:
        def _parse_body(self) -> list[Node]: ...
        def _parse_expression(self) -> Expr: ...
        def _match(self, *types: TokenType) -> bool: ...
        def _match_name(self, *values: str) -> bool: ...
        def _expect_name(self, what: str = "name") -> str: ...

    def _parse_if(self) -> If:
        """Parse {% if cond %}...{% elif cond %}...{% else %}...{% endif %}."""
        start = self._advance()  # consume 'if'
        self._push_block("if", start)

        branches: list[tuple[Expr, Sequence[Node]]] = []
        test = self._parse_expression()
        self._expect(TokenType.BLOCK_END)
        branches.append((test, tuple(self._parse_body())))

        else_: Sequence[Node] = ()
        while self._at_block_keyword("elif", "else"):
            self._advance()  # consume '{%'
            keyword = self._advance()
            if keyword.value == "elif":
                test = self._parse_expression()
                self._expect(TokenType.BLOCK_END)
                branches.append((test, tuple(self._parse_body())))
                continue
            self._expect(TokenType.BLOCK_END)
            else_ = tuple(self._parse_body())
            if self._at_block_keyword("elif", "else"):
                raise self._error(
                    f"Unexpected '{self._peek(1).value}' after 'else' in if block",
                    token=self._peek(1),
                    suggestion="'else' must be the last branch of an if block",
                )
            break

        self._consume_end_tag("if")
        return If(
            lineno=start.lineno,
            col_offset=start.col_offset,
            branches=tuple(branches),
            else_=else_,
        )

    def _parse_for(self) -> For:
        """Parse {% for x in seq %}...{% else %}...{% endfor %}.

        ``{% for key, value in obj %}`` binds two targets.
        """
        start = self._advance()  # consume 'for'
        self._push_block("for", start)

        first = self._expect_name("loop variable")
        key: str | None = None
        target = first
        if self._match(TokenType.COMMA):
            self._advance()
            key = first
            target = self._expect_name("loop variable")

        if not self._match_name("in"):
            raise self._error(
                "Expected 'in' after loop variable",
                suggestion="Loop syntax: {% for item in items %}",
                expected="in",
            )
        self._advance()  # consume 'in'
        iterable = self._parse_expression()
        self._expect(TokenType.BLOCK_END)

        body = tuple(self._parse_body())

        else_: Sequence[Node] = ()
        if self._at_block_keyword("else"):
            self._advance()  # consume '{%'
            self._advance()  # consume 'else'
            self._expect(TokenType.BLOCK_END)
            else_ = tuple(self._parse_body())
        if self._at_block_keyword("elif"):
            raise self._error("Unexpected 'elif' in for block", token=self._peek(1))

        self._consume_end_tag("for")
        return For(
            lineno=start.lineno,
            col_offset=start.col_offset,
            target=target,
            iter=iterable,
            body=body,
            key=key,
            else_=else_,
            uses_loop=references_name(body, "loop"),
        )

    def _parse_break(self) -> Break:
        """Parse {% break %}; placement is checked when rendering."""
        token = self._advance()
        self._expect(TokenType.BLOCK_END)
        return Break(lineno=token.lineno, col_offset=token.col_offset)

    def _parse_continue(self) -> Continue:
        token = self._advance()
        self._expect(TokenType.BLOCK_END)
        return Continue(lineno=token.lineno, col_offset=token.col_offset)
