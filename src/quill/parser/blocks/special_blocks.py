"""Special block parsing for the Quill parser: {% filter %}."""

from __future__ import annotations

from typing import TYPE_CHECKING

from quill._types import TokenType
from quill.nodes import Const, FilterBlock
from quill.parser.blocks.core import BlockStackMixin

if TYPE_CHECKING:
    from quill.nodes import Expr, Filter, Node


class SpecialBlockParsingMixin(BlockStackMixin):
    """Mixin for blocks that transform their rendered body."""

    if TYPE_CHECKING:
        def _parse_body(self) -> list[Node]: ...
        def _parse_filter(self, value: Expr) -> Filter: ...

    def _parse_filter_block(self) -> FilterBlock:
        """Parse {% filter name(args) %}...{% endfilter %}.

        The body is rendered to a string which becomes the filter's input;
        the ``value`` of the stored Filter node is a placeholder.
        """
        start = self._advance()  # consume 'filter'
        self._push_block("filter", start)

        placeholder = Const(lineno=start.lineno, col_offset=start.col_offset, value=None)
        filter_node = self._parse_filter(placeholder)
        self._expect(TokenType.BLOCK_END)

        body = self._parse_body()
        self._consume_end_tag("filter")
        return FilterBlock(
            lineno=start.lineno,
            col_offset=start.col_offset,
            filter=filter_node,
            body=tuple(body),
        )
