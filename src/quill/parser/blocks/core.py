"""Block stack management for the Quill parser.

Every block statement pushes an entry when it opens and pops it when its
end tag is consumed, so an unclosed block is reported at its opening tag.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from quill._types import Token, TokenType
from quill.environment.exceptions import ErrorCode

if TYPE_CHECKING:
    from quill.parser.errors import ParseError


class BlockStackMixin:
    """Open-block tracking and end-tag consumption.

    Required Host Attributes:
        - _block_stack: list[tuple[str, int, int]]  (kind, lineno, col_offset)
        - TokenNavigationMixin methods
    """

    if TYPE_CHECKING:
        _tokens: Sequence[Token]
        _pos: int
        _block_stack: list[tuple[str, int, int]]

        @property
        def _current(self) -> Token: ...
        def _advance(self) -> Token: ...
        def _expect(self, token_type: TokenType) -> Token: ...
        def _peek(self, offset: int = 0) -> Token: ...
        def _error(
            self,
            message: str,
            token: Token | None = None,
            suggestion: str | None = None,
            expected: str | None = None,
            code: ErrorCode | None = None,
        ) -> ParseError: ...

    # Tags that close a body
    _END_KEYWORDS = frozenset({"endif", "endfor", "endmacro", "endfilter"})
    # Tags that split a body without closing the block
    _CONTINUATION_KEYWORDS = frozenset({"elif", "else"})

    def _push_block(self, kind: str, token: Token) -> None:
        self._block_stack.append((kind, token.lineno, token.col_offset))

    def _at_block_keyword(self, *keywords: str) -> bool:
        """True if the cursor sits on ``{% keyword`` for one of ``keywords``."""
        if self._current.type is not TokenType.BLOCK_BEGIN:
            return False
        token = self._peek(1)
        return token.type is TokenType.NAME and token.value in keywords

    def _unclosed_block_error(self) -> ParseError:
        kind, lineno, col = self._block_stack[-1]
        opening = Token(TokenType.NAME, kind, lineno, col)
        return self._error(
            f"Unclosed '{kind}' block: reached end of template without {{% end{kind} %}}",
            token=opening,
            suggestion=f"Add {{% end{kind} %}} to close the block opened here",
            expected=f"end{kind}",
            code=ErrorCode.UNCLOSED_BLOCK,
        )

    def _consume_end_tag(self, kind: str, trailing_name: str | None = None) -> None:
        """Consume ``{% end<kind> [trailing_name] %}`` and pop the block.

        Raises ParseError for end of template, a different end tag, or a
        trailing name that does not match.
        """
        if self._current.type is TokenType.EOF:
            raise self._unclosed_block_error()

        self._expect(TokenType.BLOCK_BEGIN)
        keyword = self._current
        expected_tag = f"end{kind}"
        if keyword.type is not TokenType.NAME or keyword.value != expected_tag:
            raise self._error(
                f"Mismatched end tag: expected {{% {expected_tag} %}}, found '{keyword.value}'",
                token=keyword,
                expected=expected_tag,
                code=ErrorCode.TAG_MISMATCH,
            )
        self._advance()

        if trailing_name is not None:
            name_token = self._current
            if name_token.type is not TokenType.NAME or name_token.value != trailing_name:
                found = name_token.value if name_token.type is TokenType.NAME else "nothing"
                raise self._error(
                    f"{{% {expected_tag} %}} must repeat the name '{trailing_name}', "
                    f"found {found}",
                    token=name_token,
                    suggestion=f"Close with {{% {expected_tag} {trailing_name} %}}",
                    expected=trailing_name,
                    code=ErrorCode.TAG_MISMATCH,
                )
            self._advance()

        self._expect(TokenType.BLOCK_END)
        self._block_stack.pop()
