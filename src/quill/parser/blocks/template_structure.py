"""Template structure block parsing for the Quill parser.

Provides a mixin for parsing {% import %} and {% include %}.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from quill._types import TokenType
from quill.environment.exceptions import ErrorCode
from quill.nodes import Import, Include
from quill.parser.blocks.core import BlockStackMixin

if TYPE_CHECKING:
    from quill._types import Token


class TemplateStructureBlockParsingMixin(BlockStackMixin):
    """Mixin for parsing template structure blocks.

    Required Host Attributes:
        - All from BlockStackMixin
        - All from TokenNavigationMixin
        - _import_aliases: dict[str, int]
    """

    if TYPE_CHECKING:
        _import_aliases: dict[str, int]

        def _match_name(self, *values: str) -> bool: ...

    def _parse_template_name(self, keyword: str) -> str:
        if self._current.type is not TokenType.STRING:
            raise self._error(
                f"Expected a quoted template name after '{keyword}'",
                suggestion=f'Write {{% {keyword} "name.html" ... %}}',
                expected="string",
                code=ErrorCode.INVALID_IMPORT,
            )
        return self._advance().value

    def _parse_import(self) -> Import:
        """Parse {% import "template.html" as alias %}.

        The target template is resolved by name when rendering, so it may be
        registered before or after the importing template.
        """
        start = self._advance()  # consume 'import'
        if self._block_stack:
            raise self._error(
                "Imports must appear at the top level of a template",
                token=start,
                code=ErrorCode.INVALID_IMPORT,
            )
        template = self._parse_template_name("import")

        if not self._match_name("as"):
            raise self._error(
                "Expected 'as' after template name in import",
                expected="as",
                code=ErrorCode.INVALID_IMPORT,
            )
        self._advance()  # consume 'as'

        alias_token: Token = self._current
        alias = self._expect_name("alias name")
        if alias == "self":
            raise self._error(
                "'self' is reserved for the current template's macros",
                token=alias_token,
                code=ErrorCode.INVALID_IMPORT,
            )
        if alias in self._import_aliases:
            raise self._error(
                f"Alias '{alias}' is already used by the import on line "
                f"{self._import_aliases[alias]}",
                token=alias_token,
                code=ErrorCode.INVALID_IMPORT,
            )
        self._import_aliases[alias] = alias_token.lineno

        self._expect(TokenType.BLOCK_END)
        return Import(
            lineno=start.lineno,
            col_offset=start.col_offset,
            template=template,
            alias=alias,
        )

    def _parse_include(self) -> Include:
        """Parse {% include "partial.html" [ignore missing] %}."""
        start = self._advance()  # consume 'include'
        template = self._parse_template_name("include")

        ignore_missing = False
        if self._match_name("ignore"):
            self._advance()
            if not self._match_name("missing"):
                raise self._error("Expected 'missing' after 'ignore'", expected="missing")
            self._advance()
            ignore_missing = True

        self._expect(TokenType.BLOCK_END)
        return Include(
            lineno=start.lineno,
            col_offset=start.col_offset,
            template=template,
            ignore_missing=ignore_missing,
        )
