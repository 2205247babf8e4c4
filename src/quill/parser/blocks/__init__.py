"""Block parsing mixins for the Quill parser.

Each mixin handles one family of block statements; the Parser composes
them all.
"""

from quill.parser.blocks.control_flow import ControlFlowBlockParsingMixin
from quill.parser.blocks.core import BlockStackMixin
from quill.parser.blocks.functions import FunctionBlockParsingMixin
from quill.parser.blocks.special_blocks import SpecialBlockParsingMixin
from quill.parser.blocks.template_structure import TemplateStructureBlockParsingMixin
from quill.parser.blocks.variables import VariableBlockParsingMixin

__all__ = [
    "BlockStackMixin",
    "ControlFlowBlockParsingMixin",
    "FunctionBlockParsingMixin",
    "SpecialBlockParsingMixin",
    "TemplateStructureBlockParsingMixin",
    "VariableBlockParsingMixin",
]
