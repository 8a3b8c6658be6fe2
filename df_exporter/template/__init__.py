"""
Animated DF Code Templates

Template block structures and the builder that lowers a rig into them.
"""

from df_exporter.template.blocks import (
    SLOT_LIMIT,
    CodeBlock,
    CodeTemplate,
    TemplateItem,
)
from df_exporter.template.builder import TemplateBuilder, ListChunker, build_code_template

__all__ = [
    'SLOT_LIMIT',
    'CodeBlock',
    'CodeTemplate',
    'TemplateItem',
    'TemplateBuilder',
    'ListChunker',
    'build_code_template',
]
