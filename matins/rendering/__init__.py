"""Markdown render engine: one block parser, two independent visitors.

Public API
----------
parse_blocks
    Parse canonical markdown into typed block nodes.
markdown_to_html
    Styled HTML rendering.
markdown_to_plain_text
    Plain-text rendering.

"""

from __future__ import annotations

from matins.rendering.blocks import (
    BlankLine,
    Block,
    BulletList,
    CodeBlock,
    Heading,
    ListItem,
    Paragraph,
    Rule,
    Table,
    parse_blocks,
    split_cells,
)
from matins.rendering.html import escape_html, markdown_to_html, render_inline
from matins.rendering.plain_text import markdown_to_plain_text, plain_inline

__all__ = [
    "BlankLine",
    "Block",
    "BulletList",
    "CodeBlock",
    "Heading",
    "ListItem",
    "Paragraph",
    "Rule",
    "Table",
    "escape_html",
    "markdown_to_html",
    "markdown_to_plain_text",
    "parse_blocks",
    "plain_inline",
    "render_inline",
    "split_cells",
]
