"""Render canonical markdown as plain text for text-only mail clients."""

from __future__ import annotations

import re
import typing as typ

from matins.rendering.blocks import (
    BlankLine,
    BulletList,
    CodeBlock,
    Heading,
    Paragraph,
    Rule,
    Table,
    parse_blocks,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from matins.rendering.blocks import Block

_INLINE_CODE = re.compile(r"`([^`]+)`")
_LINK = re.compile(r"\[([^\]]+)\]\(([^)\s]+)\)")
_BOLD = re.compile(r"\*\*([^*]+)\*\*")
_ITALIC = re.compile(r"(?<![*\w])\*(?![\s*])([^*]+?)(?<!\s)\*(?![*\w])")
_BULLET = re.compile(r"^(\s*)[-*+]\s+(.+)$")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")


def plain_inline(text: str) -> str:
    """Strip inline markup, writing links as ``label (url)``.

    Examples
    --------
    >>> plain_inline("**PROJ-1** see [Open](https://x.test)")
    'PROJ-1 see Open (https://x.test)'

    """
    text = _INLINE_CODE.sub(r"\1", text)
    text = _LINK.sub(r"\1 (\2)", text)
    text = _BOLD.sub(r"\1", text)
    return _ITALIC.sub(r"\1", text)


def _list_lines(block: BulletList) -> list[str]:
    lines: list[str] = []
    for line in block.lines:
        if bullet := _BULLET.match(line):
            lines.append(bullet.group(1) + plain_inline(bullet.group(2)))
        else:
            lines.append("")
    return lines


def render_block_text(block: Block) -> list[str]:
    """Render one block as plain-text lines."""
    match block:
        case Heading():
            return [plain_inline(block.text)]
        case Table():
            return [plain_inline(row) for row in block.raw_rows]
        case BulletList():
            return _list_lines(block)
        case CodeBlock():
            return block.code.split("\n")
        case Paragraph():
            return [plain_inline(line.rstrip()) for line in block.lines]
        case Rule() | BlankLine():
            return [""]


def render_text(blocks: cabc.Iterable[Block]) -> str:
    """Render blocks to plain text, collapsing runs of blank lines."""
    lines = [line for block in blocks for line in render_block_text(block)]
    text = _EXCESS_NEWLINES.sub("\n\n", "\n".join(lines))
    return text.strip()


def markdown_to_plain_text(markdown: str) -> str:
    """Convert canonical markdown to plain text.

    Fence, emphasis and heading markers are dropped and their text kept;
    links become ``label (url)``; table alignment rows are dropped while
    the other pipe rows stay as they are; bullet markers are dropped with
    their indentation kept; rules become empty lines.
    """
    return render_text(parse_blocks(markdown))
