"""Parse canonical markdown into typed block nodes.

The render engine parses a document once and hands the blocks to two
independent visitors (HTML and plain text). Every block keeps the raw
source lines it was built from.

Only the markdown subset the briefing renderers emit is recognised:
headings of levels 1 to 3, pipe tables, bullet lists, fenced code, rules
and paragraphs. Anything else is paragraph text.
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

_FENCE = re.compile(r"^\s*```")
_HEADING = re.compile(r"^(#{1,3})\s+(.+?)\s*$")
_RULE = re.compile(r"^ {0,3}(?:-{3,}|\*{3,}|_{3,})\s*$")
_TABLE_ROW = re.compile(r"^\|.+\|$")
_TABLE_SEPARATOR = re.compile(r"^\|[\s:|-]+\|$")
_BULLET = re.compile(r"^(\s*)[-*+]\s+(.+)$")
_CELL_DIVIDER = re.compile(r"(?<!\\)\|")


@dc.dataclass(frozen=True, slots=True)
class Heading:
    """ATX heading of level 1 to 3."""

    level: int
    text: str
    lines: tuple[str, ...]


@dc.dataclass(frozen=True, slots=True)
class Table:
    """Pipe table with the alignment separator row removed.

    Attributes
    ----------
    rows
        Cell texts per row, with escaped pipes unescaped.
    has_header
        Whether an alignment separator was seen, making ``rows[0]`` the header.
    raw_rows
        Source lines of the kept rows.
    lines
        All source lines, separator included.

    """

    rows: tuple[tuple[str, ...], ...]
    has_header: bool
    raw_rows: tuple[str, ...]
    lines: tuple[str, ...]


@dc.dataclass(frozen=True, slots=True)
class ListItem:
    """One bullet line."""

    indent: int
    text: str


@dc.dataclass(frozen=True, slots=True)
class BulletList:
    """Consecutive bullet lines, possibly nested by indentation."""

    items: tuple[ListItem, ...]
    lines: tuple[str, ...]


@dc.dataclass(frozen=True, slots=True)
class Paragraph:
    """Run of plain text lines."""

    lines: tuple[str, ...]


@dc.dataclass(frozen=True, slots=True)
class CodeBlock:
    """Fenced code; ``code`` excludes the fences and the info string."""

    code: str
    lines: tuple[str, ...]


@dc.dataclass(frozen=True, slots=True)
class Rule:
    """Horizontal rule."""

    lines: tuple[str, ...]


@dc.dataclass(frozen=True, slots=True)
class BlankLine:
    """Empty source line between blocks."""

    lines: tuple[str, ...] = ("",)


type Block = Heading | Table | BulletList | Paragraph | CodeBlock | Rule | BlankLine


def split_cells(row: str) -> tuple[str, ...]:
    r"""Split a pipe-table row into trimmed cells.

    Escaped pipes (``\|``) stay inside their cell and are unescaped.

    Examples
    --------
    >>> split_cells(r"| a \| b | c |")
    ('a | b', 'c')

    """
    parts = _CELL_DIVIDER.split(row.strip())[1:-1]
    return tuple(part.strip().replace("\\|", "|") for part in parts)


def _is_block_start(line: str) -> bool:
    return bool(
        not line.strip()
        or _FENCE.match(line)
        or _HEADING.match(line)
        or _RULE.match(line)
        or _TABLE_ROW.match(line.strip())
        or _BULLET.match(line)
    )


class _Parser:
    """Line cursor over one document."""

    def __init__(self, markdown: str) -> None:
        self._lines = markdown.replace("\r\n", "\n").split("\n")
        self._pos = 0

    def _peek(self) -> str | None:
        if self._pos < len(self._lines):
            return self._lines[self._pos]
        return None

    def _take(self) -> str:
        line = self._lines[self._pos]
        self._pos += 1
        return line

    def parse(self) -> list[Block]:
        blocks: list[Block] = []
        while (line := self._peek()) is not None:
            blocks.append(self._next_block(line))
        return blocks

    def _next_block(self, line: str) -> Block:  # noqa: PLR0911
        if not line.strip():
            return BlankLine(lines=(self._take(),))
        if _FENCE.match(line):
            return self._code_block()
        if heading := _HEADING.match(line):
            self._take()
            return Heading(
                level=len(heading.group(1)), text=heading.group(2), lines=(line,)
            )
        if _RULE.match(line):
            return Rule(lines=(self._take(),))
        if _TABLE_ROW.match(line.strip()):
            return self._table()
        if _BULLET.match(line):
            return self._bullet_list()
        return self._paragraph()

    def _code_block(self) -> CodeBlock:
        lines = [self._take()]
        body: list[str] = []
        while (line := self._peek()) is not None:
            lines.append(self._take())
            if _FENCE.match(line):
                break
            body.append(line)
        return CodeBlock(code="\n".join(body).strip("\n"), lines=tuple(lines))

    def _table(self) -> Table:
        lines: list[str] = []
        kept: list[str] = []
        has_header = False
        while (line := self._peek()) is not None and _TABLE_ROW.match(line.strip()):
            lines.append(self._take())
            stripped = line.strip()
            if _TABLE_SEPARATOR.match(stripped):
                has_header = True
                continue
            kept.append(stripped)
        return Table(
            rows=tuple(split_cells(row) for row in kept),
            has_header=has_header and bool(kept),
            raw_rows=tuple(kept),
            lines=tuple(lines),
        )

    def _continues_list(self) -> bool:
        """Return whether blank lines at the cursor are followed by a bullet."""
        index = self._pos
        while index < len(self._lines) and not self._lines[index].strip():
            index += 1
        return index < len(self._lines) and bool(_BULLET.match(self._lines[index]))

    def _bullet_list(self) -> BulletList:
        lines: list[str] = []
        items: list[ListItem] = []
        while (line := self._peek()) is not None:
            if bullet := _BULLET.match(line):
                lines.append(self._take())
                indent = len(bullet.group(1).expandtabs(4))
                items.append(ListItem(indent=indent, text=bullet.group(2)))
            elif not line.strip() and self._continues_list():
                lines.append(self._take())
            else:
                break
        return BulletList(items=tuple(items), lines=tuple(lines))

    def _paragraph(self) -> Paragraph:
        lines = [self._take()]
        while (line := self._peek()) is not None and not _is_block_start(line):
            lines.append(self._take())
        return Paragraph(lines=tuple(lines))


def parse_blocks(markdown: str) -> list[Block]:
    """Parse ``markdown`` into block nodes, in document order.

    Examples
    --------
    >>> [type(block).__name__ for block in parse_blocks("# T\\n\\ntext")]
    ['Heading', 'BlankLine', 'Paragraph']

    """
    return _Parser(markdown).parse()


def iter_source_lines(blocks: cabc.Iterable[Block]) -> cabc.Iterator[str]:
    """Yield the raw source lines of ``blocks`` in order."""
    for block in blocks:
        yield from block.lines
