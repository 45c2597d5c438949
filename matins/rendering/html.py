"""Render canonical markdown as a styled HTML document.

Inline text goes through a fixed sequence of phases. Inline code and links
are swapped for opaque placeholders before the text is escaped, the text is
escaped exactly once, and only then is markup synthesised. Source text such
as ``<script>`` therefore always comes out as ``&lt;script&gt;``, while
generated tags are never escaped.
"""

from __future__ import annotations

import html as html_lib
import re
import typing as typ

from matins.rendering.blocks import (
    BlankLine,
    BulletList,
    CodeBlock,
    Heading,
    ListItem,
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
_PLACEHOLDER = re.compile("\x00(\\d+)\x00")

_STYLE = """\
body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, \
"Helvetica Neue", Arial, sans-serif; line-height: 1.6; color: #333; }
table { border-collapse: collapse; width: 100%; margin: 1em 0; }
th, td { border: 1px solid #ddd; padding: 8px; text-align: left; }
th { background-color: #f2f2f2; font-weight: bold; }
code { background-color: #f4f4f4; padding: 2px 4px; border-radius: 3px; }
pre { background-color: #f4f4f4; padding: 10px; border-radius: 5px; \
overflow-x: auto; }
a { color: #0066cc; text-decoration: none; }
a:hover { text-decoration: underline; }
hr { border: none; border-top: 1px solid #ddd; margin: 1em 0; }"""


def escape_html(text: str) -> str:
    """Escape ``&``, ``<``, ``>`` and both quote characters."""
    return html_lib.escape(text, quote=True)


class _Placeholders:
    """Opaque tokens standing in for already-rendered markup."""

    def __init__(self) -> None:
        self._fragments: list[str] = []

    def protect(self, fragment: str) -> str:
        self._fragments.append(fragment)
        return f"\x00{len(self._fragments) - 1}\x00"

    def restore(self, text: str) -> str:
        return _PLACEHOLDER.sub(lambda m: self._fragments[int(m.group(1))], text)


def _emphasise(escaped: str) -> str:
    return _ITALIC.sub(r"<em>\1</em>", _BOLD.sub(r"<strong>\1</strong>", escaped))


def render_inline(text: str) -> str:
    """Render one run of inline markdown to HTML.

    Links stay behind placeholders while emphasis is applied, so markers
    inside a URL never turn into tags.

    Examples
    --------
    >>> render_inline("**KEY** <b> [Open](https://x.test/?a=1&b=2)")
    '<strong>KEY</strong> &lt;b&gt; <a href="https://x.test/?a=1&amp;b=2">Open</a>'

    """
    code = _Placeholders()
    protected = _INLINE_CODE.sub(
        lambda m: code.protect(f"<code>{escape_html(m.group(1))}</code>"), text
    )

    links: list[tuple[str, str]] = []

    def _protect_link(match: re.Match[str]) -> str:
        links.append((match.group(1), match.group(2)))
        return f"\x01{len(links) - 1}\x01"

    protected = _LINK.sub(_protect_link, protected)
    emphasised = _emphasise(escape_html(protected))
    linked = re.sub(
        "\x01(\\d+)\x01",
        lambda m: _anchor(*links[int(m.group(1))]),
        emphasised,
    )
    return code.restore(linked)


def _anchor(label: str, url: str) -> str:
    return f'<a href="{escape_html(url)}">{_emphasise(escape_html(label))}</a>'


def _render_heading(block: Heading) -> str:
    return f"<h{block.level}>{render_inline(block.text)}</h{block.level}>"


def _render_row(cells: tuple[str, ...], tag: str) -> str:
    rendered = "".join(f"<{tag}>{render_inline(cell)}</{tag}>" for cell in cells)
    return f"<tr>{rendered}</tr>"


def _render_table(block: Table) -> str:
    parts = ["<table>"]
    rows = list(block.rows)
    if block.has_header:
        parts.append(f"<thead>{_render_row(rows.pop(0), 'th')}</thead>")
    if rows:
        body = "".join(_render_row(row, "td") for row in rows)
        parts.append(f"<tbody>{body}</tbody>")
    parts.append("</table>")
    return "".join(parts)


def _render_items(items: cabc.Sequence[ListItem]) -> str:
    """Render items as nested ``<ul>`` blocks, nesting by indentation."""
    parts: list[str] = []
    stack: list[int] = []
    for item in items:
        if not stack or item.indent > stack[-1]:
            parts.append("<ul>")
            stack.append(item.indent)
        else:
            while len(stack) > 1 and item.indent < stack[-1]:
                parts.append("</li></ul>")
                stack.pop()
            parts.append("</li>")
        parts.append(f"<li>{render_inline(item.text)}")
    parts.extend("</li></ul>" for _ in stack)
    return "".join(parts)


def _render_paragraph(block: Paragraph) -> str:
    text = " ".join(render_inline(line.strip()) for line in block.lines)
    return f"<p>{text}</p>"


def render_block(block: Block) -> str | None:
    """Render one block; blank lines render as ``None``."""
    match block:
        case Heading():
            return _render_heading(block)
        case Table():
            return _render_table(block)
        case BulletList():
            return _render_items(block.items)
        case CodeBlock():
            return f"<pre><code>{escape_html(block.code)}</code></pre>"
        case Rule():
            return "<hr>"
        case Paragraph():
            return _render_paragraph(block)
        case BlankLine():
            return None


def render_html_body(blocks: cabc.Iterable[Block]) -> str:
    """Render blocks to an HTML fragment, one block per line."""
    rendered = (render_block(block) for block in blocks)
    return "\n".join(fragment for fragment in rendered if fragment is not None)


def wrap_html_document(body: str) -> str:
    """Wrap an HTML fragment in the minimal styled document shell."""
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        '<meta charset="UTF-8">\n'
        f"<style>\n{_STYLE}\n</style>\n"
        "</head>\n"
        "<body>\n"
        f"{body}\n"
        "</body>\n"
        "</html>\n"
    )


def markdown_to_html(markdown: str) -> str:
    """Convert canonical markdown to a complete, styled HTML document.

    Parameters
    ----------
    markdown
        Canonical briefing markdown.

    Returns
    -------
    str
        HTML document with every source character escaped exactly once.

    """
    return wrap_html_document(render_html_body(parse_blocks(markdown)))
