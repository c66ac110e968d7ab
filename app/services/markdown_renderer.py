"""
README Markdown to HTML fragment conversion.

Handles a deliberately small subset of Markdown:
- ATX headings ``#`` through ``####`` (five or more ``#`` stay plain text)
- fenced code blocks (the language tag is discarded)
- ``**bold**``, ``__bold__``, ``*italic*``, ``inline code`` and ``[links](url)``
- ``> quotes``, ``---`` rules, ``* ``/``- ``/``1. `` list items
- images and badges are removed entirely

Rendering is done in two passes: a block scanner walks the lines and decides
what each one is, then an inline scanner formats the text inside each block.
Numbered items are rendered into the same ``<ul>`` as bullets.

The output is NOT sanitized. HTML contained in the input is passed through
as-is, so only render READMEs from sources you are willing to embed.
"""

from __future__ import annotations

import re
from typing import List, Optional

_IMAGE = re.compile(r"!\[.*?\]\(.*?\)")
_FENCE_OPEN = re.compile(r"^```([^`]*)$")
_HEADING = re.compile(r"^(#{1,4}) (.*)$")
_QUOTE = re.compile(r"^> (.*)$")
_RULE = re.compile(r"^---$")
_BULLET = re.compile(r"^[*-] (.*)$")
_ORDINAL = re.compile(r"^\d+\. (.*)$")

_LINK = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_ITALIC = re.compile(r"\*([^*\n]+)\*(?!\*)")


def render_inline(text: str) -> str:
    """
    Format the spans inside a single line of text.

    Code spans are opaque: nothing inside backticks is formatted.
    """
    out: List[str] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]

        if ch == "`":
            end = text.find("`", i + 1)
            if end > i + 1:
                out.append(f"<code>{text[i + 1:end]}</code>")
                i = end + 1
                continue

        elif ch == "[":
            m = _LINK.match(text, i)
            if m:
                label = render_inline(m.group(1))
                out.append(
                    f'<a href="{m.group(2)}" target="_blank" rel="noopener noreferrer">{label}</a>'
                )
                i = m.end()
                continue

        elif text.startswith("**", i) or text.startswith("__", i):
            marker = text[i:i + 2]
            end = text.find(marker, i + 2)
            if end > i + 2:
                out.append(f"<strong>{render_inline(text[i + 2:end])}</strong>")
                i = end + 2
                continue

        elif ch == "*" and (i == 0 or text[i - 1] != "*"):
            m = _ITALIC.match(text, i)
            if m:
                out.append(f"<em>{render_inline(m.group(1))}</em>")
                i = m.end()
                continue

        out.append(ch)
        i += 1
    return "".join(out)


class _Segment:
    """Run of list items and paragraph lines between two block-level elements."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.items: List[str] = []
        self.lines: List[str] = []
        self.list_first = False

    def add_item(self, content: str) -> None:
        if not self.items and not self.lines:
            self.list_first = True
        self.items.append(content)

    def add_line(self, content: str) -> None:
        self.lines.append(content)

    def flush(self, out: List[str]) -> None:
        rendered = []
        if self.items:
            rendered.append("<ul>" + "".join(f"<li>{item}</li>" for item in self.items) + "</ul>")
        paragraph = "<br />".join(self.lines)
        if paragraph.strip():
            rendered.append(f"<p>{paragraph}</p>")
        if not self.list_first:
            rendered.reverse()
        out.extend(rendered)
        self.reset()


def _find_fence_close(lines: List[str], start: int) -> Optional[int]:
    for j in range(start, len(lines)):
        if lines[j].strip().startswith("```"):
            return j
    return None


def _render_block_line(line: str) -> Optional[str]:
    """Render a line that forms a block of its own, or return None."""
    m = _HEADING.match(line)
    if m:
        level = len(m.group(1))
        return f"<h{level}>{render_inline(m.group(2))}</h{level}>"
    m = _QUOTE.match(line)
    if m:
        return f"<blockquote>{render_inline(m.group(1))}</blockquote>"
    if _RULE.match(line):
        return "<hr />"
    return None


def render_markdown(text: Optional[str]) -> str:
    """
    Convert README Markdown into an HTML fragment.

    Never raises: text that is not recognised Markdown is wrapped in
    paragraphs as-is.
    """
    text = _IMAGE.sub("", text or "")
    lines = text.replace("\r\n", "\n").split("\n")

    out: List[str] = []
    segment = _Segment()
    i = 0
    while i < len(lines):
        line = lines[i].rstrip()

        if _FENCE_OPEN.match(line.strip()):
            close = _find_fence_close(lines, i + 1)
            if close is not None:
                segment.flush(out)
                code = "\n".join(lines[i + 1:close]).strip()
                out.append(f"<pre><code>{code}</code></pre>")
                i = close + 1
                continue

        if not line.strip():
            segment.flush(out)
            i += 1
            continue

        block = _render_block_line(line)
        if block is not None:
            segment.flush(out)
            out.append(block)
        else:
            m = _BULLET.match(line) or _ORDINAL.match(line)
            if m:
                segment.add_item(render_inline(m.group(1)))
            else:
                segment.add_line(render_inline(line))
        i += 1

    segment.flush(out)
    return "\n".join(out)
