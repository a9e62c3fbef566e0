"""Line-oriented markdown to HTML conversion.

Two passes share the work:

- `render_inline` rewrites span syntax (code spans, bold, italic, links) inside
  one unit of text and never looks at neighbouring lines.
- `convert` scans the source line by line, classifies each line and groups
  consecutive lines into blocks. Exactly one block may be open at a time;
  anything that cannot extend the open block flushes it first.

The converter is total: malformed markdown degrades to literal text and no
input string makes it raise.
"""

from __future__ import annotations

import enum
import html
import re
from dataclasses import dataclass, field

FENCE = "```"
RULE = "---"
NUL = "\x00"
REPLACEMENT_CHAR = "\ufffd"

_FENCE_OPEN_RE = re.compile(r"^```\s*([\w+#.-]*)\s*$")
_HEADER_RE = re.compile(r"^(#{1,3}) (.*)$")
_QUOTE_RE = re.compile(r"^> (.*)$")
_UL_ITEM_RE = re.compile(r"^- (.*)$")
_OL_ITEM_RE = re.compile(r"^\d+\. (.*)$")

_CODE_SPAN_RE = re.compile(r"`([^`]+)`")
_BOLD_RE = re.compile(r"\*\*([^*]+)\*\*")
_ITALIC_RE = re.compile(r"\*([^*]+)\*")
_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)\s]+)\)")
_STASH_RE = re.compile("\x00(\\d+)\x00")


class LineKind(enum.Enum):
    BLANK = "blank"
    TEXT = "text"
    FENCE = "fence"
    HEADER = "header"
    RULE = "rule"
    QUOTE = "quote"
    UL_ITEM = "ul_item"
    OL_ITEM = "ol_item"


class BlockKind(enum.Enum):
    NONE = "none"
    PARAGRAPH = "paragraph"
    LIST_UL = "list_ul"
    LIST_OL = "list_ol"
    CODE_BLOCK = "code_block"


_ITEM_BLOCKS = {LineKind.UL_ITEM: BlockKind.LIST_UL, LineKind.OL_ITEM: BlockKind.LIST_OL}
_LIST_TAGS = {BlockKind.LIST_UL: "ul", BlockKind.LIST_OL: "ol"}


@dataclass(frozen=True, slots=True)
class Line:
    """One classified source line.

    `payload` depends on `kind`: stripped text for TEXT, item text for list
    items, the language tag for FENCE and finished HTML for HEADER, RULE and
    QUOTE lines.
    """

    kind: LineKind
    payload: str
    raw: str


@dataclass(slots=True)
class OpenBlock:
    kind: BlockKind = BlockKind.NONE
    lines: list[str] = field(default_factory=list)
    language: str = ""


def render_inline(text: str) -> str:
    """Apply span substitutions to a single unit of text.

    Code spans are rendered first and set aside so emphasis and link rules
    never rewrite their contents. U+0000 marks the set-aside spans, so any in
    the input is replaced with U+FFFD first.
    """

    text = text.replace(NUL, REPLACEMENT_CHAR)
    spans: list[str] = []

    def stash(m: re.Match[str]) -> str:
        spans.append(f"<code>{m.group(1)}</code>")
        return f"\x00{len(spans) - 1}\x00"

    def restore(m: re.Match[str]) -> str:
        return spans[int(m.group(1))]

    out = _CODE_SPAN_RE.sub(stash, text)
    out = _BOLD_RE.sub(r"<strong>\1</strong>", out)
    out = _ITALIC_RE.sub(r"<em>\1</em>", out)
    out = _LINK_RE.sub(r'<a href="\2">\1</a>', out)
    if spans:
        out = _STASH_RE.sub(restore, out)
    return out


def classify_line(raw: str) -> Line:
    if not raw.strip():
        return Line(LineKind.BLANK, "", raw)

    m = _FENCE_OPEN_RE.match(raw)
    if m:
        return Line(LineKind.FENCE, m.group(1), raw)

    if raw.rstrip() == RULE:
        return Line(LineKind.RULE, "<hr>", raw)

    m = _HEADER_RE.match(raw)
    if m:
        level = len(m.group(1))
        body = render_inline(m.group(2).strip())
        return Line(LineKind.HEADER, f"<h{level}>{body}</h{level}>", raw)

    m = _QUOTE_RE.match(raw)
    if m:
        return Line(
            LineKind.QUOTE, f"<blockquote>{render_inline(m.group(1).strip())}</blockquote>", raw
        )

    m = _UL_ITEM_RE.match(raw)
    if m:
        return Line(LineKind.UL_ITEM, m.group(1).strip(), raw)

    m = _OL_ITEM_RE.match(raw)
    if m:
        return Line(LineKind.OL_ITEM, m.group(1).strip(), raw)

    return Line(LineKind.TEXT, raw.strip(), raw)


class _BlockAssembler:
    """Per-call scan state. Created and discarded inside one `convert` call."""

    def __init__(self, lines: list[str]) -> None:
        self._lines = lines
        self._out: list[str] = []
        self._block = OpenBlock()
        # A fence only opens when some later line can close it.
        self._last_close = max(
            (i for i, line in enumerate(lines) if line.rstrip() == FENCE), default=-1
        )

    def run(self) -> str:
        for index, raw in enumerate(self._lines):
            self._feed(index, raw)
        self._flush()
        return "\n".join(self._out)

    def _feed(self, index: int, raw: str) -> None:
        block = self._block
        if block.kind is BlockKind.CODE_BLOCK:
            if raw.rstrip() == FENCE:
                self._flush()
            else:
                block.lines.append(raw)
            return

        line = classify_line(raw)
        if line.kind is LineKind.FENCE:
            if index < self._last_close:
                self._flush()
                self._block = OpenBlock(BlockKind.CODE_BLOCK, language=line.payload)
                return
            line = Line(LineKind.TEXT, raw.strip(), raw)

        if block.kind is BlockKind.PARAGRAPH and line.kind is LineKind.TEXT:
            block.lines.append(line.payload)
            return
        if block.kind is _ITEM_BLOCKS.get(line.kind):
            block.lines.append(line.payload)
            return

        self._flush()
        if line.kind is LineKind.BLANK:
            return
        if line.kind in (LineKind.HEADER, LineKind.RULE, LineKind.QUOTE):
            self._out.append(line.payload)
        elif line.kind in _ITEM_BLOCKS:
            self._block = OpenBlock(_ITEM_BLOCKS[line.kind], [line.payload])
        else:
            self._block = OpenBlock(BlockKind.PARAGRAPH, [line.payload])

    def _flush(self) -> None:
        block = self._block
        if block.kind is BlockKind.PARAGRAPH:
            self._out.append(f"<p>{render_inline(' '.join(block.lines))}</p>")
        elif block.kind in _LIST_TAGS:
            tag = _LIST_TAGS[block.kind]
            items = "".join(f"<li>{render_inline(item)}</li>" for item in block.lines)
            self._out.append(f"<{tag}>{items}</{tag}>")
        elif block.kind is BlockKind.CODE_BLOCK:
            code = html.escape("\n".join(block.lines), quote=False)
            self._out.append(f'<pre><code class="language-{block.language}">{code}</code></pre>')
        self._block = OpenBlock()


def convert(markdown_text: str) -> str:
    """Convert markdown text to an HTML string.

    Blocks are emitted in source order and joined with newlines. Empty input
    produces an empty string.
    """

    text = markdown_text.replace("\r\n", "\n").replace("\r", "\n")
    text = text.replace(NUL, REPLACEMENT_CHAR)
    return _BlockAssembler(text.split("\n")).run()
