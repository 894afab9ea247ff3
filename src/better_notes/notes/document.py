# src/better_notes/notes/document.py

from __future__ import annotations

"""
Note markup as a tagged-variant document.

Supported syntax (one block per line, blank lines end paragraphs):

    # / ## / ###  heading
    - item  /  * item            unordered list item
    1. item /  1) item           ordered list item
    **bold**  *italic*  _italic_ inline emphasis (not nested)

Anything else is a paragraph line; unknown syntax stays literal text.
The serializer always writes `-`, `N.` and `*italic*`, so
to_markup(parse_markup(s)) is a fixed point once s went through it.
"""

import re
from dataclasses import dataclass

# ---- inline nodes ----


@dataclass(slots=True, frozen=True)
class Text:
    text: str


@dataclass(slots=True, frozen=True)
class Bold:
    text: str


@dataclass(slots=True, frozen=True)
class Italic:
    text: str


Inline = Text | Bold | Italic


# ---- block nodes ----


@dataclass(slots=True, frozen=True)
class Heading:
    level: int
    inlines: tuple[Inline, ...]


@dataclass(slots=True, frozen=True)
class ListItem:
    inlines: tuple[Inline, ...]
    ordered: bool = False


@dataclass(slots=True, frozen=True)
class Paragraph:
    inlines: tuple[Inline, ...]


Block = Heading | ListItem | Paragraph


@dataclass(slots=True, frozen=True)
class Document:
    blocks: tuple[Block, ...] = ()


_HEADING_RE = re.compile(r"^(#{1,3})\s+(.*)$")
_UL_RE = re.compile(r"^\s*[-*]\s+(.*)$")
_OL_RE = re.compile(r"^\s*\d+[.)]\s+(.*)$")
_INLINE_RE = re.compile(
    r"\*\*(?P<bold>[^\n]+?)\*\*"
    r"|\*(?P<star>[^*\n]+?)\*"
    r"|(?<!\w)_(?P<under>[^_\n]+?)_(?!\w)"
)


def parse_inlines(text: str) -> tuple[Inline, ...]:
    out: list[Inline] = []
    pos = 0
    for m in _INLINE_RE.finditer(text):
        if m.start() > pos:
            out.append(Text(text[pos : m.start()]))
        if m.group("bold") is not None:
            out.append(Bold(m.group("bold")))
        else:
            out.append(Italic(m.group("star") if m.group("star") is not None else m.group("under")))
        pos = m.end()
    if pos < len(text):
        out.append(Text(text[pos:]))
    return tuple(out)


def parse_markup(source: str) -> Document:
    blocks: list[Block] = []
    para: list[str] = []

    def end_paragraph() -> None:
        if para:
            blocks.append(Paragraph(parse_inlines("\n".join(para))))
            para.clear()

    for line in (source or "").splitlines():
        if not line.strip():
            end_paragraph()
            continue

        m = _HEADING_RE.match(line)
        if m:
            end_paragraph()
            blocks.append(Heading(level=len(m.group(1)), inlines=parse_inlines(m.group(2).strip())))
            continue

        m = _UL_RE.match(line)
        if m:
            end_paragraph()
            blocks.append(ListItem(inlines=parse_inlines(m.group(1).strip()), ordered=False))
            continue

        m = _OL_RE.match(line)
        if m:
            end_paragraph()
            blocks.append(ListItem(inlines=parse_inlines(m.group(1).strip()), ordered=True))
            continue

        para.append(line.strip())

    end_paragraph()
    return Document(blocks=tuple(blocks))


def inlines_to_markup(inlines: tuple[Inline, ...]) -> str:
    parts: list[str] = []
    for node in inlines:
        if isinstance(node, Bold):
            parts.append(f"**{node.text}**")
        elif isinstance(node, Italic):
            parts.append(f"*{node.text}*")
        else:
            parts.append(node.text)
    return "".join(parts)


def to_markup(document: Document) -> str:
    lines: list[str] = []
    prev: Block | None = None
    number = 0

    for block in document.blocks:
        if prev is not None and (isinstance(prev, Paragraph) or isinstance(block, Paragraph)):
            lines.append("")

        if isinstance(block, Heading):
            lines.append("#" * block.level + " " + inlines_to_markup(block.inlines))
        elif isinstance(block, ListItem):
            if block.ordered:
                continues = isinstance(prev, ListItem) and prev.ordered
                number = number + 1 if continues else 1
                lines.append(f"{number}. {inlines_to_markup(block.inlines)}")
            else:
                lines.append(f"- {inlines_to_markup(block.inlines)}")
        else:
            lines.append(inlines_to_markup(block.inlines))
        prev = block

    return "\n".join(lines)


def to_plain_text(document: Document) -> str:
    return "\n".join("".join(node.text for node in block.inlines) for block in document.blocks)


def preview(content: str, limit: int = 120) -> str:
    """Single-line plain-text preview of note content ("" for empty notes)."""
    text = " ".join(to_plain_text(parse_markup(content)).split())
    if len(text) <= limit:
        return text
    return text[: max(0, limit - 1)].rstrip() + "…"
