# tests/test_document.py

from __future__ import annotations

from better_notes.notes.document import (
    Bold,
    Document,
    Heading,
    Italic,
    ListItem,
    Paragraph,
    Text,
    parse_markup,
    preview,
    to_markup,
    to_plain_text,
)

SAMPLE = """# Weekly plan

Finish the **budget** draft and send it to _Sam_.
Check *twice*.

## Errands
- buy milk
* pick up parcel
1. first
2) second
"""


def test_parse_blocks_and_inlines() -> None:
    doc = parse_markup(SAMPLE)

    assert doc.blocks[0] == Heading(level=1, inlines=(Text("Weekly plan"),))
    assert doc.blocks[1] == Paragraph(
        inlines=(
            Text("Finish the "),
            Bold("budget"),
            Text(" draft and send it to "),
            Italic("Sam"),
            Text(".\nCheck "),
            Italic("twice"),
            Text("."),
        )
    )
    assert doc.blocks[2] == Heading(level=2, inlines=(Text("Errands"),))
    assert doc.blocks[3:] == (
        ListItem(inlines=(Text("buy milk"),), ordered=False),
        ListItem(inlines=(Text("pick up parcel"),), ordered=False),
        ListItem(inlines=(Text("first"),), ordered=True),
        ListItem(inlines=(Text("second"),), ordered=True),
    )


def test_serializer_output_is_a_fixed_point() -> None:
    once = to_markup(parse_markup(SAMPLE))
    assert to_markup(parse_markup(once)) == once
    assert "1. first\n2. second" in once
    assert "*Sam*" in once


def test_unknown_syntax_stays_literal() -> None:
    source = "#### not a heading\nsnake_case_name and a lone * star\n**unclosed"
    assert parse_markup(source) == Document(blocks=(Paragraph(inlines=(Text(source),)),))


def test_plain_text_and_preview() -> None:
    doc = parse_markup(SAMPLE)
    plain = to_plain_text(doc)
    assert "**" not in plain
    assert plain.splitlines()[0] == "Weekly plan"

    assert preview("# Title\n\n- one\n- two") == "Title one two"
    assert preview("") == ""

    long = preview("word " * 100, limit=20)
    assert len(long) == 20
    assert long.endswith("…")
