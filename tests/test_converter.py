from __future__ import annotations

import pytest

from mdblog.converter import BlockKind, LineKind, classify_line, convert, render_inline

# --- headers ---


@pytest.mark.parametrize(
    ("src", "expected"),
    [
        ("# Title", "<h1>Title</h1>"),
        ("## X", "<h2>X</h2>"),
        ("### X", "<h3>X</h3>"),
    ],
)
def test_headers(src: str, expected: str) -> None:
    assert convert(src) == expected


def test_four_hashes_is_plain_text() -> None:
    assert convert("#### four") == "<p>#### four</p>"


def test_hash_without_space_is_plain_text() -> None:
    assert convert("#tag") == "<p>#tag</p>"


def test_header_text_gets_inline_markup() -> None:
    assert convert("## *it* and `x`") == "<h2><em>it</em> and <code>x</code></h2>"


# --- paragraphs ---


def test_plain_lines_join_into_one_paragraph() -> None:
    assert convert("line one\nline two\nline three") == "<p>line one line two line three</p>"


def test_blank_line_separates_paragraphs() -> None:
    assert convert("a\n\nb") == "<p>a</p>\n<p>b</p>"


def test_emphasis_spans_joined_paragraph_lines() -> None:
    assert convert("**bold\ntext**") == "<p><strong>bold text</strong></p>"


def test_paragraph_flushed_before_header() -> None:
    assert convert("intro\n## Section\nbody") == "<p>intro</p>\n<h2>Section</h2>\n<p>body</p>"


def test_trailing_paragraph_is_emitted() -> None:
    assert convert("first\n\nlast words") == "<p>first</p>\n<p>last words</p>"


def test_empty_input() -> None:
    assert convert("") == ""
    assert convert("\n\n  \n") == ""


def test_crlf_line_endings() -> None:
    assert convert("# T\r\nbody\r\n") == "<h1>T</h1>\n<p>body</p>"


# --- lists ---


def test_unordered_list() -> None:
    assert convert("- a\n- b") == "<ul><li>a</li><li>b</li></ul>"


def test_ordered_list() -> None:
    assert convert("1. one\n2. two\n10. ten") == "<ol><li>one</li><li>two</li><li>ten</li></ol>"


def test_unordered_to_ordered_flushes_ul_first() -> None:
    assert convert("- a\n1. b") == "<ul><li>a</li></ul>\n<ol><li>b</li></ol>"


def test_ordered_to_unordered_flushes_ol_first() -> None:
    assert convert("1. a\n- b") == "<ol><li>a</li></ol>\n<ul><li>b</li></ul>"


def test_single_trailing_item_is_emitted() -> None:
    assert convert("- only item") == "<ul><li>only item</li></ul>"


def test_blank_line_closes_list() -> None:
    assert convert("- a\n\n- b") == "<ul><li>a</li></ul>\n<ul><li>b</li></ul>"


def test_text_after_list_opens_paragraph() -> None:
    assert convert("- a\ntext") == "<ul><li>a</li></ul>\n<p>text</p>"


def test_paragraph_then_list() -> None:
    assert convert("para\n- item") == "<p>para</p>\n<ul><li>item</li></ul>"


def test_list_items_get_inline_markup() -> None:
    assert convert("- **x**\n- [y](/y)") == (
        '<ul><li><strong>x</strong></li><li><a href="/y">y</a></li></ul>'
    )


# --- code fences ---


def test_fence_escapes_and_keeps_language() -> None:
    src = "```js\nconst x = 1 < 2;\n```"
    assert convert(src) == '<pre><code class="language-js">const x = 1 &lt; 2;</code></pre>'


def test_fence_without_language() -> None:
    assert convert("```\nplain\n```") == '<pre><code class="language-">plain</code></pre>'


def test_fence_contents_are_not_transformed() -> None:
    src = "```\n**not bold** <b>\n# not a header\n- not an item\n```"
    assert convert(src) == (
        '<pre><code class="language-">**not bold** &lt;b&gt;\n'
        "# not a header\n- not an item</code></pre>"
    )


def test_fence_escapes_exactly_once() -> None:
    out = convert("```\na & b &lt;\n```")
    assert "a &amp; b &amp;lt;" in out
    assert "&amp;amp;" not in out


def test_fence_keeps_blank_lines_and_indentation() -> None:
    src = "```py\ndef f():\n\n    return 1\n```"
    assert convert(src) == '<pre><code class="language-py">def f():\n\n    return 1</code></pre>'


def test_fence_flushes_open_list_and_paragraph() -> None:
    src = "- a\n```\ncode\n```\n- b\ntext\n```\nmore\n```"
    assert convert(src) == "\n".join(
        [
            "<ul><li>a</li></ul>",
            '<pre><code class="language-">code</code></pre>',
            "<ul><li>b</li></ul>",
            "<p>text</p>",
            '<pre><code class="language-">more</code></pre>',
        ]
    )


def test_unclosed_fence_is_literal_text() -> None:
    out = convert("```py\nx = 1")
    assert "<pre>" not in out
    assert out == "<p>```py x = 1</p>"


def test_fence_language_with_trailing_spaces() -> None:
    assert convert("```python  \nx\n```").startswith('<pre><code class="language-python">')


# --- rules and blockquotes ---


def test_horizontal_rule() -> None:
    assert convert("a\n---\nb") == "<p>a</p>\n<hr>\n<p>b</p>"


def test_blockquote_lines_are_not_merged() -> None:
    assert convert("> one\n> **two**") == (
        "<blockquote>one</blockquote>\n<blockquote><strong>two</strong></blockquote>"
    )


def test_blockquote_closes_list() -> None:
    assert convert("- a\n> q") == "<ul><li>a</li></ul>\n<blockquote>q</blockquote>"


# --- inline ---


def test_link() -> None:
    assert convert("[text](http://x)") == '<p><a href="http://x">text</a></p>'


def test_bold_and_italic() -> None:
    assert convert("**b** and *i*") == "<p><strong>b</strong> and <em>i</em></p>"


def test_code_span_is_not_escaped_or_transformed() -> None:
    assert render_inline("`**x** <b>` and **y**") == "<code>**x** <b></code> and <strong>y</strong>"


def test_link_label_with_emphasis() -> None:
    assert render_inline("[**x**](u)") == '<a href="u"><strong>x</strong></a>'


def test_unmatched_markers_stay_literal() -> None:
    assert convert("a **b") == "<p>a **b</p>"
    assert convert("[label](") == "<p>[label](</p>"
    assert convert("`open") == "<p>`open</p>"


def test_plain_text_passes_through() -> None:
    assert render_inline("nothing special here") == "nothing special here"


# --- classification / totality ---


@pytest.mark.parametrize(
    ("raw", "kind"),
    [
        ("", LineKind.BLANK),
        ("   ", LineKind.BLANK),
        ("```js", LineKind.FENCE),
        ("---", LineKind.RULE),
        ("# h", LineKind.HEADER),
        ("> q", LineKind.QUOTE),
        ("- i", LineKind.UL_ITEM),
        ("12. i", LineKind.OL_ITEM),
        ("-no space", LineKind.TEXT),
        ("1.no space", LineKind.TEXT),
    ],
)
def test_classify_line(raw: str, kind: LineKind) -> None:
    assert classify_line(raw).kind is kind


def test_block_kinds_cover_state_machine() -> None:
    assert {k.name for k in BlockKind} == {"NONE", "PARAGRAPH", "LIST_UL", "LIST_OL", "CODE_BLOCK"}


@pytest.mark.parametrize(
    "src",
    ["```", "```\n```", "*", "**", "***", "[](", "\x00", "- ", "1. ", "> ", "#", "---\n---"],
)
def test_convert_never_raises(src: str) -> None:
    assert isinstance(convert(src), str)


def test_convert_keeps_typed_nul_text_apart_from_code_spans() -> None:
    assert convert("`a` and \x000\x00") == "<p><code>a</code> and \ufffd0\ufffd</p>"


def test_convert_long_nul_wrapped_digits() -> None:
    out = convert("`a` \x00" + "1" * 5000 + "\x00")
    assert out == "<p><code>a</code> \ufffd" + "1" * 5000 + "\ufffd</p>"


def test_render_inline_replaces_nul() -> None:
    assert render_inline("`x` \x000\x00 *y*") == "<code>x</code> \ufffd0\ufffd <em>y</em>"


def test_fenced_code_replaces_nul() -> None:
    assert convert("```\na\x00b\n```") == '<pre><code class="language-">a\ufffdb</code></pre>'


def test_convert_is_deterministic() -> None:
    src = "# T\n\n- a\n1. b\n\n```x\n<y>\n```\ntext *i*"
    assert convert(src) == convert(src)
