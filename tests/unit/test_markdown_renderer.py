import pytest

from app.services.markdown_renderer import render_inline, render_markdown


def test_heading_and_paragraph_with_emphasis():
    html = render_markdown("# Title\n\nSome **bold** and *italic* text.")
    assert html == "<h1>Title</h1>\n<p>Some <strong>bold</strong> and <em>italic</em> text.</p>"


def test_inline_code():
    assert render_markdown("`inline`") == "<p><code>inline</code></p>"


def test_fenced_code_block_drops_language():
    assert render_markdown("```js\nconst x = 1;\n```") == "<pre><code>const x = 1;</code></pre>"


def test_bullet_list():
    assert render_markdown("* one\n* two") == "<ul><li>one</li><li>two</li></ul>"


def test_images_are_removed():
    assert render_markdown("![badge](https://img.shields.io/x.svg)\nHello") == "<p>Hello</p>"


def test_empty_input():
    assert render_markdown("") == ""
    assert render_markdown(None) == ""
    assert render_markdown("\n\n  \n") == ""


@pytest.mark.parametrize("source,expected", [
    ("## Sub", "<h2>Sub</h2>"),
    ("### Third", "<h3>Third</h3>"),
    ("#### Four", "<h4>Four</h4>"),
    ("##### Deep", "<p>##### Deep</p>"),
    ("# Hello **World**", "<h1>Hello <strong>World</strong></h1>"),
])
def test_headings(source, expected):
    assert render_markdown(source) == expected


def test_blockquote_and_rule():
    html = render_markdown("> quoted *text*\n---")
    assert html == "<blockquote>quoted <em>text</em></blockquote>\n<hr />"


def test_fence_content_is_not_formatted():
    html = render_markdown("```\n**x** `y`\n# not a heading\n```")
    assert html == "<pre><code>**x** `y`\n# not a heading</code></pre>"


def test_unclosed_fence_is_plain_text():
    assert render_markdown("```js\ncode") == "<p>```js<br />code</p>"


def test_fence_between_paragraphs():
    html = render_markdown("Intro\n```\ncode\n```\nAfter")
    assert html == "<p>Intro</p>\n<pre><code>code</code></pre>\n<p>After</p>"


def test_numbered_items_join_the_bullet_list():
    assert render_markdown("1. first\n2. second") == "<ul><li>first</li><li>second</li></ul>"
    assert render_markdown("- a\n1. b") == "<ul><li>a</li><li>b</li></ul>"


def test_list_items_keep_inline_formatting():
    assert render_markdown("* item with *emphasis*") == "<ul><li>item with <em>emphasis</em></li></ul>"


def test_paragraph_before_list():
    assert render_markdown("Intro:\n* a\n* b") == "<p>Intro:</p>\n<ul><li>a</li><li>b</li></ul>"


def test_list_before_paragraph():
    assert render_markdown("* a\nOutro") == "<ul><li>a</li></ul>\n<p>Outro</p>"


def test_paragraph_lines_joined_with_breaks():
    assert render_markdown("line one\nline two\n\nnext") == "<p>line one<br />line two</p>\n<p>next</p>"


def test_html_is_passed_through():
    assert render_markdown("<b>raw</b>") == "<p><b>raw</b></p>"


def test_links_open_in_new_tab():
    html = render_inline("see [the docs](https://example.com/docs)")
    assert html == 'see <a href="https://example.com/docs" target="_blank" rel="noopener noreferrer">the docs</a>'


def test_link_label_is_formatted():
    html = render_inline("[**bold** link](https://x.io)")
    assert html == '<a href="https://x.io" target="_blank" rel="noopener noreferrer"><strong>bold</strong> link</a>'


def test_underscore_bold():
    assert render_inline("__strong__ text") == "<strong>strong</strong> text"


def test_code_span_is_opaque():
    assert render_inline("`**not bold**`") == "<code>**not bold**</code>"


def test_unbalanced_markers_left_alone():
    assert render_inline("2 * 3 = 6") == "2 * 3 = 6"
    assert render_inline("**open") == "**open"
    assert render_inline("a ` b") == "a ` b"


def test_windows_line_endings():
    assert render_markdown("# T\r\n\r\ntext") == "<h1>T</h1>\n<p>text</p>"
