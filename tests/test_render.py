from bs4 import BeautifulSoup

from help2mdx.normalize import find_content_root
from help2mdx.render import (
    apply_escape_rules,
    close_void_elements,
    escape_constant_placeholders,
    escape_curly_braces,
    escape_tag_like_placeholders,
    html_to_markdown,
    split_inline_code,
    tidy_markdown,
)


def test_curly_braces_escaped_outside_inline_code_only():
    assert apply_escape_rules("`{a}` and {b}") == "`{a}` and \\{b\\}"


def test_curly_brace_escaping_is_idempotent():
    once = apply_escape_rules("Use {name} and `{raw}`")
    assert apply_escape_rules(once) == once
    assert escape_curly_braces(escape_curly_braces("{x}")) == "\\{x\\}"


def test_fenced_code_is_left_untouched():
    markdown = "Before {a}\n```\nif (a <= b) { run(<VALUE>); }\n```\nAfter {b}"
    assert apply_escape_rules(markdown) == (
        "Before \\{a\\}\n```\nif (a <= b) { run(<VALUE>); }\n```\nAfter \\{b\\}"
    )


def test_indented_fence_toggles_code_state():
    markdown = "  ```\n  {kept}\n  ```\n{escaped}"
    assert apply_escape_rules(markdown) == "  ```\n  {kept}\n  ```\n\\{escaped\\}"


def test_unclosed_backtick_protects_rest_of_line():
    assert apply_escape_rules("{a} `open {b}") == "\\{a\\} `open {b}"


def test_escaped_backtick_does_not_open_inline_code():
    assert split_inline_code("a \\` {b}") == [("a \\` {b}", False)]


def test_split_inline_code_segments():
    assert split_inline_code("x `y` z") == [("x ", False), ("`y`", True), (" z", False)]


def test_close_void_elements_is_idempotent():
    text = '<br> text <hr/> <col width="10"> <img src="/img/a.png" alt="A">'
    once = close_void_elements(text)
    assert once == '<br /> text <hr /> <col width="10" /> <img src="/img/a.png" alt="A" />'
    assert close_void_elements(once) == once


def test_close_void_elements_ignores_longer_tag_names():
    assert close_void_elements("<colgroup><button>") == "<colgroup><button>"


def test_placeholder_escaping_keeps_known_tags():
    assert escape_tag_like_placeholders("<table>") == "<table>"
    assert escape_tag_like_placeholders("<String value>") == "&lt;String value&gt;"
    assert escape_constant_placeholders("<VALUE>") == "&lt;VALUE&gt;"
    assert escape_constant_placeholders("<MY\\_VAR>") == "&lt;MY\\_VAR&gt;"
    assert apply_escape_rules("<table> <VALUE> <String value>") == (
        "<table> &lt;VALUE&gt; &lt;String value&gt;"
    )


def test_diamond_and_comparison_operators_are_escaped():
    assert apply_escape_rules("new ArrayList<>() when a <= b and c >= d") == (
        "new ArrayList&lt;&gt;() when a &lt;= b and c &gt;= d"
    )


def test_escape_rules_are_idempotent():
    text = "List<> <KEY> <Some thing> a <= b {c}"
    once = apply_escape_rules(text)
    assert apply_escape_rules(once) == once


def test_tidy_markdown_normalizes_whitespace():
    raw = "\r\n Title  \r\nline two   \n\n\n\n\nend\n\n"
    assert tidy_markdown(raw) == "Title\nline two\n\nend"


def test_html_to_markdown_renders_normalized_content():
    html = """<html><body><div class="selectableSection">
<h1>Page Title</h1>
<h2>Usage</h2>
<p>Use {name} with <code>{raw}</code> and set &lt;VALUE&gt; here.</p>
<ul><li>One</li><li>Two</li></ul>
<div><p data-codeformat="x">int a = 1;</p><p data-codeformat="x">&nbsp;&nbsp;return a;</p></div>
<p><img src="../../inline-images/pic.png"></p>
<p>   </p>
</div></body></html>"""
    soup = BeautifulSoup(html, "html.parser")
    markdown = html_to_markdown(find_content_root(soup))

    assert "Page Title" not in markdown
    assert "## Usage" in markdown
    assert "Use \\{name\\} with `{raw}`" in markdown
    assert "&lt;VALUE&gt;" in markdown
    assert "- One" in markdown
    assert "- Two" in markdown
    assert "```\nint a = 1;\n  return a;\n```" in markdown
    assert "![Illustration](/img/inline-images/pic.png)" in markdown
    assert "data-" not in markdown
    assert "\n\n\n" not in markdown
    assert markdown == markdown.strip()


def test_backslash_escaped_braces_are_left_as_is():
    # A literal "\{" in the source is indistinguishable from an escaped brace,
    # so the backslash is consumed by MDX and the page shows "{already}".
    assert apply_escape_rules("text with \\{already\\}") == "text with \\{already\\}"
    assert apply_escape_rules("C:\\{dir\\} and {x}") == "C:\\{dir\\} and \\{x\\}"


def test_table_with_colgroup_and_bare_rows_keeps_header_separator():
    html = (
        '<html><body><div class="selectableSection"><table><colgroup><col><col></colgroup>'
        "<tr><th>h</th><th>i</th></tr><tr><td>1</td><td>2</td></tr></table></div></body></html>"
    )
    soup = BeautifulSoup(html, "html.parser")
    lines = html_to_markdown(find_content_root(soup)).splitlines()

    assert lines[0] == "| h | i |"
    assert lines[1].replace("|", " ").split() == ["---", "---"]
    assert lines[2] == "| 1 | 2 |"
