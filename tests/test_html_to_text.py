import pytest

from home_rss.utils.text import html_to_text


@pytest.mark.parametrize("html,expected", [
    ("Line1<br>Line2", "Line1 Line2"),
    ("<p>Hello <b>world</b></p>", "Hello world"),
    ("<script>alert(1)</script>Visible", "Visible"),
    ("Tom &amp; Jerry", "Tom & Jerry"),
    ("&lt;escaped&gt;", "<escaped>"),
    ("", ""),
    ("   ", ""),
])
def test_html_to_text_single_line(html, expected):
    assert html_to_text(html) == expected


@pytest.mark.parametrize("html,expected", [
    ("<div>foo</div><p>bar</p>baz", "foo\nbar\nbaz"),
    ("Line1<br/>Line2", "Line1\nLine2"),
    ("<div>&nbsp; A &nbsp; &amp; B  </div>End", "A & B\nEnd"),
])
def test_html_to_text_keeps_blocks(html, expected):
    assert html_to_text(html, collapse_newlines=False) == expected
