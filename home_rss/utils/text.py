#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Text utilities."""

import html
import re
from html.parser import HTMLParser


_WS_RE = re.compile(r"[ \t\r\f\v]+")


class _HTMLToTextParser(HTMLParser):
    """Lightweight HTML-to-text parser that keeps block boundaries as newlines."""

    _BLOCK_TAGS = {
        "p",
        "div",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "li",
        "ul",
        "ol",
        "table",
        "tr",
        "td",
        "th",
        "blockquote",
    }
    _SKIP_TAGS = {"script", "style"}

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.parts: list[str] = []
        self._skip_depth = 0

    def handle_starttag(self, tag: str, attrs) -> None:  # noqa: ANN001
        tag = tag.lower()
        if tag in self._SKIP_TAGS:
            self._skip_depth += 1
        elif tag == "br" or tag in self._BLOCK_TAGS:
            self.parts.append("\n")

    def handle_endtag(self, tag: str) -> None:
        tag = tag.lower()
        if tag in self._SKIP_TAGS:
            self._skip_depth = max(0, self._skip_depth - 1)
        elif tag in self._BLOCK_TAGS:
            self.parts.append("\n")

    def handle_startendtag(self, tag: str, attrs) -> None:  # noqa: ANN001
        if tag.lower() == "br":
            self.parts.append("\n")

    def handle_data(self, data: str) -> None:
        if not self._skip_depth:
            self.parts.append(data)


def html_to_text(s: str, *, collapse_newlines: bool = True) -> str:
    """Convert an HTML fragment (or plain text with entities) to plain text.

    By default line breaks are collapsed into single spaces, which is what a
    one-line list row wants. ``collapse_newlines=False`` keeps one line per
    block element.
    """
    if not s:
        return ""

    parser = _HTMLToTextParser()
    parser.feed(s)
    parser.close()

    txt = "".join(parser.parts)
    txt = html.unescape(txt)
    txt = txt.replace("\xa0", " ")

    if collapse_newlines:
        return re.sub(r"\s+", " ", txt).strip()

    txt = _WS_RE.sub(" ", txt)
    lines = [line.strip() for line in txt.split("\n")]
    return "\n".join(line for line in lines if line)
