#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Feed document parser.

Understands the three syndication formats found in the wild:

- RSS 2.0 (``<rss><channel><item>``) with ``<enclosure url type length>``
- RSS 1.0 / RDF (``<rdf:RDF><item>`` as siblings of the channel)
- Atom 1.0 (``<feed><entry>``) with ``<link rel="enclosure" href type>``

Media RSS ``<media:content>`` elements are treated as additional enclosures.
Only the fields needed to build list rows are kept; everything else in the
document is ignored.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional
from urllib.parse import urljoin
from xml.etree.ElementTree import Element, ParseError

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as ET

from ..errors import FeedParseError
from .models import FeedEntry, ParsedFeed

log = logging.getLogger(__name__)

ATOM_NS = "http://www.w3.org/2005/Atom"
MEDIA_NS = "http://search.yahoo.com/mrss/"
CONTENT_NS = "http://purl.org/rss/1.0/modules/content/"


def _local(tag: object) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def _ns(tag: object) -> str:
    if isinstance(tag, str) and tag.startswith("{"):
        return tag[1:].split("}", 1)[0]
    return ""


def _children(elem: Element, name: str) -> Iterable[Element]:
    return (child for child in elem if _local(child.tag) == name)


def _first(elem: Element, name: str) -> Optional[Element]:
    return next(iter(_children(elem, name)), None)


def _rss_link(elem: Element) -> str:
    # RSS 2.0 channels and items often carry <atom:link rel="self"> next to
    # their own <link>; only the un-namespaced (or RSS 1.0) element counts.
    for child in _children(elem, "link"):
        if _ns(child.tag) == ATOM_NS:
            continue
        text = _text(child)
        if text:
            return text
    return ""


def _text(elem: Optional[Element]) -> str:
    if elem is None:
        return ""
    # itertext() also covers Atom type="xhtml" content wrapped in a <div>.
    return "".join(elem.itertext()).strip()


def _resolve(url: str, base_url: Optional[str]) -> str:
    url = (url or "").strip()
    if url and base_url:
        return urljoin(base_url, url)
    return url


def _enclosure(attrs: Dict[str, str], url_key: str, base_url: Optional[str]) -> Dict[str, str]:
    enclosure: Dict[str, str] = {}
    if attrs.get(url_key):
        enclosure["url"] = _resolve(attrs[url_key], base_url)
    if attrs.get("type"):
        enclosure["type"] = attrs["type"].strip()
    length = attrs.get("length") or attrs.get("fileSize")
    if length:
        enclosure["length"] = length.strip()
    return enclosure


def _media_enclosures(item: Element, base_url: Optional[str]) -> List[Dict[str, str]]:
    found: List[Dict[str, str]] = []
    for elem in item.iter():
        if _ns(elem.tag) == MEDIA_NS and _local(elem.tag) == "content":
            found.append(_enclosure(dict(elem.attrib), "url", base_url))
    return found


def _parse_rss_item(item: Element, base_url: Optional[str]) -> FeedEntry:
    link = _rss_link(item)
    if not link:
        guid = _first(item, "guid")
        if guid is not None and guid.get("isPermaLink", "true").lower() != "false":
            link = _text(guid)

    summary = _text(_first(item, "description"))
    if not summary:
        for child in _children(item, "encoded"):
            if _ns(child.tag) == CONTENT_NS:
                summary = _text(child)
                break

    enclosures = [
        _enclosure(dict(enc.attrib), "url", base_url)
        for enc in _children(item, "enclosure")
    ]
    enclosures.extend(_media_enclosures(item, base_url))

    return FeedEntry(
        link=_resolve(link, base_url),
        title=_text(_first(item, "title")),
        summary=summary,
        enclosures=tuple(enclosures),
    )


def _atom_alternate(entry: Element) -> str:
    fallback = ""
    for link in _children(entry, "link"):
        rel = (link.get("rel") or "alternate").strip()
        href = (link.get("href") or "").strip()
        if not href:
            continue
        if rel == "alternate":
            return href
        if not fallback and rel != "enclosure":
            fallback = href
    return fallback


def _parse_atom_entry(entry: Element, base_url: Optional[str]) -> FeedEntry:
    summary = _text(_first(entry, "summary")) or _text(_first(entry, "content"))
    enclosures = [
        _enclosure(dict(link.attrib), "href", base_url)
        for link in _children(entry, "link")
        if (link.get("rel") or "").strip() == "enclosure"
    ]
    enclosures.extend(_media_enclosures(entry, base_url))
    return FeedEntry(
        link=_resolve(_atom_alternate(entry), base_url),
        title=_text(_first(entry, "title")),
        summary=summary,
        enclosures=tuple(enclosures),
    )


def parse_feed(content: bytes | str, base_url: Optional[str] = None) -> ParsedFeed:
    """Parse a feed document into a :class:`ParsedFeed`.

    ``base_url`` (normally the feed URL) is used to resolve relative links.

    Raises:
        FeedParseError: If the document is not well-formed XML, uses forbidden
            XML constructs, or is not a known feed format.
    """

    if not content:
        raise FeedParseError("Empty feed document")
    try:
        root = ET.fromstring(content)
    except (ParseError, DefusedXmlException, ValueError) as exc:
        raise FeedParseError(f"Malformed feed document: {exc}") from exc

    kind = _local(root.tag)
    if kind == "rss":
        channel = _first(root, "channel")
        if channel is None:
            raise FeedParseError("RSS document without <channel>")
        items = [_parse_rss_item(item, base_url) for item in _children(channel, "item")]
        title = _text(_first(channel, "title"))
        link = _rss_link(channel)
    elif kind == "RDF":
        channel = _first(root, "channel")
        items = [_parse_rss_item(item, base_url) for item in _children(root, "item")]
        title = _text(_first(channel, "title")) if channel is not None else ""
        link = _rss_link(channel) if channel is not None else ""
    elif kind == "feed" and _ns(root.tag) in (ATOM_NS, ""):
        items = [_parse_atom_entry(entry, base_url) for entry in _children(root, "entry")]
        title = _text(_first(root, "title"))
        link = _atom_alternate(root)
    else:
        raise FeedParseError(f"Unknown feed format: <{kind}>")

    log.debug("Parsed %s feed with %d entries", kind, len(items))
    return ParsedFeed(title=title, link=_resolve(link, base_url), items=items)


__all__ = ["parse_feed"]
