import pytest

from home_rss.errors import FeedParseError
from home_rss.feed.parser import parse_feed

from helpers import RSS_WITH_IMAGE


def test_parse_rss2_items_and_enclosures() -> None:
    feed = parse_feed(RSS_WITH_IMAGE)

    assert feed.title == "Example News"
    assert [entry.link for entry in feed.items] == [
        "https://example.org/a",
        "https://example.org/b",
    ]
    first = feed.items[0]
    assert first.title == "First & foremost"
    assert first.summary == "<p>Hello <b>world</b></p>"
    assert first.enclosures == (
        {"url": "https://example.org/a.mp3", "type": "audio/mpeg", "length": "123"},
        {"url": "https://example.org/a.jpg", "type": "image/jpeg"},
    )
    assert feed.items[1].enclosures == ()


def test_parse_rss2_guid_and_content_encoded_fallbacks() -> None:
    xml = """<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/">
      <channel><title>T</title>
        <item>
          <title>Guid only</title>
          <guid isPermaLink="true">https://example.org/guid</guid>
          <content:encoded><![CDATA[<p>Full body</p>]]></content:encoded>
        </item>
        <item>
          <title>Opaque guid</title>
          <guid isPermaLink="false">tag:example.org,2024:1</guid>
        </item>
      </channel>
    </rss>"""

    feed = parse_feed(xml)

    assert feed.items[0].link == "https://example.org/guid"
    assert feed.items[0].summary == "<p>Full body</p>"
    assert feed.items[1].link == ""


def test_parse_rdf_items_outside_channel() -> None:
    xml = b"""<?xml version="1.0"?>
    <rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#"
             xmlns="http://purl.org/rss/1.0/">
      <channel rdf:about="https://example.org/">
        <title>RDF feed</title>
        <link>https://example.org/</link>
      </channel>
      <item rdf:about="https://example.org/1">
        <title>One</title>
        <link>https://example.org/1</link>
        <description>First</description>
      </item>
      <item rdf:about="https://example.org/2">
        <title>Two</title>
        <link>https://example.org/2</link>
      </item>
    </rdf:RDF>"""

    feed = parse_feed(xml)

    assert feed.title == "RDF feed"
    assert [entry.title for entry in feed.items] == ["One", "Two"]
    assert feed.items[0].summary == "First"


def test_parse_atom_links_summary_and_enclosures() -> None:
    xml = b"""<?xml version="1.0" encoding="utf-8"?>
    <feed xmlns="http://www.w3.org/2005/Atom">
      <title>Atom feed</title>
      <link rel="alternate" href="https://example.org/"/>
      <entry>
        <title type="html">Hello &lt;em&gt;Atom&lt;/em&gt;</title>
        <link rel="self" href="https://example.org/1.atom"/>
        <link rel="alternate" href="/posts/1"/>
        <link rel="enclosure" href="/img/1.png" type="image/png" length="42"/>
        <content type="html">&lt;p&gt;Body&lt;/p&gt;</content>
      </entry>
      <entry>
        <title>Summary wins</title>
        <link href="https://example.org/2"/>
        <summary>Short</summary>
        <content>Long</content>
      </entry>
    </feed>"""

    feed = parse_feed(xml, base_url="https://example.org/feed.atom")

    first, second = feed.items
    assert first.link == "https://example.org/posts/1"
    assert first.title == "Hello <em>Atom</em>"
    assert first.summary == "<p>Body</p>"
    assert first.enclosures == (
        {"url": "https://example.org/img/1.png", "type": "image/png", "length": "42"},
    )
    assert second.link == "https://example.org/2"
    assert second.summary == "Short"


def test_media_content_counts_as_enclosure() -> None:
    xml = """<rss version="2.0" xmlns:media="http://search.yahoo.com/mrss/">
      <channel><title>Media</title>
        <item>
          <title>Photo</title>
          <link>https://example.org/photo</link>
          <media:group>
            <media:content url="https://example.org/photo.jpg" type="image/jpeg" fileSize="99"/>
          </media:group>
        </item>
      </channel>
    </rss>"""

    feed = parse_feed(xml)

    assert feed.items[0].enclosures == (
        {"url": "https://example.org/photo.jpg", "type": "image/jpeg", "length": "99"},
    )


def test_enclosure_attributes_missing_are_missing_keys() -> None:
    xml = """<rss version="2.0"><channel><title>T</title>
      <item><title>x</title><link>https://example.org/x</link>
        <enclosure type="image/png"/>
        <enclosure url="https://example.org/x.png"/>
      </item>
    </channel></rss>"""

    entry = parse_feed(xml).items[0]

    assert entry.enclosures == ({"type": "image/png"}, {"url": "https://example.org/x.png"})


@pytest.mark.parametrize(
    "content",
    [
        b"",
        b"<rss><channel>",
        b"<html><body>not a feed</body></html>",
        b"<rss version='2.0'></rss>",
    ],
)
def test_invalid_documents_raise(content: bytes) -> None:
    with pytest.raises(FeedParseError):
        parse_feed(content)


def test_entity_expansion_is_rejected() -> None:
    xml = b"""<?xml version="1.0"?>
    <!DOCTYPE rss [<!ENTITY boom "boom">]>
    <rss version="2.0"><channel><title>&boom;</title></channel></rss>"""

    with pytest.raises(FeedParseError):
        parse_feed(xml)


def test_rss_item_link_ignores_atom_self_link() -> None:
    xml = """<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom">
      <channel>
        <title>Mixed</title>
        <atom:link rel="self" href="https://x/feed" type="application/rss+xml"/>
        <link>https://x/</link>
        <item>
          <atom:link rel="self" href="https://x/self"/>
          <title>T</title>
          <link>https://x/1</link>
          <description>D</description>
        </item>
      </channel>
    </rss>"""

    feed = parse_feed(xml)

    assert feed.link == "https://x/"
    assert feed.items[0].link == "https://x/1"
