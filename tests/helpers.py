from __future__ import annotations

from typing import Callable, Dict, List, Optional

RSS_WITH_IMAGE = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Example News</title>
    <link>https://example.org/</link>
    <item>
      <title>First &amp; foremost</title>
      <link>https://example.org/a</link>
      <description>&lt;p&gt;Hello &lt;b&gt;world&lt;/b&gt;&lt;/p&gt;</description>
      <enclosure url="https://example.org/a.mp3" type="audio/mpeg" length="123"/>
      <enclosure url="https://example.org/a.jpg" type="image/jpeg"/>
    </item>
    <item>
      <title>Second</title>
      <link>https://example.org/b</link>
      <description>Plain text</description>
    </item>
  </channel>
</rss>
"""

EMPTY_RSS = b"""<?xml version="1.0"?>
<rss version="2.0"><channel><title>Nothing here</title></channel></rss>
"""


class SequentialIds:
    """Deterministic stand-in for uuid4 minting."""

    def __init__(self, prefix: str = "id") -> None:
        self.prefix = prefix
        self.count = 0

    def __call__(self) -> str:
        self.count += 1
        return f"{self.prefix}-{self.count}"


class RecordingOpener:
    def __init__(self) -> None:
        self.opened: List[str] = []

    def __call__(self, panel_id: str) -> None:
        self.opened.append(panel_id)


def make_prompt(answer: Optional[int]) -> Callable[[List[str]], Optional[int]]:
    seen: Dict[str, List[str]] = {}

    def prompt(labels: List[str]) -> Optional[int]:
        seen["labels"] = list(labels)
        return answer

    prompt.seen = seen  # type: ignore[attr-defined]
    return prompt
