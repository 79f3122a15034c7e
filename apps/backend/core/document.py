"""
Narrow document-query interface over BeautifulSoup.

Crawler components only see Node/Document: CSS select, attribute,
data-attribute and text reads.
"""
from typing import List, Optional

from bs4 import BeautifulSoup, Tag


class Node:
    """A single element in a parsed document"""

    def __init__(self, tag: Tag):
        self._tag = tag

    def select(self, selector: str) -> List["Node"]:
        """All descendants matching a CSS selector, in document order."""
        return [Node(tag) for tag in self._tag.select(selector)]

    def select_one(self, selector: str) -> Optional["Node"]:
        tag = self._tag.select_one(selector)
        return Node(tag) if tag is not None else None

    def attr(self, name: str) -> Optional[str]:
        value = self._tag.get(name)
        if isinstance(value, list):
            # multi-valued attributes such as class
            return " ".join(value)
        return value

    def data(self, name: str) -> Optional[str]:
        """Read a data-* attribute, e.g. data('emp-id')."""
        return self.attr(f"data-{name}")

    def text(self) -> str:
        return self._tag.get_text()

    def html(self) -> str:
        """Inner markup of the element."""
        return self._tag.decode_contents()

    def text_of(self, selector: str) -> str:
        """Text of the first match, or an empty string."""
        node = self.select_one(selector)
        return node.text() if node is not None else ""

    def attr_of(self, selector: str, name: str) -> Optional[str]:
        node = self.select_one(selector)
        return node.attr(name) if node is not None else None


class Document(Node):
    """A parsed HTML page"""

    def __init__(self, markup: str):
        super().__init__(BeautifulSoup(markup, "html.parser"))

    def scripts(self, script_type: str) -> List[str]:
        """Raw contents of every <script type=...> block."""
        return [node.html() for node in self.select(f'script[type="{script_type}"]')]
