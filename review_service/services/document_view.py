"""Read-only view over a parsed markup document.

The review extractor only needs three capabilities from a parser:
find nodes by CSS selector, read their text, read an attribute. They are
collected in the ``DocumentView`` protocol so the extractor does not
depend on a particular parsing library.
"""

from __future__ import annotations

from typing import Any, List, Optional, Protocol, Sequence

from bs4 import BeautifulSoup
from bs4.element import Tag


class DocumentView(Protocol):
    """Minimal query interface over a markup tree."""

    def find_all(self, selector: str, within: Optional[Any] = None) -> List[Any]:
        """Return nodes matching ``selector`` in document order.

        Searches the whole document when ``within`` is None, otherwise only
        the descendants of the given node.
        """
        ...

    def text(self, nodes: Sequence[Any]) -> str:
        """Return the concatenated text of ``nodes`` ('' when empty)."""
        ...

    def attribute(self, nodes: Sequence[Any], name: str) -> Optional[str]:
        """Return attribute ``name`` of the first node, or None."""
        ...


class SoupDocumentView:
    """DocumentView backed by BeautifulSoup CSS selectors."""

    def __init__(self, html: str, parser: str = "html.parser"):
        self.soup = BeautifulSoup(html or "", parser)

    def find_all(self, selector: str, within: Optional[Tag] = None) -> List[Tag]:
        root = self.soup if within is None else within
        return root.select(selector)

    def text(self, nodes: Sequence[Tag]) -> str:
        return "".join(node.get_text() for node in nodes)

    def attribute(self, nodes: Sequence[Tag], name: str) -> Optional[str]:
        if not nodes:
            return None
        value = nodes[0].get(name)
        if isinstance(value, list):
            # Multi-valued attributes such as class come back as lists.
            return " ".join(value)
        return value
