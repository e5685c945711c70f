import logging
from typing import Dict, List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)


class Document:
    """
    Element arena for one parsed document.

    Every element gets an integer handle equal to its position in
    document (pre-order) order. Handles stay valid for the lifetime of
    the Document and are what the extractor uses for identity, so
    nothing depends on object identity of the underlying soup.

    The id index (id attribute -> handle, first occurrence wins) and the
    effective base URL are computed once, here.
    """

    def __init__(self, soup: BeautifulSoup, base_url: str = ""):
        self.soup = soup
        self.nodes: List[Tag] = list(soup.find_all(True))

        handles: Dict[int, int] = {id(tag): h for h, tag in enumerate(self.nodes)}

        self.children: List[List[int]] = [[] for _ in self.nodes]
        for h, tag in enumerate(self.nodes):
            parent = tag.parent
            if parent is not None and id(parent) in handles:
                self.children[handles[id(parent)]].append(h)

        self.ids: Dict[str, int] = {}
        for h, tag in enumerate(self.nodes):
            element_id = tag.get("id")
            if isinstance(element_id, str) and element_id not in self.ids:
                self.ids[element_id] = h

        self.base_url = self._resolve_base_url(base_url or "")

        logger.debug(
            f"Document indexed: {len(self.nodes)} elements, {len(self.ids)} ids"
        )

    # --------------------------------------------------
    # Lookups
    # --------------------------------------------------

    def __len__(self) -> int:
        return len(self.nodes)

    def tag(self, handle: int) -> Tag:
        return self.nodes[handle]

    def lookup_id(self, element_id: str) -> Optional[int]:
        return self.ids.get(element_id)

    def resolve_url(self, raw: str) -> str:
        """
        Make a URL attribute absolute against the base URL.
        Never raises: malformed input comes back unchanged.
        """
        try:
            return urljoin(self.base_url, raw.strip())
        except ValueError:
            return raw

    # --------------------------------------------------
    # Helpers
    # --------------------------------------------------

    def _resolve_base_url(self, base_url: str) -> str:
        for tag in self.nodes:
            if tag.name == "base" and tag.has_attr("href"):
                href = tag["href"]
                if not isinstance(href, str):
                    href = " ".join(href)
                try:
                    return urljoin(base_url, href.strip())
                except ValueError:
                    return base_url
        return base_url
