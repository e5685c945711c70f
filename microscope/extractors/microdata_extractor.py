import logging
from enum import Enum
from typing import Dict, List, Optional, Set

from bs4 import BeautifulSoup, Tag
from bs4.element import CData, NavigableString, Script, Stylesheet, TemplateString

from microscope.config import DEFAULT_MAX_DEPTH, MAX_DEPTH_LIMIT
from microscope.models.document import Document
from microscope.models.item import Item, Value

logger = logging.getLogger(__name__)


class ValueRule(Enum):
    ITEM = "item"
    CONTENT = "content"
    SOURCE = "source"
    HREF = "href"
    DATA = "data"
    VALUE = "value"
    DATETIME = "datetime"
    TEXT = "text"


# Tag name -> how an itemprop element on that tag yields its value.
# Anything not listed falls back to ValueRule.TEXT.
VALUE_RULES: Dict[str, ValueRule] = {
    "meta": ValueRule.CONTENT,
    "audio": ValueRule.SOURCE,
    "embed": ValueRule.SOURCE,
    "iframe": ValueRule.SOURCE,
    "img": ValueRule.SOURCE,
    "source": ValueRule.SOURCE,
    "track": ValueRule.SOURCE,
    "video": ValueRule.SOURCE,
    "a": ValueRule.HREF,
    "area": ValueRule.HREF,
    "link": ValueRule.HREF,
    "object": ValueRule.DATA,
    "data": ValueRule.VALUE,
    "meter": ValueRule.VALUE,
    "time": ValueRule.DATETIME,
}

# Rules whose attribute holds a URL, with the attribute name.
_URL_ATTRIBUTES: Dict[ValueRule, str] = {
    ValueRule.SOURCE: "src",
    ValueRule.HREF: "href",
    ValueRule.DATA: "data",
}


def _attr(tag: Tag, name: str) -> Optional[str]:
    value = tag.get(name)
    if value is None:
        return None
    if isinstance(value, list):
        return " ".join(value)
    return value


def _tokens(tag: Tag, name: str) -> List[str]:
    value = _attr(tag, name)
    return value.split() if value else []


# Every text node kind, script and style included; comments are not text.
_TEXT_TYPES = (NavigableString, CData, Script, Stylesheet, TemplateString)


def _text(tag: Tag) -> str:
    return tag.get_text(types=_TEXT_TYPES)


def is_item_scope(tag: Tag) -> bool:
    return tag.has_attr("itemscope")


def value_rule(tag: Tag) -> ValueRule:
    if is_item_scope(tag):
        return ValueRule.ITEM
    return VALUE_RULES.get(tag.name, ValueRule.TEXT)


class MicrodataExtractor:
    """
    Microdata extractor for one document.

    Walks the whole element arena once for top-level item scopes and
    builds each item from its subtree plus its itemref targets. Nested
    items are built recursively; every item-scope element is built at
    most once per document (memoized by handle), and an element that is
    already under construction higher up the chain is skipped, which
    keeps itemref cycles finite.
    """

    def __init__(self, document: Document, max_depth: int = DEFAULT_MAX_DEPTH):
        self.document = document
        self.max_depth = min(max_depth, MAX_DEPTH_LIMIT)

        self._memo: Dict[int, Item] = {}
        self._building: Set[int] = set()

    # --------------------------------------------------
    # Scope walker
    # --------------------------------------------------

    def extract(self) -> List[Item]:
        items: List[Item] = []

        for handle, tag in enumerate(self.document.nodes):
            if not is_item_scope(tag) or tag.has_attr("itemprop"):
                continue

            item = self.build(handle)
            if item is not None:
                items.append(item)

        logger.debug(f"Microdata: {len(items)} top-level items, {len(self._memo)} built")
        return items

    # --------------------------------------------------
    # Item builder
    # --------------------------------------------------

    def build(self, handle: int) -> Optional[Item]:
        """
        Build (or reuse) the item rooted at ``handle``.

        Returns None when the root is already being built further up the
        call chain, or when the nesting limit is reached.
        """
        if handle in self._memo:
            return self._memo[handle]

        if handle in self._building:
            logger.debug(f"itemref cycle through element #{handle} skipped")
            return None

        if len(self._building) >= self.max_depth:
            logger.warning(
                f"Microdata nesting deeper than {self.max_depth} levels, "
                f"item at element #{handle} skipped"
            )
            return None

        root = self.document.tag(handle)

        item = Item(types=_tokens(root, "itemtype"))
        if item.types:
            item.id = _attr(root, "itemid")

        self._building.add(handle)
        try:
            for candidate in self._candidates(handle):
                self._add_properties(item, candidate)
        finally:
            self._building.discard(handle)

        self._memo[handle] = item
        return item

    def _candidates(self, root: int) -> List[int]:
        """
        Property sources of an item, first occurrence order:
        the root's subtree, then each itemref target with its subtree.
        Scanning never enters the interior of a nested item scope.
        """
        ordered: List[int] = []
        seen: Set[int] = {root}

        def scan(start: int, include_start: bool) -> None:
            if include_start:
                stack = [start]
            else:
                stack = list(reversed(self.document.children[start]))

            while stack:
                handle = stack.pop()
                if handle in seen:
                    continue
                seen.add(handle)
                ordered.append(handle)

                if is_item_scope(self.document.tag(handle)):
                    continue
                stack.extend(reversed(self.document.children[handle]))

        scan(root, include_start=False)

        for ref in _tokens(self.document.tag(root), "itemref"):
            target = self.document.lookup_id(ref)
            if target is None or target == root:
                continue
            scan(target, include_start=True)

        return ordered

    def _add_properties(self, item: Item, handle: int) -> None:
        tag = self.document.tag(handle)

        names = _tokens(tag, "itemprop")

        if not names:
            return

        value = self.extract_value(handle)
        if value is None:
            return

        for name in names:
            item.add(name, value)

    # --------------------------------------------------
    # Property value extractor
    # --------------------------------------------------

    def extract_value(self, handle: int) -> Optional[Value]:
        tag = self.document.tag(handle)
        rule = value_rule(tag)

        if rule is ValueRule.ITEM:
            nested = self.build(handle)
            return Value.of_item(nested) if nested is not None else None

        if rule is ValueRule.CONTENT:
            return Value.of_text(_attr(tag, "content") or "")

        if rule in _URL_ATTRIBUTES:
            raw = _attr(tag, _URL_ATTRIBUTES[rule])
            if raw is None:
                return Value.of_text("")
            return Value.of_text(self.document.resolve_url(raw))

        if rule is ValueRule.VALUE:
            explicit = _attr(tag, "value")
            return Value.of_text(explicit if explicit is not None else _text(tag))

        if rule is ValueRule.DATETIME:
            explicit = _attr(tag, "datetime")
            return Value.of_text(explicit if explicit is not None else _text(tag))

        return Value.of_text(_text(tag))


def extract_microdata(
    soup: BeautifulSoup,
    base_url: str = "",
    max_depth: int = DEFAULT_MAX_DEPTH
) -> List[Item]:
    """
    Top-level items of a parsed document, in document order.
    """
    document = Document(soup, base_url)
    return MicrodataExtractor(document, max_depth=max_depth).extract()
