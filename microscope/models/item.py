from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(eq=False)
class Item:
    types: List[str] = field(default_factory=list)
    id: Optional[str] = None                       # only set for typed items
    properties: Dict[str, List["Value"]] = field(default_factory=dict)

    def add(self, name: str, value: "Value") -> None:
        self.properties.setdefault(name, []).append(value)


@dataclass(frozen=True)
class Value:
    """
    A property value: either plain text or a nested item, never both.
    """
    text: Optional[str] = None
    item: Optional[Item] = None

    @classmethod
    def of_text(cls, text: str) -> "Value":
        return cls(text=text)

    @classmethod
    def of_item(cls, item: Item) -> "Value":
        return cls(item=item)

    @property
    def is_item(self) -> bool:
        return self.item is not None


@dataclass
class Microdata:
    items: List[Item] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        from microscope.schemas.serializer import serialize_items
        return serialize_items(self.items)

    def to_json(self, indent: Optional[int] = None) -> str:
        from microscope.schemas.serializer import to_json
        return to_json(self.items, indent=indent)
