import json
from typing import Any, Dict, List, Optional, Set

from microscope.models.item import Item, Value


def serialize_items(items: List[Item]) -> Dict[str, Any]:
    """
    Stable output shape:

        {"items": [{"type": [...], "properties": {...}, "id": "..."}]}

    Property names are sorted, values keep discovery order, "id" only
    appears when the item recorded one.
    """
    return {"items": [serialize_item(item) for item in items]}


def serialize_item(item: Item, _stack: Optional[Set[int]] = None) -> Dict[str, Any]:
    stack = _stack if _stack is not None else set()

    if id(item) in stack:
        raise RuntimeError("cycle in extracted item graph")

    stack.add(id(item))
    try:
        out: Dict[str, Any] = {
            "type": list(item.types),
            "properties": {
                name: [_serialize_value(v, stack) for v in item.properties[name]]
                for name in sorted(item.properties)
            },
        }
    finally:
        stack.discard(id(item))

    if item.id is not None:
        out["id"] = item.id

    return out


def _serialize_value(value: Value, stack: Set[int]) -> Any:
    if value.is_item:
        return serialize_item(value.item, stack)
    return value.text


def to_json(items: List[Item], indent: Optional[int] = None) -> str:
    separators = (",", ":") if indent is None else (",", ": ")
    return json.dumps(
        serialize_items(items),
        indent=indent,
        separators=separators,
        ensure_ascii=False
    )
