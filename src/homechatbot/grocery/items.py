"""Grocery item records and list rendering."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

GROCERY_COLLECTION_NAME = "groceries"
# Stored key for GroceryItem.id; existing databases use this name.
ID_FIELD = "groid"
EMPTY_LIST_TEXT = "List is empty"


@dataclass(frozen=True, slots=True)
class GroceryItem:
    category: str
    id: int
    product: str

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> GroceryItem:
        return cls(
            category=str(doc["category"]),
            id=int(doc[ID_FIELD]),
            product=str(doc["product"]),
        )

    def to_document(self) -> dict[str, Any]:
        return {"category": self.category, ID_FIELD: self.id, "product": self.product}


def render_grocery_list(items: Iterable[GroceryItem]) -> str:
    """Render items already sorted by category.

    A ``<category>:`` header is written each time the category changes, so
    an unsorted input would repeat headers.
    """
    lines: list[str] = []
    previous: str | None = None
    for item in items:
        if item.category != previous:
            lines.append(f"{item.category}:\n")
            previous = item.category
        lines.append(f"({item.id}) {item.product}\n")
    if not lines:
        return EMPTY_LIST_TEXT
    return "".join(lines)
