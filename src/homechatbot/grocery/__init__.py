"""Household grocery list commands."""

from __future__ import annotations

from .commands import (
    GROCERY_HELP,
    MAX_ITEMS_IN_DB,
    ensure_grocery_collection,
    get_smallest_available_id,
    handle_grocery_command,
)
from .items import GROCERY_COLLECTION_NAME, ID_FIELD, GroceryItem, render_grocery_list

__all__ = [
    "GROCERY_COLLECTION_NAME",
    "GROCERY_HELP",
    "GroceryItem",
    "ID_FIELD",
    "MAX_ITEMS_IN_DB",
    "ensure_grocery_collection",
    "get_smallest_available_id",
    "handle_grocery_command",
    "render_grocery_list",
]
