"""Tests for grocery/items.py - records and list rendering."""

from __future__ import annotations

from homechatbot.grocery import GroceryItem, render_grocery_list


def test_from_document_reads_stored_id_key() -> None:
    doc = {"_id": "abc", "category": "Dairy", "groid": 7, "product": "Milk"}
    assert GroceryItem.from_document(doc) == GroceryItem("Dairy", 7, "Milk")


def test_to_document_uses_stored_id_key() -> None:
    item = GroceryItem(category="Dairy", id=7, product="Milk")
    assert item.to_document() == {"category": "Dairy", "groid": 7, "product": "Milk"}


def test_render_empty() -> None:
    assert render_grocery_list([]) == "List is empty"


def test_render_single_category() -> None:
    items = [GroceryItem("Dairy", 1, "Milk"), GroceryItem("Dairy", 2, "Eggs")]
    assert render_grocery_list(items) == "Dairy:\n(1) Milk\n(2) Eggs\n"


def test_render_writes_header_on_each_category_change() -> None:
    items = [
        GroceryItem("Bakery", 3, "Bread"),
        GroceryItem("Dairy", 1, "Milk"),
    ]
    rendered = render_grocery_list(items)
    assert rendered == "Bakery:\n(3) Bread\nDairy:\n(1) Milk\n"
    assert rendered.count("Bakery:") == 1


def test_render_keeps_product_text_as_is() -> None:
    items = [GroceryItem("Misc", 9, "  2x (large) batteries")]
    assert render_grocery_list(items) == "Misc:\n(9)   2x (large) batteries\n"
