"""Grocery sub-commands: list, add, rem."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from ..errors import (
    CollectionExists,
    DuplicateKeyConflict,
    HomechatbotError,
    IdSpaceExhausted,
    StoreError,
)
from ..logging import get_logger
from .items import (
    GROCERY_COLLECTION_NAME,
    ID_FIELD,
    GroceryItem,
    render_grocery_list,
)

if TYPE_CHECKING:
    from ..db import HomechatbotDB

logger = get_logger("homechatbot.grocery")

GROCERY_HELP = """Grocery allowed commands:
    list [category]
    add {category}
        product1
        product2
        product3
        ...
    rem {product_id}"""
MAX_ITEMS_IN_DB = 10000
MAX_ITEM_ID = 2**32 - 1

ADDED_TEXT = "Items successfully added!"
REMOVED_TEXT = "Items successfully removed"

_SUBCOMMAND_RE = re.compile(r"(\w+)(?:\s+(.*))?", re.DOTALL)
_ADD_ARGS_RE = re.compile(r"(.*?)\n(.*)", re.DOTALL)
_DIGITS_RE = re.compile(r"[0-9]+")


async def ensure_grocery_collection(db: HomechatbotDB) -> None:
    """Create the grocery collection and its unique id index when missing."""
    if not await db.check_collection_exists(GROCERY_COLLECTION_NAME):
        try:
            await db.create_collection(GROCERY_COLLECTION_NAME)
            logger.info("grocery.collection_created", collection=GROCERY_COLLECTION_NAME)
        except CollectionExists:
            logger.info(
                "grocery.collection_already_present",
                collection=GROCERY_COLLECTION_NAME,
            )
    indexes = await db.get_collection_index(GROCERY_COLLECTION_NAME)
    if not any(name.startswith(ID_FIELD) for name in indexes):
        logger.info("grocery.index_created", field=ID_FIELD)
        await db.create_collection_index(GROCERY_COLLECTION_NAME, ID_FIELD)


async def get_smallest_available_id(
    db: HomechatbotDB, max_id: int = MAX_ITEMS_IN_DB
) -> int:
    """Return the smallest id in ``1..max_id`` not used by any stored item.

    The read is not atomic with the caller's insert; two callers can get the
    same id, and the unique index decides which insert wins.

    Raises:
        IdSpaceExhausted: every id in the range is taken.
        StoreError: the items could not be read.
    """
    items = await db.find(
        GROCERY_COLLECTION_NAME, {}, document_type=GroceryItem.from_document
    )
    used = {item.id for item in items}
    for candidate in range(1, max_id + 1):
        if candidate not in used:
            return candidate
    raise IdSpaceExhausted("Too many products in the database")


async def handle_list_request(category: str | None, db: HomechatbotDB) -> str:
    query = {"category": category} if category is not None else {}
    try:
        items = await db.find(
            GROCERY_COLLECTION_NAME,
            query,
            sort=[("category", 1)],
            document_type=GroceryItem.from_document,
        )
    except StoreError as exc:
        return f"Error getting groceries: {exc}"
    return render_grocery_list(items)


async def handle_add_request(
    args: str, db: HomechatbotDB, *, max_id: int = MAX_ITEMS_IN_DB
) -> str:
    match = _ADD_ARGS_RE.fullmatch(args)
    if match is None:
        return GROCERY_HELP
    category, products = match.group(1), match.group(2)
    for product in products.split("\n"):
        if not product.strip():
            continue
        # Only a conflicting insert loops; every other failure ends the
        # command with whatever was inserted so far kept.
        while True:
            try:
                item_id = await get_smallest_available_id(db, max_id)
            except IdSpaceExhausted as exc:
                logger.warning("grocery.id_space_exhausted", max_id=max_id)
                return f"ERROR: {exc}"
            except StoreError as exc:
                return f"ERROR: {exc}"
            item = GroceryItem(category=category, id=item_id, product=product)
            try:
                await db.insert_many(GROCERY_COLLECTION_NAME, [item.to_document()])
            except DuplicateKeyConflict:
                logger.debug("grocery.id_conflict_retry", id=item_id, product=product)
                continue
            except StoreError as exc:
                return str(exc)
            break
        logger.info(
            "grocery.item_added", id=item_id, category=category, product=product
        )
    return ADDED_TEXT


def _parse_item_id(token: str) -> int | None:
    token = token.strip()
    if not _DIGITS_RE.fullmatch(token):
        return None
    value = int(token)
    if value > MAX_ITEM_ID:
        return None
    return value


async def handle_remove_request(args: str, db: HomechatbotDB) -> str:
    for token in args.split(","):
        item_id = _parse_item_id(token)
        if item_id is None:
            return f"Only numbers are allowed: {token.strip()!r}\n{GROCERY_HELP}"
        try:
            deleted = await db.delete_many(GROCERY_COLLECTION_NAME, {ID_FIELD: item_id})
        except StoreError as exc:
            return str(exc)
        logger.info("grocery.item_removed", id=item_id, deleted=deleted)
    return REMOVED_TEXT


async def handle_grocery_command(rest: str, db: HomechatbotDB) -> str:
    """Run a grocery sub-command and return the reply text."""
    try:
        await ensure_grocery_collection(db)
    except HomechatbotError as exc:
        return str(exc)

    match = _SUBCOMMAND_RE.fullmatch(rest)
    if match is None:
        return GROCERY_HELP
    subcommand = match.group(1).lower()
    args = match.group(2)

    if subcommand == "list":
        return await handle_list_request(args, db)
    if subcommand == "add":
        if args is None:
            return GROCERY_HELP
        return await handle_add_request(args, db)
    if subcommand == "rem":
        if args is None:
            return GROCERY_HELP
        return await handle_remove_request(args, db)
    return GROCERY_HELP
