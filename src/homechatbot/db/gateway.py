"""MongoDB access for the bot.

The gateway only moves documents; it knows nothing about groceries. The one
piece of domain knowledge it carries is the allow-list lookup in the
configuration collection, which the invitation gate needs before any other
collection exists.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any, TypeVar
from urllib.parse import quote_plus

from pymongo import ASCENDING, AsyncMongoClient
from pymongo.errors import BulkWriteError, CollectionInvalid, PyMongoError

from ..errors import CollectionExists, DuplicateKeyConflict, StoreError
from ..logging import get_logger

logger = get_logger("homechatbot.db")

DB_NAME = "homechatbot_db"
CONFIG_COLLECTION_NAME = "config"
DUPLICATE_KEY_CODE = 11000
DUPLICATE_KEY_MARKER = "E11000"

T = TypeVar("T")


def build_connection_uri(address: str, username: str, password: str) -> str:
    return f"mongodb://{quote_plus(username)}:{quote_plus(password)}@{address}/"


def _is_duplicate_key(exc: PyMongoError) -> bool:
    if getattr(exc, "code", None) == DUPLICATE_KEY_CODE:
        return True
    if isinstance(exc, BulkWriteError):
        write_errors = exc.details.get("writeErrors") or []
        if any(err.get("code") == DUPLICATE_KEY_CODE for err in write_errors):
            return True
    return DUPLICATE_KEY_MARKER in str(exc)


class HomechatbotDB:
    """Async CRUD over the bot's database.

    One instance wraps one ``AsyncMongoClient`` and holds no other state, so
    it is shared between concurrently running handlers.
    """

    def __init__(self, client: AsyncMongoClient, db_name: str = DB_NAME) -> None:
        self._client = client
        self._db_name = db_name

    @classmethod
    async def connect(
        cls, address: str, username: str, password: str
    ) -> HomechatbotDB:
        """Open a client and check the database and config collection exist.

        Raises:
            StoreError: the server cannot be reached, or the database or
                configuration collection is missing.
        """
        try:
            client: AsyncMongoClient = AsyncMongoClient(
                build_connection_uri(address, username, password)
            )
        except PyMongoError as exc:
            raise StoreError(f"Unable to create DB client: {exc}") from exc
        db = cls(client)
        try:
            if not await db.check_db_exists(DB_NAME):
                raise StoreError(f'Homechatbot DB "{DB_NAME}" not found')
            if not await db.check_collection_exists(CONFIG_COLLECTION_NAME):
                raise StoreError(
                    f'Homechatbot config collection "{CONFIG_COLLECTION_NAME}" not found'
                )
        except StoreError:
            await db.close()
            raise
        logger.info("db.connected", address=address, database=DB_NAME)
        return db

    @property
    def _db(self) -> Any:
        return self._client[self._db_name]

    async def close(self) -> None:
        await self._client.close()

    async def check_db_exists(self, name: str) -> bool:
        try:
            names = await self._client.list_database_names()
        except PyMongoError as exc:
            raise StoreError(f"Unable to list databases: {exc}") from exc
        return name in names

    async def check_collection_exists(self, name: str) -> bool:
        try:
            names = await self._db.list_collection_names()
        except PyMongoError as exc:
            raise StoreError(f"Unable to list collections: {exc}") from exc
        return name in names

    async def create_collection(self, name: str) -> None:
        try:
            await self._db.create_collection(name)
        except CollectionInvalid as exc:
            raise CollectionExists(f"Collection {name!r} already exists") from exc
        except PyMongoError as exc:
            raise StoreError(f"Unable to create collection: {exc}") from exc

    async def get_collection_index(self, name: str) -> list[str]:
        try:
            info = await self._db[name].index_information()
        except PyMongoError as exc:
            raise StoreError(f"Cannot get indexes: {exc}") from exc
        return list(info)

    async def create_collection_index(self, collection: str, field: str) -> None:
        """Create a unique ascending index on *field*."""
        try:
            await self._db[collection].create_index([(field, ASCENDING)], unique=True)
        except PyMongoError as exc:
            raise StoreError(f"Cannot create index: {exc}") from exc

    async def find(
        self,
        collection: str,
        filter: Mapping[str, Any],
        sort: Sequence[tuple[str, int]] | None = None,
        document_type: Callable[[dict[str, Any]], T] = dict,  # type: ignore[assignment]
    ) -> list[T]:
        try:
            cursor = self._db[collection].find(dict(filter), sort=sort)
            raw = await cursor.to_list()
        except PyMongoError as exc:
            raise StoreError(f"Unable to retrieve items: {exc}") from exc
        try:
            return [document_type(doc) for doc in raw]
        except (KeyError, TypeError, ValueError) as exc:
            raise StoreError(
                f"Unable to retrieve items: malformed document in {collection}: {exc!r}"
            ) from exc

    async def insert_many(
        self, collection: str, documents: Sequence[Mapping[str, Any]]
    ) -> None:
        """Insert *documents*.

        Raises:
            DuplicateKeyConflict: a unique index rejected a document.
            StoreError: any other failure.
        """
        try:
            await self._db[collection].insert_many([dict(doc) for doc in documents])
        except PyMongoError as exc:
            if _is_duplicate_key(exc):
                raise DuplicateKeyConflict(f"Unable to insert items: {exc}") from exc
            raise StoreError(f"Unable to insert items: {exc}") from exc

    async def delete_many(self, collection: str, filter: Mapping[str, Any]) -> int:
        try:
            result = await self._db[collection].delete_many(dict(filter))
        except PyMongoError as exc:
            raise StoreError(f"Unable to remove items: {exc}") from exc
        return result.deleted_count

    async def is_valid_inviting_user(self, user_id: str) -> bool:
        """Return True when *user_id* appears in any ``allowed_users`` list."""
        documents = await self.find(
            CONFIG_COLLECTION_NAME, {"allowed_users": {"$exists": True}}
        )
        for doc in documents:
            allowed = doc.get("allowed_users")
            if not isinstance(allowed, list):
                logger.debug("db.allowed_users_malformed", document_id=str(doc.get("_id")))
                continue
            for entry in allowed:
                if isinstance(entry, str) and entry == user_id:
                    return True
        return False
