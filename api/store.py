"""
Document store layer for book documents.

Books are kept one document per item with the book id doubling as the
partition (shard) key: ``{"_id": id, "id": id, "title": title}``. Point reads,
replaces and deletes always address an item by id and partition key.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

import structlog
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo.errors import PyMongoError

from api.exceptions import StoreError
from api.models import Book
from api.secrets import StoreSettings

logger = structlog.get_logger(__name__)


class BookStore(ABC):
    """Operations the router needs from a document store."""

    @abstractmethod
    async def read_all(self) -> List[Book]:
        ...

    @abstractmethod
    async def read(self, book_id: str, partition_key: str) -> Optional[Book]:
        """Return the book, or None when no item has this id."""

    @abstractmethod
    async def create(self, book: Book) -> Book:
        ...

    @abstractmethod
    async def replace(self, book: Book) -> Optional[Book]:
        """Replace an existing item. Returns None if the item is gone."""

    @abstractmethod
    async def delete(self, book_id: str, partition_key: str) -> bool:
        """Delete an item. Returns False if nothing was deleted."""

    @abstractmethod
    async def query_by_title(self, title: str) -> List[Book]:
        """Exact-match title query, in store order."""

    @abstractmethod
    async def ping(self) -> None:
        ...

    async def close(self) -> None:
        """Release the underlying client, if any."""


class MongoBookStore(BookStore):
    """BookStore backed by a MongoDB (or MongoDB-compatible) collection via motor."""

    def __init__(
        self,
        collection: AsyncIOMotorCollection,
        client: Optional[AsyncIOMotorClient] = None
    ):
        self.collection = collection
        self.client = client

    @classmethod
    def from_settings(
        cls,
        settings: StoreSettings,
        username: Optional[str] = None
    ) -> "MongoBookStore":
        """
        Construct a store from resolved connection settings.

        Raises:
            StoreError: if a required setting is missing or the client rejects it
        """
        missing = [
            name for name in ("endpoint", "database", "collection")
            if not getattr(settings, name)
        ]
        if missing:
            raise StoreError(
                f"Document store is not configured, missing: {', '.join(missing)}"
            )

        kwargs = {}
        if settings.access_key:
            kwargs["password"] = settings.access_key
            if username:
                kwargs["username"] = username

        try:
            client = AsyncIOMotorClient(settings.endpoint, **kwargs)
        except PyMongoError as e:
            logger.error("Failed to create document store client", error=str(e))
            raise StoreError(str(e)) from e

        collection = client[settings.database][settings.collection]
        logger.info(
            "Document store client created",
            database=settings.database,
            collection=settings.collection
        )
        return cls(collection, client=client)

    @staticmethod
    def _key(book_id: str, partition_key: str) -> dict:
        return {"_id": book_id, "id": partition_key}

    @staticmethod
    def _to_document(book: Book) -> dict:
        return {"_id": book.id, "id": book.id, "title": book.title}

    async def read_all(self) -> List[Book]:
        try:
            cursor = self.collection.find({})
            documents = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error("Failed to read books", error=str(e))
            raise StoreError(str(e)) from e

        return [Book.from_document(document) for document in documents]

    async def read(self, book_id: str, partition_key: str) -> Optional[Book]:
        try:
            document = await self.collection.find_one(self._key(book_id, partition_key))
        except PyMongoError as e:
            logger.error("Failed to read book", book_id=book_id, error=str(e))
            raise StoreError(str(e)) from e

        if document is None:
            return None
        return Book.from_document(document)

    async def create(self, book: Book) -> Book:
        try:
            await self.collection.insert_one(self._to_document(book))
        except PyMongoError as e:
            logger.error("Failed to create book", book_id=book.id, error=str(e))
            raise StoreError(str(e)) from e

        logger.debug("Book created", book_id=book.id)
        return book

    async def replace(self, book: Book) -> Optional[Book]:
        try:
            result = await self.collection.replace_one(
                self._key(book.id, book.id),
                self._to_document(book)
            )
        except PyMongoError as e:
            logger.error("Failed to replace book", book_id=book.id, error=str(e))
            raise StoreError(str(e)) from e

        if result.matched_count == 0:
            return None
        return book

    async def delete(self, book_id: str, partition_key: str) -> bool:
        try:
            result = await self.collection.delete_one(self._key(book_id, partition_key))
        except PyMongoError as e:
            logger.error("Failed to delete book", book_id=book_id, error=str(e))
            raise StoreError(str(e)) from e

        return result.deleted_count > 0

    async def query_by_title(self, title: str) -> List[Book]:
        try:
            cursor = self.collection.find({"title": title})
            documents = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error("Failed to query books by title", title=title, error=str(e))
            raise StoreError(str(e)) from e

        return [Book.from_document(document) for document in documents]

    async def ping(self) -> None:
        try:
            await self.collection.database.command("ping")
        except PyMongoError as e:
            logger.error("Document store ping failed", error=str(e))
            raise StoreError(str(e)) from e

    async def close(self) -> None:
        if self.client:
            self.client.close()
            logger.info("Disconnected from document store")
