"""
Pytest configuration and shared fixtures.
"""

from typing import Dict, List, Optional
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from api.exceptions import StoreError
from api.main import create_app
from api.models import Book
from api.store import BookStore
from utilities.config import AppConfig


class InMemoryBookStore(BookStore):
    """Dict-backed BookStore keyed by id, preserving insertion order."""

    def __init__(self):
        self.documents: Dict[str, Book] = {}
        self.closed = False

    async def read_all(self) -> List[Book]:
        return list(self.documents.values())

    async def read(self, book_id: str, partition_key: str) -> Optional[Book]:
        if book_id != partition_key:
            return None
        return self.documents.get(book_id)

    async def create(self, book: Book) -> Book:
        if book.id in self.documents:
            raise StoreError("Entity with the specified id already exists in the system.")
        self.documents[book.id] = book
        return book

    async def replace(self, book: Book) -> Optional[Book]:
        if book.id not in self.documents:
            return None
        self.documents[book.id] = book
        return book

    async def delete(self, book_id: str, partition_key: str) -> bool:
        if book_id != partition_key:
            return False
        return self.documents.pop(book_id, None) is not None

    async def query_by_title(self, title: str) -> List[Book]:
        return [book for book in self.documents.values() if book.title == title]

    async def ping(self) -> None:
        return None

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def app_config():
    """Application config with defaults, independent of the test environment."""
    return AppConfig(
        _env_file=None,
        config_source="env",
        log_format="console",
        store_endpoint="mongodb://localhost:27017",
        store_database="books",
        store_collection="books",
    )


@pytest.fixture
def book_store():
    """Empty in-memory book store."""
    return InMemoryBookStore()


@pytest.fixture
def client(book_store, app_config):
    """Test client for an app wired to the in-memory store."""
    return TestClient(create_app(store=book_store, app_config=app_config))


@pytest.fixture
def failing_store():
    """Book store whose every call fails like an unreachable database."""
    store = AsyncMock(spec=BookStore)
    error = StoreError("Request timed out while contacting the document store")
    for method in ("read_all", "read", "create", "replace", "delete", "query_by_title", "ping"):
        getattr(store, method).side_effect = error
    return store


@pytest.fixture
def failing_client(failing_store, app_config):
    """Test client for an app wired to a failing store."""
    return TestClient(create_app(store=failing_store, app_config=app_config))


@pytest.fixture
def sample_books():
    """A few books, two of them sharing a title."""
    return [
        Book(id="101", title="Dune"),
        Book(id="102", title="Hyperion"),
        Book(id="103", title="Dune"),
    ]
