"""
API models and schemas for the FastAPI application.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictStr

from api.exceptions import StoreError


def generate_book_id() -> str:
    """Return a random 128-bit identifier as a decimal string."""
    return str(uuid.uuid4().int)


class BookIn(BaseModel):
    """Request body for creating or replacing a book."""
    model_config = ConfigDict(extra="forbid")

    title: StrictStr = Field(..., min_length=3, description="Book title")


class Book(BaseModel):
    """Book document as stored and returned by the API."""
    id: str = Field(..., description="Book identifier, also the partition key")
    title: str = Field(..., description="Book title")

    @classmethod
    def from_document(cls, document: dict) -> "Book":
        """
        Build a Book from a raw store document, dropping store-internal fields.

        Raises:
            StoreError: if the document lacks an id or title
        """
        missing = [field for field in ("id", "title") if document.get(field) is None]
        if missing:
            raise StoreError(
                f"Malformed book document {document.get('_id')!r}: "
                f"missing {', '.join(missing)}"
            )
        return cls(id=str(document["id"]), title=document["title"])


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    database_status: str = Field(..., description="Database connection status")
