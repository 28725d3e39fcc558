"""
Book endpoints.

Store failures propagate as StoreError and are rendered as 500 responses by
the application's exception handlers.
"""

from typing import List

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status

from api.models import Book, BookIn, generate_book_id
from api.store import BookStore

logger = structlog.get_logger(__name__)

BOOK_NOT_FOUND = "Book not found"

router = APIRouter(prefix="/api/books", tags=["Books"])


def get_book_store(request: Request) -> BookStore:
    """Return the store the application was started with."""
    return request.app.state.book_store


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=BOOK_NOT_FOUND)


@router.get("", response_model=List[Book])
async def list_books(store: BookStore = Depends(get_book_store)):
    """Get all books."""
    return await store.read_all()


@router.get("/title/{title:path}", response_model=Book)
async def get_book_by_title(title: str, store: BookStore = Depends(get_book_store)):
    """
    Get the first book whose title matches exactly.

    Titles are not unique; which match comes first is up to the store.
    """
    books = await store.query_by_title(title)
    if not books:
        raise _not_found()
    return books[0]


@router.get("/{book_id}", response_model=Book)
async def get_book(book_id: str, store: BookStore = Depends(get_book_store)):
    """Get a single book by ID."""
    book = await store.read(book_id, book_id)
    if book is None:
        raise _not_found()
    return book


@router.post("", response_model=Book)
async def create_book(payload: BookIn, store: BookStore = Depends(get_book_store)):
    """Create a book with a server-generated ID."""
    book = Book(id=generate_book_id(), title=payload.title)
    created = await store.create(book)
    logger.info("Book created", book_id=created.id)
    return created


@router.put("/{book_id}", response_model=Book)
async def update_book(
    book_id: str,
    payload: BookIn,
    store: BookStore = Depends(get_book_store)
):
    """Replace the title of an existing book."""
    book = await store.read(book_id, book_id)
    if book is None:
        raise _not_found()

    updated = await store.replace(book.model_copy(update={"title": payload.title}))
    if updated is None:
        # Deleted between the read and the replace
        raise _not_found()

    logger.info("Book updated", book_id=book_id)
    return updated


@router.delete("/{book_id}", response_model=Book)
async def delete_book(book_id: str, store: BookStore = Depends(get_book_store)):
    """Delete a book and return it as it was before deletion."""
    book = await store.read(book_id, book_id)
    if book is None:
        raise _not_found()

    if not await store.delete(book_id, book_id):
        raise _not_found()

    logger.info("Book deleted", book_id=book_id)
    return book
