"""Books Routes — list, fetch, create, replace and delete catalog entries.

Invariants:
    - Request bodies are validated by Pydantic before the handler runs, so an
      invalid payload never reaches the repository (400, even for unknown isbn)
    - Repository errors propagate unchanged; error_handlers maps them to 404/409/500
    - isbn is taken from the path on PUT; any isbn in the body is ignored

Design Decisions:
    - Repository built per request over the request-scoped AsyncSession
    - Envelopes ({book}, {books}, {message}) declared as response models
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from book_catalog.infrastructure.database import get_db
from book_catalog.schemas.book import (
    BookCreate, BookEnvelope, BookListEnvelope, BookResponse, BookUpdate,
    MessageResponse,
)
from book_catalog.services.book_repository import BookRepository

router = APIRouter(prefix="/books", tags=["books"])


def get_book_repository(db: AsyncSession = Depends(get_db)) -> BookRepository:
    return BookRepository(db)


@router.get("", response_model=BookListEnvelope)
async def list_books(repo: BookRepository = Depends(get_book_repository)):
    """List every book in the catalog."""
    books = await repo.find_all()
    return {"books": [BookResponse.model_validate(b) for b in books]}


@router.get("/{isbn}", response_model=BookEnvelope)
async def get_book(
    isbn: str, repo: BookRepository = Depends(get_book_repository),
):
    """Get a single book by isbn."""
    book = await repo.find_one(isbn)
    return {"book": BookResponse.model_validate(book)}


@router.post(
    "", response_model=BookEnvelope, status_code=status.HTTP_201_CREATED,
)
async def create_book(
    body: BookCreate, repo: BookRepository = Depends(get_book_repository),
):
    """Create a book. All eight fields are required."""
    book = await repo.create(body)
    return {"book": BookResponse.model_validate(book)}


@router.put("/{isbn}", response_model=BookEnvelope)
async def update_book(
    isbn: str,
    body: BookUpdate,
    repo: BookRepository = Depends(get_book_repository),
):
    """Replace every non-key field of a book."""
    book = await repo.update(isbn, body)
    return {"book": BookResponse.model_validate(book)}


@router.delete("/{isbn}", response_model=MessageResponse)
async def delete_book(
    isbn: str, repo: BookRepository = Depends(get_book_repository),
):
    await repo.remove(isbn)
    return {"message": "Book deleted"}
