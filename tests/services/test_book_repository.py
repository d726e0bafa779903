"""Book Repository — verifies persistence operations against an in-memory store.

Invariants:
    - find_all returns every row (empty list for an empty table)
    - find_one/update/remove raise ResourceNotFoundError for an unknown isbn
    - create raises DuplicateResourceError for an existing isbn, row unchanged
    - update replaces every non-key field and keeps the isbn
    - Store failures surface as DatabaseError
"""

import pytest
from sqlalchemy import select, text

from book_catalog.core.errors import (
    DatabaseError, DuplicateResourceError, ResourceNotFoundError,
)
from book_catalog.models.book import Book
from book_catalog.schemas.book import BookCreate, BookUpdate
from book_catalog.services.book_repository import BookRepository


def _new_book(**overrides) -> BookCreate:
    data = {
        "isbn": "1122334455",
        "amazon_url": "http://amazon.com/newbook",
        "author": "New Author",
        "language": "French",
        "pages": 150,
        "publisher": "New Publisher",
        "title": "New Book",
        "year": 2022,
    }
    data.update(overrides)
    return BookCreate(**data)


def _replacement(**overrides) -> BookUpdate:
    data = _new_book(**overrides).model_dump(exclude={"isbn"})
    data.update(title=overrides.get("title", "Updated Book"))
    return BookUpdate(**data)


async def test_find_all_empty_table(test_db):
    assert await BookRepository(test_db).find_all() == []


async def test_find_all_returns_rows_ordered_by_isbn(test_db, seed_books):
    books = await BookRepository(test_db).find_all()

    assert [b.isbn for b in books] == ["0987654321", "1234567890"]


async def test_find_one_returns_matching_row(test_db, seed_books):
    book = await BookRepository(test_db).find_one("1234567890")

    assert book.title == "Book 1"
    assert book.pages == 200


async def test_find_one_unknown_isbn_raises_not_found(test_db, seed_books):
    with pytest.raises(ResourceNotFoundError) as exc_info:
        await BookRepository(test_db).find_one("1111111111")

    assert exc_info.value.http_status == 404
    assert exc_info.value.context.isbn == "1111111111"


async def test_create_persists_and_returns_row(test_db, test_session_factory):
    book = await BookRepository(test_db).create(_new_book())

    assert book.isbn == "1122334455"
    async with test_session_factory() as other:
        stored = await other.scalar(
            select(Book).where(Book.isbn == "1122334455"),
        )
    assert stored.author == "New Author"


async def test_create_duplicate_isbn_raises_conflict(test_db, seed_books):
    repo = BookRepository(test_db)

    with pytest.raises(DuplicateResourceError) as exc_info:
        await repo.create(_new_book(isbn="1234567890", title="Impostor"))

    assert exc_info.value.http_status == 409
    book = await repo.find_one("1234567890")
    assert book.title == "Book 1"


async def test_update_replaces_non_key_fields(test_db, seed_books):
    repo = BookRepository(test_db)

    book = await repo.update("1234567890", _replacement(pages=999))

    assert book.isbn == "1234567890"
    assert book.title == "Updated Book"
    assert book.pages == 999
    assert (await repo.find_one("1234567890")).language == "French"


async def test_update_unknown_isbn_raises_not_found(test_db, seed_books):
    repo = BookRepository(test_db)

    with pytest.raises(ResourceNotFoundError):
        await repo.update("1111111111", _replacement())

    assert len(await repo.find_all()) == 2


async def test_remove_deletes_row(test_db, seed_books):
    repo = BookRepository(test_db)

    await repo.remove("1234567890")

    with pytest.raises(ResourceNotFoundError):
        await repo.find_one("1234567890")
    assert [b.isbn for b in await repo.find_all()] == ["0987654321"]


async def test_remove_twice_raises_not_found(test_db, seed_books):
    repo = BookRepository(test_db)
    await repo.remove("1234567890")

    with pytest.raises(ResourceNotFoundError):
        await repo.remove("1234567890")


async def test_isbn_is_bound_not_interpolated(test_db, seed_books):
    repo = BookRepository(test_db)

    with pytest.raises(ResourceNotFoundError):
        await repo.find_one("' OR '1'='1")
    with pytest.raises(ResourceNotFoundError):
        await repo.remove("1234567890' OR '1'='1")

    assert len(await repo.find_all()) == 2


async def test_store_failure_raises_database_error(test_db, test_engine):
    async with test_engine.begin() as conn:
        await conn.execute(text("DROP TABLE books"))

    with pytest.raises(DatabaseError) as exc_info:
        await BookRepository(test_db).find_all()

    assert exc_info.value.operation == "find_all"
    assert exc_info.value.http_status == 500
