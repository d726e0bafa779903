"""Book Repository — persistence operations for the books table.

Invariants:
    - isbn identifies at most one row; lookups, updates and deletes match it exactly
    - create never overwrites: an existing isbn raises DuplicateResourceError
    - update/remove on a missing isbn raise ResourceNotFoundError and change nothing
    - Each operation is a single parameter-bound statement, committed on its own
    - Any other SQLAlchemy failure is rolled back and raised as DatabaseError

Design Decisions:
    - INSERT/UPDATE/DELETE ... RETURNING: existence and the new state come back
      from the same statement, no read-then-write race on the key
    - populate_existing on RETURNING: rows already in the session's identity map
      are refreshed with the stored values
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from book_catalog.core.errors import (
    DatabaseError, DuplicateResourceError, ErrorContext, ResourceNotFoundError,
)
from book_catalog.models.book import Book
from book_catalog.schemas.book import BookCreate, BookUpdate

logger = logging.getLogger(__name__)


class BookRepository:
    """CRUD over Book rows for a single unit of work."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_all(self) -> list[Book]:
        """Every stored book, ordered by isbn."""
        async with self._store_errors("find_all"):
            result = await self.db.scalars(select(Book).order_by(Book.isbn))
            return list(result.all())

    async def find_one(self, isbn: str) -> Book:
        async with self._store_errors("find_one", isbn):
            book = await self.db.scalar(select(Book).where(Book.isbn == isbn))
        if book is None:
            raise self._not_found(isbn, "find_one")
        return book

    async def create(self, data: BookCreate) -> Book:
        """Insert a new book; the isbn must not exist yet."""
        stmt = (
            insert(Book)
            .values(**data.model_dump())
            .returning(Book)
            .execution_options(populate_existing=True)
        )
        async with self._store_errors("create", data.isbn):
            try:
                book = (await self.db.scalars(stmt)).one()
                await self.db.commit()
            except IntegrityError as e:
                await self.db.rollback()
                logger.warning(
                    f"Duplicate isbn rejected: {data.isbn}",
                    extra={"isbn": data.isbn, "operation": "create"},
                )
                raise DuplicateResourceError(
                    "Book", data.isbn,
                    ErrorContext(isbn=data.isbn, operation="create"),
                ) from e
        logger.info("Book created", extra={"isbn": book.isbn, "operation": "create"})
        return book

    async def update(self, isbn: str, data: BookUpdate) -> Book:
        """Replace every non-key field of an existing book."""
        stmt = (
            update(Book)
            .where(Book.isbn == isbn)
            .values(**data.model_dump())
            .returning(Book)
            .execution_options(populate_existing=True)
        )
        async with self._store_errors("update", isbn):
            book = (await self.db.scalars(stmt)).one_or_none()
            if book is None:
                await self.db.rollback()
                raise self._not_found(isbn, "update")
            await self.db.commit()
        logger.info("Book updated", extra={"isbn": isbn, "operation": "update"})
        return book

    async def remove(self, isbn: str) -> None:
        stmt = delete(Book).where(Book.isbn == isbn).returning(Book.isbn)
        async with self._store_errors("remove", isbn):
            deleted = (await self.db.scalars(stmt)).one_or_none()
            if deleted is None:
                await self.db.rollback()
                raise self._not_found(isbn, "remove")
            await self.db.commit()
        logger.info("Book deleted", extra={"isbn": isbn, "operation": "remove"})

    @asynccontextmanager
    async def _store_errors(
        self, operation: str, isbn: str | None = None,
    ) -> AsyncIterator[None]:
        """Map driver/ORM failures to DatabaseError after rolling back."""
        try:
            yield
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"Book {operation} failed: {e}",
                extra={"isbn": isbn, "operation": operation},
            )
            raise DatabaseError(
                operation, ErrorContext(isbn=isbn, operation=operation),
            ) from e

    @staticmethod
    def _not_found(isbn: str, operation: str) -> ResourceNotFoundError:
        return ResourceNotFoundError(
            "Book", isbn, ErrorContext(isbn=isbn, operation=operation),
        )
