"""Book ORM — the single persisted entity, keyed by its ISBN.

Invariants:
    - isbn is the natural primary key (no surrogate id)
    - Every column is NOT NULL
    - isbn never changes after insert; updates replace the other seven columns
"""

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from book_catalog.db.base import Base


class Book(Base):
    """Book row in the catalog."""
    __tablename__ = "books"

    isbn: Mapped[str] = mapped_column(Text, primary_key=True)
    amazon_url: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(Text, nullable=False)
    language: Mapped[str] = mapped_column(Text, nullable=False)
    pages: Mapped[int] = mapped_column(Integer, nullable=False)
    publisher: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<Book isbn={self.isbn!r} title={self.title!r}>"
