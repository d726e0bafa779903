"""Book Schemas — declarative validator for request bodies and response envelopes.

Invariants:
    - BookCreate requires all 8 fields; BookUpdate requires the 7 non-key fields
    - Strings are strict (no coercion from numbers), stripped, and non-empty
    - pages and year are strict integers within the int4 column range;
      pages is also positive
    - isbn never contains "/", so every created book is addressable by path
    - Unknown fields are ignored, so an isbn in a PUT body never reaches the store

Design Decisions:
    - strict=True per field: "200" for pages is a type error, not a coercion
    - BookCreate extends BookUpdate: create is "full replace plus the key"
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

NonEmptyStr = Annotated[str, Field(strict=True, min_length=1)]

INT4_MIN = -(2**31)
INT4_MAX = 2**31 - 1

_TEXT_FIELDS = ("amazon_url", "author", "language", "publisher", "title")


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("must not be empty or whitespace")
    return v


class BookUpdate(BaseModel):
    """Full replacement of a book's non-key fields (PUT body)."""
    model_config = ConfigDict(extra="ignore")

    amazon_url: NonEmptyStr
    author: NonEmptyStr
    language: NonEmptyStr
    pages: int = Field(strict=True, gt=0, le=INT4_MAX)
    publisher: NonEmptyStr
    title: NonEmptyStr
    year: int = Field(strict=True, ge=INT4_MIN, le=INT4_MAX)

    @field_validator(*_TEXT_FIELDS)
    @classmethod
    def strip_text(cls, v: str) -> str:
        return _strip_required(v)


class BookCreate(BookUpdate):
    """New book (POST body) — every field including the isbn key."""
    isbn: NonEmptyStr

    @field_validator("isbn")
    @classmethod
    def strip_isbn(cls, v: str) -> str:
        v = _strip_required(v)
        if "/" in v:
            raise ValueError("must not contain '/'")
        return v


class BookResponse(BaseModel):
    """Public representation of a stored book."""
    model_config = ConfigDict(from_attributes=True)

    isbn: str
    amazon_url: str
    author: str
    language: str
    pages: int
    publisher: str
    title: str
    year: int


class BookEnvelope(BaseModel):
    book: BookResponse


class BookListEnvelope(BaseModel):
    books: list[BookResponse]


class MessageResponse(BaseModel):
    message: str
