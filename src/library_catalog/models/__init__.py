"""
Library catalog entity models.

Pydantic v2 models describing the shape of every entity: required and
optional fields, text limits and primitive types. Each module has a
``*Fields`` model (what a write may contain) and a read model that adds the
surrogate ``id``.
"""

from .author import Author, AuthorFields
from .book import Book, BookFields
from .borrowing import Borrowing, BorrowingFields, LoanExtension, LoanExtensionFields
from .domain import BookDomain, BookDomainFields
from .edition import Edition, EditionFields
from .fields import validate_payload
from .reader import Reader, ReaderFields

__all__ = [
    "Author",
    "AuthorFields",
    "Book",
    "BookDomain",
    "BookDomainFields",
    "BookFields",
    "Borrowing",
    "BorrowingFields",
    "Edition",
    "EditionFields",
    "LoanExtension",
    "LoanExtensionFields",
    "Reader",
    "ReaderFields",
    "validate_payload",
]
