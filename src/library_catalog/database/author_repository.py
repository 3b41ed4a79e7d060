"""
Author repository implementation for the library catalog.

Authors are linked to books through the ``BookAuthor`` junction table.
Deleting an author removes its junction rows and leaves the books in place.
"""

from pydantic import BaseModel
from sqlalchemy import func, or_, select

from ..models.author import Author as AuthorModel
from ..models.author import AuthorFields
from ..models.book import Book as BookModel
from .repository import BaseRepository
from .schema import Author as AuthorDB
from .schema import Book as BookDB


class AuthorUpdateSchema(BaseModel):
    """Schema for updating an author - all fields optional."""

    first_name: str | None = None
    last_name: str | None = None


class AuthorRepository(BaseRepository[AuthorDB, AuthorFields, AuthorUpdateSchema, AuthorModel]):
    """Repository for author data access."""

    @property
    def model_class(self):
        return AuthorDB

    @property
    def fields_schema(self):
        return AuthorFields

    @property
    def response_schema(self):
        return AuthorModel

    def find_by_name(self, text: str) -> list[AuthorModel]:
        """
        Case-insensitive match on first name, last name or "First Last".

        Args:
            text: Fragment to look for

        Returns:
            Matching authors ordered by last name, then first name
        """
        pattern = f"%{text.strip().lower()}%"
        full_name = func.lower(AuthorDB.first_name + " " + AuthorDB.last_name)
        query = (
            select(AuthorDB)
            .where(
                or_(
                    func.lower(AuthorDB.first_name).like(pattern),
                    func.lower(AuthorDB.last_name).like(pattern),
                    full_name.like(pattern),
                )
            )
            .order_by(AuthorDB.last_name, AuthorDB.first_name)
        )
        return self._scalars(query, "find authors by name")

    def get_books(self, author_id: int) -> list[BookModel]:
        """Books credited to an author; empty when the author does not exist."""
        query = (
            select(BookDB)
            .join(BookDB.authors)
            .where(AuthorDB.id == author_id)
            .order_by(BookDB.title)
        )
        results = self._raw_scalars(query, "get books by author")
        return [BookModel.model_validate(book, from_attributes=True) for book in results]
