"""Edition repository implementation for the library catalog."""

from pydantic import BaseModel
from sqlalchemy import select

from ..models.edition import Edition as EditionModel
from ..models.edition import EditionFields
from .repository import BaseRepository
from .schema import Edition as EditionDB


class EditionUpdateSchema(BaseModel):
    """Schema for updating an edition - all fields optional."""

    book_id: int | None = None
    publisher: str | None = None
    year: int | None = None
    edition_number: int | None = None
    page_count: int | None = None
    book_type: str | None = None


class EditionRepository(
    BaseRepository[EditionDB, EditionFields, EditionUpdateSchema, EditionModel]
):
    """Repository for book editions. Editions are removed with their book."""

    @property
    def model_class(self):
        return EditionDB

    @property
    def fields_schema(self):
        return EditionFields

    @property
    def response_schema(self):
        return EditionModel

    def get_by_book(self, book_id: int) -> list[EditionModel]:
        query = (
            select(EditionDB)
            .where(EditionDB.book_id == book_id)
            .order_by(EditionDB.edition_number, EditionDB.year)
        )
        return self._scalars(query, "get editions by book")

    def get_by_publisher(self, publisher: str) -> list[EditionModel]:
        query = (
            select(EditionDB)
            .where(EditionDB.publisher == publisher)
            .order_by(EditionDB.year, EditionDB.id)
        )
        return self._scalars(query, "get editions by publisher")
