"""
Reader repository implementation for the library catalog.

A reader can appear on a borrowing twice over: as the borrower and, when
flagged as staff, as the issuer. Either role blocks deleting the reader.
"""

from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import func, select

from ..models.reader import Reader as ReaderModel
from ..models.reader import ReaderFields
from .repository import BaseRepository
from .schema import Borrowing as BorrowingDB
from .schema import Reader as ReaderDB


class ReaderUpdateSchema(BaseModel):
    """Schema for updating a reader - all fields optional."""

    first_name: str | None = None
    last_name: str | None = None
    address: str | None = None
    email: str | None = None
    phone_number: str | None = None
    is_staff: bool | None = None
    registration_date: datetime | None = None


class ReaderRepository(BaseRepository[ReaderDB, ReaderFields, ReaderUpdateSchema, ReaderModel]):
    """Repository for library readers and staff."""

    @property
    def model_class(self):
        return ReaderDB

    @property
    def fields_schema(self):
        return ReaderFields

    @property
    def response_schema(self):
        return ReaderModel

    def get_by_email(self, email: str) -> ReaderModel | None:
        """Get a reader by email address (case-insensitive)."""
        query = (
            select(ReaderDB)
            .where(func.lower(ReaderDB.email) == email.strip().lower())
            .order_by(ReaderDB.id)
            .limit(1)
        )
        results = self._scalars(query, "get reader by email")
        return results[0] if results else None

    def is_staff(self, reader_id: int) -> bool:
        """
        Whether a reader is a staff member.

        Raises:
            NotFoundError: If the reader does not exist
        """
        return bool(self._fetch_or_raise(reader_id).is_staff)

    def get_staff(self) -> list[ReaderModel]:
        query = (
            select(ReaderDB)
            .where(ReaderDB.is_staff.is_(True))
            .order_by(ReaderDB.last_name, ReaderDB.first_name)
        )
        return self._scalars(query, "get staff readers")

    def get_regular_readers(self) -> list[ReaderModel]:
        query = (
            select(ReaderDB)
            .where(ReaderDB.is_staff.is_(False))
            .order_by(ReaderDB.last_name, ReaderDB.first_name)
        )
        return self._scalars(query, "get regular readers")

    def get_readers_with_active_borrowings(self) -> list[ReaderModel]:
        """Readers that are the borrower on at least one active borrowing."""
        query = (
            select(ReaderDB)
            .where(ReaderDB.borrowings.any(BorrowingDB.is_active.is_(True)))
            .order_by(ReaderDB.last_name, ReaderDB.first_name)
        )
        return self._scalars(query, "get readers with active borrowings")
