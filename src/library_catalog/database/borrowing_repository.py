"""
Borrowing repository implementation for the library catalog.

This repository stores the lending lifecycle as plain records:

1. **Borrowings**: one reader, one book, optionally the staff reader who
   issued the loan
2. **Loan extensions**: removed together with their borrowing
3. **Reporting reads**: active loans per reader, overdue loans, loans in a
   date range, loans issued by a staff member

Loan periods, extension limits and fines are computed by callers; nothing
here derives one field from another.
"""

from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import and_, select

from ..errors import ValidationError
from ..models.borrowing import Borrowing as BorrowingModel
from ..models.borrowing import BorrowingFields, LoanExtensionFields
from ..models.borrowing import LoanExtension as LoanExtensionModel
from .repository import BaseRepository
from .schema import Borrowing as BorrowingDB
from .schema import LoanExtension as LoanExtensionDB


class BorrowingUpdateSchema(BaseModel):
    """Schema for updating a borrowing - all fields optional."""

    reader_id: int | None = None
    book_id: int | None = None
    staff_id: int | None = None
    borrowing_date: datetime | None = None
    due_date: datetime | None = None
    return_date: datetime | None = None
    is_active: bool | None = None
    initial_borrowing_days: int | None = None
    total_extension_days: int | None = None
    last_extension_date: datetime | None = None


class LoanExtensionUpdateSchema(BaseModel):
    """Schema for updating a loan extension - all fields optional."""

    borrowing_id: int | None = None
    extension_date: datetime | None = None
    extension_days: int | None = None


class BorrowingRepository(
    BaseRepository[BorrowingDB, BorrowingFields, BorrowingUpdateSchema, BorrowingModel]
):
    """
    Repository for borrowings.

    ``reader_id`` and ``staff_id`` are independent references into ``Reader``;
    each is checked on its own when written.
    """

    @property
    def model_class(self):
        return BorrowingDB

    @property
    def fields_schema(self):
        return BorrowingFields

    @property
    def response_schema(self):
        return BorrowingModel

    def get_active_by_reader(self, reader_id: int) -> list[BorrowingModel]:
        query = (
            select(BorrowingDB)
            .where(and_(BorrowingDB.reader_id == reader_id, BorrowingDB.is_active.is_(True)))
            .order_by(BorrowingDB.due_date)
        )
        return self._scalars(query, "get active borrowings by reader")

    def get_by_book(self, book_id: int) -> list[BorrowingModel]:
        query = (
            select(BorrowingDB)
            .where(BorrowingDB.book_id == book_id)
            .order_by(BorrowingDB.borrowing_date.desc())
        )
        return self._scalars(query, "get borrowings by book")

    def get_overdue(self, as_of: datetime) -> list[BorrowingModel]:
        """
        Active borrowings whose due date is before ``as_of``. ``IsActive`` is
        the open-loan flag; ``ReturnDate`` is not consulted.

        Args:
            as_of: Reference moment, usually now

        Returns:
            Borrowings ordered from the most overdue
        """
        query = (
            select(BorrowingDB)
            .where(
                and_(
                    BorrowingDB.is_active.is_(True),
                    BorrowingDB.due_date < as_of,
                )
            )
            .order_by(BorrowingDB.due_date)
        )
        return self._scalars(query, "get overdue borrowings")

    def get_by_date_range(self, start: datetime, end: datetime) -> list[BorrowingModel]:
        """
        Borrowings whose borrowing date falls within ``[start, end]``.

        Raises:
            ValidationError: If ``start`` is after ``end``
        """
        if start > end:
            raise ValidationError("Borrowing", "borrowing_date", "range", "start is after end")

        query = (
            select(BorrowingDB)
            .where(BorrowingDB.borrowing_date.between(start, end))
            .order_by(BorrowingDB.borrowing_date)
        )
        return self._scalars(query, "get borrowings by date range")

    def get_issued_by_staff(self, staff_id: int) -> list[BorrowingModel]:
        query = (
            select(BorrowingDB)
            .where(BorrowingDB.staff_id == staff_id)
            .order_by(BorrowingDB.borrowing_date.desc())
        )
        return self._scalars(query, "get borrowings issued by staff")

    def get_extensions(self, borrowing_id: int) -> list[LoanExtensionModel]:
        return LoanExtensionRepository(self.session).get_by_borrowing(borrowing_id)


class LoanExtensionRepository(
    BaseRepository[
        LoanExtensionDB, LoanExtensionFields, LoanExtensionUpdateSchema, LoanExtensionModel
    ]
):
    """Repository for loan extensions."""

    @property
    def model_class(self):
        return LoanExtensionDB

    @property
    def fields_schema(self):
        return LoanExtensionFields

    @property
    def response_schema(self):
        return LoanExtensionModel

    def get_by_borrowing(self, borrowing_id: int) -> list[LoanExtensionModel]:
        query = (
            select(LoanExtensionDB)
            .where(LoanExtensionDB.borrowing_id == borrowing_id)
            .order_by(LoanExtensionDB.extension_date)
        )
        return self._scalars(query, "get extensions by borrowing")
