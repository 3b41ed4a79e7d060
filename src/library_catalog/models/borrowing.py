"""
Borrowing and loan extension models for the library catalog.

A borrowing links one reader (the borrower) and one book, and optionally the
staff reader who issued it. Extensions hang off a borrowing and are removed
with it. Loan periods, extension limits and fines are decided by callers;
these models only describe what is stored.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class BorrowingFields(BaseModel):
    """Writable borrowing fields."""

    model_config = ConfigDict(extra="forbid")

    reader_id: int = Field(..., description="Borrowing reader")
    book_id: int = Field(..., description="Borrowed book")
    staff_id: int | None = Field(None, description="Staff reader who issued the borrowing")
    borrowing_date: datetime = Field(..., description="When the book left the library")
    due_date: datetime = Field(..., description="When the book is due back")
    return_date: datetime | None = Field(None, description="When the book came back")
    is_active: bool = Field(default=True, description="False once returned")
    initial_borrowing_days: int = Field(..., description="Loan length agreed at checkout")
    total_extension_days: int = Field(default=0, description="Days added by extensions")
    last_extension_date: datetime | None = Field(None, description="Most recent extension")


class Borrowing(BorrowingFields):
    """A borrowing as stored in the catalog."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: int = Field(..., description="Surrogate identifier", ge=1)

    @property
    def is_returned(self) -> bool:
        return self.return_date is not None


class LoanExtensionFields(BaseModel):
    """Writable loan extension fields."""

    model_config = ConfigDict(extra="forbid")

    borrowing_id: int = Field(..., description="Extended borrowing")
    extension_date: datetime = Field(..., description="When the extension was granted")
    extension_days: int = Field(..., description="Days added to the due date")


class LoanExtension(LoanExtensionFields):
    """A loan extension as stored in the catalog."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: int = Field(..., description="Surrogate identifier", ge=1)
