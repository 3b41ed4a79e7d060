"""
Reader model for the library catalog.

Readers borrow books; readers flagged ``is_staff`` may also appear as the
issuing staff member on a borrowing.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .fields import optional_text, required_text

ReaderName = required_text(100)
Address = required_text(255)
Email = optional_text(150)
PhoneNumber = optional_text(20)


class ReaderFields(BaseModel):
    """Writable reader fields and their limits."""

    model_config = ConfigDict(extra="forbid")

    first_name: ReaderName = Field(..., examples=["Ana"])
    last_name: ReaderName = Field(..., examples=["Popescu"])
    address: Address = Field(
        ...,
        description="Postal address",
        examples=["Str. Lunga 12, Brasov"],
    )
    email: Email = Field(None, examples=["ana.popescu@example.com"])
    phone_number: PhoneNumber = Field(None, examples=["+40 722 000 111"])
    is_staff: bool = Field(default=False, description="Library staff member")
    registration_date: datetime = Field(..., description="When the reader registered")


class Reader(ReaderFields):
    """A reader as stored in the catalog."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: int = Field(..., description="Surrogate identifier", ge=1)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
