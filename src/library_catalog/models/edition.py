"""Edition model for the library catalog."""

from pydantic import BaseModel, ConfigDict, Field

from .fields import required_text

Publisher = required_text(150)
BookType = required_text(50)


class EditionFields(BaseModel):
    """Writable edition fields. Every field is required."""

    model_config = ConfigDict(extra="forbid")

    book_id: int = Field(..., description="Book this edition belongs to")
    publisher: Publisher = Field(..., examples=["Humanitas"])
    book_type: BookType = Field(..., examples=["Hardcover", "Paperback"])
    year: int = Field(..., description="Publication year", examples=[1933])
    edition_number: int = Field(..., examples=[1, 2])
    page_count: int = Field(..., examples=[224])


class Edition(EditionFields):
    """An edition as stored in the catalog."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: int = Field(..., description="Surrogate identifier", ge=1)
