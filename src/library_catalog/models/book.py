"""
Book model for the library catalog.

A book owns its editions and is linked many-to-many to authors and domains.
``TotalCopies`` and ``ReadingRoomOnlyCopies`` describe the physical stock;
they are stored as given, with no policy attached.
"""

from pydantic import BaseModel, ConfigDict, Field

from .fields import optional_text, required_text

Title = required_text(255)
Isbn = optional_text(20)
Description = optional_text(1000)


class BookFields(BaseModel):
    """Writable book fields and their limits."""

    model_config = ConfigDict(extra="forbid")

    title: Title = Field(
        ...,
        description="Title of the book",
        examples=["Maitreyi", "The Dispossessed"],
    )

    isbn: Isbn = Field(
        None,
        description="ISBN as printed, hyphens allowed",
        examples=["978-973-46-0115-1"],
    )

    description: Description = Field(
        None,
        description="Short description or blurb",
    )

    total_copies: int = Field(
        default=0,
        description="Physical copies owned by the library",
    )

    reading_room_only_copies: int = Field(
        default=0,
        description="Copies that may only be read on site",
    )


class Book(BookFields):
    """A book as stored in the catalog."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: int = Field(..., description="Surrogate identifier", ge=1)

    author_ids: list[int] = Field(default_factory=list, description="Linked author ids")

    domain_ids: list[int] = Field(default_factory=list, description="Linked domain ids")
