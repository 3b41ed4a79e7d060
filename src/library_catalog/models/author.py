"""
Author model for the library catalog.

Authors are linked to books many-to-many through the ``BookAuthor``
junction table; ``book_ids`` lists the linked books on read.
"""

from pydantic import BaseModel, ConfigDict, Field

from .fields import required_text

AuthorName = required_text(100)


class AuthorFields(BaseModel):
    """Writable author fields and their limits."""

    model_config = ConfigDict(extra="forbid")

    first_name: AuthorName = Field(
        ...,
        description="Author's first name",
        examples=["Mircea", "Ursula"],
    )

    last_name: AuthorName = Field(
        ...,
        description="Author's last name",
        examples=["Eliade", "Le Guin"],
    )


class Author(AuthorFields):
    """An author as stored in the catalog."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: int = Field(..., description="Surrogate identifier", ge=1)

    book_ids: list[int] = Field(
        default_factory=list,
        description="Ids of the books this author is credited on",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
