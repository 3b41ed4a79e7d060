"""
Book domain model for the library catalog.

Domains form a tree: each has at most one parent (``parent_domain_id``) and
any number of subdomains.
"""

from pydantic import BaseModel, ConfigDict, Field

from .fields import required_text

DomainName = required_text(150)


class BookDomainFields(BaseModel):
    """Writable domain fields and their limits."""

    model_config = ConfigDict(extra="forbid")

    name: DomainName = Field(
        ...,
        description="Domain name",
        examples=["Science", "Computer Science", "Databases"],
    )

    parent_domain_id: int | None = Field(
        None,
        description="Parent domain, None for a root domain",
    )


class BookDomain(BookDomainFields):
    """A domain as stored in the catalog."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: int = Field(..., description="Surrogate identifier", ge=1)

    @property
    def is_root(self) -> bool:
        return self.parent_domain_id is None
