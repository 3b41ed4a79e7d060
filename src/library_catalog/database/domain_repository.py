"""
Book domain repository implementation for the library catalog.

Domains form a tree through ``ParentDomainId``. The database accepts any
self-reference, so this repository keeps the tree acyclic: every write that
changes a parent link first walks the proposed parent's ancestor chain.
A domain with subdomains cannot be deleted.
"""

from pydantic import BaseModel
from sqlalchemy import func, select

from ..models.domain import BookDomain as BookDomainModel
from ..models.domain import BookDomainFields
from .repository import BaseRepository
from .schema import BookDomain as BookDomainDB


class BookDomainUpdateSchema(BaseModel):
    """Schema for updating a domain - all fields optional."""

    name: str | None = None
    parent_domain_id: int | None = None


class BookDomainRepository(
    BaseRepository[BookDomainDB, BookDomainFields, BookDomainUpdateSchema, BookDomainModel]
):
    """Repository for the domain hierarchy."""

    @property
    def model_class(self):
        return BookDomainDB

    @property
    def fields_schema(self):
        return BookDomainFields

    @property
    def response_schema(self):
        return BookDomainModel

    def _validate_write(self, values, id):
        if id is not None and "parent_domain_id" in values:
            self.guard.check_domain_parent(id, values["parent_domain_id"])

    def get_by_name(self, name: str) -> BookDomainModel | None:
        """First domain (lowest id) whose name matches, case-insensitively."""
        query = (
            select(BookDomainDB)
            .where(func.lower(BookDomainDB.name) == name.strip().lower())
            .order_by(BookDomainDB.id)
            .limit(1)
        )
        results = self._scalars(query, "get domain by name")
        return results[0] if results else None

    def get_root_domains(self) -> list[BookDomainModel]:
        query = (
            select(BookDomainDB)
            .where(BookDomainDB.parent_domain_id.is_(None))
            .order_by(BookDomainDB.name)
        )
        return self._scalars(query, "get root domains")

    def get_subdomains(self, domain_id: int) -> list[BookDomainModel]:
        """Direct children of a domain."""
        query = (
            select(BookDomainDB)
            .where(BookDomainDB.parent_domain_id == domain_id)
            .order_by(BookDomainDB.name)
        )
        return self._scalars(query, "get subdomains")

    def get_ancestors(self, domain_id: int) -> list[BookDomainModel]:
        """
        Parent, grandparent and so on up to the root, nearest first.

        Stops early if a loop is met, so rows written outside this
        repository cannot hang the walk.
        """
        ancestors: list[BookDomainModel] = []
        seen = {domain_id}
        current = self.get_by_id(domain_id)

        while current is not None and current.parent_domain_id is not None:
            if current.parent_domain_id in seen:
                break
            seen.add(current.parent_domain_id)
            current = self.get_by_id(current.parent_domain_id)
            if current is not None:
                ancestors.append(current)

        return ancestors

    def get_descendants(self, domain_id: int) -> list[BookDomainModel]:
        """Every domain below ``domain_id``, breadth first."""
        descendants: list[BookDomainModel] = []
        seen = {domain_id}
        frontier = [domain_id]

        while frontier:
            query = (
                select(BookDomainDB)
                .where(BookDomainDB.parent_domain_id.in_(frontier))
                .order_by(BookDomainDB.id)
            )
            frontier = []
            for child in self._scalars(query, "get descendant domains"):
                if child.id in seen:
                    continue
                seen.add(child.id)
                descendants.append(child)
                frontier.append(child.id)

        return descendants

    def set_parent(self, domain_id: int, parent_id: int | None) -> BookDomainModel:
        """
        Move a domain under ``parent_id``, or make it a root with None.

        Raises:
            NotFoundError: If the domain does not exist
            ForeignKeyViolation: If the parent does not exist
            HierarchyCycleError: If the parent is the domain or one of its descendants
        """
        return self.update(domain_id, {"parent_domain_id": parent_id})
