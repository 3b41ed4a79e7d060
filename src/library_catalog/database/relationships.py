"""
Relationship graph for the library catalog.

Every foreign key in the schema is listed here once, with its cardinality and
what happens to dependent rows when the referenced ("one" side) row is
deleted. The delete path in ``integrity.py`` walks this table instead of
relying on ORM cascade conventions, and the FK existence checks on insert and
update read it too.
"""

import enum

from pydantic import BaseModel, ConfigDict


class Cardinality(str, enum.Enum):
    """Shape of a relationship as seen from the parent table."""

    ONE_TO_MANY = "one-to-many"
    OPTIONAL_ONE_TO_MANY = "optional-one-to-many"
    MANY_TO_MANY = "many-to-many"


class DeletePolicy(str, enum.Enum):
    """What a parent delete does to dependent rows."""

    CASCADE = "cascade"
    RESTRICT = "restrict"


class RelationshipEdge(BaseModel):
    """One foreign key: ``child.child_column`` references ``parent.Id``."""

    model_config = ConfigDict(frozen=True)

    name: str
    parent: str
    child: str
    child_column: str
    cardinality: Cardinality
    on_delete: DeletePolicy

    @property
    def is_junction(self) -> bool:
        return self.cardinality == Cardinality.MANY_TO_MANY

    @property
    def is_optional(self) -> bool:
        return self.cardinality == Cardinality.OPTIONAL_ONE_TO_MANY


RELATIONSHIP_GRAPH: tuple[RelationshipEdge, ...] = (
    RelationshipEdge(
        name="book_editions",
        parent="Book",
        child="Edition",
        child_column="BookId",
        cardinality=Cardinality.ONE_TO_MANY,
        on_delete=DeletePolicy.CASCADE,
    ),
    RelationshipEdge(
        name="book_borrowings",
        parent="Book",
        child="Borrowing",
        child_column="BookId",
        cardinality=Cardinality.ONE_TO_MANY,
        on_delete=DeletePolicy.RESTRICT,
    ),
    RelationshipEdge(
        name="reader_borrowings",
        parent="Reader",
        child="Borrowing",
        child_column="ReaderId",
        cardinality=Cardinality.ONE_TO_MANY,
        on_delete=DeletePolicy.RESTRICT,
    ),
    RelationshipEdge(
        name="staff_borrowings_given",
        parent="Reader",
        child="Borrowing",
        child_column="StaffId",
        cardinality=Cardinality.OPTIONAL_ONE_TO_MANY,
        on_delete=DeletePolicy.RESTRICT,
    ),
    RelationshipEdge(
        name="borrowing_extensions",
        parent="Borrowing",
        child="LoanExtension",
        child_column="BorrowingId",
        cardinality=Cardinality.ONE_TO_MANY,
        on_delete=DeletePolicy.CASCADE,
    ),
    RelationshipEdge(
        name="domain_subdomains",
        parent="BookDomain",
        child="BookDomain",
        child_column="ParentDomainId",
        cardinality=Cardinality.OPTIONAL_ONE_TO_MANY,
        on_delete=DeletePolicy.RESTRICT,
    ),
    RelationshipEdge(
        name="book_authors",
        parent="Book",
        child="BookAuthor",
        child_column="BookId",
        cardinality=Cardinality.MANY_TO_MANY,
        on_delete=DeletePolicy.CASCADE,
    ),
    RelationshipEdge(
        name="author_books",
        parent="Author",
        child="BookAuthor",
        child_column="AuthorId",
        cardinality=Cardinality.MANY_TO_MANY,
        on_delete=DeletePolicy.CASCADE,
    ),
    RelationshipEdge(
        name="book_domains",
        parent="Book",
        child="BookBookDomain",
        child_column="BookId",
        cardinality=Cardinality.MANY_TO_MANY,
        on_delete=DeletePolicy.CASCADE,
    ),
    RelationshipEdge(
        name="domain_books",
        parent="BookDomain",
        child="BookBookDomain",
        child_column="DomainId",
        cardinality=Cardinality.MANY_TO_MANY,
        on_delete=DeletePolicy.CASCADE,
    ),
)


def edges_from(parent: str) -> list[RelationshipEdge]:
    """Edges whose referenced ("one") side is ``parent``."""
    return [edge for edge in RELATIONSHIP_GRAPH if edge.parent == parent]


def edges_into(child: str) -> list[RelationshipEdge]:
    """Edges whose FK column lives on ``child``."""
    return [edge for edge in RELATIONSHIP_GRAPH if edge.child == child]


def get_edge(name: str) -> RelationshipEdge:
    for edge in RELATIONSHIP_GRAPH:
        if edge.name == name:
            return edge
    raise KeyError(name)
