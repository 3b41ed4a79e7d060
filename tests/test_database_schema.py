"""
Tests for the SQLAlchemy schema and the relationship graph.

The ORM declarations, the relationship graph and the flush-time shape
checks must agree with each other; these tests pin that down.
"""

from datetime import datetime

import pytest
from sqlalchemy import select

from library_catalog.database import RELATIONSHIP_GRAPH, Base, Cardinality, DeletePolicy
from library_catalog.database.relationships import edges_from, edges_into, get_edge
from library_catalog.database.schema import Author, Book, Borrowing, LoanExtension, Reader
from library_catalog.errors import ValidationError

ENTITY_TABLES = {"Author", "Book", "BookDomain", "Edition", "Reader", "Borrowing", "LoanExtension"}
JUNCTION_TABLES = {"BookAuthor", "BookBookDomain"}


class TestTableLayout:
    def test_all_tables_declared(self):
        assert set(Base.metadata.tables) == ENTITY_TABLES | JUNCTION_TABLES

    def test_column_names_are_storage_names(self):
        author = Base.metadata.tables["Author"]
        assert [c.name for c in author.columns] == ["Id", "FirstName", "LastName"]

        borrowing = Base.metadata.tables["Borrowing"]
        assert {"ReaderId", "BookId", "StaffId", "InitialBorrowingDays"} <= {
            c.name for c in borrowing.columns
        }

    def test_staff_reference_is_optional(self):
        borrowing = Base.metadata.tables["Borrowing"]
        assert borrowing.c.StaffId.nullable is True
        assert borrowing.c.ReaderId.nullable is False

    def test_junction_tables_use_composite_keys(self):
        book_author = Base.metadata.tables["BookAuthor"]
        assert [c.name for c in book_author.primary_key.columns] == ["BookId", "AuthorId"]

        book_domain = Base.metadata.tables["BookBookDomain"]
        assert [c.name for c in book_domain.primary_key.columns] == ["BookId", "DomainId"]


class TestRelationshipGraph:
    """The graph and the FK declarations describe the same relationships."""

    def test_every_foreign_key_has_an_edge(self):
        declared = {
            (fk.column.table.name, table.name, fk.parent.name)
            for table in Base.metadata.tables.values()
            for fk in table.foreign_keys
        }
        in_graph = {(e.parent, e.child, e.child_column) for e in RELATIONSHIP_GRAPH}
        assert declared == in_graph

    def test_on_delete_rules_match_policies(self):
        for edge in RELATIONSHIP_GRAPH:
            column = next(
                c for c in Base.metadata.tables[edge.child].columns if c.name == edge.child_column
            )
            (fk,) = column.foreign_keys
            if edge.on_delete == DeletePolicy.CASCADE:
                assert fk.ondelete == "CASCADE", edge.name
            else:
                assert fk.ondelete is None, edge.name

    def test_optional_edges_have_nullable_columns(self):
        for edge in RELATIONSHIP_GRAPH:
            column = next(
                c for c in Base.metadata.tables[edge.child].columns if c.name == edge.child_column
            )
            assert column.nullable is edge.is_optional, edge.name

    def test_junction_edges(self):
        junction = {e.name for e in RELATIONSHIP_GRAPH if e.is_junction}
        assert junction == {"book_authors", "author_books", "book_domains", "domain_books"}
        assert all(
            e.on_delete == DeletePolicy.CASCADE for e in RELATIONSHIP_GRAPH if e.is_junction
        )

    def test_lookups(self):
        assert get_edge("staff_borrowings_given").cardinality == Cardinality.OPTIONAL_ONE_TO_MANY
        assert {e.name for e in edges_from("Reader")} == {
            "reader_borrowings",
            "staff_borrowings_given",
        }
        assert {e.child_column for e in edges_into("Borrowing")} == {
            "ReaderId",
            "BookId",
            "StaffId",
        }
        with pytest.raises(KeyError):
            get_edge("reader_books")


class TestShapeListener:
    """Rows added straight through the ORM are still shape-checked at flush."""

    def test_insert_with_missing_required_column(self, session):
        session.add(Author(first_name="Mircea"))
        with pytest.raises(ValidationError) as exc_info:
            session.commit()
        session.rollback()

        assert exc_info.value.entity == "Author"
        assert exc_info.value.field == "last_name"
        assert session.execute(select(Author)).first() is None

    def test_insert_with_overlong_text(self, session):
        session.add(Book(title="x" * 300))
        with pytest.raises(ValidationError) as exc_info:
            session.commit()
        session.rollback()

        assert exc_info.value.constraint == "max_length"

    def test_defaults_fill_value_columns(self, session):
        book = Book(title="Dune")
        session.add(book)
        session.commit()

        assert book.total_copies == 0
        assert book.reading_room_only_copies == 0

    def test_update_to_blank_is_rejected(self, session):
        author = Author(first_name="Mircea", last_name="Eliade")
        session.add(author)
        session.commit()

        author.last_name = "  "
        with pytest.raises(ValidationError):
            session.commit()
        session.rollback()


class TestComputedProperties:
    def test_full_names(self):
        assert Author(first_name="Mircea", last_name="Eliade").full_name == "Mircea Eliade"

    def test_effective_extension_days(self, session):
        reader = Reader(
            first_name="Ana",
            last_name="Pop",
            address="Here",
            registration_date=datetime(2026, 1, 1),
        )
        book = Book(title="Dune")
        session.add_all([reader, book])
        session.flush()

        borrowing = Borrowing(
            reader_id=reader.id,
            book_id=book.id,
            borrowing_date=datetime(2026, 1, 2),
            due_date=datetime(2026, 1, 16),
            initial_borrowing_days=14,
        )
        borrowing.extensions.append(
            LoanExtension(extension_date=datetime(2026, 1, 15), extension_days=5)
        )
        borrowing.extensions.append(
            LoanExtension(extension_date=datetime(2026, 1, 19), extension_days=3)
        )
        session.add(borrowing)
        session.commit()

        # Stored total is 0, so the extension rows are summed
        assert borrowing.effective_extension_days == 8

        borrowing.total_extension_days = 10
        session.commit()
        assert borrowing.effective_extension_days == 10
