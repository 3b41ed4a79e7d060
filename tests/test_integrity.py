"""
Tests for referential integrity: foreign key checks, graph-driven deletes
and the domain hierarchy.
"""

from datetime import datetime

import pytest
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError

from library_catalog.database import IntegrityGuard, book_author, book_book_domain
from library_catalog.database.schema import BookDomain as BookDomainDB
from library_catalog.database.schema import Edition as EditionDB
from library_catalog.database.session import translate_db_error
from library_catalog.errors import (
    ForeignKeyViolation,
    HierarchyCycleError,
    NotFoundError,
    ReferentialIntegrityError,
    ValidationError,
)


def count_rows(session, table) -> int:
    return session.execute(select(func.count()).select_from(table)).scalar()


@pytest.fixture
def linked_book(repos, sample_book, sample_author):
    """A book with one author, one domain and two editions."""
    domain = repos["domain"].create({"name": "Fiction"})
    repos["book"].add_author(sample_book.id, sample_author.id)
    repos["book"].add_domain(sample_book.id, domain.id)
    for number in (1, 2):
        repos["edition"].create(
            {
                "book_id": sample_book.id,
                "publisher": "Humanitas",
                "year": 1990 + number,
                "edition_number": number,
                "page_count": 224,
                "book_type": "Paperback",
            }
        )
    return repos["book"].get_by_id(sample_book.id)


class TestForeignKeys:
    def test_borrowing_with_missing_staff_is_rejected(
        self, repos, session, sample_reader, sample_book, borrowing_payload
    ):
        payload = borrowing_payload(sample_reader.id, sample_book.id, staff_id=9999)

        with pytest.raises(ForeignKeyViolation) as exc_info:
            repos["borrowing"].create(payload)

        assert exc_info.value.entity == "Borrowing"
        assert exc_info.value.field == "staff_id"
        assert exc_info.value.value == 9999
        assert exc_info.value.referenced == "Reader"
        assert repos["borrowing"].get_all() == []

    def test_borrowing_without_staff_is_accepted(
        self, repos, sample_reader, sample_book, borrowing_payload
    ):
        borrowing = repos["borrowing"].create(borrowing_payload(sample_reader.id, sample_book.id))
        assert borrowing.staff_id is None

    def test_borrower_and_staff_resolve_independently(
        self, repos, sample_reader, sample_staff, sample_book, borrowing_payload
    ):
        borrowing = repos["borrowing"].create(
            borrowing_payload(sample_reader.id, sample_book.id, staff_id=sample_staff.id)
        )

        assert borrowing.reader_id == sample_reader.id
        assert borrowing.staff_id == sample_staff.id

    def test_edition_with_missing_book(self, repos):
        with pytest.raises(ForeignKeyViolation) as exc_info:
            repos["edition"].create(
                {
                    "book_id": 42,
                    "publisher": "P",
                    "year": 2001,
                    "edition_number": 1,
                    "page_count": 10,
                    "book_type": "Hardcover",
                }
            )
        assert exc_info.value.field == "book_id"

    def test_update_to_missing_reference(self, repos, sample_borrowing):
        with pytest.raises(ForeignKeyViolation):
            repos["borrowing"].update(sample_borrowing.id, {"reader_id": 777})

        assert repos["borrowing"].get_by_id(sample_borrowing.id).reader_id == (
            sample_borrowing.reader_id
        )

    def test_database_rejection_is_translated(self):
        error = IntegrityError("INSERT", {}, Exception("FOREIGN KEY constraint failed"))
        translated = translate_db_error(error, "create Edition", "Edition")
        assert isinstance(translated, ForeignKeyViolation)
        assert translated.field is None

    def test_not_null_rejection_is_translated(self):
        error = IntegrityError("INSERT", {}, Exception("NOT NULL constraint failed: Book.Title"))
        translated = translate_db_error(error, "create Book", "Book")
        assert isinstance(translated, ValidationError)
        assert translated.field == "Book.Title"
        assert translated.constraint == "required"


class TestBookDeletes:
    def test_plain_book_delete_removes_only_its_junction_rows(
        self, repos, session, linked_book, sample_author
    ):
        other = repos["book"].create({"title": "Isabel si apele diavolului"})
        repos["book"].add_author(other.id, sample_author.id)
        repos["book"].add_domain(other.id, linked_book.domain_ids[0])

        removed = repos["book"].delete(other.id)

        assert removed["Book"] == 1
        assert removed["BookAuthor"] == 1
        assert removed["BookBookDomain"] == 1
        assert repos["book"].get_by_id(other.id) is None
        # The author, the domain and the other book's links survive
        assert repos["author"].get_by_id(sample_author.id) is not None
        assert repos["domain"].get_by_id(linked_book.domain_ids[0]) is not None
        assert count_rows(session, book_author) == 1
        assert count_rows(session, book_book_domain) == 1

    def test_book_delete_cascades_to_editions(self, repos, session, linked_book):
        editions = repos["book"].get_editions(linked_book.id)
        assert len(editions) == 2

        removed = repos["book"].delete(linked_book.id)

        assert removed["Edition"] == 2
        assert count_rows(session, EditionDB) == 0
        for edition in editions:
            assert repos["edition"].get_by_id(edition.id) is None

    def test_borrowed_book_cannot_be_deleted(
        self, repos, session, linked_book, sample_reader, borrowing_payload
    ):
        repos["borrowing"].create(borrowing_payload(sample_reader.id, linked_book.id))

        with pytest.raises(ReferentialIntegrityError) as exc_info:
            repos["book"].delete(linked_book.id)

        error = exc_info.value
        assert error.entity == "Book"
        assert error.entity_id == linked_book.id
        assert error.dependent == "Borrowing"
        assert error.column == "BookId"
        assert error.count == 1

        # Nothing was removed
        assert repos["book"].get_by_id(linked_book.id) is not None
        assert len(repos["book"].get_editions(linked_book.id)) == 2
        assert count_rows(session, book_author) == 1

    def test_delete_missing_book(self, repos):
        with pytest.raises(NotFoundError):
            repos["book"].delete(404)


class TestReaderDeletes:
    def test_borrower_cannot_be_deleted(self, repos, sample_borrowing):
        with pytest.raises(ReferentialIntegrityError) as exc_info:
            repos["reader"].delete(sample_borrowing.reader_id)
        assert exc_info.value.column == "ReaderId"

    def test_issuing_staff_cannot_be_deleted(
        self, repos, sample_reader, sample_staff, sample_book, borrowing_payload
    ):
        repos["borrowing"].create(
            borrowing_payload(sample_reader.id, sample_book.id, staff_id=sample_staff.id)
        )

        with pytest.raises(ReferentialIntegrityError) as exc_info:
            repos["reader"].delete(sample_staff.id)
        assert exc_info.value.column == "StaffId"

    def test_reader_without_history_can_be_deleted(self, repos, sample_reader):
        assert repos["reader"].delete(sample_reader.id) == {"Reader": 1}
        assert repos["reader"].get_by_id(sample_reader.id) is None


class TestBorrowingDeletes:
    def test_borrowing_delete_cascades_to_extensions(self, repos, sample_borrowing):
        extension_ids = [
            repos["extension"]
            .create(
                {
                    "borrowing_id": sample_borrowing.id,
                    "extension_date": datetime(2026, 1, 20 + offset),
                    "extension_days": 7,
                }
            )
            .id
            for offset in range(2)
        ]

        removed = repos["borrowing"].delete(sample_borrowing.id)

        assert removed == {"LoanExtension": 2, "Borrowing": 1}
        for extension_id in extension_ids:
            assert repos["extension"].get_by_id(extension_id) is None
        # Reader and book are untouched
        assert repos["reader"].get_by_id(sample_borrowing.reader_id) is not None
        assert repos["book"].get_by_id(sample_borrowing.book_id) is not None


class TestDomainHierarchy:
    @pytest.fixture
    def tree(self, repos):
        """Science > Computer Science > Databases, plus a separate root Art."""
        domains = repos["domain"]
        science = domains.create({"name": "Science"})
        cs = domains.create({"name": "Computer Science", "parent_domain_id": science.id})
        databases = domains.create({"name": "Databases", "parent_domain_id": cs.id})
        art = domains.create({"name": "Art"})
        return {"science": science, "cs": cs, "databases": databases, "art": art}

    def test_two_node_cycle_is_rejected(self, repos):
        a = repos["domain"].create({"name": "A"})
        b = repos["domain"].create({"name": "B"})

        repos["domain"].set_parent(a.id, b.id)
        with pytest.raises(HierarchyCycleError) as exc_info:
            repos["domain"].set_parent(b.id, a.id)

        assert exc_info.value.field == "parent_domain_id"
        assert exc_info.value.constraint == "acyclic"
        assert repos["domain"].get_by_id(b.id).parent_domain_id is None

    def test_self_parent_is_rejected(self, repos, tree):
        with pytest.raises(HierarchyCycleError):
            repos["domain"].set_parent(tree["cs"].id, tree["cs"].id)

    def test_moving_under_a_descendant_is_rejected(self, repos, tree):
        with pytest.raises(HierarchyCycleError):
            repos["domain"].set_parent(tree["science"].id, tree["databases"].id)

    def test_moving_to_another_branch(self, repos, tree):
        moved = repos["domain"].set_parent(tree["databases"].id, tree["art"].id)
        assert moved.parent_domain_id == tree["art"].id

        moved = repos["domain"].set_parent(tree["databases"].id, None)
        assert moved.is_root

    def test_missing_parent(self, repos, tree):
        with pytest.raises(ForeignKeyViolation):
            repos["domain"].set_parent(tree["cs"].id, 999)

    def test_domain_with_subdomains_cannot_be_deleted(self, repos, tree):
        with pytest.raises(ReferentialIntegrityError) as exc_info:
            repos["domain"].delete(tree["cs"].id)

        assert exc_info.value.column == "ParentDomainId"
        assert repos["domain"].get_by_id(tree["cs"].id) is not None

    def test_leaf_domain_delete_removes_book_links(self, repos, tree, sample_book):
        repos["book"].add_domain(sample_book.id, tree["databases"].id)

        repos["domain"].delete(tree["databases"].id)

        assert repos["book"].get_by_id(sample_book.id).domain_ids == []

    def test_guard_walk_terminates_on_existing_loop(self, session, repos):
        a = repos["domain"].create({"name": "A"})
        b = repos["domain"].create({"name": "B"})
        c = repos["domain"].create({"name": "C"})
        # A loop written around the repository
        session.execute(
            update(BookDomainDB).where(BookDomainDB.id == a.id).values(parent_domain_id=b.id)
        )
        session.execute(
            update(BookDomainDB).where(BookDomainDB.id == b.id).values(parent_domain_id=a.id)
        )
        session.commit()

        with pytest.raises(HierarchyCycleError):
            IntegrityGuard(session).check_domain_parent(c.id, a.id)
