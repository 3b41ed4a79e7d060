"""
Book repository implementation for the library catalog.

Besides CRUD this repository manages the two many-to-many links a book has
(authors and domains) and the reads that follow them. Link changes only touch
the junction tables; neither side is ever deleted by an unlink.
"""

import logging

from pydantic import BaseModel
from sqlalchemy import func, select

from ..errors import ForeignKeyViolation, NotFoundError
from ..models.book import Book as BookModel
from ..models.book import BookFields
from ..models.edition import Edition as EditionModel
from .domain_repository import BookDomainRepository
from .repository import BaseRepository
from .schema import Author as AuthorDB
from .schema import Book as BookDB
from .schema import BookDomain as BookDomainDB
from .schema import Borrowing as BorrowingDB
from .schema import Edition as EditionDB
from .session import safe_commit, safe_query

logger = logging.getLogger(__name__)


def available_copies():
    """SQL expression for a book's lendable copies, correlated to ``Book``."""
    on_loan = (
        select(func.count())
        .select_from(BorrowingDB)
        .where(BorrowingDB.book_id == BookDB.id, BorrowingDB.return_date.is_(None))
        .correlate(BookDB)
        .scalar_subquery()
    )
    return BookDB.total_copies - BookDB.reading_room_only_copies - on_loan


class BookUpdateSchema(BaseModel):
    """Schema for updating a book - all fields optional."""

    title: str | None = None
    isbn: str | None = None
    description: str | None = None
    total_copies: int | None = None
    reading_room_only_copies: int | None = None


class BookRepository(BaseRepository[BookDB, BookFields, BookUpdateSchema, BookModel]):
    """
    Repository for book data access.

    Deleting a book removes its editions and junction rows; a book that has
    ever been borrowed cannot be deleted.
    """

    @property
    def model_class(self):
        return BookDB

    @property
    def fields_schema(self):
        return BookFields

    @property
    def response_schema(self):
        return BookModel

    def get_by_isbn(self, isbn: str) -> BookModel | None:
        """Get a book by ISBN, ignoring hyphens and spaces."""
        normalized = isbn.replace("-", "").replace(" ", "")
        stored = func.replace(func.replace(BookDB.isbn, "-", ""), " ", "")
        query = select(BookDB).where(stored == normalized).order_by(BookDB.id).limit(1)
        results = self._scalars(query, "get book by ISBN")
        return results[0] if results else None

    def get_by_author(self, author_id: int) -> list[BookModel]:
        query = (
            select(BookDB)
            .join(BookDB.authors)
            .where(AuthorDB.id == author_id)
            .order_by(BookDB.title)
        )
        return self._scalars(query, "get books by author")

    def get_by_domain(self, domain_id: int, include_subdomains: bool = False) -> list[BookModel]:
        """
        Books classified under a domain.

        Args:
            domain_id: Domain to look in
            include_subdomains: Also include books filed under any descendant

        Returns:
            Distinct books ordered by title
        """
        domain_ids = [domain_id]
        if include_subdomains:
            descendants = BookDomainRepository(self.session).get_descendants(domain_id)
            domain_ids.extend(domain.id for domain in descendants)

        query = (
            select(BookDB)
            .join(BookDB.domains)
            .where(BookDomainDB.id.in_(domain_ids))
            .distinct()
            .order_by(BookDB.title)
        )
        return self._scalars(query, "get books by domain")

    def get_editions(self, book_id: int) -> list[EditionModel]:
        query = (
            select(EditionDB)
            .where(EditionDB.book_id == book_id)
            .order_by(EditionDB.edition_number, EditionDB.year)
        )
        return [
            EditionModel.model_validate(edition, from_attributes=True)
            for edition in self._raw_scalars(query, "get editions of book")
        ]

    def get_available_copies(self, book_id: int) -> int:
        """
        Copies that can still be lent: total minus reading-room-only minus
        borrowings not yet returned.

        Raises:
            NotFoundError: If the book does not exist
        """
        query = select(available_copies()).where(BookDB.id == book_id)
        available = safe_query(
            self.session,
            lambda s: s.execute(query).scalar_one_or_none(),
            "count available copies",
        )
        if available is None:
            raise NotFoundError(self.entity_name, book_id)
        return available

    def get_available_books(self) -> list[BookModel]:
        """Books with at least one copy that can be lent right now."""
        query = select(BookDB).where(available_copies() > 0).order_by(BookDB.title, BookDB.id)
        return self._scalars(query, "get available books")

    # === Links ===

    def _fetch_linked(self, model, id: int, link: tuple[str, str] | None = None):
        """
        Load the row on the other side of a link.

        ``link`` names the junction table and column when the row is about to
        be referenced, turning a missing row into a foreign key violation.
        """
        linked = safe_query(
            self.session,
            lambda s: s.execute(select(model).where(model.id == id)).scalar_one_or_none(),
            f"get {model.__name__} to link",
        )
        if linked is None:
            if link is None:
                raise NotFoundError(model.__name__, id)
            junction, column = link
            raise ForeignKeyViolation(junction, column, id, model.__tablename__)
        return linked

    def _change_link(self, book_id: int, collection: str, linked, add: bool) -> BookModel:
        book = self._fetch_or_raise(book_id)
        items = getattr(book, collection)

        if add and linked not in items:
            items.append(linked)
        elif not add and linked in items:
            items.remove(linked)
        else:
            return self._to_response_model(book)

        safe_commit(self.session, f"update {collection} of Book", "Book")
        logger.debug(
            "%s %s %s on book %s", "Linked" if add else "Unlinked", collection, linked.id, book_id
        )
        return self._to_response_model(book)

    def add_author(self, book_id: int, author_id: int) -> BookModel:
        """
        Credit an author on a book. Linking twice is a no-op.

        Raises:
            NotFoundError: If the book does not exist
            ForeignKeyViolation: If the author does not exist
        """
        author = self._fetch_linked(AuthorDB, author_id, ("BookAuthor", "AuthorId"))
        return self._change_link(book_id, "authors", author, add=True)

    def remove_author(self, book_id: int, author_id: int) -> BookModel:
        author = self._fetch_linked(AuthorDB, author_id)
        return self._change_link(book_id, "authors", author, add=False)

    def add_domain(self, book_id: int, domain_id: int) -> BookModel:
        """
        File a book under a domain. Linking twice is a no-op.

        Raises:
            NotFoundError: If the book does not exist
            ForeignKeyViolation: If the domain does not exist
        """
        domain = self._fetch_linked(BookDomainDB, domain_id, ("BookBookDomain", "DomainId"))
        return self._change_link(book_id, "domains", domain, add=True)

    def remove_domain(self, book_id: int, domain_id: int) -> BookModel:
        domain = self._fetch_linked(BookDomainDB, domain_id)
        return self._change_link(book_id, "domains", domain, add=False)
