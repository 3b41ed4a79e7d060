"""
SQLAlchemy schema for the library catalog.

These declarations describe the schema state produced by the full migration
sequence in ``library_catalog.migrations``. Table and column names are part of
the storage contract and are reproduced exactly (``Author.FirstName``,
``Borrowing.StaffId``, junction tables ``BookAuthor`` and ``BookBookDomain``);
Python attributes use snake_case keys mapped onto those names.

Foreign keys carry the same ON DELETE rules as ``RELATIONSHIP_GRAPH`` so the
database itself is a backstop for the delete path in ``integrity.py``.
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    event,
    inspect,
)
from sqlalchemy.dialects import mssql
from sqlalchemy.orm import declarative_base, relationship

from ..errors import ValidationError

# Index and FK names follow the IX_<table>_<column> / FK_<table>_<target>_<column>
# pattern used by the migrations.
NAMING_CONVENTION = {
    "ix": "IX_%(table_name)s_%(column_0_name)s",
    "fk": "FK_%(table_name)s_%(referred_table_name)s_%(column_0_name)s",
}

Base = declarative_base(metadata=MetaData(naming_convention=NAMING_CONVENTION))

# datetime2(7) on SQL Server, the dialect's regular datetime type elsewhere
PreciseDateTime = DateTime().with_variant(mssql.DATETIME2(precision=7), "mssql")


book_author = Table(
    "BookAuthor",
    Base.metadata,
    Column(
        "BookId",
        Integer,
        ForeignKey("Book.Id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
    Column(
        "AuthorId",
        Integer,
        ForeignKey("Author.Id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)


book_book_domain = Table(
    "BookBookDomain",
    Base.metadata,
    Column(
        "BookId",
        Integer,
        ForeignKey("Book.Id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
    Column(
        "DomainId",
        Integer,
        ForeignKey("BookDomain.Id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)


class Author(Base):
    """Authors; linked to books through ``BookAuthor``."""

    __tablename__ = "Author"

    id = Column("Id", Integer, primary_key=True)
    first_name = Column("FirstName", String(100), nullable=False)
    last_name = Column("LastName", String(100), nullable=False)

    books = relationship(
        "Book", secondary=book_author, back_populates="authors", passive_deletes=True
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def book_ids(self) -> list[int]:
        return sorted(book.id for book in self.books)


class Book(Base):
    """
    Catalog titles.

    Editions are owned (deleted with the book). Borrowings only reference the
    book, so a book with borrowing history cannot be deleted.
    """

    __tablename__ = "Book"

    id = Column("Id", Integer, primary_key=True)
    title = Column("Title", String(255), nullable=False)
    description = Column("Description", String(1000), nullable=True)
    isbn = Column("ISBN", String(20), nullable=True)
    total_copies = Column("TotalCopies", Integer, nullable=False, default=0)
    reading_room_only_copies = Column("ReadingRoomOnlyCopies", Integer, nullable=False, default=0)

    authors = relationship(
        "Author", secondary=book_author, back_populates="books", passive_deletes=True
    )
    domains = relationship(
        "BookDomain", secondary=book_book_domain, back_populates="books", passive_deletes=True
    )
    editions = relationship(
        "Edition", back_populates="book", cascade="all, delete-orphan", passive_deletes=True
    )
    borrowings = relationship("Borrowing", back_populates="book", passive_deletes="all")

    @property
    def author_ids(self) -> list[int]:
        return sorted(author.id for author in self.authors)

    @property
    def domain_ids(self) -> list[int]:
        return sorted(domain.id for domain in self.domains)


class BookDomain(Base):
    """
    Classification domains, arranged as a tree through ``ParentDomainId``.

    The FK is non-cascading and the database accepts any self-reference;
    the domain repository rejects parent links that would form a cycle.
    """

    __tablename__ = "BookDomain"

    id = Column("Id", Integer, primary_key=True)
    name = Column("Name", String(150), nullable=False)
    parent_domain_id = Column(
        "ParentDomainId", Integer, ForeignKey("BookDomain.Id"), nullable=True, index=True
    )

    parent = relationship("BookDomain", remote_side=[id], back_populates="subdomains")
    subdomains = relationship("BookDomain", back_populates="parent", passive_deletes="all")
    books = relationship(
        "Book", secondary=book_book_domain, back_populates="domains", passive_deletes=True
    )


class Edition(Base):
    """Physical editions of a book."""

    __tablename__ = "Edition"

    id = Column("Id", Integer, primary_key=True)
    book_id = Column(
        "BookId", Integer, ForeignKey("Book.Id", ondelete="CASCADE"), nullable=False, index=True
    )
    publisher = Column("Publisher", String(150), nullable=False)
    year = Column("Year", Integer, nullable=False)
    edition_number = Column("EditionNumber", Integer, nullable=False)
    page_count = Column("PageCount", Integer, nullable=False)
    book_type = Column("BookType", String(50), nullable=False)

    book = relationship("Book", back_populates="editions")


class Reader(Base):
    """
    Library members. A reader appears on a borrowing either as the borrower
    (``ReaderId``) or as the staff member who issued it (``StaffId``).
    """

    __tablename__ = "Reader"

    id = Column("Id", Integer, primary_key=True)
    first_name = Column("FirstName", String(100), nullable=False)
    last_name = Column("LastName", String(100), nullable=False)
    address = Column("Address", String(255), nullable=False)
    phone_number = Column("PhoneNumber", String(20), nullable=True)
    email = Column("Email", String(150), nullable=True)
    registration_date = Column("RegistrationDate", DateTime, nullable=False)
    is_staff = Column("IsStaff", Boolean, nullable=False, default=False)

    borrowings = relationship(
        "Borrowing",
        back_populates="reader",
        foreign_keys="Borrowing.reader_id",
        passive_deletes="all",
    )
    borrowings_given = relationship(
        "Borrowing",
        back_populates="staff",
        foreign_keys="Borrowing.staff_id",
        passive_deletes="all",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Borrowing(Base):
    """A loan of one book to one reader, optionally issued by a staff reader."""

    __tablename__ = "Borrowing"

    id = Column("Id", Integer, primary_key=True)
    reader_id = Column("ReaderId", Integer, ForeignKey("Reader.Id"), nullable=False, index=True)
    book_id = Column("BookId", Integer, ForeignKey("Book.Id"), nullable=False, index=True)
    staff_id = Column("StaffId", Integer, ForeignKey("Reader.Id"), nullable=True, index=True)
    borrowing_date = Column("BorrowingDate", PreciseDateTime, nullable=False)
    due_date = Column("DueDate", PreciseDateTime, nullable=False)
    return_date = Column("ReturnDate", PreciseDateTime, nullable=True)
    is_active = Column("IsActive", Boolean, nullable=False, default=True)
    total_extension_days = Column("TotalExtensionDays", Integer, nullable=False, default=0)
    last_extension_date = Column("LastExtensionDate", PreciseDateTime, nullable=True)
    initial_borrowing_days = Column("InitialBorrowingDays", Integer, nullable=False)

    reader = relationship("Reader", foreign_keys=[reader_id], back_populates="borrowings")
    staff = relationship("Reader", foreign_keys=[staff_id], back_populates="borrowings_given")
    book = relationship("Book", back_populates="borrowings")
    extensions = relationship(
        "LoanExtension",
        back_populates="borrowing",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def effective_extension_days(self) -> int:
        """Stored extension total, falling back to the sum of extension rows."""
        if self.total_extension_days and self.total_extension_days > 0:
            return self.total_extension_days
        return sum(extension.extension_days for extension in self.extensions)


class LoanExtension(Base):
    """One extension of a borrowing's due date."""

    __tablename__ = "LoanExtension"

    id = Column("Id", Integer, primary_key=True)
    borrowing_id = Column(
        "BorrowingId",
        Integer,
        ForeignKey("Borrowing.Id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    extension_date = Column("ExtensionDate", DateTime, nullable=False)
    extension_days = Column("ExtensionDays", Integer, nullable=False)

    borrowing = relationship("Borrowing", back_populates="extensions")


def check_row_shape(mapper, target, *, updating: bool = False) -> None:
    """
    Reject a pending row whose values break the column declarations.

    Only attributes present on the instance are checked on update, so
    unloaded columns are never fetched mid-flush.
    """
    entity = mapper.class_.__name__
    loaded = inspect(target).dict

    for attr in mapper.column_attrs:
        column = attr.columns[0]
        if updating and attr.key not in loaded:
            continue
        value = loaded.get(attr.key)

        if value is None:
            if column.nullable or column.primary_key or column.default is not None:
                continue
            raise ValidationError(entity, attr.key, "required")

        if isinstance(value, str):
            length = getattr(column.type, "length", None)
            if length is not None and len(value) > length:
                raise ValidationError(
                    entity, attr.key, "max_length", f"{len(value)} characters, limit {length}"
                )
            if not column.nullable and not value.strip():
                raise ValidationError(entity, attr.key, "required", "blank value")


@event.listens_for(Base, "before_insert", propagate=True)
def validate_before_insert(mapper, connection, target):  # noqa: ARG001
    check_row_shape(mapper, target)


@event.listens_for(Base, "before_update", propagate=True)
def validate_before_update(mapper, connection, target):  # noqa: ARG001
    check_row_shape(mapper, target, updating=True)
