"""Initial schema

Revision ID: 202601051710198
Revises:

Creates the seven entity tables and the ``BookAuthor`` / ``BookBookDomain``
junction tables. Borrowing datetimes are plain DATETIME here and Borrowing has
no StaffId yet.
"""

import sqlalchemy as sa
from alembic.operations import Operations

revision = "202601051710198"
name = "Initial"


def upgrade(op: Operations) -> None:
    op.create_table(
        "Author",
        sa.Column("Id", sa.Integer(), nullable=False),
        sa.Column("FirstName", sa.String(length=100), nullable=False),
        sa.Column("LastName", sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint("Id"),
    )

    op.create_table(
        "Book",
        sa.Column("Id", sa.Integer(), nullable=False),
        sa.Column("Title", sa.String(length=255), nullable=False),
        sa.Column("Description", sa.String(length=1000), nullable=True),
        sa.Column("ISBN", sa.String(length=20), nullable=True),
        sa.Column("TotalCopies", sa.Integer(), nullable=False),
        sa.Column("ReadingRoomOnlyCopies", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("Id"),
    )

    op.create_table(
        "BookDomain",
        sa.Column("Id", sa.Integer(), nullable=False),
        sa.Column("Name", sa.String(length=150), nullable=False),
        sa.Column("ParentDomainId", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(
            ["ParentDomainId"],
            ["BookDomain.Id"],
            name="FK_BookDomain_BookDomain_ParentDomainId",
        ),
        sa.PrimaryKeyConstraint("Id"),
    )
    op.create_index("IX_BookDomain_ParentDomainId", "BookDomain", ["ParentDomainId"])

    op.create_table(
        "Reader",
        sa.Column("Id", sa.Integer(), nullable=False),
        sa.Column("FirstName", sa.String(length=100), nullable=False),
        sa.Column("LastName", sa.String(length=100), nullable=False),
        sa.Column("Address", sa.String(length=255), nullable=False),
        sa.Column("PhoneNumber", sa.String(length=20), nullable=True),
        sa.Column("Email", sa.String(length=150), nullable=True),
        sa.Column("RegistrationDate", sa.DateTime(), nullable=False),
        sa.Column("IsStaff", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("Id"),
    )

    op.create_table(
        "Edition",
        sa.Column("Id", sa.Integer(), nullable=False),
        sa.Column("BookId", sa.Integer(), nullable=False),
        sa.Column("Publisher", sa.String(length=150), nullable=False),
        sa.Column("Year", sa.Integer(), nullable=False),
        sa.Column("EditionNumber", sa.Integer(), nullable=False),
        sa.Column("PageCount", sa.Integer(), nullable=False),
        sa.Column("BookType", sa.String(length=50), nullable=False),
        sa.ForeignKeyConstraint(
            ["BookId"], ["Book.Id"], name="FK_Edition_Book_BookId", ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("Id"),
    )
    op.create_index("IX_Edition_BookId", "Edition", ["BookId"])

    op.create_table(
        "Borrowing",
        sa.Column("Id", sa.Integer(), nullable=False),
        sa.Column("ReaderId", sa.Integer(), nullable=False),
        sa.Column("BookId", sa.Integer(), nullable=False),
        sa.Column("BorrowingDate", sa.DateTime(), nullable=False),
        sa.Column("DueDate", sa.DateTime(), nullable=False),
        sa.Column("ReturnDate", sa.DateTime(), nullable=True),
        sa.Column("IsActive", sa.Boolean(), nullable=False),
        sa.Column("TotalExtensionDays", sa.Integer(), nullable=False),
        sa.Column("LastExtensionDate", sa.DateTime(), nullable=True),
        sa.Column("InitialBorrowingDays", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["ReaderId"], ["Reader.Id"], name="FK_Borrowing_Reader_ReaderId"),
        sa.ForeignKeyConstraint(["BookId"], ["Book.Id"], name="FK_Borrowing_Book_BookId"),
        sa.PrimaryKeyConstraint("Id"),
    )
    op.create_index("IX_Borrowing_ReaderId", "Borrowing", ["ReaderId"])
    op.create_index("IX_Borrowing_BookId", "Borrowing", ["BookId"])

    op.create_table(
        "LoanExtension",
        sa.Column("Id", sa.Integer(), nullable=False),
        sa.Column("BorrowingId", sa.Integer(), nullable=False),
        sa.Column("ExtensionDate", sa.DateTime(), nullable=False),
        sa.Column("ExtensionDays", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["BorrowingId"],
            ["Borrowing.Id"],
            name="FK_LoanExtension_Borrowing_BorrowingId",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("Id"),
    )
    op.create_index("IX_LoanExtension_BorrowingId", "LoanExtension", ["BorrowingId"])

    op.create_table(
        "BookAuthor",
        sa.Column("BookId", sa.Integer(), nullable=False),
        sa.Column("AuthorId", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["BookId"], ["Book.Id"], name="FK_BookAuthor_Book_BookId", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["AuthorId"], ["Author.Id"], name="FK_BookAuthor_Author_AuthorId", ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("BookId", "AuthorId"),
    )
    op.create_index("IX_BookAuthor_BookId", "BookAuthor", ["BookId"])
    op.create_index("IX_BookAuthor_AuthorId", "BookAuthor", ["AuthorId"])

    op.create_table(
        "BookBookDomain",
        sa.Column("BookId", sa.Integer(), nullable=False),
        sa.Column("DomainId", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["BookId"], ["Book.Id"], name="FK_BookBookDomain_Book_BookId", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["DomainId"],
            ["BookDomain.Id"],
            name="FK_BookBookDomain_BookDomain_DomainId",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("BookId", "DomainId"),
    )
    op.create_index("IX_BookBookDomain_BookId", "BookBookDomain", ["BookId"])
    op.create_index("IX_BookBookDomain_DomainId", "BookBookDomain", ["DomainId"])


def downgrade(op: Operations) -> None:
    # Dependents first
    op.drop_table("BookBookDomain")
    op.drop_table("BookAuthor")
    op.drop_table("LoanExtension")
    op.drop_table("Borrowing")
    op.drop_table("Edition")
    op.drop_table("Reader")
    op.drop_table("BookDomain")
    op.drop_table("Book")
    op.drop_table("Author")
