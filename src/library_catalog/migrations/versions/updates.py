"""Borrowing datetimes to datetime2

Revision ID: 202601061234308
Revises: 202601051710198

Widens the four Borrowing datetime columns to ``datetime2(7)`` on SQL Server.
Other dialects keep their regular datetime type. Nullability is unchanged.
"""

import sqlalchemy as sa
from alembic.operations import Operations
from sqlalchemy.dialects import mssql

revision = "202601061234308"
name = "Updates"

PreciseDateTime = sa.DateTime().with_variant(mssql.DATETIME2(precision=7), "mssql")

# column -> nullable
BORROWING_DATETIMES = {
    "BorrowingDate": False,
    "DueDate": False,
    "ReturnDate": True,
    "LastExtensionDate": True,
}


def upgrade(op: Operations) -> None:
    with op.batch_alter_table("Borrowing") as batch_op:
        for column, nullable in BORROWING_DATETIMES.items():
            batch_op.alter_column(
                column,
                existing_type=sa.DateTime(),
                type_=PreciseDateTime,
                existing_nullable=nullable,
            )


def downgrade(op: Operations) -> None:
    with op.batch_alter_table("Borrowing") as batch_op:
        for column, nullable in BORROWING_DATETIMES.items():
            batch_op.alter_column(
                column,
                existing_type=PreciseDateTime,
                type_=sa.DateTime(),
                existing_nullable=nullable,
            )
