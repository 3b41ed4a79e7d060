"""Borrowing staff reference

Revision ID: 202601090933269
Revises: 202601061234308

Adds the optional ``StaffId`` column to Borrowing, indexed, referencing
``Reader.Id`` without cascade. Existing rows get NULL.
"""

import sqlalchemy as sa
from alembic.operations import Operations

revision = "202601090933269"
name = "Updates1"


def upgrade(op: Operations) -> None:
    with op.batch_alter_table("Borrowing") as batch_op:
        batch_op.add_column(sa.Column("StaffId", sa.Integer(), nullable=True))
        batch_op.create_index("IX_Borrowing_StaffId", ["StaffId"])
        batch_op.create_foreign_key("FK_Borrowing_Reader_StaffId", "Reader", ["StaffId"], ["Id"])


def downgrade(op: Operations) -> None:
    with op.batch_alter_table("Borrowing") as batch_op:
        batch_op.drop_constraint("FK_Borrowing_Reader_StaffId", type_="foreignkey")
        batch_op.drop_index("IX_Borrowing_StaffId")
        batch_op.drop_column("StaffId")
