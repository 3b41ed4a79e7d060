"""
Write-time integrity enforcement.

The checks here run inside the caller's transaction, before anything is
committed:

1. **Foreign keys**: every non-null FK value must name an existing row
2. **Domain hierarchy**: a parent link must not make a domain its own ancestor
3. **Deletes**: ``RELATIONSHIP_GRAPH`` decides, edge by edge, whether
   dependents are removed with the parent or block the delete

A blocked delete raises before the first DELETE statement is issued, so a
rejected delete never leaves partial changes behind.
"""

import logging

from pydantic import BaseModel, ConfigDict
from sqlalchemy import Column, Table, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import ForeignKeyViolation, HierarchyCycleError, ReferentialIntegrityError
from ..observability import traced
from .relationships import DeletePolicy, edges_from, edges_into
from .schema import Base

logger = logging.getLogger(__name__)


def get_table(name: str) -> Table:
    return Base.metadata.tables[name]


def get_column(table: Table, name: str) -> Column:
    for column in table.columns:
        if column.name == name:
            return column
    raise KeyError(f"{table.name}.{name}")


def attribute_key(table: Table, column_name: str) -> str:
    """
    Python attribute that maps ``column_name`` (``"StaffId"`` -> ``"staff_id"``).

    Junction tables have no mapped class; their column names are returned as is.
    """
    column = get_column(table, column_name)
    for mapper in Base.registry.mappers:
        if mapper.local_table is table:
            return mapper.get_property_by_column(column).key
    return column_name


class DeleteStep(BaseModel):
    """Rows of ``table`` whose ``column`` value is in ``ids``."""

    model_config = ConfigDict(frozen=True)

    table: str
    column: str
    ids: tuple[int, ...]


class IntegrityGuard:
    """Integrity checks and graph-driven deletes bound to one session."""

    def __init__(self, session: Session):
        self.session = session

    # === Foreign keys ===

    def row_exists(self, table_name: str, row_id: int) -> bool:
        table = get_table(table_name)
        query = select(func.count()).select_from(table).where(get_column(table, "Id") == row_id)
        return (self.session.execute(query).scalar() or 0) > 0

    def check_foreign_keys(self, table_name: str, values: dict[str, object], entity: str) -> None:
        """
        Verify every FK column of ``table_name`` present in ``values``.

        Args:
            table_name: Table the row is written to
            values: Column name -> value for the columns being written
            entity: Entity name used in error messages

        Raises:
            ForeignKeyViolation: If a referenced row is missing
        """
        table = get_table(table_name)
        for edge in edges_into(table_name):
            if edge.child_column not in values:
                continue
            value = values[edge.child_column]
            if value is None:
                continue
            if not self.row_exists(edge.parent, value):
                field = attribute_key(table, edge.child_column)
                raise ForeignKeyViolation(entity, field, value, edge.parent)

    # === Domain hierarchy ===

    def check_domain_parent(self, domain_id: int | None, parent_id: int | None) -> None:
        """
        Reject a parent link that would close a loop in the domain tree.

        Walks up from ``parent_id``; reaching ``domain_id`` means the proposed
        parent is the domain itself or one of its descendants. The walk is
        bounded by the number of domains so pre-existing loops terminate too.
        """
        if parent_id is None or domain_id is None:
            return
        if parent_id == domain_id:
            raise HierarchyCycleError(domain_id, parent_id)

        table = get_table("BookDomain")
        id_column = get_column(table, "Id")
        parent_column = get_column(table, "ParentDomainId")
        limit = self.session.execute(select(func.count()).select_from(table)).scalar() or 0

        current: int | None = parent_id
        steps = 0
        while current is not None:
            if current == domain_id or steps > limit:
                raise HierarchyCycleError(domain_id, parent_id)
            current = self.session.execute(
                select(parent_column).where(id_column == current)
            ).scalar_one_or_none()
            steps += 1

    # === Deletes ===

    def plan_delete(self, table_name: str, row_id: int) -> list[DeleteStep]:
        """
        Work out every row a delete of ``table_name``/``row_id`` touches.

        Returns the steps in execution order (deepest dependents first, the
        row itself last).

        Raises:
            ReferentialIntegrityError: If a restrict edge anywhere in the
                cascade closure has dependents
        """
        steps: list[DeleteStep] = []
        self._collect(table_name, (row_id,), steps)
        steps.append(DeleteStep(table=table_name, column="Id", ids=(row_id,)))
        return steps

    def _collect(self, table_name: str, ids: tuple[int, ...], steps: list[DeleteStep]) -> None:
        for edge in edges_from(table_name):
            child = get_table(edge.child)
            fk = get_column(child, edge.child_column)

            if edge.on_delete == DeletePolicy.RESTRICT:
                count = self.session.execute(
                    select(func.count()).select_from(child).where(fk.in_(ids))
                ).scalar() or 0
                if count:
                    entity_id = ids[0] if len(ids) == 1 else list(ids)
                    raise ReferentialIntegrityError(
                        table_name, entity_id, edge.child, edge.child_column, count
                    )
                continue

            if not edge.is_junction:
                child_ids = tuple(
                    self.session.execute(
                        select(get_column(child, "Id")).where(fk.in_(ids))
                    ).scalars()
                )
                if not child_ids:
                    continue
                self._collect(edge.child, child_ids, steps)

            steps.append(DeleteStep(table=edge.child, column=edge.child_column, ids=ids))

    def delete(self, table_name: str, row_id: int) -> dict[str, int]:
        """
        Delete a row and its cascade dependents in the current transaction.

        The caller commits. Returns the number of rows removed per table.
        """
        with traced("catalog.delete {table}", table=table_name, row_id=row_id) as span:
            plan = self.plan_delete(table_name, row_id)
            removed: dict[str, int] = {}

            try:
                for step in plan:
                    table = get_table(step.table)
                    column = get_column(table, step.column)
                    result = self.session.execute(delete(table).where(column.in_(step.ids)))
                    removed[step.table] = removed.get(step.table, 0) + (result.rowcount or 0)
            except IntegrityError as e:
                # A dependent appeared after the restrict checks ran
                self.session.rollback()
                raise ReferentialIntegrityError(table_name, row_id) from e

            if span is not None:
                span.set_attribute("rows_removed", removed)

        logger.info("Deleted %s %s (%s)", table_name, row_id, removed)
        return removed
