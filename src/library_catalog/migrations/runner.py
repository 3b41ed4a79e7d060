"""
Ordered schema migrations with a persisted version marker.

Applied steps are recorded in ``__MigrationHistory`` (``MigrationId``,
``ProductVersion``). Each step runs on its own connection inside one
transaction together with its marker write, so the marker never claims a step
that did not complete. A failing step raises ``MigrationError`` and nothing
after it runs.

Steps are expressed with alembic ``Operations`` so SQLite table rebuilds go
through ``batch_alter_table``; there is no alembic environment or revision
directory, the runner owns ordering and history itself.
"""

import logging
from collections.abc import Callable, Sequence
from types import ModuleType

from alembic.operations import Operations
from alembic.runtime.migration import MigrationContext
from pydantic import BaseModel, ConfigDict
from sqlalchemy import Column, MetaData, String, Table, delete, insert, select
from sqlalchemy.engine import Connection, Engine

from ..errors import MigrationError
from ..observability import traced
from .versions import STEPS

logger = logging.getLogger(__name__)

HISTORY_TABLE = "__MigrationHistory"

history_metadata = MetaData()

migration_history = Table(
    HISTORY_TABLE,
    history_metadata,
    Column("MigrationId", String(150), primary_key=True),
    Column("ProductVersion", String(32), nullable=False),
)


class Migration(BaseModel):
    """One step of the schema history."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    upgrade: Callable[[Operations], None]
    downgrade: Callable[[Operations], None]

    @property
    def label(self) -> str:
        return f"{self.id}_{self.name}"

    @classmethod
    def from_module(cls, module: ModuleType) -> "Migration":
        return cls(
            id=module.revision,
            name=module.name,
            upgrade=module.upgrade,
            downgrade=module.downgrade,
        )


MIGRATIONS: tuple[Migration, ...] = tuple(Migration.from_module(step) for step in STEPS)


class MigrationStatus(BaseModel):
    """Snapshot of where a database stands in the migration sequence."""

    current: str | None
    applied: list[str]
    pending: list[str]

    @property
    def up_to_date(self) -> bool:
        return not self.pending


class MigrationRunner:
    """
    Applies and reverts migrations against one engine.

    ```python
    runner = MigrationRunner(engine)
    runner.upgrade()                     # everything pending
    runner.downgrade("202601051710198")  # back to Initial
    ```
    """

    def __init__(
        self,
        engine: Engine,
        migrations: Sequence[Migration] = MIGRATIONS,
        product_version: str = "0.1.0",
    ):
        ids = [migration.id for migration in migrations]
        if ids != sorted(ids) or len(set(ids)) != len(ids):
            raise ValueError("Migration ids must be unique and in ascending order")

        self.engine = engine
        self.migrations = list(migrations)
        self.product_version = product_version

    # === Version marker ===

    def _ensure_history(self) -> None:
        with self.engine.begin() as connection:
            migration_history.create(connection, checkfirst=True)

    @property
    def applied(self) -> list[str]:
        """Ids recorded in the history table, oldest first."""
        self._ensure_history()
        with self.engine.connect() as connection:
            rows = connection.execute(
                select(migration_history.c.MigrationId).order_by(migration_history.c.MigrationId)
            )
            return [row[0] for row in rows]

    @property
    def current_version(self) -> str | None:
        applied = self.applied
        return applied[-1] if applied else None

    @property
    def pending(self) -> list[Migration]:
        applied = set(self.applied)
        return [migration for migration in self.migrations if migration.id not in applied]

    def status(self) -> MigrationStatus:
        applied = self.applied
        return MigrationStatus(
            current=applied[-1] if applied else None,
            applied=applied,
            pending=[migration.id for migration in self.pending],
        )

    def _get(self, migration_id: str, direction: str) -> Migration:
        for migration in self.migrations:
            if migration.id == migration_id:
                return migration
        raise MigrationError(migration_id, "unknown", direction, "no migration with this id")

    # === Running steps ===

    def upgrade(self, target: str | None = None) -> list[str]:
        """
        Apply pending migrations in order, up to and including ``target``.

        Returns:
            Ids applied by this call; empty when already up to date

        Raises:
            MigrationError: If a step fails; earlier steps stay applied
        """
        if target is not None:
            self._get(target, "upgrade")

        steps = [m for m in self.pending if target is None or m.id <= target]
        if not steps:
            logger.info("Schema is up to date at %s", self.current_version)
            return []

        done = []
        for migration in steps:
            self._run(migration, "upgrade")
            done.append(migration.id)
        return done

    def downgrade(self, target: str | None = None) -> list[str]:
        """
        Revert applied migrations newest first, until ``target`` is the latest
        applied step. With no target every step is reverted.

        Returns:
            Ids reverted by this call
        """
        if target is not None:
            self._get(target, "downgrade")

        applied = self.applied
        steps = [
            self._get(migration_id, "downgrade")
            for migration_id in reversed(applied)
            if target is None or migration_id > target
        ]

        done = []
        for migration in steps:
            self._run(migration, "downgrade")
            done.append(migration.id)
        return done

    def _run(self, migration: Migration, direction: str) -> None:
        with traced(
            "migration {migration_id} {direction}",
            migration_id=migration.id,
            migration_name=migration.name,
            direction=direction,
        ):
            logger.info("Running %s of %s", direction, migration.label)
            with self.engine.connect() as connection:
                sqlite = connection.dialect.name == "sqlite"
                if sqlite:
                    # Table rebuilds must not trigger cascades on referencing tables
                    self._set_sqlite_foreign_keys(connection, enabled=False)
                try:
                    with connection.begin():
                        op = Operations(MigrationContext.configure(connection))
                        if direction == "upgrade":
                            migration.upgrade(op)
                            connection.execute(
                                insert(migration_history).values(
                                    MigrationId=migration.id,
                                    ProductVersion=self.product_version,
                                )
                            )
                        else:
                            migration.downgrade(op)
                            connection.execute(
                                delete(migration_history).where(
                                    migration_history.c.MigrationId == migration.id
                                )
                            )
                except Exception as e:
                    logger.exception("%s of %s failed", direction.capitalize(), migration.label)
                    raise MigrationError(migration.id, migration.name, direction, str(e)) from e
                finally:
                    if sqlite:
                        self._set_sqlite_foreign_keys(connection, enabled=True)

        logger.info("Finished %s of %s", direction, migration.label)

    @staticmethod
    def _set_sqlite_foreign_keys(connection: Connection, enabled: bool) -> None:
        connection.exec_driver_sql(f"PRAGMA foreign_keys={'ON' if enabled else 'OFF'}")
        connection.commit()
