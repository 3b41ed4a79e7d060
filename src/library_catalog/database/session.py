"""
Database session management for the library catalog.

This module owns the engine and the session factory and is the single place
where SQLAlchemy exceptions are translated into the catalog's error taxonomy:

1. Transaction Management: every repository write commits through
   :func:`safe_commit`, so a write is all-or-nothing
2. Error Translation: integrity failures become ``ValidationError`` /
   ``ForeignKeyViolation``, lock and connection failures become
   ``TransientStorageError``
3. Foreign Keys on SQLite: enforcement is switched on for every connection

Sessions should be short-lived; prefer :meth:`DatabaseManager.session_scope`.
"""

import logging
from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import TypeVar

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import CatalogConfig, get_config
from ..errors import CatalogError, ForeignKeyViolation, TransientStorageError, ValidationError
from ..migrations import MigrationRunner

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DatabaseManager:
    """
    Manages database connections and sessions for the catalog.

    Schema creation goes through the migration runner, never
    ``metadata.create_all``, so every database carries a version marker.
    """

    def __init__(self, database_url: str | None = None, config: CatalogConfig | None = None):
        """
        Initialize the database manager.

        Args:
            database_url: SQLAlchemy database URL. If None, taken from configuration.
            config: Settings to use instead of the global configuration.
        """
        self.config = config or get_config()

        if database_url is None:
            database_url = self.config.get_database_url()
            logger.info("Using database at: %s", database_url)

        self.database_url = database_url
        self._engine: Engine | None = None
        self._session_factory: sessionmaker | None = None

    @property
    def engine(self) -> Engine:
        """
        Get or create the database engine.

        SQLite gets a StaticPool (one shared connection) and foreign key
        enforcement; other databases get a regular pool with pre-ping.
        """
        if self._engine is None:
            if self.database_url.startswith("sqlite"):
                self._engine = create_engine(
                    self.database_url,
                    # Single connection prevents "database is locked" errors
                    poolclass=StaticPool,
                    connect_args={"check_same_thread": False},
                    echo=self.config.echo_sql,
                )

                @event.listens_for(self._engine, "connect")
                def set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ARG001
                    cursor = dbapi_connection.cursor()
                    cursor.execute("PRAGMA foreign_keys=ON")
                    cursor.close()
            else:
                self._engine = create_engine(
                    self.database_url,
                    pool_size=self.config.pool_size,
                    max_overflow=self.config.max_overflow,
                    pool_pre_ping=True,
                    echo=self.config.echo_sql,
                )

            logger.info("Database engine created: %s", self._engine.url)

        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                autocommit=False,
                # Integrity pre-checks run queries; pending rows must not flush early
                autoflush=False,
                expire_on_commit=False,
            )
        return self._session_factory

    def create_session(self) -> Session:
        """Create a new database session. Callers must close it."""
        return self.session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope for database operations.

        ```python
        with db_manager.session_scope() as session:
            books = BookRepository(session).get_by_author(author_id)
        ```

        The session is committed on success and rolled back on any error;
        SQLAlchemy errors are re-raised as catalog errors.
        """
        session = self.create_session()
        try:
            yield session
            session.commit()
            logger.debug("Database transaction committed successfully")
        except CatalogError:
            logger.debug("Catalog error inside session scope, rolling back")
            session.rollback()
            raise
        except SQLAlchemyError as e:
            logger.exception("Database error, rolling back")
            session.rollback()
            raise translate_db_error(e, "session", "session") from e
        finally:
            session.close()

    def migration_runner(self) -> MigrationRunner:
        """Build a migration runner bound to this manager's engine."""
        return MigrationRunner(self.engine, product_version=self.config.product_version)

    def init_database(self, drop_existing: bool = False) -> list[str]:
        """
        Bring the database to the latest schema by applying migrations.

        Args:
            drop_existing: If True, roll every applied migration back first

        Returns:
            Ids of the migrations applied by this call
        """
        runner = self.migration_runner()

        if drop_existing:
            logger.warning("Rolling back all applied migrations...")
            runner.downgrade()

        applied = runner.upgrade()
        logger.info("Database initialization complete (%d migration(s) applied)", len(applied))
        return applied

    def verify_connection(self) -> bool:
        """Return True when a trivial query succeeds."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("Database connection verified")
            return True
        except SQLAlchemyError:
            logger.exception("Database connection failed")
            return False

    def close(self) -> None:
        """Dispose of the engine and forget the session factory."""
        if self._engine:
            self._engine.dispose()
            logger.info("Database engine disposed")
        self._engine = None
        self._session_factory = None


_db_manager: DatabaseManager | None = None


def get_db_manager(database_url: str | None = None) -> DatabaseManager:
    """
    Get the global database manager instance.

    Args:
        database_url: Database URL (only used on first call)
    """
    global _db_manager  # noqa: PLW0603 - Singleton pattern for database manager

    if _db_manager is None:
        _db_manager = DatabaseManager(database_url)

    return _db_manager


def reset_db_manager() -> None:
    """Close and forget the global manager (useful for testing)."""
    global _db_manager  # noqa: PLW0603

    if _db_manager is not None:
        _db_manager.close()
    _db_manager = None


def get_session() -> Session:
    """Get a new database session from the global manager."""
    return get_db_manager().create_session()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Convenience context manager for database sessions."""
    with get_db_manager().session_scope() as session:
        yield session


def translate_db_error(exc: SQLAlchemyError, operation: str, entity: str) -> CatalogError:
    """Map a SQLAlchemy exception onto the catalog error taxonomy."""
    detail = str(getattr(exc, "orig", None) or exc)
    lowered = detail.lower()

    if isinstance(exc, IntegrityError):
        if "foreign key" in lowered:
            return ForeignKeyViolation(entity, None, detail=detail)
        if "not null" in lowered or "cannot insert the value null" in lowered:
            # SQLite: "NOT NULL constraint failed: Book.Title"
            column = detail.rsplit(":", 1)[-1].strip() if ":" in detail else "unknown"
            return ValidationError(entity, column, "required", detail)
        return ValidationError(entity, "unknown", "constraint", detail)

    if isinstance(exc, OperationalError) or (
        isinstance(exc, DBAPIError) and exc.connection_invalidated
    ):
        return TransientStorageError(operation, detail)

    return CatalogError(f"Database operation '{operation}' failed: {detail}")


def safe_commit(session: Session, operation: str, entity: str) -> None:
    """
    Commit a session, rolling back and translating any failure.

    Args:
        session: The database session
        operation: Description of the operation (for error messages)
        entity: Entity name the operation targets

    Raises:
        CatalogError: Any subclass matching the failure
    """
    try:
        session.commit()
    except CatalogError:
        # Raised by the flush-time shape checks
        session.rollback()
        raise
    except SQLAlchemyError as e:
        session.rollback()
        logger.warning("Commit failed for '%s': %s", operation, e)
        raise translate_db_error(e, operation, entity) from e


def safe_query(session: Session, query_func: Callable[[Session], T], error_msg: str) -> T:
    """
    Execute a query, translating database failures.

    Args:
        session: The database session
        query_func: Function that performs the query
        error_msg: Description used in the raised error

    Raises:
        TransientStorageError: On lock contention or connection loss
        CatalogError: On any other database failure
    """
    try:
        return query_func(session)
    except SQLAlchemyError as e:
        logger.exception("Query failed")
        raise translate_db_error(e, error_msg, "query") from e
