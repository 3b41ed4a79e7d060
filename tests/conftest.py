"""Test configuration and fixtures for the library catalog.

1. Isolated databases - every test gets its own SQLite file, migrated to head
2. Configuration isolation - the global config is reset around each test
3. Sample rows - small fixtures for the entities most tests need
"""

import os
from collections.abc import Generator
from datetime import datetime
from pathlib import Path

import pytest
from sqlalchemy.orm import Session

from library_catalog.config import CatalogConfig, reset_config
from library_catalog.database import (
    AuthorRepository,
    BookDomainRepository,
    BookRepository,
    BorrowingRepository,
    DatabaseManager,
    EditionRepository,
    LoanExtensionRepository,
    ReaderRepository,
    reset_db_manager,
)

# === Test Database Fixtures ===


@pytest.fixture
def test_db_path(tmp_path: Path) -> Path:
    """Provide a temporary database path for each test."""
    return tmp_path / "test_library.db"


@pytest.fixture
def test_database_url(test_db_path: Path) -> str:
    return f"sqlite:///{test_db_path}"


@pytest.fixture
def test_config(test_db_path: Path) -> Generator[CatalogConfig, None, None]:
    """Test configuration: isolated database, no tracing, verbose logging."""
    reset_config()

    config = CatalogConfig(
        database_path=test_db_path,
        debug=True,
        log_level="DEBUG",
        enable_tracing=False,
        product_version="0.0.1-test",
    )

    yield config

    reset_config()


@pytest.fixture
def db_manager(
    test_database_url: str, test_config: CatalogConfig
) -> Generator[DatabaseManager, None, None]:
    """A database manager over an empty database."""
    manager = DatabaseManager(test_database_url, config=test_config)
    yield manager
    manager.close()


@pytest.fixture
def migrated_db(db_manager: DatabaseManager) -> DatabaseManager:
    """A database manager whose schema is at the latest migration."""
    db_manager.init_database()
    return db_manager


@pytest.fixture
def session(migrated_db: DatabaseManager) -> Generator[Session, None, None]:
    session = migrated_db.create_session()
    try:
        yield session
    finally:
        session.close()


# === Repository Fixtures ===


@pytest.fixture
def repos(session: Session) -> dict:
    """Create repository instances sharing one session."""
    return {
        "author": AuthorRepository(session),
        "book": BookRepository(session),
        "domain": BookDomainRepository(session),
        "edition": EditionRepository(session),
        "reader": ReaderRepository(session),
        "borrowing": BorrowingRepository(session),
        "extension": LoanExtensionRepository(session),
    }


# === Test Data Fixtures ===


@pytest.fixture
def sample_author(repos):
    return repos["author"].create({"first_name": "Mircea", "last_name": "Eliade"})


@pytest.fixture
def sample_book(repos):
    return repos["book"].create(
        {
            "title": "Maitreyi",
            "isbn": "978-973-46-0115-1",
            "description": "A novel set in 1930s Calcutta",
            "total_copies": 3,
            "reading_room_only_copies": 1,
        }
    )


@pytest.fixture
def sample_reader(repos):
    return repos["reader"].create(
        {
            "first_name": "Ana",
            "last_name": "Popescu",
            "address": "Str. Lunga 12, Brasov",
            "email": "ana.popescu@example.com",
            "registration_date": datetime(2025, 9, 1, 10, 0),
        }
    )


@pytest.fixture
def sample_staff(repos):
    return repos["reader"].create(
        {
            "first_name": "Ion",
            "last_name": "Ionescu",
            "address": "Bd. Eroilor 3, Brasov",
            "is_staff": True,
            "registration_date": datetime(2024, 1, 15, 9, 0),
        }
    )


@pytest.fixture
def borrowing_payload():
    """Build a valid borrowing payload for a reader and a book."""

    def build(reader_id: int, book_id: int, **overrides) -> dict:
        payload = {
            "reader_id": reader_id,
            "book_id": book_id,
            "borrowing_date": datetime(2026, 1, 10, 12, 0),
            "due_date": datetime(2026, 1, 24, 12, 0),
            "initial_borrowing_days": 14,
        }
        payload.update(overrides)
        return payload

    return build


@pytest.fixture
def sample_borrowing(repos, sample_reader, sample_book, borrowing_payload):
    return repos["borrowing"].create(borrowing_payload(sample_reader.id, sample_book.id))


# === Cleanup Fixtures ===


@pytest.fixture(autouse=True)
def cleanup_after_test():
    """Reset globals and drop LIBRARY_CATALOG_* variables set by a test."""
    original_env = os.environ.copy()

    yield

    reset_db_manager()
    reset_config()
    for key in list(os.environ.keys()):
        if key.startswith("LIBRARY_CATALOG_") and key not in original_env:
            del os.environ[key]
