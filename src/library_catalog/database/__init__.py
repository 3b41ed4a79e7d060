"""
Database package for the library catalog.

This package provides:
- SQLAlchemy schema declarations (schema.py)
- The relationship graph and its delete policies (relationships.py)
- Write-time integrity checks and graph-driven deletes (integrity.py)
- Session management and error translation (session.py)
- One repository per entity
"""

from .author_repository import AuthorRepository
from .book_repository import BookRepository
from .borrowing_repository import BorrowingRepository, LoanExtensionRepository
from .domain_repository import BookDomainRepository
from .edition_repository import EditionRepository
from .integrity import IntegrityGuard
from .reader_repository import ReaderRepository
from .relationships import RELATIONSHIP_GRAPH, Cardinality, DeletePolicy, RelationshipEdge
from .repository import BaseRepository, PaginatedResponse, PaginationParams
from .schema import (
    Author,
    Base,
    Book,
    BookDomain,
    Borrowing,
    Edition,
    LoanExtension,
    Reader,
    book_author,
    book_book_domain,
)
from .session import (
    DatabaseManager,
    get_db_manager,
    get_session,
    reset_db_manager,
    safe_commit,
    safe_query,
    session_scope,
)

__all__ = [
    "RELATIONSHIP_GRAPH",
    "Author",
    "AuthorRepository",
    "Base",
    "BaseRepository",
    "Book",
    "BookDomain",
    "BookDomainRepository",
    "BookRepository",
    "Borrowing",
    "BorrowingRepository",
    "Cardinality",
    "DatabaseManager",
    "DeletePolicy",
    "Edition",
    "EditionRepository",
    "IntegrityGuard",
    "LoanExtension",
    "LoanExtensionRepository",
    "PaginatedResponse",
    "PaginationParams",
    "Reader",
    "ReaderRepository",
    "RelationshipEdge",
    "book_author",
    "book_book_domain",
    "get_db_manager",
    "get_session",
    "reset_db_manager",
    "safe_commit",
    "safe_query",
    "session_scope",
]
