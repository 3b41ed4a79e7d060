"""
Library catalog data model.

Key Components:
- models: Pydantic models describing each entity's fields and limits
- database: SQLAlchemy schema, relationship graph, integrity checks and repositories
- migrations: Ordered schema migrations with a persisted version marker
- config: Configuration management with pydantic-settings
- errors: The exceptions every storage failure is reported as
"""

__version__ = "0.1.0"

from . import database

__all__ = [
    "__version__",
    "database",
]
