"""
Schema migrations for the library catalog.

``MIGRATIONS`` lists the steps oldest first; ``MigrationRunner`` applies and
reverts them and keeps the ``__MigrationHistory`` marker.
"""

from .runner import MIGRATIONS, Migration, MigrationRunner, MigrationStatus, migration_history

__all__ = ["MIGRATIONS", "Migration", "MigrationRunner", "MigrationStatus", "migration_history"]
