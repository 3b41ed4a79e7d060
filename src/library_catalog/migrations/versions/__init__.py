"""
Schema migration steps, oldest first.

Each module exposes ``revision``, ``name``, ``upgrade(op)`` and
``downgrade(op)``; ``op`` is an alembic ``Operations`` bound to the target
connection.
"""

from . import initial, updates, updates1

STEPS = (initial, updates, updates1)
