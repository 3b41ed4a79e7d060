"""
Error taxonomy for the library catalog.

Every failure surfaced by the storage layer is one of these exceptions. Each
carries the context a caller needs to act on it (entity, field, migration
step), both as attributes and in the message.
"""


class CatalogError(Exception):
    """Base exception for catalog storage operations."""


class ValidationError(CatalogError):
    """A write violates a field's shape: required, max length or type."""

    def __init__(self, entity: str, field: str, constraint: str, detail: str | None = None):
        self.entity = entity
        self.field = field
        self.constraint = constraint
        self.detail = detail
        message = f"{entity}.{field} violates '{constraint}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class HierarchyCycleError(ValidationError):
    """Setting a domain's parent would make the domain its own ancestor."""

    def __init__(self, domain_id: int, parent_id: int):
        self.domain_id = domain_id
        self.parent_id = parent_id
        super().__init__(
            "BookDomain",
            "parent_domain_id",
            "acyclic",
            f"domain {parent_id} is {domain_id} itself or one of its descendants",
        )


class ForeignKeyViolation(CatalogError):
    """A foreign key value points at a row that does not exist."""

    def __init__(
        self,
        entity: str,
        field: str | None,
        value: object = None,
        referenced: str | None = None,
        detail: str | None = None,
    ):
        self.entity = entity
        self.field = field
        self.value = value
        self.referenced = referenced
        if field is None:
            # Raised by the database itself; only the driver message is known
            message = f"{entity}: foreign key constraint failed"
        else:
            message = f"{entity}.{field}={value!r} references a missing {referenced} row"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class ReferentialIntegrityError(CatalogError):
    """A delete is blocked because restrict-policy dependents exist."""

    def __init__(
        self,
        entity: str,
        entity_id: object,
        dependent: str | None = None,
        column: str | None = None,
        count: int | None = None,
    ):
        self.entity = entity
        self.entity_id = entity_id
        self.dependent = dependent
        self.column = column
        self.count = count
        if dependent is None:
            reason = "rows in another table still reference it (rejected by the database)"
        else:
            reason = f"{count} {dependent} row(s) still reference it through {column}"
        super().__init__(f"Cannot delete {entity} {entity_id}: {reason}")


class NotFoundError(CatalogError):
    """Raised when an entity is not found."""

    def __init__(self, entity: str, entity_id: object):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class TransientStorageError(CatalogError):
    """Lock contention or a lost connection; the caller may retry."""

    def __init__(self, operation: str, detail: str | None = None):
        self.operation = operation
        message = f"Database operation '{operation}' failed transiently"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class MigrationError(CatalogError):
    """A migration step failed; no further steps were applied."""

    def __init__(self, migration_id: str, name: str, direction: str, detail: str | None = None):
        self.migration_id = migration_id
        self.name = name
        self.direction = direction
        message = f"Migration {migration_id}_{name} failed during {direction}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
