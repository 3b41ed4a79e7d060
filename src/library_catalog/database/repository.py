"""
Repository pattern implementation for the library catalog.

Repositories are the write path callers go through. Every write is checked in
three layers before it is committed:

1. **Shape**: the payload is validated against the entity's pydantic model
   (required fields, text limits, primitive types)
2. **References**: foreign key values are checked against
   ``RELATIONSHIP_GRAPH`` by :class:`~.integrity.IntegrityGuard`
3. **Commit**: :func:`~.session.safe_commit` translates whatever the database
   still rejects into the catalog error taxonomy

Deletes never go through ``session.delete``; the guard plans them from the
relationship graph so restrict edges are honoured before anything is removed.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import asc, desc, func, inspect, select
from sqlalchemy.orm import Session

from ..errors import CatalogError, NotFoundError, ValidationError
from ..models.fields import payload_values, validate_payload
from .integrity import IntegrityGuard
from .schema import Base
from .session import safe_commit, safe_query

logger = logging.getLogger(__name__)

# Type variables for generic repository
ModelType = TypeVar("ModelType", bound=Base)
FieldsSchemaType = TypeVar("FieldsSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)
ResponseSchemaType = TypeVar("ResponseSchemaType", bound=BaseModel)


class PaginationParams(BaseModel):
    """Standard pagination parameters for list operations."""

    page: int = 1
    page_size: int = 20

    @property
    def offset(self) -> int:
        """Calculate offset for SQL queries."""
        return (self.page - 1) * self.page_size

    def validate_params(self) -> None:
        """Validate pagination parameters."""
        if self.page < 1:
            raise ValidationError("Pagination", "page", "minimum", "page must be >= 1")
        if self.page_size < 1 or self.page_size > 100:
            raise ValidationError(
                "Pagination", "page_size", "range", "page size must be between 1 and 100"
            )


class PaginatedResponse(BaseModel, Generic[ResponseSchemaType]):
    """One page of a list operation, with enough metadata to fetch the next."""

    items: list[ResponseSchemaType]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_previous: bool


class BaseRepository(
    ABC, Generic[ModelType, FieldsSchemaType, UpdateSchemaType, ResponseSchemaType]
):
    """
    Abstract base repository providing common CRUD operations.

    Subclasses name the ORM class, the pydantic model describing a write and
    the read model returned to callers; the partial-update model is a type
    parameter only. Entity-specific write rules go in :meth:`_validate_write`.
    """

    def __init__(self, session: Session):
        """Initialize repository with database session."""
        self.session = session
        self.guard = IntegrityGuard(session)

    @property
    @abstractmethod
    def model_class(self) -> type[ModelType]:
        """Return the SQLAlchemy model class."""

    @property
    @abstractmethod
    def fields_schema(self) -> type[FieldsSchemaType]:
        """Return the Pydantic model describing a write."""

    @property
    @abstractmethod
    def response_schema(self) -> type[ResponseSchemaType]:
        """Return the Pydantic response schema."""

    @property
    def entity_name(self) -> str:
        return self.model_class.__name__

    @property
    def table_name(self) -> str:
        return self.model_class.__tablename__

    def _to_response_model(self, db_obj: ModelType) -> ResponseSchemaType:
        """Convert database model to Pydantic response model."""
        return self.response_schema.model_validate(db_obj, from_attributes=True)

    def _to_response_list(self, db_objs) -> list[ResponseSchemaType]:
        return [self._to_response_model(db_obj) for db_obj in db_objs]

    def _fetch(self, id: int) -> ModelType | None:
        query = select(self.model_class).where(self.model_class.id == id)
        return safe_query(
            self.session,
            lambda s: s.execute(query).scalar_one_or_none(),
            f"get {self.entity_name} by ID",
        )

    def _fetch_or_raise(self, id: int) -> ModelType:
        db_obj = self._fetch(id)
        if db_obj is None:
            raise NotFoundError(self.entity_name, id)
        return db_obj

    def _raw_scalars(self, query, error_msg: str) -> list:
        return list(
            safe_query(self.session, lambda s: s.execute(query).scalars().all(), error_msg)
        )

    def _scalars(self, query, error_msg: str) -> list[ResponseSchemaType]:
        return self._to_response_list(self._raw_scalars(query, error_msg))

    # === Write checks ===

    def _column_values(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """Re-key attribute values by database column name."""
        columns = inspect(self.model_class).columns
        return {columns[key].name: value for key, value in values.items() if key in columns}

    def _validate_write(self, values: dict[str, Any], id: int | None) -> None:  # noqa: ARG002
        """Entity-specific checks; ``id`` is None on create."""
        return None

    def _check_write(self, values: dict[str, Any], id: int | None) -> None:
        """Run reference and entity checks, rolling back if any of them fails."""
        try:
            safe_query(
                self.session,
                lambda _: self.guard.check_foreign_keys(
                    self.table_name, self._column_values(values), self.entity_name
                ),
                f"check references of {self.entity_name}",
            )
            self._validate_write(values, id)
        except CatalogError:
            self.session.rollback()
            raise

    # === CRUD ===

    def get_by_id(self, id: int) -> ResponseSchemaType | None:
        """
        Get entity by ID.

        Returns:
            Pydantic model or None if not found

        Raises:
            TransientStorageError: On lock contention or connection loss
        """
        db_obj = self._fetch(id)
        if db_obj is None:
            return None
        return self._to_response_model(db_obj)

    def get_all(
        self,
        pagination: PaginationParams | None = None,
        order_by: str | None = None,
        order_desc: bool = False,
    ) -> list[ResponseSchemaType] | PaginatedResponse[ResponseSchemaType]:
        """
        Get all entities with optional pagination and sorting.

        Args:
            pagination: Pagination parameters
            order_by: Attribute name to order by (defaults to ``id``)
            order_desc: Whether to order descending

        Returns:
            List of entities, or a paginated response when ``pagination`` is given
        """
        query = select(self.model_class)

        order_field = self.model_class.id
        if order_by and order_by in inspect(self.model_class).columns:
            order_field = getattr(self.model_class, order_by)
        query = query.order_by(desc(order_field) if order_desc else asc(order_field))

        if pagination is None:
            return self._scalars(query, f"list {self.entity_name}")

        pagination.validate_params()

        count_query = select(func.count()).select_from(self.model_class)
        total = (
            safe_query(
                self.session,
                lambda s: s.execute(count_query).scalar(),
                f"count {self.entity_name}",
            )
            or 0
        )

        query = query.offset(pagination.offset).limit(pagination.page_size)
        items = self._scalars(query, f"page through {self.entity_name}")

        return PaginatedResponse(
            items=items,
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
            total_pages=(total + pagination.page_size - 1) // pagination.page_size,
            has_next=pagination.page * pagination.page_size < total,
            has_previous=pagination.page > 1,
        )

    def create(self, data: FieldsSchemaType | Mapping[str, Any]) -> ResponseSchemaType:
        """
        Create new entity.

        Args:
            data: Fields model instance or a mapping of attribute values

        Returns:
            Created entity as Pydantic model

        Raises:
            ValidationError: If a field is missing, too long or mistyped
            ForeignKeyViolation: If a referenced row does not exist
        """
        payload = validate_payload(self.fields_schema, data, self.entity_name)
        values = payload.model_dump()
        self._check_write(values, None)

        db_obj = self.model_class(**values)
        self.session.add(db_obj)
        safe_commit(self.session, f"create {self.entity_name}", self.entity_name)
        self.session.refresh(db_obj)

        logger.debug("Created %s %s", self.entity_name, db_obj.id)
        return self._to_response_model(db_obj)

    def update(self, id: int, data: UpdateSchemaType | Mapping[str, Any]) -> ResponseSchemaType:
        """
        Update existing entity.

        Only the given attributes change; the merged row is validated as a
        whole, so setting a required field to None is rejected.

        Raises:
            NotFoundError: If no row has this id
            ValidationError: If the merged row breaks a field constraint
            ForeignKeyViolation: If a changed reference points at a missing row
        """
        db_obj = self._fetch_or_raise(id)

        changes = payload_values(self.fields_schema, data)
        current = {key: getattr(db_obj, key) for key in self.fields_schema.model_fields}
        payload = validate_payload(self.fields_schema, {**current, **changes}, self.entity_name)
        validated = payload.model_dump()

        changed = {key: validated[key] for key in changes}
        self._check_write(changed, id)

        for field, value in changed.items():
            setattr(db_obj, field, value)

        safe_commit(self.session, f"update {self.entity_name}", self.entity_name)
        self.session.refresh(db_obj)
        return self._to_response_model(db_obj)

    def delete(self, id: int) -> dict[str, int]:
        """
        Delete entity by ID, following the relationship graph.

        Returns:
            Number of rows removed per table, dependents included

        Raises:
            NotFoundError: If no row has this id
            ReferentialIntegrityError: If restrict-policy dependents exist
        """
        if not self.exists(id):
            raise NotFoundError(self.entity_name, id)

        try:
            removed = safe_query(
                self.session,
                lambda _: self.guard.delete(self.table_name, id),
                f"delete {self.entity_name}",
            )
        except CatalogError:
            self.session.rollback()
            raise

        safe_commit(self.session, f"delete {self.entity_name}", self.entity_name)
        # Rows were removed with Core statements; drop what the identity map still holds
        self.session.expire_all()
        return removed

    def exists(self, id: int) -> bool:
        """Check if entity exists by ID."""
        query = select(func.count()).select_from(self.model_class).where(self.model_class.id == id)
        count = safe_query(self.session, lambda s: s.execute(query).scalar(), "check existence")
        return (count or 0) > 0
