"""
Shared field types and payload validation for the entity models.

Text limits mirror the column lengths in ``database/schema.py``. Required
text must contain something other than whitespace.
"""

from collections.abc import Mapping
from typing import Annotated, Any, TypeVar

from pydantic import AfterValidator, BaseModel, StringConstraints
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from ..errors import ValidationError

SchemaType = TypeVar("SchemaType", bound=BaseModel)


def _not_blank(value: str) -> str:
    if not value.strip():
        raise PydanticCustomError("blank", "Value must not be blank")
    return value


def required_text(max_length: int) -> Any:
    """A required string of at most ``max_length`` characters."""
    return Annotated[str, StringConstraints(max_length=max_length), AfterValidator(_not_blank)]


def optional_text(max_length: int) -> Any:
    """An optional string of at most ``max_length`` characters."""
    return Annotated[str, StringConstraints(max_length=max_length)] | None


def _constraint_for(error: Mapping[str, Any]) -> str:
    error_type = error["type"]
    if error_type in {"missing", "blank"} or error.get("input", ...) is None:
        return "required"
    if error_type == "string_too_long":
        return "max_length"
    if error_type.endswith(("_type", "_parsing")):
        return "type"
    return error_type


def payload_values(schema: type[BaseModel], data: BaseModel | Mapping[str, Any]) -> dict[str, Any]:
    """
    Plain values of ``data`` as a write of ``schema``.

    Subclasses of ``schema`` (read models carry ``id`` and derived fields) are
    cut down to the fields ``schema`` declares.
    """
    if isinstance(data, schema):
        return data.model_dump(include=set(schema.model_fields), exclude_unset=True)
    if isinstance(data, BaseModel):
        return data.model_dump(exclude_unset=True)
    return dict(data)


def validate_payload(
    schema: type[SchemaType], data: BaseModel | Mapping[str, Any], entity: str
) -> SchemaType:
    """
    Build ``schema`` from ``data``, reporting the first violation as a
    catalog ``ValidationError``.

    Args:
        schema: Pydantic model class describing the write
        data: A pydantic model (``schema``, a subclass or another model) or a
            plain mapping
        entity: Entity name used in error messages

    Raises:
        ValidationError: Naming the offending field and constraint
    """
    if type(data) is schema:
        return data

    payload = payload_values(schema, data)
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "__root__"
        raise ValidationError(entity, field, _constraint_for(first), first["msg"]) from e
