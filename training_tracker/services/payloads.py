from typing import Type, TypeVar

import pydantic
from pydantic import BaseModel

from training_tracker.exceptions import ValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def validate_payload(schema: Type[SchemaT], data) -> SchemaT:
    """Accept a schema instance or a plain dict; report problems as ValidationError"""
    if isinstance(data, schema):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump()
    try:
        return schema.model_validate(data or {})
    except pydantic.ValidationError as exc:
        raise ValidationError(format_validation_errors(exc.errors())) from exc


def format_validation_errors(errors) -> str:
    """Human readable one-liner for pydantic errors"""
    parts = []
    for error in errors:
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "Validation error: " + "; ".join(parts)
