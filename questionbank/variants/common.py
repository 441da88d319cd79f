"""Helpers shared by the variant modules."""
import enum
from typing import Any, Mapping, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from questionbank.core.errors import MalformedDocument
from questionbank.models.orm import StudentPermission

# Row filter hiding HIDDEN template files from participant-facing projections.
VISIBLE_TO_STUDENT = {"student_permission": {"not": StudentPermission.HIDDEN}}


def enum_value(value):
    if isinstance(value, enum.Enum):
        return value.value
    return value


class DocumentData(BaseModel):
    """Base of the ``data`` models: camelCase keys, unknown keys ignored."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


Data = TypeVar("Data", bound=DocumentData)


def parse_data(model: Type[Data], data: Mapping[str, Any], path: str = "data") -> Data:
    """Validate a document's ``data`` object, naming the offending field on failure."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        error = exc.errors()[0]
        field = ".".join([path, *(str(part) for part in error["loc"])])
        raise MalformedDocument(field, error["msg"]) from exc
