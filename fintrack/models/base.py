from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Annotated, Any

from bson import Decimal128
from pydantic import BaseModel, ConfigDict, PlainSerializer, StringConstraints
from pydantic.alias_generators import to_camel

# Exact decimal amounts; plain JSON numbers on the wire.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ApiModel(BaseModel):
    """Base for response models: camelCase on the wire, snake_case accepted."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RequestModel(BaseModel):
    """Base for request payloads: camelCase or snake_case keys, unknown keys rejected."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


def as_utc_datetime(value: Any) -> Any:
    """Coerce ``date`` values and ``YYYY-MM-DD`` strings to midnight-UTC datetimes; tag naive datetimes as UTC."""
    if isinstance(value, str) and len(value) == 10:
        value = date.fromisoformat(value)
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def as_decimal(value: Any) -> Decimal:
    """Convert a stored or client amount to ``Decimal``; floats go through their shortest repr."""
    if isinstance(value, Decimal128):
        return value.to_decimal()
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def to_decimal128(value: Any) -> Decimal128:
    """Amount as stored in MongoDB."""
    return Decimal128(as_decimal(value))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
