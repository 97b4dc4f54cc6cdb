"""Helpers shared by the CRUD service modules."""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, TypeVar

from sqlalchemy.orm import Session

from injaz.services.errors import InvalidInputError, NotFoundError

ModelT = TypeVar("ModelT")
EnumT = TypeVar("EnumT", bound=Enum)


def get_or_404(session: Session, model: type[ModelT], record_id: str) -> ModelT:
    record = session.get(model, record_id)
    if record is None:
        raise NotFoundError(model.__name__, record_id)
    return record


def clean(data: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is None or an empty string."""
    return {k: v for k, v in data.items() if v is not None and v != ""}


def apply_updates(record: Any, data: dict[str, Any]) -> Any:
    """Set every key present in ``data``; explicit None clears a column."""
    for key, value in data.items():
        if not hasattr(record, key):
            raise InvalidInputError(f"Unknown field: {key}")
        setattr(record, key, value)
    return record


def coerce_enum(enum_cls: type[EnumT], value: Any, field: str | None = None) -> EnumT:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidInputError(
            f"Invalid {field or enum_cls.__name__}: {value!r} (expected one of {allowed})"
        ) from None


def parse_datetime(value: Any) -> datetime | None:
    """Parse ``YYYY-MM-DD`` or ISO strings into an aware datetime (naive means UTC)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError:
            raise InvalidInputError(f"Invalid date: {value!r}") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
