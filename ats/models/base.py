"""Shared pydantic base and datetime helpers for record models."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CamelModel(BaseModel):
    """Records serialize with camelCase keys and accept either spelling."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def merged(record: BaseModel, changes: dict[str, Any]) -> Any:
    """Return a re-validated copy of *record* with *changes* applied."""
    return type(record).model_validate({**record.model_dump(), **changes})
