"""Data models describing collections in the record store."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

TITLE_FIELD_ID = "title"


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


class FieldType(str, Enum):
    """Value type of a collection field."""

    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    CHOICE = "choice"
    URL = "url"
    OTHER = "other"


class FieldDescriptor(BaseModel):
    """A property field defined on a collection."""

    id: str
    label: str
    active: bool = True
    type: FieldType = FieldType.TEXT

    @property
    def is_title(self) -> bool:
        return self.id == TITLE_FIELD_ID


class CollectionInfo(BaseModel):
    """A collection of records and its field configuration."""

    id: str
    name: str
    fields: list[FieldDescriptor] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utc_now)

    def active_fields(self) -> list[FieldDescriptor]:
        return [f for f in self.fields if f.active]

    def find_field(self, field_id: str) -> Optional[FieldDescriptor]:
        for f in self.fields:
            if f.id == field_id:
                return f
        return None


class BlockData(BaseModel):
    """One content block of a record body."""

    id: str
    position: int
    text: str = ""
