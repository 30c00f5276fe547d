"""Data models for CSV import configuration and results."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

TITLE_OPTION = "__title__"
NONE_OPTION = "__none__"


class TargetType(str, Enum):
    """Semantic role of a CSV column."""

    TITLE = "title"
    BODY = "body"
    DISCARD = "discard"
    PROPERTY = "property"


class MappingTarget(BaseModel):
    """Where the values of one CSV column go."""

    model_config = ConfigDict(frozen=True)

    type: TargetType
    property_id: Optional[str] = None

    @model_validator(mode="after")
    def _check_property_id(self) -> "MappingTarget":
        if self.type == TargetType.PROPERTY and not self.property_id:
            raise ValueError("Property targets require a property_id")
        if self.type != TargetType.PROPERTY and self.property_id is not None:
            raise ValueError(f"{self.type.value} targets do not take a property_id")
        return self

    @classmethod
    def title(cls) -> "MappingTarget":
        return cls(type=TargetType.TITLE)

    @classmethod
    def body(cls) -> "MappingTarget":
        return cls(type=TargetType.BODY)

    @classmethod
    def discard(cls) -> "MappingTarget":
        return cls(type=TargetType.DISCARD)

    @classmethod
    def property(cls, property_id: str) -> "MappingTarget":
        return cls(type=TargetType.PROPERTY, property_id=property_id)

    @classmethod
    def parse(cls, value: str) -> "MappingTarget":
        """Parse the short form used on the command line: title, body, discard, property:<id>."""
        text = value.strip()
        if text.lower().startswith("property:"):
            return cls.property(text[len("property:"):].strip())
        return cls(type=TargetType(text.lower()))

    def __str__(self) -> str:
        if self.type == TargetType.PROPERTY:
            return f"property:{self.property_id}"
        return self.type.value


# Column index (0-based) -> target. Unlisted columns are discarded.
ColumnMapping = dict[int, MappingTarget]


class DedupMode(str, Enum):
    """How incoming rows are matched against existing records."""

    NONE = "none"
    TITLE = "title"
    PROPERTY = "property"


class DedupKey(BaseModel):
    """Deduplication key selector."""

    model_config = ConfigDict(frozen=True)

    mode: DedupMode = DedupMode.TITLE
    property_id: Optional[str] = None

    @model_validator(mode="after")
    def _check_property_id(self) -> "DedupKey":
        if self.mode == DedupMode.PROPERTY and not self.property_id:
            raise ValueError("Property deduplication requires a property_id")
        return self

    @classmethod
    def none(cls) -> "DedupKey":
        return cls(mode=DedupMode.NONE)

    @classmethod
    def by_title(cls) -> "DedupKey":
        return cls(mode=DedupMode.TITLE)

    @classmethod
    def by_property(cls, property_id: str) -> "DedupKey":
        return cls(mode=DedupMode.PROPERTY, property_id=property_id)

    @classmethod
    def from_option(cls, value: str) -> "DedupKey":
        """Build a selector from a dialog option value ("__title__", "__none__" or a field id)."""
        if value == TITLE_OPTION:
            return cls.by_title()
        if value == NONE_OPTION:
            return cls.none()
        return cls.by_property(value)

    @property
    def option(self) -> str:
        if self.mode == DedupMode.TITLE:
            return TITLE_OPTION
        if self.mode == DedupMode.NONE:
            return NONE_OPTION
        return self.property_id


class DedupOption(BaseModel):
    """A selectable deduplication choice."""

    value: str
    label: str


class ImportResult(BaseModel):
    """Counts produced by one import run."""

    model_config = ConfigDict(frozen=True)

    created: int = Field(default=0, ge=0)
    updated: int = Field(default=0, ge=0)
    skipped: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        return self.created + self.updated + self.skipped

    def summary(self) -> str:
        return f"Created: {self.created}, Updated: {self.updated}, Skipped: {self.skipped}"


class ImportValidationError(ValueError):
    """Exception raised when a column mapping cannot be imported."""

    pass
