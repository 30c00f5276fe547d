"""Smart defaults for the import dialog.

Everything here is pure: given headers and the collection's field
descriptors it proposes a mapping and the selectable options, without
touching the record store.
"""

from typing import Optional

from ..records.models import CollectionInfo, FieldDescriptor, FieldType
from .models import (
    NONE_OPTION,
    TITLE_OPTION,
    ColumnMapping,
    DedupOption,
    MappingTarget,
)

TITLE_HEADERS = ("title", "name")
BODY_HEADERS = ("body", "description", "content")
PROPERTY_PREFIX = "property_"
DEDUP_FIELD_TYPES = (FieldType.TEXT, FieldType.NUMBER)


def _fields_by_name(fields: list[FieldDescriptor]) -> dict[str, FieldDescriptor]:
    by_name: dict[str, FieldDescriptor] = {}
    for f in fields:
        if not f.active:
            continue
        by_name[f.label.lower()] = f
        by_name[f.id.lower()] = f
    return by_name


def infer_mapping(headers: list[str], fields: list[FieldDescriptor]) -> ColumnMapping:
    """
    Propose a target for every column from its header.

    `title`/`name` map to Title, `body`/`description`/`content` to Body,
    `property_<x>` and bare headers to the active field whose label or id
    is `<x>`. Anything else is discarded.

    Args:
        headers: Trimmed header row
        fields: Field descriptors of the target collection

    Returns:
        ColumnMapping covering every header index
    """
    by_name = _fields_by_name(fields)
    mapping: ColumnMapping = {}

    for idx, header in enumerate(headers):
        header_lower = header.lower()
        if header_lower in TITLE_HEADERS:
            mapping[idx] = MappingTarget.title()
        elif header_lower in BODY_HEADERS:
            mapping[idx] = MappingTarget.body()
        else:
            if header_lower.startswith(PROPERTY_PREFIX):
                header_lower = header_lower[len(PROPERTY_PREFIX):]
            field = by_name.get(header_lower)
            if field:
                mapping[idx] = MappingTarget.property(field.id)
            else:
                mapping[idx] = MappingTarget.discard()

    return mapping


def property_options(fields: list[FieldDescriptor]) -> list[FieldDescriptor]:
    """Fields a column can be mapped to (the built-in title is handled separately)."""
    return [f for f in fields if f.active and not f.is_title]


def dedup_key_options(fields: list[FieldDescriptor]) -> list[DedupOption]:
    """Deduplication choices: Title, None, then active text/number fields."""
    options = [
        DedupOption(value=TITLE_OPTION, label="Title"),
        DedupOption(value=NONE_OPTION, label="None (always create new)"),
    ]
    for f in property_options(fields):
        if f.type in DEDUP_FIELD_TYPES:
            options.append(DedupOption(value=f.id, label=f.label))
    return options


def choose_default_collection(
    collections: list[CollectionInfo], active_id: Optional[str] = None
) -> Optional[CollectionInfo]:
    """Prefer the currently active collection, otherwise the first one."""
    if not collections:
        return None
    if active_id:
        for collection in collections:
            if collection.id == active_id:
                return collection
    return collections[0]
