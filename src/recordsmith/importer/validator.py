"""Validation of column mappings before an import runs."""

import logging
from typing import Optional

from ..records.models import FieldDescriptor
from .models import ColumnMapping, ImportValidationError, TargetType

logger = logging.getLogger(__name__)


def validate_mapping(
    mapping: ColumnMapping, fields: Optional[list[FieldDescriptor]] = None
) -> None:
    """
    Check that a column mapping can be imported.

    Exactly one column must be mapped to Title and at most one to Body.
    When the collection's fields are given, Property targets must also name
    one of them.

    Args:
        mapping: Column index -> target
        fields: Optional field descriptors of the target collection

    Raises:
        ImportValidationError: If the mapping is not importable
    """
    title_columns = [idx for idx, target in mapping.items() if target.type == TargetType.TITLE]
    if not title_columns:
        raise ImportValidationError("At least one column must be mapped to Title")
    if len(title_columns) > 1:
        raise ImportValidationError("Only one column can be mapped to Title")

    body_columns = [idx for idx, target in mapping.items() if target.type == TargetType.BODY]
    if len(body_columns) > 1:
        raise ImportValidationError("Only one column can be mapped to Body")

    negative = sorted(idx for idx in mapping if idx < 0)
    if negative:
        raise ImportValidationError(f"Column index {negative[0]} is out of range")

    if fields is not None:
        known = {f.id for f in fields}
        for idx, target in sorted(mapping.items()):
            if target.type == TargetType.PROPERTY and target.property_id not in known:
                raise ImportValidationError(
                    f"Column {idx} is mapped to unknown property '{target.property_id}'"
                )

    logger.debug(f"Mapping valid: title column {title_columns[0]}, body columns {body_columns}")
