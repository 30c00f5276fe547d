"""Column mapping, deduplication and import reconciliation."""

from .models import (
    ColumnMapping,
    DedupKey,
    DedupMode,
    DedupOption,
    ImportResult,
    ImportValidationError,
    MappingTarget,
    TargetType,
)
from .keys import fold_key
from .validator import validate_mapping
from .inference import (
    choose_default_collection,
    dedup_key_options,
    infer_mapping,
    property_options,
)
from .reconciler import ImportReconciler, reconcile

__all__ = [
    "ColumnMapping",
    "DedupKey",
    "DedupMode",
    "DedupOption",
    "ImportResult",
    "ImportValidationError",
    "MappingTarget",
    "TargetType",
    "fold_key",
    "validate_mapping",
    "choose_default_collection",
    "dedup_key_options",
    "infer_mapping",
    "property_options",
    "reconcile",
    "ImportReconciler",
]
