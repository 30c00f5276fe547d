"""Record store boundary and the SQLite-backed implementation."""

from .base import ContentBlock, Record, RecordStore, StoreError
from .models import BlockData, CollectionInfo, FieldDescriptor, FieldType, TITLE_FIELD_ID
from .store import CollectionStore, RecordDatabase, StoredRecord

__all__ = [
    "ContentBlock",
    "Record",
    "RecordStore",
    "StoreError",
    "BlockData",
    "CollectionInfo",
    "FieldDescriptor",
    "FieldType",
    "TITLE_FIELD_ID",
    "CollectionStore",
    "RecordDatabase",
    "StoredRecord",
]
