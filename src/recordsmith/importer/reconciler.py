"""Reconcile parsed CSV rows against the records of a collection."""

import logging
from dataclasses import dataclass
from typing import Optional

from ..records.base import Record, RecordStore
from ..tabular.models import ParsedTable
from .keys import fold_key
from .models import (
    ColumnMapping,
    DedupKey,
    DedupMode,
    ImportResult,
    TargetType,
)
from .validator import validate_mapping

logger = logging.getLogger(__name__)


@dataclass
class PropertyColumn:
    """A CSV column feeding one record property."""

    index: int
    property_id: str
    property_label: str


@dataclass
class ColumnRoles:
    """Column indexes resolved from a ColumnMapping."""

    title_index: int
    body_index: Optional[int]
    properties: list[PropertyColumn]


@dataclass
class PendingRow:
    """The row that currently wins for a dedup key."""

    row: list[str]
    title: str


@dataclass(frozen=True)
class RowSlot:
    """Batch-unique key for a row when deduplication is off."""

    index: int


def cell_text(row: list[str], index: Optional[int]) -> str:
    """Return the trimmed field at index, or "" if the row is too short."""
    if index is None or index < 0 or index >= len(row):
        return ""
    return row[index].strip()


class ImportReconciler:
    """
    Applies an import to one collection.

    Rows are collapsed by dedup key (the last row wins), matched against
    existing records, and then either update the match or create a new
    record. Store calls are made one at a time.
    """

    def __init__(self, store: RecordStore):
        self.store = store

    async def reconcile(
        self, table: ParsedTable, mapping: ColumnMapping, dedup_key: DedupKey
    ) -> ImportResult:
        """
        Import the rows of a parsed table.

        Args:
            table: Parsed CSV headers and rows
            mapping: Column index -> target
            dedup_key: How rows are matched to existing records

        Returns:
            ImportResult with created, updated and skipped counts

        Raises:
            ImportValidationError: If the mapping is invalid (nothing is written)
            StoreError: If the record store fails (earlier rows stay applied)
        """
        validate_mapping(mapping)

        roles = await self._resolve_roles(mapping)
        existing = await self._index_existing(dedup_key)

        skipped = 0
        pending: dict[object, PendingRow] = {}
        for i, row in enumerate(table.rows):
            title = cell_text(row, roles.title_index)
            if not title:
                skipped += 1
                continue
            # Assigning to a known key keeps its first-seen position
            pending[self._row_key(row, title, i, dedup_key, roles)] = PendingRow(row, title)

        created = 0
        updated = 0
        for key, item in pending.items():
            is_new = False
            if dedup_key.mode != DedupMode.NONE and key in existing:
                record = existing[key]
            else:
                record = await self._create(item.title)
                if record is None:
                    skipped += 1
                    continue
                is_new = True
                existing[key] = record

            await self._apply_properties(record, item.row, roles.properties)
            if roles.body_index is not None:
                await self._apply_body(record, cell_text(item.row, roles.body_index))

            if is_new:
                created += 1
            else:
                updated += 1

        result = ImportResult(created=created, updated=updated, skipped=skipped)
        logger.info(f"Import finished: {result.summary()}")
        return result

    async def _resolve_roles(self, mapping: ColumnMapping) -> ColumnRoles:
        fields = await self.store.list_fields()
        labels = {f.id: f.label for f in fields}

        title_index = None
        body_index = None
        properties = []
        for idx, target in sorted(mapping.items()):
            if target.type == TargetType.TITLE:
                title_index = idx
            elif target.type == TargetType.BODY:
                body_index = idx
            elif target.type == TargetType.PROPERTY:
                properties.append(
                    PropertyColumn(
                        index=idx,
                        property_id=target.property_id,
                        property_label=labels.get(target.property_id) or target.property_id,
                    )
                )

        return ColumnRoles(title_index=title_index, body_index=body_index, properties=properties)

    async def _index_existing(self, dedup_key: DedupKey) -> dict[object, Record]:
        """Map dedup key -> existing record. Later records win on collisions."""
        if dedup_key.mode == DedupMode.NONE:
            return {}

        records = await self.store.list_records()
        logger.info(f"Found {len(records)} records in collection")

        index: dict[object, Record] = {}
        for record in records:
            if dedup_key.mode == DedupMode.TITLE:
                key = fold_key(record.get_title())
            else:
                key = fold_key(record.get_property_text(dedup_key.property_id))
            if key:
                index[key] = record

        logger.info(f"Found {len(index)} records for deduplication")
        return index

    @staticmethod
    def _row_key(
        row: list[str], title: str, index: int, dedup_key: DedupKey, roles: ColumnRoles
    ) -> object:
        if dedup_key.mode == DedupMode.NONE:
            return RowSlot(index)
        if dedup_key.mode == DedupMode.TITLE:
            return fold_key(title)

        for column in roles.properties:
            if column.property_id == dedup_key.property_id:
                return fold_key(cell_text(row, column.index))
        return fold_key(title)

    async def _create(self, title: str) -> Optional[Record]:
        record_id = await self.store.create_record(title)
        if not record_id:
            logger.warning(f"Record store did not create a record for '{title}'")
            return None
        record = await self.store.get_record(record_id)
        if record is None:
            logger.warning(f"Created record {record_id} could not be fetched")
        return record

    @staticmethod
    async def _apply_properties(
        record: Record, row: list[str], properties: list[PropertyColumn]
    ) -> None:
        for column in properties:
            value = cell_text(row, column.index)
            if not value:
                continue
            if record.has_property(column.property_label):
                await record.set_property_text(column.property_label, value)
            elif record.has_property(column.property_id):
                await record.set_property_text(column.property_id, value)

    @staticmethod
    async def _apply_body(record: Record, body: str) -> None:
        if not body:
            return
        blocks = await record.get_content_blocks()
        if blocks:
            await record.replace_block_text(blocks[0], body)


async def reconcile(
    table: ParsedTable, mapping: ColumnMapping, dedup_key: DedupKey, store: RecordStore
) -> ImportResult:
    """Import a parsed table into a record store."""
    return await ImportReconciler(store).reconcile(table, mapping, dedup_key)
