"""SQLite-backed record store."""

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import aiosqlite

from ..config import settings
from .base import ContentBlock, Record, RecordStore, StoreError
from .models import (
    TITLE_FIELD_ID,
    BlockData,
    CollectionInfo,
    FieldDescriptor,
    FieldType,
)

logger = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class RecordDatabase:
    """Persistent storage for collections, records, properties and content blocks."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path) if db_path else settings.database_path
        self._connection: Optional[aiosqlite.Connection] = None

    async def initialize(self):
        """Initialize the database and create tables."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(str(self.db_path))

        await self._connection.executescript(
            """
            CREATE TABLE IF NOT EXISTS collections (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL UNIQUE,
                created_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS fields (
                collection_id TEXT NOT NULL,
                id TEXT NOT NULL,
                label TEXT NOT NULL,
                active INTEGER NOT NULL DEFAULT 1,
                type TEXT NOT NULL DEFAULT 'text',
                position INTEGER NOT NULL,
                PRIMARY KEY (collection_id, id)
            );

            CREATE TABLE IF NOT EXISTS records (
                id TEXT PRIMARY KEY,
                collection_id TEXT NOT NULL,
                title TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS property_values (
                record_id TEXT NOT NULL,
                field_id TEXT NOT NULL,
                value TEXT,
                PRIMARY KEY (record_id, field_id)
            );

            CREATE TABLE IF NOT EXISTS content_blocks (
                id TEXT PRIMARY KEY,
                record_id TEXT NOT NULL,
                position INTEGER NOT NULL,
                text TEXT NOT NULL DEFAULT ''
            );

            CREATE INDEX IF NOT EXISTS idx_records_collection ON records(collection_id);
            CREATE INDEX IF NOT EXISTS idx_blocks_record ON content_blocks(record_id, position);
            """
        )
        await self._connection.commit()
        logger.info(f"RecordDatabase initialized at {self.db_path}")

    async def close(self):
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def _write(self, statements: list[tuple[str, tuple]]) -> None:
        """Run write statements and commit them together."""
        if self._connection is None:
            raise StoreError("Record database is not initialized")
        try:
            for sql, params in statements:
                await self._connection.execute(sql, params)
            await self._connection.commit()
        except aiosqlite.Error as e:
            raise StoreError(f"Record store write failed: {e}") from e

    async def _fetch(self, sql: str, params: tuple = ()) -> list[Any]:
        if self._connection is None:
            raise StoreError("Record database is not initialized")
        try:
            async with self._connection.execute(sql, params) as cursor:
                return list(await cursor.fetchall())
        except aiosqlite.Error as e:
            raise StoreError(f"Record store read failed: {e}") from e

    # Collection operations

    async def create_collection(
        self, name: str, fields: Optional[list[FieldDescriptor]] = None
    ) -> CollectionInfo:
        """Create a collection. The built-in title field is always present."""
        existing = await self.get_collection(name)
        if existing:
            raise StoreError(f"Collection '{name}' already exists")

        all_fields = [FieldDescriptor(id=TITLE_FIELD_ID, label="Title")]
        all_fields.extend(f for f in (fields or []) if f.id != TITLE_FIELD_ID)

        collection = CollectionInfo(id=str(uuid.uuid4()), name=name, fields=all_fields)
        statements = [
            (
                "INSERT INTO collections (id, name, created_at) VALUES (?, ?, ?)",
                (collection.id, collection.name, collection.created_at.isoformat()),
            )
        ]
        for position, f in enumerate(all_fields):
            statements.append(
                (
                    """
                    INSERT INTO fields (collection_id, id, label, active, type, position)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (collection.id, f.id, f.label, 1 if f.active else 0, f.type.value, position),
                )
            )
        await self._write(statements)
        logger.info(f"Created collection '{name}' with {len(all_fields)} fields")
        return collection

    async def list_collections(self) -> list[CollectionInfo]:
        """Get all collections in creation order."""
        rows = await self._fetch("SELECT id, name, created_at FROM collections ORDER BY rowid")
        return [await self._row_to_collection(row) for row in rows]

    async def get_collection(self, id_or_name: str) -> Optional[CollectionInfo]:
        """Get a collection by id, falling back to its name."""
        rows = await self._fetch(
            "SELECT id, name, created_at FROM collections WHERE id = ? OR name = ? "
            "ORDER BY CASE WHEN id = ? THEN 0 ELSE 1 END LIMIT 1",
            (id_or_name, id_or_name, id_or_name),
        )
        if not rows:
            return None
        return await self._row_to_collection(rows[0])

    async def _row_to_collection(self, row) -> CollectionInfo:
        return CollectionInfo(
            id=row[0],
            name=row[1],
            fields=await self._load_fields(row[0]),
            created_at=datetime.fromisoformat(row[2]),
        )

    async def _load_fields(self, collection_id: str) -> list[FieldDescriptor]:
        rows = await self._fetch(
            "SELECT id, label, active, type FROM fields WHERE collection_id = ? ORDER BY position",
            (collection_id,),
        )
        return [
            FieldDescriptor(id=row[0], label=row[1], active=bool(row[2]), type=FieldType(row[3]))
            for row in rows
        ]

    def collection(self, collection_id: str) -> "CollectionStore":
        """Get a RecordStore handle scoped to one collection."""
        return CollectionStore(self, collection_id)

    # Record operations

    async def insert_record(self, collection_id: str, title: str) -> str:
        """Insert a record with one empty content block and return its id."""
        record_id = str(uuid.uuid4())
        now = _utc_now_iso()
        await self._write(
            [
                (
                    """
                    INSERT INTO records (id, collection_id, title, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (record_id, collection_id, title, now, now),
                ),
                (
                    "INSERT INTO content_blocks (id, record_id, position, text) VALUES (?, ?, 0, '')",
                    (str(uuid.uuid4()), record_id),
                ),
            ]
        )
        return record_id

    async def load_records(
        self, collection_id: str, record_id: Optional[str] = None
    ) -> list["StoredRecord"]:
        """Load records of a collection (or a single one) with their property values."""
        fields = await self._load_fields(collection_id)

        query = "SELECT id, title FROM records WHERE collection_id = ?"
        params: list[Any] = [collection_id]
        if record_id:
            query += " AND id = ?"
            params.append(record_id)
        query += " ORDER BY rowid"
        record_rows = await self._fetch(query, tuple(params))

        values_query = (
            "SELECT pv.record_id, pv.field_id, pv.value FROM property_values pv "
            "JOIN records r ON r.id = pv.record_id WHERE r.collection_id = ?"
        )
        values_params: list[Any] = [collection_id]
        if record_id:
            values_query += " AND r.id = ?"
            values_params.append(record_id)
        values: dict[str, dict[str, str]] = {}
        for rid, field_id, value in await self._fetch(values_query, tuple(values_params)):
            if value is not None:
                values.setdefault(rid, {})[field_id] = value

        return [
            StoredRecord(self, row[0], row[1], fields, values.get(row[0], {}))
            for row in record_rows
        ]

    async def update_title(self, record_id: str, title: str) -> None:
        await self._write(
            [
                (
                    "UPDATE records SET title = ?, updated_at = ? WHERE id = ?",
                    (title, _utc_now_iso(), record_id),
                )
            ]
        )

    async def set_property_value(self, record_id: str, field_id: str, value: str) -> None:
        await self._write(
            [
                (
                    "INSERT OR REPLACE INTO property_values (record_id, field_id, value) VALUES (?, ?, ?)",
                    (record_id, field_id, value),
                ),
                (
                    "UPDATE records SET updated_at = ? WHERE id = ?",
                    (_utc_now_iso(), record_id),
                ),
            ]
        )

    async def load_blocks(self, record_id: str) -> list[BlockData]:
        rows = await self._fetch(
            "SELECT id, position, text FROM content_blocks WHERE record_id = ? ORDER BY position",
            (record_id,),
        )
        return [BlockData(id=row[0], position=row[1], text=row[2]) for row in rows]

    async def update_block_text(self, block_id: str, text: str) -> None:
        await self._write(
            [("UPDATE content_blocks SET text = ? WHERE id = ?", (text, block_id))]
        )

    async def delete_block(self, block_id: str) -> None:
        await self._write([("DELETE FROM content_blocks WHERE id = ?", (block_id,))])


class StoredRecord(Record):
    """A record loaded from the RecordDatabase."""

    def __init__(
        self,
        db: RecordDatabase,
        record_id: str,
        title: str,
        fields: list[FieldDescriptor],
        values: dict[str, str],
    ):
        self._db = db
        self._id = record_id
        self._title = title
        self._fields = fields
        self._values = dict(values)

    @property
    def id(self) -> str:
        return self._id

    def get_title(self) -> str:
        return self._title

    def _resolve_field(self, label_or_id: str) -> Optional[FieldDescriptor]:
        active = [f for f in self._fields if f.active]
        for f in active:
            if f.label == label_or_id:
                return f
        for f in active:
            if f.id == label_or_id:
                return f
        return None

    def has_property(self, label_or_id: str) -> bool:
        return self._resolve_field(label_or_id) is not None

    def get_property_text(self, label_or_id: str) -> Optional[str]:
        field = self._resolve_field(label_or_id)
        if field is None:
            return None
        if field.is_title:
            return self._title
        return self._values.get(field.id)

    async def set_property_text(self, label_or_id: str, value: str) -> None:
        field = self._resolve_field(label_or_id)
        if field is None:
            raise StoreError(f"Unknown property '{label_or_id}' on record {self._id}")
        if field.is_title:
            await self._db.update_title(self._id, value)
            self._title = value
            return
        await self._db.set_property_value(self._id, field.id, value)
        self._values[field.id] = value

    async def get_content_blocks(self) -> list[ContentBlock]:
        return await self._db.load_blocks(self._id)

    async def replace_block_text(self, block: ContentBlock, text: str) -> None:
        await self._db.update_block_text(block.id, text)
        block.text = text


class CollectionStore(RecordStore):
    """RecordStore handle for one collection of a RecordDatabase."""

    def __init__(self, db: RecordDatabase, collection_id: str):
        self.db = db
        self.collection_id = collection_id

    async def list_fields(self) -> list[FieldDescriptor]:
        collection = await self.db.get_collection(self.collection_id)
        if collection is None:
            raise StoreError(f"Collection '{self.collection_id}' not found")
        return collection.fields

    async def list_records(self) -> list[Record]:
        return list(await self.db.load_records(self.collection_id))

    async def create_record(self, title: str) -> Optional[str]:
        if not title.strip():
            return None
        return await self.db.insert_record(self.collection_id, title)

    async def get_record(self, record_id: str) -> Optional[Record]:
        records = await self.db.load_records(self.collection_id, record_id)
        return records[0] if records else None
