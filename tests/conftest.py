"""Pytest configuration and shared fixtures."""

import uuid
from pathlib import Path
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio

from recordsmith.config import Settings
from recordsmith.records import (
    BlockData,
    ContentBlock,
    FieldDescriptor,
    FieldType,
    Record,
    RecordDatabase,
    RecordStore,
)


class FakeRecord(Record):
    """In-memory record used to exercise the importer without SQLite."""

    def __init__(self, store: "FakeStore", record_id: str, title: str):
        self._store = store
        self._id = record_id
        self.title = title
        self.values: dict[str, str] = {}
        self.blocks: list[BlockData] = [BlockData(id=f"{record_id}-b0", position=0)]
        self.writes: list[tuple[str, str]] = []

    @property
    def id(self) -> str:
        return self._id

    def get_title(self) -> str:
        return self.title

    def _field(self, label_or_id: str) -> Optional[FieldDescriptor]:
        fields = self._store.record_fields or self._store.fields
        for f in fields:
            if f.active and f.label == label_or_id:
                return f
        for f in fields:
            if f.active and f.id == label_or_id:
                return f
        return None

    def has_property(self, label_or_id: str) -> bool:
        return self._field(label_or_id) is not None

    def get_property_text(self, label_or_id: str) -> Optional[str]:
        field = self._field(label_or_id)
        return self.values.get(field.id) if field else None

    async def set_property_text(self, label_or_id: str, value: str) -> None:
        field = self._field(label_or_id)
        self.writes.append((label_or_id, value))
        self.values[field.id] = value

    async def get_content_blocks(self) -> list[ContentBlock]:
        return list(self.blocks)

    async def replace_block_text(self, block: ContentBlock, text: str) -> None:
        block.text = text

    @property
    def body(self) -> str:
        return self.blocks[0].text if self.blocks else ""


class FakeStore(RecordStore):
    """In-memory RecordStore recording every call it receives."""

    def __init__(self, fields: Optional[list[FieldDescriptor]] = None):
        self.fields = fields if fields is not None else []
        # Fields records accept, when they differ from what list_fields reports
        self.record_fields: Optional[list[FieldDescriptor]] = None
        self.records: list[FakeRecord] = []
        self.created_titles: list[str] = []
        self.list_calls = 0
        self.fail_create = False
        self.lose_created = False

    def add(self, title: str, **values: str) -> FakeRecord:
        record = FakeRecord(self, str(uuid.uuid4()), title)
        record.values.update(values)
        self.records.append(record)
        return record

    def by_title(self, title: str) -> list[FakeRecord]:
        return [r for r in self.records if r.title == title]

    async def list_fields(self) -> list[FieldDescriptor]:
        return list(self.fields)

    async def list_records(self) -> list[Record]:
        self.list_calls += 1
        return list(self.records)

    async def create_record(self, title: str) -> Optional[str]:
        self.created_titles.append(title)
        if self.fail_create:
            return None
        record = self.add(title)
        return "missing-id" if self.lose_created else record.id

    async def get_record(self, record_id: str) -> Optional[Record]:
        for record in self.records:
            if record.id == record_id:
                return record
        return None


@pytest.fixture
def collection_fields() -> list[FieldDescriptor]:
    """Fields of a typical product collection."""
    return [
        FieldDescriptor(id="title", label="Title"),
        FieldDescriptor(id="qty", label="Quantity", type=FieldType.NUMBER),
        FieldDescriptor(id="sku", label="SKU"),
        FieldDescriptor(id="status", label="Status", type=FieldType.CHOICE),
        FieldDescriptor(id="legacy", label="Legacy", active=False),
    ]


@pytest.fixture
def fake_store(collection_fields) -> FakeStore:
    """Create an empty in-memory record store."""
    return FakeStore(collection_fields)


@pytest.fixture
def mock_settings(tmp_path: Path) -> Settings:
    """Create settings with test values."""
    return Settings(
        database_path=tmp_path / "test.db",
        host="127.0.0.1",
        port=8000,
        debug=False,
        cors_allow_origins=["*"],
    )


@pytest_asyncio.fixture
async def record_db(tmp_path: Path) -> AsyncGenerator[RecordDatabase, None]:
    """Create a record database in a temporary directory."""
    db = RecordDatabase(tmp_path / "records.db")
    await db.initialize()
    yield db
    await db.close()
