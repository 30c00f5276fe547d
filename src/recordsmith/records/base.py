"""Abstract record-store interface consumed by the importer."""

from abc import ABC, abstractmethod
from typing import Optional

from .models import BlockData, FieldDescriptor

# Content blocks are plain data on both sides of the boundary
ContentBlock = BlockData


class StoreError(Exception):
    """Exception raised when the record store fails."""

    pass


class Record(ABC):
    """A single record as seen by the importer.

    Reads work on the snapshot loaded with the record; writes go straight
    to the backing store.
    """

    @property
    @abstractmethod
    def id(self) -> str:
        """Stable identifier of the record."""

    @abstractmethod
    def get_title(self) -> str:
        """Return the record title."""

    @abstractmethod
    def has_property(self, label_or_id: str) -> bool:
        """Return True if the record's collection defines this property."""

    @abstractmethod
    def get_property_text(self, label_or_id: str) -> Optional[str]:
        """Return a property value as text, or None when unset or unknown."""

    @abstractmethod
    async def set_property_text(self, label_or_id: str, value: str) -> None:
        """Set a property value."""

    @abstractmethod
    async def get_content_blocks(self) -> list[ContentBlock]:
        """Return the record body blocks in document order."""

    @abstractmethod
    async def replace_block_text(self, block: ContentBlock, text: str) -> None:
        """Replace the text of one content block."""


class RecordStore(ABC):
    """Read/write handle on one collection of records."""

    @abstractmethod
    async def list_fields(self) -> list[FieldDescriptor]:
        """Return the field descriptors of the collection."""

    @abstractmethod
    async def list_records(self) -> list[Record]:
        """Return every record in the collection."""

    @abstractmethod
    async def create_record(self, title: str) -> Optional[str]:
        """Create a record and return its id, or None if nothing was created."""

    @abstractmethod
    async def get_record(self, record_id: str) -> Optional[Record]:
        """Fetch a record by id."""
