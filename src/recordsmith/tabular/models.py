"""Data models for parsed tabular input."""

from pydantic import BaseModel, Field


class ParsedTable(BaseModel):
    """Header row plus data rows extracted from a CSV document.

    Rows are not padded: a row may hold fewer (or more) fields than there
    are headers when the source document is malformed.
    """

    headers: list[str] = Field(default_factory=list)
    rows: list[list[str]] = Field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to import."""
        return not self.rows
