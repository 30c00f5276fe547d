"""CSV parsing for record imports."""

from .models import ParsedTable
from .parser import CsvParser, parse_csv

__all__ = ["ParsedTable", "CsvParser", "parse_csv"]
