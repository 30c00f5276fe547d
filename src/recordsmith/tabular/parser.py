"""Parser for turning CSV text into a header row and data rows."""

import logging

from .models import ParsedTable

logger = logging.getLogger(__name__)

QUOTE = '"'
DELIMITER = ","


class CsvParser:
    """Single-pass CSV scanner with RFC 4180 style quoting.

    The parser never raises: malformed input (unterminated quotes, ragged
    rows) degrades to the best structural reading of the text.
    """

    def parse(self, text: str) -> ParsedTable:
        """
        Parse CSV text into a ParsedTable.

        Lines whose fields are all blank are dropped. The first remaining
        line becomes the (trimmed) header row; the rest are returned as
        data rows without trimming.

        Args:
            text: The raw CSV document

        Returns:
            ParsedTable with headers and rows
        """
        lines = self._scan(text)

        if not lines:
            return ParsedTable(headers=[], rows=[])

        headers = [header.strip() for header in lines[0]]
        rows = lines[1:]
        logger.debug(f"Parsed CSV: {len(headers)} headers, {len(rows)} rows")

        return ParsedTable(headers=headers, rows=rows)

    def _scan(self, text: str) -> list[list[str]]:
        lines: list[list[str]] = []
        current_line: list[str] = []
        current_field = ""
        in_quotes = False

        i = 0
        length = len(text)
        while i < length:
            char = text[i]
            next_char = text[i + 1] if i + 1 < length else ""

            if in_quotes:
                if char == QUOTE:
                    if next_char == QUOTE:
                        current_field += QUOTE
                        i += 1
                    else:
                        in_quotes = False
                else:
                    current_field += char
            elif char == QUOTE:
                in_quotes = True
            elif char == DELIMITER:
                current_line.append(current_field)
                current_field = ""
            elif char == "\n" or (char == "\r" and next_char == "\n"):
                current_line.append(current_field)
                self._keep_line(lines, current_line)
                current_line = []
                current_field = ""
                if char == "\r":
                    i += 1
            elif char != "\r":
                current_field += char

            i += 1

        # Flush whatever is left after the last terminator
        if current_field or current_line:
            current_line.append(current_field)
            self._keep_line(lines, current_line)

        return lines

    @staticmethod
    def _keep_line(lines: list[list[str]], line: list[str]) -> None:
        if any(field.strip() for field in line):
            lines.append(line)


def parse_csv(text: str) -> ParsedTable:
    """Parse CSV text with a default CsvParser."""
    return CsvParser().parse(text)
