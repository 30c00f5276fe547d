"""Normalization of deduplication keys."""

from typing import Optional


def fold_key(value: Optional[str]) -> str:
    """Case-fold and trim a value so equivalent titles compare equal.

    Existing records and incoming rows must both go through this function.
    """
    if not value:
        return ""
    return value.lower().strip()
