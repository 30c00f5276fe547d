"""Configuration management for RecordSmith."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _parse_cors_origins() -> list[str]:
    """Parse CORS origins from environment variable."""
    cors_env = os.getenv("CORS_ALLOW_ORIGINS")
    if cors_env:
        return cors_env.split(",")
    return ["*"]


class Settings(BaseModel):
    """Application settings."""

    # Database path for the record store
    database_path: Path = Path(os.getenv("DATABASE_PATH", "data/recordsmith.db"))

    # Server settings
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"

    # CORS settings (comma-separated list of allowed origins, or * for all)
    cors_allow_origins: list[str] = _parse_cors_origins()

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Import defaults
    default_dedup: str = os.getenv("DEFAULT_DEDUP", "__title__")  # "__title__", "__none__" or a field id
    csv_encoding: str = os.getenv("CSV_ENCODING", "utf-8-sig")  # Strips a leading BOM from spreadsheet exports
    preview_sample_rows: int = int(os.getenv("PREVIEW_SAMPLE_ROWS", "5"))

    # Hard cap on uploaded CSV payloads
    max_csv_bytes: int = int(os.getenv("MAX_CSV_BYTES", str(10 * 1024 * 1024)))


settings = Settings()
