"""HTTP API for RecordSmith."""

from .app import create_app

__all__ = ["create_app"]
