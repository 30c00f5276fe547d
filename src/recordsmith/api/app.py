"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import settings
from ..records import RecordDatabase
from .routes import router

# Global record database instance
_database: Optional[RecordDatabase] = None


def get_database() -> RecordDatabase:
    """Get the global record database instance."""
    global _database
    if _database is None:
        _database = RecordDatabase()
    return _database


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    # Startup
    database = get_database()
    await database.initialize()
    yield
    # Shutdown
    await database.close()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="RecordSmith",
        description="CSV import into record collections",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # API routes
    app.include_router(router, prefix="/api")

    return app
