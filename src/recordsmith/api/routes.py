"""API routes for RecordSmith."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..importer import (
    ColumnMapping,
    DedupKey,
    DedupOption,
    ImportResult,
    ImportValidationError,
    choose_default_collection,
    dedup_key_options,
    infer_mapping,
    property_options,
    reconcile,
    validate_mapping,
)
from ..records import CollectionInfo, FieldDescriptor, StoreError
from ..tabular import ParsedTable, parse_csv

logger = logging.getLogger(__name__)

router = APIRouter()

EMPTY_CSV_MESSAGE = "CSV file is empty or has no data rows"
NO_COLLECTIONS_MESSAGE = "No collections found in workspace"


def get_database():
    """Get the global record database instance."""
    from .app import get_database as _get_database

    return _get_database()


class PreviewRequest(BaseModel):
    """Request to parse a CSV document and propose a mapping."""

    csv_text: str
    collection_id: Optional[str] = None


class PreviewResponse(BaseModel):
    """Parsed CSV summary plus smart defaults for the import dialog."""

    headers: list[str]
    row_count: int
    sample_rows: list[list[str]]
    collection_id: str
    collection_name: str
    mapping: ColumnMapping
    property_options: list[FieldDescriptor]
    dedup_options: list[DedupOption]


class ImportRequest(BaseModel):
    """Request to import a CSV document into a collection."""

    csv_text: str
    collection_id: str
    mapping: ColumnMapping
    dedup: DedupKey = Field(default_factory=DedupKey.by_title)


class ImportResponse(BaseModel):
    """Outcome of an import."""

    result: ImportResult
    message: str


def _parse_upload(csv_text: str) -> ParsedTable:
    from ..config import settings

    if len(csv_text.encode("utf-8")) > settings.max_csv_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"CSV file exceeds the {settings.max_csv_bytes} byte limit",
        )
    table = parse_csv(csv_text)
    if table.is_empty:
        raise HTTPException(status_code=400, detail=EMPTY_CSV_MESSAGE)
    return table


async def _get_collection(collection_id: str) -> CollectionInfo:
    collection = await get_database().get_collection(collection_id)
    if collection is None:
        raise HTTPException(status_code=404, detail=f"Collection '{collection_id}' not found")
    return collection


# Health check


@router.get("/health")
async def health_check():
    """Health check endpoint with diagnostics."""
    from ..config import settings

    return {
        "status": "ok",
        "service": "recordsmith",
        "config": {
            "database_path": str(settings.database_path),
            "default_dedup": settings.default_dedup,
            "max_csv_bytes": settings.max_csv_bytes,
        },
    }


# Collection endpoints


@router.get("/collections")
async def list_collections():
    """List collections available as import targets."""
    collections = await get_database().list_collections()
    return {
        "count": len(collections),
        "collections": [{"id": c.id, "name": c.name} for c in collections],
    }


@router.get("/collections/{collection_id}/fields")
async def list_fields(collection_id: str):
    """List the fields of a collection."""
    collection = await _get_collection(collection_id)
    return {
        "collection_id": collection.id,
        "fields": [f.model_dump() for f in collection.fields],
    }


# Import endpoints


@router.post("/imports/preview", response_model=PreviewResponse)
async def preview_import(request: PreviewRequest):
    """Parse a CSV document and return the default import configuration."""
    from ..config import settings

    table = _parse_upload(request.csv_text)

    collections = await get_database().list_collections()
    if not collections:
        raise HTTPException(status_code=404, detail=NO_COLLECTIONS_MESSAGE)
    collection = choose_default_collection(collections, request.collection_id)

    fields = collection.active_fields()
    return PreviewResponse(
        headers=table.headers,
        row_count=table.row_count,
        sample_rows=table.rows[: settings.preview_sample_rows],
        collection_id=collection.id,
        collection_name=collection.name,
        mapping=infer_mapping(table.headers, fields),
        property_options=property_options(fields),
        dedup_options=dedup_key_options(fields),
    )


@router.post("/imports", response_model=ImportResponse)
async def run_import(request: ImportRequest):
    """Import a CSV document into a collection."""
    table = _parse_upload(request.csv_text)
    collection = await _get_collection(request.collection_id)

    try:
        validate_mapping(request.mapping, collection.fields)
        result = await reconcile(
            table,
            request.mapping,
            request.dedup,
            get_database().collection(collection.id),
        )
    except ImportValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreError as e:
        logger.error(f"Import into '{collection.name}' failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return ImportResponse(result=result, message=result.summary())
