"""Command-line interface for RecordSmith."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import uvicorn

from .config import settings
from .importer import (
    ColumnMapping,
    DedupKey,
    MappingTarget,
    dedup_key_options,
    infer_mapping,
    reconcile,
    validate_mapping,
)
from .records import FieldDescriptor, FieldType, RecordDatabase, StoreError
from .tabular import parse_csv


def main():
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="RecordSmith - Import CSV files into record collections"
    )
    parser.add_argument(
        "--db", type=Path, default=None, help="Database path (default: DATABASE_PATH)"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Server command
    server_parser = subparsers.add_parser("serve", help="Start the web server")
    server_parser.add_argument(
        "--host", default=settings.host, help="Host to bind to (default: 127.0.0.1)"
    )
    server_parser.add_argument(
        "--port", type=int, default=settings.port, help="Port to bind to (default: 8000)"
    )
    server_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    # Collection commands
    subparsers.add_parser("collections", help="List collections")

    create_parser = subparsers.add_parser("create-collection", help="Create a collection")
    create_parser.add_argument("name", help="Collection name")
    create_parser.add_argument(
        "--field",
        "-f",
        action="append",
        default=[],
        help="Field as ID[:LABEL[:TYPE]] (repeatable)",
    )

    # Preview command
    preview_parser = subparsers.add_parser(
        "preview", help="Show how a CSV file would be mapped"
    )
    preview_parser.add_argument("file", type=Path, help="CSV file")
    preview_parser.add_argument("--collection", "-c", help="Collection id or name")

    # Import command
    import_parser = subparsers.add_parser("import", help="Import a CSV file")
    import_parser.add_argument("file", type=Path, help="CSV file")
    import_parser.add_argument("--collection", "-c", required=True, help="Collection id or name")
    import_parser.add_argument(
        "--dedup",
        default=settings.default_dedup,
        help="__title__, __none__ or a field id (default: __title__)",
    )
    import_parser.add_argument(
        "--map",
        "-m",
        action="append",
        default=[],
        help="Column mapping as INDEX=TARGET, TARGET one of title, body, discard, property:<id>",
    )

    args = parser.parse_args()
    logging.basicConfig(level=settings.log_level)

    if args.command == "serve":
        run_server(args.host, args.port, args.reload)
    elif args.command == "collections":
        asyncio.run(run_list_collections(args.db))
    elif args.command == "create-collection":
        asyncio.run(run_create_collection(args.db, args.name, args.field))
    elif args.command == "preview":
        asyncio.run(run_preview(args.db, args.file, args.collection))
    elif args.command == "import":
        code = asyncio.run(
            run_import(args.db, args.file, args.collection, args.dedup, args.map)
        )
        sys.exit(code)
    else:
        parser.print_help()
        sys.exit(1)


def run_server(host: str, port: int, reload: bool):
    """Run the web server."""
    uvicorn.run(
        "recordsmith.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


def parse_field_spec(spec: str) -> FieldDescriptor:
    """Parse ID[:LABEL[:TYPE]] into a field descriptor."""
    parts = spec.split(":")
    field_id = parts[0].strip()
    if not field_id:
        raise ValueError(f"Invalid field '{spec}': missing id")
    label = parts[1].strip() if len(parts) > 1 and parts[1].strip() else field_id
    field_type = FieldType(parts[2].strip().lower()) if len(parts) > 2 else FieldType.TEXT
    return FieldDescriptor(id=field_id, label=label, type=field_type)


def parse_mapping_specs(specs: list[str]) -> ColumnMapping:
    """Parse INDEX=TARGET pairs into a column mapping."""
    mapping: ColumnMapping = {}
    for spec in specs:
        index, sep, target = spec.partition("=")
        if not sep:
            raise ValueError(f"Invalid mapping '{spec}': expected INDEX=TARGET")
        mapping[int(index.strip())] = MappingTarget.parse(target)
    return mapping


def read_csv_file(path: Path) -> str:
    return path.read_text(encoding=settings.csv_encoding)


async def _open_database(db_path: Optional[Path]) -> RecordDatabase:
    database = RecordDatabase(db_path)
    await database.initialize()
    return database


async def run_list_collections(db_path: Optional[Path]):
    """Print every collection."""
    database = await _open_database(db_path)
    try:
        collections = await database.list_collections()
        if not collections:
            print("No collections found.")
        for collection in collections:
            labels = ", ".join(f.label for f in collection.active_fields())
            print(f"{collection.id}  {collection.name}  [{labels}]")
    finally:
        await database.close()


async def run_create_collection(db_path: Optional[Path], name: str, field_specs: list[str]):
    """Create a collection with the given fields."""
    fields = [parse_field_spec(spec) for spec in field_specs]
    database = await _open_database(db_path)
    try:
        collection = await database.create_collection(name, fields)
        print(f"Created collection '{collection.name}' ({collection.id})")
    finally:
        await database.close()


async def run_preview(db_path: Optional[Path], file: Path, collection_ref: Optional[str]):
    """Print the parsed headers and the default mapping for a CSV file."""
    table = parse_csv(read_csv_file(file))
    print(f"{table.row_count} row{'s' if table.row_count != 1 else ''} to import")

    database = await _open_database(db_path)
    try:
        if collection_ref:
            collection = await database.get_collection(collection_ref)
        else:
            collections = await database.list_collections()
            collection = collections[0] if collections else None
        fields = collection.active_fields() if collection else []

        mapping = infer_mapping(table.headers, fields)
        if collection:
            print(f"Collection: {collection.name}")
        print("Column mappings:")
        for idx, header in enumerate(table.headers):
            print(f"  {idx}  {header} -> {mapping[idx]}")
        print("Deduplicate by:")
        for option in dedup_key_options(fields):
            print(f"  {option.value}  {option.label}")
    finally:
        await database.close()


async def run_import(
    db_path: Optional[Path],
    file: Path,
    collection_ref: str,
    dedup_option: str,
    mapping_specs: list[str],
) -> int:
    """Import a CSV file and print the summary. Returns the exit code."""
    table = parse_csv(read_csv_file(file))
    if table.is_empty:
        print("Import error: CSV file is empty or has no data rows")
        return 1

    database = await _open_database(db_path)
    try:
        collection = await database.get_collection(collection_ref)
        if collection is None:
            print(f"Import error: collection '{collection_ref}' not found")
            return 1

        try:
            if mapping_specs:
                mapping = parse_mapping_specs(mapping_specs)
            else:
                mapping = infer_mapping(table.headers, collection.active_fields())
            validate_mapping(mapping, collection.fields)
            result = await reconcile(
                table,
                mapping,
                DedupKey.from_option(dedup_option),
                database.collection(collection.id),
            )
        except (ValueError, StoreError) as e:
            print(f"Import error: {e}")
            return 1

        print(f"Import complete. {result.summary()}")
        return 0
    finally:
        await database.close()


if __name__ == "__main__":
    main()
