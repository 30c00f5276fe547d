"""Tests for the command-line interface."""

import pytest

from recordsmith.cli import (
    parse_field_spec,
    parse_mapping_specs,
    run_create_collection,
    run_import,
    run_list_collections,
    run_preview,
)
from recordsmith.importer import MappingTarget
from recordsmith.records import FieldType, RecordDatabase


class TestParseFieldSpec:
    """Test ID[:LABEL[:TYPE]] parsing."""

    def test_id_only(self):
        """Test the label defaults to the id."""
        field = parse_field_spec("sku")

        assert field.id == "sku"
        assert field.label == "sku"
        assert field.type == FieldType.TEXT

    def test_full_spec(self):
        """Test id, label and type are all read."""
        field = parse_field_spec("qty:Quantity:number")

        assert field.id == "qty"
        assert field.label == "Quantity"
        assert field.type == FieldType.NUMBER

    def test_missing_id(self):
        """Test an empty id is rejected."""
        with pytest.raises(ValueError):
            parse_field_spec(":Label")


class TestParseMappingSpecs:
    """Test INDEX=TARGET parsing."""

    def test_mapping(self):
        """Test pairs become a column mapping."""
        mapping = parse_mapping_specs(["0=title", "1=property:qty", " 2 = body"])

        assert mapping == {
            0: MappingTarget.title(),
            1: MappingTarget.property("qty"),
            2: MappingTarget.body(),
        }

    def test_missing_separator(self):
        """Test a pair without '=' is rejected."""
        with pytest.raises(ValueError):
            parse_mapping_specs(["0title"])


class TestCommands:
    """Test the async command implementations against a temporary database."""

    @pytest.mark.asyncio
    async def test_create_list_and_import(self, tmp_path, capsys):
        """Test creating a collection and importing a file into it."""
        db_path = tmp_path / "cli.db"
        csv_file = tmp_path / "products.csv"
        csv_file.write_text("\ufefftitle,qty\nApple,5\nBanana,\n,9\n", encoding="utf-8")

        await run_create_collection(db_path, "Products", ["qty:Quantity:number"])
        await run_list_collections(db_path)
        code = await run_import(db_path, csv_file, "Products", "__title__", [])

        output = capsys.readouterr().out
        assert "Created collection 'Products'" in output
        assert "Products  [Title, Quantity]" in output
        assert code == 0
        assert "Created: 2, Updated: 0, Skipped: 1" in output

        db = RecordDatabase(db_path)
        await db.initialize()
        try:
            collection = await db.get_collection("Products")
            records = await db.collection(collection.id).list_records()
            assert [r.get_title() for r in records] == ["Apple", "Banana"]
            assert records[0].get_property_text("qty") == "5"
        finally:
            await db.close()

    @pytest.mark.asyncio
    async def test_preview(self, tmp_path, capsys):
        """Test preview prints the inferred mapping."""
        db_path = tmp_path / "cli.db"
        csv_file = tmp_path / "products.csv"
        csv_file.write_text("title,qty,notes\nApple,5,x\n", encoding="utf-8")
        await run_create_collection(db_path, "Products", ["qty:Quantity:number"])

        await run_preview(db_path, csv_file, None)

        output = capsys.readouterr().out
        assert "1 row to import" in output
        assert "0  title -> title" in output
        assert "1  qty -> property:qty" in output
        assert "2  notes -> discard" in output
        assert "__none__  None (always create new)" in output

    @pytest.mark.asyncio
    async def test_import_invalid_mapping(self, tmp_path, capsys):
        """Test an invalid mapping exits with an error and writes nothing."""
        db_path = tmp_path / "cli.db"
        csv_file = tmp_path / "products.csv"
        csv_file.write_text("title,qty\nApple,5\n", encoding="utf-8")
        await run_create_collection(db_path, "Products", [])

        code = await run_import(db_path, csv_file, "Products", "__title__", ["1=body"])

        assert code == 1
        assert "At least one column must be mapped to Title" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_import_empty_file(self, tmp_path, capsys):
        """Test a file without data rows is refused."""
        csv_file = tmp_path / "empty.csv"
        csv_file.write_text("title\n", encoding="utf-8")

        code = await run_import(tmp_path / "cli.db", csv_file, "Products", "__title__", [])

        assert code == 1
        assert "CSV file is empty or has no data rows" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_import_unknown_collection(self, tmp_path, capsys):
        """Test importing into a missing collection fails."""
        csv_file = tmp_path / "products.csv"
        csv_file.write_text("title\nApple\n", encoding="utf-8")

        code = await run_import(tmp_path / "cli.db", csv_file, "Nope", "__title__", [])

        assert code == 1
        assert "collection 'Nope' not found" in capsys.readouterr().out
