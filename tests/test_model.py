"""Tests for the table model and its structural edits."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from dataorganizer.errors import LockedError
from dataorganizer.model import (
    PRESETS,
    Column,
    Row,
    Table,
    cell_text,
    custom_table,
    get_preset,
    number_to_str,
    slugify,
    table_from_preset,
    unique_id,
)


@pytest.fixture
def table() -> Table:
    return Table(
        name="Trips",
        columns=[Column(id="from", title="From"), Column(id="price", title="Price", type="currency")],
        rows=[
            Row(id="r1", cells={"from": "Paris", "price": "120"}),
            Row(id="r2", cells={"from": "Oslo", "price": "80"}),
        ],
    )


class TestHelpers:
    def test_slugify(self) -> None:
        assert slugify("Hotel Name") == "hotel-name"
        assert slugify("Price/Night") == "pricenight"
        assert slugify("  Multi   Space ") == "-multi-space-"

    def test_slugify_fallback(self) -> None:
        assert slugify("!!!", 3) == "column-3"
        assert slugify("!!!") == ""

    def test_unique_id(self) -> None:
        assert unique_id("name", []) == "name"
        assert unique_id("name", ["name", "name-2"]) == "name-3"

    def test_number_to_str(self) -> None:
        assert number_to_str(12.5) == "12.5"
        assert number_to_str(9.0) == "9"
        assert number_to_str(-0.0) == "0"

    @pytest.mark.parametrize(
        "value, expected",
        [
            (0.00005, "0.00005"),
            (0.000001, "0.000001"),
            (1e-7, "1e-7"),
            (1.5e-10, "1.5e-10"),
            (100.0, "100"),
            (12345678901234567890.0, "12345678901234567000"),
            (1e21, "1e+21"),
            (-2.5e22, "-2.5e+22"),
            (0.1 + 0.2, "0.30000000000000004"),
            (float("inf"), "Infinity"),
        ],
    )
    def test_number_to_str_browser_layout(self, value: float, expected: str) -> None:
        assert number_to_str(value) == expected

    def test_cell_text(self) -> None:
        assert cell_text(None) == ""
        assert cell_text(3.0) == "3"
        assert cell_text("abc") == "abc"

    def test_absent_cell_reads_empty(self) -> None:
        assert Row(id="r").get("missing") == ""


class TestInvariants:
    def test_duplicate_column_ids_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Table(columns=[Column(id="a", title="A"), Column(id="a", title="A again")])

    def test_duplicate_row_ids_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Table(rows=[Row(id="r"), Row(id="r")])


class TestColumnEdits:
    def test_add_column_at_position(self, table: Table) -> None:
        out = table.add_column("Airline", position=1)
        assert out.column_ids == ["from", "airline", "price"]
        assert all(r.cells["airline"] == "" for r in out.rows)

    def test_add_column_default_end_and_type(self, table: Table) -> None:
        out = table.add_column("Rating", type="number")
        assert out.columns[-1].id == "rating"
        assert out.columns[-1].type == "number"

    def test_add_column_dedupes_id(self, table: Table) -> None:
        out = table.add_column("Price")
        assert out.column_ids == ["from", "price", "price-2"]

    def test_add_blank_column_rejected(self, table: Table) -> None:
        with pytest.raises(ValueError, match="cannot be empty"):
            table.add_column("   ")

    def test_delete_column_drops_data(self, table: Table) -> None:
        out = table.delete_column("price")
        assert out.column_ids == ["from"]
        assert all("price" not in r.cells for r in out.rows)

    def test_delete_locked_column(self, table: Table) -> None:
        locked = table.set_column_locked("price", True)
        with pytest.raises(LockedError):
            locked.delete_column("price")

    def test_delete_unknown_column(self, table: Table) -> None:
        with pytest.raises(KeyError):
            table.delete_column("nope")

    def test_edits_do_not_mutate_receiver(self, table: Table) -> None:
        table.add_column("Airline").delete_column("price")
        assert table.column_ids == ["from", "price"]
        assert table.rows[0].cells == {"from": "Paris", "price": "120"}


class TestRowEdits:
    def test_add_row_has_every_column(self, table: Table) -> None:
        out = table.add_row()
        new = out.rows[-1]
        assert new.cells == {"from": "", "price": ""}
        assert new.color == "#ffffff"
        assert new.locked is False

    def test_add_row_with_taken_id(self, table: Table) -> None:
        out = table.add_row("r1")
        assert out.rows[-1].id == "r1-2"

    def test_remove_row(self, table: Table) -> None:
        assert [r.id for r in table.remove_row("r1").rows] == ["r2"]

    def test_remove_locked_row(self, table: Table) -> None:
        with pytest.raises(LockedError, match="locked"):
            table.set_row_locked("r1", True).remove_row("r1")

    def test_set_cell(self, table: Table) -> None:
        out = table.set_cell("r2", "price", "95")
        assert out.row("r2").get("price") == "95"
        assert table.row("r2").get("price") == "80"

    def test_set_cell_locked_row(self, table: Table) -> None:
        with pytest.raises(LockedError) as exc_info:
            table.set_row_locked("r2", True).set_cell("r2", "price", "1")
        assert exc_info.value.kind == "row"

    def test_set_cell_locked_column(self, table: Table) -> None:
        with pytest.raises(LockedError) as exc_info:
            table.set_column_locked("from", True).set_cell("r1", "from", "Rome")
        assert exc_info.value.kind == "column"

    def test_set_row_color(self, table: Table) -> None:
        assert table.set_row_color("r1", "#F0F9FF").row("r1").color == "#f0f9ff"

    def test_set_row_color_invalid(self, table: Table) -> None:
        with pytest.raises(ValueError):
            table.set_row_color("r1", "blue")

    def test_index_value_set_and_clear(self, table: Table) -> None:
        out = table.set_index_value("r1", "A-1")
        assert out.row("r1").index_value == "A-1"
        assert out.set_index_value("r1", "").row("r1").index_value is None

    def test_rename_blank_falls_back(self, table: Table) -> None:
        assert table.rename("Holidays").name == "Holidays"
        assert table.rename("  ").name == "My Table"


class TestPresets:
    def test_builtin_presets(self) -> None:
        assert [p.id for p in PRESETS] == ["flight-options", "hotel-comparison"]

    def test_table_from_preset(self) -> None:
        table = table_from_preset(get_preset("hotel-comparison"))
        assert table.name == "Hotel Comparison"
        assert [c.type for c in table.columns] == ["text", "text", "currency", "number"]
        assert len(table.rows) == 1
        assert table.rows[0].cells == {"hotel": "", "location": "", "price": "", "rating": ""}

    def test_unknown_preset(self) -> None:
        with pytest.raises(KeyError):
            get_preset("nope")

    def test_custom_table(self) -> None:
        table = custom_table()
        assert [c.title for c in table.columns] == ["Column 1"]
        assert table.rows[0].cells == {"column-1": ""}
