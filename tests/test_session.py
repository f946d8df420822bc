"""Tests for the editor session service."""

from __future__ import annotations

from pathlib import Path

import pytest

from dataorganizer.decoder import ImportResult
from dataorganizer.errors import ErrorCode, LockedError
from dataorganizer.logging import get_sink, set_log_dir
from dataorganizer.themes import THEME_KEY, MemoryStore
from dataorganizer.ui.service import TableSession

HOTELS_CSV = (
    '"#","Hotel Name","Price/Night","Rating","_color","_theme"\n'
    '"1","Seaside","$120.00","4.5","#f0f9ff","purple"\n'
    '"2","Downtown","$95","3",""\n'
)


@pytest.fixture
def session() -> TableSession:
    return TableSession(MemoryStore())


class TestLifecycle:
    def test_starts_empty(self, session: TableSession) -> None:
        assert session.table.name == "My Table"
        assert session.table.is_empty
        assert session.theme.id == "default"

    def test_select_preset(self, session: TableSession) -> None:
        table = session.select_preset("flight-options")
        assert table.name == "Flight Options"
        assert session.selected_preset_id == "flight-options"
        assert len(table.rows) == 1

    def test_column_edit_switches_to_custom(self, session: TableSession) -> None:
        session.select_preset("flight-options")
        session.add_column("Airline", position=2)
        assert session.selected_preset_id is None
        assert session.table.column_ids == ["from", "to", "airline", "price"]

    def test_reset(self, session: TableSession) -> None:
        session.select_preset("hotel-comparison")
        session.reset()
        assert session.table.is_empty
        assert session.table.name == "My Table"
        assert session.selected_preset_id is None

    def test_create_custom(self, session: TableSession) -> None:
        table = session.create_custom()
        assert [c.id for c in table.columns] == ["column-1"]
        assert len(table.rows) == 1

    def test_row_and_cell_edits(self, session: TableSession) -> None:
        session.select_preset("flight-options")
        row = session.add_row()
        session.set_cell(row.id, "from", "Lisbon")
        session.set_row_color(row.id, "#fef2f2")
        session.set_index_value(row.id, "X")
        updated = session.table.row(row.id)
        assert updated.get("from") == "Lisbon"
        assert updated.color == "#fef2f2"
        assert updated.index_value == "X"

    def test_locked_row_rejects_edits(self, session: TableSession) -> None:
        session.select_preset("flight-options")
        row_id = session.table.rows[0].id
        session.set_row_locked(row_id, True)
        with pytest.raises(LockedError):
            session.set_cell(row_id, "to", "Rome")
        with pytest.raises(LockedError):
            session.remove_row(row_id)

    def test_snapshot(self, session: TableSession) -> None:
        session.select_preset("flight-options")
        snap = session.snapshot()
        assert snap["selected_preset_id"] == "flight-options"
        assert snap["table"]["name"] == "Flight Options"
        assert snap["theme_id"] == "default"


class TestImport:
    def test_import_replaces_table(self, session: TableSession) -> None:
        session.select_preset("flight-options")
        result = session.import_file(HOTELS_CSV.encode(), "hotel_list.csv")
        assert result.ok is True
        table = session.table
        assert table.name == "hotel list"
        assert [c.type for c in table.columns] == ["text", "currency", "number"]
        assert table.rows[0].color == "#f0f9ff"
        assert table.rows[1].get("pricenight") == "95"
        assert session.selected_preset_id is None

    def test_known_theme_hint_applied(self, session: TableSession) -> None:
        result = session.import_file(HOTELS_CSV.encode(), "h.csv")
        assert result.theme_hint == "purple"
        assert session.theme.id == "purple"
        assert session.store.get(THEME_KEY) == "purple"

    def test_unknown_theme_hint_ignored(self, session: TableSession) -> None:
        session.import_file(b"Name,_theme\nA,neon\n", "h.csv")
        assert session.theme.id == "default"

    def test_failure_keeps_current_table(self, session: TableSession) -> None:
        session.select_preset("flight-options")
        result = session.import_file(b"Name,Price\n", "only_header.csv")
        assert result.ok is False
        assert result.error_code == ErrorCode.insufficient_data
        assert session.table.name == "Flight Options"

    def test_import_without_data_columns_fails(self, session: TableSession) -> None:
        result = session.import_file(b"#,_color\n1,#ffffff\n", "x.csv")
        assert result.ok is False
        assert result.error_code == ErrorCode.import_failed

    def test_result_without_table_leaves_session_alone(self, session: TableSession, monkeypatch) -> None:
        monkeypatch.setattr("dataorganizer.ui.service.import_file", lambda *args: ImportResult(ok=True))
        session.select_preset("flight-options")
        result = session.import_file(b"Name\nA\n", "x.csv")
        assert result.table is None
        assert session.table.name == "Flight Options"

    def test_import_events_logged(self, session: TableSession, tmp_path: Path) -> None:
        set_log_dir(tmp_path / "logs")
        session.import_file(HOTELS_CSV.encode(), "h.csv")
        session.import_file(b"x", "notes.txt")
        types = [e["event_type"] for e in get_sink().read_events()]
        assert types == [
            "import_failed",
            "import_started",
            "theme_changed",
            "import_completed",
            "import_started",
        ]


class TestExport:
    def test_export_csv(self, session: TableSession) -> None:
        session.import_file(HOTELS_CSV.encode(), "Hotel_List.csv")
        result = session.export_csv()
        assert result.ok is True
        assert result.filename == "hotel-list.csv"
        text = result.content.decode()
        assert text.splitlines()[0] == '"#","Hotel Name","Price/Night","Rating"'
        assert '"$120.00"' in text

    def test_export_respects_index_setting(self) -> None:
        session = TableSession(MemoryStore(), include_index_column=False)
        session.import_file(HOTELS_CSV.encode(), "h.csv")
        assert not session.export_csv().content.startswith(b'"#"')
        assert session.export_csv(include_index_column=True).content.startswith(b'"#"')

    def test_export_pdf(self, session: TableSession) -> None:
        session.select_preset("hotel-comparison")
        result = session.export_pdf()
        assert result.ok is True
        assert result.filename == "hotel-comparison.pdf"
        assert result.media_type == "application/pdf"
        assert result.content.startswith(b"%PDF-")

    def test_export_empty_blocked(self, session: TableSession) -> None:
        for result in (session.export_csv(), session.export_pdf()):
            assert result.ok is False
            assert result.error_code == ErrorCode.no_data_to_export
            assert result.content is None


class TestTheme:
    def test_theme_persisted_in_store(self) -> None:
        store = MemoryStore()
        TableSession(store).set_theme("nature")
        assert TableSession(store).theme.id == "nature"

    def test_unknown_theme_falls_back_to_default(self, session: TableSession) -> None:
        session.set_theme("dark")
        assert session.set_theme("nope").id == "default"

    def test_from_directory_uses_config(self, tmp_path: Path) -> None:
        (tmp_path / "dataorganizer.yaml").write_text(
            "default_table_name: Scratch\ninclude_index_column: false\ntheme_store: prefs.yaml\n"
        )
        session = TableSession.from_directory(tmp_path)
        assert session.table.name == "Scratch"
        assert session.include_index_column is False
        session.set_theme("dark")
        assert "dark" in (tmp_path / "prefs.yaml").read_text()
