"""Editor session service shared by the HTTP API and the CLI.

:class:`TableSession` owns the current table, the selected preset and
the theme.  Every user action of the editor is a method here; the server
routes are thin wrappers.  Import and export report failures through
result objects, while editing mistakes (unknown ids, locked targets,
bad input) raise ``KeyError``, :class:`LockedError` or ``ValueError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel

from dataorganizer.config import load_config, resolve_path
from dataorganizer.decoder import ImportResult, import_file
from dataorganizer.encoder import encode_csv, ensure_exportable, export_filename
from dataorganizer.errors import ErrorCode, NoDataToExportError
from dataorganizer.logging import EventType, emit_info, emit_warning
from dataorganizer.model import (
    DEFAULT_TABLE_NAME,
    PRESETS,
    CellValue,
    ColumnType,
    Preset,
    Row,
    Table,
    custom_table,
    get_preset,
    table_from_preset,
)
from dataorganizer.pdf_export import encode_pdf
from dataorganizer.themes import (
    THEMES,
    KeyValueStore,
    MemoryStore,
    Theme,
    YamlFileStore,
    find_theme,
    load_theme,
    save_theme,
)


class ExportResult(BaseModel):
    """Outcome of an export: the artifact bytes or an error."""

    ok: bool
    filename: str | None = None
    media_type: str | None = None
    content: bytes | None = None
    error_code: ErrorCode | None = None
    error: str | None = None


class TableSession:
    """The state behind one editor window."""

    def __init__(
        self,
        store: KeyValueStore | None = None,
        *,
        default_table_name: str = DEFAULT_TABLE_NAME,
        include_index_column: bool = True,
    ) -> None:
        self.store: KeyValueStore = store if store is not None else MemoryStore()
        self.default_table_name = default_table_name
        self.include_index_column = include_index_column
        self.table = Table(name=default_table_name)
        self.selected_preset_id: str | None = None
        self.theme: Theme = load_theme(self.store)

    @classmethod
    def from_directory(cls, directory: Path) -> TableSession:
        """Build a session configured by ``dataorganizer.yaml`` in *directory*."""
        cfg = load_config(directory)
        return cls(
            YamlFileStore(resolve_path(directory, cfg["theme_store"])),
            default_table_name=cfg["default_table_name"],
            include_index_column=bool(cfg["include_index_column"]),
        )

    def snapshot(self) -> dict[str, Any]:
        """JSON-ready view of the whole session."""
        return {
            "table": self.table.model_dump(mode="json"),
            "selected_preset_id": self.selected_preset_id,
            "theme_id": self.theme.id,
        }

    # -- table lifecycle --

    @staticmethod
    def list_presets() -> list[Preset]:
        return list(PRESETS)

    def select_preset(self, preset_id: str) -> Table:
        preset = get_preset(preset_id)
        self.table = table_from_preset(preset)
        self.selected_preset_id = preset.id
        emit_info(EventType.preset_selected, f"Selected preset {preset.name}", {"preset_id": preset.id})
        return self.table

    def create_custom(self) -> Table:
        self.table = custom_table(self.table.name or self.default_table_name)
        self.selected_preset_id = None
        return self.table

    def reset(self) -> Table:
        self.table = Table(name=self.default_table_name)
        self.selected_preset_id = None
        emit_info(EventType.table_reset, "Table reset")
        return self.table

    def rename(self, name: str) -> Table:
        self.table = self.table.rename(name)
        return self.table

    # -- columns --

    def _to_custom_layout(self) -> None:
        # Any structural column edit detaches the table from its preset.
        self.selected_preset_id = None

    def add_column(self, title: str, position: int | None = None, type: ColumnType = "text") -> Table:
        self.table = self.table.add_column(title, position, type)
        self._to_custom_layout()
        return self.table

    def delete_column(self, column_id: str) -> Table:
        self.table = self.table.delete_column(column_id)
        self._to_custom_layout()
        return self.table

    def set_column_locked(self, column_id: str, locked: bool) -> Table:
        self.table = self.table.set_column_locked(column_id, locked)
        return self.table

    # -- rows and cells --

    def add_row(self) -> Row:
        self.table = self.table.add_row()
        return self.table.rows[-1]

    def remove_row(self, row_id: str) -> Table:
        self.table = self.table.remove_row(row_id)
        return self.table

    def set_cell(self, row_id: str, column_id: str, value: CellValue) -> Row:
        self.table = self.table.set_cell(row_id, column_id, value)
        return self.table.row(row_id)

    def set_row_color(self, row_id: str, color: str) -> Row:
        self.table = self.table.set_row_color(row_id, color)
        return self.table.row(row_id)

    def set_row_locked(self, row_id: str, locked: bool) -> Row:
        self.table = self.table.set_row_locked(row_id, locked)
        return self.table.row(row_id)

    def set_index_value(self, row_id: str, index_value: str | None) -> Row:
        self.table = self.table.set_index_value(row_id, index_value)
        return self.table.row(row_id)

    # -- theme --

    @staticmethod
    def list_themes() -> list[Theme]:
        return list(THEMES)

    def set_theme(self, theme_id: str) -> Theme:
        previous = self.theme.id
        self.theme = save_theme(self.store, theme_id)
        if self.theme.id != previous:
            emit_info(EventType.theme_changed, f"Theme set to {self.theme.name}", {"theme_id": self.theme.id})
        return self.theme

    # -- import / export --

    def import_file(
        self,
        data: bytes | str,
        filename: str,
        content_type: str | None = None,
    ) -> ImportResult:
        """Replace the table with an imported one.

        On failure the current table is left as it was.  A theme hint that
        names a known theme is applied.
        """
        result = import_file(data, filename, content_type)
        if not result.ok or result.table is None:
            return result
        if result.table.is_empty:
            return ImportResult.failure(ErrorCode.import_failed, "Failed to extract data from file")

        self.table = result.table
        self.selected_preset_id = None
        if find_theme(result.theme_hint) is not None:
            self.set_theme(result.theme_hint)
        return result

    def _resolve_index(self, include_index_column: bool | None) -> bool:
        return self.include_index_column if include_index_column is None else include_index_column

    def _guard_export(self, fmt: str) -> ExportResult | None:
        try:
            ensure_exportable(self.table)
        except NoDataToExportError as exc:
            emit_warning(
                EventType.export_blocked,
                str(exc),
                {"format": fmt, "table_name": self.table.name},
                error_code=ErrorCode.no_data_to_export.value,
            )
            return ExportResult(ok=False, error_code=ErrorCode.no_data_to_export, error=str(exc))
        return None

    def export_csv(self, include_index_column: bool | None = None) -> ExportResult:
        blocked = self._guard_export("csv")
        if blocked is not None:
            return blocked
        text = encode_csv(self.table, self._resolve_index(include_index_column))
        filename = export_filename(self.table.name, "csv")
        emit_info(EventType.export_csv, f"CSV exported as {filename}", {"rows": len(self.table.rows)})
        return ExportResult(
            ok=True,
            filename=filename,
            media_type="text/csv;charset=utf-8",
            content=text.encode("utf-8"),
        )

    def export_pdf(self, include_index_column: bool | None = None) -> ExportResult:
        blocked = self._guard_export("pdf")
        if blocked is not None:
            return blocked
        pdf = encode_pdf(self.table, self._resolve_index(include_index_column))
        filename = export_filename(self.table.name, "pdf")
        emit_info(EventType.export_pdf, f"PDF exported as {filename}", {"rows": len(self.table.rows)})
        return ExportResult(ok=True, filename=filename, media_type="application/pdf", content=pdf)
