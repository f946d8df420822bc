"""Table decoder -- turn a parsed CSV grid into a :class:`Table`.

The header row defines column titles.  Three headers have reserved
meaning and never become data columns:

- ``#`` in the first position -- the index column; its values become each
  row's ``index_value``.
- ``_color`` -- per-row hex color (blank means ``#ffffff``).
- ``_theme`` -- a theme hint taken from the first data row that has one.

Column types are inferred from header titles; numeric cells are
normalized.  Decoding never raises: every failure is reported through
:class:`ImportResult`.
"""

from __future__ import annotations

import re
from pathlib import PurePath
from typing import Any

from pydantic import BaseModel

from dataorganizer.csv_parser import parse
from dataorganizer.errors import ErrorCode
from dataorganizer.logging import EventType, emit_error, emit_info
from dataorganizer.model import (
    DEFAULT_ROW_COLOR,
    Column,
    ColumnType,
    Row,
    Table,
    number_to_str,
    slugify,
    unique_id,
)

INDEX_HEADER = "#"
COLOR_HEADER = "_color"
THEME_HEADER = "_theme"

DEFAULT_IMPORT_NAME = "Imported Table"
FAILED_IMPORT_NAME = "Import Failed"

_CURRENCY_HINTS = ("price", "cost", "$")
_NUMBER_HINTS = ("rating", "count", "number")

_NON_NUMERIC_RE = re.compile(r"[^0-9.\-]")
# Longest leading decimal literal, the way a browser's parseFloat reads it.
NUMERIC_LITERAL = r"-?(?:\d+\.?\d*|\.\d+)"
_FLOAT_PREFIX_RE = re.compile("^" + NUMERIC_LITERAL)
_CSV_SUFFIX_RE = re.compile(r"\.csv$", re.IGNORECASE)

CSV_CONTENT_TYPES = ("text/csv",)


class ImportResult(BaseModel):
    """Outcome of an import: either a table or an error, never both."""

    ok: bool
    table: Table | None = None
    theme_hint: str | None = None
    error_code: ErrorCode | None = None
    error: str | None = None

    @property
    def table_name(self) -> str:
        return self.table.name if self.table is not None else FAILED_IMPORT_NAME

    @classmethod
    def failure(cls, code: ErrorCode, message: str) -> ImportResult:
        return cls(ok=False, error_code=code, error=message)


# ---------------------------------------------------------------------------
# Inference and coercion
# ---------------------------------------------------------------------------


def infer_column_type(title: str) -> ColumnType:
    """Infer a column's type from its header (first match wins)."""
    lowered = title.lower()
    if any(hint in lowered for hint in _CURRENCY_HINTS):
        return "currency"
    if any(hint in lowered for hint in _NUMBER_HINTS):
        return "number"
    return "text"


def parse_number(raw: str) -> float | None:
    """Parse the numeric part of *raw*, or ``None`` if there is none.

    Everything except digits, ``.`` and ``-`` is discarded first, so
    ``"$1,299.00"`` reads as ``1299.0``.
    """
    m = _FLOAT_PREFIX_RE.match(_NON_NUMERIC_RE.sub("", raw))
    if m is None:
        return None
    return float(m.group(0))


def coerce_value(raw: str, column_type: ColumnType) -> str:
    """Normalize a numeric cell; anything unparseable is kept as-is."""
    if column_type == "text":
        return raw
    num = parse_number(raw)
    if num is None:
        return raw
    return number_to_str(num)


def table_name_from_source(source_name: str) -> str:
    name = _CSV_SUFFIX_RE.sub("", PurePath(source_name).name).replace("_", " ")
    return name or DEFAULT_IMPORT_NAME


def _cell(row: list[str], index: int) -> str:
    return row[index] if 0 <= index < len(row) else ""


# ---------------------------------------------------------------------------
# Decode
# ---------------------------------------------------------------------------


def _decode(grid: list[list[str]], source_name: str) -> ImportResult:
    headers = grid[0]
    has_index = bool(headers) and headers[0] == INDEX_HEADER
    color_idx = headers.index(COLOR_HEADER) if COLOR_HEADER in headers else -1
    theme_idx = headers.index(THEME_HEADER) if THEME_HEADER in headers else -1

    # (source position, Column) for every ordinary header
    layout: list[tuple[int, Column]] = []
    taken: list[str] = []
    for pos, title in enumerate(headers):
        if (has_index and pos == 0) or title in (COLOR_HEADER, THEME_HEADER):
            continue
        col_id = unique_id(slugify(title, len(layout)), taken)
        taken.append(col_id)
        layout.append((pos, Column(id=col_id, title=title, type=infer_column_type(title))))

    rows: list[Row] = []
    theme_hint: str | None = None
    for i, line in enumerate(grid[1:]):
        row = Row(
            id=f"row-{i}",
            cells={col.id: coerce_value(_cell(line, pos), col.type) for pos, col in layout},
        )
        if has_index:
            row.index_value = _cell(line, 0) or None
        if color_idx >= 0:
            row.color = _cell(line, color_idx).replace('"', "") or DEFAULT_ROW_COLOR
        if theme_idx >= 0 and not theme_hint:
            theme_hint = _cell(line, theme_idx).replace('"', "") or None
        rows.append(row)

    table = Table(
        name=table_name_from_source(source_name),
        columns=[col for _, col in layout],
        rows=rows,
    )
    return ImportResult(ok=True, table=table, theme_hint=theme_hint)


def decode(grid: list[list[str]], source_name: str) -> ImportResult:
    """Decode a parsed grid into a table.

    Args:
        grid: Rows of string cells as produced by :func:`parse`.
        source_name: Original file name, used to derive the table name.

    Returns:
        A successful :class:`ImportResult` with the table (and optional
        theme hint), or a failed one with ``insufficient_data`` or
        ``import_failed``.
    """
    if len(grid) < 2:
        return ImportResult.failure(
            ErrorCode.insufficient_data,
            "CSV file must contain at least a header row and one data row",
        )
    try:
        return _decode(grid, source_name)
    except Exception as exc:
        return ImportResult.failure(ErrorCode.import_failed, str(exc) or type(exc).__name__)


def is_csv_upload(filename: str, content_type: str | None = None) -> bool:
    """Whether an upload is acceptable as CSV (by content type or name)."""
    if content_type and content_type.split(";")[0].strip().lower() in CSV_CONTENT_TYPES:
        return True
    return filename.lower().endswith(".csv")


def import_file(
    data: bytes | str,
    filename: str,
    content_type: str | None = None,
) -> ImportResult:
    """Import an uploaded file: format check, parse, decode.

    Emits ``import_*`` events.  Never raises.
    """
    context: dict[str, Any] = {"filename": filename}
    emit_info(EventType.import_started, f"Importing {filename}", context)

    if not is_csv_upload(filename, content_type):
        result = ImportResult.failure(
            ErrorCode.unsupported_format,
            "Please upload a CSV file. Only CSV imports are supported.",
        )
    else:
        try:
            text = data.decode("utf-8-sig") if isinstance(data, bytes) else data
        except UnicodeDecodeError as exc:
            result = ImportResult.failure(ErrorCode.import_failed, str(exc))
        else:
            result = decode(parse(text), filename)

    if result.ok and result.table is not None:
        emit_info(
            EventType.import_completed,
            f"Imported {len(result.table.rows)} rows from {filename}",
            {
                **context,
                "columns": len(result.table.columns),
                "rows": len(result.table.rows),
                "theme_hint": result.theme_hint,
            },
        )
    else:
        emit_error(
            EventType.import_failed,
            result.error or "Import failed",
            context,
            error_code=result.error_code.value if result.error_code else None,
        )
    return result
