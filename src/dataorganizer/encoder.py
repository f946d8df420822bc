"""Table encoder -- CSV mode, plus the header/row composition shared with PDF."""

from __future__ import annotations

import re

from dataorganizer.decoder import INDEX_HEADER, NUMERIC_LITERAL
from dataorganizer.errors import NoDataToExportError
from dataorganizer.model import Column, Row, Table, cell_text

_WHITESPACE_RE = re.compile(r"\s+")
# A normalized number as the decoder stores it, e.g. "12.5", "-3", "1e+21".
_NUMBER_RE = re.compile(NUMERIC_LITERAL + r"(?:e[+-]?\d+)?")


def ensure_exportable(table: Table) -> None:
    """Raise :class:`NoDataToExportError` for a table without columns or rows."""
    if table.is_empty:
        raise NoDataToExportError()


def export_filename(table_name: str, ext: str) -> str:
    """``"My Table"`` -> ``"my-table.csv"``."""
    return f"{_WHITESPACE_RE.sub('-', table_name).lower()}.{ext.lstrip('.')}"


def format_cell(value: str | float | None, column: Column) -> str:
    """Format one cell for export.

    Currency cells with a numeric value render as ``$`` plus two decimals;
    currency text that is not a number (``TBD``, ``nan``, ``1_000``) is
    passed through unchanged.
    """
    text = cell_text(value)
    if column.type != "currency" or not _NUMBER_RE.fullmatch(text.strip()):
        return text
    return f"${float(text):.2f}"


def index_label(row: Row, position: int) -> str:
    """The index-column cell: the row's override, else its 1-based position."""
    return row.index_value or str(position + 1)


def header_cells(table: Table, include_index_column: bool = True) -> list[str]:
    headers = [INDEX_HEADER] if include_index_column else []
    return headers + [col.title for col in table.columns]


def body_cells(table: Table, include_index_column: bool = True) -> list[list[str]]:
    """Formatted data rows in table order, one cell per column."""
    body: list[list[str]] = []
    for position, row in enumerate(table.rows):
        cells = [index_label(row, position)] if include_index_column else []
        cells.extend(format_cell(row.cells.get(col.id), col) for col in table.columns)
        body.append(cells)
    return body


def quote_field(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def encode_csv(table: Table, include_index_column: bool = True) -> str:
    """Serialize *table* as CSV text.

    Every field is double-quoted with internal quotes doubled; rows are
    joined by ``\\n`` with no trailing newline.  Row colors and theme are
    not written.
    """
    lines = [header_cells(table, include_index_column)]
    lines.extend(body_cells(table, include_index_column))
    return "\n".join(",".join(quote_field(cell) for cell in line) for line in lines)
