"""Table model: columns, rows, presets and structural edits.

Every edit returns a new :class:`Table`; the receiver is never mutated.
Rows always carry a cell for every current column, so deleting a column
drops its data from every row and adding one inserts an empty cell.
"""

from __future__ import annotations

import math
import re
import uuid
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from dataorganizer.errors import LockedError

ColumnType = Literal["text", "number", "currency"]

# Text, Number or Empty
CellValue = str | float | None

DEFAULT_ROW_COLOR = "#ffffff"
DEFAULT_TABLE_NAME = "My Table"

_HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")
_WHITESPACE_RE = re.compile(r"\s+")
_NON_SLUG_RE = re.compile(r"[^a-z0-9-]")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def slugify(title: str, index: int | None = None) -> str:
    """Derive a URL/CSS-safe column id from *title*.

    Lowercases, collapses whitespace to ``-`` and strips anything outside
    ``[a-z0-9-]``.  Falls back to ``column-<index>`` when nothing is left.
    """
    slug = _NON_SLUG_RE.sub("", _WHITESPACE_RE.sub("-", title.lower()))
    if not slug and index is not None:
        return f"column-{index}"
    return slug


def unique_id(base: str, taken: set[str] | list[str]) -> str:
    """Return *base*, or *base* with a ``-2``, ``-3``... suffix if taken."""
    if base not in taken:
        return base
    n = 2
    while f"{base}-{n}" in taken:
        n += 1
    return f"{base}-{n}"


def new_row_id() -> str:
    return f"row-{uuid.uuid4().hex[:12]}"


def number_to_str(value: float) -> str:
    """Render a float the way a browser prints a number.

    Uses the shortest round-trip digits (``repr``) and lays them out
    positionally for 1e-6 <= |x| < 1e21 (``12.5``, ``9``, ``0.00005``,
    ``12345678901234567000``), in exponent form (``1e+21``, ``1e-7``)
    otherwise.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    _, digit_tuple, exponent = Decimal(repr(abs(value))).as_tuple()
    digits = "".join(map(str, digit_tuple))
    stripped = digits.rstrip("0")
    exponent += len(digits) - len(stripped)
    digits = stripped
    k = len(digits)
    # value == 0.<digits> * 10**n
    n = k + exponent
    if k <= n <= 21:
        return sign + digits + "0" * (n - k)
    if 0 < n <= 21:
        return sign + digits[:n] + "." + digits[n:]
    if -6 < n <= 0:
        return sign + "0." + "0" * -n + digits
    e = n - 1
    mantissa = digits if k == 1 else digits[0] + "." + digits[1:]
    return f"{sign}{mantissa}e{'+' if e >= 0 else '-'}{abs(e)}"


def cell_text(value: CellValue) -> str:
    """Display string for a cell; Empty reads as ``""``."""
    if value is None:
        return ""
    if isinstance(value, float):
        return number_to_str(value)
    return str(value)


def is_hex_color(value: str) -> bool:
    return bool(_HEX_COLOR_RE.match(value))


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class Column(BaseModel):
    id: str
    title: str
    type: ColumnType = "text"
    locked: bool = False


class Row(BaseModel):
    id: str
    cells: dict[str, CellValue] = Field(default_factory=dict)
    color: str = DEFAULT_ROW_COLOR
    locked: bool = False
    index_value: str | None = None

    def get(self, column_id: str) -> str:
        """Return the display string of a cell (absent cells read as empty)."""
        return cell_text(self.cells.get(column_id))


class Table(BaseModel):
    """An ordered set of typed columns and the rows that fill them."""

    name: str = DEFAULT_TABLE_NAME
    columns: list[Column] = Field(default_factory=list)
    rows: list[Row] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique_ids(self) -> Table:
        col_ids = [c.id for c in self.columns]
        if len(col_ids) != len(set(col_ids)):
            raise ValueError(f"Duplicate column ids: {col_ids}")
        row_ids = [r.id for r in self.rows]
        if len(row_ids) != len(set(row_ids)):
            raise ValueError("Duplicate row ids")
        return self

    # -- lookups --

    @property
    def column_ids(self) -> list[str]:
        return [c.id for c in self.columns]

    @property
    def is_empty(self) -> bool:
        return not self.columns or not self.rows

    def column(self, column_id: str) -> Column:
        for col in self.columns:
            if col.id == column_id:
                return col
        raise KeyError(f"Unknown column: {column_id!r}")

    def row(self, row_id: str) -> Row:
        for row in self.rows:
            if row.id == row_id:
                return row
        raise KeyError(f"Unknown row: {row_id!r}")

    def _row_index(self, row_id: str) -> int:
        for i, row in enumerate(self.rows):
            if row.id == row_id:
                return i
        raise KeyError(f"Unknown row: {row_id!r}")

    def _column_index(self, column_id: str) -> int:
        for i, col in enumerate(self.columns):
            if col.id == column_id:
                return i
        raise KeyError(f"Unknown column: {column_id!r}")

    # -- structural edits --

    def rename(self, name: str) -> Table:
        """Rename the table; a blank name falls back to the default."""
        if not name.strip():
            name = DEFAULT_TABLE_NAME
        return self.model_copy(update={"name": name})

    def add_column(
        self,
        title: str,
        position: int | None = None,
        type: ColumnType = "text",
    ) -> Table:
        """Insert a new column at *position* (default: end).

        Raises:
            ValueError: If *title* is blank.
        """
        if not title.strip():
            raise ValueError("Column title cannot be empty")
        out = self.model_copy(deep=True)
        base = slugify(title, len(out.columns) + 1)
        col = Column(id=unique_id(base, out.column_ids), title=title, type=type)
        if position is None or position > len(out.columns):
            position = len(out.columns)
        out.columns.insert(max(position, 0), col)
        for row in out.rows:
            row.cells[col.id] = ""
        return out

    def delete_column(self, column_id: str) -> Table:
        if self.column(column_id).locked:
            raise LockedError("column", column_id)
        out = self.model_copy(deep=True)
        out.columns = [c for c in out.columns if c.id != column_id]
        for row in out.rows:
            row.cells.pop(column_id, None)
        return out

    def set_column_locked(self, column_id: str, locked: bool) -> Table:
        out = self.model_copy(deep=True)
        out.columns[out._column_index(column_id)].locked = locked
        return out

    def add_row(self, row_id: str | None = None) -> Table:
        """Append an empty row with the default color."""
        out = self.model_copy(deep=True)
        out.rows.append(
            Row(
                id=unique_id(row_id or new_row_id(), [r.id for r in out.rows]),
                cells={cid: "" for cid in out.column_ids},
            )
        )
        return out

    def remove_row(self, row_id: str) -> Table:
        if self.row(row_id).locked:
            raise LockedError("row", row_id)
        out = self.model_copy(deep=True)
        out.rows = [r for r in out.rows if r.id != row_id]
        return out

    def set_cell(self, row_id: str, column_id: str, value: CellValue) -> Table:
        """Set one cell value.

        Raises:
            LockedError: If the row or the column is locked.
            KeyError: If either id is unknown.
        """
        if self.column(column_id).locked:
            raise LockedError("column", column_id)
        if self.row(row_id).locked:
            raise LockedError("row", row_id)
        out = self.model_copy(deep=True)
        out.rows[out._row_index(row_id)].cells[column_id] = value
        return out

    def set_row_color(self, row_id: str, color: str) -> Table:
        if not is_hex_color(color):
            raise ValueError(f"Invalid row color: {color!r} (expected #rrggbb)")
        out = self.model_copy(deep=True)
        out.rows[out._row_index(row_id)].color = color.lower()
        return out

    def set_row_locked(self, row_id: str, locked: bool) -> Table:
        out = self.model_copy(deep=True)
        out.rows[out._row_index(row_id)].locked = locked
        return out

    def set_index_value(self, row_id: str, index_value: str | None) -> Table:
        """Override (or clear, with ``None``/``""``) the displayed row number."""
        out = self.model_copy(deep=True)
        out.rows[out._row_index(row_id)].index_value = index_value or None
        return out


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------


class Preset(BaseModel):
    id: str
    name: str
    columns: list[Column]


PRESETS: list[Preset] = [
    Preset(
        id="flight-options",
        name="Flight Options",
        columns=[
            Column(id="from", title="From"),
            Column(id="to", title="To"),
            Column(id="price", title="Price", type="currency"),
        ],
    ),
    Preset(
        id="hotel-comparison",
        name="Hotel Comparison",
        columns=[
            Column(id="hotel", title="Hotel Name"),
            Column(id="location", title="Location"),
            Column(id="price", title="Price/Night", type="currency"),
            Column(id="rating", title="Rating", type="number"),
        ],
    ),
]


def get_preset(preset_id: str) -> Preset:
    for preset in PRESETS:
        if preset.id == preset_id:
            return preset
    raise KeyError(f"Unknown preset: {preset_id!r}")


def table_from_preset(preset: Preset) -> Table:
    """A fresh table with the preset's columns and one empty row."""
    table = Table(name=preset.name, columns=[c.model_copy() for c in preset.columns])
    return table.add_row()


def custom_table(name: str = DEFAULT_TABLE_NAME) -> Table:
    """A fresh table with a single text column and one empty row."""
    table = Table(name=name, columns=[Column(id="column-1", title="Column 1")])
    return table.add_row()
