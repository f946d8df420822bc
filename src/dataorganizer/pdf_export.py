"""Table encoder -- PDF mode.

Renders a title, a "Generated on" line and a grid table with the same
header/row composition as CSV export.  Each row is filled with its own
color lightened 90% toward white; rows without an explicit color are
banded light gray on alternate lines.  An explicit row color always wins
over banding.
"""

from __future__ import annotations

import io
from datetime import datetime

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer
from reportlab.platypus import Table as PdfTable
from reportlab.platypus import TableStyle

from dataorganizer.encoder import body_cells, header_cells
from dataorganizer.model import DEFAULT_ROW_COLOR, Table

RGB = tuple[float, float, float]

HEADER_FILL: RGB = (66, 133, 244)
BAND_FILL: RGB = (240, 240, 240)
WHITE: RGB = (255, 255, 255)
LIGHTEN_FACTOR = 0.9


def hex_to_rgb(hex_color: str | None) -> RGB:
    """Convert ``#rrggbb`` to an RGB triple.

    Absent or default-white colors map to pure white; channels that do
    not parse fall back to 255.
    """
    if not hex_color or hex_color.lower() == DEFAULT_ROW_COLOR:
        return WHITE
    h = hex_color.replace("#", "")
    channels = []
    for start in (0, 2, 4):
        try:
            channels.append(int(h[start:start + 2], 16))
        except ValueError:
            channels.append(255)
    return (channels[0], channels[1], channels[2])


def lighten_color(rgb: RGB, factor: float = LIGHTEN_FACTOR) -> RGB:
    """Blend *rgb* toward white by *factor* (0 = unchanged, 1 = white)."""
    r, g, b = (min(255, c + (255 - c) * factor) for c in rgb)
    return (r, g, b)


def has_explicit_color(color: str | None) -> bool:
    return bool(color) and color.lower() != DEFAULT_ROW_COLOR


def row_fills(table: Table) -> list[RGB | None]:
    """Fill color per body row; ``None`` means no fill (plain white)."""
    fills: list[RGB | None] = []
    for position, row in enumerate(table.rows):
        if has_explicit_color(row.color):
            fills.append(lighten_color(hex_to_rgb(row.color)))
        elif position % 2 == 1:
            fills.append(BAND_FILL)
        else:
            fills.append(None)
    return fills


def _rl_color(rgb: RGB) -> colors.Color:
    return colors.Color(rgb[0] / 255, rgb[1] / 255, rgb[2] / 255)


def _table_style(table: Table) -> TableStyle:
    commands: list[tuple] = [
        ("BACKGROUND", (0, 0), (-1, 0), _rl_color(HEADER_FILL)),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.Color(0.8, 0.8, 0.8)),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]
    for i, fill in enumerate(row_fills(table), start=1):
        if fill is not None:
            commands.append(("BACKGROUND", (0, i), (-1, i), _rl_color(fill)))
    return TableStyle(commands)


def encode_pdf(
    table: Table,
    include_index_column: bool = True,
    generated_at: datetime | None = None,
) -> bytes:
    """Render *table* as a PDF report.

    Args:
        table: Table to render.
        include_index_column: Prepend the ``#`` column.
        generated_at: Timestamp for the "Generated on" line (default: now).

    Returns:
        The PDF document as bytes.
    """
    generated_at = generated_at or datetime.now()
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=14 * mm,
        rightMargin=14 * mm,
        topMargin=14 * mm,
        bottomMargin=14 * mm,
        title=table.name,
        subject=f"Exported data from DataOrganizer: {table.name}",
        creator="DataOrganizer",
    )
    styles = getSampleStyleSheet()
    data = [header_cells(table, include_index_column)]
    data.extend(body_cells(table, include_index_column))
    grid = PdfTable(data, repeatRows=1)
    grid.setStyle(_table_style(table))

    story = [
        Paragraph(_escape(table.name), styles["Title"]),
        Paragraph(
            f"Generated on: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}",
            styles["Normal"],
        ),
        Spacer(1, 6 * mm),
        grid,
    ]
    doc.build(story)
    return buf.getvalue()


def _escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
