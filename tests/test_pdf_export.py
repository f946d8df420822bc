"""Tests for PDF export: color handling and document generation."""

from __future__ import annotations

import io
from datetime import datetime

import pytest

from dataorganizer.model import Column, Row, Table
from dataorganizer.pdf_export import (
    BAND_FILL,
    encode_pdf,
    hex_to_rgb,
    lighten_color,
    row_fills,
)


class TestColors:
    def test_hex_to_rgb(self) -> None:
        assert hex_to_rgb("#ff0000") == (255, 0, 0)
        assert hex_to_rgb("f0f9ff") == (240, 249, 255)

    def test_white_or_missing_is_white(self) -> None:
        assert hex_to_rgb(None) == (255, 255, 255)
        assert hex_to_rgb("") == (255, 255, 255)
        assert hex_to_rgb("#FFFFFF") == (255, 255, 255)

    def test_unparseable_channels_fall_back_to_255(self) -> None:
        assert hex_to_rgb("#zz00") == (255, 0, 255)

    def test_lighten_red(self) -> None:
        r, g, b = lighten_color(hex_to_rgb("#ff0000"), 0.9)
        assert r == 255
        assert g == pytest.approx(229.5)
        assert b == pytest.approx(229.5)
        assert round(g) == 230

    def test_lighten_never_exceeds_255(self) -> None:
        assert lighten_color((255, 255, 255), 1.5) == (255, 255, 255)


class TestRowFills:
    def test_explicit_color_wins_over_banding(self) -> None:
        table = Table(
            columns=[Column(id="a", title="A")],
            rows=[
                Row(id="r0"),
                Row(id="r1", color="#ff0000"),
                Row(id="r2"),
                Row(id="r3"),
            ],
        )
        fills = row_fills(table)
        assert fills[0] is None
        assert fills[1] == pytest.approx((255, 229.5, 229.5))
        assert fills[2] is None
        assert fills[3] == BAND_FILL


class TestEncodePdf:
    def test_produces_pdf_document(self) -> None:
        table = Table(
            name="Flight Options",
            columns=[Column(id="to", title="To"), Column(id="price", title="Price", type="currency")],
            rows=[
                Row(id="r1", cells={"to": "Oslo", "price": "99"}),
                Row(id="r2", cells={"to": "<Rome & Milan>", "price": ""}, color="#fef2f2"),
            ],
        )
        pdf = encode_pdf(table, generated_at=datetime(2024, 1, 2, 3, 4, 5))
        assert pdf.startswith(b"%PDF-")
        assert pdf.rstrip().endswith(b"%%EOF")

    def test_without_index_column(self) -> None:
        table = Table(columns=[Column(id="a", title="A")], rows=[Row(id="r", cells={"a": "x"})])
        assert encode_pdf(table, include_index_column=False).startswith(b"%PDF-")

    def test_text_and_metadata(self) -> None:
        pypdf = pytest.importorskip("pypdf")
        table = Table(
            name="Flight Options",
            columns=[Column(id="to", title="To"), Column(id="price", title="Price", type="currency")],
            rows=[Row(id="r1", cells={"to": "Oslo", "price": "99"})],
        )
        pdf = encode_pdf(table, generated_at=datetime(2024, 1, 2, 3, 4, 5))
        reader = pypdf.PdfReader(io.BytesIO(pdf))
        text = reader.pages[0].extract_text()
        assert "Flight Options" in text
        assert "Generated on: 2024-01-02 03:04:05" in text
        assert "$99.00" in text
        assert reader.metadata.title == "Flight Options"
        assert reader.metadata.subject == "Exported data from DataOrganizer: Flight Options"
