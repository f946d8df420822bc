"""Best-effort CSV parser.

Splits text into physical lines and scans each line with an "inside
quotes" flag.  Commas separate fields only outside quotes; quote
characters are consumed rather than copied.  Inside a quoted field a
doubled ``""`` yields one literal quote, mirroring the escaping the
encoder writes.

The parser never raises: an unterminated quote simply runs to the end of
the line.
"""

from __future__ import annotations


def parse_line(line: str) -> list[str]:
    """Split a single physical line into fields."""
    fields: list[str] = []
    current: list[str] = []
    in_quote = False
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch == '"':
            if in_quote and i + 1 < n and line[i + 1] == '"':
                current.append('"')
                i += 2
                continue
            in_quote = not in_quote
        elif ch == "," and not in_quote:
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    fields.append("".join(current))
    return fields


def parse(text: str) -> list[list[str]]:
    """Parse CSV *text* into a grid of string cells.

    Rows whose every field is blank are dropped.  Rows may differ in
    width; callers must not assume a rectangular grid.
    """
    grid: list[list[str]] = []
    for line in text.split("\n"):
        if line.endswith("\r"):
            line = line[:-1]
        row = parse_line(line)
        if any(cell.strip() for cell in row):
            grid.append(row)
    return grid
