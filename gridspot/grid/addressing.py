"""
Letter-number cell addressing.

Columns use spreadsheet-style bijective base-26 names (A..Z, AA, AB, ...),
rows are 1-based decimal numbers, so the cell in the second column and the
seventh row is ``"B7"``. Indices handed out by this module are zero-based.
"""

from __future__ import annotations

import re
from typing import Any, NamedTuple, Optional


_CELL_RE = re.compile(r"([A-Za-z]+)([0-9]+)")


class CellAddress(NamedTuple):
    """Zero-based (row, col) of a label validated against a grid."""

    row: int
    col: int


def number_to_letters(n: int) -> str:
    """
    Convert a 1-based column number to its letter name.

    Args:
        n: Column number, >= 1.

    Returns:
        "A" for 1, "Z" for 26, "AA" for 27, and so on.

    Raises:
        ValueError: If ``n`` is below 1.
    """
    num = int(n)
    if num < 1:
        raise ValueError(f"column number must be >= 1, got {n!r}")
    out = []
    while num > 0:
        num, rem = divmod(num - 1, 26)
        out.append(chr(ord("A") + rem))
    return "".join(reversed(out))


def letters_to_number(letters: str) -> int:
    """
    Convert a column name back to its 1-based number (case-insensitive).

    Raises:
        ValueError: If ``letters`` is empty or contains non A-Z characters.
    """
    s = str(letters or "").upper()
    if not s or not s.isascii() or not s.isalpha():
        raise ValueError(f"invalid column letters: {letters!r}")
    n = 0
    for ch in s:
        n = n * 26 + (ord(ch) - ord("A") + 1)
    return n


def format_cell_label(row: int, col: int) -> str:
    """Label of the zero-based cell ``(row, col)``, e.g. ``(6, 1) -> "B7"``."""
    return f"{number_to_letters(int(col) + 1)}{int(row) + 1}"


def parse_cell_label(label: Any, rows: int, cols: int) -> Optional[CellAddress]:
    """
    Parse a cell label into a zero-based address bounded by a specific grid.

    Args:
        label: Candidate label such as ``"B7"`` or ``"b7"``.
        rows: Row count of the grid the label refers to.
        cols: Column count of the grid the label refers to.

    Returns:
        The address, or None when the label is malformed or outside
        ``[0, rows) x [0, cols)``.
    """
    if not isinstance(label, str):
        return None
    m = _CELL_RE.fullmatch(label)
    if m is None:
        return None

    col = letters_to_number(m.group(1)) - 1
    row = int(m.group(2)) - 1

    if row < 0 or col < 0:
        return None
    if row >= int(rows) or col >= int(cols):
        return None
    return CellAddress(row=row, col=col)
