"""
Region reconstruction: grid cell labels back to pixel rectangles.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from gridspot.errors import OutOfRangeCellError
from gridspot.grid.addressing import CellAddress, parse_cell_label
from gridspot.grid.geometry import GridGeometry, Rect


logger = logging.getLogger(__name__)


def parse_cells(cells: Iterable[object], rows: int, cols: int) -> List[CellAddress]:
    """Parse labels against a rows x cols grid, dropping the invalid ones."""
    out: List[CellAddress] = []
    for label in cells or ():
        addr = parse_cell_label(label, rows, cols)
        if addr is None:
            logger.debug("Dropping cell: %s", OutOfRangeCellError(str(label), rows, cols))
            continue
        out.append(addr)
    return out


def cells_to_rect(cells: Sequence[str], geometry: GridGeometry) -> Optional[Rect]:
    """
    Enclosing rectangle of a set of cell labels, in grid-resampled pixel space.

    Labels that fail to parse against ``geometry.rows``/``geometry.cols`` are
    ignored. The cells do not have to be contiguous: the result always spans
    every surviving cell.

    Returns:
        The rectangle, or None when no label survives.
    """
    addrs = parse_cells(cells, geometry.rows, geometry.cols)
    if not addrs:
        return None

    min_c = min(a.col for a in addrs)
    max_c = max(a.col for a in addrs)
    min_r = min(a.row for a in addrs)
    max_r = max(a.row for a in addrs)

    cell_w = float(geometry.resampled_w) / float(geometry.cols)
    cell_h = float(geometry.resampled_h) / float(geometry.rows)

    return Rect(
        x=min_c * cell_w,
        y=min_r * cell_h,
        w=(max_c - min_c + 1) * cell_w,
        h=(max_r - min_r + 1) * cell_h,
    )


def apply_padding(rect: Rect, ratio: float, bound_w: float, bound_h: float) -> Rect:
    """
    Grow a rectangle by ``ratio`` of its size on every side, clipped to bounds.

    The top-left corner is clamped at 0 and the size is cut so the rectangle
    never extends past ``(bound_w, bound_h)``; padding that would overflow is
    dropped rather than shifted to the other side.

    Raises:
        ValueError: If ``ratio`` is negative.
    """
    if ratio < 0:
        raise ValueError(f"padding ratio must be >= 0, got {ratio}")

    pad_x = rect.w * float(ratio)
    pad_y = rect.h * float(ratio)

    x = max(0.0, rect.x - pad_x)
    y = max(0.0, rect.y - pad_y)
    w = min(rect.w + 2.0 * pad_x, float(bound_w) - x)
    h = min(rect.h + 2.0 * pad_y, float(bound_h) - y)
    return Rect(x=x, y=y, w=w, h=h)


def is_contiguous(cells: Sequence[str], rows: int, cols: int) -> bool:
    """
    Whether the valid cells form one 4-connected region.

    Invalid labels are ignored; an empty set counts as contiguous.
    """
    todo = set(parse_cells(cells, rows, cols))
    if not todo:
        return True

    start = next(iter(todo))
    seen = {start}
    stack = [start]
    while stack:
        r, c = stack.pop()
        for nb in ((r - 1, c), (r + 1, c), (r, c - 1), (r, c + 1)):
            addr = CellAddress(*nb)
            if addr in todo and addr not in seen:
                seen.add(addr)
                stack.append(addr)
    return len(seen) == len(todo)
