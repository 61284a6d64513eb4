"""Pixel geometry helpers for table grids."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from doc_engine.document.model import Cell, TableNode


@dataclass(frozen=True, slots=True)
class CellBounds:
    x: float
    y: float
    w: float
    h: float


def row_offset(rows: Sequence[float], index: int) -> float:
    return sum(rows[i] for i in range(index) if i < len(rows))


def col_offset(cols: Sequence[float], index: int) -> float:
    return sum(cols[i] for i in range(index) if i < len(cols))


def row_extent(rows: Sequence[float], index: int, span: int = 1) -> float:
    return sum(rows[i] for i in range(index, index + span) if 0 <= i < len(rows))


def col_extent(cols: Sequence[float], index: int, span: int = 1) -> float:
    return sum(cols[i] for i in range(index, index + span) if 0 <= i < len(cols))


def cell_bounds(table: TableNode, cell: Cell) -> CellBounds:
    """Bounds of ``cell`` relative to the table's top-left corner."""

    rows, cols = table.table.rows, table.table.cols
    return CellBounds(
        x=col_offset(cols, cell.c),
        y=row_offset(rows, cell.r),
        w=col_extent(cols, cell.c, cell.cs),
        h=row_extent(rows, cell.r, cell.rs),
    )


def _line_at(sizes: Sequence[float], local: float) -> int:
    start = 0.0
    for index, size in enumerate(sizes):
        if start <= local < start + size:
            return index
        start += size
    return -1


def position_at(
    table: TableNode,
    point: Optional[Tuple[float, float]],
    scale: float = 1.0,
) -> Optional[Tuple[int, int]]:
    """Map a stage point (display pixels) to the ``(row, col)`` under it."""

    if point is None:
        return None
    local_x = point[0] / scale - table.x
    local_y = point[1] / scale - table.y
    if local_x < 0 or local_y < 0:
        return None
    col = _line_at(table.table.cols, local_x)
    row = _line_at(table.table.rows, local_y)
    if row < 0 or col < 0:
        return None
    return (row, col)


__all__ = [
    "CellBounds",
    "row_offset",
    "col_offset",
    "row_extent",
    "col_extent",
    "cell_bounds",
    "position_at",
]
