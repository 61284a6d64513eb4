"""Structural edits over a table node's merged-cell grid.

Every function is pure: it takes a ``TableNode`` and returns a new one.
When an edit is rejected the *same* input object is returned, so callers can
test ``result is table`` before committing an ``UpdateElement``.

The grid is a sparse tuple of ``Cell`` anchors, but every position inside
``rows x cols`` is always covered by exactly one cell and no two cells
overlap. Each edit below preserves that partition and materializes the
cells it creates instead of leaving holes.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, List, Literal, Optional, Sequence

from doc_engine.document.model import Cell, TableData, TableNode
from doc_engine.runtime import telemetry

DEFAULT_ROW_HEIGHT = 50
DEFAULT_COL_WIDTH = 100
DEFAULT_BORDER_WIDTH = 2
DEFAULT_BORDER_COLOR = "#000000"

RowSide = Literal["above", "below"]
ColSide = Literal["left", "right"]
MergeDirection = Literal["right", "down"]


class GridInvariantError(RuntimeError):
    """Raised when a grid is found to violate the non-overlap invariant."""

    def __init__(self, message: str, *, cell: Cell | None = None) -> None:
        super().__init__(message)
        self.cell = cell


@dataclass(frozen=True, slots=True)
class GridRect:
    """Inclusive rectangle of grid positions."""

    r1: int
    c1: int
    r2: int
    c2: int

    def intersects(self, other: "GridRect") -> bool:
        return not (
            self.r2 < other.r1
            or self.r1 > other.r2
            or self.c2 < other.c1
            or self.c1 > other.c2
        )

    def contains(self, other: "GridRect") -> bool:
        return (
            self.r1 <= other.r1
            and other.r2 <= self.r2
            and self.c1 <= other.c1
            and other.c2 <= self.c2
        )


def cell_rect(cell: Cell) -> GridRect:
    return GridRect(cell.r, cell.c, cell.last_row, cell.last_col)


def rects_intersect(a: GridRect, b: GridRect) -> bool:
    return a.intersects(b)


def find_cell(cells: Iterable[Cell], r: int, c: int) -> Optional[Cell]:
    """Return the cell anchored exactly at ``(r, c)``."""

    for cell in cells:
        if cell.r == r and cell.c == c:
            return cell
    return None


def cell_at(cells: Iterable[Cell], r: int, c: int) -> Optional[Cell]:
    """Return the cell whose rectangle covers ``(r, c)``."""

    for cell in cells:
        if cell.covers(r, c):
            return cell
    return None


def _clamp(value: int, low: int, high: int) -> int:
    return low if value < low else high if value > high else value


def _blank_cell(r: int, c: int, template: Optional[Cell]) -> Cell:
    if template is None:
        return Cell(
            r=r,
            c=c,
            v="",
            border_w=DEFAULT_BORDER_WIDTH,
            border_color=DEFAULT_BORDER_COLOR,
        )
    return replace(template, r=r, c=c, v="", rs=1, cs=1)


def _rebuild(
    table: TableNode,
    cells: Sequence[Cell],
    *,
    rows: Optional[Sequence[float]] = None,
    cols: Optional[Sequence[float]] = None,
) -> TableNode:
    data = table.table
    grid = TableData(
        rows=tuple(rows) if rows is not None else data.rows,
        cols=tuple(cols) if cols is not None else data.cols,
        cells=tuple(cells),
    )
    changes: dict[str, object] = {"table": grid}
    if rows is not None:
        changes["h"] = sum(grid.rows)
    if cols is not None:
        changes["w"] = sum(grid.cols)
    return replace(table, **changes)


def _rejected(table: TableNode, edit: str, reason: str, **data: object) -> TableNode:
    telemetry.record_event(
        "table.rejected",
        level="debug",
        data={"table": table.id, "edit": edit, "reason": reason, **data},
    )
    return table


def insert_row(table: TableNode, target_row: int, where: RowSide = "above") -> TableNode:
    if where not in ("above", "below"):
        raise ValueError(f"where must be 'above' or 'below', got {where!r}")
    insert_index = target_row if where == "above" else target_row + 1
    rows = list(table.table.rows)
    rows.insert(insert_index, DEFAULT_ROW_HEIGHT)

    cells = table.table.cells
    next_cells: List[Cell] = []
    absorbed: set[int] = set()
    for cell in cells:
        if cell.r >= insert_index:
            next_cells.append(replace(cell, r=cell.r + 1))
        elif cell.rs > 1 and cell.r < insert_index <= cell.last_row:
            # The spanning cell grows over the new row.
            next_cells.append(replace(cell, rs=cell.rs + 1))
            absorbed.update(range(cell.c, cell.c + cell.cs))
        else:
            next_cells.append(cell)

    for col in range(len(table.table.cols)):
        if col in absorbed:
            continue
        template = find_cell(cells, target_row, col) or find_cell(cells, target_row, 0)
        next_cells.append(_blank_cell(insert_index, col, template))

    return _rebuild(table, next_cells, rows=rows)


def insert_col(
    table: TableNode,
    target_col: int,
    where: ColSide = "left",
    target_row: int = 0,
) -> TableNode:
    if where not in ("left", "right"):
        raise ValueError(f"where must be 'left' or 'right', got {where!r}")
    insert_index = target_col if where == "left" else target_col + 1
    cols = list(table.table.cols)
    cols.insert(insert_index, DEFAULT_COL_WIDTH)

    cells = table.table.cells
    next_cells: List[Cell] = []
    absorbed: set[int] = set()
    for cell in cells:
        if cell.c >= insert_index:
            next_cells.append(replace(cell, c=cell.c + 1))
        elif cell.cs > 1 and cell.c < insert_index <= cell.last_col:
            next_cells.append(replace(cell, cs=cell.cs + 1))
            absorbed.update(range(cell.r, cell.r + cell.rs))
        else:
            next_cells.append(cell)

    for row in range(len(table.table.rows)):
        if row in absorbed:
            continue
        template = find_cell(cells, row, target_col) or find_cell(
            cells, target_row, target_col
        )
        next_cells.append(_blank_cell(row, insert_index, template))

    return _rebuild(table, next_cells, cols=cols)


def delete_row(table: TableNode, target_row: int) -> TableNode:
    row_count = len(table.table.rows)
    if row_count <= 1:
        return _rejected(table, "delete_row", "last_row")
    index = _clamp(target_row, 0, row_count - 1)
    rows = [size for i, size in enumerate(table.table.rows) if i != index]

    next_cells: List[Cell] = []
    for cell in table.table.cells:
        if cell.r == index:
            # A spanning cell survives and now starts on the row that moves up.
            if cell.rs > 1:
                next_cells.append(replace(cell, rs=cell.rs - 1))
        elif cell.r > index:
            next_cells.append(replace(cell, r=cell.r - 1))
        elif cell.rs > 1 and index <= cell.last_row:
            next_cells.append(replace(cell, rs=cell.rs - 1))
        else:
            next_cells.append(cell)

    return _rebuild(table, next_cells, rows=rows)


def delete_col(table: TableNode, target_col: int) -> TableNode:
    col_count = len(table.table.cols)
    if col_count <= 1:
        return _rejected(table, "delete_col", "last_col")
    index = _clamp(target_col, 0, col_count - 1)
    cols = [size for i, size in enumerate(table.table.cols) if i != index]

    next_cells: List[Cell] = []
    for cell in table.table.cells:
        if cell.c == index:
            if cell.cs > 1:
                next_cells.append(replace(cell, cs=cell.cs - 1))
        elif cell.c > index:
            next_cells.append(replace(cell, c=cell.c - 1))
        elif cell.cs > 1 and index <= cell.last_col:
            next_cells.append(replace(cell, cs=cell.cs - 1))
        else:
            next_cells.append(cell)

    return _rebuild(table, next_cells, cols=cols)


def merge_cells(
    table: TableNode, r: int, c: int, direction: MergeDirection = "right"
) -> TableNode:
    """Absorb the aligned neighbour to the right of / below the cell at ``(r, c)``.

    Only a neighbour that exactly matches the base cell's extent on the other
    axis and is one line thick on the merge axis can be absorbed, and no third
    cell may touch the merged rectangle. Anything else is rejected.
    """

    if direction not in ("right", "down"):
        raise ValueError(f"direction must be 'right' or 'down', got {direction!r}")

    working = list(table.table.cells)
    base = find_cell(working, r, c)
    if base is None:
        base = Cell(r=r, c=c, v="")
        working.append(base)
    rs, cs = base.rs, base.cs

    if direction == "right":
        target_r, target_c = r, c + cs
        if target_c >= len(table.table.cols):
            return _rejected(table, "merge_right", "out_of_bounds", r=r, c=c)
        merged_rect = GridRect(r, c, r + rs - 1, c + cs)
        merged_base = replace(base, cs=cs + 1)
    else:
        target_r, target_c = r + rs, c
        if target_r >= len(table.table.rows):
            return _rejected(table, "merge_down", "out_of_bounds", r=r, c=c)
        merged_rect = GridRect(r, c, r + rs, c + cs - 1)
        merged_base = replace(base, rs=rs + 1)

    neighbor = find_cell(working, target_r, target_c)
    if neighbor is None:
        return _rejected(table, f"merge_{direction}", "missing_neighbor", r=r, c=c)
    aligned = (
        neighbor.rs == rs and neighbor.cs == 1
        if direction == "right"
        else neighbor.cs == cs and neighbor.rs == 1
    )
    if not aligned:
        return _rejected(table, f"merge_{direction}", "misaligned_neighbor", r=r, c=c)

    for other in working:
        if other.anchor in ((r, c), (target_r, target_c)):
            continue
        if cell_rect(other).intersects(merged_rect):
            return _rejected(table, f"merge_{direction}", "overlap", r=r, c=c)

    def absorbed(cell: Cell) -> bool:
        if direction == "right":
            return cell.c == target_c and r <= cell.r < r + rs
        return cell.r == target_r and c <= cell.c < c + cs

    next_cells: List[Cell] = []
    base_written = False
    for cell in working:
        if cell.anchor == (r, c):
            if not base_written:
                next_cells.append(merged_base)
                base_written = True
            else:
                next_cells.append(cell)
        elif not absorbed(cell):
            next_cells.append(cell)

    return _rebuild(table, next_cells)


def unmerge_cells(table: TableNode, r: int, c: int) -> TableNode:
    """Split the merged cell anchored at ``(r, c)`` back into 1x1 cells.

    The anchor keeps its value; freed positions get empty cells with the
    same style. Raises ``GridInvariantError`` when another cell partially
    overlaps the merged rectangle, which a valid grid never contains.
    """

    cells = table.table.cells
    current = find_cell(cells, r, c)
    if current is None or not current.is_merged:
        return _rejected(table, "unmerge", "not_merged", r=r, c=c)

    rect = cell_rect(current)
    for other in cells:
        if other is current:
            continue
        other_rect = cell_rect(other)
        if other_rect.intersects(rect) and not rect.contains(other_rect):
            raise GridInvariantError(
                f"Cell at ({other.r},{other.c}) partially overlaps merged cell "
                f"at ({r},{c}) in table '{table.id}'",
                cell=other,
            )

    base = replace(current, rs=1, cs=1)
    next_cells = [base if cell is current else cell for cell in cells]

    row_count = len(table.table.rows)
    col_count = len(table.table.cols)
    for row in range(r, r + current.rs):
        for col in range(c, c + current.cs):
            if (row, col) == (r, c):
                continue
            if row >= row_count or col >= col_count:
                continue
            if cell_at(next_cells, row, col) is None:
                next_cells.append(replace(current, r=row, c=col, v="", rs=1, cs=1))

    return _rebuild(table, next_cells)


def ensure_grid(table: TableNode) -> TableNode:
    """Materialize default cells for any uncovered grid position."""

    cells = list(table.table.cells)
    missing = [
        (row, col)
        for row in range(len(table.table.rows))
        for col in range(len(table.table.cols))
        if cell_at(cells, row, col) is None
    ]
    if not missing:
        return table
    cells.extend(_blank_cell(row, col, None) for row, col in missing)
    return _rebuild(table, cells)


def create_table(
    node_id: str,
    surface_id: str,
    *,
    rows: int = 2,
    cols: int = 2,
    x: float = 0,
    y: float = 0,
    row_height: float = DEFAULT_ROW_HEIGHT,
    col_width: float = DEFAULT_COL_WIDTH,
    values: Optional[Sequence[Sequence[str]]] = None,
) -> TableNode:
    """Build a table node with a fully materialized ``rows x cols`` grid."""

    if rows < 1 or cols < 1:
        raise ValueError("a table needs at least one row and one column")
    row_sizes = (row_height,) * rows
    col_sizes = (col_width,) * cols
    cells = []
    for row in range(rows):
        for col in range(cols):
            value = ""
            if values is not None and row < len(values) and col < len(values[row]):
                value = str(values[row][col])
            cells.append(replace(_blank_cell(row, col, None), v=value))
    return TableNode(
        id=node_id,
        s=surface_id,
        x=x,
        y=y,
        w=sum(col_sizes),
        h=sum(row_sizes),
        table=TableData(rows=row_sizes, cols=col_sizes, cells=tuple(cells)),
    )


__all__ = [
    "DEFAULT_ROW_HEIGHT",
    "DEFAULT_COL_WIDTH",
    "GridInvariantError",
    "GridRect",
    "cell_rect",
    "rects_intersect",
    "find_cell",
    "cell_at",
    "insert_row",
    "insert_col",
    "delete_row",
    "delete_col",
    "merge_cells",
    "unmerge_cells",
    "ensure_grid",
    "create_table",
]
