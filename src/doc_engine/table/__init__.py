"""Table grid algebra and geometry."""

from .geometry import (
    CellBounds,
    cell_bounds,
    col_extent,
    col_offset,
    position_at,
    row_extent,
    row_offset,
)
from .grid import (
    DEFAULT_COL_WIDTH,
    DEFAULT_ROW_HEIGHT,
    GridInvariantError,
    GridRect,
    cell_at,
    cell_rect,
    create_table,
    delete_col,
    delete_row,
    ensure_grid,
    find_cell,
    insert_col,
    insert_row,
    merge_cells,
    rects_intersect,
    unmerge_cells,
)

__all__ = [
    "DEFAULT_COL_WIDTH",
    "DEFAULT_ROW_HEIGHT",
    "GridInvariantError",
    "GridRect",
    "cell_at",
    "cell_rect",
    "create_table",
    "delete_col",
    "delete_row",
    "ensure_grid",
    "find_cell",
    "insert_col",
    "insert_row",
    "merge_cells",
    "rects_intersect",
    "unmerge_cells",
    "CellBounds",
    "cell_bounds",
    "col_extent",
    "col_offset",
    "position_at",
    "row_extent",
    "row_offset",
]
