from __future__ import annotations

import random
from dataclasses import replace

import pytest

from doc_engine.document import Cell, TableData, TableNode, validate_table_cells
from doc_engine.table import (
    GridInvariantError,
    cell_at,
    create_table,
    delete_col,
    delete_row,
    ensure_grid,
    find_cell,
    insert_col,
    insert_row,
    merge_cells,
    unmerge_cells,
)


def make_table(rows: int = 2, cols: int = 2) -> TableNode:
    values = [[f"cell{r * cols + c}" for c in range(cols)] for r in range(rows)]
    return create_table("table1", "surface", rows=rows, cols=cols, values=values)


def make_sparse_table(cells: list[Cell], rows: int = 2, cols: int = 2) -> TableNode:
    return TableNode(
        id="table1",
        s="surface",
        w=100 * cols,
        h=50 * rows,
        table=TableData(rows=(50,) * rows, cols=(100,) * cols, cells=tuple(cells)),
    )


def with_cell(table: TableNode, r: int, c: int, **changes: object) -> TableNode:
    cells = tuple(
        replace(cell, **changes) if cell.anchor == (r, c) else cell
        for cell in table.table.cells
    )
    return replace(table, table=replace(table.table, cells=cells))


def without_cells(table: TableNode, *anchors: tuple[int, int]) -> TableNode:
    cells = tuple(cell for cell in table.table.cells if cell.anchor not in anchors)
    return replace(table, table=replace(table.table, cells=cells))


def test_create_table_materializes_every_position() -> None:
    table = make_table(3, 4)

    assert table.w == 400
    assert table.h == 150
    assert len(table.table.cells) == 12
    assert validate_table_cells(table.table) == []
    assert find_cell(table.table.cells, 2, 3).v == "cell11"


def test_insert_row_below_into_sparse_table() -> None:
    table = make_sparse_table([Cell(r=0, c=0, v="X", bg="#ff0000")])

    result = insert_row(table, 0, "below")

    assert result.table.rows == (50, 50, 50)
    assert result.h == 150
    first = find_cell(result.table.cells, 1, 0)
    second = find_cell(result.table.cells, 1, 1)
    assert first is not None and first.v == ""
    assert second is not None and second.v == ""
    assert first.bg == "#ff0000"


def test_insert_row_above_shifts_cells() -> None:
    table = make_table(2, 2)

    result = insert_row(table, 1, "above")

    assert len(result.table.rows) == 3
    assert result.h == 150
    assert find_cell(result.table.cells, 2, 0).v == "cell2"
    assert find_cell(result.table.cells, 1, 0).v == ""
    assert validate_table_cells(result.table) == []


def test_insert_row_uses_default_border_without_template() -> None:
    table = make_sparse_table([], rows=1, cols=2)

    result = insert_row(table, 0, "below")

    created = find_cell(result.table.cells, 1, 1)
    assert created.border_w == 2
    assert created.border_color == "#000000"
    assert created.rs == 1 and created.cs == 1


def test_insert_row_inside_merged_cell_grows_span() -> None:
    table = without_cells(with_cell(make_table(2, 2), 0, 0, rs=2), (1, 0))

    result = insert_row(table, 0, "below")

    merged = find_cell(result.table.cells, 0, 0)
    assert merged.rs == 3
    assert find_cell(result.table.cells, 1, 0) is None
    assert find_cell(result.table.cells, 1, 1) is not None
    assert validate_table_cells(result.table) == []


def test_insert_col_right_shifts_cells() -> None:
    table = make_table(2, 2)

    result = insert_col(table, 0, "right")

    assert len(result.table.cols) == 3
    assert result.w == 300
    moved = [cell for cell in result.table.cells if cell.c == 2]
    assert len(moved) == 2
    assert {cell.v for cell in moved} == {"cell1", "cell3"}
    assert validate_table_cells(result.table) == []


def test_insert_col_inside_merged_cell_grows_span() -> None:
    table = without_cells(with_cell(make_table(2, 2), 0, 0, cs=2), (0, 1))

    result = insert_col(table, 0, "right")

    assert find_cell(result.table.cells, 0, 0).cs == 3
    assert find_cell(result.table.cells, 0, 1) is None
    assert find_cell(result.table.cells, 1, 1).v == ""
    assert validate_table_cells(result.table) == []


def test_insert_rejects_unknown_side() -> None:
    with pytest.raises(ValueError):
        insert_row(make_table(), 0, "sideways")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        insert_col(make_table(), 0, "above")  # type: ignore[arg-type]


def test_delete_row_removes_and_shifts() -> None:
    table = make_table(3, 2)

    result = delete_row(table, 1)

    assert len(result.table.rows) == 2
    assert result.h == 100
    assert [cell.v for cell in result.table.cells if cell.r == 1] == ["cell4", "cell5"]
    assert validate_table_cells(result.table) == []


def test_delete_row_is_noop_on_last_row() -> None:
    table = make_table(1, 2)

    assert delete_row(table, 0) is table


def test_delete_col_is_noop_on_last_col() -> None:
    table = make_table(2, 1)

    assert delete_col(table, 0) is table


def test_delete_row_clamps_index() -> None:
    table = make_table(3, 1)

    result = delete_row(table, 99)

    assert [cell.v for cell in result.table.cells] == ["cell0", "cell1"]


def test_delete_row_shrinks_crossing_span() -> None:
    table = without_cells(with_cell(make_table(3, 2), 0, 0, rs=3), (1, 0), (2, 0))

    result = delete_row(table, 1)

    assert find_cell(result.table.cells, 0, 0).rs == 2
    assert validate_table_cells(result.table) == []


def test_delete_row_promotes_spanning_cell_on_its_start_row() -> None:
    table = without_cells(with_cell(make_table(2, 2), 0, 0, rs=2), (1, 0))

    result = delete_row(table, 0)

    promoted = find_cell(result.table.cells, 0, 0)
    assert promoted.rs == 1
    assert promoted.v == "cell0"
    assert validate_table_cells(result.table) == []


def test_delete_col_promotes_spanning_cell_on_its_start_col() -> None:
    table = without_cells(with_cell(make_table(2, 2), 0, 0, cs=2), (0, 1))

    result = delete_col(table, 0)

    assert result.w == 100
    assert find_cell(result.table.cells, 0, 0).cs == 1
    assert validate_table_cells(result.table) == []


def test_merge_right_absorbs_neighbor() -> None:
    table = make_table(1, 2)

    result = merge_cells(table, 0, 0, "right")

    assert len(result.table.cells) == 1
    merged = result.table.cells[0]
    assert (merged.r, merged.c, merged.cs) == (0, 0, 2)
    assert merged.v == "cell0"
    assert find_cell(result.table.cells, 0, 1) is None


def test_merge_down_absorbs_neighbor() -> None:
    table = make_table(3, 2)

    result = merge_cells(table, 0, 0, "down")

    assert find_cell(result.table.cells, 0, 0).rs == 2
    assert find_cell(result.table.cells, 1, 0) is None
    assert validate_table_cells(result.table) == []


def test_merge_twice_builds_wider_cell() -> None:
    table = make_table(1, 3)

    result = merge_cells(merge_cells(table, 0, 0, "right"), 0, 0, "right")

    assert len(result.table.cells) == 1
    assert result.table.cells[0].cs == 3


def test_merge_rejects_out_of_bounds() -> None:
    table = make_table(2, 2)

    assert merge_cells(table, 0, 1, "right") is table
    assert merge_cells(table, 1, 0, "down") is table


def test_merge_rejects_neighbor_with_different_row_span() -> None:
    table = without_cells(with_cell(make_table(3, 2), 0, 1, rs=2), (1, 1))

    result = merge_cells(table, 0, 0, "right")

    assert result is table
    assert result == table


def test_merge_rejects_neighbor_wider_than_one_column() -> None:
    table = without_cells(with_cell(make_table(1, 3), 0, 1, cs=2), (0, 2))

    assert merge_cells(table, 0, 0, "right") is table


def test_merge_rejects_position_covered_by_other_cell() -> None:
    table = without_cells(with_cell(make_table(2, 3), 0, 0, cs=2), (0, 1))

    assert merge_cells(table, 0, 1, "down") is table


def test_merge_rejects_unknown_direction() -> None:
    with pytest.raises(ValueError):
        merge_cells(make_table(), 0, 0, "left")  # type: ignore[arg-type]


def test_merge_fills_hole_with_synthetic_base() -> None:
    table = without_cells(make_table(1, 2), (0, 0))

    result = merge_cells(table, 0, 0, "right")

    merged = find_cell(result.table.cells, 0, 0)
    assert merged is not None and merged.cs == 2 and merged.v == ""
    assert validate_table_cells(result.table) == []


def test_unmerge_restores_cells_with_style() -> None:
    table = make_sparse_table([Cell(r=0, c=0, rs=2, cs=2, v="merged", bg="#00ff00")])

    result = unmerge_cells(table, 0, 0)

    assert len(result.table.cells) == 4
    anchor = find_cell(result.table.cells, 0, 0)
    assert anchor.v == "merged" and not anchor.is_merged
    restored = find_cell(result.table.cells, 1, 1)
    assert restored.v == "" and restored.bg == "#00ff00"
    assert validate_table_cells(result.table) == []


def test_unmerge_is_noop_for_single_cell() -> None:
    table = make_table(2, 2)

    assert unmerge_cells(table, 0, 0) is table
    assert unmerge_cells(table, 5, 5) is table


def test_unmerge_keeps_cells_already_inside_rectangle() -> None:
    table = with_cell(make_table(2, 2), 0, 0, cs=2, rs=2)

    result = unmerge_cells(table, 0, 0)

    assert len(result.table.cells) == 4
    assert find_cell(result.table.cells, 1, 1).v == "cell3"


def test_unmerge_rejects_partial_overlap() -> None:
    cells = [
        Cell(r=0, c=0, rs=2, cs=1, v="tall"),
        Cell(r=1, c=0, rs=1, cs=2, v="wide"),
        Cell(r=0, c=1, v="x"),
    ]
    table = make_sparse_table(cells)

    with pytest.raises(GridInvariantError) as info:
        unmerge_cells(table, 0, 0)
    assert info.value.cell == cells[1]


def test_merge_then_unmerge_restores_partition() -> None:
    table = make_table(3, 3)
    merged = merge_cells(table, 0, 0, "right")
    merged = merge_cells(merged, 1, 0, "right")
    merged = merge_cells(merged, 0, 0, "down")

    assert find_cell(merged.table.cells, 0, 0).rs == 2
    assert find_cell(merged.table.cells, 0, 0).cs == 2

    result = unmerge_cells(merged, 0, 0)

    assert len(result.table.cells) == 9
    assert validate_table_cells(result.table) == []


def test_ensure_grid_fills_holes() -> None:
    table = make_sparse_table([Cell(r=0, c=0, cs=2, v="top")])

    result = ensure_grid(table)

    assert len(result.table.cells) == 3
    assert validate_table_cells(result.table) == []
    assert ensure_grid(result) is result


def test_cell_at_returns_covering_cell() -> None:
    table = without_cells(with_cell(make_table(2, 2), 0, 0, rs=2, cs=2), (0, 1), (1, 0), (1, 1))

    assert cell_at(table.table.cells, 1, 1).anchor == (0, 0)
    assert find_cell(table.table.cells, 1, 1) is None


def _random_edit(rng: random.Random, table: TableNode) -> TableNode:
    rows = len(table.table.rows)
    cols = len(table.table.cols)
    r = rng.randrange(rows)
    c = rng.randrange(cols)
    choice = rng.randrange(6)
    if choice == 0:
        return insert_row(table, r, rng.choice(["above", "below"]))
    if choice == 1:
        return insert_col(table, c, rng.choice(["left", "right"]), r)
    if choice == 2:
        return delete_row(table, r)
    if choice == 3:
        return delete_col(table, c)
    if choice == 4:
        return merge_cells(table, r, c, rng.choice(["right", "down"]))
    return unmerge_cells(table, r, c)


@pytest.mark.parametrize("seed", range(12))
def test_random_edit_sequences_keep_grid_partitioned(seed: int) -> None:
    rng = random.Random(seed)
    table = make_table(3, 3)

    for _ in range(80):
        table = _random_edit(rng, table)
        assert validate_table_cells(table.table) == []
        assert table.h == sum(table.table.rows)
        assert table.w == sum(table.table.cols)
        assert len(table.table.rows) >= 1
        assert len(table.table.cols) >= 1
