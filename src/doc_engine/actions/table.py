"""Table editing verbs that route grid edits through the history manager."""

from __future__ import annotations

from typing import Callable, Optional

from doc_engine.document.model import TableNode
from doc_engine.history.manager import HistoryManager
from doc_engine.operations.builders import build_replace
from doc_engine.operations.models import OperationError, UpdateElement
from doc_engine.table import grid

TableEdit = Callable[[TableNode], TableNode]


def _table_node(history: HistoryManager, node_id: str) -> TableNode:
    node = history.document.find_node(node_id)
    if node is None:
        raise OperationError(f"Node '{node_id}' not found")
    if not isinstance(node, TableNode):
        raise OperationError(f"Node '{node_id}' is a {node.t} node, not a table")
    return node


def edit_table(
    history: HistoryManager, node_id: str, edit: TableEdit
) -> Optional[UpdateElement]:
    """Run ``edit`` on the table and execute the result as one update.

    Returns ``None`` without touching history when the grid engine rejected
    the edit (it hands back the same object).
    """

    table = _table_node(history, node_id)
    updated = edit(table)
    if updated is table:
        return None
    op = build_replace(history.document, updated)
    history.execute(op)
    return op


def insert_table_row(
    history: HistoryManager, node_id: str, row: int, where: grid.RowSide = "below"
) -> Optional[UpdateElement]:
    return edit_table(history, node_id, lambda table: grid.insert_row(table, row, where))


def insert_table_col(
    history: HistoryManager,
    node_id: str,
    col: int,
    where: grid.ColSide = "right",
    *,
    row: int = 0,
) -> Optional[UpdateElement]:
    return edit_table(
        history, node_id, lambda table: grid.insert_col(table, col, where, row)
    )


def delete_table_row(
    history: HistoryManager, node_id: str, row: int
) -> Optional[UpdateElement]:
    return edit_table(history, node_id, lambda table: grid.delete_row(table, row))


def delete_table_col(
    history: HistoryManager, node_id: str, col: int
) -> Optional[UpdateElement]:
    return edit_table(history, node_id, lambda table: grid.delete_col(table, col))


def merge_table_cells(
    history: HistoryManager,
    node_id: str,
    row: int,
    col: int,
    direction: grid.MergeDirection = "right",
) -> Optional[UpdateElement]:
    return edit_table(
        history, node_id, lambda table: grid.merge_cells(table, row, col, direction)
    )


def unmerge_table_cells(
    history: HistoryManager, node_id: str, row: int, col: int
) -> Optional[UpdateElement]:
    return edit_table(
        history, node_id, lambda table: grid.unmerge_cells(table, row, col)
    )


__all__ = [
    "edit_table",
    "insert_table_row",
    "insert_table_col",
    "delete_table_row",
    "delete_table_col",
    "merge_table_cells",
    "unmerge_table_cells",
]
