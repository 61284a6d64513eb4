"""High-level editing verbs that feed operations into a history manager."""

from .elements import (
    add_element,
    bring_to_front,
    paste_elements,
    remove_element,
    reorder_elements,
    send_to_back,
    update_element,
)
from .table import (
    delete_table_col,
    delete_table_row,
    edit_table,
    insert_table_col,
    insert_table_row,
    merge_table_cells,
    unmerge_table_cells,
)

__all__ = [
    "add_element",
    "update_element",
    "remove_element",
    "reorder_elements",
    "paste_elements",
    "bring_to_front",
    "send_to_back",
    "edit_table",
    "insert_table_row",
    "insert_table_col",
    "delete_table_row",
    "delete_table_col",
    "merge_table_cells",
    "unmerge_table_cells",
]
