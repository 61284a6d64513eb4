"""Element-level editing verbs: add, update, remove, and z-order."""

from __future__ import annotations

from typing import List, Mapping, Optional, Sequence

from doc_engine.document.model import UnifiedNode
from doc_engine.history.manager import HistoryManager
from doc_engine.operations import builders
from doc_engine.operations.models import (
    CreateElement,
    DeleteElement,
    ReorderElements,
    UpdateElement,
)


def add_element(
    history: HistoryManager, element: UnifiedNode, *, index: Optional[int] = None
) -> CreateElement:
    op = builders.build_create(history.document, element, index=index)
    history.execute(op)
    return op


def update_element(
    history: HistoryManager,
    node_id: str,
    changes: Mapping[str, object],
    *,
    save_to_history: bool = True,
) -> UpdateElement:
    op = builders.build_update(history.document, node_id, changes)
    history.execute(op, save_to_history=save_to_history)
    return op


def remove_element(history: HistoryManager, node_id: str) -> DeleteElement:
    op = builders.build_delete(history.document, node_id)
    history.execute(op)
    return op


def reorder_elements(
    history: HistoryManager, next_order: Sequence[str]
) -> Optional[ReorderElements]:
    op = builders.build_reorder(history.document, next_order)
    if tuple(next_order) == history.document.node_ids:
        return None
    history.execute(op)
    return op


def paste_elements(
    history: HistoryManager,
    elements: Sequence[UnifiedNode],
    surface_id: str,
    *,
    paste_count: int = 1,
) -> List[CreateElement]:
    """Paste clipboard nodes onto a surface, one undoable create per node."""

    ops = builders.build_paste(history.document, elements, surface_id, paste_count)
    for op in ops:
        history.execute(op)
    return ops


def bring_to_front(history: HistoryManager, node_id: str) -> Optional[ReorderElements]:
    ids = [other for other in history.document.node_ids if other != node_id]
    return reorder_elements(history, ids + [node_id])


def send_to_back(history: HistoryManager, node_id: str) -> Optional[ReorderElements]:
    ids = [other for other in history.document.node_ids if other != node_id]
    return reorder_elements(history, [node_id] + ids)


__all__ = [
    "add_element",
    "update_element",
    "remove_element",
    "reorder_elements",
    "paste_elements",
    "bring_to_front",
    "send_to_back",
]
