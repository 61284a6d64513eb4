"""Undo/redo history for document operations."""

from .manager import HistoryChange, HistoryListener, HistoryManager
from .undo import MAX_HISTORY_SIZE, OperationTimeline

__all__ = [
    "MAX_HISTORY_SIZE",
    "OperationTimeline",
    "HistoryChange",
    "HistoryListener",
    "HistoryManager",
]
