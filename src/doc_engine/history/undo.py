"""Bounded two-stack undo/redo timeline of operations."""

from __future__ import annotations

from collections import deque
from typing import Deque, Optional, Tuple

from doc_engine.operations.models import Operation

MAX_HISTORY_SIZE = 50


class OperationTimeline:
    """``past`` holds executed operations oldest first; ``future`` holds
    undone operations with the next one to redo first.

    ``past`` is capped at ``max_size``; pushing past the cap silently drops
    the oldest entry.
    """

    def __init__(self, max_size: int = MAX_HISTORY_SIZE) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self.max_size = max_size
        self._past: Deque[Operation] = deque(maxlen=max_size)
        self._future: Deque[Operation] = deque()

    @property
    def past(self) -> Tuple[Operation, ...]:
        return tuple(self._past)

    @property
    def future(self) -> Tuple[Operation, ...]:
        return tuple(self._future)

    def push(self, op: Operation) -> None:
        self._past.append(op)
        self._future.clear()

    def can_undo(self) -> bool:
        return bool(self._past)

    def can_redo(self) -> bool:
        return bool(self._future)

    def peek_undo(self) -> Optional[Operation]:
        return self._past[-1] if self._past else None

    def peek_redo(self) -> Optional[Operation]:
        return self._future[0] if self._future else None

    def pop_undo(self) -> Optional[Operation]:
        if not self._past:
            return None
        op = self._past.pop()
        self._future.appendleft(op)
        return op

    def pop_redo(self) -> Optional[Operation]:
        if not self._future:
            return None
        op = self._future.popleft()
        self._past.append(op)
        return op

    def clear(self) -> None:
        self._past.clear()
        self._future.clear()
