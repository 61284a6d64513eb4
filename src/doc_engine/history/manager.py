"""Per-session history manager owning the live document and its timeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional

from doc_engine.document.model import Doc
from doc_engine.operations.apply import apply_operation, revert_operation
from doc_engine.operations.models import Operation
from doc_engine.runtime import telemetry

from .undo import OperationTimeline


@dataclass(slots=True)
class HistoryChange:
    """Notification delivered to subscribers after every transition."""

    label: str
    operation: Optional[Operation]
    document: Doc
    version: int
    can_undo: bool
    can_redo: bool


HistoryListener = Callable[[HistoryChange], None]


class HistoryManager:
    """Applies operations to one document and records them for undo/redo.

    One instance per open document. Calls are not synchronized; a host that
    dispatches from several threads must serialize ``execute``/``undo``/
    ``redo`` itself.
    """

    def __init__(
        self,
        document: Doc,
        *,
        timeline: Optional[OperationTimeline] = None,
        name: str = "default",
    ) -> None:
        self.name = name
        self.timeline = timeline or OperationTimeline()
        self._document = document
        self._version = 0
        self._listeners: List[HistoryListener] = []

    @property
    def document(self) -> Doc:
        return self._document

    @property
    def version(self) -> int:
        return self._version

    @property
    def can_undo(self) -> bool:
        return self.timeline.can_undo()

    @property
    def can_redo(self) -> bool:
        return self.timeline.can_redo()

    def subscribe(self, listener: HistoryListener) -> None:
        self._listeners.append(listener)

    def execute(self, op: Operation, *, save_to_history: bool = True) -> Doc:
        """Apply ``op``; record it unless ``save_to_history`` is false.

        The document is replaced either way, which lets drag previews update
        the view without flooding the undo stack.
        """

        with self._span("execute", op) as handle:
            self._replace(apply_operation(self._document, op))
            if save_to_history:
                self.timeline.push(op)
            else:
                handle.add_metadata("saved", False)
        self._notify("execute", op)
        return self._document

    def undo(self) -> Optional[Operation]:
        op = self.timeline.peek_undo()
        if op is None:
            return None
        with self._span("undo", op):
            self._replace(revert_operation(self._document, op))
            self.timeline.pop_undo()
        self._notify("undo", op)
        return op

    def redo(self) -> Optional[Operation]:
        op = self.timeline.peek_redo()
        if op is None:
            return None
        with self._span("redo", op):
            self._replace(apply_operation(self._document, op))
            self.timeline.pop_redo()
        self._notify("redo", op)
        return op

    def clear(self) -> None:
        self.timeline.clear()
        self._notify("clear", None)

    def reset(self, document: Doc) -> None:
        """Load ``document`` as a fresh session with empty history."""

        self.timeline.clear()
        self._replace(document)
        self._notify("reset", None)

    def _replace(self, document: Doc) -> None:
        self._document = document
        self._version += 1

    def _span(self, label: str, op: Operation):
        return telemetry.span(
            f"history::{label}",
            component="history",
            metadata={"session": self.name, "kind": getattr(op, "kind", type(op).__name__)},
        )

    def _notify(self, label: str, op: Optional[Operation]) -> None:
        if not self._listeners:
            return
        change = HistoryChange(
            label=label,
            operation=op,
            document=self._document,
            version=self._version,
            can_undo=self.can_undo,
            can_redo=self.can_redo,
        )
        for listener in list(self._listeners):
            listener(change)
