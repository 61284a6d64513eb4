"""Host adapter that relays history transitions to UI callbacks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from doc_engine.document.model import Doc
from doc_engine.history.manager import HistoryChange, HistoryManager
from doc_engine.operations.models import Operation


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class HostHooks:
    """Callbacks a rendering host supplies to stay in sync with the engine."""

    update_document: Callable[[Doc], None]
    update_status: Callable[[str], None] = _noop
    log: Callable[[str], None] = _noop


class HostAdapter:
    """Forwards edits to a ``HistoryManager`` and pushes results to the host."""

    def __init__(self, history: HistoryManager, hooks: HostHooks) -> None:
        self.history = history
        self.hooks = hooks
        history.subscribe(self._on_change)
        self.hooks.update_document(history.document)

    def execute(self, op: Operation, *, save_to_history: bool = True) -> Doc:
        self._log("execute ->", kind=op.kind, saved=save_to_history)
        return self.history.execute(op, save_to_history=save_to_history)

    def undo(self) -> Optional[Operation]:
        op = self.history.undo()
        if op is None:
            self.hooks.update_status("undo:empty")
        return op

    def redo(self) -> Optional[Operation]:
        op = self.history.redo()
        if op is None:
            self.hooks.update_status("redo:empty")
        return op

    def _on_change(self, change: HistoryChange) -> None:
        self.hooks.update_document(change.document)
        if change.operation is not None:
            status = f"{change.label}:{change.operation.kind}"
        else:
            status = change.label
        self.hooks.update_status(status)
        self._log(
            "change <-",
            status=status,
            can_undo=change.can_undo,
            can_redo=change.can_redo,
        )

    def _log(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({key: value for key, value in fields.items() if value is not None})
        parts = [prefix] + [f"{key}={value!r}" for key, value in snapshot.items()]
        self.hooks.log(" ".join(parts))

    def _state_metadata(self) -> Dict[str, object]:
        document = self.history.document
        return {
            "session": self.history.name,
            "document": document.id,
            "version": self.history.version,
            "nodes": len(document.nodes),
        }


__all__ = ["HostAdapter", "HostHooks"]
