from __future__ import annotations

from typing import List

from doc_engine.adapters import HostAdapter, HostHooks
from doc_engine.document import Doc, Surface, TextNode
from doc_engine.history import HistoryManager
from doc_engine.operations import CreateElement, UpdateElement


def make_adapter():
    documents: List[Doc] = []
    statuses: List[str] = []
    logs: List[str] = []
    history = HistoryManager(Doc(surfaces=(Surface(id="page1"),)), name="session-1")
    hooks = HostHooks(
        update_document=documents.append,
        update_status=statuses.append,
        log=logs.append,
    )
    return HostAdapter(history, hooks), documents, statuses, logs


def test_adapter_pushes_initial_document() -> None:
    adapter, documents, statuses, _ = make_adapter()

    assert documents == [adapter.history.document]
    assert statuses == []


def test_adapter_relays_execute_undo_redo() -> None:
    adapter, documents, statuses, logs = make_adapter()

    adapter.execute(CreateElement(TextNode(id="a", s="page1", w=10, h=10)))
    adapter.undo()
    adapter.redo()

    assert statuses == [
        "execute:create-element",
        "undo:create-element",
        "redo:create-element",
    ]
    assert [doc.node_ids for doc in documents] == [(), ("a",), (), ("a",)]
    assert logs[0].startswith("execute ->")
    assert any("session='session-1'" in line for line in logs)


def test_adapter_reports_empty_stacks() -> None:
    adapter, _, statuses, _ = make_adapter()

    assert adapter.undo() is None
    assert adapter.redo() is None

    assert statuses == ["undo:empty", "redo:empty"]


def test_adapter_forwards_preview_flag() -> None:
    adapter, documents, statuses, logs = make_adapter()
    adapter.execute(CreateElement(TextNode(id="a", s="page1", w=10, h=10)))

    adapter.execute(
        UpdateElement("a", prev={"x": 0}, next={"x": 5}), save_to_history=False
    )

    assert documents[-1].find_node("a").x == 5
    assert statuses[-1] == "execute:update-element"
    assert "saved=False" in logs[-2]
    assert len(adapter.history.timeline.past) == 1


def test_adapter_reports_clear() -> None:
    adapter, _, statuses, _ = make_adapter()

    adapter.history.clear()

    assert statuses == ["clear"]
