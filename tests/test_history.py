from __future__ import annotations

from typing import List

import pytest

from doc_engine.document import Doc, Surface, TextNode
from doc_engine.history import (
    MAX_HISTORY_SIZE,
    HistoryChange,
    HistoryManager,
    OperationTimeline,
)
from doc_engine.operations import (
    CreateElement,
    DeleteElement,
    ReorderElements,
    UpdateElement,
)


def make_text(node_id: str, text: str = "hello", x: float = 0) -> TextNode:
    return TextNode(id=node_id, s="page1", x=x, w=100, h=40, text=text)


def make_doc(*nodes) -> Doc:
    return Doc(surfaces=(Surface(id="page1"),), nodes=nodes)


def make_history(*nodes) -> HistoryManager:
    return HistoryManager(make_doc(*nodes), name="test")


def move(node_id: str, before: float, after: float) -> UpdateElement:
    return UpdateElement(node_id, prev={"x": before}, next={"x": after})


def test_fresh_history_has_nothing_to_undo_or_redo() -> None:
    history = make_history()

    assert not history.can_undo
    assert not history.can_redo
    assert history.undo() is None
    assert history.redo() is None
    assert history.version == 0


def test_execute_then_undo_restores_document() -> None:
    history = make_history()
    initial = history.document

    history.execute(CreateElement(make_text("a")))
    assert history.document.node_ids == ("a",)
    assert history.can_undo and not history.can_redo

    undone = history.undo()

    assert isinstance(undone, CreateElement)
    assert history.document == initial
    assert history.can_redo and not history.can_undo


def test_undo_redo_round_trip_for_every_kind() -> None:
    history = make_history(make_text("a"), make_text("b"))
    initial = history.document
    ops = [
        CreateElement(make_text("c")),
        UpdateElement("a", prev={"text": "hello"}, next={"text": "changed"}),
        ReorderElements(prev_order=("a", "b", "c"), next_order=("c", "b", "a")),
        DeleteElement("b", history.document.find_node("b"), 1),
    ]
    snapshots = []
    for op in ops:
        history.execute(op)
        snapshots.append(history.document)

    for _ in ops:
        history.undo()
    assert history.document == initial

    for expected in snapshots:
        history.redo()
        assert history.document == expected


def test_undo_all_returns_to_initial_state() -> None:
    history = make_history(make_text("a"))
    initial = history.document

    for step in range(10):
        history.execute(move("a", step, step + 1))
    for _ in range(10):
        history.undo()

    assert history.document == initial
    assert not history.can_undo
    assert len(history.timeline.future) == 10


def test_history_is_capped_at_fifty() -> None:
    history = make_history(make_text("a"))

    for step in range(60):
        history.execute(move("a", step, step + 1))

    past = history.timeline.past
    assert len(past) == MAX_HISTORY_SIZE
    assert dict(past[0].next) == {"x": 11}
    assert dict(past[-1].next) == {"x": 60}

    for _ in range(MAX_HISTORY_SIZE):
        assert history.undo() is not None
    assert history.undo() is None
    assert history.document.find_node("a").x == 10


def test_execute_after_undo_discards_redo() -> None:
    history = make_history(make_text("a"))
    history.execute(move("a", 0, 1))
    history.execute(move("a", 1, 2))
    history.undo()
    assert history.can_redo

    history.execute(move("a", 1, 5))

    assert not history.can_redo
    assert history.redo() is None
    assert history.document.find_node("a").x == 5


def test_create_update_undo_twice_redo_once() -> None:
    history = make_history()
    initial = history.document
    history.execute(CreateElement(make_text("t", "A")))
    history.execute(UpdateElement("t", prev={"text": "A"}, next={"text": "B"}))

    history.undo()
    history.undo()
    assert history.document == initial

    history.redo()

    node = history.document.find_node("t")
    assert node is not None
    assert node.text == "A"


def test_unsaved_execute_updates_document_only() -> None:
    history = make_history(make_text("a"))
    history.execute(move("a", 0, 1))

    history.execute(move("a", 1, 2), save_to_history=False)

    assert history.document.find_node("a").x == 2
    assert len(history.timeline.past) == 1


def test_unsaved_execute_keeps_redo_stack() -> None:
    history = make_history(make_text("a"))
    history.execute(move("a", 0, 1))
    history.undo()

    history.execute(move("a", 0, 3), save_to_history=False)

    assert history.can_redo


def test_clear_empties_both_stacks_and_keeps_document() -> None:
    history = make_history(make_text("a"))
    history.execute(move("a", 0, 1))
    history.execute(move("a", 1, 2))
    history.undo()
    document = history.document

    history.clear()

    assert not history.can_undo and not history.can_redo
    assert history.document is document


def test_reset_loads_new_document_with_empty_history() -> None:
    history = make_history(make_text("a"))
    history.execute(move("a", 0, 1))
    replacement = make_doc(make_text("z"))

    history.reset(replacement)

    assert history.document is replacement
    assert not history.can_undo


def test_listeners_receive_each_transition() -> None:
    history = make_history(make_text("a"))
    changes: List[HistoryChange] = []
    history.subscribe(changes.append)

    history.execute(move("a", 0, 1))
    history.undo()
    history.redo()
    history.clear()

    assert [change.label for change in changes] == ["execute", "undo", "redo", "clear"]
    assert changes[0].can_undo and not changes[0].can_redo
    assert changes[1].can_redo
    assert changes[1].document.find_node("a").x == 0
    assert changes[-1].operation is None
    assert [change.version for change in changes] == [1, 2, 3, 3]


def test_timeline_rejects_non_positive_size() -> None:
    with pytest.raises(ValueError):
        OperationTimeline(0)


def test_timeline_moves_operations_between_stacks() -> None:
    timeline = OperationTimeline(max_size=3)
    ops = [move("a", step, step + 1) for step in range(4)]
    for op in ops:
        timeline.push(op)

    assert timeline.past == tuple(ops[1:])

    assert timeline.pop_undo() is ops[3]
    assert timeline.pop_undo() is ops[2]
    assert timeline.future == (ops[2], ops[3])
    assert timeline.peek_redo() is ops[2]

    assert timeline.pop_redo() is ops[2]
    assert timeline.past == (ops[1], ops[2])
    assert timeline.future == (ops[3],)


def test_custom_timeline_size() -> None:
    history = HistoryManager(make_doc(make_text("a")), timeline=OperationTimeline(2))

    for step in range(5):
        history.execute(move("a", step, step + 1))

    assert len(history.timeline.past) == 2
