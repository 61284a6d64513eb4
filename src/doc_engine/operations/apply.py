"""Forward and inverse application of operations to documents."""

from __future__ import annotations

from dataclasses import replace
from functools import reduce
from typing import Iterable, List, Mapping, Sequence

from doc_engine.document.model import Doc, UnifiedNode, node_field_names

from .models import (
    CreateElement,
    DeleteElement,
    Operation,
    ReorderElements,
    UpdateElement,
    invert_operation,
)


def merge_attributes(node: UnifiedNode, changes: Mapping[str, object]) -> UnifiedNode:
    """Overlay ``changes`` on ``node``; ``id`` and unknown keys are ignored."""

    allowed = node_field_names(node)
    patch = {key: value for key, value in changes.items() if key in allowed and key != "id"}
    if not patch:
        return node
    return replace(node, **patch)


def _ordered(nodes: Sequence[UnifiedNode], order: Sequence[str]) -> List[UnifiedNode]:
    by_id = {node.id: node for node in nodes}
    emitted: set[str] = set()
    head: List[UnifiedNode] = []
    for node_id in order:
        if node_id in by_id and node_id not in emitted:
            head.append(by_id[node_id])
            emitted.add(node_id)
    tail = [node for node in nodes if node.id not in emitted]
    return head + tail


def apply_operation(doc: Doc, op: Operation) -> Doc:
    """Return the document after ``op``; unknown operation kinds are a no-op."""

    if isinstance(op, CreateElement):
        nodes = list(doc.nodes)
        if op.index is None:
            nodes.append(op.element)
        else:
            nodes.insert(max(0, op.index), op.element)
        return doc.replace_nodes(nodes)
    if isinstance(op, UpdateElement):
        return doc.replace_nodes(
            merge_attributes(node, op.next) if node.id == op.id else node
            for node in doc.nodes
        )
    if isinstance(op, DeleteElement):
        return doc.replace_nodes(node for node in doc.nodes if node.id != op.id)
    if isinstance(op, ReorderElements):
        return doc.replace_nodes(_ordered(doc.nodes, op.next_order))
    return doc


def revert_operation(doc: Doc, op: Operation) -> Doc:
    """Undo ``op`` on a document it was previously applied to."""

    inverse = invert_operation(op)
    if inverse is None:
        return doc
    return apply_operation(doc, inverse)


def apply_operations(doc: Doc, ops: Iterable[Operation]) -> Doc:
    return reduce(apply_operation, ops, doc)


__all__ = [
    "merge_attributes",
    "apply_operation",
    "revert_operation",
    "apply_operations",
]
