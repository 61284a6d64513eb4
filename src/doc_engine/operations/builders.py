"""Build operations from the current document so they can be inverted later.

An ``UpdateElement`` must carry the values it replaces and a
``DeleteElement`` the element it removes. Builders read those from the
document at construction time; nothing is reconstructed on undo.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple

from doc_engine.document.codec import attributes_from_wire, node_from_dict
from doc_engine.document.model import BoxNode, Doc, UnifiedNode, node_field_names
from doc_engine.document.validation import DocumentValidationError
from doc_engine.runtime import telemetry

from .apply import apply_operation
from .models import (
    CreateElement,
    DeleteElement,
    Operation,
    OperationError,
    ReorderElements,
    UpdateElement,
)

_IMMUTABLE_KEYS = frozenset({"id", "t"})

# Fraction of the surface width added to x/y on each successive paste.
PASTE_STEP = 0.01


def _new_id() -> str:
    return str(uuid.uuid4())


def _require_node(doc: Doc, node_id: str) -> UnifiedNode:
    node = doc.find_node(node_id)
    if node is None:
        raise OperationError(f"Node '{node_id}' not found in document '{doc.id}'")
    return node


def build_create(
    doc: Doc, element: UnifiedNode, *, index: Optional[int] = None
) -> CreateElement:
    if doc.find_node(element.id) is not None:
        raise OperationError(f"Node id '{element.id}' already exists")
    return CreateElement(element, index)


def build_update(doc: Doc, node_id: str, changes: Mapping[str, object]) -> UpdateElement:
    node = _require_node(doc, node_id)
    blocked = _IMMUTABLE_KEYS.intersection(changes)
    if blocked:
        raise OperationError(
            f"Cannot change {sorted(blocked)} of node '{node_id}'"
        )
    unknown = set(changes) - node_field_names(node)
    if unknown:
        raise OperationError(
            f"Node '{node_id}' ({node.t}) has no attributes {sorted(unknown)}"
        )
    prev = {key: getattr(node, key) for key in changes}
    return UpdateElement(node_id, prev=prev, next=dict(changes))


def build_replace(doc: Doc, updated: UnifiedNode) -> UpdateElement:
    """Build an update that turns the stored node into ``updated``.

    Only attributes that differ are recorded.
    """

    node = _require_node(doc, updated.id)
    if type(node) is not type(updated):
        raise OperationError(
            f"Cannot replace {node.t} node '{node.id}' with a {updated.t} node"
        )
    changes = {
        key: getattr(updated, key)
        for key in node_field_names(node)
        if key != "id" and getattr(node, key) != getattr(updated, key)
    }
    return build_update(doc, node.id, changes)


def build_delete(doc: Doc, node_id: str) -> DeleteElement:
    node = _require_node(doc, node_id)
    return DeleteElement(node_id, node, doc.index_of(node_id))


def build_reorder(doc: Doc, next_order: Sequence[str]) -> ReorderElements:
    known = set(doc.node_ids)
    unknown = [node_id for node_id in next_order if node_id not in known]
    if unknown:
        raise OperationError(f"Cannot reorder unknown nodes {unknown}")
    repeated = sorted({node_id for node_id in next_order if next_order.count(node_id) > 1})
    if repeated:
        raise OperationError(f"Reorder lists nodes more than once: {repeated}")
    return ReorderElements(prev_order=doc.node_ids, next_order=tuple(next_order))


def paste_nodes(
    elements: Iterable[UnifiedNode],
    surface_id: str,
    surface_width: float,
    paste_count: int,
    *,
    id_factory: Callable[[], str] = _new_id,
) -> List[UnifiedNode]:
    """Clone clipboard nodes onto ``surface_id`` with fresh ids.

    Box nodes are shifted right and down by 1% of the surface width per paste
    in the current sequence; lines keep their points.
    """

    offset = surface_width * PASTE_STEP * paste_count
    pasted: List[UnifiedNode] = []
    for element in elements:
        changes: dict[str, object] = {"id": id_factory(), "s": surface_id}
        if isinstance(element, BoxNode):
            changes["x"] = element.x + offset
            changes["y"] = element.y + offset
        pasted.append(replace(element, **changes))
    return pasted


def build_paste(
    doc: Doc,
    elements: Iterable[UnifiedNode],
    surface_id: str,
    paste_count: int = 1,
    *,
    id_factory: Callable[[], str] = _new_id,
) -> List[CreateElement]:
    surface = next((item for item in doc.surfaces if item.id == surface_id), None)
    if surface is None:
        raise OperationError(f"Surface '{surface_id}' not found in document '{doc.id}'")
    nodes = paste_nodes(
        elements, surface_id, surface.w, paste_count, id_factory=id_factory
    )
    ops: List[CreateElement] = []
    taken = set(doc.node_ids)
    for node in nodes:
        if node.id in taken:
            raise OperationError(f"Pasted node id '{node.id}' already exists")
        taken.add(node.id)
        ops.append(CreateElement(node))
    return ops


def build_from_draft(doc: Doc, draft: Mapping[str, Any]) -> Operation:
    """Complete a wire-format draft that omits the inverse payload.

    Drafts come from generators that only know the target state:
    ``{"kind": "update-element", "id": ..., "next": {...}}``,
    ``{"kind": "delete-element", "id": ...}``,
    ``{"kind": "reorder-elements", "nextOrder": [...]}`` or
    ``{"kind": "create-element", "element": {...}}``.
    """

    kind = draft.get("kind")
    try:
        if kind == "create-element":
            return build_create(doc, node_from_dict(draft["element"]))
        if kind == "update-element":
            node = _require_node(doc, str(draft["id"]))
            raw_next = dict(draft["next"])
            if "t" in raw_next:
                raise OperationError(
                    f"update-element cannot change the type of node '{node.id}'",
                    operation=draft,
                )
            return build_update(doc, node.id, attributes_from_wire(raw_next, type(node)))
        if kind == "delete-element":
            return build_delete(doc, str(draft["id"]))
        if kind == "reorder-elements":
            return build_reorder(doc, [str(node_id) for node_id in draft["nextOrder"]])
    except KeyError as exc:
        raise OperationError(
            f"Draft '{kind}' is missing field {exc.args[0]!r}", operation=draft
        ) from exc
    except DocumentValidationError as exc:
        raise OperationError(str(exc), operation=draft) from exc
    raise OperationError(f"Unknown operation kind '{kind}'", operation=draft)


def apply_drafts(
    doc: Doc, drafts: Iterable[Mapping[str, Any]]
) -> Tuple[Doc, List[Operation]]:
    """Build and apply drafts in sequence, each against the running document."""

    current = doc
    operations: List[Operation] = []
    with telemetry.span("operations::apply_drafts", component="operations") as handle:
        for draft in drafts:
            op = build_from_draft(current, draft)
            current = apply_operation(current, op)
            operations.append(op)
        handle.add_metadata("count", len(operations))
    return current, operations


__all__ = [
    "build_create",
    "build_update",
    "build_replace",
    "build_delete",
    "build_reorder",
    "PASTE_STEP",
    "paste_nodes",
    "build_paste",
    "build_from_draft",
    "apply_drafts",
]
