"""Wire format for operations (``kind``-tagged dicts)."""

from __future__ import annotations

from typing import Any, Dict, Mapping

from doc_engine.document.codec import (
    attributes_from_wire,
    attributes_to_wire,
    node_from_dict,
    node_to_dict,
)
from doc_engine.document.validation import DocumentValidationError

from .models import (
    CreateElement,
    DeleteElement,
    Operation,
    OperationError,
    ReorderElements,
    UpdateElement,
)


def operation_to_dict(op: Operation) -> Dict[str, Any]:
    if isinstance(op, CreateElement):
        payload: Dict[str, Any] = {"kind": op.kind, "element": node_to_dict(op.element)}
    elif isinstance(op, UpdateElement):
        payload = {
            "kind": op.kind,
            "id": op.id,
            "prev": attributes_to_wire(op.prev),
            "next": attributes_to_wire(op.next),
        }
    elif isinstance(op, DeleteElement):
        payload = {
            "kind": op.kind,
            "id": op.id,
            "prevElement": node_to_dict(op.prev_element),
        }
    elif isinstance(op, ReorderElements):
        return {
            "kind": op.kind,
            "prevOrder": list(op.prev_order),
            "nextOrder": list(op.next_order),
        }
    else:
        raise OperationError(f"Cannot encode {type(op).__name__}", operation=op)

    index = getattr(op, "index", None)
    if index is not None:
        payload["index"] = index
    return payload


def operation_from_dict(data: Mapping[str, Any]) -> Operation:
    kind = data.get("kind")
    try:
        if kind == "create-element":
            return CreateElement(node_from_dict(data["element"]), data.get("index"))
        if kind == "update-element":
            return UpdateElement(
                str(data["id"]),
                prev=attributes_from_wire(data.get("prev", {})),
                next=attributes_from_wire(data["next"]),
            )
        if kind == "delete-element":
            return DeleteElement(
                str(data["id"]), node_from_dict(data["prevElement"]), data.get("index")
            )
        if kind == "reorder-elements":
            return ReorderElements(
                prev_order=tuple(data["prevOrder"]),
                next_order=tuple(data["nextOrder"]),
            )
    except KeyError as exc:
        raise OperationError(
            f"Operation '{kind}' is missing field {exc.args[0]!r}", operation=data
        ) from exc
    except (DocumentValidationError, ValueError) as exc:
        raise OperationError(str(exc), operation=data) from exc
    raise OperationError(f"Unknown operation kind '{kind}'", operation=data)


__all__ = ["operation_to_dict", "operation_from_dict"]
