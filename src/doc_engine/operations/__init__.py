"""Invertible document operations, builders, and wire codec."""

from .apply import apply_operation, apply_operations, merge_attributes, revert_operation
from .builders import (
    PASTE_STEP,
    apply_drafts,
    build_create,
    build_delete,
    build_from_draft,
    build_paste,
    build_reorder,
    build_replace,
    build_update,
    paste_nodes,
)
from .codec import operation_from_dict, operation_to_dict
from .models import (
    OPERATION_KINDS,
    CreateElement,
    DeleteElement,
    Operation,
    OperationError,
    ReorderElements,
    UpdateElement,
    invert_operation,
)

__all__ = [
    "OPERATION_KINDS",
    "CreateElement",
    "DeleteElement",
    "Operation",
    "OperationError",
    "ReorderElements",
    "UpdateElement",
    "invert_operation",
    "apply_operation",
    "apply_operations",
    "merge_attributes",
    "revert_operation",
    "PASTE_STEP",
    "apply_drafts",
    "build_paste",
    "paste_nodes",
    "build_create",
    "build_delete",
    "build_from_draft",
    "build_reorder",
    "build_replace",
    "build_update",
    "operation_from_dict",
    "operation_to_dict",
]
