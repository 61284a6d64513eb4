"""Invertible edit records applied to a ``Doc``."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import ClassVar, Mapping, Optional, Tuple, Union

from doc_engine.document.model import UnifiedNode


class OperationError(RuntimeError):
    """Raised when an operation cannot be built or decoded."""

    def __init__(self, message: str, *, operation: object | None = None) -> None:
        super().__init__(message)
        self.operation = operation


@dataclass(frozen=True, slots=True)
class CreateElement:
    kind: ClassVar[str] = "create-element"

    element: UnifiedNode
    index: Optional[int] = None


@dataclass(frozen=True, slots=True)
class UpdateElement:
    """Attribute patch; ``prev`` holds the values ``next`` overwrites."""

    kind: ClassVar[str] = "update-element"
    # Mapping payloads are not hashable.
    __hash__ = None  # type: ignore[assignment]

    id: str
    prev: Mapping[str, object]
    next: Mapping[str, object]

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("UpdateElement id cannot be empty")
        object.__setattr__(self, "prev", MappingProxyType(dict(self.prev)))
        object.__setattr__(self, "next", MappingProxyType(dict(self.next)))


@dataclass(frozen=True, slots=True)
class DeleteElement:
    """Removal of ``prev_element`` from the node list.

    ``index`` is the node's position before the delete. Reverting re-inserts
    it there; without an index the node is appended, so the reverted document
    only equals the original when the node was last. ``build_delete`` always
    records it.
    """

    kind: ClassVar[str] = "delete-element"

    id: str
    prev_element: UnifiedNode
    index: Optional[int] = None

    def __post_init__(self) -> None:
        if self.id != self.prev_element.id:
            raise ValueError(
                f"DeleteElement id '{self.id}' does not match element '{self.prev_element.id}'"
            )


@dataclass(frozen=True, slots=True)
class ReorderElements:
    kind: ClassVar[str] = "reorder-elements"

    prev_order: Tuple[str, ...]
    next_order: Tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "prev_order", tuple(self.prev_order))
        object.__setattr__(self, "next_order", tuple(self.next_order))


Operation = Union[CreateElement, UpdateElement, DeleteElement, ReorderElements]

OPERATION_KINDS: dict[str, type] = {
    cls.kind: cls
    for cls in (CreateElement, UpdateElement, DeleteElement, ReorderElements)
}


def invert_operation(op: Operation) -> Optional[Operation]:
    """Return the operation that undoes ``op``, or ``None`` for unknown kinds."""

    if isinstance(op, CreateElement):
        return DeleteElement(op.element.id, op.element, op.index)
    if isinstance(op, UpdateElement):
        return UpdateElement(op.id, prev=op.next, next=op.prev)
    if isinstance(op, DeleteElement):
        return CreateElement(op.prev_element, op.index)
    if isinstance(op, ReorderElements):
        return ReorderElements(prev_order=op.next_order, next_order=op.prev_order)
    return None


__all__ = [
    "OperationError",
    "CreateElement",
    "UpdateElement",
    "DeleteElement",
    "ReorderElements",
    "Operation",
    "OPERATION_KINDS",
    "invert_operation",
]
