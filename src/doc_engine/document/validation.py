"""Structural validation for documents, nodes, and table grids."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence, assert_never

from .model import (
    SURFACE_TYPES,
    Doc,
    GroupNode,
    ImageNode,
    LineNode,
    ShapeNode,
    SignatureNode,
    TableData,
    TableNode,
    TextNode,
    UnifiedNode,
    WidgetNode,
)

_COLOR = re.compile(r"^(#[0-9A-Fa-f]{6}|rgba?\(|hsla?\(|transparent)")
_ALIGN = {"l", "c", "r", "j"}
_CELL_ALIGN = {"l", "c", "r"}
_V_ALIGN = {"t", "m", "b"}


class DocumentValidationError(RuntimeError):
    """Raised when a document or node does not satisfy the schema."""

    def __init__(self, message: str, *, errors: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.errors = tuple(errors)


def validate_table_cells(table: TableData, *, require_partition: bool = True) -> List[str]:
    """Return grid errors: spans past the edge, collisions, and holes."""

    errors: List[str] = []
    occupied: set[tuple[int, int]] = set()
    row_count = len(table.rows)
    col_count = len(table.cols)

    for cell in table.cells:
        if cell.r + cell.rs > row_count:
            errors.append(
                f"Cell at ({cell.r},{cell.c}): rs={cell.rs} exceeds row count {row_count}"
            )
        if cell.c + cell.cs > col_count:
            errors.append(
                f"Cell at ({cell.r},{cell.c}): cs={cell.cs} exceeds col count {col_count}"
            )
        for r in range(cell.r, cell.r + cell.rs):
            for c in range(cell.c, cell.c + cell.cs):
                if (r, c) in occupied:
                    errors.append(f"Cell collision at ({r},{c})")
                occupied.add((r, c))

    if require_partition:
        for r in range(row_count):
            for c in range(col_count):
                if (r, c) not in occupied:
                    errors.append(f"Cell missing at ({r},{c})")
    return errors


def _color_errors(prefix: str, **colors: Optional[str]) -> List[str]:
    return [
        f"{prefix}.{name}: invalid color {value!r}"
        for name, value in colors.items()
        if value is not None and not _COLOR.match(value)
    ]


def _box_errors(prefix: str, node) -> List[str]:
    errors = []
    if node.w <= 0:
        errors.append(f"{prefix}.w: must be positive")
    if node.h <= 0:
        errors.append(f"{prefix}.h: must be positive")
    return errors


def validate_node(node: UnifiedNode) -> List[str]:
    prefix = node.id
    errors: List[str] = []
    if not node.s:
        errors.append(f"{prefix}.s: surface id cannot be empty")
    if not 0 <= node.opacity <= 1:
        errors.append(f"{prefix}.opacity: must be between 0 and 1")

    if isinstance(node, TextNode):
        errors += _box_errors(prefix, node)
        if node.align is not None and node.align not in _ALIGN:
            errors.append(f"{prefix}.align: invalid value {node.align!r}")
        if node.v_align is not None and node.v_align not in _V_ALIGN:
            errors.append(f"{prefix}.vAlign: invalid value {node.v_align!r}")
        errors += _color_errors(
            prefix,
            fill=node.fill,
            borderColor=node.border_color,
            backgroundColor=node.background_color,
            stroke=node.stroke,
        )
    elif isinstance(node, ShapeNode):
        errors += _box_errors(prefix, node)
        if node.sides is not None and node.sides < 3:
            errors.append(f"{prefix}.sides: must be at least 3")
        errors += _color_errors(prefix, fill=node.fill, stroke=node.stroke)
    elif isinstance(node, LineNode):
        if len(node.pts) < 4:
            errors.append(f"{prefix}.pts: needs at least two points")
        if node.stroke_w <= 0:
            errors.append(f"{prefix}.strokeW: must be positive")
        errors += _color_errors(prefix, stroke=node.stroke)
    elif isinstance(node, TableNode):
        errors += _box_errors(prefix, node)
        if any(size <= 0 for size in node.table.rows):
            errors.append(f"{prefix}.table.rows: sizes must be positive")
        if any(size <= 0 for size in node.table.cols):
            errors.append(f"{prefix}.table.cols: sizes must be positive")
        for cell in node.table.cells:
            if cell.align is not None and cell.align not in _CELL_ALIGN:
                errors.append(f"{prefix}.table.cells[{cell.r},{cell.c}].align: invalid")
            if cell.v_align is not None and cell.v_align not in _V_ALIGN:
                errors.append(f"{prefix}.table.cells[{cell.r},{cell.c}].vAlign: invalid")
        errors += [
            f"{prefix}.table: {error}" for error in validate_table_cells(node.table)
        ]
    elif isinstance(node, SignatureNode):
        errors += _box_errors(prefix, node)
        if node.stroke_w <= 0:
            errors.append(f"{prefix}.strokeW: must be positive")
        errors += _color_errors(prefix, stroke=node.stroke)
    elif isinstance(node, (ImageNode, WidgetNode, GroupNode)):
        errors += _box_errors(prefix, node)
    else:
        assert_never(node)
    return errors


def validate_doc(doc: Doc) -> List[str]:
    errors: List[str] = []
    if doc.v != 1:
        errors.append(f"v: unsupported version {doc.v}")
    if doc.unit != "mm":
        errors.append(f"unit: expected 'mm', got {doc.unit!r}")
    if not doc.surfaces:
        errors.append("surfaces: at least one surface is required")
    for surface in doc.surfaces:
        if surface.type not in SURFACE_TYPES:
            errors.append(f"surfaces.{surface.id}.type: invalid value {surface.type!r}")
        if surface.w <= 0 or surface.h <= 0:
            errors.append(f"surfaces.{surface.id}: size must be positive")
    errors += [f"nodes: duplicate id '{node_id}'" for node_id in _duplicates(doc.node_ids)]
    for node in doc.nodes:
        errors += validate_node(node)
    return errors


def ensure_valid_doc(doc: Doc) -> Doc:
    errors = validate_doc(doc)
    if errors:
        raise DocumentValidationError(
            f"Document '{doc.id}' failed validation ({len(errors)} errors)",
            errors=errors,
        )
    return doc


def _duplicates(ids: Iterable[str]) -> List[str]:
    seen: set[str] = set()
    repeated: List[str] = []
    for node_id in ids:
        if node_id in seen and node_id not in repeated:
            repeated.append(node_id)
        seen.add(node_id)
    return repeated


__all__ = [
    "DocumentValidationError",
    "validate_table_cells",
    "validate_node",
    "validate_doc",
    "ensure_valid_doc",
]
