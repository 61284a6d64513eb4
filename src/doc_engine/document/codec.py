"""Dict/JSON encoding for documents using the editor's wire keys.

Attribute names are snake_case in Python and camelCase on the wire
(``border_w`` <-> ``borderW``). Fields still holding their default value are
omitted when encoding and restored when decoding.
"""

from __future__ import annotations

import dataclasses
import re
from typing import Any, Dict, Mapping, Optional

from .model import (
    NODE_TYPES,
    Cell,
    Connection,
    Doc,
    Margin,
    NodeBase,
    Surface,
    TableData,
    UnifiedNode,
)
from .validation import DocumentValidationError

_TUPLE_FIELDS = {"tags", "pts", "dash", "arrows", "children"}
_NESTED_TUPLE_FIELDS = {"strokes", "pressure_data"}
_CONNECTION_FIELDS = {"start_conn", "end_conn"}
_UPPER = re.compile(r"(?<!^)(?=[A-Z])")


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _snake(name: str) -> str:
    return _UPPER.sub("_", name).lower()


def _is_default(spec: dataclasses.Field, value: Any) -> bool:
    if spec.default is not dataclasses.MISSING:
        return value == spec.default
    if spec.default_factory is not dataclasses.MISSING:
        return value == spec.default_factory()
    return False


def _encode_value(value: Any) -> Any:
    if isinstance(value, tuple):
        return [_encode_value(item) for item in value]
    if isinstance(value, Cell):
        return cell_to_dict(value)
    if isinstance(value, TableData):
        return {
            "rows": list(value.rows),
            "cols": list(value.cols),
            "cells": [cell_to_dict(cell) for cell in value.cells],
        }
    if isinstance(value, (Connection, Margin)):
        return _encode_dataclass(value)
    return value


def _encode_dataclass(obj: Any, *, keep: frozenset[str] = frozenset()) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    for spec in dataclasses.fields(obj):
        value = getattr(obj, spec.name)
        if spec.name not in keep and _is_default(spec, value):
            continue
        payload[_camel(spec.name)] = _encode_value(value)
    return payload


def _decode_fields(cls: type, data: Mapping[str, Any]) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {}
    for spec in dataclasses.fields(cls):
        key = _camel(spec.name)
        if key in data:
            kwargs[spec.name] = data[key]
        elif spec.name in data:
            kwargs[spec.name] = data[spec.name]
    return kwargs


def _coerce_attributes(kwargs: Dict[str, Any]) -> Dict[str, Any]:
    """Turn decoded JSON values (lists, dicts) into model values in place."""

    for name, value in kwargs.items():
        if value is None:
            continue
        if name in _TUPLE_FIELDS:
            kwargs[name] = tuple(value)
        elif name in _NESTED_TUPLE_FIELDS:
            kwargs[name] = tuple(tuple(item) for item in value)
        elif name in _CONNECTION_FIELDS and isinstance(value, Mapping):
            kwargs[name] = Connection(**_decode_fields(Connection, value))
        elif name == "table" and isinstance(value, Mapping):
            kwargs[name] = table_from_dict(value)
    return kwargs


def cell_to_dict(cell: Cell) -> Dict[str, Any]:
    return _encode_dataclass(cell, keep=frozenset({"r", "c", "v"}))


def cell_from_dict(data: Mapping[str, Any]) -> Cell:
    kwargs = _decode_fields(Cell, data)
    kwargs.setdefault("v", "")
    return Cell(**kwargs)


def table_from_dict(data: Mapping[str, Any]) -> TableData:
    return TableData(
        rows=tuple(data.get("rows", ())),
        cols=tuple(data.get("cols", ())),
        cells=tuple(cell_from_dict(cell) for cell in data.get("cells", ())),
    )


def node_to_dict(node: UnifiedNode) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"t": node.t}
    payload.update(_encode_dataclass(node, keep=frozenset({"id", "s"})))
    return payload


def node_from_dict(data: Mapping[str, Any]) -> UnifiedNode:
    tag = data.get("t")
    cls = NODE_TYPES.get(str(tag))
    if cls is None:
        raise DocumentValidationError(
            f"Unknown node type '{tag}'", errors=(f"t: unknown node type {tag!r}",)
        )
    kwargs = _coerce_attributes(_decode_fields(cls, data))
    try:
        return cls(**kwargs)
    except (TypeError, ValueError) as exc:
        node_id = data.get("id", "?")
        raise DocumentValidationError(
            f"Node '{node_id}' could not be decoded", errors=(str(exc),)
        ) from exc


def surface_to_dict(surface: Surface) -> Dict[str, Any]:
    return _encode_dataclass(surface, keep=frozenset({"id", "type", "w", "h"}))


def surface_from_dict(data: Mapping[str, Any]) -> Surface:
    kwargs = _decode_fields(Surface, data)
    if isinstance(kwargs.get("margin"), Mapping):
        kwargs["margin"] = Margin(**kwargs["margin"])
    return Surface(**kwargs)


def doc_to_dict(doc: Doc) -> Dict[str, Any]:
    return {
        "v": doc.v,
        "id": doc.id,
        "title": doc.title,
        "unit": doc.unit,
        "surfaces": [surface_to_dict(surface) for surface in doc.surfaces],
        "nodes": [node_to_dict(node) for node in doc.nodes],
    }


def doc_from_dict(data: Mapping[str, Any]) -> Doc:
    try:
        surfaces = tuple(surface_from_dict(item) for item in data.get("surfaces", ()))
    except (TypeError, ValueError) as exc:
        raise DocumentValidationError(
            "Surface could not be decoded", errors=(str(exc),)
        ) from exc
    return Doc(
        surfaces=surfaces,
        nodes=tuple(node_from_dict(item) for item in data.get("nodes", ())),
        id=str(data.get("id", "doc")),
        title=str(data.get("title", "")),
        unit=str(data.get("unit", "mm")),
        v=int(data.get("v", 1)),
    )


def attributes_to_wire(changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Encode a partial node attribute mapping (``UpdateElement`` payloads)."""

    return {_camel(name): _encode_value(value) for name, value in changes.items()}


def attributes_from_wire(
    data: Mapping[str, Any], node_type: Optional[type] = None
) -> Dict[str, Any]:
    """Decode a partial attribute mapping.

    With ``node_type`` only that class's fields are kept; without it every
    key is converted to snake_case and passed through.
    """

    if node_type is None:
        kwargs = {_snake(key): value for key, value in data.items()}
    elif isinstance(node_type, type) and issubclass(node_type, NodeBase):
        kwargs = _decode_fields(node_type, data)
    else:
        raise TypeError("node_type must be a node class")
    return _coerce_attributes(kwargs)


__all__ = [
    "cell_to_dict",
    "cell_from_dict",
    "table_from_dict",
    "node_to_dict",
    "node_from_dict",
    "surface_to_dict",
    "surface_from_dict",
    "doc_to_dict",
    "doc_from_dict",
    "attributes_to_wire",
    "attributes_from_wire",
]
