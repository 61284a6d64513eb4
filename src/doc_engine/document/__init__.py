"""Document store: surfaces, node variants, table grids, codec, and validation."""

from .codec import doc_from_dict, doc_to_dict, node_from_dict, node_to_dict
from .model import (
    NODE_TYPES,
    BoxNode,
    Cell,
    Connection,
    Doc,
    GroupNode,
    ImageNode,
    LineNode,
    Margin,
    NodeBase,
    ShapeNode,
    SignatureNode,
    Surface,
    TableData,
    TableNode,
    TextNode,
    UnifiedNode,
    WidgetNode,
)
from .validation import (
    DocumentValidationError,
    ensure_valid_doc,
    validate_doc,
    validate_node,
    validate_table_cells,
)

__all__ = [
    "NODE_TYPES",
    "BoxNode",
    "Cell",
    "Connection",
    "Doc",
    "GroupNode",
    "ImageNode",
    "LineNode",
    "Margin",
    "NodeBase",
    "ShapeNode",
    "SignatureNode",
    "Surface",
    "TableData",
    "TableNode",
    "TextNode",
    "UnifiedNode",
    "WidgetNode",
    "DocumentValidationError",
    "ensure_valid_doc",
    "validate_doc",
    "validate_node",
    "validate_table_cells",
    "doc_from_dict",
    "doc_to_dict",
    "node_from_dict",
    "node_to_dict",
]
