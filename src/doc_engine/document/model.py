"""Core document data structures: surfaces, nodes, and table grids."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import ClassVar, Iterable, Optional, Sequence, Tuple, Union

SURFACE_TYPES = ("page", "canvas", "slide")


@dataclass(frozen=True, slots=True)
class Margin:
    t: float = 0
    r: float = 0
    b: float = 0
    l: float = 0  # noqa: E741


@dataclass(frozen=True, slots=True)
class Surface:
    """A page, canvas, or slide that nodes are placed on."""

    id: str
    type: str = "page"
    w: float = 210
    h: float = 297
    margin: Optional[Margin] = None
    bg: Optional[str] = None
    master_id: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("surface id cannot be empty")
        if self.type not in SURFACE_TYPES:
            raise ValueError(f"Unknown surface type '{self.type}'")


@dataclass(frozen=True, slots=True)
class Cell:
    """Grid occupant anchored at ``(r, c)`` covering ``rs`` x ``cs`` positions."""

    r: int
    c: int
    rs: int = 1
    cs: int = 1
    v: str = ""
    bg: Optional[str] = None
    border: Optional[str] = None
    border_color: Optional[str] = None
    border_w: Optional[float] = None
    font: Optional[str] = None
    font_size: Optional[float] = None
    align: Optional[str] = None
    v_align: Optional[str] = None
    color: Optional[str] = None

    def __post_init__(self) -> None:
        if self.r < 0 or self.c < 0:
            raise ValueError(f"Cell anchor ({self.r},{self.c}) cannot be negative")
        # Missing or zero spans are read as a single row/column.
        object.__setattr__(self, "rs", self.rs or 1)
        object.__setattr__(self, "cs", self.cs or 1)

    @property
    def anchor(self) -> Tuple[int, int]:
        return (self.r, self.c)

    @property
    def last_row(self) -> int:
        return self.r + self.rs - 1

    @property
    def last_col(self) -> int:
        return self.c + self.cs - 1

    @property
    def is_merged(self) -> bool:
        return self.rs > 1 or self.cs > 1

    def covers(self, row: int, col: int) -> bool:
        return self.r <= row <= self.last_row and self.c <= col <= self.last_col


@dataclass(frozen=True, slots=True)
class TableData:
    rows: Tuple[float, ...] = ()
    cols: Tuple[float, ...] = ()
    cells: Tuple[Cell, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "rows", tuple(self.rows))
        object.__setattr__(self, "cols", tuple(self.cols))
        object.__setattr__(self, "cells", tuple(self.cells))

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def col_count(self) -> int:
        return len(self.cols)


@dataclass(frozen=True, slots=True)
class Connection:
    node_id: str
    anchor: str = "auto"


@dataclass(frozen=True, slots=True, kw_only=True)
class NodeBase:
    """Attributes shared by every node kind; ``t`` is the discriminator."""

    t: ClassVar[str] = ""

    id: str
    s: str = ""
    r: float = 0
    opacity: float = 1
    locked: bool = False
    hidden: bool = False
    name: Optional[str] = None
    tags: Tuple[str, ...] = ()
    bind: Optional[str] = None
    is_placeholder: bool = False

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("node id cannot be empty")
        object.__setattr__(self, "tags", tuple(self.tags))


@dataclass(frozen=True, slots=True, kw_only=True)
class BoxNode(NodeBase):
    x: float = 0
    y: float = 0
    w: float
    h: float


@dataclass(frozen=True, slots=True, kw_only=True)
class TextNode(BoxNode):
    t: ClassVar[str] = "text"

    text: str = ""
    font: Optional[str] = None
    font_size: Optional[float] = None
    font_weight: Optional[int] = None
    italic: bool = False
    underline: bool = False
    line_through: bool = False
    align: Optional[str] = None
    v_align: Optional[str] = None
    fill: Optional[str] = None
    has_frame: bool = False
    border_color: Optional[str] = None
    border_width: Optional[float] = None
    background_color: Optional[str] = None
    padding: Optional[float] = None
    corner_radius: Optional[float] = None
    stroke: Optional[str] = None
    stroke_w: Optional[float] = None
    dynamic_content: Optional[str] = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ShapeNode(BoxNode):
    t: ClassVar[str] = "shape"

    shape: str = "rect"
    radius: Optional[float] = None
    fill: Optional[str] = None
    stroke: Optional[str] = None
    stroke_w: Optional[float] = None
    dash: Optional[Tuple[float, ...]] = None
    sides: Optional[int] = None


@dataclass(frozen=True, slots=True, kw_only=True)
class LineNode(NodeBase):
    t: ClassVar[str] = "line"

    pts: Tuple[float, ...]
    stroke: str = "#000000"
    stroke_w: float = 1
    arrows: Optional[Tuple[str, str]] = None
    dash: Optional[Tuple[float, ...]] = None
    routing: Optional[str] = None
    start_conn: Optional[Connection] = None
    end_conn: Optional[Connection] = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ImageNode(BoxNode):
    t: ClassVar[str] = "image"

    src: Optional[str] = None
    asset_id: Optional[str] = None


@dataclass(frozen=True, slots=True, kw_only=True)
class TableNode(BoxNode):
    t: ClassVar[str] = "table"

    table: TableData = field(default_factory=TableData)


@dataclass(frozen=True, slots=True, kw_only=True)
class WidgetNode(BoxNode):
    t: ClassVar[str] = "widget"

    widget: str


@dataclass(frozen=True, slots=True, kw_only=True)
class SignatureNode(BoxNode):
    t: ClassVar[str] = "signature"

    strokes: Tuple[Tuple[float, ...], ...] = ()
    stroke: str = "#000000"
    stroke_w: float = 1
    pressure_data: Optional[Tuple[Tuple[float, ...], ...]] = None
    use_pressure_sim: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class GroupNode(BoxNode):
    t: ClassVar[str] = "group"

    children: Tuple[str, ...] = ()


UnifiedNode = Union[
    TextNode,
    ShapeNode,
    LineNode,
    ImageNode,
    TableNode,
    WidgetNode,
    SignatureNode,
    GroupNode,
]

NODE_TYPES: dict[str, type] = {
    cls.t: cls
    for cls in (
        TextNode,
        ShapeNode,
        LineNode,
        ImageNode,
        TableNode,
        WidgetNode,
        SignatureNode,
        GroupNode,
    )
}


def node_field_names(node: NodeBase) -> frozenset[str]:
    return frozenset(f.name for f in fields(node))


@dataclass(frozen=True, slots=True)
class Doc:
    """Immutable document value: the surfaces and the z-ordered node list.

    Every edit goes through ``replace_nodes`` and yields a new ``Doc``; the
    previous value stays valid so operations can be reverted without
    snapshots.
    """

    surfaces: Tuple[Surface, ...] = ()
    nodes: Tuple[UnifiedNode, ...] = ()
    id: str = "doc"
    title: str = ""
    unit: str = "mm"
    v: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "surfaces", tuple(self.surfaces))
        object.__setattr__(self, "nodes", tuple(self.nodes))

    @property
    def node_ids(self) -> Tuple[str, ...]:
        return tuple(node.id for node in self.nodes)

    def find_node(self, node_id: str) -> Optional[UnifiedNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def index_of(self, node_id: str) -> Optional[int]:
        for index, node in enumerate(self.nodes):
            if node.id == node_id:
                return index
        return None

    def nodes_on(self, surface_id: str) -> Sequence[UnifiedNode]:
        return tuple(node for node in self.nodes if node.s == surface_id)

    def replace_nodes(self, nodes: Iterable[UnifiedNode]) -> "Doc":
        return Doc(
            surfaces=self.surfaces,
            nodes=tuple(nodes),
            id=self.id,
            title=self.title,
            unit=self.unit,
            v=self.v,
        )


__all__ = [
    "SURFACE_TYPES",
    "Margin",
    "Surface",
    "Cell",
    "TableData",
    "Connection",
    "NodeBase",
    "BoxNode",
    "TextNode",
    "ShapeNode",
    "LineNode",
    "ImageNode",
    "TableNode",
    "WidgetNode",
    "SignatureNode",
    "GroupNode",
    "UnifiedNode",
    "NODE_TYPES",
    "node_field_names",
    "Doc",
]
