"""Data models for paintings, painters and the graph built from them."""

from dataclasses import dataclass, field
from typing import Literal

# Valid node kinds in the graph
NodeKind = Literal["painting", "painter"]

PAINTING: NodeKind = "painting"
PAINTER: NodeKind = "painter"


@dataclass(frozen=True)
class Color:
    """A parsed palette entry."""

    r: int
    g: int
    b: int
    hex: str  # six hex digits, no leading '#'

    @property
    def css(self) -> str:
        return f"#{self.hex}"


@dataclass(frozen=True)
class PaintingRecord:
    """One dataset row, before any validation or capping."""

    cluster: str  # Artist Name
    label: str  # Filename, unique id of the painting
    name: str  # Painting Title, falls back to the filename
    colors: tuple[str, ...] = ()  # raw Color 1..Color 8 strings
    src: str = ""  # painting image path
    painter_src: str = ""  # Artist Filename, may be empty


@dataclass
class ClusterInfo:
    """Per-painter aggregate collected while scanning records."""

    count: int = 0
    src: str = ""  # representative painter image
    seen: int = 0  # well-formed records before capping


@dataclass(frozen=True)
class Node:
    """A graph node; positions are owned by the layout engine."""

    label: str
    cluster: str
    kind: NodeKind
    radius: float
    name: str = ""
    src: str = ""
    colors: tuple[Color, ...] = ()
    links: tuple[str, ...] = ()  # peer labels to connect to
    count: int = 0  # paintings shown for a painter node

    @property
    def is_painting(self) -> bool:
        return self.kind == PAINTING

    @property
    def is_painter(self) -> bool:
        return self.kind == PAINTER


@dataclass(frozen=True)
class Edge:
    """An undirected link between two node labels."""

    source: str
    target: str
    distance: float  # rest length
    strength: float = 1.0


@dataclass
class PaintingGraph:
    """Nodes and deduplicated edges, in dense index order."""

    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    clusters: dict[str, ClusterInfo] = field(default_factory=dict)

    # Lookup table built after construction
    _index: dict[str, int] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        self._build_index()

    def _build_index(self) -> None:
        self._index = {node.label: i for i, node in enumerate(self.nodes)}

    def index_of(self, label: str) -> int:
        """Dense index of a node label (KeyError if unknown)."""
        return self._index[label]

    def node(self, label: str) -> Node | None:
        i = self._index.get(label)
        return self.nodes[i] if i is not None else None

    def __contains__(self, label: object) -> bool:
        return label in self._index

    @property
    def paintings(self) -> list[Node]:
        return [n for n in self.nodes if n.is_painting]

    @property
    def painters(self) -> list[Node]:
        return [n for n in self.nodes if n.is_painter]

    def paintings_of(self, cluster: str) -> list[Node]:
        return [n for n in self.nodes if n.is_painting and n.cluster == cluster]
