from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple, Union

import networkx as nx
import numpy as np

Position = Tuple[float, float]


class Orientation(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"

    def flipped(self) -> "Orientation":
        if self is Orientation.HORIZONTAL:
            return Orientation.VERTICAL
        return Orientation.HORIZONTAL


@dataclass(slots=True, frozen=True)
class NodeRef:
    index: int


@dataclass(slots=True, frozen=True)
class ConnectorRef:
    index: int


EndpointRef = Union[NodeRef, ConnectorRef]


@dataclass(slots=True)
class Node:
    """A cause (or the synthetic tail anchor of the spine)."""

    name: str
    depth: int
    orientation: Orientation
    region: Optional[int] = None
    subtree_size: int = 1
    parent: Optional[int] = None
    children: List[int] = field(default_factory=list)
    child_index: int = 0
    connector: Optional[EndpointRef] = None
    is_root: bool = False
    is_tail: bool = False

    @property
    def horizontal(self) -> bool:
        return self.orientation is Orientation.HORIZONTAL

    @property
    def vertical(self) -> bool:
        return self.orientation is Orientation.VERTICAL


@dataclass(slots=True)
class Connector:
    """Routing point placed on the segment ``between[0]``–``between[1]``."""

    between: Tuple[EndpointRef, EndpointRef]
    child: int
    depth: int
    child_idx: int = 0
    max_child_idx: int = 0
    total_links: List[int] = field(default_factory=list)


@dataclass(slots=True)
class Link:
    source: EndpointRef
    target: EndpointRef
    depth: int
    is_arrow: bool = False


@dataclass(slots=True)
class FishboneGraph:
    """Arena holding nodes, connectors, links and per-body physical state.

    Nodes occupy body indices ``0..len(nodes) - 1`` and connectors follow, so
    the ``positions``/``velocities``/``pinned`` arrays are shared by both.
    ``pinned`` holds ``nan`` for free bodies.
    """

    nodes: List[Node]
    connectors: List[Connector]
    links: List[Link]
    root_index: int
    tail_index: int
    root_total_links: List[int] = field(default_factory=list)
    positions: np.ndarray = field(init=False)
    velocities: np.ndarray = field(init=False)
    pinned: np.ndarray = field(init=False)

    def __post_init__(self) -> None:
        count = self.body_count
        self.positions = np.full((count, 2), np.nan, dtype=float)
        self.velocities = np.zeros((count, 2), dtype=float)
        self.pinned = np.full((count, 2), np.nan, dtype=float)

    @property
    def body_count(self) -> int:
        return len(self.nodes) + len(self.connectors)

    @property
    def root(self) -> Node:
        return self.nodes[self.root_index]

    @property
    def tail(self) -> Node:
        return self.nodes[self.tail_index]

    @property
    def root_ref(self) -> NodeRef:
        return NodeRef(self.root_index)

    @property
    def tail_ref(self) -> NodeRef:
        return NodeRef(self.tail_index)

    def body_index(self, ref: EndpointRef) -> int:
        if isinstance(ref, NodeRef):
            return ref.index
        if isinstance(ref, ConnectorRef):
            return len(self.nodes) + ref.index
        raise TypeError(f"Unsupported endpoint reference: {ref!r}")

    def ref_for_body(self, body: int) -> EndpointRef:
        if body < len(self.nodes):
            return NodeRef(body)
        return ConnectorRef(body - len(self.nodes))

    def iter_refs(self) -> Iterator[EndpointRef]:
        for idx in range(len(self.nodes)):
            yield NodeRef(idx)
        for idx in range(len(self.connectors)):
            yield ConnectorRef(idx)

    def node_by_name(self, name: str) -> Node:
        for node in self.nodes:
            if not node.is_tail and node.name == name:
                return node
        raise KeyError(f"Node {name!r} not found")

    def ref_by_name(self, name: str) -> NodeRef:
        for idx, node in enumerate(self.nodes):
            if not node.is_tail and node.name == name:
                return NodeRef(idx)
        raise KeyError(f"Node {name!r} not found")

    def depth_of(self, ref: EndpointRef) -> int:
        if isinstance(ref, NodeRef):
            return self.nodes[ref.index].depth
        return self.connectors[ref.index].depth

    def label_of(self, ref: EndpointRef) -> str:
        if isinstance(ref, NodeRef):
            node = self.nodes[ref.index]
            return "tail" if node.is_tail else node.name
        connector = self.connectors[ref.index]
        return f"{self.nodes[connector.child].name}@connector"

    def fan_out(self, ref: EndpointRef) -> int:
        """Number of fan-out positions along segments ending at ``ref``."""

        values = [
            connector.max_child_idx
            for connector in self.connectors
            if connector.between[1] == ref
        ]
        return max(values, default=0)

    def position(self, ref: EndpointRef) -> Position:
        x, y = self.positions[self.body_index(ref)]
        return float(x), float(y)

    def set_position(self, ref: EndpointRef, x: float, y: float) -> None:
        self.positions[self.body_index(ref)] = (x, y)

    def pin(self, ref: EndpointRef, x: float, y: float) -> None:
        body = self.body_index(ref)
        self.pinned[body] = (x, y)
        self.positions[body] = (x, y)
        self.velocities[body] = (0.0, 0.0)

    def unpin(self, ref: EndpointRef) -> None:
        self.pinned[self.body_index(ref)] = (np.nan, np.nan)

    def is_pinned(self, ref: EndpointRef) -> bool:
        return bool(np.all(np.isfinite(self.pinned[self.body_index(ref)])))

    def descendants(self, node_index: int) -> Iterator[int]:
        """Depth-first traversal below (and including) ``node_index``."""

        stack = [node_index]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(self.nodes[current].children))

    def positions_by_ref(self) -> Dict[EndpointRef, Position]:
        return {ref: self.position(ref) for ref in self.iter_refs()}

    def to_networkx(self) -> nx.DiGraph:
        """Convert the bodies and links to a NetworkX ``DiGraph`` keyed by reference.

        Cause names need not be unique, so the readable name is stored in the
        ``label`` attribute instead of being used as the graph key.
        """

        graph = nx.DiGraph()
        for ref in self.iter_refs():
            graph.add_node(
                ref,
                label=self.label_of(ref),
                depth=self.depth_of(ref),
                connector=isinstance(ref, ConnectorRef),
            )
        for link in self.links:
            # Parallel arrow/fan-out links collapse into one edge; keep the arrow.
            arrow = link.is_arrow
            if graph.has_edge(link.target, link.source):
                arrow = arrow or graph.edges[link.target, link.source]["arrow"]
                graph.remove_edge(link.target, link.source)
            graph.add_edge(link.source, link.target, depth=link.depth, arrow=arrow)
        return graph
