"""
Graph data model for the editor.

Nodes carry a tagged position: ``Simulated`` while the layout engine owns it,
``Pinned`` while a drag gesture holds it in place. The loaded graph is kept in
a networkx DiGraph so edge uniqueness and incident-edge removal come for free.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union
import uuid

import networkx as nx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Simulated:
    """Position computed by the layout engine."""
    x: float
    y: float


@dataclass(frozen=True)
class Pinned:
    """Position forced by a manual interaction; the simulation does not move it."""
    x: float
    y: float


Position = Union[Simulated, Pinned]


@dataclass
class Node:
    id: str
    name: str
    position: Position = field(default_factory=lambda: Simulated(0.0, 0.0))
    vx: float = 0.0
    vy: float = 0.0

    @property
    def x(self) -> float:
        return self.position.x

    @property
    def y(self) -> float:
        return self.position.y

    @property
    def is_pinned(self) -> bool:
        return isinstance(self.position, Pinned)

    @property
    def fx(self) -> Optional[float]:
        return self.position.x if isinstance(self.position, Pinned) else None

    @property
    def fy(self) -> Optional[float]:
        return self.position.y if isinstance(self.position, Pinned) else None

    def pin(self, x: Optional[float] = None, y: Optional[float] = None) -> None:
        """Pin the node at (x, y), or where it currently is."""
        self.position = Pinned(self.x if x is None else x, self.y if y is None else y)
        self.vx = 0.0
        self.vy = 0.0

    def unpin(self) -> None:
        self.position = Simulated(self.x, self.y)

    def move_to(self, x: float, y: float) -> None:
        """Set the coordinates, keeping the current position kind."""
        if isinstance(self.position, Pinned):
            self.position = Pinned(x, y)
        else:
            self.position = Simulated(x, y)


@dataclass(frozen=True)
class Edge:
    source: str
    target: str


def make_node(name: str, x: float = 0.0, y: float = 0.0, node_id: Optional[str] = None) -> Node:
    """
    Create a node at a simulated position.
    ID defaults to a UUID4 string; server-created nodes pass their own id.
    """
    return Node(id=node_id or str(uuid.uuid4()), name=name, position=Simulated(float(x), float(y)))


class GraphSnapshot:
    """
    The node set and edge set currently loaded for one graph.

    Every structural change bumps ``version`` so the layout engine and the
    renderer can tell when they are looking at stale sets.
    """

    def __init__(self, graph_id: Optional[str] = None):
        self.graph_id = graph_id
        self.G = nx.DiGraph()
        self.version = 0

    @classmethod
    def from_records(cls, graph_id: Optional[str], nodes: Iterable[Node],
                     edges: Iterable[Tuple[str, str]]) -> 'GraphSnapshot':
        """Build a snapshot. Edges whose endpoints are unknown are logged and dropped."""
        snapshot = cls(graph_id)
        for node in nodes:
            snapshot.G.add_node(node.id, node=node)
        for source, target in edges:
            if source in snapshot.G and target in snapshot.G:
                snapshot.G.add_edge(source, target)
            else:
                logger.warning(f"Dropping edge with unknown endpoint: {source} -> {target}")
        return snapshot

    # --- Queries ---

    @property
    def nodes(self) -> List[Node]:
        return [attrs['node'] for _, attrs in self.G.nodes(data=True)]

    @property
    def edges(self) -> List[Edge]:
        return [Edge(s, t) for s, t in self.G.edges()]

    def __len__(self) -> int:
        return self.G.number_of_nodes()

    def __contains__(self, node_id: Any) -> bool:
        return node_id in self.G

    def get_node(self, node_id: str) -> Optional[Node]:
        if node_id not in self.G:
            return None
        return self.G.nodes[node_id]['node']

    def has_edge(self, source: str, target: str) -> bool:
        return self.G.has_edge(source, target)

    def incident_edges(self, node_id: str) -> List[Edge]:
        if node_id not in self.G:
            return []
        edges = [Edge(s, t) for s, t in self.G.out_edges(node_id)]
        edges.extend(Edge(s, t) for s, t in self.G.in_edges(node_id) if s != node_id)
        return edges

    def node_ids(self) -> List[str]:
        return list(self.G.nodes)

    # --- Mutations ---

    def add_node(self, node: Node) -> Node:
        self.G.add_node(node.id, node=node)
        self.version += 1
        return node

    def remove_node(self, node_id: str) -> List[Edge]:
        """Remove a node together with every edge touching it. Returns the removed edges."""
        if node_id not in self.G:
            return []
        removed = self.incident_edges(node_id)
        self.G.remove_node(node_id)
        self.version += 1
        return removed

    def add_edge(self, source: str, target: str) -> bool:
        """Add source->target. False if it already exists or an endpoint is missing."""
        if source not in self.G or target not in self.G:
            return False
        if self.G.has_edge(source, target):
            return False
        self.G.add_edge(source, target)
        self.version += 1
        return True

    def rename_node(self, node_id: str, name: str) -> bool:
        node = self.get_node(node_id)
        if node is None:
            return False
        node.name = name
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'graph_id': self.graph_id,
            'nodes': [{'id': n.id, 'name': n.name, 'x': n.x, 'y': n.y, 'fx': n.fx, 'fy': n.fy}
                      for n in self.nodes],
            'edges': [{'source': e.source, 'target': e.target} for e in self.edges],
        }
