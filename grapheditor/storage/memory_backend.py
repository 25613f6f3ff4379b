"""
In-memory Storage Backend.

Implements the GraphStore protocol with plain dicts held in the process.
Used when no graph server is configured, and by the tests.
"""

import logging
import threading
import uuid
from typing import Any, Dict, List

from grapheditor.storage.protocol import StorageError

logger = logging.getLogger(__name__)


class MemoryGraphStore:
    """
    Process-local graph storage.

    Structure:
    - _graphs: graph_id -> {"id", "name"}
    - _nodes:  graph_id -> {node_id -> {"id", "name"}}
    - _edges:  graph_id -> set of (source_id, target_id)
    """

    def __init__(self):
        self._graphs: Dict[str, Dict[str, Any]] = {}
        self._nodes: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._edges: Dict[str, set] = {}
        # Calls arrive from worker threads when run off the event loop
        self._lock = threading.Lock()

    @property
    def backend_type(self) -> str:
        return "memory"

    def _require_graph(self, graph_id: str) -> None:
        if graph_id not in self._graphs:
            raise StorageError(f"Graph not found: {graph_id}")

    def _require_node(self, graph_id: str, node_id: str) -> Dict[str, Any]:
        self._require_graph(graph_id)
        node = self._nodes[graph_id].get(node_id)
        if node is None:
            raise StorageError(f"Node not found: {node_id}")
        return node

    # --- Graph Operations ---

    def list_graphs(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [dict(g) for g in self._graphs.values()]

    def create_graph(self, name: str) -> Dict[str, Any]:
        with self._lock:
            graph_id = str(uuid.uuid4())
            graph = {"id": graph_id, "name": name}
            self._graphs[graph_id] = graph
            self._nodes[graph_id] = {}
            self._edges[graph_id] = set()
            logger.info(f"Created graph '{name}' ({graph_id})")
            return dict(graph)

    def delete_graph(self, graph_id: str) -> None:
        with self._lock:
            self._require_graph(graph_id)
            del self._graphs[graph_id]
            del self._nodes[graph_id]
            del self._edges[graph_id]

    # --- Node Operations ---

    def list_nodes(self, graph_id: str) -> List[Dict[str, Any]]:
        with self._lock:
            self._require_graph(graph_id)
            return [dict(n) for n in self._nodes[graph_id].values()]

    def get_node_with_neighbors(self, graph_id: str, node_id: str) -> Dict[str, Any]:
        with self._lock:
            node = self._require_node(graph_id, node_id)
            nodes = self._nodes[graph_id]
            to_nodes = [dict(nodes[t]) for s, t in sorted(self._edges[graph_id]) if s == node_id]
            return {**node, "toNodes": to_nodes}

    def create_node(self, graph_id: str, name: str) -> Dict[str, Any]:
        with self._lock:
            self._require_graph(graph_id)
            node_id = str(uuid.uuid4())
            node = {"id": node_id, "name": name}
            self._nodes[graph_id][node_id] = node
            return dict(node)

    def rename_node(self, graph_id: str, node_id: str, name: str) -> Dict[str, Any]:
        with self._lock:
            node = self._require_node(graph_id, node_id)
            node["name"] = name
            return dict(node)

    def delete_node(self, graph_id: str, node_id: str) -> None:
        with self._lock:
            self._require_node(graph_id, node_id)
            del self._nodes[graph_id][node_id]
            self._edges[graph_id] = {
                (s, t) for s, t in self._edges[graph_id] if s != node_id and t != node_id
            }

    # --- Edge Operations ---

    def create_edge(self, graph_id: str, source_id: str, target_id: str) -> None:
        with self._lock:
            self._require_node(graph_id, source_id)
            self._require_node(graph_id, target_id)
            self._edges[graph_id].add((source_id, target_id))
