"""
GraphStore Protocol Definition.

This module defines the interface the editor uses to persist graphs.
Both MemoryGraphStore (offline) and HttpGraphStore (graph server) conform to it.

Records are plain dicts as the server returns them:
- graph: {"id": str, "name": str}
- node:  {"id": str, "name": str}
- node with neighbours: {"id": str, "name": str, "toNodes": [node, ...]}
"""

from typing import Protocol, Dict, Any, List, runtime_checkable


class StorageError(Exception):
    """Raised by a GraphStore when a request cannot be completed."""


@runtime_checkable
class GraphStore(Protocol):
    """
    Abstract protocol for graph persistence.

    Every method may raise StorageError; none of them is retried by the caller.
    """

    @property
    def backend_type(self) -> str:
        """Return the backend type identifier ('memory' or 'http')."""
        ...

    # --- Graph Operations ---

    def list_graphs(self) -> List[Dict[str, Any]]:
        ...

    def create_graph(self, name: str) -> Dict[str, Any]:
        ...

    def delete_graph(self, graph_id: str) -> None:
        ...

    # --- Node Operations ---

    def list_nodes(self, graph_id: str) -> List[Dict[str, Any]]:
        """Return every node of the graph, without edges."""
        ...

    def get_node_with_neighbors(self, graph_id: str, node_id: str) -> Dict[str, Any]:
        """Return the node plus "toNodes": the targets of its outgoing edges."""
        ...

    def create_node(self, graph_id: str, name: str) -> Dict[str, Any]:
        """Create a node; the returned id is authoritative."""
        ...

    def rename_node(self, graph_id: str, node_id: str, name: str) -> Dict[str, Any]:
        ...

    def delete_node(self, graph_id: str, node_id: str) -> None:
        """Delete a node and every edge touching it."""
        ...

    # --- Edge Operations ---

    def create_edge(self, graph_id: str, source_id: str, target_id: str) -> None:
        ...
