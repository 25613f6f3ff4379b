"""
Last-known node positions, keyed by node id.

Survives layout re-initialisation so nodes the user already placed do not jump
when unrelated nodes or edges change. Entries for ids that disappear are
dropped on graph switch (see ``prune``); until then they are simply never
looked up.
"""

from typing import Dict, Iterable, Iterator, Optional, Tuple

from grapheditor.graph import Node


class PositionCache:

    def __init__(self):
        self._positions: Dict[str, Tuple[float, float]] = {}
        self.writes = 0

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._positions

    def __len__(self) -> int:
        return len(self._positions)

    def __iter__(self) -> Iterator[str]:
        return iter(self._positions)

    def get(self, node_id: str) -> Optional[Tuple[float, float]]:
        return self._positions.get(node_id)

    def set(self, node_id: str, x: float, y: float) -> None:
        self._positions[node_id] = (x, y)
        self.writes += 1

    def record(self, nodes: Iterable[Node]) -> None:
        """Store the current position of every node."""
        for node in nodes:
            self.set(node.id, node.x, node.y)

    def prune(self, keep_ids: Iterable[str]) -> int:
        """Drop entries whose id is not in keep_ids. Returns how many were dropped."""
        keep = set(keep_ids)
        stale = [node_id for node_id in self._positions if node_id not in keep]
        for node_id in stale:
            del self._positions[node_id]
        return len(stale)
