"""
Edit Actions Module

Sends graph mutations to the persistence collaborator (a GraphStore).
Calls are blocking, so each one is run off the event loop; the controller has
already applied its optimistic local change before awaiting here.

A failed call is logged and reported through on_error. Nothing is retried
and nothing is rolled back.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from grapheditor.storage.protocol import GraphStore, StorageError

logger = logging.getLogger(__name__)

Runner = Callable[..., Awaitable[Any]]


async def _to_thread(func: Callable, *args: Any) -> Any:
    return await asyncio.to_thread(func, *args)


class EditActions:
    """
    Handles execution of persistence requests.

    Each method returns the store's result, or None/False when the request failed.
    """

    def __init__(self, store: GraphStore, runner: Optional[Runner] = None,
                 on_error: Optional[Callable[[str], None]] = None):
        """
        Args:
            store: The GraphStore to call
            runner: Coroutine function running a blocking call, e.g. nicegui's run.io_bound
            on_error: Receives a user-facing message when a call fails
        """
        self.store = store
        self._runner = runner or _to_thread
        self._on_error = on_error

    def set_on_error(self, callback: Callable[[str], None]) -> None:
        self._on_error = callback

    async def _call(self, failure_message: str, func: Callable, *args: Any) -> Tuple[bool, Any]:
        try:
            return True, await self._runner(func, *args)
        except StorageError as e:
            logger.error(f"{failure_message}: {e}")
            if self._on_error:
                self._on_error(failure_message)
            return False, None

    async def create_node(self, graph_id: str, name: str) -> Optional[Dict[str, Any]]:
        ok, record = await self._call('Failed to create node', self.store.create_node, graph_id, name)
        return record if ok else None

    async def rename_node(self, graph_id: str, node_id: str, name: str) -> bool:
        ok, _ = await self._call('Failed to rename node', self.store.rename_node, graph_id, node_id, name)
        return ok

    async def delete_node(self, graph_id: str, node_id: str) -> bool:
        ok, _ = await self._call('Failed to delete node', self.store.delete_node, graph_id, node_id)
        return ok

    async def create_edge(self, graph_id: str, source_id: str, target_id: str) -> bool:
        ok, _ = await self._call('Failed to create edge', self.store.create_edge,
                                 graph_id, source_id, target_id)
        return ok

    async def load_graph(self, graph_id: str) -> Optional[Tuple[List[Dict[str, Any]], List[Tuple[str, str]]]]:
        """
        Fetch the node list, then each node's outgoing neighbours (one request
        per node). The result is a snapshot only; nothing makes the fan-out atomic.
        """
        ok, nodes = await self._call('Failed to load graph data', self.store.list_nodes, graph_id)
        if not ok:
            return None
        edges: List[Tuple[str, str]] = []
        for node in nodes:
            ok, detail = await self._call('Failed to load graph data',
                                          self.store.get_node_with_neighbors, graph_id, node['id'])
            if not ok:
                return None
            for to_node in detail.get('toNodes') or []:
                edges.append((node['id'], to_node['id']))
        return nodes, edges
