"""
Editor Controller - single owner of the editing session's state.

This controller owns the loaded graph snapshot, the interaction mode, the
selection, the rename session, the layout engine (with its position cache)
and the renderer, and coordinates between them:
- gestures arrive from GestureInterpreter and are routed to the active mode
- mutations are applied locally first, then sent through EditActions
- every structural change rebuilds the layout before the next tick and
  triggers a full redraw

The key rule is optimistic and final: a persistence failure is reported but
the local state is not rolled back.
"""

import logging
import math
import random
from typing import Callable, Iterable, List, Optional, Tuple

from grapheditor.config import DEFAULT_LAYOUT_SETTINGS
from grapheditor.graph import Edge, GraphSnapshot, Node, make_node
from grapheditor.layout import LayoutEngine
from grapheditor.position_cache import PositionCache
from grapheditor.storage.memory_backend import MemoryGraphStore
from grapheditor.storage.protocol import GraphStore
from grapheditor.edit.actions import EditActions
from grapheditor.edit.constants import NODE_RADIUS
from grapheditor.edit.modes import InteractionMode, ModeBehavior, get_behavior
from grapheditor.edit.render import GraphRenderer
from grapheditor.edit.session import EditSession, EditSessionState

logger = logging.getLogger(__name__)


class EditorController:
    """Coordinates layout, rendering, modes and persistence for one editor."""

    def __init__(
        self,
        store: Optional[GraphStore] = None,
        actions: Optional[EditActions] = None,
        width: float = 960,
        height: float = 640,
        layout_settings: Optional[dict] = None,
        container_offset: Tuple[float, float] = (0.0, 0.0),
        seed: Optional[int] = None,
    ):
        settings = {**DEFAULT_LAYOUT_SETTINGS, **(layout_settings or {})}
        self.width = width
        self.height = height
        self.container_offset = container_offset

        self.cache = PositionCache()
        self.layout = LayoutEngine(
            self.cache,
            width=width,
            height=height,
            link_distance=settings['link_distance'],
            charge_strength=settings['charge_strength'],
            collide_distance=settings['collide_distance'],
            seed=seed,
        )
        self.renderer = GraphRenderer(width, height)
        self.session = EditSession()
        self.actions = actions or EditActions(store or MemoryGraphStore())
        self.actions.set_on_error(self._report_error)

        self.snapshot = GraphSnapshot()
        self._layout_snapshot: Optional[GraphSnapshot] = None
        self.mode = InteractionMode.RENAME
        self.selected_node_id: Optional[str] = None
        self.drag_source_id: Optional[str] = None
        self.drop_target_id: Optional[str] = None
        self.status = 'Ready'
        self.error: Optional[str] = None
        self._rng = random.Random(seed)

        self._on_status: Optional[Callable[[str], None]] = None
        self._on_error: Optional[Callable[[str], None]] = None
        self._on_change: Optional[Callable[[], None]] = None

        self._sync_layout()
        self.refresh()

    # --- Callbacks ---

    def set_on_status(self, callback: Callable[[str], None]) -> None:
        self._on_status = callback

    def set_on_error(self, callback: Callable[[str], None]) -> None:
        self._on_error = callback

    def set_on_change(self, callback: Callable[[], None]) -> None:
        """Called after every full redraw (structure, mode, selection, editing)."""
        self._on_change = callback

    def _set_status(self, message: str) -> None:
        self.status = message
        if self._on_status:
            self._on_status(message)

    def _report_error(self, message: str) -> None:
        self.error = message
        if self._on_error:
            self._on_error(message)

    # --- State ---

    @property
    def graph_id(self) -> Optional[str]:
        return self.snapshot.graph_id

    @property
    def has_graph(self) -> bool:
        return self.snapshot.graph_id is not None

    @property
    def behavior(self) -> ModeBehavior:
        return get_behavior(self.mode)

    @property
    def nodes(self) -> List[Node]:
        return self.snapshot.nodes

    @property
    def edges(self) -> List[Edge]:
        return self.snapshot.edges

    def set_mode(self, mode: InteractionMode) -> None:
        """Switch how later gestures are interpreted. Graph data is untouched."""
        self.mode = InteractionMode(mode)
        logger.debug(f"Interaction mode: {self.mode.value}")
        self.refresh()

    def select_node(self, node_id: Optional[str]) -> None:
        """Toggle selection: selecting the selected node clears it."""
        self.selected_node_id = None if node_id == self.selected_node_id else node_id
        self.refresh()

    def set_graph(self, graph_id: Optional[str], nodes: Iterable[Node],
                  edges: Iterable[Tuple[str, str]]) -> None:
        """Replace the snapshot wholesale (graph switch)."""
        self.snapshot = GraphSnapshot.from_records(graph_id, nodes, edges)
        dropped = self.cache.prune(self.snapshot.node_ids())
        if dropped:
            logger.debug(f"Pruned {dropped} cached positions")
        self.session.cancel()
        self.selected_node_id = None
        self.drag_source_id = None
        self.drop_target_id = None
        self.renderer.hide_drag_line()
        self._sync_layout()
        self.refresh()

    def clear_graph(self) -> None:
        self.set_graph(None, [], [])

    async def load_graph(self, graph_id: str) -> bool:
        """Load nodes and edges of graph_id and make it the current snapshot."""
        result = await self.actions.load_graph(graph_id)
        if result is None:
            return False
        records, edges = result
        nodes = []
        for record in records:
            cached = self.cache.get(record['id'])
            x, y = cached if cached else (self._rng.uniform(0, self.width), self._rng.uniform(0, self.height))
            nodes.append(make_node(record.get('name', ''), x, y, node_id=record['id']))
        self.set_graph(graph_id, nodes, edges)
        logger.info(f"Loaded graph {graph_id}: {len(self.snapshot)} nodes, {len(self.snapshot.edges)} edges")
        self._set_status(f"Loaded graph with {len(self.snapshot)} nodes and {len(self.snapshot.edges)} edges")
        return True

    # --- Layout and rendering ---

    def _sync_layout(self) -> None:
        """Rebuild the layout if the node/edge sets changed since it was built."""
        if self._layout_snapshot is self.snapshot and self.layout.version == self.snapshot.version:
            return
        self.layout.rebuild(self.snapshot.nodes, self.snapshot.edges, self.snapshot.version)
        self._layout_snapshot = self.snapshot

    def refresh(self) -> None:
        """Full redraw from the current state."""
        self.renderer.rebuild(
            self.snapshot,
            selected_id=self.selected_node_id,
            editing_id=self.session.node_id,
            mode=self.mode.value,
            drag_source_id=self.drag_source_id,
            drop_target_id=self.drop_target_id,
        )
        if self._on_change:
            self._on_change()

    def tick(self) -> bool:
        """One layout step followed by a position update of the drawing."""
        self._sync_layout()
        stepped = self.layout.tick()
        if stepped:
            self.renderer.update_positions(self.snapshot)
        return stepped

    def suspend_layout(self) -> None:
        self.layout.suspend()

    def resume_layout(self) -> None:
        self.layout.resume()

    def teardown(self) -> None:
        self.layout.stop()

    def node_at(self, x: float, y: float, exclude_id: Optional[str] = None) -> Optional[Node]:
        """Topmost node whose centre is within NODE_RADIUS of (x, y), in world coordinates."""
        for node in reversed(self.snapshot.nodes):
            if node.id == exclude_id:
                continue
            if math.hypot(node.x - x, node.y - y) <= NODE_RADIUS:
                return node
        return None

    # --- Mutations ---

    async def create_node_at(self, x: float, y: float, open_editor: bool = False,
                             name: Optional[str] = None) -> Optional[Node]:
        """
        Ask the store for a new node and place it locally at (x, y).

        The store's id is authoritative; the placement is local only.
        """
        if not self.has_graph:
            return None
        graph_id = self.graph_id
        name = name or f"Node {len(self.snapshot) + 1}"
        record = await self.actions.create_node(graph_id, name)
        if record is None:
            return None
        if self.graph_id != graph_id:
            logger.info(f"Graph switched while creating '{name}', not adding it locally")
            return None
        node = make_node(record.get('name', name), x, y, node_id=record['id'])
        self.snapshot.add_node(node)
        self._sync_layout()
        self.refresh()
        logger.info(f"Created node {node.id} '{node.name}'")
        self._set_status(f"Created node: {node.name}")
        if open_editor:
            await self.open_edit_session(node, force=True)
        return node

    async def add_node(self, name: str) -> Optional[Node]:
        """Explicit add-node action: named node at the canvas centre."""
        name = (name or '').strip()
        if not name:
            return None
        return await self.create_node_at(self.width / 2, self.height / 2, name=name)

    async def request_edge(self, source_id: str, target_id: str) -> bool:
        """
        Add source -> target locally and request it from the store.

        An ordered pair that already exists is not requested again.
        """
        if not self.has_graph:
            return False
        if source_id not in self.snapshot or target_id not in self.snapshot:
            return False
        if self.snapshot.has_edge(source_id, target_id):
            self._set_status('Edge already exists')
            return False
        graph_id = self.graph_id
        self.snapshot.add_edge(source_id, target_id)
        self._sync_layout()
        self.refresh()
        source = self.snapshot.get_node(source_id)
        target = self.snapshot.get_node(target_id)
        logger.info(f"Created edge {source_id} -> {target_id}")
        self._set_status(f"Created edge: {source.name} -> {target.name}")
        return await self.actions.create_edge(graph_id, source_id, target_id)

    async def delete_node(self, node_id: str) -> bool:
        """Remove the node and every edge touching it, then request the deletion."""
        if not self.has_graph:
            return False
        node = self.snapshot.get_node(node_id)
        if node is None:
            return False
        graph_id = self.graph_id
        removed = self.snapshot.remove_node(node_id)
        if self.selected_node_id == node_id:
            self.selected_node_id = None
        if self.session.node_id == node_id:
            self.session.cancel()
        self._sync_layout()
        self.refresh()
        logger.info(f"Deleted node {node_id} '{node.name}' with {len(removed)} edges")
        self._set_status(f"Deleted node: {node.name}")
        return await self.actions.delete_node(graph_id, node_id)

    # --- Rename session ---

    async def open_edit_session(self, node: Node, force: bool = False) -> Optional[EditSessionState]:
        """
        Open the rename overlay for node.

        Only allowed in Rename mode, or with force=True when the gesture that
        asked for it started in Rename mode. A session already open on another
        node is committed first, so typed text is never dropped.
        """
        if not self.has_graph or node.id not in self.snapshot:
            return None
        if self.mode != InteractionMode.RENAME and not force:
            return None
        if self.session.node_id == node.id:
            return self.session.state
        if self.session.is_open:
            await self.commit_edit()
            if node.id not in self.snapshot:
                return None
        state = self.session.open(node, self.renderer.transform, self.container_offset)
        self.refresh()
        return state

    def set_edit_text(self, text: str) -> None:
        self.session.set_text(text)

    async def commit_edit(self, text: Optional[str] = None) -> bool:
        """Apply the pending name locally, then request the rename. Empty text cancels."""
        result = self.session.commit(text)
        if result is None:
            self.refresh()
            return False
        node_id, name = result
        graph_id = self.graph_id
        if graph_id is None or not self.snapshot.rename_node(node_id, name):
            self.refresh()
            return False
        self.refresh()
        logger.info(f"Renamed node {node_id} to '{name}'")
        self._set_status(f"Renamed node to: {name}")
        return await self.actions.rename_node(graph_id, node_id, name)

    def cancel_edit(self) -> None:
        self.session.cancel()
        self.refresh()
