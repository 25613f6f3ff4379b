"""
Force-directed layout engine.

A cooperative simulation: nothing runs on its own. The host calls ``tick()``
repeatedly (a NiceGUI ``ui.timer`` in the app, a plain loop in tests) and each
call advances the simulation by one step.

Each step applies, in order:
1. link:      springs along edges toward ``link_distance``
2. charge:    pairwise repulsion decaying with squared distance
3. center:    shifts the centroid onto the canvas centre
4. collision: keeps node centres at least ``collide_distance`` apart

then integrates velocities with friction. The energy ("alpha") decays every
step; once it falls below ALPHA_MIN the engine stops until restarted.

Pinned nodes still exert forces but are held at their pin. After every step
the position of every node is written to the PositionCache; that is the only
place positions become durable across rebuilds.
"""

import logging
import math
import random
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from grapheditor.graph import Edge, Node, Simulated
from grapheditor.position_cache import PositionCache

logger = logging.getLogger(__name__)

ALPHA_MIN = 0.001
ALPHA_DECAY = 1 - ALPHA_MIN ** (1 / 300)
VELOCITY_DECAY = 0.4

# Energy used when the layout already exists and should only settle
SETTLE_ALPHA = 0.1
SETTLE_ALPHA_DECAY = 0.05

# Energy after the pointer-down suspension is released
RESUME_ALPHA = 0.1


class LayoutEngine:
    """Continuous force simulation over the current node and edge sets."""

    def __init__(
        self,
        position_cache: PositionCache,
        width: float = 960,
        height: float = 640,
        link_distance: float = 150.0,
        charge_strength: float = -400.0,
        collide_distance: float = 50.0,
        seed: Optional[int] = None,
    ):
        self.cache = position_cache
        self.width = width
        self.height = height
        self.link_distance = link_distance
        self.charge_strength = charge_strength
        self.collide_distance = collide_distance
        self._rng = random.Random(seed)

        self._nodes: List[Node] = []
        # (source, target, strength, bias)
        self._links: List[Tuple[Node, Node, float, float]] = []
        self._listeners: List[Callable[[List[Node]], None]] = []

        self.alpha = 1.0
        self.alpha_decay = ALPHA_DECAY
        self.alpha_target = 0.0
        self.running = False
        self.suspended = False
        self.version: Optional[int] = None
        self.ticks = 0

    @property
    def nodes(self) -> List[Node]:
        return list(self._nodes)

    def on_tick(self, callback: Callable[[List[Node]], None]) -> None:
        self._listeners.append(callback)

    # --- Lifecycle ---

    def rebuild(self, nodes: Iterable[Node], edges: Iterable[Edge], version: Optional[int] = None) -> bool:
        """
        Re-initialise against new node/edge sets.

        Nodes with a cached position are seeded from it. If any node was seeded
        the engine starts with low energy and fast decay so the existing
        picture settles instead of re-arranging. Returns whether any node was
        seeded.
        """
        self._nodes = list(nodes)
        by_id: Dict[str, Node] = {n.id: n for n in self._nodes}

        seeded = False
        for node in self._nodes:
            cached = self.cache.get(node.id)
            if cached is None:
                continue
            seeded = True
            if not node.is_pinned:
                node.move_to(*cached)

        degree: Dict[str, int] = {n.id: 0 for n in self._nodes}
        pairs = []
        for edge in edges:
            if edge.source not in by_id or edge.target not in by_id:
                logger.warning(f"Layout skipping edge with unknown endpoint: {edge.source} -> {edge.target}")
                continue
            if edge.source == edge.target:
                continue
            degree[edge.source] += 1
            degree[edge.target] += 1
            pairs.append((by_id[edge.source], by_id[edge.target]))

        self._links = []
        for source, target in pairs:
            s_count, t_count = degree[source.id], degree[target.id]
            strength = 1.0 / min(s_count, t_count)
            bias = s_count / (s_count + t_count)
            self._links.append((source, target, strength, bias))

        if seeded:
            self.alpha = SETTLE_ALPHA
            self.alpha_decay = SETTLE_ALPHA_DECAY
        else:
            self.alpha = 1.0
            self.alpha_decay = ALPHA_DECAY
        self.version = version
        self.running = True
        logger.debug(f"Layout rebuilt: {len(self._nodes)} nodes, {len(self._links)} links, seeded={seeded}")
        return seeded

    def stop(self) -> None:
        self.running = False

    def restart(self, alpha: Optional[float] = None) -> None:
        if alpha is not None:
            self.alpha = alpha
        self.running = True

    def suspend(self) -> None:
        """Freeze stepping while a pointer button is held."""
        self.suspended = True

    def resume(self) -> None:
        """Release the suspension and settle at low energy."""
        self.suspended = False
        self.restart(RESUME_ALPHA)

    # --- Stepping ---

    def tick(self) -> bool:
        """Advance one step. Returns False if stopped or suspended."""
        if not self.running or self.suspended:
            return False

        self.alpha += (self.alpha_target - self.alpha) * self.alpha_decay

        self._apply_links()
        self._apply_charge()
        self._apply_center()
        self._apply_collision()

        decay = 1 - VELOCITY_DECAY
        for node in self._nodes:
            if node.is_pinned:
                node.vx = 0.0
                node.vy = 0.0
                continue
            node.vx *= decay
            node.vy *= decay
            node.position = Simulated(node.x + node.vx, node.y + node.vy)

        self.cache.record(self._nodes)
        self.ticks += 1
        for listener in self._listeners:
            listener(self._nodes)

        if self.alpha < ALPHA_MIN:
            self.running = False
        return True

    def _jiggle(self) -> float:
        return (self._rng.random() - 0.5) * 1e-6

    def _apply_links(self) -> None:
        for source, target, strength, bias in self._links:
            x = target.x + target.vx - source.x - source.vx or self._jiggle()
            y = target.y + target.vy - source.y - source.vy or self._jiggle()
            length = math.sqrt(x * x + y * y)
            length = (length - self.link_distance) / length * self.alpha * strength
            x *= length
            y *= length
            target.vx -= x * bias
            target.vy -= y * bias
            source.vx += x * (1 - bias)
            source.vy += y * (1 - bias)

    def _apply_charge(self) -> None:
        for node in self._nodes:
            for other in self._nodes:
                if other is node:
                    continue
                x = other.x - node.x
                y = other.y - node.y
                if x == 0:
                    x = self._jiggle()
                if y == 0:
                    y = self._jiggle()
                dist2 = x * x + y * y
                if dist2 < 1:
                    dist2 = math.sqrt(dist2)
                weight = self.charge_strength * self.alpha / dist2
                node.vx += x * weight
                node.vy += y * weight

    def _apply_center(self) -> None:
        if not self._nodes:
            return
        cx = sum(n.x for n in self._nodes) / len(self._nodes)
        cy = sum(n.y for n in self._nodes) / len(self._nodes)
        dx = cx - self.width / 2
        dy = cy - self.height / 2
        for node in self._nodes:
            if not node.is_pinned:
                node.move_to(node.x - dx, node.y - dy)

    def _apply_collision(self) -> None:
        radius = self.collide_distance / 2
        min_dist = radius * 2
        count = len(self._nodes)
        for i in range(count):
            node = self._nodes[i]
            xi = node.x + node.vx
            yi = node.y + node.vy
            for j in range(i + 1, count):
                other = self._nodes[j]
                x = xi - other.x - other.vx
                y = yi - other.y - other.vy
                dist2 = x * x + y * y
                if dist2 >= min_dist * min_dist:
                    continue
                if x == 0:
                    x = self._jiggle()
                    dist2 += x * x
                if y == 0:
                    y = self._jiggle()
                    dist2 += y * y
                dist = math.sqrt(dist2)
                push = (min_dist - dist) / dist
                x *= push
                y *= push
                # equal radii: each side takes half
                node.vx += x * 0.5
                node.vy += y * 0.5
                other.vx -= x * 0.5
                other.vy -= y * 0.5
