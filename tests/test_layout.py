"""
Tests for the force-directed LayoutEngine.

The engine is stepped by hand; nothing here depends on timers.
"""

import math
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from grapheditor.graph import Edge, make_node
from grapheditor.layout import (
    ALPHA_DECAY,
    RESUME_ALPHA,
    SETTLE_ALPHA,
    SETTLE_ALPHA_DECAY,
    LayoutEngine,
)
from grapheditor.position_cache import PositionCache


def distance(a, b):
    return math.hypot(a.x - b.x, a.y - b.y)


@pytest.fixture
def cache():
    return PositionCache()


@pytest.fixture
def engine(cache):
    return LayoutEngine(cache, width=960, height=640, seed=7)


class TestLifecycle:

    def test_fresh_rebuild_uses_full_energy(self, engine):
        nodes = [make_node('A', 100, 100, node_id='a')]
        assert engine.rebuild(nodes, []) is False
        assert engine.alpha == 1.0
        assert engine.alpha_decay == ALPHA_DECAY
        assert engine.running

    def test_rebuild_seeds_from_cache_with_low_energy(self, engine, cache):
        cache.set('a', 400.0, 300.0)
        nodes = [make_node('A', 0, 0, node_id='a'), make_node('B', 10, 10, node_id='b')]
        assert engine.rebuild(nodes, []) is True
        assert (nodes[0].x, nodes[0].y) == (400.0, 300.0)
        assert (nodes[1].x, nodes[1].y) == (10.0, 10.0)
        assert engine.alpha == SETTLE_ALPHA
        assert engine.alpha_decay == SETTLE_ALPHA_DECAY

    def test_seeding_does_not_move_pinned_node(self, engine, cache):
        cache.set('a', 400.0, 300.0)
        node = make_node('A', 0, 0, node_id='a')
        node.pin(50, 50)
        engine.rebuild([node], [])
        assert (node.x, node.y) == (50, 50)

    def test_rebuild_skips_self_loops_and_unknown_endpoints(self, engine):
        nodes = [make_node('A', 100, 100, node_id='a'), make_node('B', 200, 100, node_id='b')]
        engine.rebuild(nodes, [Edge('a', 'a'), Edge('a', 'zz'), Edge('a', 'b')])
        assert len(engine._links) == 1

    def test_rebuild_records_version(self, engine):
        engine.rebuild([], [], version=4)
        assert engine.version == 4

    def test_runs_down_and_stops(self, engine, cache):
        cache.set('a', 480.0, 320.0)
        engine.rebuild([make_node('A', node_id='a')], [])
        for _ in range(1000):
            if not engine.tick():
                break
        assert engine.running is False
        assert engine.ticks < 1000
        assert engine.tick() is False

    def test_stop_and_restart(self, engine):
        engine.rebuild([make_node('A', 100, 100, node_id='a')], [])
        engine.stop()
        assert engine.tick() is False
        engine.restart(0.5)
        assert engine.alpha == 0.5
        assert engine.tick() is True


class TestSuspension:

    def test_suspended_engine_does_not_step_or_write(self, engine, cache):
        node = make_node('A', 100, 100, node_id='a')
        engine.rebuild([node], [])
        engine.suspend()
        for _ in range(5):
            assert engine.tick() is False
        assert engine.ticks == 0
        assert cache.writes == 0
        assert (node.x, node.y) == (100, 100)

    def test_resume_restarts_at_low_energy(self, engine):
        engine.rebuild([make_node('A', 100, 100, node_id='a')], [])
        engine.suspend()
        engine.resume()
        assert engine.suspended is False
        assert engine.running is True
        assert engine.alpha == RESUME_ALPHA


class TestStepping:

    def test_every_tick_writes_every_node(self, engine, cache):
        nodes = [make_node(str(i), i * 60, 100, node_id=str(i)) for i in range(4)]
        engine.rebuild(nodes, [])
        for _ in range(3):
            engine.tick()
        assert cache.writes == 12
        for node in nodes:
            assert cache.get(node.id) == (node.x, node.y)

    def test_tick_listeners_receive_nodes(self, engine):
        seen = []
        engine.on_tick(lambda nodes: seen.append(len(nodes)))
        engine.rebuild([make_node('A', node_id='a'), make_node('B', 5, 5, node_id='b')], [])
        engine.tick()
        assert seen == [2]

    def test_pinned_node_stays_exactly_at_pin(self, engine):
        pinned = make_node('A', 0, 0, node_id='a')
        pinned.pin(100, 100)
        others = [make_node('B', 120, 110, node_id='b'), make_node('C', 300, 300, node_id='c')]
        engine.rebuild([pinned] + others, [Edge('a', 'b'), Edge('b', 'c')])
        for _ in range(50):
            engine.tick()
        assert (pinned.x, pinned.y) == (100, 100)
        assert pinned.vx == 0.0 and pinned.vy == 0.0

    def test_unconnected_nodes_repel(self, engine):
        a = make_node('A', 470, 320, node_id='a')
        b = make_node('B', 490, 320, node_id='b')
        engine.rebuild([a, b], [])
        for _ in range(10):
            engine.tick()
        assert distance(a, b) > 20

    def test_linked_nodes_attract(self, engine):
        a = make_node('A', 0, 320, node_id='a')
        b = make_node('B', 900, 320, node_id='b')
        engine.rebuild([a, b], [Edge('a', 'b')])
        engine.tick()
        assert distance(a, b) < 900

    def test_collision_separates_overlapping_nodes(self, cache):
        engine = LayoutEngine(cache, charge_strength=0.0, seed=3)
        a = make_node('A', 470, 320, node_id='a')
        b = make_node('B', 480, 320, node_id='b')
        engine.rebuild([a, b], [])
        for _ in range(50):
            engine.tick()
        assert distance(a, b) >= 50 - 1e-6

    def test_center_force_keeps_centroid_on_canvas_centre(self, engine):
        nodes = [make_node('A', 0, 0, node_id='a'), make_node('B', 100, 50, node_id='b')]
        engine.rebuild(nodes, [])
        for _ in range(100):
            engine.tick()
        cx = sum(n.x for n in nodes) / 2
        cy = sum(n.y for n in nodes) / 2
        assert cx == pytest.approx(480, abs=5)
        assert cy == pytest.approx(320, abs=5)
