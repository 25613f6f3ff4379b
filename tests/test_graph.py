"""
Tests for the graph data model: tagged node positions and GraphSnapshot.
"""

import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from grapheditor.graph import Edge, GraphSnapshot, Pinned, Simulated, make_node
from grapheditor.position_cache import PositionCache


def build_triangle():
    nodes = [make_node(name, node_id=name) for name in ('A', 'B', 'C')]
    return GraphSnapshot.from_records('g1', nodes, [('A', 'B'), ('B', 'C'), ('C', 'A')])


class TestNode:

    def test_new_node_is_simulated(self):
        node = make_node('A', 10, 20)
        assert node.position == Simulated(10.0, 20.0)
        assert not node.is_pinned
        assert node.fx is None and node.fy is None

    def test_make_node_generates_unique_ids(self):
        assert make_node('A').id != make_node('A').id

    def test_pin_holds_current_position_and_zeroes_velocity(self):
        node = make_node('A', 10, 20)
        node.vx, node.vy = 3.0, -4.0
        node.pin()
        assert node.position == Pinned(10, 20)
        assert (node.fx, node.fy) == (10, 20)
        assert node.vx == 0.0 and node.vy == 0.0

    def test_pin_at_explicit_point(self):
        node = make_node('A', 10, 20)
        node.pin(50, 60)
        assert (node.x, node.y) == (50, 60)
        assert node.is_pinned

    def test_unpin_keeps_coordinates(self):
        node = make_node('A', 10, 20)
        node.pin(50, 60)
        node.unpin()
        assert node.position == Simulated(50, 60)

    def test_move_to_keeps_position_kind(self):
        node = make_node('A')
        node.pin()
        node.move_to(5, 6)
        assert node.position == Pinned(5, 6)


class TestGraphSnapshot:

    def test_from_records_drops_edges_with_unknown_endpoints(self, caplog):
        nodes = [make_node('A', node_id='a'), make_node('B', node_id='b')]
        with caplog.at_level(logging.WARNING, logger='grapheditor.graph'):
            snapshot = GraphSnapshot.from_records('g1', nodes, [('a', 'b'), ('a', 'missing')])
        assert snapshot.edges == [Edge('a', 'b')]
        assert 'unknown endpoint: a -> missing' in caplog.text

    def test_add_edge_rejects_duplicates(self):
        snapshot = build_triangle()
        version = snapshot.version
        assert snapshot.add_edge('A', 'B') is False
        assert snapshot.version == version
        assert len(snapshot.edges) == 3

    def test_reverse_edge_is_distinct(self):
        snapshot = build_triangle()
        assert snapshot.add_edge('B', 'A') is True
        assert snapshot.has_edge('B', 'A')

    def test_add_edge_rejects_missing_endpoint(self):
        snapshot = build_triangle()
        assert snapshot.add_edge('A', 'Z') is False

    def test_remove_node_removes_incident_edges(self):
        """Deleting B from A->B, B->C, C->A leaves only C->A."""
        snapshot = build_triangle()
        removed = snapshot.remove_node('B')
        assert set(removed) == {Edge('A', 'B'), Edge('B', 'C')}
        assert snapshot.edges == [Edge('C', 'A')]
        assert 'B' not in snapshot
        assert [n.id for n in snapshot.nodes] == ['A', 'C']

    def test_remove_unknown_node_is_noop(self):
        snapshot = build_triangle()
        version = snapshot.version
        assert snapshot.remove_node('Z') == []
        assert snapshot.version == version

    def test_structural_changes_bump_version(self):
        snapshot = GraphSnapshot('g1')
        snapshot.add_node(make_node('A', node_id='a'))
        snapshot.add_node(make_node('B', node_id='b'))
        snapshot.add_edge('a', 'b')
        assert snapshot.version == 3

    def test_rename_does_not_bump_version(self):
        snapshot = build_triangle()
        version = snapshot.version
        assert snapshot.rename_node('A', 'Alpha')
        assert snapshot.get_node('A').name == 'Alpha'
        assert snapshot.version == version

    def test_to_dict(self):
        snapshot = build_triangle()
        data = snapshot.to_dict()
        assert data['graph_id'] == 'g1'
        assert len(data['nodes']) == 3
        assert {'source': 'C', 'target': 'A'} in data['edges']


class TestPositionCache:

    def test_set_and_get(self):
        cache = PositionCache()
        cache.set('a', 1.0, 2.0)
        assert cache.get('a') == (1.0, 2.0)
        assert cache.get('b') is None
        assert 'a' in cache
        assert cache.writes == 1

    def test_record_writes_every_node(self):
        cache = PositionCache()
        cache.record([make_node('A', 1, 2, node_id='a'), make_node('B', 3, 4, node_id='b')])
        assert len(cache) == 2
        assert cache.get('b') == (3.0, 4.0)

    def test_prune(self):
        cache = PositionCache()
        for node_id in ('a', 'b', 'c'):
            cache.set(node_id, 0, 0)
        assert cache.prune(['a']) == 2
        assert list(cache) == ['a']
