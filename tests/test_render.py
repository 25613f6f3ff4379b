"""
Tests for the SVG renderer, the view transform and the rename session.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from grapheditor.graph import GraphSnapshot, make_node
from grapheditor.edit.constants import MAX_ZOOM, MIN_ZOOM
from grapheditor.edit.render import GraphRenderer, ViewTransform, node_classes, truncate_label
from grapheditor.edit.session import EditSession


@pytest.fixture
def snapshot():
    nodes = [make_node('Alpha', 100, 100, node_id='a'), make_node('Beta', 300, 200, node_id='b')]
    return GraphSnapshot.from_records('g1', nodes, [('a', 'b')])


class TestLabels:

    def test_short_label_unchanged(self):
        assert truncate_label('Node 1') == 'Node 1'

    def test_label_at_limit_unchanged(self):
        assert truncate_label('Exactly8') == 'Exactly8'

    def test_long_label_truncated(self):
        assert truncate_label('LongerName') == 'LongerN...'


class TestViewTransform:

    def test_apply_and_invert(self):
        t = ViewTransform(x=50, y=-20, k=2)
        assert t.apply(10, 10) == (70, 0)
        assert t.invert(70, 0) == (10, 10)

    def test_zoom_keeps_point_under_cursor(self):
        t = ViewTransform()
        before = t.invert(200, 150)
        t.zoom_at(200, 150, 1.5)
        assert t.k == 1.5
        assert t.invert(200, 150) == pytest.approx(before)

    def test_zoom_is_clamped(self):
        t = ViewTransform()
        t.zoom_at(0, 0, 1000)
        assert t.k == MAX_ZOOM
        t.zoom_at(0, 0, 1e-6)
        assert t.k == MIN_ZOOM

    def test_pan(self):
        t = ViewTransform()
        t.pan(10, -5)
        assert (t.x, t.y) == (10, -5)


class TestNodeClasses:

    def test_plain_node(self):
        assert node_classes('a') == ['node']

    def test_flags_are_derived(self):
        classes = node_classes('a', selected_id='a', editing_id='a', mode='delete',
                               drag_source_id='a')
        assert classes == ['node', 'selected', 'editing', 'delete-mode', 'drag-source']

    def test_drop_target_and_move_mode(self):
        assert node_classes('b', mode='move', drop_target_id='b') == ['node', 'move-mode', 'drag-target']


class TestGraphRenderer:

    def test_rebuild_draws_nodes_and_lines(self, snapshot):
        renderer = GraphRenderer()
        renderer.rebuild(snapshot, selected_id='b')
        assert set(renderer.glyphs) == {'a', 'b'}
        assert 'selected' in renderer.glyphs['b'].classes
        line = renderer.lines[0]
        assert (line.x1, line.y1, line.x2, line.y2) == (100, 100, 300, 200)
        assert renderer.rebuilds == 1

    def test_update_positions_moves_glyphs_and_lines(self, snapshot):
        renderer = GraphRenderer()
        renderer.rebuild(snapshot)
        snapshot.get_node('b').move_to(400, 250)
        renderer.mark_clean()
        renderer.update_positions(snapshot)
        assert (renderer.glyphs['b'].x, renderer.glyphs['b'].y) == (400, 250)
        assert (renderer.lines[0].x2, renderer.lines[0].y2) == (400, 250)
        assert renderer.dirty
        assert renderer.rebuilds == 1

    def test_move_node_updates_incident_lines(self, snapshot):
        renderer = GraphRenderer()
        renderer.rebuild(snapshot)
        node = snapshot.get_node('a')
        node.pin(150, 160)
        renderer.move_node(node)
        assert (renderer.lines[0].x1, renderer.lines[0].y1) == (150, 160)
        assert (renderer.glyphs['a'].x, renderer.glyphs['a'].y) == (150, 160)

    def test_drag_line(self):
        renderer = GraphRenderer()
        renderer.show_drag_line(0, 0, 10, 10)
        assert 'drag-line' in renderer.to_svg()
        renderer.hide_drag_line()
        assert renderer.drag_line is None
        assert 'drag-line' not in renderer.to_svg()

    def test_svg_output(self, snapshot):
        snapshot.rename_node('a', '<script>')
        renderer = GraphRenderer()
        renderer.rebuild(snapshot, mode='delete')
        svg = renderer.to_svg()
        assert 'marker-end="url(#arrowhead)"' in svg
        assert '&lt;script&gt;' in svg
        assert '<script>' not in svg
        assert 'delete-mode' in svg
        assert svg.count('<circle') == 2


class TestEditSession:

    def test_open_uses_node_name_and_screen_position(self):
        node = make_node('Alpha', 100, 50, node_id='a')
        session = EditSession()
        state = session.open(node, ViewTransform(x=10, y=20, k=2), container_offset=(5, 5))
        assert state.pending_text == 'Alpha'
        assert state.overlay_position == (215, 125)
        assert session.node_id == 'a'

    def test_only_one_session(self):
        session = EditSession()
        session.open(make_node('A', node_id='a'))
        session.open(make_node('B', node_id='b'))
        assert session.node_id == 'b'

    def test_commit_trims(self):
        session = EditSession()
        session.open(make_node('A', node_id='a'))
        session.set_text('  New name  ')
        assert session.commit() == ('a', 'New name')
        assert not session.is_open

    def test_empty_commit_is_cancel(self):
        session = EditSession()
        session.open(make_node('A', node_id='a'))
        assert session.commit('   ') is None
        assert not session.is_open

    def test_commit_without_session(self):
        assert EditSession().commit('x') is None
