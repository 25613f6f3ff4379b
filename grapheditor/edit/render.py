"""
Renderer for the editing canvas.

Builds a small scene model (node glyphs, edge lines, the transient drag line)
from the current graph state and serialises it to SVG for the NiceGUI canvas.

Two update paths:
- rebuild():          declarative full pass on any structural/mode/selection change
- update_positions(): per-tick pass that only moves existing glyphs and lines
plus move_node(), the direct update used while a node is dragged in Move mode.
Visual flags (selected, editing, mode classes) are derived on every rebuild,
never stored on the nodes.
"""

from dataclasses import dataclass, field
from html import escape
from typing import Dict, List, Optional, Tuple

from grapheditor.graph import GraphSnapshot, Node
from grapheditor.edit.constants import (
    ARROW_REF_X,
    LABEL_MAX_LENGTH,
    MAX_ZOOM,
    MIN_ZOOM,
    NODE_RADIUS,
)


@dataclass
class ViewTransform:
    """Pan/zoom of the whole canvas: screen = world * k + (x, y)."""
    x: float = 0.0
    y: float = 0.0
    k: float = 1.0

    def apply(self, wx: float, wy: float) -> Tuple[float, float]:
        return wx * self.k + self.x, wy * self.k + self.y

    def invert(self, sx: float, sy: float) -> Tuple[float, float]:
        return (sx - self.x) / self.k, (sy - self.y) / self.k

    def pan(self, dx: float, dy: float) -> None:
        self.x += dx
        self.y += dy

    def zoom_at(self, sx: float, sy: float, factor: float) -> None:
        """Scale by factor around the screen point (sx, sy), clamped to the zoom extents."""
        wx, wy = self.invert(sx, sy)
        self.k = max(MIN_ZOOM, min(MAX_ZOOM, self.k * factor))
        self.x = sx - wx * self.k
        self.y = sy - wy * self.k

    def to_svg(self) -> str:
        return f"translate({self.x:.2f},{self.y:.2f}) scale({self.k:.4f})"


@dataclass
class NodeGlyph:
    id: str
    label: str
    x: float
    y: float
    classes: List[str] = field(default_factory=lambda: ['node'])


@dataclass
class EdgeLine:
    source: str
    target: str
    x1: float
    y1: float
    x2: float
    y2: float


@dataclass
class DragLine:
    x1: float
    y1: float
    x2: float
    y2: float


def truncate_label(name: str) -> str:
    if len(name) > LABEL_MAX_LENGTH:
        return name[:LABEL_MAX_LENGTH - 1] + '...'
    return name


def node_classes(node_id: str, selected_id: Optional[str] = None, editing_id: Optional[str] = None,
                 mode: str = 'rename', drag_source_id: Optional[str] = None,
                 drop_target_id: Optional[str] = None) -> List[str]:
    classes = ['node']
    if node_id == selected_id:
        classes.append('selected')
    if node_id == editing_id:
        classes.append('editing')
    if mode == 'delete':
        classes.append('delete-mode')
    if mode == 'move':
        classes.append('move-mode')
    if node_id == drag_source_id:
        classes.append('drag-source')
    if node_id == drop_target_id:
        classes.append('drag-target')
    return classes


class GraphRenderer:
    """Keeps the drawn picture equal to the editor state."""

    def __init__(self, width: float = 960, height: float = 640):
        self.width = width
        self.height = height
        self.transform = ViewTransform()
        self.glyphs: Dict[str, NodeGlyph] = {}
        self.lines: List[EdgeLine] = []
        self.drag_line: Optional[DragLine] = None
        self.dirty = True
        self.rebuilds = 0

    def rebuild(self, snapshot: GraphSnapshot, *, selected_id: Optional[str] = None,
                editing_id: Optional[str] = None, mode: str = 'rename',
                drag_source_id: Optional[str] = None, drop_target_id: Optional[str] = None) -> None:
        """Redraw everything from the current state."""
        self.glyphs = {}
        for node in snapshot.nodes:
            self.glyphs[node.id] = NodeGlyph(
                id=node.id,
                label=truncate_label(node.name),
                x=node.x,
                y=node.y,
                classes=node_classes(node.id, selected_id, editing_id, mode,
                                     drag_source_id, drop_target_id),
            )
        self.lines = []
        for edge in snapshot.edges:
            source = self.glyphs[edge.source]
            target = self.glyphs[edge.target]
            self.lines.append(EdgeLine(edge.source, edge.target, source.x, source.y, target.x, target.y))
        self.rebuilds += 1
        self.dirty = True

    def update_positions(self, snapshot: GraphSnapshot) -> None:
        """Move glyphs and edge endpoints to the latest simulated positions."""
        for node in snapshot.nodes:
            glyph = self.glyphs.get(node.id)
            if glyph is not None:
                glyph.x, glyph.y = node.x, node.y
        for line in self.lines:
            source = self.glyphs.get(line.source)
            target = self.glyphs.get(line.target)
            if source is not None:
                line.x1, line.y1 = source.x, source.y
            if target is not None:
                line.x2, line.y2 = target.x, target.y
        self.dirty = True

    def move_node(self, node: Node) -> None:
        """Direct update of one glyph and its incident edges, without a full pass."""
        glyph = self.glyphs.get(node.id)
        if glyph is not None:
            glyph.x, glyph.y = node.x, node.y
        for line in self.lines:
            if line.source == node.id:
                line.x1, line.y1 = node.x, node.y
            if line.target == node.id:
                line.x2, line.y2 = node.x, node.y
        self.dirty = True

    def show_drag_line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self.drag_line = DragLine(x1, y1, x2, y2)
        self.dirty = True

    def hide_drag_line(self) -> None:
        if self.drag_line is not None:
            self.drag_line = None
            self.dirty = True

    def mark_clean(self) -> None:
        self.dirty = False

    def to_svg(self) -> str:
        """Serialise the scene as SVG content for the canvas."""
        parts = [
            '<defs><marker id="arrowhead" viewBox="-0 -5 10 10" '
            f'refX="{ARROW_REF_X}" refY="0" orient="auto" markerWidth="8" markerHeight="8">'
            '<path d="M 0,-5 L 10,0 L 0,5" class="link-arrow" /></marker></defs>',
            f'<g transform="{self.transform.to_svg()}">',
            '<g class="links">',
        ]
        for line in self.lines:
            parts.append(
                f'<line class="link" x1="{line.x1:.2f}" y1="{line.y1:.2f}" '
                f'x2="{line.x2:.2f}" y2="{line.y2:.2f}" marker-end="url(#arrowhead)" />'
            )
        parts.append('</g>')
        if self.drag_line is not None:
            d = self.drag_line
            parts.append(
                f'<line class="drag-line" x1="{d.x1:.2f}" y1="{d.y1:.2f}" '
                f'x2="{d.x2:.2f}" y2="{d.y2:.2f}" />'
            )
        parts.append('<g class="nodes">')
        for glyph in self.glyphs.values():
            parts.append(
                f'<g class="{" ".join(glyph.classes)}" data-id="{escape(glyph.id)}" '
                f'transform="translate({glyph.x:.2f},{glyph.y:.2f})">'
                f'<circle r="{NODE_RADIUS}" />'
                f'<text text-anchor="middle" dy="0.35em">{escape(glyph.label)}</text></g>'
            )
        parts.append('</g></g>')
        return ''.join(parts)
