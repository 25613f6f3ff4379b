"""
Gesture Interpreter - turns raw pointer input into exactly one interpretation.

Input is in canvas (screen) coordinates as the browser reports them. A press
becomes one of:
- pan:   secondary button anywhere, or primary on the background when the
         active mode pans with the primary button (Move)
- drag:  primary press on a node followed by movement beyond DRAG_THRESHOLD
- click: primary press and release without such movement, on a node or on
         the background
A press that moved is never also a click, so a pan or a drag cannot create a
node on release. The wheel always zooms.

While any button is held the layout is suspended; it resumes on release,
before the click or drag end is dispatched. A release outside the canvas is
picked up from the button state of the next event (release_if_lost).
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from grapheditor.edit.constants import (
    BUTTON_MASKS,
    DRAG_THRESHOLD,
    PRIMARY_BUTTON,
    SECONDARY_BUTTON,
    WHEEL_ZOOM_FACTOR,
)
from grapheditor.edit.controller import EditorController
from grapheditor.edit.modes import ModeBehavior
from grapheditor.edit.render import ViewTransform

logger = logging.getLogger(__name__)


@dataclass
class PressState:
    """The press in progress, from pointer down to pointer up."""
    button: int
    start: Tuple[float, float]
    last: Tuple[float, float]
    behavior: ModeBehavior
    node_id: Optional[str] = None
    panning: bool = False
    moved: bool = False
    dragging: bool = False


class GestureInterpreter:

    def __init__(self, editor: EditorController):
        self.editor = editor
        self._press: Optional[PressState] = None

    @property
    def press(self) -> Optional[PressState]:
        return self._press

    @property
    def transform(self) -> ViewTransform:
        return self.editor.renderer.transform

    def pointer_down(self, sx: float, sy: float, button: int = PRIMARY_BUTTON) -> None:
        if self._press is not None:
            # a second button while one is held is ignored
            return
        self.editor.suspend_layout()
        behavior = self.editor.behavior
        node = None
        if button == PRIMARY_BUTTON:
            node = self.editor.node_at(*self.transform.invert(sx, sy))
        panning = button == SECONDARY_BUTTON or (
            button == PRIMARY_BUTTON and node is None and behavior.pans_with_primary_button
        )
        self._press = PressState(
            button=button,
            start=(sx, sy),
            last=(sx, sy),
            behavior=behavior,
            node_id=node.id if node else None,
            panning=panning,
        )

    def pointer_move(self, sx: float, sy: float) -> None:
        press = self._press
        if press is None:
            return
        if not press.moved and math.hypot(sx - press.start[0], sy - press.start[1]) > DRAG_THRESHOLD:
            press.moved = True

        if press.panning:
            self.transform.pan(sx - press.last[0], sy - press.last[1])
            self.editor.renderer.dirty = True
        elif press.node_id is not None and press.moved:
            node = self.editor.snapshot.get_node(press.node_id)
            if node is not None:
                wx, wy = self.transform.invert(sx, sy)
                if not press.dragging:
                    press.dragging = True
                    press.behavior.on_node_drag_start(self.editor, node, wx, wy)
                press.behavior.on_node_drag(self.editor, node, wx, wy)
        press.last = (sx, sy)

    async def pointer_up(self, sx: float, sy: float, button: int = PRIMARY_BUTTON) -> None:
        press = self._press
        if press is None or button != press.button:
            return
        self._press = None
        self.editor.resume_layout()

        wx, wy = self.transform.invert(sx, sy)
        if press.dragging:
            node = self.editor.snapshot.get_node(press.node_id)
            if node is not None:
                await press.behavior.on_node_drag_end(self.editor, node, wx, wy)
            return
        if press.moved or press.button != PRIMARY_BUTTON:
            # consumed by a pan or an aborted drag
            return
        if not self.editor.has_graph:
            return

        if press.node_id is not None:
            node = self.editor.snapshot.get_node(press.node_id)
            if node is None or node.id == self.editor.session.node_id:
                return
            await press.behavior.on_node_click(self.editor, node)
        else:
            await press.behavior.on_background_click(self.editor, wx, wy)

    async def release_if_lost(self, sx: float, sy: float, buttons: int) -> bool:
        """
        End the press if its button is no longer held.

        The canvas never sees a mouseup that happens outside it; the next
        event that does arrive reports the held buttons, and a press whose
        button is missing from them is finished as if released at (sx, sy).
        Returns True when a press was ended this way.
        """
        press = self._press
        if press is None:
            return False
        if buttons & BUTTON_MASKS.get(press.button, 0):
            return False
        logger.debug(f"Button {press.button} released outside the canvas")
        await self.pointer_up(sx, sy, press.button)
        return True

    def wheel(self, sx: float, sy: float, delta_y: float) -> None:
        self.transform.zoom_at(sx, sy, 2 ** (-delta_y * WHEEL_ZOOM_FACTOR))
        self.editor.renderer.dirty = True
