"""
Edit Handlers - NiceGUI event handlers for the editing canvas.

This module keeps the event wiring out of app.py so the main application file
stays focused on page layout. Every handler translates a NiceGUI event into a
GestureInterpreter / EditorController call and then pushes the redrawn SVG to
the canvas if anything changed.
"""

import logging
from typing import Any, Callable, Dict

from nicegui import events, ui

from grapheditor.edit.controller import EditorController
from grapheditor.edit.gestures import GestureInterpreter
from grapheditor.edit.overlay import EditOverlay

logger = logging.getLogger(__name__)


def setup_edit_handlers(
    state: Dict[str, Any],
    controller: EditorController,
    interpreter: GestureInterpreter,
    overlay: EditOverlay,
    refresh_panels: Callable[[], None],
):
    """
    Set up all canvas event handlers.

    Args:
        state: App state dictionary; must hold the canvas under 'canvas'
            and may hold a status label under 'status_label'
        controller: EditorController instance
        interpreter: GestureInterpreter bound to the controller
        overlay: EditOverlay drawing the rename input
        refresh_panels: Redraws sidebar panels that list nodes

    Returns:
        Dict with handler functions for binding to UI events
    """

    def render_canvas():
        """Push the SVG to the browser if the scene changed."""
        renderer = controller.renderer
        if renderer.dirty and state.get('canvas') is not None:
            state['canvas'].content = renderer.to_svg()
            renderer.mark_clean()

    def on_status(message: str):
        label = state.get('status_label')
        if label is not None:
            label.text = message

    def on_error(message: str):
        ui.notify(message, type='negative', position='bottom')

    def on_change():
        overlay.render.refresh()
        refresh_panels()
        render_canvas()

    controller.set_on_status(on_status)
    controller.set_on_error(on_error)
    controller.set_on_change(on_change)

    async def handle_mouse(e: events.MouseEventArguments):
        """Route canvas pointer events to the gesture interpreter."""
        if e.type in ('mousedown', 'mousemove'):
            # a release outside the canvas only shows up in e.buttons
            await interpreter.release_if_lost(e.image_x, e.image_y, e.buttons)
        if e.type == 'mousedown':
            interpreter.pointer_down(e.image_x, e.image_y, e.button)
        elif e.type == 'mousemove':
            interpreter.pointer_move(e.image_x, e.image_y)
        elif e.type == 'mouseup':
            await interpreter.pointer_up(e.image_x, e.image_y, e.button)
        render_canvas()

    def handle_wheel(e: events.GenericEventArguments):
        """Zoom around the pointer."""
        args = e.args if isinstance(e.args, dict) else {}
        interpreter.wheel(args.get('offsetX', 0), args.get('offsetY', 0), args.get('deltaY', 0))
        render_canvas()

    def handle_tick():
        """Advance the layout one step; called by ui.timer."""
        if controller.tick():
            render_canvas()

    def handle_keyboard(e: events.KeyEventArguments):
        """Escape closes the rename session without saving."""
        if e.key == 'Escape' and e.action.keydown and controller.session.is_open:
            controller.cancel_edit()

    def teardown():
        timer = state.get('tick_timer')
        if timer is not None:
            timer.cancel()
        controller.teardown()
        logger.debug("Editor torn down")

    return {
        'handle_mouse': handle_mouse,
        'handle_wheel': handle_wheel,
        'handle_tick': handle_tick,
        'handle_keyboard': handle_keyboard,
        'render_canvas': render_canvas,
        'teardown': teardown,
    }
