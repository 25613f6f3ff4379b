"""
Edit Overlay - canvas styling and the inline rename input.

The canvas itself is an SVG document produced by GraphRenderer; this module
injects the CSS the renderer's classes rely on and draws the single text
input used by the rename session, absolutely positioned over the node.
"""

from typing import Awaitable, Callable

from nicegui import ui

from grapheditor.edit.controller import EditorController

CANVAS_CSS = '''
<style>
    .graph-canvas { background: #1f2430; cursor: crosshair; }
    .graph-canvas .link { stroke: #8a93a6; stroke-width: 2; }
    .graph-canvas .link-arrow { fill: #8a93a6; }
    .graph-canvas .drag-line { stroke: #f5c542; stroke-width: 2; stroke-dasharray: 6,4; }
    .graph-canvas .node circle { fill: #3b82f6; stroke: #dbeafe; stroke-width: 2; }
    .graph-canvas .node text { fill: #ffffff; font: 11px system-ui, sans-serif; pointer-events: none; }
    .graph-canvas .node.selected circle { stroke: #f59e0b; stroke-width: 4; }
    .graph-canvas .node.editing circle { stroke: #22c55e; stroke-width: 4; }
    .graph-canvas .node.delete-mode circle { fill: #ef4444; }
    .graph-canvas .node.move-mode { cursor: move; }
    .graph-canvas .node.drag-source circle { stroke: #f5c542; stroke-width: 4; }
    .graph-canvas .node.drag-target circle { fill: #22c55e; }
    .node-edit-input { position: absolute; transform: translate(-50%, -50%); width: 140px; z-index: 100; }
</style>
'''


class EditOverlay:
    """
    Renders the rename input for the controller's edit session.

    Call setup() once per page; render() is refreshable and redraws the
    input whenever the session opens, closes or moves.
    """

    def __init__(self, controller: EditorController,
                 on_commit: Callable[[str], Awaitable[None]],
                 on_cancel: Callable[[], None]):
        self.controller = controller
        self._on_commit = on_commit
        self._on_cancel = on_cancel
        self._is_setup = False

    def setup(self) -> None:
        if self._is_setup:
            return
        ui.add_head_html(CANVAS_CSS)
        self._is_setup = True

    @ui.refreshable
    def render(self) -> None:
        state = self.controller.session.state
        if state is None:
            return
        x, y = state.overlay_position
        edit_input = ui.input(value=state.pending_text).props('dense outlined autofocus dark') \
            .classes('node-edit-input').style(f'left: {x:.0f}px; top: {y:.0f}px;')
        edit_input.on('update:model-value', lambda e: self.controller.set_edit_text(edit_input.value))

        node_id = state.node_id

        async def commit():
            # a late event from an input whose session already ended
            if self.controller.session.node_id != node_id:
                return
            await self._on_commit(edit_input.value)

        edit_input.on('keydown.enter', commit)
        # leaving the input keeps what was typed
        edit_input.on('blur', commit)
        edit_input.on('keydown.escape', lambda: self._on_cancel())
