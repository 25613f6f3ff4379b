"""
Interaction modes.

Exactly one mode is active at a time. Each mode is a small strategy object
with one method per gesture kind; the gesture interpreter never branches on
the mode itself, it asks the active behaviour.

    Mode     drag on node               click on node     click on background
    rename   nothing                    open rename       create node + open rename
    link     rubber-band edge to drop   nothing           create node
    move     node follows pointer       nothing           create node
    delete   nothing                    delete node       create node
"""

from enum import Enum
from typing import TYPE_CHECKING, Dict

from grapheditor.graph import Node

if TYPE_CHECKING:
    from grapheditor.edit.controller import EditorController


class InteractionMode(str, Enum):
    RENAME = 'rename'
    LINK = 'link'
    MOVE = 'move'
    DELETE = 'delete'


class ModeBehavior:
    """Base behaviour: drags do nothing, clicks on nodes do nothing, background clicks create a node."""

    mode: InteractionMode
    # Primary-button drags on the background pan the canvas
    pans_with_primary_button = False

    async def on_node_click(self, editor: 'EditorController', node: Node) -> None:
        pass

    def on_node_drag_start(self, editor: 'EditorController', node: Node, x: float, y: float) -> None:
        pass

    def on_node_drag(self, editor: 'EditorController', node: Node, x: float, y: float) -> None:
        pass

    async def on_node_drag_end(self, editor: 'EditorController', node: Node, x: float, y: float) -> None:
        pass

    async def on_background_click(self, editor: 'EditorController', x: float, y: float) -> None:
        await editor.create_node_at(x, y)


class RenameMode(ModeBehavior):
    mode = InteractionMode.RENAME

    async def on_node_click(self, editor, node):
        # the press started in Rename, whatever the mode is now
        await editor.open_edit_session(node, force=True)

    async def on_background_click(self, editor, x, y):
        await editor.create_node_at(x, y, open_editor=True)


class LinkMode(ModeBehavior):
    """Drag from a source node and release over a target to request source -> target."""

    mode = InteractionMode.LINK

    def on_node_drag_start(self, editor, node, x, y):
        node.pin()
        editor.drag_source_id = node.id
        editor.drop_target_id = None
        editor.renderer.show_drag_line(node.x, node.y, node.x, node.y)
        editor.refresh()

    def on_node_drag(self, editor, node, x, y):
        editor.renderer.show_drag_line(node.x, node.y, x, y)
        target = editor.node_at(x, y, exclude_id=node.id)
        target_id = target.id if target else None
        if target_id != editor.drop_target_id:
            editor.drop_target_id = target_id
            editor.refresh()

    async def on_node_drag_end(self, editor, node, x, y):
        node.unpin()
        editor.renderer.hide_drag_line()
        target = editor.node_at(x, y, exclude_id=node.id)
        editor.drag_source_id = None
        editor.drop_target_id = None
        editor.refresh()
        if target is not None:
            await editor.request_edge(node.id, target.id)


class MoveMode(ModeBehavior):
    """The dragged node is pinned to the pointer; its glyph and edges follow immediately."""

    mode = InteractionMode.MOVE
    pans_with_primary_button = True

    def on_node_drag_start(self, editor, node, x, y):
        node.pin()

    def on_node_drag(self, editor, node, x, y):
        node.pin(x, y)
        editor.renderer.move_node(node)

    async def on_node_drag_end(self, editor, node, x, y):
        node.unpin()
        # keep the drop point if a rebuild happens before the next tick
        editor.cache.set(node.id, node.x, node.y)


class DeleteMode(ModeBehavior):
    mode = InteractionMode.DELETE

    async def on_node_click(self, editor, node):
        await editor.delete_node(node.id)


MODE_BEHAVIORS: Dict[InteractionMode, ModeBehavior] = {
    InteractionMode.RENAME: RenameMode(),
    InteractionMode.LINK: LinkMode(),
    InteractionMode.MOVE: MoveMode(),
    InteractionMode.DELETE: DeleteMode(),
}


def get_behavior(mode: InteractionMode) -> ModeBehavior:
    return MODE_BEHAVIORS[InteractionMode(mode)]
