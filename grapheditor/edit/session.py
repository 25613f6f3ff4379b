"""
Edit Session - the single inline rename overlay.

Holds which node is being renamed, the pending text, and where the text input
should be drawn (the node's rendered position plus the canvas container's
screen offset). Persisting the new name is the controller's job; this class
only decides whether a commit yields a name.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from grapheditor.graph import Node
from grapheditor.edit.render import ViewTransform

logger = logging.getLogger(__name__)


@dataclass
class EditSessionState:
    node_id: str
    pending_text: str
    overlay_position: Tuple[float, float]


class EditSession:

    def __init__(self):
        self._state: Optional[EditSessionState] = None

    @property
    def state(self) -> Optional[EditSessionState]:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is not None

    @property
    def node_id(self) -> Optional[str]:
        return self._state.node_id if self._state else None

    def open(self, node: Node, transform: Optional[ViewTransform] = None,
             container_offset: Tuple[float, float] = (0.0, 0.0),
             text: Optional[str] = None) -> EditSessionState:
        """
        Start renaming node. At most one session exists: the controller
        commits an open one before calling this, anything still open is replaced.
        """
        if self._state is not None:
            logger.debug(f"Replacing open edit session for {self._state.node_id}")
            self.cancel()
        sx, sy = transform.apply(node.x, node.y) if transform else (node.x, node.y)
        self._state = EditSessionState(
            node_id=node.id,
            pending_text=node.name if text is None else text,
            overlay_position=(sx + container_offset[0], sy + container_offset[1]),
        )
        return self._state

    def set_text(self, text: str) -> None:
        if self._state is not None:
            self._state.pending_text = text

    def commit(self, text: Optional[str] = None) -> Optional[Tuple[str, str]]:
        """
        Close the session and return (node_id, trimmed name).

        Returns None when no session is open or the trimmed text is empty;
        an empty commit behaves exactly like cancel().
        """
        if self._state is None:
            return None
        value = self._state.pending_text if text is None else text
        node_id = self._state.node_id
        self._state = None
        name = (value or '').strip()
        if not name:
            return None
        return node_id, name

    def cancel(self) -> None:
        self._state = None
