"""
Interactive editing system for the graph canvas.

This package provides the four-mode editing core:
- EditorController: owns snapshot, mode, selection and optimistic mutations
- GestureInterpreter: click / drag / pan / zoom classification
- InteractionMode + mode behaviours: what each gesture means per mode
- EditSession: the inline rename session
- GraphRenderer: scene model and SVG output
- EditActions: persistence requests and failure reporting

The NiceGUI pieces (EditOverlay, setup_edit_handlers) live in
grapheditor.edit.overlay and grapheditor.edit.handlers and are imported by
app.py directly, so the core stays importable without a running UI.

Usage:
    from grapheditor.edit import EditorController, GestureInterpreter, InteractionMode
"""

from grapheditor.edit.constants import (
    NODE_RADIUS,
    LABEL_MAX_LENGTH,
    DRAG_THRESHOLD,
    MIN_ZOOM,
    MAX_ZOOM,
    PRIMARY_BUTTON,
    SECONDARY_BUTTON,
)
from grapheditor.edit.modes import InteractionMode, ModeBehavior, get_behavior
from grapheditor.edit.session import EditSession, EditSessionState
from grapheditor.edit.render import GraphRenderer, ViewTransform, truncate_label
from grapheditor.edit.actions import EditActions
from grapheditor.edit.controller import EditorController
from grapheditor.edit.gestures import GestureInterpreter

__all__ = [
    'EditorController',
    'GestureInterpreter',
    'InteractionMode',
    'ModeBehavior',
    'get_behavior',
    'EditSession',
    'EditSessionState',
    'GraphRenderer',
    'ViewTransform',
    'truncate_label',
    'EditActions',
    'NODE_RADIUS',
    'LABEL_MAX_LENGTH',
    'DRAG_THRESHOLD',
    'MIN_ZOOM',
    'MAX_ZOOM',
    'PRIMARY_BUTTON',
    'SECONDARY_BUTTON',
]
