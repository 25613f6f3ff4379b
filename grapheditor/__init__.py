"""
Interactive node/edge graph editor.

The package is split into:
- graph / position_cache / layout: data model and force-directed layout
- edit: interaction modes, gestures, rename session, rendering, NiceGUI wiring
- storage: persistence collaborators (in-memory and HTTP)
"""

__version__ = "0.1.0"
