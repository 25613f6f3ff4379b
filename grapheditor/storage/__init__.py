"""
Storage abstraction for the graph editor.

Supports two stores:
- MemoryGraphStore: process-local, used offline and in tests
- HttpGraphStore: the graph server's REST API
"""

from grapheditor.storage.protocol import GraphStore, StorageError
from grapheditor.storage.memory_backend import MemoryGraphStore
from grapheditor.storage.http_backend import HttpGraphStore
from grapheditor.storage.factory import create_store, get_backend_type

__all__ = [
    'GraphStore',
    'StorageError',
    'MemoryGraphStore',
    'HttpGraphStore',
    'create_store',
    'get_backend_type',
]
