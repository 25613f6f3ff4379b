"""
Store Factory for the graph editor.

Creates the appropriate GraphStore based on configuration:
HttpGraphStore when a graph server URL is configured, MemoryGraphStore otherwise.
"""

import logging
from typing import Optional, TYPE_CHECKING

from grapheditor.config import get_api_url, get_request_timeout, load_config
from grapheditor.storage.memory_backend import MemoryGraphStore
from grapheditor.storage.http_backend import HttpGraphStore

if TYPE_CHECKING:
    from grapheditor.storage.protocol import GraphStore

logger = logging.getLogger(__name__)


def get_backend_type(config: Optional[dict] = None) -> str:
    """Return 'http' if a server URL is configured, else 'memory'."""
    if config is None:
        config = load_config()
    return "http" if get_api_url(config) else "memory"


def create_store(config: Optional[dict] = None) -> "GraphStore":
    """
    Create the GraphStore for the current configuration.

    Args:
        config: Parsed config.json contents (loaded if omitted)

    Returns:
        A GraphStore instance
    """
    if config is None:
        config = load_config()

    api_url = get_api_url(config)
    if api_url:
        logger.info(f"Using graph server at {api_url}")
        return HttpGraphStore(api_url, timeout=get_request_timeout(config))

    logger.info("No graph server configured, using in-memory storage")
    return MemoryGraphStore()
