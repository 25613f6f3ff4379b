"""
Configuration management for the graph editor.

Handles persistent configuration including:
- Graph server URL (absent means offline, in-memory storage)
- Layout engine tuning
- Canvas size and tick interval

Config is read from config.json next to the executable/project root; the
app never writes it.
Environment variables take priority over the file.
"""

import json
import logging
import os
from typing import Any, Dict, Optional, Tuple

from grapheditor.paths import get_config_path

logger = logging.getLogger(__name__)

API_URL_ENV = "GRAPH_EDITOR_API_URL"

DEFAULT_LAYOUT_SETTINGS: Dict[str, float] = {
    "link_distance": 150.0,
    "charge_strength": -400.0,
    "collide_distance": 50.0,
    "tick_interval": 0.05,
}

DEFAULT_CANVAS_SIZE = (960, 640)

DEFAULT_REQUEST_TIMEOUT = 10.0


def load_config() -> dict:
    """Load configuration from config.json."""
    config_path = get_config_path()
    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Ignoring unreadable config {config_path}: {e}")
            return {}
    return {}


def get_api_url(config: Optional[dict] = None) -> Optional[str]:
    """
    Get the graph server base URL.

    Priority:
    1. Environment variable GRAPH_EDITOR_API_URL
    2. "api_url" in config.json

    Returns None when neither is set, which selects the offline store.
    """
    env_url = os.environ.get(API_URL_ENV)
    if env_url:
        return env_url.rstrip('/')

    if config is None:
        config = load_config()
    url = config.get("api_url")
    return url.rstrip('/') if url else None


def get_layout_settings(config: Optional[dict] = None) -> Dict[str, float]:
    """Layout defaults overlaid with the optional "layout" object from config.json."""
    if config is None:
        config = load_config()
    settings = dict(DEFAULT_LAYOUT_SETTINGS)
    for key, value in (config.get("layout") or {}).items():
        if key not in settings:
            logger.warning(f"Unknown layout setting '{key}' ignored")
            continue
        try:
            settings[key] = float(value)
        except (TypeError, ValueError):
            logger.warning(f"Layout setting '{key}' is not a number: {value!r}")
    return settings


def get_canvas_size(config: Optional[dict] = None) -> Tuple[int, int]:
    if config is None:
        config = load_config()
    size = config.get("canvas_size")
    if isinstance(size, (list, tuple)) and len(size) == 2:
        return int(size[0]), int(size[1])
    return DEFAULT_CANVAS_SIZE


def get_request_timeout(config: Optional[dict] = None) -> float:
    if config is None:
        config = load_config()
    return float(config.get("request_timeout", DEFAULT_REQUEST_TIMEOUT))


def get_settings_summary(config: Optional[dict] = None) -> Dict[str, Any]:
    """Everything the app needs at start-up, read from a single config load."""
    if config is None:
        config = load_config()
    return {
        "api_url": get_api_url(config),
        "layout": get_layout_settings(config),
        "canvas_size": get_canvas_size(config),
        "request_timeout": get_request_timeout(config),
    }
