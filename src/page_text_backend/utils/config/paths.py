"""
Configuration file names and built-in defaults for the page text backend.
"""

from dataclasses import dataclass
from typing import Any, Dict

from ...core.offsets import DEFAULT_OPEN_TAG_WINDOW, DEFAULT_SEARCH_WINDOW


@dataclass
class ConfigPaths:
    """Configuration file paths and constants."""

    DEFAULT_CONFIG_FILE: str = "pagetext.config.json"
    ENV_FILE: str = ".env"


DEFAULT_CONFIG: Dict[str, Any] = {
    "version": "0.1.0",
    "pages_dir": "src/pages",
    "base_path": "/admin",
    "extraction": {
        "open_tag_window": DEFAULT_OPEN_TAG_WINDOW,
    },
    "patching": {
        "search_window": DEFAULT_SEARCH_WINDOW,
    },
    "logging": {
        "level": "INFO",
        "format": "standard",
    },
}
