"""Configuration management package.

This package provides a layered configuration system with support for:
- Built-in defaults
- An optional JSON configuration file in the project root
- Environment variable overrides (and .env loading)
- JSON schema validation

Usage:
    from page_text_backend.utils.config import ConfigManager

    config = ConfigManager()
    window = config.get("patching.search_window", 200)
"""

from .environment import EnvironmentHandler
from .file_operations import FileOperations, deep_merge_dicts
from .manager import ConfigManager
from .paths import DEFAULT_CONFIG, ConfigPaths
from .schema_validation import CONFIG_SCHEMA, SchemaValidator

__all__ = [
    'ConfigManager',
    'ConfigPaths',
    'DEFAULT_CONFIG',
    'CONFIG_SCHEMA',
    'FileOperations',
    'SchemaValidator',
    'EnvironmentHandler',
    'deep_merge_dicts',
]
