"""
Utilities package for the page text backend.

Configuration loading and logging setup shared by the services and the CLI.
"""

from .config import ConfigManager, ConfigPaths
from .logging_config import AuditLogger, LogFormat, LoggingManager, LogLevel

__all__ = [
    "ConfigManager",
    "ConfigPaths",
    "AuditLogger",
    "LogFormat",
    "LoggingManager",
    "LogLevel",
]
