"""
Main configuration manager for the page text backend.

This module provides the ConfigManager class that layers built-in defaults,
an optional JSON configuration file, and ``PAGE_TEXT_*`` environment
variables, then validates the result against the configuration schema.
"""

import logging
import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ...exceptions.config_exceptions import (
    ConfigurationError,
    ConfigurationFileNotFoundError,
    ConfigurationValidationError,
    EnvironmentVariableError,
)
from .environment import EnvironmentHandler
from .file_operations import FileOperations, deep_merge_dicts
from .paths import DEFAULT_CONFIG, ConfigPaths
from .schema_validation import SchemaValidator


logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Configuration manager for the page text backend.

    Handles loading, validation, and merging of configuration from multiple sources:
    - Built-in defaults
    - The project configuration file (pagetext.config.json)
    - Environment variables (and a .env file in the project root)

    The default configuration file is optional. A configuration file named
    explicitly must exist.
    """

    def __init__(
        self,
        config_file: Optional[str] = None,
        project_root: Optional[Union[str, Path]] = None,
        load_env: bool = True,
    ) -> None:
        """
        Initialize the ConfigManager.

        Args:
            config_file: Path to configuration file (default: pagetext.config.json)
            project_root: Project root directory (default: current working directory)
            load_env: Whether to load environment variables from .env file
        """
        self.project_root = Path(project_root or os.getcwd()).resolve()
        self.paths = ConfigPaths()
        self.config_file = config_file or self.paths.DEFAULT_CONFIG_FILE
        self._config_file_required = config_file is not None

        self._config: Dict[str, Any] = {}
        self._loaded = False
        self._loaded_from: Optional[Path] = None

        self.logger = logger

        self.file_ops = FileOperations(self.project_root, self.paths.ENV_FILE)
        self.schema_validator = SchemaValidator()
        self.env_handler = EnvironmentHandler()

        if load_env:
            self.file_ops.load_environment_variables()

    @property
    def config(self) -> Dict[str, Any]:
        """Get the current configuration. Loads if not already loaded."""
        if not self._loaded:
            self.load_config()
        return deepcopy(self._config)

    @property
    def is_loaded(self) -> bool:
        """Check if configuration has been loaded."""
        return self._loaded

    def load_config(self, force_reload: bool = False, validate: bool = True) -> Dict[str, Any]:
        """
        Load configuration from all sources.

        Args:
            force_reload: Force reloading even if already loaded
            validate: Whether to validate configuration against schema

        Returns:
            Loaded configuration dictionary

        Raises:
            ConfigurationFileNotFoundError: If an explicitly named file is missing
            ConfigurationValidationError: If validation fails
            ConfigurationError: If loading fails for any other reason
        """
        if self._loaded and not force_reload:
            self.logger.debug("Configuration already loaded, returning cached version")
            return deepcopy(self._config)

        try:
            config_path = self.file_ops.resolve_path(self.config_file)
            if config_path.exists() or self._config_file_required:
                file_config = self.file_ops.load_json_file(config_path)
                self._loaded_from = config_path
            else:
                self.logger.debug(f"No configuration file at {config_path}, using defaults")
                file_config = {}
                self._loaded_from = None

            merged_config = deep_merge_dicts(DEFAULT_CONFIG, file_config)
            merged_config = self.env_handler.apply_environment_overrides(merged_config)

            if validate:
                self.schema_validator.validate_config(merged_config, str(self.config_file))

            self._config = merged_config
            self._loaded = True
            self.logger.info("Configuration loaded successfully")
            return deepcopy(self._config)

        except (
            ConfigurationFileNotFoundError,
            ConfigurationValidationError,
            EnvironmentVariableError,
        ) as e:
            self.logger.error(f"Configuration loading failed: {e.args[0]}")
            self._loaded = False
            raise
        except ConfigurationError:
            self._loaded = False
            raise
        except PermissionError as e:
            error_msg = f"Permission denied accessing configuration files: {e}"
            self.logger.error(error_msg)
            self._loaded = False
            raise ConfigurationError(error_msg) from e

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by key using dot notation.

        Args:
            key: Configuration key (supports dot notation like 'patching.search_window')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        config = self.config
        try:
            for k in key.split('.'):
                config = config[k]
            return config
        except (KeyError, TypeError):
            return default

    def has(self, key: str) -> bool:
        """Check if a configuration key exists."""
        missing = object()
        return self.get(key, missing) is not missing

    def reset(self) -> None:
        """Reset configuration state, forcing reload on next access."""
        self._config = {}
        self._loaded = False
        self._loaded_from = None

    def resolve_project_path(self, path: Union[str, Path]) -> Path:
        """Resolve a configured path against the project root."""
        return self.file_ops.resolve_path(path)

    def get_config_summary(self) -> Dict[str, Any]:
        """
        Get a summary of the current configuration state.

        Returns:
            Dictionary with configuration summary
        """
        summary: Dict[str, Any] = {
            "loaded": self._loaded,
            "config_file": str(self.config_file),
            "loaded_from": str(self._loaded_from) if self._loaded_from else None,
            "project_root": str(self.project_root),
            "config_keys": [],
            "environment_overrides": [],
        }

        if self._loaded:
            summary["config_keys"] = self._get_all_keys(self._config)
            summary["environment_overrides"] = [
                {"env_var": env_var, "config_key": config_key}
                for env_var, config_key in self.env_handler.active_overrides().items()
            ]

        return summary

    def _get_all_keys(self, config: Dict[str, Any], prefix: str = "") -> List[str]:
        keys = []
        for key, value in config.items():
            full_key = f"{prefix}.{key}" if prefix else key
            keys.append(full_key)
            if isinstance(value, dict):
                keys.extend(self._get_all_keys(value, full_key))
        return keys
