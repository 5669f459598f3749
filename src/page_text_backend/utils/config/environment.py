"""
Environment variable handling for configuration management.

Maps ``PAGE_TEXT_*`` environment variables onto configuration keys and
converts their string values to the types the schema expects.
"""

import logging
import os
from copy import deepcopy
from typing import Any, Dict, Tuple

from ...exceptions.config_exceptions import EnvironmentVariableError


logger = logging.getLogger(__name__)


class EnvironmentHandler:
    """
    Environment variable handling for configuration management.

    Handles environment variable overrides and type conversion.
    """

    def __init__(self) -> None:
        self.logger = logger

    def get_env_mapping(self) -> Dict[str, Tuple[str, str]]:
        """
        Get mapping of environment variable names to configuration keys.

        Returns:
            Dictionary mapping env var names to (config key, target type)
        """
        return {
            "PAGE_TEXT_PAGES_DIR": ("pages_dir", "string"),
            "PAGE_TEXT_BASE_PATH": ("base_path", "string"),
            "PAGE_TEXT_LOG_LEVEL": ("logging.level", "string"),
            "PAGE_TEXT_LOG_FORMAT": ("logging.format", "string"),
            "PAGE_TEXT_OPEN_TAG_WINDOW": ("extraction.open_tag_window", "integer"),
            "PAGE_TEXT_SEARCH_WINDOW": ("patching.search_window", "integer"),
        }

    def convert_env_value(self, var_name: str, value: str, target_type: str = "string") -> Any:
        """
        Convert environment variable string to appropriate Python type.

        Args:
            var_name: Environment variable name, for error reporting
            value: Environment variable value (always string)
            target_type: Target type ('string' or 'integer')

        Returns:
            Converted value

        Raises:
            EnvironmentVariableError: If conversion fails
        """
        if target_type == "integer":
            try:
                return int(value)
            except ValueError as e:
                raise EnvironmentVariableError(
                    f"Environment variable {var_name}={value!r} is not an integer",
                    var_name
                ) from e
        return value

    def apply_environment_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply environment variable overrides to configuration.

        Args:
            config: Base configuration dictionary

        Returns:
            Configuration with environment overrides applied

        Raises:
            EnvironmentVariableError: If a set variable cannot be converted
        """
        result = deepcopy(config)

        for env_var, (config_key, target_type) in self.get_env_mapping().items():
            env_value = os.getenv(env_var)
            if env_value is None or env_value == "":
                continue
            converted_value = self.convert_env_value(env_var, env_value, target_type)
            self._set_nested_value(result, config_key, converted_value)
            self.logger.debug(f"Applied environment override: {env_var} -> {config_key}")

        return result

    def _set_nested_value(self, config: Dict[str, Any], key_path: str, value: Any) -> None:
        keys = key_path.split(".")
        current = config

        for key in keys[:-1]:
            if key not in current or not isinstance(current[key], dict):
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value

    def active_overrides(self) -> Dict[str, str]:
        """Environment variables currently overriding configuration keys."""
        return {
            env_var: config_key
            for env_var, (config_key, _) in self.get_env_mapping().items()
            if os.getenv(env_var)
        }
