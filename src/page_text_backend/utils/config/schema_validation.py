"""
Schema validation for configuration management.

Validates the merged configuration against the built-in JSON schema.
"""

import logging
from typing import Any, Dict, Optional

import jsonschema

from ...exceptions.config_exceptions import ConfigurationValidationError


logger = logging.getLogger(__name__)


CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "version": {"type": "string"},
        "pages_dir": {"type": "string", "minLength": 1},
        "base_path": {"type": "string", "pattern": "^/"},
        "extraction": {
            "type": "object",
            "properties": {
                "open_tag_window": {"type": "integer", "minimum": 1},
            },
        },
        "patching": {
            "type": "object",
            "properties": {
                "search_window": {"type": "integer", "minimum": 0},
            },
        },
        "logging": {
            "type": "object",
            "properties": {
                "level": {"enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]},
                "format": {"enum": ["standard", "json", "detailed"]},
            },
        },
    },
    "required": ["pages_dir", "base_path"],
}


class SchemaValidator:
    """
    Schema validation for configuration management.

    Handles JSON schema validation and user-friendly error reporting.
    """

    def __init__(self, schema: Optional[Dict[str, Any]] = None) -> None:
        self.schema = schema or CONFIG_SCHEMA
        self.logger = logger

    def validate_config(self, config: Dict[str, Any], config_file: str = "unknown") -> bool:
        """
        Validate configuration against the JSON schema.

        Args:
            config: Configuration dictionary to validate
            config_file: Configuration file name for error reporting

        Returns:
            True if validation passes

        Raises:
            ConfigurationValidationError: If validation fails
        """
        try:
            jsonschema.validate(config, self.schema)
        except jsonschema.ValidationError as e:
            validation_errors = [e.message]
            invalid_fields = []

            if e.absolute_path:
                invalid_fields.append(".".join(str(p) for p in e.absolute_path))

            for ctx_error in getattr(e, "context", None) or []:
                validation_errors.append(ctx_error.message)
                if ctx_error.absolute_path:
                    invalid_fields.append(".".join(str(p) for p in ctx_error.absolute_path))

            raise ConfigurationValidationError(
                f"Configuration validation failed: {e.message}",
                config_file,
                validation_errors,
                invalid_fields
            ) from e

        return True
