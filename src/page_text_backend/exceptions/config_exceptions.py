"""
Configuration exceptions.

Raised while layering defaults, the project configuration file and
``PAGE_TEXT_*`` environment variables. The CLI prints them and exits, so
each error renders to a complete, self-explaining message.
"""

from typing import List, Optional


class ConfigurationError(Exception):
    """
    Base exception for configuration errors.

    Attributes:
        config_file: File being loaded when the error occurred, if any
        hint: One-line remedy appended to the message
    """

    hint: Optional[str] = None

    def __init__(self, message: str, config_file: Optional[str] = None, hint: Optional[str] = None):
        super().__init__(message)
        self.config_file = config_file
        if hint is not None:
            self.hint = hint

    def __str__(self) -> str:
        lines = [self.args[0]]
        if self.config_file:
            lines.append(f"Config file: {self.config_file}")
        if self.hint:
            lines.append(f"Hint: {self.hint}")
        return "\n".join(lines)


class ConfigurationFileNotFoundError(ConfigurationError):
    """Raised when an explicitly requested configuration file is missing."""

    hint = "Omit --config-path to run with built-in defaults"


class ConfigurationValidationError(ConfigurationError):
    """
    Raised when the merged configuration violates the schema.

    Attributes:
        validation_errors: Messages reported by the schema validator
        invalid_fields: Dotted paths of the offending settings
    """

    def __init__(
        self,
        message: str,
        config_file: Optional[str] = None,
        validation_errors: Optional[List[str]] = None,
        invalid_fields: Optional[List[str]] = None
    ):
        self.validation_errors = validation_errors or []
        self.invalid_fields = invalid_fields or []
        hint = f"Check {', '.join(self.invalid_fields)}" if self.invalid_fields else None
        super().__init__(message, config_file, hint)


class EnvironmentVariableError(ConfigurationError):
    """Raised when a ``PAGE_TEXT_*`` variable holds a value of the wrong type."""

    def __init__(self, message: str, variable_name: Optional[str] = None):
        self.variable_name = variable_name
        hint = f"Fix or unset {variable_name}" if variable_name else None
        super().__init__(message, hint=hint)
