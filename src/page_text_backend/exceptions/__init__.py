"""
Exceptions package for the page text backend.

This package contains custom exception classes for parsing, storage,
edit submission and configuration errors.
"""

from .config_exceptions import (
    ConfigurationError,
    ConfigurationFileNotFoundError,
    ConfigurationValidationError,
    EnvironmentVariableError,
)

from .page_text_exceptions import (
    PageTextError,
    TemplateParseError,
    InvalidPagePathError,
    PageNotFoundError,
    ConflictError,
    EditBatchValidationError,
)

__all__ = [
    # Configuration exceptions
    "ConfigurationError",
    "ConfigurationFileNotFoundError",
    "ConfigurationValidationError",
    "EnvironmentVariableError",
    # Page text exceptions
    "PageTextError",
    "TemplateParseError",
    "InvalidPagePathError",
    "PageNotFoundError",
    "ConflictError",
    "EditBatchValidationError",
]
