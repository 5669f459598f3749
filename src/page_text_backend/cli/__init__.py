"""
Page Text CLI Package.

This package contains the command-line interface for listing project pages,
inspecting their editable text fields and applying edit batches.
"""

from .cli import app, cli_main

__all__ = ["app", "cli_main"]
