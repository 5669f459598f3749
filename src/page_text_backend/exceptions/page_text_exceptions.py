"""
Page text exceptions.

Exceptions raised by the template parser, the page store and the page text
service. Per-field and per-edit anomalies are never raised; they are dropped
from results and logged instead.
"""

from typing import List, Optional


class PageTextError(Exception):
    """Base exception for page text operations."""

    def __init__(self, message: str, page_path: Optional[str] = None):
        super().__init__(message)
        self.page_path = page_path


class TemplateParseError(PageTextError):
    """
    Raised when a template document cannot be parsed.

    A document that cannot be parsed yields no fields at all, so this error
    is fatal for the request that triggered it.

    Attributes:
        offset: Byte offset in the source where parsing failed
        line_number: 1-based line number of the failure
    """

    def __init__(
        self,
        message: str,
        offset: Optional[int] = None,
        line_number: Optional[int] = None,
        page_path: Optional[str] = None
    ):
        self.offset = offset
        self.line_number = line_number

        error_parts = [message]
        if line_number is not None:
            error_parts.append(f"at line {line_number}")
        if offset is not None:
            error_parts.append(f"(byte {offset})")

        super().__init__(" ".join(error_parts), page_path)


class InvalidPagePathError(PageTextError):
    """Raised when a page path is not an acceptable template path."""

    def __init__(self, page_path: Optional[str]):
        super().__init__(f"Invalid page path: {page_path!r}", page_path)


class PageNotFoundError(PageTextError):
    """Raised when a page cannot be read from the store."""

    def __init__(self, page_path: str):
        super().__init__(f"Page '{page_path}' not found", page_path)


class ConflictError(PageTextError):
    """Raised when a page changed on disk between read and write."""

    def __init__(self, page_path: str, message: Optional[str] = None):
        super().__init__(
            message or (
                f"Conflict updating {page_path}: the file was modified "
                f"concurrently. Please retry."
            ),
            page_path
        )


class EditBatchValidationError(PageTextError):
    """Raised when a submitted batch of edits is malformed."""

    def __init__(self, message: str, validation_errors: Optional[List[str]] = None):
        super().__init__(message)
        self.validation_errors = validation_errors or []

    def __str__(self) -> str:
        msg = super().__str__()
        if self.validation_errors:
            msg += "\n\nValidation errors:"
            for i, error in enumerate(self.validation_errors, 1):
                msg += f"\n  {i}. {error}"
        return msg
