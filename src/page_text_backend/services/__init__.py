"""
Services package for the page text backend.

Page discovery, storage, edit batch validation and the service that ties
them to the extraction and patching engine.
"""

from .edit_validation import EDIT_BATCH_SCHEMA, EDIT_SCHEMA, parse_edit_batch
from .page_scanner import (
    PageInfo,
    extract_collection_refs,
    scan_pages_directory,
    validate_page_path,
)
from .page_store import LocalPageStore, PageStore, content_fingerprint
from .page_text_service import PageTextResult, PageTextService

__all__ = [
    "EDIT_BATCH_SCHEMA",
    "EDIT_SCHEMA",
    "parse_edit_batch",
    "PageInfo",
    "extract_collection_refs",
    "scan_pages_directory",
    "validate_page_path",
    "LocalPageStore",
    "PageStore",
    "content_fingerprint",
    "PageTextResult",
    "PageTextService",
]
