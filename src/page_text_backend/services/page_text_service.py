"""
Page text service.

Ties the engine to storage: a page is fetched from the store, parsed, and
either turned into a list of editable fields or patched and written back.
The extractor and the patch applier never see the store; this module is the
only place that moves bytes between them.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from ..core.offsets import DEFAULT_OPEN_TAG_WINDOW, DEFAULT_SEARCH_WINDOW
from ..core.template_parser import Document, TemplateParser
from ..core.text_fields import FieldExtractor, PatchApplier, PatchResult, TextField
from ..core.text_fields.patcher import EditLike
from ..exceptions.page_text_exceptions import (
    EditBatchValidationError,
    InvalidPagePathError,
    PageNotFoundError,
    TemplateParseError,
)
from ..utils.config import ConfigManager
from ..utils.logging_config import AuditLogger
from .page_scanner import PageInfo, extract_collection_refs, scan_pages_directory, validate_page_path
from .page_store import PageStore

logger = logging.getLogger(__name__)


@dataclass
class PageTextResult:
    """
    Editable content of one page.

    Attributes:
        page_path: Page path relative to the pages directory
        fields: Editable fields in document order
        collection_refs: Content collections the page reads in its frontmatter
    """
    page_path: str
    fields: List[TextField] = field(default_factory=list)
    collection_refs: List[str] = field(default_factory=list)

    def groups(self) -> Dict[str, List[TextField]]:
        """Fields keyed by group id, groups in order of first appearance."""
        grouped: Dict[str, List[TextField]] = {}
        for text_field in self.fields:
            grouped.setdefault(text_field.group, []).append(text_field)
        return grouped

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page": self.page_path,
            "fields": [text_field.to_dict() for text_field in self.fields],
            "collectionRefs": list(self.collection_refs),
        }


class PageTextService:
    """
    Read and edit the text of project pages.

    Attributes:
        store: Storage the pages are read from and written to
        config: Configuration manager supplying ``pages_dir``, ``base_path``
            and the extraction and patching windows
    """

    def __init__(self, store: PageStore, config: ConfigManager) -> None:
        self.store = store
        self.config = config
        self.parser = TemplateParser()
        self.extractor = FieldExtractor(
            open_tag_window=config.get("extraction.open_tag_window", DEFAULT_OPEN_TAG_WINDOW)
        )
        self.applier = PatchApplier(
            extractor=self.extractor,
            search_window=config.get("patching.search_window", DEFAULT_SEARCH_WINDOW),
            parser=self.parser,
        )
        self.audit = AuditLogger()

    @property
    def pages_dir(self) -> str:
        return self.config.get("pages_dir", "src/pages").rstrip("/")

    def list_pages(self) -> List[PageInfo]:
        """List the static pages of the project, excluding the admin routes."""
        pages_root = self.config.resolve_project_path(self.pages_dir)
        return scan_pages_directory(pages_root, self.config.get("base_path", "/admin"))

    def get_page_fields(self, page_path: str) -> PageTextResult:
        """
        Extract the editable fields of a page.

        Args:
            page_path: Page path relative to the pages directory

        Returns:
            PageTextResult with fields and collection references

        Raises:
            InvalidPagePathError: If ``page_path`` is not a page path
            PageNotFoundError: If the page does not exist
            TemplateParseError: If the page cannot be parsed
        """
        normalized = self._normalize(page_path)
        source = self._read_page(normalized)
        document = self._parse(normalized, source)

        fields = self.extractor.extract(document, source)
        logger.info(f"Extracted {len(fields)} fields from {normalized}")
        return PageTextResult(
            page_path=normalized,
            fields=fields,
            collection_refs=extract_collection_refs(source),
        )

    def apply_page_edits(
        self,
        page_path: str,
        edits: Iterable[EditLike],
        dry_run: bool = False
    ) -> PatchResult:
        """
        Apply a batch of edits to a page and write it back.

        The write is conditional on the page still holding the source the
        edits were applied to, so a concurrent writer surfaces as a conflict
        instead of being overwritten. Nothing is written when no edit applied
        or when ``dry_run`` is set.

        Raises:
            InvalidPagePathError: If ``page_path`` is not a page path
            PageNotFoundError: If the page does not exist
            EditBatchValidationError: If the batch is empty or malformed
            TemplateParseError: If the page cannot be parsed
            ConflictError: If the page changed while the batch was applied
        """
        normalized = self._normalize(page_path)
        batch = list(edits)
        if not batch:
            raise EditBatchValidationError("Edit batch is empty")

        source = self._read_page(normalized)
        try:
            result = self.applier.apply(source, batch)
        except TemplateParseError as e:
            e.page_path = normalized
            raise

        if result.applied and not dry_run:
            self.store.write_text_file(self._store_path(normalized), result.source, expected_source=source)

        self.audit.log_page_write(
            normalized,
            result.applied,
            [{"id": d.edit.id, "reason": d.reason.value} for d in result.dropped],
            dry_run=dry_run,
        )
        return result

    def _normalize(self, page_path: Optional[str]) -> str:
        normalized = validate_page_path(page_path)
        if normalized is None:
            raise InvalidPagePathError(page_path)
        return normalized

    def _store_path(self, page_path: str) -> str:
        return f"{self.pages_dir}/{page_path}"

    def _read_page(self, page_path: str) -> str:
        source = self.store.read_text_file(self._store_path(page_path))
        if source is None:
            raise PageNotFoundError(page_path)
        return source

    def _parse(self, page_path: str, source: str) -> Document:
        try:
            return self.parser.parse(source)
        except TemplateParseError as e:
            e.page_path = page_path
            raise
