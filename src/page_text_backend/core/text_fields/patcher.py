"""
Patch Applier Module - Byte-Exact Edits of a Page

Applies a batch of field edits to a page source without re-serialising the
document. Every edit becomes a splice of the original UTF-8 bytes, so
formatting, comments and code outside the edited spans survive untouched.

Resolution of one edit:

1. Fields are re-extracted from the *current* source; offsets from an
   earlier extraction are never trusted.
2. The field is looked up by id. Unknown ids are dropped.
3. An empty ``old_value`` inserts into the field only while it is still
   empty (``length == 0``).
4. Otherwise the bytes at the field offset must spell ``old_value``.
5. Failing that, ``old_value`` is searched for within a bounded window
   around the field offset, which absorbs small shifts caused by concurrent
   edits to the same text.
6. Anything else is dropped. The applier never guesses.

An edit whose text cannot be encoded as UTF-8, such as one carrying a lone
surrogate, is dropped as ``invalid_text``. A quote matching the one that
encloses an attribute value is written as an HTML entity.

Replacements are applied from the highest offset down, so every pending
offset stays valid while later bytes change length.

Usage:
    >>> apply_text_edits("<h1>Hi</h1>", [TextEdit("text:4", "Hi", "Hello")])
    '<h1>Hello</h1>'
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Union

from ...exceptions.page_text_exceptions import EditBatchValidationError
from ..offsets import (
    DEFAULT_OPEN_TAG_WINDOW,
    DEFAULT_SEARCH_WINDOW,
    byte_length,
    bytes_match,
    splice_bytes,
)
from ..template_parser import TemplateParser
from .extractor import FieldExtractor
from .types import DropReason, DroppedEdit, FieldKind, PatchResult, TextEdit, TextField

logger = logging.getLogger(__name__)

_QUOTE_ENTITIES = {b"\"": ("\"", "&quot;"), b"'": ("'", "&#39;")}

EditLike = Union[TextEdit, Mapping]


@dataclass(frozen=True)
class _Replacement:
    offset: int
    length: int
    new_value: str
    edit_id: str
    order: int


def coerce_edit(edit: EditLike) -> TextEdit:
    """Accept a TextEdit or its JSON mapping."""
    if isinstance(edit, TextEdit):
        return edit
    if isinstance(edit, Mapping):
        try:
            return TextEdit.from_dict(edit)
        except KeyError as e:
            raise EditBatchValidationError(f"Edit is missing required key {e}") from e
    raise EditBatchValidationError(f"Edit must be a mapping, got {type(edit).__name__}")


def escape_enclosing_quote(value: str, source_bytes: bytes, value_offset: int) -> str:
    """
    Escape the quote character that encloses an attribute value.

    Attribute fields always start right after their opening quote, so the
    byte before ``value_offset`` tells which quote must not appear raw.
    """
    if value_offset < 1:
        return value
    quote = _QUOTE_ENTITIES.get(source_bytes[value_offset - 1:value_offset])
    if quote is None:
        return value
    char, entity = quote
    return value.replace(char, entity)


class PatchApplier:
    """
    Apply field edits to a page source.

    Holds configuration only and keeps no state between calls.

    Attributes:
        extractor: Field extractor used to re-derive fields
        search_window: Bytes searched on either side of a field when its
            old value is no longer at the recorded offset
    """

    def __init__(
        self,
        extractor: Optional[FieldExtractor] = None,
        search_window: int = DEFAULT_SEARCH_WINDOW,
        parser: Optional[TemplateParser] = None
    ) -> None:
        if search_window < 0:
            raise ValueError("search_window must not be negative")
        self.extractor = extractor or FieldExtractor()
        self.parser = parser or TemplateParser()
        self.search_window = search_window

    def apply(self, source: str, edits: Iterable[EditLike]) -> PatchResult:
        """
        Apply ``edits`` to ``source``.

        Args:
            source: Current page source
            edits: Edits keyed by field id

        Returns:
            PatchResult with the rewritten source and per-edit outcome

        Raises:
            TemplateParseError: If ``source`` cannot be parsed
            EditBatchValidationError: If an edit is not a valid edit object
        """
        batch = [coerce_edit(edit) for edit in edits]

        document = self.parser.parse(source)
        fields = self.extractor.extract(document, source)
        fields_by_id = {}
        for text_field in fields:
            fields_by_id.setdefault(text_field.id, text_field)

        source_bytes = source.encode("utf-8")
        replacements: List[_Replacement] = []
        dropped: List[DroppedEdit] = []

        for order, edit in enumerate(batch):
            text_field = fields_by_id.get(edit.id)
            if text_field is None:
                logger.debug(f"Dropping edit {edit.id}: no such field in current source")
                dropped.append(DroppedEdit(edit, DropReason.UNKNOWN_FIELD))
                continue

            resolved = self._resolve(edit, text_field, source_bytes, order)
            if isinstance(resolved, DropReason):
                logger.debug(f"Dropping edit {edit.id}: {resolved.value}")
                dropped.append(DroppedEdit(edit, resolved))
                continue
            replacements.append(resolved)

        # Highest offset first; equal offsets keep submission order
        replacements.sort(key=lambda r: r.offset, reverse=True)

        buffer = bytearray(source_bytes)
        accepted: List[_Replacement] = []
        lower_bound: Optional[int] = None

        for replacement in replacements:
            if lower_bound is not None and (
                replacement.offset + replacement.length > lower_bound
                or replacement.offset == lower_bound
            ):
                logger.debug(f"Dropping edit {replacement.edit_id}: overlaps another edit")
                dropped.append(DroppedEdit(batch[replacement.order], DropReason.OVERLAP))
                continue
            splice_bytes(buffer, replacement.offset, replacement.length, replacement.new_value)
            accepted.append(replacement)
            lower_bound = replacement.offset

        applied = [r.edit_id for r in sorted(accepted, key=lambda r: r.order)]
        if dropped:
            logger.info(
                f"Applied {len(applied)} of {len(batch)} edits; dropped "
                f"{', '.join(f'{d.edit.id} ({d.reason.value})' for d in dropped)}"
            )
        else:
            logger.debug(f"Applied {len(applied)} edits")

        return PatchResult(source=buffer.decode("utf-8"), applied=applied, dropped=dropped)

    def _resolve(
        self,
        edit: TextEdit,
        text_field: TextField,
        source_bytes: bytes,
        order: int
    ) -> Union[_Replacement, DropReason]:
        try:
            edit.old_value.encode("utf-8")
            edit.new_value.encode("utf-8")
        except UnicodeEncodeError:
            return DropReason.INVALID_TEXT

        new_value = edit.new_value
        if text_field.kind is FieldKind.ATTRIBUTE:
            new_value = escape_enclosing_quote(new_value, source_bytes, text_field.offset)

        if edit.is_insertion:
            if text_field.length != 0:
                return DropReason.FIELD_NOT_EMPTY
            return _Replacement(text_field.offset, 0, new_value, edit.id, order)

        old_length = byte_length(edit.old_value)
        if bytes_match(source_bytes, text_field.offset, edit.old_value):
            return _Replacement(text_field.offset, old_length, new_value, edit.id, order)

        offset = self._search_nearby(source_bytes, text_field.offset, edit.old_value)
        if offset is None:
            return DropReason.NOT_FOUND
        logger.debug(f"Edit {edit.id} relocated from byte {text_field.offset} to {offset}")
        return _Replacement(offset, old_length, new_value, edit.id, order)

    def _search_nearby(self, source_bytes: bytes, offset: int, old_value: str) -> Optional[int]:
        """
        Find ``old_value`` within ``search_window`` bytes of ``offset``.

        The search runs on raw bytes. A needle starts with a UTF-8 lead byte,
        which never occurs as a continuation byte, so a match always starts
        on a character boundary.
        """
        needle = old_value.encode("utf-8")
        start = max(0, offset - self.search_window)
        end = min(len(source_bytes), offset + len(needle) + self.search_window)
        found = source_bytes.find(needle, start, end)
        return None if found == -1 else found

    def __repr__(self) -> str:
        return f"PatchApplier(search_window={self.search_window}, extractor={self.extractor!r})"


def apply_text_edits_with_report(
    source: str,
    edits: Iterable[EditLike],
    search_window: int = DEFAULT_SEARCH_WINDOW,
    open_tag_window: int = DEFAULT_OPEN_TAG_WINDOW
) -> PatchResult:
    """Apply edits and report which were applied or dropped."""
    applier = PatchApplier(FieldExtractor(open_tag_window), search_window)
    return applier.apply(source, edits)


def apply_text_edits(
    source: str,
    edits: Iterable[EditLike],
    search_window: int = DEFAULT_SEARCH_WINDOW,
    open_tag_window: int = DEFAULT_OPEN_TAG_WINDOW
) -> str:
    """
    Apply edits and return the rewritten source.

    Edits that cannot be located safely are dropped silently.

    Raises:
        TemplateParseError: If ``source`` cannot be parsed
    """
    return apply_text_edits_with_report(source, edits, search_window, open_tag_window).source
