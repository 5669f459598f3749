"""
Core page text engine: template parsing, field extraction and patching.

The two operations exposed to callers are pure functions of their inputs:

- ``extract_text_fields(source)`` returns the editable fields of a page
- ``apply_text_edits(source, edits)`` returns the page with edits applied
"""

from .template_parser import TemplateParser, parse_template
from .text_fields import (
    FieldExtractor,
    FieldKind,
    PatchApplier,
    PatchResult,
    TextEdit,
    TextField,
    apply_text_edits,
    apply_text_edits_with_report,
    extract_text_fields,
)

__all__ = [
    "TemplateParser",
    "parse_template",
    "FieldExtractor",
    "FieldKind",
    "PatchApplier",
    "PatchResult",
    "TextEdit",
    "TextField",
    "apply_text_edits",
    "apply_text_edits_with_report",
    "extract_text_fields",
]
