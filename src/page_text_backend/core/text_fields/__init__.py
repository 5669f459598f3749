"""
Text Fields Package

Extraction of editable text spans from template pages and byte-exact
application of edits to those spans.

Components:
- types: TextField, TextEdit, PatchResult and friends
- grouping: landmark-based section groups
- extractor: FieldExtractor and extract_text_fields
- patcher: PatchApplier and apply_text_edits
"""

from .types import (
    DropReason,
    DroppedEdit,
    FieldKind,
    PatchResult,
    TextEdit,
    TextField,
)
from .grouping import (
    LANDMARK_ELEMENTS,
    SectionCounter,
    classify_group,
)
from .extractor import (
    CONTENT_ATTRS,
    CONTENT_ELEMENTS,
    CONTENT_PROPS,
    SKIP_ELEMENTS,
    FieldExtractor,
    extract_text_fields,
)
from .patcher import (
    PatchApplier,
    apply_text_edits,
    apply_text_edits_with_report,
    coerce_edit,
)

__all__ = [
    # Types
    "DropReason",
    "DroppedEdit",
    "FieldKind",
    "PatchResult",
    "TextEdit",
    "TextField",
    # Grouping
    "LANDMARK_ELEMENTS",
    "SectionCounter",
    "classify_group",
    # Extraction
    "CONTENT_ATTRS",
    "CONTENT_ELEMENTS",
    "CONTENT_PROPS",
    "SKIP_ELEMENTS",
    "FieldExtractor",
    "extract_text_fields",
    # Patching
    "PatchApplier",
    "apply_text_edits",
    "apply_text_edits_with_report",
    "coerce_edit",
]
