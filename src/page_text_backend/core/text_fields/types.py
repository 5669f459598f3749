"""
Text field data types.

Value objects exchanged between the field extractor, the patch applier and
their callers. Fields are recomputed from a source string on every call and
never persisted.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping

MULTILINE_THRESHOLD = 80


class FieldKind(str, Enum):
    """What part of the markup a field edits."""
    TEXT = "text"
    ATTRIBUTE = "attribute"


@dataclass(frozen=True)
class TextField:
    """
    One editable span of a page source.

    Attributes:
        id: ``text:<offset>`` or ``attr:<offset>:<name>``; stable within one
            extraction pass only
        label: Human-readable description, e.g. ``"h1 text"`` or ``"img alt"``
        value: Current text, equal to the decoded bytes at ``offset``
        kind: Text content or attribute value
        offset: UTF-8 byte offset in the source
        length: UTF-8 byte length of ``value``
        multiline: Rendering hint for editors
        group: Section id such as ``"section:2"``, empty when ungrouped
    """
    id: str
    label: str
    value: str
    kind: FieldKind
    offset: int
    length: int
    multiline: bool = False
    group: str = ""

    @staticmethod
    def text_id(offset: int) -> str:
        return f"text:{offset}"

    @staticmethod
    def attribute_id(offset: int, name: str) -> str:
        return f"attr:{offset}:{name}"

    @staticmethod
    def is_multiline(value: str) -> bool:
        return len(value) > MULTILINE_THRESHOLD or "\n" in value

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation."""
        return {
            "id": self.id,
            "label": self.label,
            "value": self.value,
            "kind": self.kind.value,
            "offset": self.offset,
            "length": self.length,
            "multiline": self.multiline,
            "group": self.group,
        }


@dataclass(frozen=True)
class TextEdit:
    """
    A proposed change to one field.

    An empty ``old_value`` asks to insert into a field that is still empty.
    """
    id: str
    old_value: str
    new_value: str

    @property
    def is_insertion(self) -> bool:
        return self.old_value == ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TextEdit":
        """
        Build an edit from its JSON shape.

        Accepts ``newValue`` and, for older clients, ``value`` as the new text.
        """
        new_value = data["newValue"] if "newValue" in data else data["value"]
        return cls(id=str(data["id"]), old_value=data["oldValue"], new_value=new_value)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "oldValue": self.old_value, "newValue": self.new_value}


class DropReason(str, Enum):
    """Why an edit was not applied."""
    UNKNOWN_FIELD = "unknown_field"
    FIELD_NOT_EMPTY = "field_not_empty"
    NOT_FOUND = "not_found"
    OVERLAP = "overlap"
    INVALID_TEXT = "invalid_text"


@dataclass(frozen=True)
class DroppedEdit:
    edit: TextEdit
    reason: DropReason


@dataclass
class PatchResult:
    """
    Outcome of applying a batch of edits.

    Attributes:
        source: Rewritten source
        applied: Ids of edits that were applied, in edit order
        dropped: Edits that could not be located safely
    """
    source: str
    applied: List[str] = field(default_factory=list)
    dropped: List[DroppedEdit] = field(default_factory=list)
