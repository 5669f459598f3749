"""
Field Extractor Module - Editable Spans of a Page

Walks a parsed template once and collects every span of literal, user-visible
text that an editor may change without touching code:

- text between tags, outside code regions
- a fixed allow-list of attributes on elements (``alt``, ``title``, ...)
  and of props on components (``title``, ``heading``, ``cta``, ...), when the
  value is a quoted literal
- phantom fields: zero-length insertion points inside empty content elements
  such as ``<h2></h2>``

Code regions are never entered: ``{...}`` expressions, the frontmatter fence
and the ``script``, ``style``, ``head``, ``code`` and ``pre`` elements are
skipped together with everything below them.

Every field is verified against the raw source bytes before it is emitted.
A node whose recorded position does not decode back to its own text is
dropped rather than risk pointing an edit at the wrong bytes.

Usage:
    >>> fields = extract_text_fields('<section><h1>Hello</h1></section>')
    >>> [(f.id, f.label, f.value, f.group) for f in fields]
    [('text:13', 'h1 text', 'Hello', 'section')]
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from ..offsets import (
    DEFAULT_OPEN_TAG_WINDOW,
    byte_length,
    bytes_match,
    find_open_tag_end,
)
from ..template_parser import (
    Attribute,
    AttributeKind,
    Component,
    Document,
    Element,
    Expression,
    Frontmatter,
    Node,
    TagNode,
    Text,
    is_parent,
    parse_template,
)
from .grouping import SectionCounter, classify_group
from .types import FieldKind, TextField

logger = logging.getLogger(__name__)

# Elements whose subtree is never editable
SKIP_ELEMENTS = frozenset({"script", "style", "head", "code", "pre"})

# Element attributes that hold user-visible text
CONTENT_ATTRS = frozenset({"alt", "title", "placeholder", "aria-label", "aria-description"})

# Component props that conventionally hold user-visible text
CONTENT_PROPS = frozenset({
    "title", "subtitle", "heading", "description", "label", "text", "cta", "alt", "placeholder",
})

# Elements that always carry text content: whitespace-only text inside them is
# kept, and an empty one gets a phantom field
CONTENT_ELEMENTS = frozenset({
    "h1", "h2", "h3", "h4", "h5", "h6", "p", "a", "button", "label",
    "span", "li", "td", "th", "figcaption", "blockquote", "dt", "dd",
})

MIN_ATTRIBUTE_LENGTH = 2

_STRUCTURAL_NODES = (Element, Component, Expression)


@dataclass
class _ExtractionPass:
    """Mutable state of one extract() call."""
    source_bytes: bytes
    fields: List[TextField] = field(default_factory=list)
    counter: SectionCounter = field(default_factory=SectionCounter)


class FieldExtractor:
    """
    Extract editable fields from a parsed template.

    The extractor holds configuration only; all traversal state lives in a
    per-call object, so one instance may serve concurrent requests.

    Attributes:
        open_tag_window: Maximum number of bytes scanned when looking for the
            end of an opening tag
    """

    def __init__(self, open_tag_window: int = DEFAULT_OPEN_TAG_WINDOW) -> None:
        if open_tag_window <= 0:
            raise ValueError("open_tag_window must be positive")
        self.open_tag_window = open_tag_window

    def extract(self, document: Document, source: str) -> List[TextField]:
        """
        Collect editable fields in document order.

        Args:
            document: AST parsed from ``source``
            source: The exact source the AST was parsed from

        Returns:
            Fields in traversal order
        """
        state = _ExtractionPass(source_bytes=source.encode("utf-8"))
        self._visit(document, None, state, skip=False, group="")
        logger.debug(f"Extracted {len(state.fields)} fields from {len(state.source_bytes)} bytes")
        return state.fields

    def _visit(
        self,
        node: Node,
        parent: Optional[Node],
        state: _ExtractionPass,
        skip: bool,
        group: str
    ) -> None:
        should_skip = (
            skip
            or isinstance(node, (Expression, Frontmatter))
            or (isinstance(node, Element) and node.name.lower() in SKIP_ELEMENTS)
        )
        current_group = classify_group(node, group, state.counter)

        if isinstance(node, Text):
            if not should_skip:
                self._extract_text(node, parent, state, current_group)
            return

        if not should_skip and isinstance(node, (Element, Component)):
            self._extract_attributes(node, state, current_group)

        if not is_parent(node):
            return

        fields_before = len(state.fields)
        for child in node.children:
            self._visit(child, node, state, should_skip, current_group)

        if not should_skip and isinstance(node, Element) and node.name in CONTENT_ELEMENTS:
            self._add_phantom_field(node, state, fields_before, current_group)

    def _extract_text(
        self,
        node: Text,
        parent: Optional[Node],
        state: _ExtractionPass,
        group: str
    ) -> None:
        value = node.value

        # Whitespace-only text is indentation unless it is the sole content
        # of a content element
        if not value.strip():
            if parent is None or not is_parent(parent):
                return
            if any(isinstance(child, _STRUCTURAL_NODES) for child in parent.children):
                return
            if not (isinstance(parent, Element) and parent.name in CONTENT_ELEMENTS):
                return

        offset = node.position
        if not bytes_match(state.source_bytes, offset, value):
            logger.debug(f"Dropping text node at byte {offset}: source bytes do not match")
            return

        if isinstance(parent, (Element, Component)):
            label = f"{parent.name} text"
        else:
            label = "text"

        state.fields.append(TextField(
            id=TextField.text_id(offset),
            label=label,
            value=value,
            kind=FieldKind.TEXT,
            offset=offset,
            length=byte_length(value),
            multiline=TextField.is_multiline(value),
            group=group,
        ))

    def _extract_attributes(self, tag: TagNode, state: _ExtractionPass, group: str) -> None:
        allowlist = CONTENT_PROPS if isinstance(tag, Component) else CONTENT_ATTRS

        for attr in tag.attributes:
            if attr.kind is not AttributeKind.QUOTED:
                continue
            if attr.name not in allowlist:
                continue
            if len(attr.value.strip()) < MIN_ATTRIBUTE_LENGTH:
                continue

            offset = self.find_attribute_value_offset(state.source_bytes, tag, attr)
            if offset is None:
                logger.debug(f"No value offset for {tag.name}[{attr.name}] at byte {tag.position}")
                continue
            if not bytes_match(state.source_bytes, offset, attr.value):
                logger.debug(f"Dropping {tag.name}[{attr.name}] at byte {offset}: source bytes do not match")
                continue

            state.fields.append(TextField(
                id=TextField.attribute_id(offset, attr.name),
                label=f"{tag.name} {attr.name}",
                value=attr.value,
                kind=FieldKind.ATTRIBUTE,
                offset=offset,
                length=byte_length(attr.value),
                multiline=TextField.is_multiline(attr.value),
                group=group,
            ))

    def find_attribute_value_offset(
        self,
        source_bytes: bytes,
        tag: TagNode,
        attr: Attribute
    ) -> Optional[int]:
        """
        Locate the first byte of a quoted attribute value.

        Attribute positions point at the attribute name, so the value is found
        by scanning the opening tag for ``name="`` or ``name='`` preceded by
        whitespace. When the name occurs more than once (for instance inside
        another attribute's value) the occurrence starting at the attribute's
        own position wins.

        Returns:
            Byte offset just after the opening quote, or None
        """
        start = tag.position
        tag_end = find_open_tag_end(source_bytes, start, self.open_tag_window)
        search_end = tag_end if tag_end is not None else min(start + self.open_tag_window, len(source_bytes))
        region = source_bytes[start:search_end]

        pattern = re.compile(rb"(?<=\s)" + re.escape(attr.name.encode("utf-8")) + rb"\s*=\s*[\"']")
        candidates = list(pattern.finditer(region))
        if not candidates:
            return None

        chosen = candidates[0]
        for match in candidates:
            if start + match.start() == attr.position:
                chosen = match
                break
        return start + chosen.end()

    def _add_phantom_field(
        self,
        node: Element,
        state: _ExtractionPass,
        fields_before: int,
        group: str
    ) -> None:
        if node.children or node.self_closing:
            return
        if any(f.kind is FieldKind.TEXT for f in state.fields[fields_before:]):
            return

        insert_offset = find_open_tag_end(state.source_bytes, node.position, self.open_tag_window)
        if insert_offset is None:
            return

        state.fields.append(TextField(
            id=TextField.text_id(insert_offset),
            label=f"{node.name} text",
            value="",
            kind=FieldKind.TEXT,
            offset=insert_offset,
            length=0,
            multiline=False,
            group=group,
        ))

    def __repr__(self) -> str:
        return f"FieldExtractor(open_tag_window={self.open_tag_window})"


def extract_text_fields(
    source: str,
    open_tag_window: int = DEFAULT_OPEN_TAG_WINDOW
) -> List[TextField]:
    """
    Parse ``source`` and return its editable fields.

    Raises:
        TemplateParseError: If the source cannot be parsed
    """
    document = parse_template(source)
    return FieldExtractor(open_tag_window).extract(document, source)
