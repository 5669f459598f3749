"""
Template Parser Module - Page Source to AST

This module turns the source of a template page into the node tree defined in
``nodes.py``. A page is HTML-like markup that may also contain:

- a ``---`` fenced code block at the very top (frontmatter)
- ``{...}`` code expressions in content and attribute values, which may
  themselves contain markup (``{items.map(i => <li>{i}</li>)}``)
- capitalised or dotted component tags (``<Hero title="Hi" />``)
- ``<>...</>`` fragments

The parser never rewrites or normalises the source. Text values and quoted
attribute values are stored exactly as written, and every node records the
UTF-8 byte offset where it starts so later passes can splice the original
bytes directly.

Usage:
    >>> document = parse_template('<h1 title="Welcome">Hello</h1>')
    >>> document.children[0].children[0].value
    'Hello'
"""

import logging
import re
from typing import List, Optional, Tuple

from ...exceptions.page_text_exceptions import TemplateParseError
from ..offsets import ByteOffsetIndex, line_number_at
from .nodes import (
    Attribute,
    AttributeKind,
    Comment,
    Component,
    Doctype,
    Document,
    Element,
    Expression,
    Fragment,
    Frontmatter,
    Node,
    Text,
    is_component_name,
)

logger = logging.getLogger(__name__)

VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
})

# Content of these elements is raw text up to the matching closing tag
RAW_TEXT_ELEMENTS = frozenset({"script", "style"})

_FRONTMATTER_OPEN = re.compile(r"\A(\s*)(---)[ \t]*(?:\r?\n|\Z)")
_FRONTMATTER_CLOSE = re.compile(r"^---[ \t]*\r?$", re.MULTILINE)

# A '<' only opens markup when followed by a letter, '/', '!' or '>'
_TEXT_END = re.compile(r"\{|<(?=[/!>]|[^\W\d_])")
_TAG_NAME = re.compile(r"[^\s/>{}\"'=<]+")
_ATTR_NAME = re.compile(r"[^\s=>/{}\"'<]+")
_UNQUOTED_VALUE = re.compile(r"(?:[^\s/>]|/(?!>))+")

# Characters after which '<' inside an expression starts markup, not a comparison
_MARKUP_PRECEDERS = frozenset("(,?:=&|{[>!;")


class _TemplateReader:
    """Single-use cursor over one source string."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.length = len(source)
        self.index = ByteOffsetIndex(source)
        self.open_names: List[str] = []

    def byte(self, char_index: int) -> int:
        return self.index.byte_offset(char_index)

    def error(self, message: str, char_index: int) -> TemplateParseError:
        char_index = min(char_index, self.length)
        return TemplateParseError(
            message,
            offset=self.byte(char_index),
            line_number=line_number_at(self.source, char_index)
        )

    def starts_markup(self, pos: int) -> bool:
        if pos + 1 >= self.length or self.source[pos] != "<":
            return False
        nxt = self.source[pos + 1]
        return nxt == ">" or nxt.isalpha()

    def skip_whitespace(self, pos: int) -> int:
        while pos < self.length and self.source[pos].isspace():
            pos += 1
        return pos

    # ------------------------------------------------------------------
    # Document level
    # ------------------------------------------------------------------

    def read_document(self) -> Document:
        document = Document()
        pos = self.read_frontmatter(document)
        self.read_children(document, pos, until=None)
        return document

    def read_frontmatter(self, document: Document) -> int:
        opening = _FRONTMATTER_OPEN.match(self.source)
        if not opening:
            return 0

        leading = opening.group(1)
        if leading:
            document.children.append(Text(leading, 0))

        fence_start = opening.start(2)
        closing = _FRONTMATTER_CLOSE.search(self.source, opening.end())
        if closing is None:
            raise self.error("Unterminated frontmatter fence", fence_start)

        document.children.append(
            Frontmatter(self.source[fence_start:closing.end()], self.byte(fence_start))
        )
        return closing.end()

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    def read_children(self, parent: Node, pos: int, until: Optional[str]) -> int:
        """
        Read child nodes into ``parent`` until its closing tag or end of input.

        A closing tag that belongs to an enclosing open element closes
        ``parent`` implicitly and is left for the enclosing call to consume.

        Returns:
            Character index after the consumed input
        """
        src = self.source
        while pos < self.length:
            if src.startswith("<!--", pos):
                end = src.find("-->", pos + 4)
                if end == -1:
                    raise self.error("Unterminated comment", pos)
                parent.children.append(Comment(src[pos + 4:end], self.byte(pos)))
                pos = end + 3
            elif src.startswith("<!", pos):
                end = src.find(">", pos + 2)
                if end == -1:
                    raise self.error("Unterminated doctype", pos)
                parent.children.append(Doctype(src[pos + 2:end].strip(), self.byte(pos)))
                pos = end + 1
            elif src.startswith("</", pos):
                end = src.find(">", pos + 2)
                if end == -1:
                    raise self.error("Unterminated closing tag", pos)
                name = src[pos + 2:end].strip()
                if until is not None and name == until:
                    return end + 1
                if name in self.open_names:
                    return pos
                raise self.error(f"Unexpected closing tag </{name}>", pos)
            elif self.starts_markup(pos):
                node, pos = self.read_tag(pos)
                parent.children.append(node)
            elif src[pos] == "{":
                node, pos = self.read_expression(pos)
                parent.children.append(node)
            else:
                match = _TEXT_END.search(src, pos + 1)
                end = match.start() if match else self.length
                parent.children.append(Text(src[pos:end], self.byte(pos)))
                pos = end
        return pos

    def read_tag(self, pos: int) -> Tuple[Node, int]:
        src = self.source
        start = pos

        if src.startswith("<>", pos):
            fragment = Fragment(position=self.byte(start))
            self.open_names.append("")
            try:
                end = self.read_children(fragment, pos + 2, until="")
            finally:
                self.open_names.pop()
            return fragment, end

        name_match = _TAG_NAME.match(src, pos + 1)
        name = name_match.group(0)
        attributes, pos, self_closing = self.read_attributes(name_match.end(), start)

        component = is_component_name(name)
        node_class = Component if component else Element
        node = node_class(
            name=name,
            attributes=attributes,
            position=self.byte(start),
            self_closing=self_closing,
        )

        lowered = name.lower()
        if self_closing or (not component and lowered in VOID_ELEMENTS):
            return node, pos

        if not component and lowered in RAW_TEXT_ELEMENTS:
            closing = re.compile(rf"</{re.escape(name)}\s*>", re.IGNORECASE).search(src, pos)
            if closing is None:
                raise self.error(f"Unterminated <{name}> element", start)
            if closing.start() > pos:
                node.children.append(Text(src[pos:closing.start()], self.byte(pos)))
            return node, closing.end()

        self.open_names.append(name)
        try:
            pos = self.read_children(node, pos, until=name)
        finally:
            self.open_names.pop()
        return node, pos

    def read_attributes(self, pos: int, tag_start: int) -> Tuple[List[Attribute], int, bool]:
        """
        Read attributes up to the end of an opening tag.

        Returns:
            Tuple of (attributes, index after the tag, whether it self-closed)
        """
        src = self.source
        attributes: List[Attribute] = []

        while True:
            pos = self.skip_whitespace(pos)
            if pos >= self.length:
                raise self.error("Unterminated opening tag", tag_start)

            ch = src[pos]
            if ch == ">":
                return attributes, pos + 1, False
            if src.startswith("/>", pos):
                return attributes, pos + 2, True
            if ch == "/":
                pos += 1
                continue

            if ch == "{":
                _, end = self.read_expression(pos)
                inner = src[pos + 1:end - 1]
                stripped = inner.strip()
                if stripped.startswith("..."):
                    attributes.append(Attribute(
                        stripped[3:].strip(), inner, AttributeKind.SPREAD, self.byte(pos)
                    ))
                else:
                    attributes.append(Attribute(
                        stripped, inner, AttributeKind.SHORTHAND, self.byte(pos)
                    ))
                pos = end
                continue

            name_match = _ATTR_NAME.match(src, pos)
            if not name_match:
                raise self.error(f"Unexpected character {ch!r} in opening tag", pos)

            name = name_match.group(0)
            name_pos = pos
            pos = name_match.end()
            value = ""
            kind = AttributeKind.EMPTY

            look = self.skip_whitespace(pos)
            if look < self.length and src[look] == "=":
                value_pos = self.skip_whitespace(look + 1)
                if value_pos >= self.length:
                    raise self.error("Unterminated opening tag", tag_start)

                quote = src[value_pos]
                if quote in "\"'":
                    close = src.find(quote, value_pos + 1)
                    if close == -1:
                        raise self.error(f"Unterminated value for attribute '{name}'", value_pos)
                    value, kind, pos = src[value_pos + 1:close], AttributeKind.QUOTED, close + 1
                elif quote == "{":
                    _, end = self.read_expression(value_pos)
                    value, kind, pos = src[value_pos + 1:end - 1], AttributeKind.EXPRESSION, end
                elif quote == "`":
                    close = src.find("`", value_pos + 1)
                    if close == -1:
                        raise self.error(f"Unterminated value for attribute '{name}'", value_pos)
                    value, kind, pos = src[value_pos + 1:close], AttributeKind.TEMPLATE_LITERAL, close + 1
                else:
                    unquoted = _UNQUOTED_VALUE.match(src, value_pos)
                    if unquoted:
                        value, kind, pos = unquoted.group(0), AttributeKind.UNQUOTED, unquoted.end()
                    else:
                        pos = value_pos

            attributes.append(Attribute(name, value, kind, self.byte(name_pos)))

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def read_expression(self, pos: int) -> Tuple[Expression, int]:
        """
        Read a ``{...}`` expression starting at ``pos``.

        Strings, template literals and comments are skipped so braces inside
        them do not count. Markup inside the expression is parsed into the
        expression's children with a fresh set of open elements, so it can
        never close a tag opened outside the expression.

        Returns:
            Tuple of (expression node, index after the closing brace)
        """
        src = self.source
        expression = Expression(position=self.byte(pos))
        saved_open_names = self.open_names
        self.open_names = []
        depth = 1
        i = pos + 1

        try:
            while i < self.length:
                ch = src[i]
                if ch in "\"'`":
                    i = self.skip_js_string(i)
                    continue
                if src.startswith("//", i):
                    newline = src.find("\n", i)
                    i = self.length if newline == -1 else newline
                    continue
                if src.startswith("/*", i):
                    end = src.find("*/", i + 2)
                    if end == -1:
                        raise self.error("Unterminated comment in expression", i)
                    i = end + 2
                    continue
                if ch == "{":
                    depth += 1
                elif ch == "}":
                    depth -= 1
                    if depth == 0:
                        return expression, i + 1
                elif ch == "<" and self.starts_markup(i) and self._markup_allowed(pos + 1, i):
                    node, i = self.read_tag(i)
                    expression.children.append(node)
                    continue
                i += 1
        finally:
            self.open_names = saved_open_names

        raise self.error("Unterminated expression", pos)

    def skip_js_string(self, pos: int) -> int:
        src = self.source
        quote = src[pos]
        i = pos + 1
        while i < self.length:
            ch = src[i]
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                return i + 1
            if quote == "`" and src.startswith("${", i):
                _, i = self.read_expression(i + 1)
                continue
            if quote != "`" and ch == "\n":
                # Unterminated single-line string; resume scanning on the next line
                return i
            i += 1
        raise self.error("Unterminated string in expression", pos)

    def _markup_allowed(self, expression_start: int, pos: int) -> bool:
        i = pos - 1
        while i >= expression_start and self.source[i].isspace():
            i -= 1
        if i < expression_start:
            return True
        if self.source[i] in _MARKUP_PRECEDERS:
            return True
        return self.source.endswith("return", expression_start, i + 1)


class TemplateParser:
    """
    Parser for template pages.

    Stateless: each call to ``parse`` works on its own cursor, so one instance
    can be shared between threads.

    Example:
        >>> parser = TemplateParser()
        >>> document = parser.parse("<p>Hi</p>")
        >>> document.children[0].name
        'p'
    """

    def parse(self, source: str) -> Document:
        """
        Parse template source into a Document.

        Args:
            source: Complete page source

        Returns:
            Document root node

        Raises:
            TypeError: If source is not a string
            TemplateParseError: If the source is malformed
        """
        if not isinstance(source, str):
            raise TypeError(f"Template source must be str, got {type(source).__name__}")

        logger.debug(f"Parsing template of {len(source)} characters")

        try:
            document = _TemplateReader(source).read_document()
        except TemplateParseError as e:
            logger.error(f"Template parse failed: {e}")
            raise
        except RecursionError as e:
            logger.error("Template parse failed: nesting too deep")
            raise TemplateParseError("Template nesting too deep to parse") from e

        logger.debug(f"Parsed template into {len(document.children)} top-level nodes")
        return document

    def __repr__(self) -> str:
        return "TemplateParser()"


def parse_template(source: str) -> Document:
    """Parse template source with a default parser."""
    return TemplateParser().parse(source)
