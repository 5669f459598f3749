"""
Template AST Nodes

Node types produced by the template parser. The set is closed: every node in
a parsed document is one of the dataclasses below, and code walking the tree
dispatches on the concrete class.

Every ``position`` is a UTF-8 byte offset into the original source text.
For tag nodes it points at the opening ``<``; for attributes it points at
the first character of the attribute name.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Union


class AttributeKind(str, Enum):
    """How an attribute value is written in the source."""
    QUOTED = "quoted"
    EMPTY = "empty"
    EXPRESSION = "expression"
    TEMPLATE_LITERAL = "template_literal"
    UNQUOTED = "unquoted"
    SPREAD = "spread"
    SHORTHAND = "shorthand"


@dataclass
class Attribute:
    """An attribute on an element, or a prop on a component."""
    name: str
    value: str
    kind: AttributeKind
    position: int


@dataclass
class Text:
    """Literal text between tags, exactly as written in the source."""
    value: str
    position: int


@dataclass
class Comment:
    """An HTML comment; ``value`` excludes the ``<!--`` and ``-->`` markers."""
    value: str
    position: int


@dataclass
class Doctype:
    value: str
    position: int


@dataclass
class Frontmatter:
    """The ``---`` fenced code block at the top of a page, fences included."""
    value: str
    position: int


@dataclass
class Expression:
    """A ``{...}`` code expression. Markup nested inside it becomes children."""
    children: List["Node"] = field(default_factory=list)
    position: int = 0


@dataclass
class Element:
    """A lowercase HTML element such as ``<p>`` or ``<section>``."""
    name: str
    attributes: List[Attribute] = field(default_factory=list)
    children: List["Node"] = field(default_factory=list)
    position: int = 0
    self_closing: bool = False


@dataclass
class Component:
    """A component tag: capitalised (``<Hero>``) or dotted (``<ui.Card>``)."""
    name: str
    attributes: List[Attribute] = field(default_factory=list)
    children: List["Node"] = field(default_factory=list)
    position: int = 0
    self_closing: bool = False


@dataclass
class Fragment:
    """A ``<>...</>`` fragment."""
    children: List["Node"] = field(default_factory=list)
    position: int = 0


@dataclass
class Document:
    """Root of a parsed template."""
    children: List["Node"] = field(default_factory=list)
    position: int = 0


Node = Union[
    Document, Element, Component, Fragment, Expression,
    Text, Comment, Doctype, Frontmatter,
]

ParentNode = Union[Document, Element, Component, Fragment, Expression]

TagNode = Union[Element, Component]

PARENT_NODE_TYPES = (Document, Element, Component, Fragment, Expression)

TAG_NODE_TYPES = (Element, Component)


def is_parent(node: Node) -> bool:
    """Return True if the node can hold children."""
    return isinstance(node, PARENT_NODE_TYPES)


def is_component_name(name: str) -> bool:
    """Component tags start with an uppercase letter or contain a dot."""
    return bool(name) and (name[0].isupper() or "." in name)


def walk(node: Node):
    """Yield ``node`` and all of its descendants in document order."""
    yield node
    if is_parent(node):
        for child in node.children:
            yield from walk(child)
