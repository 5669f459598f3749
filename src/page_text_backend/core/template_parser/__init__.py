"""
Template Parser Package

Parses template pages (markup, components, ``{...}`` expressions and a
``---`` frontmatter fence) into a typed node tree whose positions are UTF-8
byte offsets into the original source.

Components:
- nodes: AST node dataclasses and small tree helpers
- parser: TemplateParser and parse_template
"""

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
    ParentNode,
    TagNode,
    Text,
    is_component_name,
    is_parent,
    walk,
)
from .parser import (
    RAW_TEXT_ELEMENTS,
    VOID_ELEMENTS,
    TemplateParser,
    parse_template,
)

__all__ = [
    # Nodes
    "Attribute",
    "AttributeKind",
    "Comment",
    "Component",
    "Doctype",
    "Document",
    "Element",
    "Expression",
    "Fragment",
    "Frontmatter",
    "Node",
    "ParentNode",
    "TagNode",
    "Text",
    "is_component_name",
    "is_parent",
    "walk",
    # Parser
    "RAW_TEXT_ELEMENTS",
    "VOID_ELEMENTS",
    "TemplateParser",
    "parse_template",
]
