"""
Section grouping for extracted fields.

Fields are grouped by the nearest enclosing landmark element. The first
``<section>`` of a page is group ``"section"``, the second ``"section:2"``,
and so on per tag name. Fields outside any landmark have group ``""``.
"""

from typing import Dict

from ..template_parser.nodes import Element, Node

LANDMARK_ELEMENTS = frozenset({
    "header", "section", "footer", "nav", "main", "article", "aside",
})


class SectionCounter:
    """Occurrence counter for landmark tags, scoped to one extraction pass."""

    def __init__(self) -> None:
        self._counts: Dict[str, int] = {}

    def next_group_id(self, tag_name: str) -> str:
        count = self._counts.get(tag_name, 0) + 1
        self._counts[tag_name] = count
        return tag_name if count == 1 else f"{tag_name}:{count}"


def classify_group(node: Node, inherited_group: str, counter: SectionCounter) -> str:
    """
    Return the group id that applies to ``node`` and its descendants.

    Entering a landmark element consumes one occurrence from ``counter``;
    any other node inherits the group of its parent.
    """
    if isinstance(node, Element) and node.name in LANDMARK_ELEMENTS:
        return counter.next_group_id(node.name)
    return inherited_group
