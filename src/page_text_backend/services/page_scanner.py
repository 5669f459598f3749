"""
Page discovery and frontmatter references.

Finds the editable pages of a project, validates page paths submitted by
callers, and lists the content collections a page reads in its frontmatter.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

PAGE_SUFFIX = ".astro"

_PAGE_PATH_PATTERN = re.compile(r"^[\w\-/.]+\.astro$")
_FRONTMATTER_PATTERN = re.compile(r"^---\r?\n([\s\S]*?)\r?\n---")
_COLLECTION_CALL_PATTERN = re.compile(r"\b(?:getCollection|getEntry)\s*\(\s*['\"](\w+)['\"]")


@dataclass(frozen=True)
class PageInfo:
    """
    A page discovered in the pages directory.

    Attributes:
        name: Display name, ``"Home"`` for the root page
        path: Path relative to the pages directory, ``/``-separated
        route: URL route, always starting with ``/``
    """
    name: str
    path: str
    route: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "path": self.path, "route": self.route}


def _route_for(relative_path: str) -> str:
    stripped = re.sub(r"(^|/)index\.astro$", "", relative_path)
    stripped = re.sub(r"\.astro$", "", stripped)
    stripped = stripped.rstrip("/")
    return "/" + stripped


def _display_name(route: str) -> str:
    stripped = route.lstrip("/")
    if not stripped:
        return "Home"
    segment = stripped.split("/")[-1]
    return segment[:1].upper() + segment[1:]


def scan_pages_directory(pages_dir: Union[str, Path], base_path: str) -> List[PageInfo]:
    """
    List static pages under ``pages_dir`` sorted by route.

    Dynamic routes (file or directory names containing ``[``) are skipped, as
    are pages whose route falls under ``base_path``. Unreadable directories
    are skipped.

    Args:
        pages_dir: Directory holding the page files
        base_path: Route prefix reserved for the admin UI, e.g. ``/admin``

    Returns:
        Discovered pages
    """
    root = Path(pages_dir)
    pages: List[PageInfo] = []

    def scan(directory: Path) -> None:
        try:
            entries = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as e:
            logger.debug(f"Skipping unreadable directory {directory}: {e}")
            return

        for entry in entries:
            if "[" in entry.name:
                continue
            if entry.is_dir():
                scan(entry)
                continue
            if entry.suffix != PAGE_SUFFIX:
                continue

            relative = entry.relative_to(root).as_posix()
            route = _route_for(relative)
            if route == base_path or route.startswith(base_path + "/"):
                continue

            pages.append(PageInfo(name=_display_name(route), path=relative, route=route))

    scan(root)
    pages.sort(key=lambda page: page.route)
    logger.debug(f"Found {len(pages)} pages under {root}")
    return pages


def validate_page_path(path: Optional[str]) -> Optional[str]:
    """
    Normalise a caller-supplied page path.

    Returns:
        The ``/``-separated path, or None if it is not an acceptable page path
    """
    if not path:
        return None
    normalized = path.replace("\\", "/")
    if not normalized.endswith(PAGE_SUFFIX):
        return None
    if ".." in normalized:
        return None
    if not _PAGE_PATH_PATTERN.match(normalized):
        return None
    return normalized


def extract_collection_refs(source: str) -> List[str]:
    """
    Names of content collections read in the page frontmatter.

    Looks for ``getCollection('name')`` and ``getEntry('name')`` calls inside
    the leading ``---`` fence only.
    """
    match = _FRONTMATTER_PATTERN.match(source)
    if not match:
        return []
    frontmatter = match.group(1)

    refs: List[str] = []
    for name in _COLLECTION_CALL_PATTERN.findall(frontmatter):
        if name not in refs:
            refs.append(name)
    return refs
