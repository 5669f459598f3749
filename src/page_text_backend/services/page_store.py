"""
Page storage.

Whole-file get/put over page sources. The engine itself performs no I/O;
stores are how the service layer fetches a page before extraction and
persists it after patching.

Writes use optimistic concurrency: a caller passes the source it read, and
the write is refused with ``ConflictError`` if the file no longer holds it.
"""

import hashlib
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from ..exceptions.page_text_exceptions import ConflictError, InvalidPagePathError

logger = logging.getLogger(__name__)


def content_fingerprint(text: str) -> str:
    """SHA-256 of the UTF-8 encoded text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class PageStore(ABC):
    """Whole-file text storage."""

    @abstractmethod
    def read_text_file(self, path: str) -> Optional[str]:
        """Return the file contents, or None if it does not exist."""

    @abstractmethod
    def write_text_file(self, path: str, text: str, expected_source: Optional[str] = None) -> None:
        """
        Replace the file contents.

        Args:
            path: Project-relative file path
            text: New contents
            expected_source: Contents the caller based its change on; when
                given and the file changed since, nothing is written

        Raises:
            ConflictError: If the file no longer matches ``expected_source``
        """


class LocalPageStore(PageStore):
    """
    Page store on the local filesystem.

    Paths are resolved relative to ``project_root`` and may not escape it.

    Attributes:
        project_root: Directory all paths are resolved against
    """

    def __init__(self, project_root: Union[str, Path]) -> None:
        self.project_root = Path(project_root).resolve()

    def resolve_path(self, path: str) -> Path:
        """
        Resolve a project-relative path.

        Raises:
            InvalidPagePathError: If the path points outside the project root
        """
        resolved = (self.project_root / path).resolve()
        if resolved != self.project_root and self.project_root not in resolved.parents:
            raise InvalidPagePathError(path)
        return resolved

    def read_text_file(self, path: str) -> Optional[str]:
        resolved = self.resolve_path(path)
        if not resolved.is_file():
            logger.debug(f"File not found: {resolved}")
            return None
        with open(resolved, "r", encoding="utf-8", newline="") as f:
            return f.read()

    def write_text_file(self, path: str, text: str, expected_source: Optional[str] = None) -> None:
        resolved = self.resolve_path(path)

        if expected_source is not None:
            current = self.read_text_file(path)
            if current is None or content_fingerprint(current) != content_fingerprint(expected_source):
                logger.warning(f"Refusing to write {path}: file changed since it was read")
                raise ConflictError(path)

        resolved.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(dir=resolved.parent, prefix=f".{resolved.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(text)
            os.replace(temp_name, resolved)
        except OSError:
            if os.path.exists(temp_name):
                os.unlink(temp_name)
            raise

        logger.info(f"Wrote {path} ({len(text.encode('utf-8'))} bytes)")

    def __repr__(self) -> str:
        return f"LocalPageStore(project_root='{self.project_root}')"
