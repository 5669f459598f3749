"""
Tests for the local page store.
"""

import pytest

from page_text_backend.exceptions import ConflictError, InvalidPagePathError
from page_text_backend.services.page_store import LocalPageStore, content_fingerprint


class TestLocalPageStore:
    """Tests for reading and writing pages on disk."""

    def setup_method(self):
        self.page = "src/pages/about.astro"

    def test_read_existing_file(self, page_store):
        source = page_store.read_text_file(self.page)
        assert source.startswith("---\n")

    def test_read_missing_file(self, page_store):
        assert page_store.read_text_file("src/pages/missing.astro") is None

    def test_line_endings_are_preserved(self, tmp_path):
        store = LocalPageStore(tmp_path)
        store.write_text_file("page.astro", "<p>a</p>\r\n<p>b</p>\r\n")
        assert store.read_text_file("page.astro") == "<p>a</p>\r\n<p>b</p>\r\n"
        assert (tmp_path / "page.astro").read_bytes() == b"<p>a</p>\r\n<p>b</p>\r\n"

    def test_write_creates_parent_directories(self, tmp_path):
        store = LocalPageStore(tmp_path)
        store.write_text_file("src/pages/new.astro", "<h1>New</h1>")
        assert (tmp_path / "src" / "pages" / "new.astro").read_text(encoding="utf-8") == "<h1>New</h1>"

    def test_write_with_matching_expected_source(self, page_store, project_dir):
        source = page_store.read_text_file(self.page)
        page_store.write_text_file(self.page, source + "<p>more</p>", expected_source=source)
        assert page_store.read_text_file(self.page).endswith("<p>more</p>")

    def test_conflicting_write_is_refused(self, page_store, project_dir):
        source = page_store.read_text_file(self.page)
        (project_dir / self.page).write_text("<h1>Changed elsewhere</h1>", encoding="utf-8")

        with pytest.raises(ConflictError) as exc_info:
            page_store.write_text_file(self.page, "<h1>Mine</h1>", expected_source=source)

        assert exc_info.value.page_path == self.page
        assert page_store.read_text_file(self.page) == "<h1>Changed elsewhere</h1>"

    def test_no_temp_files_left_behind(self, tmp_path):
        store = LocalPageStore(tmp_path)
        store.write_text_file("page.astro", "<p>x</p>")
        assert [p.name for p in tmp_path.iterdir()] == ["page.astro"]

    def test_paths_may_not_escape_project_root(self, page_store):
        with pytest.raises(InvalidPagePathError):
            page_store.read_text_file("../outside.astro")
        with pytest.raises(InvalidPagePathError):
            page_store.write_text_file("src/../../outside.astro", "x")

    def test_content_fingerprint(self):
        assert content_fingerprint("abc") == content_fingerprint("abc")
        assert content_fingerprint("abc") != content_fingerprint("abd")
        assert len(content_fingerprint("")) == 64
