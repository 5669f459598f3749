"""
Tests for page discovery, page path validation and collection references.
"""

from page_text_backend.services.page_scanner import (
    PageInfo,
    extract_collection_refs,
    scan_pages_directory,
    validate_page_path,
)


class TestScanPagesDirectory:
    """Tests for listing the static pages of a project."""

    def test_lists_static_pages_sorted_by_route(self, project_dir):
        pages = scan_pages_directory(project_dir / "src" / "pages", "/admin")
        assert pages == [
            PageInfo(name="Home", path="index.astro", route="/"),
            PageInfo(name="About", path="about.astro", route="/about"),
            PageInfo(name="Blog", path="blog/index.astro", route="/blog"),
        ]

    def test_base_path_prefix_match_is_per_segment(self, tmp_path):
        (tmp_path / "administrator.astro").write_text("<h1>x</h1>", encoding="utf-8")
        (tmp_path / "admin.astro").write_text("<h1>x</h1>", encoding="utf-8")
        pages = scan_pages_directory(tmp_path, "/admin")
        assert [p.route for p in pages] == ["/administrator"]

    def test_dynamic_directories_are_skipped(self, tmp_path):
        (tmp_path / "[lang]").mkdir()
        (tmp_path / "[lang]" / "about.astro").write_text("<h1>x</h1>", encoding="utf-8")
        (tmp_path / "contact.astro").write_text("<h1>x</h1>", encoding="utf-8")
        pages = scan_pages_directory(tmp_path, "/admin")
        assert [p.path for p in pages] == ["contact.astro"]

    def test_nested_page_name_is_last_segment(self, tmp_path):
        (tmp_path / "services").mkdir()
        (tmp_path / "services" / "web-design.astro").write_text("<h1>x</h1>", encoding="utf-8")
        pages = scan_pages_directory(tmp_path, "/admin")
        assert pages[0].name == "Web-design"
        assert pages[0].route == "/services/web-design"

    def test_missing_directory_yields_no_pages(self, tmp_path):
        assert scan_pages_directory(tmp_path / "nope", "/admin") == []

    def test_page_info_to_dict(self):
        page = PageInfo(name="About", path="about.astro", route="/about")
        assert page.to_dict() == {"name": "About", "path": "about.astro", "route": "/about"}


class TestValidatePagePath:
    """Tests for caller-supplied page paths."""

    def test_valid_paths(self):
        assert validate_page_path("about.astro") == "about.astro"
        assert validate_page_path("blog/index.astro") == "blog/index.astro"

    def test_backslashes_are_normalised(self):
        assert validate_page_path("blog\\post.astro") == "blog/post.astro"

    def test_rejected_paths(self):
        assert validate_page_path(None) is None
        assert validate_page_path("") is None
        assert validate_page_path("notes.md") is None
        assert validate_page_path("../secrets.astro") is None
        assert validate_page_path("a b.astro") is None


class TestExtractCollectionRefs:
    """Tests for content collection references in frontmatter."""

    def test_collections_in_frontmatter(self):
        source = (
            "---\n"
            "const posts = await getCollection('blog');\n"
            "const author = await getEntry(\"authors\", 'ada');\n"
            "const more = await getCollection( 'blog' );\n"
            "---\n"
            "<h1>Hi</h1>\n"
        )
        assert extract_collection_refs(source) == ["blog", "authors"]

    def test_calls_outside_frontmatter_are_ignored(self):
        source = "---\nconst a = 1;\n---\n<p>{getCollection('blog')}</p>"
        assert extract_collection_refs(source) == []

    def test_page_without_frontmatter(self):
        assert extract_collection_refs("<p>getCollection('blog')</p>") == []
