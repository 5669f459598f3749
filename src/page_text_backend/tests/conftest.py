"""Shared test fixtures and configuration for page text backend tests."""

from pathlib import Path

import pytest

from page_text_backend.services.page_store import LocalPageStore
from page_text_backend.services.page_text_service import PageTextService
from page_text_backend.utils.config import ConfigManager, EnvironmentHandler


ABOUT_PAGE = """---
import Layout from '../layouts/Layout.astro';
import { getCollection } from 'astro:content';
const posts = await getCollection('blog');
---
<Layout title="About us">
  <section>
    <h1>About</h1>
    <p>We build things.</p>
    <img src={hero} alt="Our team">
  </section>
</Layout>
"""

INDEX_PAGE = """<html>
  <head><title>Home</title></head>
  <body>
    <header><h1>Welcome</h1></header>
    <main>
      <h2></h2>
      <p>Hello from the home page.</p>
    </main>
  </body>
</html>
"""


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """
    Keep PAGE_TEXT_* variables from leaking between tests.

    Each variable is registered with monkeypatch before removal so anything a
    test (or a loaded .env file) sets is removed again afterwards.
    """
    for env_var in EnvironmentHandler().get_env_mapping():
        monkeypatch.setenv(env_var, "unset")
        monkeypatch.delenv(env_var)
    yield


@pytest.fixture
def project_dir(tmp_path) -> Path:
    """Provide a project with a small pages directory."""
    pages = tmp_path / "src" / "pages"
    (pages / "blog").mkdir(parents=True)
    (pages / "admin").mkdir()

    (pages / "index.astro").write_text(INDEX_PAGE, encoding="utf-8")
    (pages / "about.astro").write_text(ABOUT_PAGE, encoding="utf-8")
    (pages / "blog" / "index.astro").write_text("<h1>Blog</h1>\n", encoding="utf-8")
    (pages / "blog" / "[slug].astro").write_text("<h1>{title}</h1>\n", encoding="utf-8")
    (pages / "admin" / "index.astro").write_text("<h1>Admin</h1>\n", encoding="utf-8")
    (pages / "notes.md").write_text("# Not a page\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def page_store(project_dir) -> LocalPageStore:
    return LocalPageStore(project_dir)


@pytest.fixture
def config_manager(project_dir) -> ConfigManager:
    return ConfigManager(project_root=project_dir, load_env=False)


@pytest.fixture
def page_text_service(page_store, config_manager) -> PageTextService:
    return PageTextService(page_store, config_manager)
