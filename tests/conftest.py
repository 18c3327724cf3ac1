"""Shared test fixtures for inkwell package."""

from datetime import date
from pathlib import Path

import pytest
import yaml

from inkwell.content.schema import ValidationContext

DEFAULT_DESCRIPTION = (
    "A description long enough to satisfy the recommended minimum length."
)
DEFAULT_BODY = (
    "## Introduction\n\n"
    "This post explains the topic in enough words to clear the minimum body "
    "length that the validator enforces on every item.\n\n"
    "## Details\n\n"
    "A second section keeps the document structure realistic."
)


@pytest.fixture
def temp_dir(tmp_path):
    """Provide a temporary directory."""
    return tmp_path


@pytest.fixture
def fixed_context():
    """Validation bounds pinned to a known 'today'."""
    return ValidationContext(today=date(2025, 1, 1))


def make_source(fm: dict, body: str = DEFAULT_BODY) -> str:
    """Build a source document from a front matter dict and a body."""
    fm_str = yaml.dump(fm, default_flow_style=False, sort_keys=False)
    return f"---\n{fm_str}---\n\n{body}\n"


@pytest.fixture
def source_text():
    """Expose ``make_source`` to tests that build documents in memory."""
    return make_source


@pytest.fixture
def content_dir(tmp_path):
    """An empty content directory."""
    path = tmp_path / "content" / "posts"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def create_post(content_dir):
    """Factory fixture for creating ``<slug>.md`` files with front matter."""

    def _create(
        slug: str = "test-post",
        title: str = "A Test Post Title",
        date: str = "2024-01-01",
        body: str = DEFAULT_BODY,
        extra_fm: dict | None = None,
        description: str | None = DEFAULT_DESCRIPTION,
    ) -> Path:
        fm = {"title": title, "description": description, "date": date}
        if extra_fm:
            fm.update(extra_fm)
        fm = {k: v for k, v in fm.items() if v is not None}

        path = content_dir / f"{slug}.md"
        path.write_text(make_source(fm, body), encoding="utf-8")
        return path

    return _create


@pytest.fixture
def mock_site_root(tmp_path, content_dir, monkeypatch):
    """Create a site with inkwell.yaml and point the config layer at it."""
    config_data = {
        "content_dir": "content/posts",
        "site_url": "https://example.com",
        "site_name": "Example Blog",
        "author": "Site Owner",
    }
    (tmp_path / "inkwell.yaml").write_text(yaml.dump(config_data), encoding="utf-8")

    monkeypatch.setenv("INKWELL_SITE_ROOT", str(tmp_path))

    from inkwell.core import config

    # Clear the lru_cache first
    config.get_site_root.cache_clear()
    monkeypatch.setattr(config, "get_site_root", lambda: tmp_path)

    return tmp_path
