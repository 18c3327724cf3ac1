"""Tests for inkwell.content.repository module."""

import logging
import os

import pytest

from inkwell.content.models import ContentDetail
from inkwell.content.repository import ContentRepository
from inkwell.content.schema import ValidationContext
from inkwell.core.errors import ContentParseError, ContentValidationError, ErrorCode


@pytest.fixture
def repo(content_dir):
    return ContentRepository(content_dir)


@pytest.fixture
def three_posts(create_post):
    """Three valid posts with distinct dates."""
    create_post(slug="older", title="The Older Post", date="2024-01-01", extra_fm={"tags": ["Python"]})
    create_post(slug="middle", title="The Middle Post", date="2024-02-01", extra_fm={"tags": ["python", "Web"]})
    create_post(slug="newest", title="The Newest Post", date="2024-03-01", extra_fm={"tags": ["Rust"]})


@pytest.fixture
def create_unquoted_date_post(create_post):
    """Write a post whose date is a plain YAML scalar, not a quoted string."""

    def _create(slug: str, value: str):
        path = create_post(slug=slug)
        text = path.read_text(encoding="utf-8")
        path.write_text(text.replace("date: '2024-01-01'", f"date: {value}"), encoding="utf-8")
        return path

    return _create


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


class TestListSummaries:
    """Tests for list_summaries."""

    def test_sorted_newest_first(self, repo, three_posts):
        slugs = [s.slug for s in repo.list_summaries()]
        assert slugs == ["newest", "middle", "older"]

    def test_same_date_ordered_by_filename_descending(self, repo, create_post):
        create_post(slug="alpha", date="2024-05-05")
        create_post(slug="beta", date="2024-05-05")
        create_post(slug="gamma", date="2024-05-05")

        assert [s.slug for s in repo.list_summaries()] == ["gamma", "beta", "alpha"]

    def test_summary_fields(self, repo, create_post):
        create_post(
            slug="full",
            title="A Fully Specified Post",
            extra_fm={"tags": ["Python"], "author": "Jane Writer", "image": "/img/cover.png"},
        )
        (summary,) = repo.list_summaries()

        assert summary.title == "A Fully Specified Post"
        assert summary.tags == ("Python",)
        assert summary.author == "Jane Writer"
        assert summary.image == "/img/cover.png"
        assert summary.published is True
        assert summary.word_count > 0
        assert summary.reading_time == 1

    def test_reading_time_uses_configured_speed(self, content_dir, create_post):
        create_post(slug="long", body="## Long\n\n" + " ".join(["word"] * 498))

        assert ContentRepository(content_dir).list_summaries()[0].reading_time == 3
        assert ContentRepository(content_dir, words_per_minute=100).list_summaries()[0].reading_time == 5

    def test_invalid_files_skipped(self, repo, create_post, content_dir, caplog):
        create_post(slug="good")
        create_post(slug="missing-description", description=None)
        (content_dir / "no-header.md").write_text("Just text, no front matter.", encoding="utf-8")

        with caplog.at_level(logging.WARNING, logger="inkwell.content.repository"):
            summaries = repo.list_summaries()

        assert [s.slug for s in summaries] == ["good"]
        assert "missing-description.md" in caplog.text
        assert "no-header.md" in caplog.text

    def test_impossible_unquoted_date_skipped(self, repo, create_post, create_unquoted_date_post, caplog):
        create_post(slug="good")
        create_unquoted_date_post("bad", "2024-13-45")

        with caplog.at_level(logging.WARNING, logger="inkwell.content.repository"):
            summaries = repo.list_summaries()

        assert [s.slug for s in summaries] == ["good"]
        assert "bad.md" in caplog.text
        assert repo.adjacent("good").previous is None

    def test_warnings_do_not_exclude(self, repo, create_post):
        create_post(slug="dupes", extra_fm={"tags": ["React", "react"]})
        assert [s.slug for s in repo.list_summaries()] == ["dupes"]

    def test_unpublished_excluded_by_default(self, repo, create_post):
        create_post(slug="live")
        create_post(slug="draft", extra_fm={"published": False})

        assert [s.slug for s in repo.list_summaries()] == ["live"]
        assert {s.slug for s in repo.list_summaries(include_unpublished=True)} == {"live", "draft"}

    def test_ineligible_files_ignored(self, repo, create_post, content_dir):
        create_post(slug="eligible")
        source = (content_dir / "eligible.md").read_text(encoding="utf-8")
        (content_dir / "Upper-Case.md").write_text(source, encoding="utf-8")
        (content_dir / "under_score.md").write_text(source, encoding="utf-8")
        (content_dir / ".hidden.md").write_text(source, encoding="utf-8")
        (content_dir / "notes.txt").write_text(source, encoding="utf-8")
        nested = content_dir / "nested"
        nested.mkdir()
        (nested / "inner.md").write_text(source, encoding="utf-8")

        assert [s.slug for s in repo.list_summaries()] == ["eligible"]

    def test_non_slug_filename_warns(self, repo, create_post, content_dir, caplog):
        create_post(slug="eligible")
        source = (content_dir / "eligible.md").read_text(encoding="utf-8")
        (content_dir / "My-Post.md").write_text(source, encoding="utf-8")

        with caplog.at_level(logging.WARNING, logger="inkwell.content.repository"):
            repo.list_summaries()

        assert "My-Post.md" in caplog.text

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinks_ignored(self, repo, create_post, content_dir, tmp_path):
        create_post(slug="real")
        outside = tmp_path / "outside.md"
        outside.write_text((content_dir / "real.md").read_text(encoding="utf-8"), encoding="utf-8")
        (content_dir / "linked.md").symlink_to(outside)

        assert [s.slug for s in repo.list_summaries()] == ["real"]

    def test_missing_directory(self, tmp_path, caplog):
        repo = ContentRepository(tmp_path / "does-not-exist")
        with caplog.at_level(logging.WARNING):
            assert repo.list_summaries() == []
        assert "does not exist" in caplog.text

    def test_thread_pool_matches_sequential(self, content_dir, create_post):
        for day in range(1, 10):
            create_post(slug=f"post-{day}", date=f"2024-04-0{day}")

        sequential = ContentRepository(content_dir).list_summaries()
        threaded = ContentRepository(content_dir, workers=4).list_summaries()
        assert threaded == sequential

    def test_fresh_instances_each_call(self, repo, three_posts):
        first = repo.list_summaries()
        second = repo.list_summaries()
        assert first == second
        assert first[0] is not second[0]

    def test_context_bounds_applied(self, content_dir, create_post):
        create_post(slug="short", body="## Tiny\n\nA short body.")

        assert ContentRepository(content_dir).list_summaries() == []
        relaxed = ContentRepository(content_dir, context=ValidationContext(min_body_length=10))
        assert [s.slug for s in relaxed.list_summaries()] == ["short"]


# ---------------------------------------------------------------------------
# Collection queries
# ---------------------------------------------------------------------------


class TestQueries:
    """Tests for tag, search, adjacency and tag index queries."""

    def test_find_by_tag_case_insensitive(self, repo, three_posts):
        assert [s.slug for s in repo.find_by_tag("PYTHON")] == ["middle", "older"]
        assert repo.find_by_tag("pyth") == []

    def test_find_by_tag_skips_unpublished(self, repo, create_post):
        create_post(slug="hidden", extra_fm={"tags": ["x"], "published": False})
        assert repo.find_by_tag("x") == []

    def test_search_title_description_tags(self, repo, three_posts, create_post):
        create_post(
            slug="described",
            description="An in-depth look at memory safety and ownership in systems code.",
        )
        assert [s.slug for s in repo.search("middle")] == ["middle"]
        assert [s.slug for s in repo.search("OWNERSHIP")] == ["described"]
        assert [s.slug for s in repo.search("rus")] == ["newest"]

    def test_search_blank_query(self, repo, three_posts):
        assert repo.search("") == []
        assert repo.search("   ") == []

    def test_adjacent_middle(self, repo, three_posts):
        adjacency = repo.adjacent("middle")
        assert adjacency.previous.slug == "older"
        assert adjacency.next.slug == "newest"

    def test_adjacent_ends(self, repo, three_posts):
        assert repo.adjacent("newest").next is None
        assert repo.adjacent("newest").previous.slug == "middle"
        assert repo.adjacent("older").previous is None
        assert repo.adjacent("older").next.slug == "middle"

    def test_adjacent_unknown(self, repo, three_posts):
        adjacency = repo.adjacent("nope")
        assert adjacency.previous is None
        assert adjacency.next is None

    def test_all_tags_first_seen_casing(self, repo, three_posts):
        # Listing order is newest first, so "Rust" then "python" then "Web"
        assert repo.all_tags() == ["python", "Rust", "Web"]

    def test_tag_counts(self, repo, three_posts):
        assert repo.tag_counts() == {"Rust": 1, "python": 2, "Web": 1}

    def test_tag_counts_one_per_item(self, repo, create_post):
        create_post(slug="dupes", extra_fm={"tags": ["React", "react"]})
        assert repo.tag_counts() == {"React": 1}


# ---------------------------------------------------------------------------
# Single item
# ---------------------------------------------------------------------------


class TestGetDetail:
    """Tests for get_detail and slug resolution."""

    def test_detail(self, repo, create_post):
        create_post(slug="hello", body="# Hello\n\n" + "Body text with enough words to pass. " * 5)
        detail = repo.get_detail("hello")

        assert isinstance(detail, ContentDetail)
        assert detail.slug == "hello"
        assert '<h1 id="heading-0-hello">Hello</h1>' in detail.html
        assert [h.anchor_id for h in detail.headings] == ["heading-0-hello"]

    def test_script_stripped(self, repo, create_post):
        create_post(slug="xss", body="# Title\n\n<script>alert(1)</script>\n\n" + "Safe text here. " * 10)
        detail = repo.get_detail("xss")

        assert "<script" not in detail.html
        assert "alert" not in detail.html
        assert "Title" in detail.html

    def test_missing_returns_none(self, repo):
        assert repo.get_detail("nothing-here") is None

    def test_traversal_returns_none(self, repo, create_post, tmp_path, source_text):
        (tmp_path / "secret.md").write_text(
            source_text({"title": "Secret Document", "description": "x" * 60, "date": "2024-01-01"}),
            encoding="utf-8",
        )
        assert repo.get_detail("../secret") is None
        assert repo.get_detail("../../etc/passwd") is None

    def test_sanitized_slug_logged(self, repo, create_post, caplog):
        create_post(slug="real-post")
        with caplog.at_level(logging.INFO, logger="inkwell.content.repository"):
            detail = repo.get_detail("real-post<>")

        assert detail.slug == "real-post"
        assert ErrorCode.SLUG_SANITIZED.value in caplog.text

    def test_empty_after_sanitizing(self, repo):
        assert repo.get_detail("../") is None

    def test_unpublished_hidden(self, repo, create_post):
        create_post(slug="draft", extra_fm={"published": False})

        assert repo.get_detail("draft") is None
        assert repo.get_detail("draft", include_unpublished=True).slug == "draft"

    def test_invalid_item_raises_with_outcome(self, repo, create_post):
        create_post(slug="broken", description=None, date="not-a-date")

        with pytest.raises(ContentValidationError) as exc_info:
            repo.get_detail("broken")

        codes = exc_info.value.outcome.codes()
        assert ErrorCode.MISSING_FIELD in codes
        assert ErrorCode.DATE_FORMAT_INVALID in codes

    def test_impossible_unquoted_date_raises_with_outcome(self, repo, create_unquoted_date_post):
        create_unquoted_date_post("leap", "2023-02-29")

        with pytest.raises(ContentValidationError) as exc_info:
            repo.get_detail("leap")
        assert exc_info.value.outcome.codes() == [ErrorCode.DATE_FORMAT_INVALID]

    def test_unparseable_item_raises(self, repo, content_dir):
        (content_dir / "raw.md").write_text("no header at all", encoding="utf-8")

        with pytest.raises(ContentParseError) as exc_info:
            repo.get_detail("raw")
        assert exc_info.value.code == ErrorCode.HEADER_MISSING


# ---------------------------------------------------------------------------
# Audit
# ---------------------------------------------------------------------------


class TestAudit:
    """Tests for the per-file audit report."""

    def test_reports_every_file(self, repo, create_post, content_dir):
        create_post(slug="good")
        create_post(slug="bad", description=None)
        (content_dir / "raw.md").write_text("no header", encoding="utf-8")

        entries = {e.slug: e for e in repo.audit()}

        assert set(entries) == {"good", "bad", "raw"}
        assert entries["good"].ok
        assert not entries["bad"].ok
        assert entries["bad"].outcome.codes() == [ErrorCode.MISSING_FIELD]
        assert isinstance(entries["raw"].error, ContentParseError)
        assert not entries["raw"].ok

    def test_impossible_unquoted_date_reported(self, repo, create_post, create_unquoted_date_post):
        create_post(slug="good")
        create_unquoted_date_post("bad", "2024-02-30")

        entries = {e.slug: e for e in repo.audit()}

        assert entries["good"].ok
        assert entries["bad"].error is None
        assert entries["bad"].outcome.codes() == [ErrorCode.DATE_FORMAT_INVALID]

    def test_includes_unpublished(self, repo, create_post):
        create_post(slug="draft", extra_fm={"published": False})
        assert [e.slug for e in repo.audit()] == ["draft"]
