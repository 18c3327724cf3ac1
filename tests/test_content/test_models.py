"""Tests for inkwell.content.models module."""

from dataclasses import FrozenInstanceError
from datetime import date

import pytest

from inkwell.content.models import (
    ContentDetail,
    ContentSummary,
    Heading,
    Severity,
    ValidationIssue,
    ValidationOutcome,
)
from inkwell.core.errors import ErrorCode


@pytest.fixture
def summary():
    return ContentSummary(
        slug="tagged",
        title="Tagged Post",
        description="About JavaScript frameworks",
        date=date(2024, 1, 1),
        tags=("React", "Web Dev"),
    )


class TestContentSummary:
    def test_frozen(self, summary):
        with pytest.raises(FrozenInstanceError):
            summary.title = "Changed"

    def test_has_tag_case_insensitive(self, summary):
        assert summary.has_tag("react")
        assert summary.has_tag(" WEB DEV ")
        assert not summary.has_tag("rea")

    def test_matches(self, summary):
        assert summary.matches("tagged")
        assert summary.matches("javascript")
        assert summary.matches("dev")
        assert not summary.matches("python")

    def test_to_dict(self, summary):
        data = summary.to_dict()
        assert data["date"] == "2024-01-01"
        assert data["tags"] == ["React", "Web Dev"]
        assert "image" not in data


class TestValidationOutcome:
    def test_warnings_do_not_invalidate(self):
        warning = ValidationIssue("tags", "dup", ErrorCode.DUPLICATE_TAG, Severity.WARNING)
        outcome = ValidationOutcome(warnings=(warning,))

        assert outcome.is_valid
        assert outcome.to_dict()["warnings"][0]["code"] == "DuplicateTag"

    def test_errors_invalidate(self):
        error = ValidationIssue("date", "missing", ErrorCode.MISSING_FIELD)
        outcome = ValidationOutcome(errors=(error,))

        assert not outcome.is_valid
        assert outcome.to_dict()["errors"][0]["severity"] == "error"


class TestContentDetail:
    def test_to_dict_includes_html_and_headings(self, summary):
        detail = ContentDetail(
            summary=summary,
            html="<h1>Hi</h1>",
            headings=(Heading(level=1, text="Hi", anchor_id="heading-0-hi"),),
        )
        data = detail.to_dict()

        assert detail.slug == "tagged"
        assert data["html"] == "<h1>Hi</h1>"
        assert data["headings"] == [{"level": 1, "text": "Hi", "anchor_id": "heading-0-hi"}]
