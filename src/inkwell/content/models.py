"""
Content data model.

Two distinct shapes describe a content file's header:

- ``RawFields``: the untrusted mapping parsed from front matter
- ``PostMetadata``: the narrowed, typed result of a successful validation

Everything handed to presentation code is a frozen dataclass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from inkwell.core.errors import ErrorCode

RawFields = dict[str, Any]

DEFAULT_AUTHOR = "Anonymous"


class Severity(Enum):
    """Severity levels for validation issues."""

    ERROR = "error"  # Blocks the item
    WARNING = "warning"  # Reported, never blocks
    INFO = "info"  # Informational


@dataclass(frozen=True)
class ValidationIssue:
    """A single problem found while validating a content item."""

    field: str
    message: str
    code: ErrorCode
    severity: Severity = Severity.ERROR

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "field": self.field,
            "message": self.message,
            "code": self.code.value,
            "severity": self.severity.value,
        }


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of validating a header and body.

    Warnings never affect validity.
    """

    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[ValidationIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def codes(self) -> list[ErrorCode]:
        """All codes in report order, errors first."""
        return [i.code for i in self.errors] + [i.code for i in self.warnings]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "is_valid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }


@dataclass(frozen=True)
class PostMetadata:
    """Validated, normalized front matter."""

    title: str
    description: str
    date: date
    tags: tuple[str, ...] = ()
    author: str = DEFAULT_AUTHOR
    image: str | None = None
    published: bool = True


@dataclass(frozen=True)
class ContentSummary:
    """Lightweight view of a content item used by listings."""

    slug: str
    title: str
    description: str
    date: date
    tags: tuple[str, ...] = ()
    author: str = DEFAULT_AUTHOR
    image: str | None = None
    published: bool = True
    reading_time: int = 1
    word_count: int = 0

    @classmethod
    def from_metadata(
        cls, slug: str, metadata: PostMetadata, reading_time: int, word_count: int
    ) -> ContentSummary:
        return cls(
            slug=slug,
            title=metadata.title,
            description=metadata.description,
            date=metadata.date,
            tags=metadata.tags,
            author=metadata.author,
            image=metadata.image,
            published=metadata.published,
            reading_time=reading_time,
            word_count=word_count,
        )

    def has_tag(self, tag: str) -> bool:
        """Case-insensitive exact tag membership."""
        wanted = tag.strip().lower()
        return any(t.lower() == wanted for t in self.tags)

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on title, description or any tag."""
        needle = query.lower()
        return (
            needle in self.title.lower()
            or needle in self.description.lower()
            or any(needle in t.lower() for t in self.tags)
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        result: dict[str, Any] = {
            "slug": self.slug,
            "title": self.title,
            "description": self.description,
            "date": self.date.isoformat(),
            "tags": list(self.tags),
            "author": self.author,
            "published": self.published,
            "reading_time": self.reading_time,
            "word_count": self.word_count,
        }
        if self.image:
            result["image"] = self.image
        return result


@dataclass(frozen=True)
class Heading:
    """A heading found in a body, with its in-page anchor."""

    level: int
    text: str
    anchor_id: str


@dataclass(frozen=True)
class ContentDetail:
    """A summary plus its rendered, sanitized body.

    Only ever built from a summary that passed validation.
    """

    summary: ContentSummary
    html: str
    headings: tuple[Heading, ...] = field(default_factory=tuple)

    @property
    def slug(self) -> str:
        return self.summary.slug

    @property
    def title(self) -> str:
        return self.summary.title

    def to_dict(self) -> dict[str, Any]:
        result = self.summary.to_dict()
        result["html"] = self.html
        result["headings"] = [
            {"level": h.level, "text": h.text, "anchor_id": h.anchor_id}
            for h in self.headings
        ]
        return result


@dataclass(frozen=True)
class Adjacency:
    """Chronological neighbours of an item in a date-descending listing."""

    previous: ContentSummary | None = None  # older
    next: ContentSummary | None = None  # newer
