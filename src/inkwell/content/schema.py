"""
Schema validation for content front matter and body.

Each rule is a pluggable check run in a fixed order:
- required_fields: title, description and date are present
- field_types: fields hold the expected Python types
- date_format: date is a real ISO calendar date (future dates warn)
- field_lengths: hard maxima are errors, recommended minima are warnings
- tags: non-empty strings, count and case-insensitive duplicates warn
- body: length bounds and balanced code fences
- structure: headings and paragraph length hints

Every check runs; all issues are collected before the outcome is returned.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from inkwell.content.models import (
    DEFAULT_AUTHOR,
    PostMetadata,
    RawFields,
    Severity,
    ValidationIssue,
    ValidationOutcome,
)
from inkwell.core.errors import ContentValidationError, ErrorCode

REQUIRED_FIELDS = ("title", "description", "date")

FIELD_TYPES: dict[str, tuple[type, str]] = {
    "title": (str, "a string"),
    "description": (str, "a string"),
    "date": (str, "a string"),
    "tags": (list, "a list"),
    "author": (str, "a string"),
    "image": (str, "a string"),
    "published": (bool, "a boolean"),
}

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}(T\d{2}:\d{2}:\d{2}(\.\d{3})?Z?)?$")
HEADING_PATTERN = re.compile(r"^#{1,6}\s+.+$", re.MULTILINE)
CODE_FENCE = "```"


@dataclass
class ValidationContext:
    """Bounds applied by the schema checks."""

    min_body_length: int = 100
    max_body_length: int = 50_000
    max_tags: int = 10
    title_min_length: int = 10  # recommended
    title_max_length: int = 200
    description_min_length: int = 50  # recommended
    description_max_length: int = 300
    max_tag_length: int = 50
    max_author_length: int = 100
    max_paragraph_length: int = 1000
    today: date | None = None  # defaults to the current date

    def reference_date(self) -> date:
        return self.today or date.today()


def parse_content_date(value: str) -> date | None:
    """Parse an ISO date or timestamp string into a calendar date.

    Returns:
        The date, or None if the string does not match or is not a real date
    """
    if not DATE_PATTERN.fullmatch(value):
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _present(metadata: RawFields, name: str) -> bool:
    return metadata.get(name) is not None


def _typed(metadata: RawFields, name: str) -> Any:
    """Return the field value if present with its declared type, else None."""
    value = metadata.get(name)
    expected = FIELD_TYPES[name][0]
    if value is None or not isinstance(value, expected):
        return None
    return value


class SchemaCheck(ABC):
    """Base class for pluggable schema checks."""

    name: str = "base"
    description: str = "Base schema check"

    @abstractmethod
    def check(
        self, metadata: RawFields, body: str, ctx: ValidationContext
    ) -> list[ValidationIssue]:
        """Run the check.

        Args:
            metadata: Raw header fields
            body: Body text
            ctx: Validation bounds

        Returns:
            Issues found (empty if none)
        """
        pass


class RequiredFieldsCheck(SchemaCheck):
    """Report every absent required field."""

    name = "required_fields"
    description = "Check for missing title, description or date"

    def check(self, metadata, body, ctx):
        return [
            ValidationIssue(
                field=name,
                message=f"Required field '{name}' is missing",
                code=ErrorCode.MISSING_FIELD,
            )
            for name in REQUIRED_FIELDS
            if not _present(metadata, name)
        ]


class FieldTypesCheck(SchemaCheck):
    """Report present fields holding the wrong type."""

    name = "field_types"
    description = "Check field value types"

    def check(self, metadata, body, ctx):
        issues: list[ValidationIssue] = []
        for name, (expected, label) in FIELD_TYPES.items():
            if not _present(metadata, name):
                continue
            if not isinstance(metadata[name], expected):
                issues.append(
                    ValidationIssue(
                        field=name,
                        message=f"Field '{name}' must be {label}, got {type(metadata[name]).__name__}",
                        code=ErrorCode.TYPE_MISMATCH,
                    )
                )
        return issues


class DateFormatCheck(SchemaCheck):
    """Check that the date is a real calendar date."""

    name = "date_format"
    description = "Check for invalid or future dates"

    def check(self, metadata, body, ctx):
        value = _typed(metadata, "date")
        if value is None:
            return []  # Missing or mistyped dates are reported elsewhere

        parsed = parse_content_date(value)
        if parsed is None:
            return [
                ValidationIssue(
                    field="date",
                    message=f"Invalid date format: '{value}' (expected YYYY-MM-DD)",
                    code=ErrorCode.DATE_FORMAT_INVALID,
                )
            ]

        if parsed > ctx.reference_date():
            return [
                ValidationIssue(
                    field="date",
                    message=f"Date '{value}' is in the future",
                    code=ErrorCode.FUTURE_DATE,
                    severity=Severity.WARNING,
                )
            ]
        return []


class FieldLengthsCheck(SchemaCheck):
    """Check string field lengths against hard and recommended bounds."""

    name = "field_lengths"
    description = "Check title, description, author and image lengths"

    def _bounded(
        self, name: str, value: str, minimum: int, maximum: int
    ) -> list[ValidationIssue]:
        length = len(value.strip())
        if length == 0:
            return [
                ValidationIssue(
                    field=name,
                    message=f"Field '{name}' cannot be empty",
                    code=ErrorCode.LENGTH_VIOLATION,
                )
            ]
        if length > maximum:
            return [
                ValidationIssue(
                    field=name,
                    message=f"Field '{name}' is too long ({length} characters, maximum {maximum})",
                    code=ErrorCode.LENGTH_VIOLATION,
                )
            ]
        if length < minimum:
            return [
                ValidationIssue(
                    field=name,
                    message=(
                        f"Field '{name}' is short ({length} characters); "
                        f"at least {minimum} is recommended"
                    ),
                    code=ErrorCode.LENGTH_VIOLATION,
                    severity=Severity.WARNING,
                )
            ]
        return []

    def check(self, metadata, body, ctx):
        issues: list[ValidationIssue] = []

        title = _typed(metadata, "title")
        if title is not None:
            issues += self._bounded(
                "title", title, ctx.title_min_length, ctx.title_max_length
            )

        description = _typed(metadata, "description")
        if description is not None:
            issues += self._bounded(
                "description",
                description,
                ctx.description_min_length,
                ctx.description_max_length,
            )

        author = _typed(metadata, "author")
        if author is not None:
            issues += self._bounded("author", author, 1, ctx.max_author_length)

        image = _typed(metadata, "image")
        if image is not None and not image.strip():
            issues.append(
                ValidationIssue(
                    field="image",
                    message="Field 'image' cannot be empty",
                    code=ErrorCode.LENGTH_VIOLATION,
                )
            )

        return issues


class TagsCheck(SchemaCheck):
    """Check tag elements, count and duplicates."""

    name = "tags"
    description = "Check tags are unique non-empty strings"

    def check(self, metadata, body, ctx):
        tags = _typed(metadata, "tags")
        if tags is None:
            return []

        issues: list[ValidationIssue] = []
        seen: set[str] = set()
        duplicates: list[str] = []

        for index, tag in enumerate(tags):
            if not isinstance(tag, str):
                issues.append(
                    ValidationIssue(
                        field="tags",
                        message=f"Tag at index {index} must be a string",
                        code=ErrorCode.TYPE_MISMATCH,
                    )
                )
                continue
            if not tag.strip():
                issues.append(
                    ValidationIssue(
                        field="tags",
                        message=f"Tag at index {index} cannot be empty",
                        code=ErrorCode.LENGTH_VIOLATION,
                    )
                )
                continue
            if len(tag) > ctx.max_tag_length:
                issues.append(
                    ValidationIssue(
                        field="tags",
                        message=f"Tag '{tag}' is very long ({len(tag)} characters)",
                        code=ErrorCode.LENGTH_VIOLATION,
                        severity=Severity.WARNING,
                    )
                )
            key = tag.strip().lower()
            if key in seen:
                duplicates.append(tag)
            seen.add(key)

        if len(tags) > ctx.max_tags:
            issues.append(
                ValidationIssue(
                    field="tags",
                    message=f"Too many tags ({len(tags)}, maximum {ctx.max_tags})",
                    code=ErrorCode.TOO_MANY_TAGS,
                    severity=Severity.WARNING,
                )
            )

        if duplicates:
            issues.append(
                ValidationIssue(
                    field="tags",
                    message=f"Duplicate tags (case-insensitive): {', '.join(duplicates)}",
                    code=ErrorCode.DUPLICATE_TAG,
                    severity=Severity.WARNING,
                )
            )

        return issues


class BodyCheck(SchemaCheck):
    """Check body length and code fence balance."""

    name = "body"
    description = "Check body length and unclosed code blocks"

    def check(self, metadata, body, ctx):
        issues: list[ValidationIssue] = []
        length = len(body.strip())

        if length < ctx.min_body_length:
            issues.append(
                ValidationIssue(
                    field="content",
                    message=f"Content is too short ({length} characters, minimum {ctx.min_body_length})",
                    code=ErrorCode.CONTENT_TOO_SHORT,
                )
            )
        if length > ctx.max_body_length:
            issues.append(
                ValidationIssue(
                    field="content",
                    message=f"Content is too long ({length} characters, maximum {ctx.max_body_length})",
                    code=ErrorCode.CONTENT_TOO_LONG,
                )
            )
        if body.count(CODE_FENCE) % 2:
            issues.append(
                ValidationIssue(
                    field="content",
                    message="Content has unclosed code blocks (unmatched ```)",
                    code=ErrorCode.UNCLOSED_CODE_BLOCK,
                )
            )
        return issues


class StructureCheck(SchemaCheck):
    """Non-blocking hints about document structure."""

    name = "structure"
    description = "Check for headings and overly long paragraphs"

    def check(self, metadata, body, ctx):
        issues: list[ValidationIssue] = []

        if not HEADING_PATTERN.search(body):
            issues.append(
                ValidationIssue(
                    field="content",
                    message="Content has no headings",
                    code=ErrorCode.NO_HEADINGS,
                    severity=Severity.WARNING,
                )
            )

        long_paragraphs = [
            p for p in body.split("\n\n") if len(p) > ctx.max_paragraph_length
        ]
        if long_paragraphs:
            issues.append(
                ValidationIssue(
                    field="content",
                    message=f"Content has {len(long_paragraphs)} very long paragraph(s)",
                    code=ErrorCode.LONG_PARAGRAPH,
                    severity=Severity.WARNING,
                )
            )
        return issues


DEFAULT_CHECKS: tuple[type[SchemaCheck], ...] = (
    RequiredFieldsCheck,
    FieldTypesCheck,
    DateFormatCheck,
    FieldLengthsCheck,
    TagsCheck,
    BodyCheck,
    StructureCheck,
)


@dataclass
class SchemaValidator:
    """Validates raw header fields and body, and narrows valid input."""

    context: ValidationContext = field(default_factory=ValidationContext)
    checks: list[SchemaCheck] = field(
        default_factory=lambda: [cls() for cls in DEFAULT_CHECKS]
    )

    def validate(
        self,
        metadata: RawFields,
        body: str,
        context: ValidationContext | None = None,
    ) -> ValidationOutcome:
        """Run every check and collect all issues."""
        ctx = context or self.context
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []

        for check in self.checks:
            for issue in check.check(metadata, body, ctx):
                if issue.severity == Severity.ERROR:
                    errors.append(issue)
                else:
                    warnings.append(issue)

        return ValidationOutcome(errors=tuple(errors), warnings=tuple(warnings))

    def normalize(self, metadata: RawFields, slug: str = "<unknown>") -> PostMetadata:
        """Narrow valid raw fields into PostMetadata.

        Only header rules are enforced here; body rules belong to ``validate``.

        Raises:
            ContentValidationError: If the header fields are invalid
        """
        header_errors = [
            issue
            for check in self.checks
            if not isinstance(check, (BodyCheck, StructureCheck))
            for issue in check.check(metadata, "", self.context)
            if issue.severity == Severity.ERROR
        ]
        if header_errors:
            raise ContentValidationError(
                slug, ValidationOutcome(errors=tuple(header_errors))
            )

        parsed_date = parse_content_date(metadata["date"])

        author = metadata.get("author")
        image = metadata.get("image")
        published = metadata.get("published")

        return PostMetadata(
            title=metadata["title"].strip(),
            description=metadata["description"].strip(),
            date=parsed_date,
            tags=tuple(t.strip() for t in metadata.get("tags") or ()),
            author=author.strip() if author else DEFAULT_AUTHOR,
            image=image.strip() if image else None,
            published=True if published is None else published,
        )


def format_outcome(outcome: ValidationOutcome) -> str:
    """Format an outcome as a human-readable report."""
    if outcome.is_valid and not outcome.warnings:
        return "Validation passed with no issues."

    lines: list[str] = []
    if outcome.errors:
        lines.append("ERRORS:")
        lines.extend(f"  - {e.field}: {e.message}" for e in outcome.errors)
    if outcome.warnings:
        lines.append("WARNINGS:")
        lines.extend(f"  - {w.field}: {w.message}" for w in outcome.warnings)
    return "\n".join(lines)
