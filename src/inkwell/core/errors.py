"""
Error taxonomy shared by the content and form pipelines.

Validation problems are reported as ``ValidationIssue`` values carrying an
``ErrorCode``; exceptions are only raised where a caller asked for a single
item (or misconfigured something) and needs to know why it failed.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from inkwell.content.models import ValidationOutcome


class ErrorCode(Enum):
    """Machine-readable codes for parse, validation and input problems."""

    HEADER_MISSING = "HeaderMissing"
    HEADER_INVALID = "HeaderInvalid"
    BODY_EMPTY = "BodyEmpty"
    MISSING_FIELD = "MissingField"
    TYPE_MISMATCH = "TypeMismatch"
    DATE_FORMAT_INVALID = "DateFormatInvalid"
    FUTURE_DATE = "FutureDate"  # warning
    LENGTH_VIOLATION = "LengthViolation"
    TOO_MANY_TAGS = "TooManyTags"  # warning
    DUPLICATE_TAG = "DuplicateTag"  # warning
    CONTENT_TOO_SHORT = "ContentTooShort"
    CONTENT_TOO_LONG = "ContentTooLong"
    UNCLOSED_CODE_BLOCK = "UnclosedCodeBlock"
    NO_HEADINGS = "NoHeadings"  # warning
    LONG_PARAGRAPH = "LongParagraph"  # warning
    FILE_NOT_FOUND = "FileNotFound"
    SLUG_SANITIZED = "SlugSanitized"  # informational
    DANGEROUS_CONTENT = "DangerousContentDetected"
    UNSUPPORTED_FILE_TYPE = "UnsupportedFileType"
    FILE_TOO_LARGE = "FileTooLarge"
    INVALID_FIELD = "InvalidField"


class InkwellError(Exception):
    """Base exception for inkwell errors."""

    def __init__(self, message: str, code: ErrorCode | None = None):
        self.message = message
        self.code = code
        super().__init__(message)


class ContentParseError(InkwellError):
    """A source file could not be split into header and body."""

    def __init__(self, message: str, code: ErrorCode, source: str | None = None):
        self.source = source
        super().__init__(message, code)


class ContentValidationError(InkwellError):
    """A content item failed schema validation.

    Carries the complete outcome so the caller sees every problem at once.
    """

    def __init__(self, slug: str, outcome: ValidationOutcome):
        self.slug = slug
        self.outcome = outcome
        problems = "; ".join(f"{e.field}: {e.message}" for e in outcome.errors)
        super().__init__(f"Invalid content '{slug}': {problems}")


class SchemaConfigError(InkwellError, ValueError):
    """A form schema was defined with inconsistent constraints."""
    pass


class ConfigError(InkwellError):
    """Site configuration is malformed."""
    pass
