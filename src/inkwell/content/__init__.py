"""
Content pipeline for the publishing site.

Provides tools for:
- Parsing front matter headers
- Validating headers and bodies against the content schema
- Rendering Markdown bodies to sanitized HTML
- Querying the content directory (listing, tags, search, adjacency)
"""

from inkwell.content.frontmatter import ParsedSource, parse_header, render_source
from inkwell.content.markdown import extract_headings, render_body, to_safe_output
from inkwell.content.models import (
    Adjacency,
    ContentDetail,
    ContentSummary,
    Heading,
    PostMetadata,
    Severity,
    ValidationIssue,
    ValidationOutcome,
)
from inkwell.content.repository import AuditEntry, ContentRepository
from inkwell.content.sanitizer import sanitize_line, sanitize_output, sanitize_slug
from inkwell.content.schema import SchemaCheck, SchemaValidator, ValidationContext
from inkwell.content.stats import reading_time_minutes, word_count

__all__ = [
    "ContentRepository",
    "AuditEntry",
    "SchemaValidator",
    "SchemaCheck",
    "ValidationContext",
    "ParsedSource",
    "parse_header",
    "render_source",
    "to_safe_output",
    "extract_headings",
    "render_body",
    "sanitize_output",
    "sanitize_line",
    "sanitize_slug",
    "word_count",
    "reading_time_minutes",
    "PostMetadata",
    "ContentSummary",
    "ContentDetail",
    "Heading",
    "Adjacency",
    "Severity",
    "ValidationIssue",
    "ValidationOutcome",
]
