"""
Content repository.

Maps the Markdown files of a content directory to validated summaries and
details and answers collection queries over them.

Listing is skip-and-continue: a file that fails to parse or validate is
logged and left out. Fetching one item by slug is fail-fast: the caller
gets the full reason the item is unavailable.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from inkwell.content.frontmatter import parse_header
from inkwell.content.markdown import render_body
from inkwell.content.models import (
    Adjacency,
    ContentDetail,
    ContentSummary,
    ValidationOutcome,
)
from inkwell.content.sanitizer import sanitize_slug
from inkwell.content.schema import SchemaValidator, ValidationContext
from inkwell.content.stats import (
    DEFAULT_WORDS_PER_MINUTE,
    reading_time_minutes,
    word_count,
)
from inkwell.core.errors import (
    ContentParseError,
    ContentValidationError,
    ErrorCode,
    InkwellError,
)

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
CONTENT_SUFFIX = ".md"


@dataclass(frozen=True)
class _Loaded:
    """A validated file, kept internal so paths never leave the repository."""

    filename: str
    summary: ContentSummary
    body: str


@dataclass(frozen=True)
class AuditEntry:
    """Per-file validation report."""

    filename: str
    slug: str
    outcome: ValidationOutcome | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.outcome is not None and self.outcome.is_valid


class ContentRepository:
    """Read-only access to the content items of one directory."""

    def __init__(
        self,
        content_dir: Path,
        context: ValidationContext | None = None,
        words_per_minute: int = DEFAULT_WORDS_PER_MINUTE,
        workers: int = 1,
        validator: SchemaValidator | None = None,
    ):
        """Initialize repository.

        Args:
            content_dir: Directory holding ``<slug>.md`` files
            context: Validation bounds (defaults apply if omitted)
            words_per_minute: Reading speed for reading time estimates
            workers: Threads used to load files while listing
            validator: Custom schema validator
        """
        self.content_dir = Path(content_dir)
        self.context = context
        self.validator = validator or SchemaValidator(context=context or ValidationContext())
        self.words_per_minute = words_per_minute
        self.workers = max(1, workers)

    # ------------------------------------------------------------------
    # File discovery and loading
    # ------------------------------------------------------------------

    def _is_eligible(self, path: Path) -> bool:
        return (
            path.suffix == CONTENT_SUFFIX
            and not path.name.startswith(".")
            and not path.is_symlink()
            and path.is_file()
            and bool(SLUG_PATTERN.fullmatch(path.stem))
        )

    def _source_files(self) -> Iterator[Path]:
        """Yield eligible files directly inside the content directory."""
        if not self.content_dir.is_dir():
            logger.warning("Content directory does not exist: %s", self.content_dir)
            return
        for path in sorted(self.content_dir.iterdir()):
            if self._is_eligible(path):
                yield path
            elif path.suffix == CONTENT_SUFFIX and not path.name.startswith("."):
                logger.warning(
                    "Skipping %s: not a regular file named <slug>.md (lowercase letters, digits, hyphens)",
                    path.name,
                )

    def _load(self, path: Path) -> _Loaded:
        """Parse, validate and measure one file.

        Raises:
            ContentParseError: If the file has no usable header or body
            ContentValidationError: If schema validation fails
        """
        slug = path.stem
        raw = path.read_text(encoding="utf-8")
        parsed = parse_header(raw, source=path.name)

        outcome = self.validator.validate(parsed.metadata, parsed.body, self.context)
        for warning in outcome.warnings:
            logger.debug("%s: %s", path.name, warning.message)
        if not outcome.is_valid:
            raise ContentValidationError(slug, outcome)

        metadata = self.validator.normalize(parsed.metadata, slug=slug)
        summary = ContentSummary.from_metadata(
            slug,
            metadata,
            reading_time=reading_time_minutes(parsed.body, self.words_per_minute),
            word_count=word_count(parsed.body),
        )
        return _Loaded(filename=path.name, summary=summary, body=parsed.body)

    def _try_load(self, path: Path) -> _Loaded | None:
        try:
            return self._load(path)
        except (InkwellError, OSError, UnicodeDecodeError) as e:
            logger.warning("Skipping %s: %s", path.name, e)
            return None

    def _load_all(self) -> list[_Loaded]:
        paths = list(self._source_files())
        if self.workers > 1 and len(paths) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                results = list(executor.map(self._try_load, paths))
        else:
            results = [self._try_load(p) for p in paths]

        loaded = [r for r in results if r is not None]
        # Newest first; ties broken by filename, also descending
        loaded.sort(key=lambda r: (r.summary.date, r.filename), reverse=True)
        return loaded

    # ------------------------------------------------------------------
    # Collection queries
    # ------------------------------------------------------------------

    def list_summaries(self, include_unpublished: bool = False) -> list[ContentSummary]:
        """List summaries of every valid item, newest first.

        Args:
            include_unpublished: Include items with ``published: false``

        Returns:
            Summaries sorted by date descending
        """
        return [
            r.summary
            for r in self._load_all()
            if include_unpublished or r.summary.published
        ]

    def find_by_tag(self, tag: str) -> list[ContentSummary]:
        """Published items carrying ``tag`` (case-insensitive)."""
        return [s for s in self.list_summaries() if s.has_tag(tag)]

    def search(self, query: str) -> list[ContentSummary]:
        """Published items whose title, description or tags contain ``query``."""
        query = query.strip()
        if not query:
            return []
        return [s for s in self.list_summaries() if s.matches(query)]

    def adjacent(self, slug: str) -> Adjacency:
        """Chronological neighbours of ``slug`` among published items."""
        summaries = self.list_summaries()
        for index, summary in enumerate(summaries):
            if summary.slug == slug:
                older = summaries[index + 1] if index + 1 < len(summaries) else None
                newer = summaries[index - 1] if index > 0 else None
                return Adjacency(previous=older, next=newer)
        return Adjacency()

    def all_tags(self, include_unpublished: bool = False) -> list[str]:
        """Unique tags, first-seen casing kept, sorted case-insensitively."""
        seen: dict[str, str] = {}
        for summary in self.list_summaries(include_unpublished):
            for tag in summary.tags:
                seen.setdefault(tag.lower(), tag)
        return sorted(seen.values(), key=str.lower)

    def tag_counts(self) -> dict[str, int]:
        """Number of published items per tag (keys use first-seen casing)."""
        names: dict[str, str] = {}
        counts: dict[str, int] = {}
        for summary in self.list_summaries():
            keys = {t.lower(): t for t in reversed(summary.tags)}
            for key, tag in keys.items():
                name = names.setdefault(key, tag)
                counts[name] = counts.get(name, 0) + 1
        return counts

    # ------------------------------------------------------------------
    # Single item
    # ------------------------------------------------------------------

    def resolve(self, slug: str) -> Path | None:
        """Map a requested slug to a source file inside the content directory.

        Only the sanitized slug is ever used to build a path.
        """
        clean = sanitize_slug(slug)
        if clean != slug:
            logger.info(
                "%s: requested slug %r resolved as %r",
                ErrorCode.SLUG_SANITIZED.value,
                slug,
                clean,
            )
        if not clean:
            return None

        path = self.content_dir / f"{clean}{CONTENT_SUFFIX}"
        if not self._is_eligible(path):
            logger.debug("%s: %s", ErrorCode.FILE_NOT_FOUND.value, path.name)
            return None
        if path.resolve().parent != self.content_dir.resolve():
            return None
        return path

    def get_detail(
        self, slug: str, include_unpublished: bool = False
    ) -> ContentDetail | None:
        """Load one item with its rendered body.

        Args:
            slug: Requested slug (sanitized before lookup)
            include_unpublished: Return items with ``published: false``

        Returns:
            The detail, or None if no such item exists

        Raises:
            ContentParseError: If the file has no usable header or body
            ContentValidationError: If the item fails validation
        """
        path = self.resolve(slug)
        if path is None:
            return None

        loaded = self._load(path)
        if not (include_unpublished or loaded.summary.published):
            return None

        html, headings = render_body(loaded.body)
        return ContentDetail(summary=loaded.summary, html=html, headings=tuple(headings))

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def audit(self) -> list[AuditEntry]:
        """Validate every eligible file without raising for bad ones."""
        entries: list[AuditEntry] = []
        for path in self._source_files():
            try:
                parsed = parse_header(path.read_text(encoding="utf-8"), source=path.name)
            except (ContentParseError, OSError, UnicodeDecodeError) as e:
                entries.append(AuditEntry(filename=path.name, slug=path.stem, error=e))
                continue
            outcome = self.validator.validate(parsed.metadata, parsed.body, self.context)
            entries.append(AuditEntry(filename=path.name, slug=path.stem, outcome=outcome))
        return entries
