"""
Front matter splitting and rendering.

A content file is a ``---`` delimited YAML block followed by a Markdown body.
A file without the delimiter pair is rejected rather than treated as an
all-defaults item.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

import frontmatter
import yaml

from inkwell.content.models import DEFAULT_AUTHOR, PostMetadata, RawFields
from inkwell.core.errors import ContentParseError, ErrorCode

_YAML = frontmatter.YAMLHandler()
_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class HeaderLoader(yaml.SafeLoader):
    """SafeLoader that leaves plain scalars such as dates as text."""


HeaderLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


@dataclass(frozen=True)
class ParsedSource:
    """Raw header fields and body text of one source file."""

    metadata: RawFields
    body: str


def _textual_value(value: Any) -> Any:
    """Turn explicitly tagged ``!!timestamp`` values back into ISO text."""
    if isinstance(value, datetime):
        # The author's wall-clock date is kept; the offset is dropped
        return value.strftime("%Y-%m-%dT%H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    return value


def parse_header(raw: str, source: str | None = None) -> ParsedSource:
    """Split a source document into header fields and body.

    Args:
        raw: Full file content
        source: Optional file name for error messages

    Returns:
        ParsedSource with the raw header mapping and the stripped body

    Raises:
        ContentParseError: HeaderMissing, HeaderInvalid or BodyEmpty
    """
    where = f" in {source}" if source else ""
    text = raw.lstrip("\ufeff")

    if not _YAML.detect(text):
        raise ContentParseError(
            f"No front matter{where}", ErrorCode.HEADER_MISSING, source
        )

    try:
        fm_text, body = _YAML.split(text)
    except ValueError:
        # Opening delimiter without a closing one
        raise ContentParseError(
            f"Unterminated front matter{where}", ErrorCode.HEADER_MISSING, source
        ) from None

    try:
        loaded = _YAML.load(fm_text, Loader=HeaderLoader)
    except (yaml.YAMLError, ValueError, OverflowError) as e:
        # Explicit tags such as ``!!timestamp 2024-13-45`` fail in the constructor
        raise ContentParseError(
            f"YAML error{where}: {e}", ErrorCode.HEADER_INVALID, source
        ) from e

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise ContentParseError(
            f"Front matter must be a mapping{where}", ErrorCode.HEADER_INVALID, source
        )

    body = body.strip()
    if not body:
        raise ContentParseError(
            f"Body is empty{where}", ErrorCode.BODY_EMPTY, source
        )

    metadata: RawFields = {str(k): _textual_value(v) for k, v in loaded.items()}
    return ParsedSource(metadata=metadata, body=body)


def metadata_to_fields(metadata: PostMetadata) -> RawFields:
    """Convert validated metadata back into header fields."""
    fields: RawFields = {
        "title": metadata.title,
        "description": metadata.description,
        "date": metadata.date.isoformat(),
    }
    if metadata.tags:
        fields["tags"] = list(metadata.tags)
    if metadata.author != DEFAULT_AUTHOR:
        fields["author"] = metadata.author
    if metadata.image:
        fields["image"] = metadata.image
    if not metadata.published:
        fields["published"] = False
    return fields


def render_source(metadata: PostMetadata, body: str) -> str:
    """Render a source document from validated metadata and a body.

    ``parse_header`` followed by normalization reproduces ``metadata``.
    """
    post = frontmatter.Post(body.strip(), **metadata_to_fields(metadata))
    return frontmatter.dumps(post, sort_keys=False) + "\n"
