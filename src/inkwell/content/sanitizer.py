"""
HTML and single-line input sanitization.

Two independent contexts:
- ``sanitize_output``: allow-list cleaning of rendered HTML (bleach)
- ``sanitize_line``: aggressive cleaning of short untrusted strings

Both are idempotent.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

import bleach

DEFAULT_ALLOWED_TAGS = frozenset(
    {
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "p",
        "br",
        "hr",
        "strong",
        "em",
        "b",
        "i",
        "u",
        "s",
        "del",
        "ul",
        "ol",
        "li",
        "blockquote",
        "pre",
        "code",
        "a",
        "img",
        "table",
        "thead",
        "tbody",
        "tr",
        "th",
        "td",
    }
)
DEFAULT_ALLOWED_ATTRIBUTES = frozenset(
    {"href", "title", "alt", "src", "class", "id", "target", "rel"}
)
ALLOWED_PROTOCOLS = frozenset({"http", "https", "mailto", "tel"})

# Elements whose content is never visible text; dropped with their content
_HIDDEN_CONTENT_TAGS = (
    "script",
    "style",
    "iframe",
    "object",
    "embed",
    "noscript",
    "template",
)
_HIDDEN_BLOCK = re.compile(
    r"<(%s)\b[^>]*>.*?</\1\s*>" % "|".join(_HIDDEN_CONTENT_TAGS),
    re.IGNORECASE | re.DOTALL,
)
_HIDDEN_TAG = re.compile(
    r"</?(?:%s)\b[^>]*>?" % "|".join(_HIDDEN_CONTENT_TAGS),
    re.IGNORECASE,
)

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_LINE_UNSAFE_CHARS = re.compile(r"[<>\"'&]")
_DANGEROUS_SCHEMES = re.compile(r"(?:javascript|data|vbscript)\s*:", re.IGNORECASE)
_RISK_KEYWORDS = re.compile(
    r"\b(?:drop|delete|union|select|insert|update|create|alter|exec|execute"
    r"|alert|eval|prompt|confirm)\b",
    re.IGNORECASE,
)
_WHITESPACE = re.compile(r"\s+")
_SLUG_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")


def _strip_hidden_elements(html: str) -> str:
    """Remove script-like elements together with their content."""
    previous = None
    while previous != html:
        previous = html
        html = _HIDDEN_BLOCK.sub("", html)
    return _HIDDEN_TAG.sub("", html)


def _attribute_filter(allowed: frozenset[str]):
    def _allow(tag: str, name: str, value: str) -> bool:
        lowered = name.lower()
        return lowered in allowed and not lowered.startswith("on")

    return _allow


def sanitize_output(
    html: str,
    allowed_tags: Iterable[str] = DEFAULT_ALLOWED_TAGS,
    allowed_attributes: Iterable[str] = DEFAULT_ALLOWED_ATTRIBUTES,
) -> str:
    """Clean rendered HTML against tag and attribute allow-lists.

    Disallowed elements are unwrapped so their text survives; script-like
    elements are removed with their content. ``href``/``src`` values with
    schemes other than http, https, mailto and tel are dropped.

    Args:
        html: HTML to clean
        allowed_tags: Element names to keep
        allowed_attributes: Attribute names to keep on any allowed element

    Returns:
        Sanitized HTML
    """
    if not html:
        return ""

    tags = frozenset(t.lower() for t in allowed_tags) - set(_HIDDEN_CONTENT_TAGS)
    attributes = frozenset(a.lower() for a in allowed_attributes)

    cleaned = bleach.clean(
        _strip_hidden_elements(html),
        tags=tags,
        attributes=_attribute_filter(attributes),
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
        strip_comments=True,
    )
    return cleaned


def sanitize_line(text: str, max_length: int = 100) -> str:
    """Clean a single-line untrusted string such as a search query.

    Strips markup characters, control characters, dangerous URI schemes and
    risk keywords, collapses whitespace and truncates.
    """
    if not isinstance(text, str):
        return ""

    cleaned = text
    previous = None
    # Removing or truncating can expose another token; repeat until stable
    while previous != cleaned:
        previous = cleaned
        cleaned = _CONTROL_CHARS.sub("", cleaned)
        cleaned = _LINE_UNSAFE_CHARS.sub("", cleaned)
        cleaned = _DANGEROUS_SCHEMES.sub("", cleaned)
        cleaned = _RISK_KEYWORDS.sub("", cleaned)
        cleaned = _WHITESPACE.sub(" ", cleaned).strip()
        cleaned = cleaned[:max_length].rstrip()

    return cleaned


def sanitize_slug(value: str) -> str:
    """Keep only ASCII letters, digits, hyphens and underscores."""
    return _SLUG_UNSAFE.sub("", value)
