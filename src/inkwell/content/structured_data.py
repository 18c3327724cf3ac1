"""
JSON-LD structured data for content items.

Site-wide values come from a ``SiteConfig`` passed in by the caller.
"""

from __future__ import annotations

from typing import Any

from inkwell.content.models import DEFAULT_AUTHOR, ContentSummary
from inkwell.core.config import SiteConfig

SCHEMA_CONTEXT = "https://schema.org"


def _absolute(site: SiteConfig, ref: str) -> str:
    if ref.startswith(("http://", "https://")):
        return ref
    return f"{site.site_url.rstrip('/')}/{ref.lstrip('/')}"


def author_data(summary: ContentSummary, site: SiteConfig) -> dict[str, Any]:
    return {
        "@type": "Person",
        "name": summary.author if summary.author != DEFAULT_AUTHOR else site.author,
        "url": site.site_url,
    }


def blog_posting(summary: ContentSummary, site: SiteConfig) -> dict[str, Any]:
    """schema.org BlogPosting for one post."""
    url = site.url_for(summary.slug)
    data: dict[str, Any] = {
        "@context": SCHEMA_CONTEXT,
        "@type": "BlogPosting",
        "headline": summary.title,
        "description": summary.description,
        "datePublished": summary.date.isoformat(),
        "dateModified": summary.date.isoformat(),
        "author": author_data(summary, site),
        "mainEntityOfPage": {"@type": "WebPage", "@id": url},
        "url": url,
        "wordCount": summary.word_count,
        "timeRequired": f"PT{summary.reading_time}M",
    }
    if summary.image:
        data["image"] = [_absolute(site, summary.image)]
    if summary.tags:
        data["keywords"] = list(summary.tags)
        data["articleSection"] = summary.tags[0]
    return data


def breadcrumbs(summary: ContentSummary, site: SiteConfig) -> dict[str, Any]:
    """schema.org BreadcrumbList: Home > Blog > post."""
    base = site.site_url.rstrip("/")
    trail = [
        ("Home", base),
        ("Blog", f"{base}/blog"),
        (summary.title, site.url_for(summary.slug)),
    ]
    return {
        "@context": SCHEMA_CONTEXT,
        "@type": "BreadcrumbList",
        "itemListElement": [
            {"@type": "ListItem", "position": i, "name": name, "item": item}
            for i, (name, item) in enumerate(trail, start=1)
        ],
    }


def website(site: SiteConfig) -> dict[str, Any]:
    """schema.org WebSite with a search action."""
    base = site.site_url.rstrip("/")
    return {
        "@context": SCHEMA_CONTEXT,
        "@type": "WebSite",
        "name": site.site_name,
        "url": base,
        "potentialAction": {
            "@type": "SearchAction",
            "target": f"{base}/blog?search={{search_term_string}}",
            "query-input": "required name=search_term_string",
        },
    }
