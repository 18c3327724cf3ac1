"""
Markdown rendering to sanitized HTML.

Headings get deterministic anchor ids (position + normalized text) and are
collected from the same parse, so the outline always matches the HTML. Absolute
links are marked to open in a new browsing context. All output
passes through ``sanitize_output`` before it is returned.
"""

from __future__ import annotations

import html as html_module
import logging
import re
import xml.etree.ElementTree as etree

import markdown
from markdown import util
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from inkwell.content.models import Heading
from inkwell.content.sanitizer import sanitize_output

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "sane_lists"]

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_HEADING_TAGS = {f"h{n}" for n in range(1, 7)}
_EXTERNAL_LINK = re.compile(r"^(?:[a-z][a-z0-9+.-]*:)?//", re.IGNORECASE)
# Backslash escapes and stashed raw HTML are placeholders until serialization
_ESCAPED_CHAR = re.compile(f"{util.STX}([0-9]+){util.ETX}")
_PLACEHOLDER = re.compile(f"{util.STX}[^{util.ETX}]*{util.ETX}")


def anchor_id(index: int, text: str) -> str:
    """Build the anchor id for the ``index``-th heading of a document."""
    normalized = _NON_ALNUM.sub("-", text.lower()).strip("-")
    return f"heading-{index}-{normalized}".rstrip("-")


def _heading_text(element: etree.Element) -> str:
    text = "".join(element.itertext())
    text = _ESCAPED_CHAR.sub(lambda m: chr(int(m.group(1))), text)
    text = _PLACEHOLDER.sub("", text)
    return html_module.unescape(text).strip()


class _AnchorTreeprocessor(Treeprocessor):
    """Assign heading ids in document order and mark external links."""

    def __init__(self, md: markdown.Markdown, headings: list[Heading]):
        super().__init__(md)
        self.headings = headings

    def run(self, root: etree.Element) -> None:
        for element in root.iter():
            if element.tag in _HEADING_TAGS:
                text = _heading_text(element)
                heading = Heading(
                    level=int(element.tag[1]),
                    text=text,
                    anchor_id=anchor_id(len(self.headings), text),
                )
                element.set("id", heading.anchor_id)
                self.headings.append(heading)
            elif element.tag == "a":
                href = element.get("href", "")
                if _EXTERNAL_LINK.match(href):
                    element.set("target", "_blank")
                    element.set("rel", "noopener noreferrer")


class AnchorExtension(Extension):
    """Python-Markdown extension registering the anchor tree processor.

    Headings seen during conversion are collected in ``headings``.
    """

    def __init__(self, **kwargs):
        self.headings: list[Heading] = []
        super().__init__(**kwargs)

    def extendMarkdown(self, md: markdown.Markdown) -> None:
        # Below the inline processor (20) so heading text is final
        md.treeprocessors.register(
            _AnchorTreeprocessor(md, self.headings), "inkwell_anchors", 5
        )


def _render(body: str) -> tuple[str, list[Heading]]:
    anchors = AnchorExtension()
    md = markdown.Markdown(extensions=[*MARKDOWN_EXTENSIONS, anchors])
    return md.convert(body), anchors.headings


def _fallback(body: str) -> str:
    """Render paragraphs of escaped text when the Markdown engine fails."""
    paragraphs = [p.strip() for p in re.split(r"\n\s*\n", body) if p.strip()]
    return "\n".join(f"<p>{html_module.escape(p)}</p>" for p in paragraphs)


def render_body(body: str) -> tuple[str, list[Heading]]:
    """Convert a Markdown body into sanitized HTML and its heading outline.

    Both come from one parse, so every heading's ``anchor_id`` is an ``id``
    in the returned HTML.

    Args:
        body: Markdown source (already validated)

    Returns:
        Tuple of (sanitized HTML, headings in document order); blank input
        gives an empty string and no headings
    """
    if not body or not body.strip():
        return "", []

    try:
        rendered, headings = _render(body)
    except Exception:
        logger.warning("Markdown rendering failed; falling back to plain paragraphs", exc_info=True)
        rendered, headings = _fallback(body), []

    return sanitize_output(rendered), headings


def to_safe_output(body: str) -> str:
    """Convert a Markdown body into sanitized HTML."""
    return render_body(body)[0]


def extract_headings(body: str) -> list[Heading]:
    """Headings of ``body`` as rendered, with the ids ``to_safe_output`` assigns."""
    return render_body(body)[1]
