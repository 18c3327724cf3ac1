"""Tests for inkwell.content.sanitizer module."""

import pytest

from inkwell.content.sanitizer import sanitize_line, sanitize_output, sanitize_slug


class TestSanitizeOutput:
    """Tests for HTML allow-list cleaning."""

    def test_script_removed_with_content(self):
        html = "<h1>Title</h1><script>alert(1)</script><p>ok</p>"
        cleaned = sanitize_output(html)

        assert "<script" not in cleaned
        assert "alert" not in cleaned
        assert "<h1>Title</h1>" in cleaned
        assert "<p>ok</p>" in cleaned

    def test_nested_script_tricks(self):
        cleaned = sanitize_output("<scr<script>x</script>ipt>alert(2)</script>")
        assert "<script" not in cleaned.lower()

    def test_style_and_iframe_removed(self):
        cleaned = sanitize_output(
            '<style>p{color:red}</style><iframe src="https://evil.test"></iframe><p>text</p>'
        )
        assert "color" not in cleaned
        assert "iframe" not in cleaned
        assert "<p>text</p>" in cleaned

    def test_event_handlers_dropped(self):
        cleaned = sanitize_output('<img src="/a.png" onerror="alert(1)" alt="pic">')
        assert "onerror" not in cleaned
        assert 'alt="pic"' in cleaned
        assert 'src="/a.png"' in cleaned

    def test_javascript_href_dropped(self):
        cleaned = sanitize_output('<a href="javascript:alert(1)">click</a>')
        assert "javascript" not in cleaned
        assert "click" in cleaned

    @pytest.mark.parametrize(
        "href",
        ["https://example.com", "http://example.com", "mailto:me@example.com", "tel:+123", "/relative/path"],
    )
    def test_safe_hrefs_kept(self, href):
        cleaned = sanitize_output(f'<a href="{href}">link</a>')
        assert f'href="{href}"' in cleaned

    def test_disallowed_tags_unwrapped(self):
        cleaned = sanitize_output("<div><span>kept text</span></div>")
        assert cleaned == "kept text"

    def test_disallowed_attributes_dropped(self):
        cleaned = sanitize_output('<p style="color:red" data-x="1" class="note">x</p>')
        assert cleaned == '<p class="note">x</p>'

    def test_comments_stripped(self):
        assert sanitize_output("<p>a<!-- secret --></p>") == "<p>a</p>"

    def test_custom_allow_lists(self):
        cleaned = sanitize_output(
            '<p id="x"><em>hi</em></p>', allowed_tags={"em"}, allowed_attributes=set()
        )
        assert cleaned == "<em>hi</em>"

    def test_script_cannot_be_allowed(self):
        cleaned = sanitize_output("<script>alert(1)</script>", allowed_tags={"script"})
        assert cleaned == ""

    def test_empty_input(self):
        assert sanitize_output("") == ""

    @pytest.mark.parametrize(
        "html",
        [
            "<h2 id=\"a\">Heading</h2><p>Text &amp; more</p>",
            "<p onclick=\"x()\">a</p><script>bad()</script>",
            "<table><tr><td>1</td></tr></table><div>loose</div>",
            "<a href=\"javascript:x\">a</a> 1 < 2",
        ],
    )
    def test_idempotent(self, html):
        once = sanitize_output(html)
        assert sanitize_output(once) == once


class TestSanitizeLine:
    """Tests for single-line input cleaning."""

    def test_markup_characters_removed(self):
        assert sanitize_line('<b>"hello"</b> & \'bye\'') == "bhello/b bye"

    def test_control_characters_removed(self):
        assert sanitize_line("a\x00b\x07c") == "abc"

    def test_whitespace_collapsed(self):
        assert sanitize_line("  many   spaces\n\tand tabs  ") == "many spaces and tabs"

    @pytest.mark.parametrize("scheme", ["javascript:", "JavaScript :", "data:", "vbscript:"])
    def test_dangerous_schemes_removed(self, scheme):
        assert ":" not in sanitize_line(f"{scheme}payload")

    def test_risk_keywords_removed(self):
        assert sanitize_line("1 UNION SELECT password") == "1 password"

    def test_keyword_inside_word_kept(self):
        assert sanitize_line("selection of updates") == "selection of updates"

    def test_truncated(self):
        assert sanitize_line("a" * 150) == "a" * 100
        assert sanitize_line("abc def", max_length=4) == "abc"

    def test_non_string(self):
        assert sanitize_line(None) == ""

    @pytest.mark.parametrize(
        "text",
        [
            "dr<>op table",
            "seldeleteect",
            "evalalert(1)",
            "java<script>script:alert",
            "selection " * 20,
            "normal search query",
        ],
    )
    def test_idempotent(self, text):
        once = sanitize_line(text)
        assert sanitize_line(once) == once


class TestSanitizeSlug:
    """Tests for slug reduction."""

    def test_clean_slug_unchanged(self):
        assert sanitize_slug("my-post_2") == "my-post_2"

    def test_traversal_removed(self):
        assert sanitize_slug("../../etc/passwd") == "etcpasswd"

    def test_unicode_and_spaces_removed(self):
        assert sanitize_slug("héllo wörld") == "hllowrld"
