"""
Unit tests for HTML conversion module (html_converter.py).

Tests cover:
- HTML to display text conversion
- Link, image and emphasis removal
- Entity decoding
- Tag stripping fallback
"""

import pytest

from eml_masker.canonicalization.html_converter import html_to_text, strip_html_tags


class TestHtmlToText:
    """Tests for html_to_text() function."""

    @pytest.mark.unit
    def test_html_to_text_simple(self):
        """Test converting simple HTML to text."""
        result = html_to_text("<p>Hello <strong>world</strong>!</p>")

        assert "Hello world" in result
        assert "<p>" not in result
        assert "**" not in result

    @pytest.mark.unit
    def test_links_dropped(self):
        html = '<p>Visit our <a href="https://example.com">website</a></p>'
        result = html_to_text(html)

        assert "website" in result
        assert "https://example.com" not in result

    @pytest.mark.unit
    def test_images_dropped(self):
        result = html_to_text('<p>Image: <img src="photo.jpg" alt="Photo" /></p>')

        assert "photo.jpg" not in result

    @pytest.mark.unit
    def test_entities_decoded(self):
        assert "Tom & Jerry" in html_to_text("<p>Tom &amp; Jerry</p>")

    @pytest.mark.unit
    def test_long_lines_not_wrapped(self):
        words = " ".join(["word"] * 60)
        assert words in html_to_text(f"<p>{words}</p>")

    @pytest.mark.unit
    def test_empty(self):
        assert html_to_text("") == ""


class TestStripHtmlTags:
    """Tests for strip_html_tags() function."""

    @pytest.mark.unit
    def test_strips_tags_and_scripts(self):
        html = "<p>Hi</p><script>alert(1)</script><style>p{}</style><b>there</b>"
        assert strip_html_tags(html) == "Hithere"

    @pytest.mark.unit
    def test_decodes_entities_and_collapses_whitespace(self):
        assert strip_html_tags("<p>a &amp;   b</p>\n<p>c</p>") == "a & b c"

    @pytest.mark.unit
    def test_empty(self):
        assert strip_html_tags("") == ""
