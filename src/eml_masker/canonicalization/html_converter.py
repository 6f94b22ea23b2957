"""
HTML to display-text conversion.

Used when a message has no text/plain part: the user then edits the text
rendering of the HTML body, and hidden spans are later searched for in the
canonical body (raw and entity-encoded).
"""

import html as html_module
import re

import html2text
import structlog

logger = structlog.get_logger(__name__)


def html_to_text(html: str) -> str:
    """
    Convert an HTML email body to the plain text shown for editing.

    Uses html2text without line wrapping, links, images or emphasis markers so
    that the rendered words appear as they do in the HTML source.

    Args:
        html: HTML content

    Returns:
        Plain text representation
    """
    if not html:
        return ""

    h = html2text.HTML2Text()
    h.ignore_links = True
    h.ignore_images = True
    h.ignore_emphasis = True
    h.body_width = 0  # Don't wrap lines
    h.unicode_snob = True  # Use unicode instead of ASCII replacements

    try:
        return h.handle(html).strip()
    except Exception as e:
        logger.warning("html2text_failed", error=str(e))
        return strip_html_tags(html)


def strip_html_tags(html: str) -> str:
    """
    Simple HTML tag stripping (fallback if html2text fails).

    Args:
        html: HTML content

    Returns:
        Text with tags removed, entities decoded and whitespace collapsed
    """
    if not html:
        return ""

    html = re.sub(r"<script[^>]*>.*?</script>", "", html, flags=re.DOTALL | re.IGNORECASE)
    html = re.sub(r"<style[^>]*>.*?</style>", "", html, flags=re.DOTALL | re.IGNORECASE)
    text = re.sub(r"<[^>]+>", "", html)
    text = html_module.unescape(text)
    text = re.sub(r"\s+", " ", text)
    return text.strip()
