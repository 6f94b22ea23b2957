# DKIM canonicalization and display-text conversion

from .dkim import (
    CANONICALIZATION_VERSION,
    canonicalize_body_relaxed,
    canonicalize_header_relaxed,
    canonicalize_headers_relaxed,
    parse_dkim_signed_headers,
    split_header_fields,
)
from .html_converter import html_to_text, strip_html_tags

__all__ = [
    "CANONICALIZATION_VERSION",
    "split_header_fields",
    "canonicalize_header_relaxed",
    "canonicalize_headers_relaxed",
    "canonicalize_body_relaxed",
    "parse_dkim_signed_headers",
    "html_to_text",
    "strip_html_tags",
]
