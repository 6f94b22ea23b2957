# Verifier-side helpers for masked proof outputs

from .masked_header import (
    DISPLAY_MARKER,
    NUL,
    ParsedMaskedHeader,
    apply_mask,
    null_bytes_to_display_marker,
    parse_masked_header,
)

__all__ = [
    "ParsedMaskedHeader",
    "apply_mask",
    "parse_masked_header",
    "null_bytes_to_display_marker",
    "NUL",
    "DISPLAY_MARKER",
]
