"""
Body alignment: project hidden body segments onto the canonical body.

The display body and the canonical body do not share offsets (decoding,
HTML rendering and line-ending changes all shift positions), so hidden display
text is located by content. Every occurrence of a hidden segment, in any of its
search variants, is hidden in the canonical body.
"""

from typing import Iterator, List, Sequence, Tuple

import structlog

from ..models.fields import HIDE
from .soft_breaks import find_all_ignoring_soft_breaks

logger = structlog.get_logger(__name__)

_HTML_ENTITIES: Tuple[Tuple[str, str], ...] = (
    ("&", "&amp;"),  # first, so the other entities are not double-encoded
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
)


def hidden_runs(bits: Sequence[int]) -> Iterator[Tuple[int, int]]:
    """
    Yield maximal [start, end) runs of hidden bits.

    Args:
        bits: Display-space mask bits

    Yields:
        (start, end) tuples, left to right
    """
    start = None
    for i, bit in enumerate(bits):
        if bit == HIDE:
            if start is None:
                start = i
        elif start is not None:
            yield start, i
            start = None
    if start is not None:
        yield start, len(bits)


def encode_html_entities(text: str) -> str:
    """Encode the characters HTML bodies commonly carry as entities."""
    for char, entity in _HTML_ENTITIES:
        text = text.replace(char, entity)
    return text


def search_variants(
    segment: str, html_entities: bool = True, crlf: bool = True
) -> List[str]:
    """
    Spellings under which a display segment may appear in the canonical body.

    Args:
        segment: Hidden display text
        html_entities: Include the HTML-entity encoded spelling
        crlf: Include spellings with LF line ends turned into CRLF

    Returns:
        Distinct non-empty variants, raw text first
    """
    variants = [segment]
    if html_entities:
        variants.append(encode_html_entities(segment))
    if crlf:
        variants.extend(
            [v.replace("\r\n", "\n").replace("\n", "\r\n") for v in variants]
        )

    unique: List[str] = []
    for variant in variants:
        if variant and variant not in unique:
            unique.append(variant)
    return unique


def align_body(
    body_mask: List[int],
    canonical_body: str,
    display_body: str,
    bits: Sequence[int],
    html_entities: bool = True,
    crlf: bool = True,
) -> int:
    """
    Hide every canonical occurrence of every hidden display segment, in place.

    Args:
        body_mask: Mask aligned to canonical_body, modified in place
        canonical_body: Canonicalized body text
        display_body: Display body the bits index into
        bits: Display-space body bits
        html_entities: Also search HTML-entity encoded variants
        crlf: Also search CRLF variants

    Returns:
        Number of canonical occurrences hidden
    """
    hidden = 0
    for start, end in hidden_runs(bits):
        segment = display_body[start:end]
        found = 0
        for variant in search_variants(segment, html_entities=html_entities, crlf=crlf):
            for match in find_all_ignoring_soft_breaks(canonical_body, variant):
                for i in range(match.start, match.end):
                    body_mask[i] = HIDE
                found += 1
        if not found:
            logger.info(
                "body_segment_not_found",
                display_start=start,
                display_end=end,
                segment_length=end - start,
            )
        hidden += found
    return hidden
