"""
Header alignment: project header-field mask bits onto canonical headers.

Canonical headers (DKIM relaxed form) carry lower-cased names, unfolded values
and collapsed whitespace, one header per CRLF-terminated line. Each display
field is located inside the line of its own header and its bits are copied to
the matching canonical offsets.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import structlog

from ..models.fields import ADDRESS_FIELDS, HEADER_NAMES, REVEAL, DisplayField
from ..models.masks import AlignmentDiagnostic

logger = structlog.get_logger(__name__)

_ANGLE_ADDR = re.compile(r"<([^<>]*)>")


@dataclass(frozen=True)
class HeaderLine:
    """Span of one header's value inside the canonical headers."""

    name: str
    value_start: int
    value_end: int


@dataclass(frozen=True)
class HeaderMatch:
    """Where a display value was found, and which display offset it starts at."""

    start: int  # absolute offset in canonical headers
    length: int
    display_offset: int
    strategy: str
    line_end: int  # writes stop here


def find_header_line(canonical_headers: str, header_name: str) -> Optional[HeaderLine]:
    """
    Locate the line bearing `header_name:` at a line start.

    The prefix must sit at the start of the text or right after a line break,
    so "to:" never matches inside "reply-to:".

    Args:
        canonical_headers: Canonicalized header block
        header_name: Header name (any case)

    Returns:
        HeaderLine spanning the value (up to the line terminator), or None
    """
    prefix = header_name.lower() + ":"
    header_start = -1
    if canonical_headers.startswith(prefix):
        header_start = 0
    else:
        for separator in ("\r\n", "\n"):
            pos = canonical_headers.find(separator + prefix)
            if pos >= 0:
                header_start = pos + len(separator)
                break
    if header_start < 0:
        return None

    value_start = header_start + len(prefix)
    value_end = canonical_headers.find("\r\n", value_start)
    if value_end < 0:
        value_end = canonical_headers.find("\n", value_start)
    if value_end < 0:
        value_end = len(canonical_headers)
    return HeaderLine(name=header_name.lower(), value_start=value_start, value_end=value_end)


def _exact(value: str, display: str) -> Optional[Tuple[int, int, int]]:
    pos = value.find(display)
    return (pos, len(display), 0) if pos >= 0 else None


def _case_insensitive(value: str, display: str) -> Optional[Tuple[int, int, int]]:
    # Matched on the original text; lower() may change string length
    match = re.search(re.escape(display), value, re.IGNORECASE)
    return (match.start(), match.end() - match.start(), 0) if match else None


def _angle_address(value: str, display: str) -> Optional[Tuple[int, int, int]]:
    match = _ANGLE_ADDR.search(value)
    if not match:
        return None
    # Start copying at the display's own address when it shows one
    display_match = _ANGLE_ADDR.search(display)
    display_offset = display_match.start(1) if display_match else 0
    return (match.start(1), len(match.group(1)), display_offset)


Strategy = Callable[[str, str], Optional[Tuple[int, int, int]]]

_STRATEGIES: Tuple[Tuple[str, Strategy, bool], ...] = (
    ("exact", _exact, False),
    ("case_insensitive", _case_insensitive, True),
    ("angle_address", _angle_address, True),
)


def locate_header_value(
    canonical_headers: str, field: DisplayField, display_value: str
) -> Optional[HeaderMatch]:
    """
    Find a header field's display value inside its canonical header line.

    Strategies, first success wins: exact substring; for address fields a
    case-insensitive match; for address fields the text inside <...>.

    Args:
        canonical_headers: Canonicalized header block
        field: Header display field
        display_value: Text shown to the user for that field

    Returns:
        HeaderMatch in canonical-header coordinates, or None
    """
    if not display_value:
        return None
    line = find_header_line(canonical_headers, HEADER_NAMES[field])
    if line is None:
        return None
    value = canonical_headers[line.value_start:line.value_end]

    for name, strategy, address_only in _STRATEGIES:
        if address_only and field not in ADDRESS_FIELDS:
            continue
        found = strategy(value, display_value)
        if found is not None:
            offset, length, display_offset = found
            return HeaderMatch(
                start=line.value_start + offset,
                length=length,
                display_offset=display_offset,
                strategy=name,
                line_end=line.value_end,
            )
    return None


def align_header_field(
    header_mask: List[int],
    canonical_headers: str,
    field: DisplayField,
    display_value: str,
    bits: Sequence[int],
) -> Optional[AlignmentDiagnostic]:
    """
    Copy one field's bits into `header_mask` in place.

    Args:
        header_mask: Mask aligned to canonical_headers, modified in place
        canonical_headers: Canonicalized header block
        field: Header display field
        display_value: Display text the bits index into
        bits: Mask bits of the display value

    Returns:
        AlignmentDiagnostic when the value could not be located (the field is
        then left fully revealed), otherwise None
    """
    match = locate_header_value(canonical_headers, field, display_value)
    if match is None:
        hidden = sum(1 for bit in bits if bit != REVEAL)
        header_name = HEADER_NAMES[field]
        if find_header_line(canonical_headers, header_name) is None:
            reason = f"no '{header_name}:' line in canonical headers"
        else:
            reason = "display value not found in header line"
        logger.warning(
            "header_alignment_miss",
            field=field.value,
            header_name=header_name,
            reason=reason,
            hidden_chars=hidden,
        )
        return AlignmentDiagnostic(
            field=field.value,
            header_name=header_name,
            reason=reason,
            hidden_chars=hidden,
        )

    count = min(
        len(bits) - match.display_offset,
        match.length,
        min(match.line_end, len(header_mask)) - match.start,
    )
    for i in range(max(count, 0)):
        header_mask[match.start + i] = bits[match.display_offset + i]
    logger.debug(
        "header_field_aligned",
        field=field.value,
        strategy=match.strategy,
        start=match.start,
        length=count,
    )
    return None
