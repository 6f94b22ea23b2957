"""
Verifier-side reading of masked canonical headers.

A proof reveals the canonical header block with every hidden character
replaced by a NUL byte. These helpers rebuild that text from a mask and split
it back into the fields shown on a verification page.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from ..models.fields import HIDE

NUL = "\x00"
DISPLAY_MARKER = "█"

_FIELD_PREFIXES = (
    ("from:", "from_"),
    ("to:", "to"),
    ("subject:", "subject"),
    ("date:", "date"),
)


@dataclass
class ParsedMaskedHeader:
    """Header fields of a masked header block; hidden characters are NUL."""

    from_: str = ""
    to: str = ""
    subject: str = ""
    date: str = ""
    raw: str = ""


def apply_mask(text: str, mask: Sequence[int]) -> str:
    """
    Replace every hidden character of `text` with NUL.

    Positions past the end of the mask stay revealed.

    Args:
        text: Canonical text
        mask: Bits over `text`, 1 = reveal, 0 = hide

    Returns:
        Masked text of the same length
    """
    return "".join(
        NUL if i < len(mask) and mask[i] == HIDE else ch for i, ch in enumerate(text)
    )


def parse_masked_header(masked_header: str) -> ParsedMaskedHeader:
    """
    Split a masked header block into from/to/subject/date.

    Field names are matched case-insensitively at line start; folded
    continuation lines are appended to the current field with one space.
    Lines of other fields end the current field.
    """
    result = ParsedMaskedHeader(raw=masked_header)
    current: Optional[str] = None

    for line in masked_header.replace("\r\n", "\n").split("\n"):
        lower = line.lower()
        for prefix, attr in _FIELD_PREFIXES:
            if lower.startswith(prefix):
                current = attr
                setattr(result, attr, line[len(prefix):].strip())
                break
        else:
            if line[:1] in (" ", "\t"):
                if current:
                    setattr(result, current, getattr(result, current) + " " + line.strip())
            else:
                current = None

    return result


def null_bytes_to_display_marker(text: str) -> str:
    """Render NUL bytes as full block characters."""
    return text.replace(NUL, DISPLAY_MARKER)
