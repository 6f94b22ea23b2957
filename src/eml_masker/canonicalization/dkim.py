"""
DKIM "relaxed" canonicalization (RFC 6376, sections 3.4.2 and 3.4.4).

Produces the header and body strings that a DKIM signature is computed over.
These are the canonical-space coordinates of every mask: the proof circuit
hashes exactly these bytes. Transfer encoding is left untouched, so
quoted-printable soft line breaks survive in the canonical body.
"""

import re
from typing import Dict, List, Optional, Sequence, Tuple

import structlog

logger = structlog.get_logger(__name__)

CANONICALIZATION_VERSION = "dkim-relaxed-1.0.0"

_WSP_RUN = re.compile(r"[ \t]+")
_FOLD = re.compile(r"\r?\n(?=[ \t])")
_SIGNATURE_B_TAG = re.compile(r"(^|;)(\s*b\s*=)[^;]*")
_H_TAG = re.compile(r"(?:^|;)\s*h\s*=\s*([^;]*)")

DKIM_SIGNATURE = "dkim-signature"


def split_header_fields(raw_headers: str) -> List[Tuple[str, str]]:
    """
    Split a raw header block into (name, raw value) pairs, in message order.

    Continuation lines (starting with whitespace) are kept with their field,
    folding included. Lines without a colon are ignored.

    Args:
        raw_headers: Header block up to (not including) the blank line

    Returns:
        List of (name as written, value with folding) tuples
    """
    fields: List[List[str]] = []
    for line in re.split(r"\r?\n", raw_headers):
        if not line:
            continue
        if line[0] in " \t" and fields:
            fields[-1][1] += "\r\n" + line
            continue
        name, sep, value = line.partition(":")
        if not sep:
            logger.debug("header_line_without_colon", line=line[:80])
            continue
        fields.append([name, value])
    return [(name, value) for name, value in fields]


def canonicalize_header_relaxed(name: str, value: str) -> str:
    """
    Relaxed canonical form of one header field, without line terminator.

    Lower-cases the name, unfolds, collapses whitespace runs to one space and
    strips whitespace around the colon and at the end of the value.
    """
    value = _FOLD.sub("", value)
    value = _WSP_RUN.sub(" ", value).strip()
    return f"{name.strip().lower()}:{value}"


def parse_dkim_signed_headers(raw_headers: str) -> Optional[List[str]]:
    """
    Header names listed in the h= tag of the first DKIM-Signature.

    Returns:
        Lower-cased names in signing order, or None when the message is not
        signed
    """
    for name, value in split_header_fields(raw_headers):
        if name.strip().lower() != DKIM_SIGNATURE:
            continue
        unfolded = _WSP_RUN.sub(" ", _FOLD.sub("", value))
        match = _H_TAG.search(unfolded)
        if not match:
            return None
        return [h.strip().lower() for h in match.group(1).split(":") if h.strip()]
    return None


def _select_signed_fields(
    fields: Sequence[Tuple[str, str]], signed_headers: Sequence[str]
) -> List[Tuple[str, str]]:
    # A name listed n times signs its last n instances, bottom-up
    by_name: Dict[str, List[Tuple[str, str]]] = {}
    for name, value in fields:
        by_name.setdefault(name.strip().lower(), []).append((name, value))

    selected = []
    for header_name in signed_headers:
        instances = by_name.get(header_name)
        if instances:
            selected.append(instances.pop())
    return selected


def canonicalize_headers_relaxed(
    raw_headers: str, signed_headers: Sequence[str], include_signature: bool = True
) -> str:
    """
    Canonical header block over the signed headers.

    Each signed header becomes "name:value\\r\\n". With include_signature,
    the first DKIM-Signature header is appended last, with its b= value
    emptied and no trailing CRLF, as it enters the signature hash.

    Args:
        raw_headers: Raw header block
        signed_headers: Lower-cased header names in signing order
        include_signature: Append the DKIM-Signature header when present

    Returns:
        Canonicalized header string
    """
    fields = split_header_fields(raw_headers)
    lines = [
        canonicalize_header_relaxed(name, value) + "\r\n"
        for name, value in _select_signed_fields(fields, signed_headers)
    ]
    if include_signature:
        for name, value in fields:
            if name.strip().lower() == DKIM_SIGNATURE:
                canonical = canonicalize_header_relaxed(name, value)
                header_name, _, tags = canonical.partition(":")
                unsigned = _SIGNATURE_B_TAG.sub(r"\1\2", tags)
                lines.append(f"{header_name}:{unsigned}")
                break
    return "".join(lines)


def canonicalize_body_relaxed(raw_body: str) -> str:
    """
    Relaxed canonical form of a message body.

    Line ends become CRLF, whitespace at line ends is removed, whitespace runs
    collapse to one space, trailing empty lines are dropped and a non-empty
    body ends with exactly one CRLF.
    """
    lines = re.split(r"\r?\n", raw_body)
    lines = [_WSP_RUN.sub(" ", line).rstrip(" ") for line in lines]
    while lines and not lines[-1]:
        lines.pop()
    if not lines:
        return ""
    return "\r\n".join(lines) + "\r\n"
