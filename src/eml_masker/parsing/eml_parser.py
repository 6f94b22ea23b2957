"""
Email parser for .eml files (RFC5322/MIME format).

Builds a LoadedEmail holding both coordinate spaces of a message: the decoded
display fields the user edits, and the DKIM relaxed canonical headers and body
the proof is computed over.
"""

import hashlib
import re
from email import message_from_bytes
from email.header import decode_header, make_header
from email.message import Message
from typing import Optional, Tuple

import charset_normalizer
import structlog

from ..canonicalization.dkim import (
    canonicalize_body_relaxed,
    canonicalize_headers_relaxed,
    parse_dkim_signed_headers,
)
from ..canonicalization.html_converter import html_to_text
from ..alignment.header_aligner import find_header_line
from ..config import settings
from ..models.email_document import LoadedEmail
from .mime_utils import decode_payload, first_part_of_type

logger = structlog.get_logger(__name__)

_HEADER_BODY_SEPARATOR = re.compile(r"\r?\n\r?\n")


def parse_eml_bytes(eml_bytes: bytes) -> Message:
    """
    Parse .eml bytes into email.Message object.

    Args:
        eml_bytes: Raw .eml file bytes

    Returns:
        Parsed email.Message object

    Raises:
        ValueError: If bytes are not valid RFC5322 format
    """
    try:
        return message_from_bytes(eml_bytes)
    except Exception as e:
        raise ValueError(f"Failed to parse .eml file: {str(e)}") from e


def parse_eml_file(eml_path: str) -> Message:
    """
    Parse .eml file into email.Message object.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If file is not valid RFC5322 format
    """
    with open(eml_path, "rb") as f:
        eml_bytes = f.read()
    return parse_eml_bytes(eml_bytes)


def split_raw_message(raw: str) -> Tuple[str, str]:
    """
    Split a raw message into its header block and on-the-wire body.

    Returns:
        (raw_headers, raw_body); the body is empty when there is no blank line
    """
    match = _HEADER_BODY_SEPARATOR.search(raw)
    if not match:
        return raw, ""
    return raw[: match.start()], raw[match.end():]


def extract_body(msg: Message) -> Tuple[str, Optional[str]]:
    """
    Extract the decoded plain-text and HTML bodies.

    Returns:
        (plain_text, html); plain_text is "" and html None when absent
    """
    plain_part = first_part_of_type(msg, "text/plain")
    html_part = first_part_of_type(msg, "text/html")
    plain_text = decode_payload(plain_part) if plain_part is not None else ""
    html_body = decode_payload(html_part) if html_part is not None else None
    return plain_text, html_body


def decode_header_value(value: Optional[str]) -> str:
    """Decode RFC 2047 encoded words and unfold a header value."""
    if not value:
        return ""
    try:
        decoded = str(make_header(decode_header(str(value))))
    except (UnicodeDecodeError, LookupError, ValueError):
        decoded = str(value)
    return re.sub(r"\s+", " ", decoded).strip()


def compute_document_id(eml_bytes: bytes) -> str:
    """
    Deterministic document ID from the raw message content.

    Returns:
        Hex-encoded SHA-256 prefix, prefixed with 'eml-'
    """
    return f"eml-{hashlib.sha256(eml_bytes).hexdigest()[:32]}"


def detect_encoding(eml_bytes: bytes) -> str:
    """
    Detect the character encoding of the raw message.

    Falls back to utf-8 when detection is inconclusive.
    """
    detected = charset_normalizer.from_bytes(eml_bytes).best()
    if detected and detected.encoding:
        return detected.encoding
    return "utf-8"


def _canonical_value(canonical_headers: str, header_name: str) -> str:
    line = find_header_line(canonical_headers, header_name)
    if line is None:
        return ""
    return canonical_headers[line.value_start:line.value_end].strip()


def build_loaded_email(eml_bytes: bytes) -> LoadedEmail:
    """
    Parse a raw message into a LoadedEmail.

    Display header values come from the canonical header line when the header
    is signed, so the user edits what the circuit verifies; unsigned headers
    fall back to their decoded value.

    Args:
        eml_bytes: Raw .eml bytes

    Returns:
        LoadedEmail with display and canonical text

    Raises:
        ValueError: If the message cannot be parsed
    """
    msg = parse_eml_bytes(eml_bytes)
    raw = eml_bytes.decode("utf-8", errors="replace")
    raw_headers, raw_body = split_raw_message(raw)

    signed_headers = parse_dkim_signed_headers(raw_headers)
    if signed_headers is None:
        signed_headers = settings.signed_header_names()
        logger.info("dkim_signature_missing", fallback_headers=signed_headers)

    canonical_headers = canonicalize_headers_relaxed(raw_headers, signed_headers)
    canonical_body = canonicalize_body_relaxed(raw_body)

    plain_text, html_body = extract_body(msg)
    body_text = plain_text or (html_to_text(html_body) if html_body else "")

    def display(header_name: str, msg_name: str) -> str:
        return _canonical_value(canonical_headers, header_name) or decode_header_value(
            msg.get(msg_name)
        )

    email = LoadedEmail(
        display_from=display("from", "From"),
        display_to=display("to", "To"),
        display_sent_on=decode_header_value(msg.get("Date")),
        display_subject=display("subject", "Subject"),
        display_body_text=body_text,
        display_body_html=html_body,
        canonical_headers=canonical_headers,
        canonical_body=canonical_body,
        document_id=compute_document_id(eml_bytes),
        signed_headers=list(signed_headers),
        raw_size_bytes=len(eml_bytes),
        encoding_detected=detect_encoding(eml_bytes),
    )
    logger.info(
        "email_parsed",
        document_id=email.document_id,
        signed_headers=len(signed_headers),
        has_html=html_body is not None,
        body_length=len(body_text),
    )
    return email
