"""
MIME helpers for extracting the display body of a message.
"""

from email.message import Message
from typing import Iterator, Optional

import charset_normalizer


def walk_message_parts(msg: Message) -> Iterator[Message]:
    """Yield the leaf parts of a message (the message itself when not multipart)."""
    if msg.is_multipart():
        for part in msg.walk():
            if not part.is_multipart():
                yield part
    else:
        yield msg


def is_attachment(part: Message) -> bool:
    """True for parts that are attachments rather than body text."""
    content_disposition = str(part.get("Content-Disposition", ""))
    return "attachment" in content_disposition.lower() or part.get_filename() is not None


def decode_payload(part: Message) -> str:
    """
    Decode a part's transfer encoding and charset into text.

    Tries the declared charset, then charset_normalizer detection, then UTF-8
    with replacement characters.
    """
    payload = part.get_payload(decode=True)
    if payload is None:
        return ""

    charset = part.get_content_charset()
    if charset:
        try:
            return payload.decode(charset)
        except (UnicodeDecodeError, LookupError):
            pass

    detected = charset_normalizer.from_bytes(payload).best()
    if detected:
        return str(detected)

    return payload.decode("utf-8", errors="replace")


def first_part_of_type(msg: Message, content_type: str) -> Optional[Message]:
    """First non-attachment leaf part with the given content type."""
    for part in walk_message_parts(msg):
        if part.get_content_type() == content_type and not is_attachment(part):
            return part
    return None
