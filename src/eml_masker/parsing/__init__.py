# Email parsing module

from .eml_parser import (
    build_loaded_email,
    compute_document_id,
    decode_header_value,
    detect_encoding,
    extract_body,
    parse_eml_bytes,
    parse_eml_file,
    split_raw_message,
)
from .mime_utils import (
    decode_payload,
    first_part_of_type,
    is_attachment,
    walk_message_parts,
)

__all__ = [
    "parse_eml_bytes",
    "parse_eml_file",
    "split_raw_message",
    "extract_body",
    "decode_header_value",
    "compute_document_id",
    "detect_encoding",
    "build_loaded_email",
    "walk_message_parts",
    "decode_payload",
    "is_attachment",
    "first_part_of_type",
]
