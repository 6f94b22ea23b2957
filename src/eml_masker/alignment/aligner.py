"""
Canonical aligner - display-space mask bits to canonical-space masks.

The aligner is bound to the display texts of one loaded email (the strings the
mask bits index into) and turns any MaskBitsState of that email into an
AlignedMask over the canonicalized headers and body. It is pure: the same
inputs always produce the same masks, so it can run after every edit.
"""

from typing import Mapping, Optional

import structlog

from ..config import settings
from ..models.email_document import LoadedEmail
from ..models.fields import HEADER_FIELDS, HIDE, REVEAL, DisplayField, MaskBitsState, repair_bits
from ..models.masks import AlignedMask, ProofInputs
from .body_aligner import align_body
from .header_aligner import align_header_field

logger = structlog.get_logger(__name__)


class CanonicalAligner:
    """
    Projects mask bits from display space onto canonical space.

    Args:
        display_texts: Display string of every field
        html_entities: Search HTML-entity encoded body variants
        crlf: Search CRLF body variants
    """

    def __init__(
        self,
        display_texts: Mapping[DisplayField, str],
        html_entities: Optional[bool] = None,
        crlf: Optional[bool] = None,
    ):
        self.display_texts = {field: display_texts.get(field, "") for field in DisplayField}
        self.html_entities = (
            settings.body_html_entity_variants if html_entities is None else html_entities
        )
        self.crlf = settings.body_crlf_variants if crlf is None else crlf

    @classmethod
    def for_email(cls, email: LoadedEmail) -> "CanonicalAligner":
        return cls(email.display_texts())

    def align(
        self, state: MaskBitsState, canonical_headers: str, canonical_body: str
    ) -> AlignedMask:
        """
        Compute the canonical header and body masks for a state.

        Args:
            state: Display-space mask bits
            canonical_headers: Canonicalized header block
            canonical_body: Canonicalized body

        Returns:
            AlignedMask with header_mask/body_mask of the canonical lengths
        """
        header_mask = [REVEAL] * len(canonical_headers)
        body_mask = [REVEAL] * len(canonical_body)
        diagnostics = []

        for field in HEADER_FIELDS:
            text = self.display_texts[field]
            if not text:
                # Nothing displayed, nothing to hide
                continue
            bits = repair_bits(state.bits_for(field), len(text))
            diagnostic = align_header_field(
                header_mask, canonical_headers, field, text, bits
            )
            if diagnostic is not None:
                diagnostics.append(diagnostic)

        body_text = self.display_texts[DisplayField.BODY]
        body_bits = repair_bits(state.bits_for(DisplayField.BODY), len(body_text))
        if HIDE in body_bits:
            align_body(
                body_mask,
                canonical_body,
                body_text,
                body_bits,
                html_entities=self.html_entities,
                crlf=self.crlf,
            )

        return AlignedMask(
            header_mask=header_mask, body_mask=body_mask, diagnostics=diagnostics
        )


def align_email(state: MaskBitsState, email: LoadedEmail) -> AlignedMask:
    """
    Align a state against the canonical text of a loaded email.

    Args:
        state: Display-space mask bits
        email: Loaded email supplying display and canonical text

    Returns:
        AlignedMask for the email
    """
    return CanonicalAligner.for_email(email).align(
        state, email.canonical_headers, email.canonical_body
    )


def to_proof_inputs(mask: AlignedMask, document_id: Optional[str] = None) -> ProofInputs:
    """Package an aligned mask for the ProofEngine (no padding)."""
    return ProofInputs(
        header_mask=list(mask.header_mask),
        body_mask=list(mask.body_mask),
        document_id=document_id,
    )
