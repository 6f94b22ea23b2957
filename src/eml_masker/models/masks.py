"""
Canonical-space mask models handed to the proof boundary.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class AlignmentDiagnostic(BaseModel):
    """A header field whose display value could not be located in canonical headers."""

    kind: Literal["alignment_miss"] = Field(
        default="alignment_miss", description="Diagnostic category"
    )
    field: str = Field(description="Display field that could not be aligned")
    header_name: str = Field(description="Canonical header name that was searched")
    reason: str = Field(description="Why no search strategy succeeded")
    hidden_chars: int = Field(
        default=0,
        description="Characters the user asked to hide that stay revealed as a result",
    )


class AlignedMask(BaseModel):
    """
    Projection of display-space mask bits onto the canonicalized bytes.

    header_mask is aligned 1:1 with the canonical headers and body_mask with the
    canonical body. 0 hides the byte, 1 reveals it.
    """

    header_mask: List[int] = Field(default_factory=list, description="Canonical header mask")
    body_mask: List[int] = Field(default_factory=list, description="Canonical body mask")
    diagnostics: List[AlignmentDiagnostic] = Field(
        default_factory=list, description="Header fields left revealed after a miss"
    )

    model_config = {"frozen": True}

    @field_validator("header_mask", "body_mask")
    @classmethod
    def validate_bits(cls, value: List[int]) -> List[int]:
        """Reject entries other than 0 and 1."""
        if any(bit not in (0, 1) for bit in value):
            raise ValueError("Mask entries must be 0 (hide) or 1 (reveal)")
        return value

    @property
    def hidden_header_bytes(self) -> int:
        return self.header_mask.count(0)

    @property
    def hidden_body_bytes(self) -> int:
        return self.body_mask.count(0)


class ProofInputs(BaseModel):
    """
    Payload produced for the ProofEngine collaborator.

    Lengths match the canonical header and body exactly; the ProofEngine pads or
    truncates to whatever buffer size its circuit needs.
    """

    header_mask: List[int] = Field(description="Canonical header mask")
    body_mask: List[int] = Field(description="Canonical body mask")
    document_id: Optional[str] = Field(None, description="Source document ID")

    model_config = {"frozen": True}
