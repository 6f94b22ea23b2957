"""
Masking version model for deterministic processing.

Same version parameters + same email + same edits = same canonical masks.
"""

from pydantic import BaseModel, Field


class MaskingVersion(BaseModel):
    """
    Immutable version contract for the masking pipeline.

    Reported with every produced mask so that a proof can be traced back to the
    parser, canonicalization and alignment code that built its inputs.
    """

    parser_version: str = Field(
        description="Email parser version", examples=["eml-parser-1.0.0"]
    )
    canonicalization_version: str = Field(
        description="DKIM canonicalization version", examples=["dkim-relaxed-1.0.0"]
    )
    aligner_version: str = Field(
        description="Display-to-canonical aligner version", examples=["aligner-1.0.0"]
    )
    history_cap: int = Field(description="Maximum undo history entries", examples=[50])

    model_config = {"frozen": True}

    def to_repr(self) -> str:
        """
        Short representation for logging.

        Returns:
            Compact string with the parser and aligner versions.
        """
        return f"Masking-{self.parser_version}-{self.aligner_version}"
