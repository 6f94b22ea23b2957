"""
Version constants for the masking pipeline.

Every produced mask is reported together with these versions so that a proof
can be traced back to the code that computed its inputs.
"""

from .canonicalization.dkim import CANONICALIZATION_VERSION
from .config import settings
from .models.pipeline_version import MaskingVersion

# API Version
API_VERSION = "1.0.0"

# Component versions (update these when implementations change)
PARSER_VERSION = "eml-parser-1.0.0"
ALIGNER_VERSION = "aligner-1.0.0"


def get_current_masking_version() -> MaskingVersion:
    """
    Get current masking version configuration.

    Returns:
        MaskingVersion instance with current versions
    """
    return MaskingVersion(
        parser_version=PARSER_VERSION,
        canonicalization_version=CANONICALIZATION_VERSION,
        aligner_version=ALIGNER_VERSION,
        history_cap=settings.history_cap,
    )
