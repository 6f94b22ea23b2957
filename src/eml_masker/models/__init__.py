# Data models for the masking pipeline

from .pipeline_version import MaskingVersion
from .fields import (
    ADDRESS_FIELDS,
    HEADER_FIELDS,
    HEADER_NAMES,
    HIDE,
    REVEAL,
    DisplayField,
    MaskBitsState,
    repair_bits,
)
from .email_document import LoadedEmail
from .masks import AlignedMask, AlignmentDiagnostic, ProofInputs
from .api_models import (
    FieldView,
    HealthResponse,
    MaskRangeRequest,
    SessionResponse,
    SessionView,
    SetFieldRequest,
    VersionResponse,
)

__all__ = [
    "MaskingVersion",
    "DisplayField",
    "MaskBitsState",
    "HEADER_FIELDS",
    "HEADER_NAMES",
    "ADDRESS_FIELDS",
    "REVEAL",
    "HIDE",
    "repair_bits",
    "LoadedEmail",
    "AlignedMask",
    "AlignmentDiagnostic",
    "ProofInputs",
    "MaskRangeRequest",
    "SetFieldRequest",
    "FieldView",
    "SessionView",
    "SessionResponse",
    "HealthResponse",
    "VersionResponse",
]
