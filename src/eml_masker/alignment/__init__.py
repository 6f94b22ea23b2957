# Display-space to canonical-space mask alignment

from .aligner import CanonicalAligner, align_email, to_proof_inputs
from .body_aligner import align_body, encode_html_entities, hidden_runs, search_variants
from .header_aligner import (
    HeaderLine,
    HeaderMatch,
    align_header_field,
    find_header_line,
    locate_header_value,
)
from .soft_breaks import (
    SOFT_LINE_BREAKS,
    DeletionProjection,
    Match,
    ProjectedText,
    find_all_ignoring_soft_breaks,
    soft_break_projector,
)

__all__ = [
    "CanonicalAligner",
    "align_email",
    "to_proof_inputs",
    "align_body",
    "encode_html_entities",
    "hidden_runs",
    "search_variants",
    "HeaderLine",
    "HeaderMatch",
    "align_header_field",
    "find_header_line",
    "locate_header_value",
    "SOFT_LINE_BREAKS",
    "DeletionProjection",
    "Match",
    "ProjectedText",
    "find_all_ignoring_soft_breaks",
    "soft_break_projector",
]
