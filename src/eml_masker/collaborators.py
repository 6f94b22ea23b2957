"""
External collaborators consuming the canonical masks.

The masking core only produces ProofInputs. Proof generation and proof
storage live elsewhere; these interfaces describe what they accept so a
session can hand its inputs over without knowing the implementation.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Tuple

import structlog

from .masking.session import MaskingSession

logger = structlog.get_logger(__name__)


# ============================================================================
# INTERFACES
# ============================================================================

class ProofEngine(ABC):
    """Generates a proof that the revealed bytes belong to a DKIM-signed email."""

    @abstractmethod
    def generate_proof(
        self, raw_eml: bytes, header_mask: List[int], body_mask: List[int]
    ) -> Any:
        """
        Generate a proof over the canonical masks.

        Masks are passed unpadded; any circuit-specific padding is the
        engine's concern.
        """


class BlobStore(ABC):
    """Persists proofs with their masks and serves them back for verification."""

    @abstractmethod
    def store_proof(self, proof: Any, header_mask: List[int], body_mask: List[int]) -> str:
        """Store a proof and return its identifier."""

    @abstractmethod
    def fetch(self, proof_id: str) -> Tuple[Any, List[int], List[int]]:
        """Return (proof, header_mask, body_mask) stored under proof_id."""


# ============================================================================
# SUBMISSION
# ============================================================================

@dataclass(frozen=True)
class SubmittedProof:
    proof_id: str
    document_id: str
    hidden_header_chars: int
    hidden_body_chars: int


def submit_session(
    session: MaskingSession, raw_eml: bytes, engine: ProofEngine, store: BlobStore
) -> SubmittedProof:
    """
    Generate and store a proof for the session's current masks.

    Args:
        session: Session whose current AlignedMask is proven
        raw_eml: Original message bytes, as signed
        engine: Proof generator
        store: Proof storage

    Returns:
        SubmittedProof with the storage identifier
    """
    inputs = session.proof_inputs()
    header_mask = list(inputs.header_mask)
    body_mask = list(inputs.body_mask)

    proof = engine.generate_proof(raw_eml, header_mask, body_mask)
    proof_id = store.store_proof(proof, header_mask, body_mask)

    submitted = SubmittedProof(
        proof_id=proof_id,
        document_id=inputs.document_id or "",
        hidden_header_chars=header_mask.count(0),
        hidden_body_chars=body_mask.count(0),
    )
    logger.info(
        "proof_submitted",
        proof_id=proof_id,
        document_id=submitted.document_id,
        hidden_header_chars=submitted.hidden_header_chars,
        hidden_body_chars=submitted.hidden_body_chars,
    )
    return submitted
