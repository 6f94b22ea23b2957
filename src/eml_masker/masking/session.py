"""
Masking session - one loaded email with its mask bits, history and masks.

Every committed logical edit is pushed to the history ledger and the canonical
masks are recomputed synchronously, so `aligned_mask` always reflects the
current state of the store.
"""

from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

import structlog

from ..alignment.aligner import CanonicalAligner, to_proof_inputs
from ..models.email_document import LoadedEmail
from ..models.fields import DisplayField, MaskBitsState
from ..models.masks import AlignedMask, ProofInputs
from .bits_store import MaskBitsStore
from .edit_session import EditSession
from .history import HistoryLedger

logger = structlog.get_logger(__name__)

MaskListener = Callable[[AlignedMask], None]


class MaskingSession:
    """
    Controller for masking one email.

    Args:
        email: Email to load (an empty email when omitted)
        history_cap: Undo history size (default: settings.history_cap)
        restrict_from_to_name: Name-only masking of "from"
            (default: settings.restrict_from_to_name)
    """

    def __init__(
        self,
        email: Optional[LoadedEmail] = None,
        history_cap: Optional[int] = None,
        restrict_from_to_name: Optional[bool] = None,
    ):
        self._listeners: List[MaskListener] = []
        self.store = MaskBitsStore(
            restrict_from_to_name=restrict_from_to_name, on_commit=self._on_commit
        )
        self.ledger = HistoryLedger(cap=history_cap)
        self.edit_session = EditSession(self.store)
        self.email = LoadedEmail()
        self.aligner = CanonicalAligner.for_email(self.email)
        self._aligned = AlignedMask()
        self.load(email or LoadedEmail())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self, email: LoadedEmail) -> None:
        """Load a new email: everything revealed, history restarted."""
        self.email = email
        self.aligner = CanonicalAligner.for_email(email)
        self.store.load(email.display_texts())
        self.edit_session.cancel()
        state = self.store.snapshot()
        self.ledger.reset(state)
        self._recompute(state)
        logger.info(
            "email_loaded",
            document_id=email.document_id,
            canonical_header_length=len(email.canonical_headers),
            canonical_body_length=len(email.canonical_body),
        )

    def reset(self) -> None:
        """Discard all edits and history of the current email."""
        self.load(self.email)

    def subscribe(self, listener: MaskListener) -> None:
        """Register a callback receiving every recomputed AlignedMask."""
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    @contextmanager
    def edit(self) -> Iterator[MaskBitsStore]:
        """Group several store mutations into one history entry."""
        with self.store.logical_edit() as store:
            yield store

    def mask_range(self, field: DisplayField, start: int, end: int) -> bool:
        return self.store.set_range(field, start, end, reveal=False)

    def unmask_range(self, field: DisplayField, start: int, end: int) -> bool:
        return self.store.set_range(field, start, end, reveal=True)

    def set_field(self, field: DisplayField, reveal: bool) -> None:
        self.store.set_field(field, reveal)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def undo(self) -> bool:
        state = self.ledger.undo()
        if state is None:
            return False
        self._restore(state)
        return True

    def redo(self) -> bool:
        state = self.ledger.redo()
        if state is None:
            return False
        self._restore(state)
        return True

    def can_undo(self) -> bool:
        return self.ledger.can_undo()

    def can_redo(self) -> bool:
        return self.ledger.can_redo()

    def _restore(self, state: MaskBitsState) -> None:
        # The store commit (and the recompute it triggers) runs inside the
        # guard, so the resulting push is dropped.
        with self.ledger.restoring():
            self.store.restore(state)
        logger.debug("history_restored", cursor=self.ledger.cursor, entries=len(self.ledger))

    # ------------------------------------------------------------------
    # Masks
    # ------------------------------------------------------------------

    def snapshot(self) -> MaskBitsState:
        return self.store.snapshot()

    @property
    def aligned_mask(self) -> AlignedMask:
        return self._aligned

    def proof_inputs(self) -> ProofInputs:
        return to_proof_inputs(self._aligned, document_id=self.email.document_id)

    def _on_commit(self, state: MaskBitsState) -> None:
        self.ledger.push(state)
        self._recompute(state)

    def _recompute(self, state: MaskBitsState) -> None:
        self._aligned = self.aligner.align(
            state, self.email.canonical_headers, self.email.canonical_body
        )
        for listener in self._listeners:
            listener(self._aligned)
