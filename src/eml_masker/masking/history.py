"""
Undo/redo history of mask-bit snapshots.

The ledger is an append-only, indexable list of MaskBitsState entries with a
cursor on the current one. A new edit discards the redo branch; the oldest
entries are evicted past the cap.

Applying history and recording history are mutually exclusive: while a
restored state is being applied (and everything depending on it recomputes),
any push triggered as a side effect is dropped, not queued.
"""

from contextlib import contextmanager
from enum import Enum
from typing import Iterator, List, Optional, Tuple

import structlog

from ..config import settings
from ..models.fields import MaskBitsState

logger = structlog.get_logger(__name__)


class LedgerMode(str, Enum):
    """Write-guard state of the ledger."""

    IDLE = "idle"
    RESTORING = "restoring"
    SAVING = "saving"


class HistoryLedger:
    """
    Capped undo/redo history.

    Invariant: 0 <= cursor < len(entries).

    Args:
        initial: First entry (usually the fully revealed state of a new email)
        cap: Maximum number of entries kept (default: settings.history_cap)
    """

    def __init__(self, initial: Optional[MaskBitsState] = None, cap: Optional[int] = None):
        self.cap = settings.history_cap if cap is None else cap
        if self.cap < 1:
            raise ValueError("History cap must be at least 1")
        self._entries: List[MaskBitsState] = [initial or MaskBitsState()]
        self._cursor = 0
        self._mode = LedgerMode.IDLE

    @property
    def entries(self) -> Tuple[MaskBitsState, ...]:
        return tuple(self._entries)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def mode(self) -> LedgerMode:
        return self._mode

    @property
    def current(self) -> MaskBitsState:
        return self._entries[self._cursor]

    def __len__(self) -> int:
        return len(self._entries)

    def can_undo(self) -> bool:
        return self._cursor > 0

    def can_redo(self) -> bool:
        return self._cursor < len(self._entries) - 1

    def push(self, state: MaskBitsState) -> bool:
        """
        Record a new state after the current one.

        No-op when the state equals the current entry (the last pushed or
        restored state) or while the ledger is restoring or saving.

        Args:
            state: Snapshot taken after an edit

        Returns:
            True if an entry was appended
        """
        if self._mode is not LedgerMode.IDLE:
            logger.debug("history_push_dropped", mode=self._mode.value)
            return False
        if state == self.current:
            return False

        self._mode = LedgerMode.SAVING
        try:
            del self._entries[self._cursor + 1:]
            self._entries.append(state)
            overflow = len(self._entries) - self.cap
            if overflow > 0:
                del self._entries[:overflow]
                logger.debug("history_evicted", evicted=overflow, cap=self.cap)
            self._cursor = len(self._entries) - 1
        finally:
            self._mode = LedgerMode.IDLE
        return True

    def undo(self) -> Optional[MaskBitsState]:
        """Step back one entry and return it, or None at the oldest entry."""
        if not self.can_undo():
            return None
        self._cursor -= 1
        return self._entries[self._cursor]

    def redo(self) -> Optional[MaskBitsState]:
        """Step forward one entry and return it, or None at the newest entry."""
        if not self.can_redo():
            return None
        self._cursor += 1
        return self._entries[self._cursor]

    def reset(self, state: MaskBitsState) -> None:
        """Forget all history and start over from `state`."""
        self._entries = [state]
        self._cursor = 0
        self._mode = LedgerMode.IDLE

    @contextmanager
    def restoring(self) -> Iterator[None]:
        """
        Hold the restore guard while a restored state is applied.

        Release happens only when the block exits, i.e. after every dependent
        recomputation inside it has observed the restored state.
        """
        if self._mode is not LedgerMode.IDLE:
            raise RuntimeError(f"Cannot restore while ledger is {self._mode.value}")
        self._mode = LedgerMode.RESTORING
        try:
            yield
        finally:
            self._mode = LedgerMode.IDLE
