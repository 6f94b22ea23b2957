# Display-space masking: bits store, history, selection and sessions

from .bits_store import MaskBitsStore
from .edit_session import EditSession, EditState, MaskAction, PendingMenu
from .history import HistoryLedger, LedgerMode
from .selection import (
    RenderedField,
    SelectionPoint,
    TextRange,
    point_to_offset,
    resolve_selection,
)
from .session import MaskingSession

__all__ = [
    "MaskBitsStore",
    "HistoryLedger",
    "LedgerMode",
    "EditSession",
    "EditState",
    "MaskAction",
    "PendingMenu",
    "RenderedField",
    "SelectionPoint",
    "TextRange",
    "point_to_offset",
    "resolve_selection",
    "MaskingSession",
]
