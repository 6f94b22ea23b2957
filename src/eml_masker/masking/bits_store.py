"""
Per-field mask bits, the single source of truth for what the user has hidden.

Mutations are grouped into logical edits. However many array writes one user
action performs, the commit listener is notified once, with one snapshot,
when the outermost logical edit closes.
"""

from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Tuple

import structlog

from ..config import settings
from ..models.fields import HIDE, REVEAL, DisplayField, MaskBitsState, repair_bits

logger = structlog.get_logger(__name__)

CommitListener = Callable[[MaskBitsState], None]


class MaskBitsStore:
    """
    Mask bits of the five display fields, kept aligned with their texts.

    Args:
        texts: Display string of every field
        restrict_from_to_name: Only the part of "from" before "@" is maskable
            (default: settings.restrict_from_to_name)
        on_commit: Called with a snapshot after each logical edit that
            changed something
    """

    def __init__(
        self,
        texts: Optional[Mapping[DisplayField, str]] = None,
        restrict_from_to_name: Optional[bool] = None,
        on_commit: Optional[CommitListener] = None,
    ):
        self.restrict_from_to_name = (
            settings.restrict_from_to_name
            if restrict_from_to_name is None
            else restrict_from_to_name
        )
        self.on_commit = on_commit
        self._texts: Dict[DisplayField, str] = {}
        self._bits: Dict[DisplayField, List[int]] = {}
        self._edit_depth = 0
        self._dirty = False
        self.load(texts or {})

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def text(self, field: DisplayField) -> str:
        return self._texts[field]

    def texts(self) -> Dict[DisplayField, str]:
        return dict(self._texts)

    def bits(self, field: DisplayField) -> List[int]:
        """Length-repaired copy of a field's bits."""
        repaired = repair_bits(self._bits.get(field, []), len(self._texts[field]))
        self._bits[field] = repaired
        return list(repaired)

    def snapshot(self) -> MaskBitsState:
        """Immutable state of all five fields."""
        return MaskBitsState.from_mapping({field: self.bits(field) for field in DisplayField})

    def maskable_range(self, field: DisplayField) -> Tuple[int, int]:
        """
        Range of display offsets the user may hide.

        With the restricted-name policy, "from" is maskable only before its
        first "@" (when there is a non-empty name part).
        """
        text = self._texts[field]
        if field is DisplayField.FROM and self.restrict_from_to_name:
            at_index = text.find("@")
            if at_index > 0:
                return 0, at_index
        return 0, len(text)

    def selection_state(self, field: DisplayField, start: int, end: int) -> Optional[str]:
        """
        Classify the bits in [start, end) as "masked", "unmasked" or "partial".

        Returns None for an empty range.
        """
        selected = self.bits(field)[start:end]
        if not selected:
            return None
        if all(bit == HIDE for bit in selected):
            return "masked"
        if all(bit == REVEAL for bit in selected):
            return "unmasked"
        return "partial"

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    @contextmanager
    def logical_edit(self) -> Iterator["MaskBitsStore"]:
        """
        Bracket one user action.

        Nested brackets join the outermost one. On exit of the outermost
        bracket the commit listener receives a single snapshot, provided that
        at least one mutation happened inside.
        """
        self._edit_depth += 1
        try:
            yield self
        finally:
            self._edit_depth -= 1
            if self._edit_depth == 0 and self._dirty:
                self._dirty = False
                if self.on_commit is not None:
                    self.on_commit(self.snapshot())

    def load(self, texts: Mapping[DisplayField, str]) -> None:
        """Install new display texts, revealing everything. Does not commit."""
        self._texts = {field: texts.get(field, "") for field in DisplayField}
        self._bits = {field: [REVEAL] * len(self._texts[field]) for field in DisplayField}
        self._dirty = False

    def set_range(self, field: DisplayField, start: int, end: int, reveal: bool) -> bool:
        """
        Set bits[start:end] to 1 (reveal) or 0 (hide).

        Offsets are clamped to the field text; an empty range after clamping
        is a no-op.

        Returns:
            True if the range was applied
        """
        length = len(self._texts[field])
        clamped_start = max(0, min(start, length))
        clamped_end = max(0, min(end, length))
        if (clamped_start, clamped_end) != (start, end):
            logger.debug(
                "mask_range_clamped",
                field=field.value,
                requested=[start, end],
                clamped=[clamped_start, clamped_end],
            )
        if clamped_start >= clamped_end:
            return False

        with self.logical_edit():
            bits = self.bits(field)
            value = REVEAL if reveal else HIDE
            bits[clamped_start:clamped_end] = [value] * (clamped_end - clamped_start)
            self._write(field, bits)
        return True

    def set_field(self, field: DisplayField, reveal: bool) -> None:
        """Set every bit of a field to one value (subject to the name policy)."""
        with self.logical_edit():
            value = REVEAL if reveal else HIDE
            self._write(field, [value] * len(self._texts[field]))

    def restore(self, state: MaskBitsState) -> None:
        """
        Overwrite all fields from a snapshot.

        Counts as one logical edit, so the commit listener fires once; a ledger
        holding its restore guard drops that push.
        """
        with self.logical_edit():
            for field in DisplayField:
                self._write(field, repair_bits(state.bits_for(field), len(self._texts[field])))

    def _write(self, field: DisplayField, bits: List[int]) -> None:
        _, maskable_end = self.maskable_range(field)
        if maskable_end < len(bits):
            bits[maskable_end:] = [REVEAL] * (len(bits) - maskable_end)
        self._bits[field] = bits
        self._dirty = True
