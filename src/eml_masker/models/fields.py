"""
Display fields and mask-bit snapshots.

A display field is one of the five user-editable views of an email. Each field
carries one mask bit per display character: 1 reveals the character to
verifiers, 0 hides it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

REVEAL = 1
HIDE = 0


class DisplayField(str, Enum):
    """Editable fields of a loaded email, in display order."""

    FROM = "from"
    TO = "to"
    SENT_ON = "sent_on"
    SUBJECT = "subject"
    BODY = "body"


# Lower-cased canonical header name carrying each header field
HEADER_NAMES: Dict[DisplayField, str] = {
    DisplayField.FROM: "from",
    DisplayField.TO: "to",
    DisplayField.SENT_ON: "date",
    DisplayField.SUBJECT: "subject",
}

HEADER_FIELDS: Tuple[DisplayField, ...] = tuple(HEADER_NAMES)

# Fields whose value is an address, eligible for relaxed header matching
ADDRESS_FIELDS = frozenset({DisplayField.FROM, DisplayField.TO})


def repair_bits(bits: Sequence[int], length: int) -> List[int]:
    """
    Return bits that satisfy the length invariant for a text of `length`.

    Bits of the right length are copied unchanged. Anything else is stale
    (the underlying text changed) and is replaced by a fully revealed array.
    """
    if len(bits) == length:
        return list(bits)
    return [REVEAL] * length


@dataclass(frozen=True)
class MaskBitsState:
    """
    Immutable snapshot of the mask bits of all five display fields.

    This is the atomic unit stored in the edit history. Two states are equal
    when every field holds the same bits.
    """

    from_bits: Tuple[int, ...] = ()
    to_bits: Tuple[int, ...] = ()
    sent_on_bits: Tuple[int, ...] = ()
    subject_bits: Tuple[int, ...] = ()
    body_bits: Tuple[int, ...] = ()

    def __post_init__(self):
        """Validate that every bit is 0 or 1."""
        for field in DisplayField:
            if any(bit not in (HIDE, REVEAL) for bit in self.bits_for(field)):
                raise ValueError(f"Mask bits for '{field.value}' must be 0 or 1")

    def bits_for(self, field: DisplayField) -> Tuple[int, ...]:
        """Return the bits of a single field."""
        return getattr(self, f"{field.value}_bits")

    @classmethod
    def from_mapping(cls, bits: Mapping[DisplayField, Iterable[int]]) -> "MaskBitsState":
        """Build a state from a field -> bits mapping (missing fields are empty)."""
        return cls(
            **{
                f"{field.value}_bits": tuple(bits.get(field, ()))
                for field in DisplayField
            }
        )

    @classmethod
    def revealed(cls, texts: Mapping[DisplayField, str]) -> "MaskBitsState":
        """State with every character of every field revealed."""
        return cls.from_mapping(
            {field: [REVEAL] * len(texts.get(field, "")) for field in DisplayField}
        )

    def hidden_count(self) -> int:
        """Number of hidden characters across all fields."""
        return sum(self.bits_for(field).count(HIDE) for field in DisplayField)
