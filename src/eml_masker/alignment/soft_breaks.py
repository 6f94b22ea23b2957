"""
Substring search under a character-deletion transform.

Quoted-printable bodies contain soft line breaks ("=" followed by a line
terminator) inserted mid-content. They must be ignored when matching text the
user sees, yet they still occupy bytes in the canonical body that the mask has
to cover. DeletionProjection builds a "cleaned" view of a text with the
deletable patterns removed, together with a position map back to the original,
so that matches found in cleaned space can be reported in original
coordinates.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import structlog

logger = structlog.get_logger(__name__)

# Longest first: "=\r\n" must win over "=\n"
SOFT_LINE_BREAKS: Tuple[str, ...] = ("=\r\n", "=\n")


@dataclass(frozen=True)
class Match:
    """A match in original coordinates. `length` may exceed the needle length."""

    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length


@dataclass(frozen=True)
class ProjectedText:
    """Cleaned text plus, for every cleaned index, its index in the original."""

    cleaned: str
    position_map: Tuple[int, ...]


class DeletionProjection:
    """
    Search helper for texts where some patterns are zero-width for matching.

    Args:
        patterns: Strings removed from both haystack and needle before
            matching. Checked in the given order at each position, so longer
            patterns sharing a prefix must come first.
    """

    def __init__(self, patterns: Sequence[str]):
        if any(not pattern for pattern in patterns):
            raise ValueError("Deletion patterns must be non-empty")
        self.patterns = tuple(patterns)

    def project(self, text: str) -> ProjectedText:
        """
        Remove every pattern occurrence, scanning left to right.

        Args:
            text: Original text

        Returns:
            ProjectedText whose position_map is strictly increasing
        """
        cleaned: List[str] = []
        position_map: List[int] = []
        i = 0
        while i < len(text):
            skipped = False
            for pattern in self.patterns:
                if text.startswith(pattern, i):
                    i += len(pattern)
                    skipped = True
                    break
            if skipped:
                continue
            cleaned.append(text[i])
            position_map.append(i)
            i += 1
        return ProjectedText(cleaned="".join(cleaned), position_map=tuple(position_map))

    def clean(self, text: str) -> str:
        """Cleaned text only."""
        return self.project(text).cleaned

    def find_all(self, text: str, needle: str) -> List[Match]:
        """
        Find all non-overlapping occurrences of `needle` in `text`.

        Both strings are cleaned before matching. A match spanning deleted
        patterns is reported with its full original length.

        Args:
            text: Haystack in original coordinates
            needle: Search string (may itself contain deletable patterns)

        Returns:
            Matches in original coordinates, left to right
        """
        target = self.clean(needle)
        if not target:
            return []
        projected = self.project(text)
        cleaned, position_map = projected.cleaned, projected.position_map

        matches: List[Match] = []
        cursor = 0
        while True:
            index = cleaned.find(target, cursor)
            if index < 0:
                break
            cursor = index + len(target)
            last = index + len(target) - 1
            if index >= len(position_map) or last >= len(position_map):
                logger.warning(
                    "projection_map_miss",
                    cleaned_index=index,
                    map_length=len(position_map),
                )
                continue
            start = position_map[index]
            end = position_map[last] + 1
            matches.append(Match(start=start, length=end - start))
        return matches


# Shared projector for quoted-printable soft line breaks
soft_break_projector = DeletionProjection(SOFT_LINE_BREAKS)


def find_all_ignoring_soft_breaks(body: str, needle: str) -> List[Match]:
    """
    Find every occurrence of `needle` in a canonical body, ignoring soft breaks.

    Args:
        body: Canonical body text (transfer encoding preserved)
        needle: Display text to look for

    Returns:
        Matches in canonical-body coordinates
    """
    return soft_break_projector.find_all(body, needle)
