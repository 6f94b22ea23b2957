"""
Resolution of rendered-text selections to display offsets.

A rendered field is split into text nodes (masked and unmasked spans are
rendered separately, HTML bodies have one node per element run). A selection
is reported as anchor/focus points, each a (node index, offset in node) pair,
in whichever order the user dragged. This module turns such a selection into a
[start, end) range over the field's display string.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import structlog

from ..models.fields import DisplayField

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SelectionPoint:
    """A caret position inside a rendered field."""

    node_index: int
    offset: int


@dataclass(frozen=True)
class RenderedField:
    """Text nodes of one rendered field, in document order."""

    field: DisplayField
    nodes: Tuple[str, ...]

    @classmethod
    def from_text(cls, field: DisplayField, text: str) -> "RenderedField":
        return cls(field=field, nodes=(text,))

    @classmethod
    def from_spans(cls, field: DisplayField, spans: Sequence[str]) -> "RenderedField":
        return cls(field=field, nodes=tuple(spans))

    @property
    def text(self) -> str:
        return "".join(self.nodes)


@dataclass(frozen=True)
class TextRange:
    """A resolved, non-empty selection in display coordinates."""

    field: DisplayField
    start: int
    end: int
    text: str


def point_to_offset(rendered: RenderedField, point: SelectionPoint) -> int:
    """
    Convert a node-relative point to an offset in the field text.

    Points past the last node resolve to the end of the text; offsets beyond a
    node's length are clamped to that node.
    """
    if point.node_index < 0:
        return 0
    if point.node_index >= len(rendered.nodes):
        return len(rendered.text)
    preceding = sum(len(node) for node in rendered.nodes[: point.node_index])
    node_length = len(rendered.nodes[point.node_index])
    return preceding + max(0, min(point.offset, node_length))


def resolve_selection(
    rendered: RenderedField,
    anchor: SelectionPoint,
    focus: SelectionPoint,
    display_text: str,
    maskable_range: Optional[Tuple[int, int]] = None,
) -> Optional[TextRange]:
    """
    Resolve a selection to [start, end) over the field's display string.

    Backwards selections are normalized and offsets clamped to the display
    text. Collapsed or whitespace-only selections resolve to None. When a
    maskable range narrower than the text is given (the name part of "from"),
    a selection reaching past it resolves to None.

    Args:
        rendered: Rendered text nodes of the field
        anchor: Where the drag started
        focus: Where the drag ended
        display_text: Display string the mask bits index into
        maskable_range: Optional (start, end) the user may select within

    Returns:
        TextRange, or None when nothing usable is selected
    """
    start = point_to_offset(rendered, anchor)
    end = point_to_offset(rendered, focus)
    if start > end:
        start, end = end, start

    length = len(display_text)
    start = max(0, min(start, length))
    end = max(0, min(end, length))
    if start == end:
        return None

    selected = display_text[start:end]
    if not selected.strip():
        return None

    if maskable_range is not None:
        allowed_start, allowed_end = maskable_range
        if end > allowed_end or start < allowed_start:
            logger.debug(
                "selection_outside_maskable_range",
                field=rendered.field.value,
                start=start,
                end=end,
                maskable_end=allowed_end,
            )
            return None

    return TextRange(field=rendered.field, start=start, end=end, text=selected)
