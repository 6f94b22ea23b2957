"""
Unit tests for selection resolution (selection.py).

Tests cover:
- Node-relative points to display offsets
- Backwards selections
- Collapsed and whitespace-only selections
- Maskable range enforcement
"""

import pytest

from eml_masker.masking.selection import (
    RenderedField,
    SelectionPoint,
    point_to_offset,
    resolve_selection,
)
from eml_masker.models.fields import DisplayField

BODY = "Hello Bob, meet at noon."


class TestPointToOffset:
    """Tests for point_to_offset()."""

    @pytest.mark.unit
    def test_single_node(self):
        rendered = RenderedField.from_text(DisplayField.BODY, BODY)
        assert point_to_offset(rendered, SelectionPoint(0, 6)) == 6

    @pytest.mark.unit
    def test_later_node_adds_preceding_lengths(self):
        rendered = RenderedField.from_spans(DisplayField.BODY, ["Hello ", "Bob", ", meet at noon."])
        assert point_to_offset(rendered, SelectionPoint(2, 2)) == 11

    @pytest.mark.unit
    def test_offset_clamped_to_node(self):
        rendered = RenderedField.from_spans(DisplayField.BODY, ["ab", "cd"])
        assert point_to_offset(rendered, SelectionPoint(0, 10)) == 2

    @pytest.mark.unit
    def test_node_past_end(self):
        rendered = RenderedField.from_spans(DisplayField.BODY, ["ab", "cd"])
        assert point_to_offset(rendered, SelectionPoint(5, 0)) == 4


class TestResolveSelection:
    """Tests for resolve_selection()."""

    @pytest.mark.unit
    def test_forward_selection(self):
        rendered = RenderedField.from_text(DisplayField.BODY, BODY)
        selected = resolve_selection(rendered, SelectionPoint(0, 6), SelectionPoint(0, 9), BODY)
        assert (selected.start, selected.end, selected.text) == (6, 9, "Bob")

    @pytest.mark.unit
    def test_backwards_selection_normalized(self):
        rendered = RenderedField.from_spans(DisplayField.BODY, ["Hello ", "Bob", ", meet at noon."])
        selected = resolve_selection(rendered, SelectionPoint(1, 3), SelectionPoint(1, 0), BODY)
        assert (selected.start, selected.end) == (6, 9)

    @pytest.mark.unit
    def test_collapsed_selection(self):
        rendered = RenderedField.from_text(DisplayField.BODY, BODY)
        assert resolve_selection(rendered, SelectionPoint(0, 4), SelectionPoint(0, 4), BODY) is None

    @pytest.mark.unit
    def test_whitespace_only_selection(self):
        rendered = RenderedField.from_text(DisplayField.BODY, BODY)
        assert resolve_selection(rendered, SelectionPoint(0, 5), SelectionPoint(0, 6), BODY) is None

    @pytest.mark.unit
    def test_selection_clamped_to_display_text(self):
        rendered = RenderedField.from_text(DisplayField.SUBJECT, "Lunch plans")
        selected = resolve_selection(
            rendered, SelectionPoint(0, 6), SelectionPoint(0, 11), "Lunch"
        )
        assert selected is None

    @pytest.mark.unit
    def test_selection_into_from_domain_rejected(self):
        text = "alice@example.com"
        rendered = RenderedField.from_text(DisplayField.FROM, text)
        selected = resolve_selection(
            rendered, SelectionPoint(0, 0), SelectionPoint(0, 8), text, maskable_range=(0, 5)
        )
        assert selected is None

    @pytest.mark.unit
    def test_selection_inside_from_name_accepted(self):
        text = "alice@example.com"
        rendered = RenderedField.from_text(DisplayField.FROM, text)
        selected = resolve_selection(
            rendered, SelectionPoint(0, 0), SelectionPoint(0, 5), text, maskable_range=(0, 5)
        )
        assert selected.text == "alice"
