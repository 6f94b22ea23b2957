"""
Unit tests for the masking session controller (session.py).

Tests cover:
- "Hello Bob" end to end: display edit to canonical masks
- Undo/redo restoring masks without growing the history
- Coalesced edits producing one history entry
- Reset and reload
- Listener notifications
"""

import pytest

from eml_masker.masking.history import LedgerMode
from eml_masker.masking.session import MaskingSession
from eml_masker.models.fields import DisplayField


def _bob_positions(canonical_body):
    positions = []
    start = canonical_body.find("Bob")
    while start >= 0:
        positions.extend(range(start, start + 3))
        start = canonical_body.find("Bob", start + 3)
    return positions


class TestHelloBob:
    """End-to-end masking of the "Hello Bob" email."""

    @pytest.mark.unit
    def test_everything_revealed_after_load(self, hello_bob_session, hello_bob_email):
        mask = hello_bob_session.aligned_mask
        assert mask.header_mask == [1] * len(hello_bob_email.canonical_headers)
        assert mask.body_mask == [1] * len(hello_bob_email.canonical_body)
        assert len(hello_bob_session.ledger) == 1

    @pytest.mark.unit
    def test_hide_bob_hides_both_alternatives(self, hello_bob_session, hello_bob_email):
        start = hello_bob_email.display_body_text.index("Bob")
        hello_bob_session.mask_range(DisplayField.BODY, start, start + 3)

        body_mask = hello_bob_session.aligned_mask.body_mask
        hidden = [i for i, bit in enumerate(body_mask) if bit == 0]
        expected = _bob_positions(hello_bob_email.canonical_body)
        assert len(expected) == 6
        assert hidden == expected
        assert 0 not in hello_bob_session.aligned_mask.header_mask

    @pytest.mark.unit
    def test_hide_to_masks_to_line_only(self, hello_bob_session, hello_bob_email):
        hello_bob_session.mask_range(DisplayField.TO, 0, 3)

        headers = hello_bob_email.canonical_headers
        to_value = headers.index("\r\nto:") + len("\r\nto:")
        hidden = [i for i, bit in enumerate(hello_bob_session.aligned_mask.header_mask) if bit == 0]
        assert hidden == [to_value, to_value + 1, to_value + 2]
        assert headers[to_value:to_value + 3] == "bob"

    @pytest.mark.unit
    def test_undo_redo_round_trip(self, hello_bob_session, hello_bob_email):
        start = hello_bob_email.display_body_text.index("Bob")
        hello_bob_session.mask_range(DisplayField.BODY, start, start + 3)
        masked = hello_bob_session.aligned_mask

        assert hello_bob_session.undo() is True
        assert 0 not in hello_bob_session.aligned_mask.body_mask
        assert hello_bob_session.redo() is True
        assert hello_bob_session.aligned_mask == masked
        assert len(hello_bob_session.ledger) == 2

    @pytest.mark.unit
    def test_proof_inputs_carry_document_id(self, hello_bob_session, hello_bob_email):
        inputs = hello_bob_session.proof_inputs()
        assert inputs.document_id == hello_bob_email.document_id
        assert len(inputs.header_mask) == len(hello_bob_email.canonical_headers)


class TestHistory:
    """Tests for history integration."""

    @pytest.mark.unit
    def test_restore_does_not_push(self, minimal_email):
        session = MaskingSession(minimal_email, history_cap=50)
        session.mask_range(DisplayField.BODY, 0, 5)
        session.mask_range(DisplayField.BODY, 6, 9)
        assert len(session.ledger) == 3

        session.undo()
        session.undo()
        assert len(session.ledger) == 3
        assert session.ledger.cursor == 0
        assert session.ledger.mode is LedgerMode.IDLE
        assert session.can_redo()

    @pytest.mark.unit
    def test_undo_at_start(self, minimal_email):
        session = MaskingSession(minimal_email)
        assert session.undo() is False
        assert session.redo() is False

    @pytest.mark.unit
    def test_edit_after_undo_drops_redo(self, minimal_email):
        session = MaskingSession(minimal_email)
        session.mask_range(DisplayField.BODY, 0, 5)
        session.undo()
        session.mask_range(DisplayField.SUBJECT, 0, 5)
        assert not session.can_redo()
        assert len(session.ledger) == 2

    @pytest.mark.unit
    def test_coalesced_edit_is_one_entry(self, minimal_email):
        session = MaskingSession(minimal_email)
        with session.edit():
            session.mask_range(DisplayField.BODY, 0, 5)
            session.set_field(DisplayField.SUBJECT, reveal=False)
        assert len(session.ledger) == 2
        session.undo()
        assert session.snapshot().hidden_count() == 0

    @pytest.mark.unit
    def test_repeated_identical_edit_not_recorded(self, minimal_email):
        session = MaskingSession(minimal_email)
        session.mask_range(DisplayField.BODY, 0, 5)
        session.mask_range(DisplayField.BODY, 0, 5)
        assert len(session.ledger) == 2

    @pytest.mark.unit
    def test_history_cap(self, minimal_email):
        session = MaskingSession(minimal_email, history_cap=50)
        body_length = len(minimal_email.display_body_text)
        for i in range(60):
            session.set_field(DisplayField.BODY, reveal=True)
            session.mask_range(DisplayField.BODY, i % body_length, i % body_length + 1)
        assert len(session.ledger) == 50


class TestLifecycle:
    """Tests for load, reset and listeners."""

    @pytest.mark.unit
    def test_reset_reveals_everything(self, minimal_email):
        session = MaskingSession(minimal_email)
        session.mask_range(DisplayField.BODY, 0, 5)
        session.reset()
        assert session.snapshot().hidden_count() == 0
        assert len(session.ledger) == 1

    @pytest.mark.unit
    def test_load_new_email_repairs_lengths(self, minimal_email, hello_bob_email):
        session = MaskingSession(minimal_email)
        session.mask_range(DisplayField.BODY, 0, 5)
        session.load(hello_bob_email)
        state = session.snapshot()
        assert len(state.body_bits) == len(hello_bob_email.display_body_text)
        assert state.hidden_count() == 0
        assert len(session.aligned_mask.body_mask) == len(hello_bob_email.canonical_body)

    @pytest.mark.unit
    def test_listener_notified_on_edit_and_restore(self, minimal_email):
        session = MaskingSession(minimal_email)
        received = []
        session.subscribe(received.append)
        session.mask_range(DisplayField.BODY, 6, 9)
        session.undo()
        assert len(received) == 2
        assert received[0].hidden_body_bytes == 3
        assert received[1].hidden_body_bytes == 0

    @pytest.mark.unit
    def test_empty_session(self):
        session = MaskingSession()
        assert session.aligned_mask.header_mask == []
        assert session.aligned_mask.body_mask == []
