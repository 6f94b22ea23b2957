"""
Integration tests for the masking session API (/api/v1/sessions).

Tests cover:
- Opening a session from an uploaded .eml file
- Range and whole-field edits recomputing canonical masks
- Undo, redo and reset
- Session lookup and deletion
- Error handling (invalid files, size limits, unknown sessions, 500s)
"""

import io
from unittest.mock import patch

import pytest
import pytest_asyncio

from eml_masker.config import settings
from tests.fixtures.emails import SAMPLE_EMAILS

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def client(async_client):
    """Provide async HTTP client for integration tests."""
    yield async_client


async def _open_session(client, name="hello_bob"):
    files = {"file": ("test.eml", io.BytesIO(SAMPLE_EMAILS[name]), "message/rfc822")}
    response = await client.post("/api/v1/sessions", files=files)
    assert response.status_code == 201
    return response.json()["session"]


def _hidden(mask):
    return [i for i, bit in enumerate(mask) if bit == 0]


class TestCreateSession:
    """Tests for POST /api/v1/sessions."""

    @pytest.mark.integration
    async def test_create_session(self, client):
        session = await _open_session(client)

        assert session["session_id"]
        assert session["document_id"].startswith("eml-")
        assert session["fields"]["subject"]["text"] == "Lunch"
        assert session["fields"]["subject"]["bits"] == [1] * 5
        assert 0 not in session["header_mask"]
        assert 0 not in session["body_mask"]
        assert session["can_undo"] is False
        assert session["history_length"] == 1

    @pytest.mark.integration
    async def test_rejects_non_eml(self, client):
        files = {"file": ("test.txt", io.BytesIO(b"hello"), "text/plain")}
        response = await client.post("/api/v1/sessions", files=files)
        assert response.status_code == 400

    @pytest.mark.integration
    async def test_rejects_oversized_file(self, client, monkeypatch):
        monkeypatch.setattr(settings, "max_email_size_mb", 0)
        files = {"file": ("test.eml", io.BytesIO(SAMPLE_EMAILS["hello_bob"]), "message/rfc822")}
        response = await client.post("/api/v1/sessions", files=files)
        assert response.status_code == 413

    @pytest.mark.integration
    async def test_unexpected_error_returns_json_500(self, client):
        files = {"file": ("test.eml", io.BytesIO(SAMPLE_EMAILS["hello_bob"]), "message/rfc822")}
        with patch(
            "eml_masker.api.routes.sessions.build_loaded_email",
            side_effect=RuntimeError("boom"),
        ):
            response = await client.post("/api/v1/sessions", files=files)
        assert response.status_code == 500
        assert response.json()["success"] is False


class TestEditSession:
    """Tests for range and field edits."""

    @pytest.mark.integration
    async def test_mask_body_range(self, client):
        session = await _open_session(client)
        session_id = session["session_id"]
        start = session["fields"]["body"]["text"].index("Bob")

        response = await client.post(
            f"/api/v1/sessions/{session_id}/range",
            json={"field": "body", "start": start, "end": start + 3, "action": "mask"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["changed"] is True
        assert data["session"]["fields"]["body"]["bits"][start:start + 3] == [0, 0, 0]
        assert len(_hidden(data["session"]["body_mask"])) == 6
        assert data["session"]["can_undo"] is True

    @pytest.mark.integration
    async def test_unmask_range(self, client):
        session_id = (await _open_session(client))["session_id"]
        await client.post(
            f"/api/v1/sessions/{session_id}/range",
            json={"field": "subject", "start": 0, "end": 5},
        )
        response = await client.post(
            f"/api/v1/sessions/{session_id}/range",
            json={"field": "subject", "start": 0, "end": 5, "action": "unmask"},
        )
        assert 0 not in response.json()["session"]["header_mask"]

    @pytest.mark.integration
    async def test_empty_range_is_unchanged(self, client):
        session_id = (await _open_session(client))["session_id"]
        response = await client.post(
            f"/api/v1/sessions/{session_id}/range",
            json={"field": "subject", "start": 3, "end": 3},
        )
        assert response.status_code == 200
        assert response.json()["changed"] is False

    @pytest.mark.integration
    async def test_invalid_field_rejected(self, client):
        session_id = (await _open_session(client))["session_id"]
        response = await client.post(
            f"/api/v1/sessions/{session_id}/range",
            json={"field": "cc", "start": 0, "end": 1},
        )
        assert response.status_code == 422

    @pytest.mark.integration
    async def test_hide_whole_from_keeps_domain(self, client):
        session_id = (await _open_session(client))["session_id"]
        response = await client.post(
            f"/api/v1/sessions/{session_id}/field",
            json={"field": "from", "reveal": False},
        )
        data = response.json()["session"]
        text = data["fields"]["from"]["text"]
        bits = data["fields"]["from"]["bits"]
        at_index = text.index("@")
        assert bits[:at_index] == [0] * at_index
        assert bits[at_index:] == [1] * (len(text) - at_index)


class TestHistoryEndpoints:
    """Tests for undo, redo and reset."""

    @pytest.mark.integration
    async def test_undo_redo(self, client):
        session_id = (await _open_session(client))["session_id"]
        await client.post(
            f"/api/v1/sessions/{session_id}/range",
            json={"field": "to", "start": 0, "end": 3},
        )

        undone = (await client.post(f"/api/v1/sessions/{session_id}/undo")).json()
        assert undone["changed"] is True
        assert 0 not in undone["session"]["header_mask"]
        assert undone["session"]["can_redo"] is True

        redone = (await client.post(f"/api/v1/sessions/{session_id}/redo")).json()
        assert len(_hidden(redone["session"]["header_mask"])) == 3
        assert redone["session"]["history_length"] == 2

    @pytest.mark.integration
    async def test_undo_at_start_is_noop(self, client):
        session_id = (await _open_session(client))["session_id"]
        response = await client.post(f"/api/v1/sessions/{session_id}/undo")
        assert response.json()["changed"] is False

    @pytest.mark.integration
    async def test_reset(self, client):
        session_id = (await _open_session(client))["session_id"]
        await client.post(
            f"/api/v1/sessions/{session_id}/field",
            json={"field": "body", "reveal": False},
        )
        response = await client.post(f"/api/v1/sessions/{session_id}/reset")
        data = response.json()["session"]
        assert 0 not in data["body_mask"]
        assert data["history_length"] == 1


class TestSessionLifecycle:
    """Tests for lookup and deletion."""

    @pytest.mark.integration
    async def test_get_session(self, client):
        session_id = (await _open_session(client))["session_id"]
        response = await client.get(f"/api/v1/sessions/{session_id}")
        assert response.status_code == 200
        assert response.json()["session"]["session_id"] == session_id

    @pytest.mark.integration
    async def test_unknown_session(self, client):
        response = await client.get("/api/v1/sessions/does-not-exist")
        assert response.status_code == 404

    @pytest.mark.integration
    async def test_delete_session(self, client):
        session_id = (await _open_session(client))["session_id"]
        response = await client.delete(f"/api/v1/sessions/{session_id}")
        assert response.status_code == 204
        response = await client.get(f"/api/v1/sessions/{session_id}")
        assert response.status_code == 404
        response = await client.delete(f"/api/v1/sessions/{session_id}")
        assert response.status_code == 404
