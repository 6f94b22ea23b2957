"""
Global pytest fixtures and configuration for test suite.

This module provides reusable fixtures for:
- HTTP clients
- Mock settings/configuration
- Sample email data
- Loaded emails and masking sessions
- Temporary files
"""

import os
from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from eml_masker.api.app import app
from eml_masker.api.session_registry import registry
from eml_masker.config import Settings
from eml_masker.masking.session import MaskingSession
from eml_masker.models.email_document import LoadedEmail
from eml_masker.parsing.eml_parser import build_loaded_email
from tests.fixtures.emails import SAMPLE_EMAILS


@pytest_asyncio.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """
    Create async HTTP client for testing FastAPI endpoints.

    Yields:
        AsyncClient instance
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    registry.clear()


@pytest.fixture
def mock_settings() -> Settings:
    """
    Create mock settings for testing with safe defaults.

    Returns:
        Settings instance with test configuration
    """
    return Settings(
        max_email_size_mb=25,
        max_sessions=5,
        history_cap=50,
        log_level="INFO",
        log_json=False,  # Easier to read in tests
    )


@pytest.fixture
def sample_eml_bytes() -> bytes:
    """Simple plain text email without a DKIM signature."""
    return SAMPLE_EMAILS["simple_plain_text"]


@pytest.fixture
def hello_bob_eml() -> bytes:
    """DKIM-signed multipart email with "Bob" in both alternatives."""
    return SAMPLE_EMAILS["hello_bob"]


@pytest.fixture
def qp_soft_break_eml() -> bytes:
    """Quoted-printable email whose access code is split by a soft break."""
    return SAMPLE_EMAILS["qp_soft_break"]


@pytest.fixture
def html_entity_eml() -> bytes:
    """HTML-only email with an entity-encoded ampersand."""
    return SAMPLE_EMAILS["html_entity"]


@pytest.fixture
def malformed_eml() -> bytes:
    """Bytes without a header block."""
    return SAMPLE_EMAILS["malformed"]


@pytest.fixture
def hello_bob_email(hello_bob_eml) -> LoadedEmail:
    """Parsed "Hello Bob" email."""
    return build_loaded_email(hello_bob_eml)


@pytest.fixture
def hello_bob_session(hello_bob_email) -> MaskingSession:
    """Masking session over the "Hello Bob" email, everything revealed."""
    return MaskingSession(hello_bob_email, history_cap=50, restrict_from_to_name=True)


@pytest.fixture
def minimal_email() -> LoadedEmail:
    """
    Hand-built email with one-line canonical headers and body.

    Returns:
        LoadedEmail whose display and canonical text line up trivially
    """
    return LoadedEmail(
        display_from="alice@example.com",
        display_to="bob@example.com",
        display_sent_on="Wed, 12 Feb 2026 10:30:00 +0100",
        display_subject="Lunch",
        display_body_text="Hello Bob, meet at noon.",
        canonical_headers=(
            "from:alice@example.com\r\n"
            "to:bob@example.com\r\n"
            "subject:Lunch\r\n"
            "date:Wed, 12 Feb 2026 10:30:00 +0100\r\n"
        ),
        canonical_body="Hello Bob, meet at noon.\r\n",
        document_id="eml-test",
    )


@pytest.fixture
def tmp_eml_file(tmp_path) -> Generator[str, None, None]:
    """
    Create temporary .eml file for file-based tests.

    Args:
        tmp_path: pytest's temporary directory fixture

    Yields:
        Path to temporary .eml file
    """
    eml_path = tmp_path / "hello_bob.eml"
    eml_path.write_bytes(SAMPLE_EMAILS["hello_bob"])
    yield str(eml_path)


@pytest.fixture(autouse=True)
def reset_env_vars():
    """
    Reset environment variables before each test.

    This prevents test pollution from env var changes.
    """
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


def pytest_configure(config):
    """
    Configure pytest with custom markers and settings.
    """
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (API, end-to-end)"
    )
