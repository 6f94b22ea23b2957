"""
Masking session endpoints.

A session is opened by uploading a .eml file; later requests edit its mask
bits, move through its history and return the recomputed canonical masks.
"""

from fastapi import APIRouter, File, HTTPException, UploadFile, status
import structlog

from ...config import settings
from ...logging_config import session_log_context
from ...masking.session import MaskingSession
from ...models.api_models import (
    FieldView,
    MaskRangeRequest,
    SessionResponse,
    SessionView,
    SetFieldRequest,
)
from ...models.fields import DisplayField
from ...parsing import build_loaded_email
from ..session_registry import SessionNotFoundError, registry

logger = structlog.get_logger(__name__)
router = APIRouter()


def _session_view(session_id: str, session: MaskingSession) -> SessionView:
    aligned = session.aligned_mask
    return SessionView(
        session_id=session_id,
        document_id=session.email.document_id,
        fields={
            field.value: FieldView(
                text=session.store.text(field), bits=session.store.bits(field)
            )
            for field in DisplayField
        },
        header_mask=list(aligned.header_mask),
        body_mask=list(aligned.body_mask),
        diagnostics=list(aligned.diagnostics),
        can_undo=session.can_undo(),
        can_redo=session.can_redo(),
        history_length=len(session.ledger),
    )


def _get_session(session_id: str) -> MaskingSession:
    try:
        return registry.get(session_id)
    except SessionNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id} not found",
        ) from None


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    file: UploadFile = File(..., description=".eml file to mask"),
) -> SessionResponse:
    """
    Parse an uploaded .eml file and open a masking session for it.

    Every character starts revealed and the history holds the initial state.

    Args:
        file: Uploaded .eml file

    Returns:
        SessionResponse with the new session
    """
    if not file.filename or not file.filename.endswith(".eml"):
        raise HTTPException(status_code=400, detail="File must be .eml format")

    eml_bytes = await file.read()

    size_mb = len(eml_bytes) / (1024 * 1024)
    if size_mb > settings.max_email_size_mb:
        raise HTTPException(
            status_code=413,
            detail=f"File size ({size_mb:.1f}MB) exceeds maximum ({settings.max_email_size_mb}MB)",
        )

    try:
        email = build_loaded_email(eml_bytes)
    except ValueError as e:
        logger.warning("eml_parse_failed", filename=file.filename, error=str(e))
        raise HTTPException(status_code=400, detail=str(e)) from e

    session_id = registry.create(email)
    with session_log_context(session_id):
        logger.info(
            "session_created",
            filename=file.filename,
            size_bytes=len(eml_bytes),
            document_id=email.document_id,
        )
        return SessionResponse(
            success=True, changed=False, session=_session_view(session_id, registry.get(session_id))
        )


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str) -> SessionResponse:
    """Return the current bits and canonical masks of a session."""
    session = _get_session(session_id)
    return SessionResponse(success=True, session=_session_view(session_id, session))


@router.post("/{session_id}/range", response_model=SessionResponse)
async def edit_range(session_id: str, request: MaskRangeRequest) -> SessionResponse:
    """
    Mask or unmask a display range of one field.

    Out-of-range offsets are clamped to the field; a range that ends up empty
    leaves the session unchanged.
    """
    session = _get_session(session_id)
    with session_log_context(session_id):
        if request.action == "mask":
            changed = session.mask_range(request.field, request.start, request.end)
        else:
            changed = session.unmask_range(request.field, request.start, request.end)
        logger.info(
            "range_edited",
            field=request.field.value,
            action=request.action,
            start=request.start,
            end=request.end,
            changed=changed,
        )
        return SessionResponse(
            success=True, changed=changed, session=_session_view(session_id, session)
        )


@router.post("/{session_id}/field", response_model=SessionResponse)
async def edit_field(session_id: str, request: SetFieldRequest) -> SessionResponse:
    """Reveal or hide a whole field."""
    session = _get_session(session_id)
    with session_log_context(session_id):
        before = session.snapshot()
        session.set_field(request.field, request.reveal)
        changed = session.snapshot() != before
        logger.info(
            "field_edited", field=request.field.value, reveal=request.reveal, changed=changed
        )
        return SessionResponse(
            success=True, changed=changed, session=_session_view(session_id, session)
        )


@router.post("/{session_id}/undo", response_model=SessionResponse)
async def undo(session_id: str) -> SessionResponse:
    """Step back one history entry; a no-op at the oldest entry."""
    session = _get_session(session_id)
    with session_log_context(session_id):
        changed = session.undo()
        return SessionResponse(
            success=True, changed=changed, session=_session_view(session_id, session)
        )


@router.post("/{session_id}/redo", response_model=SessionResponse)
async def redo(session_id: str) -> SessionResponse:
    """Step forward one history entry; a no-op at the newest entry."""
    session = _get_session(session_id)
    with session_log_context(session_id):
        changed = session.redo()
        return SessionResponse(
            success=True, changed=changed, session=_session_view(session_id, session)
        )


@router.post("/{session_id}/reset", response_model=SessionResponse)
async def reset(session_id: str) -> SessionResponse:
    """Reveal everything again and restart the history."""
    session = _get_session(session_id)
    with session_log_context(session_id):
        session.reset()
        logger.info("session_reset")
        return SessionResponse(
            success=True, changed=True, session=_session_view(session_id, session)
        )


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(session_id: str) -> None:
    """Close a session and drop it from memory."""
    try:
        registry.remove(session_id)
    except SessionNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id} not found",
        ) from None
    with session_log_context(session_id):
        logger.info("session_deleted")
