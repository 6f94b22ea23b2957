"""
API request and response models for FastAPI endpoints.

This module defines the Pydantic models used for API request/response validation.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .fields import DisplayField
from .masks import AlignmentDiagnostic
from .pipeline_version import MaskingVersion


class MaskRangeRequest(BaseModel):
    """Request model for masking or unmasking a display range."""

    field: DisplayField = Field(description="Display field to edit")
    start: int = Field(ge=0, description="First display offset (inclusive)")
    end: int = Field(ge=0, description="Last display offset (exclusive)")
    action: str = Field(
        default="mask", description="mask or unmask", pattern="^(mask|unmask)$"
    )


class SetFieldRequest(BaseModel):
    """Request model for revealing or hiding a whole field."""

    field: DisplayField = Field(description="Display field to edit")
    reveal: bool = Field(description="True reveals every character, False hides them")


class FieldView(BaseModel):
    """Display text of one field with its mask bits."""

    text: str = Field(description="Display text")
    bits: List[int] = Field(description="One bit per display character, 0 = hidden")


class SessionView(BaseModel):
    """Current state of a masking session."""

    session_id: str = Field(description="Session identifier")
    document_id: Optional[str] = Field(None, description="Content hash of the loaded email")
    fields: Dict[str, FieldView] = Field(description="Display fields keyed by name")
    header_mask: List[int] = Field(description="Mask over the canonical headers")
    body_mask: List[int] = Field(description="Mask over the canonical body")
    diagnostics: List[AlignmentDiagnostic] = Field(
        default_factory=list, description="Header fields that could not be aligned"
    )
    can_undo: bool = Field(description="Whether undo is available")
    can_redo: bool = Field(description="Whether redo is available")
    history_length: int = Field(description="Entries in the edit history")


class SessionResponse(BaseModel):
    """Response model for session endpoints."""

    success: bool = Field(description="Whether the request succeeded")
    changed: bool = Field(default=False, description="Whether the request changed the mask")
    session: Optional[SessionView] = Field(None, description="Session state after the request")
    error: Optional[str] = Field(None, description="Error message if failed")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service status", examples=["healthy"])
    version: str = Field(description="API version", examples=["1.0.0"])
    uptime_seconds: float = Field(description="Service uptime")
    active_sessions: int = Field(default=0, description="Masking sessions held in memory")


class VersionResponse(BaseModel):
    """Version information response."""

    api_version: str = Field(description="API version")
    masking_version: MaskingVersion = Field(description="Current masking version")
