"""
Loaded email model - the value object produced by the email parser.

Holds both coordinate spaces of one email: the display strings the user edits
and the DKIM-canonicalized header/body strings the proof is computed over.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .fields import DisplayField


class LoadedEmail(BaseModel):
    """
    Parsed email ready for masking.

    Immutable for the lifetime of one loaded email.
    """

    # Display space
    display_from: str = Field(default="", description="From value shown to the user")
    display_to: str = Field(default="", description="To value shown to the user")
    display_sent_on: str = Field(default="", description="Date value shown to the user")
    display_subject: str = Field(default="", description="Subject shown to the user")
    display_body_text: str = Field(default="", description="Plain-text body shown to the user")
    display_body_html: Optional[str] = Field(
        None, description="HTML body, when the message has one"
    )

    # Canonical space
    canonical_headers: str = Field(
        default="", description="DKIM-canonicalized signed headers"
    )
    canonical_body: str = Field(
        default="", description="DKIM-canonicalized body (transfer encoding preserved)"
    )

    # Audit metadata
    document_id: Optional[str] = Field(None, description="Content hash of the raw message")
    signed_headers: List[str] = Field(
        default_factory=list, description="Header names covered by the signature"
    )
    raw_size_bytes: int = Field(default=0, description="Original .eml size")
    encoding_detected: Optional[str] = Field(None, description="Detected body charset")

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "display_from": "alice@example.com",
                "display_to": "bob@example.com",
                "display_sent_on": "Wed, 12 Feb 2026 10:30:00 +0100",
                "display_subject": "Lunch",
                "display_body_text": "Hello Bob, meet at noon.",
                "canonical_headers": "from:alice@example.com\r\nto:bob@example.com\r\n",
                "canonical_body": "Hello Bob, meet at noon.\r\n",
            }
        },
    }

    def display_texts(self) -> Dict[DisplayField, str]:
        """Display strings keyed by field."""
        return {
            DisplayField.FROM: self.display_from,
            DisplayField.TO: self.display_to,
            DisplayField.SENT_ON: self.display_sent_on,
            DisplayField.SUBJECT: self.display_subject,
            DisplayField.BODY: self.display_body_text,
        }
