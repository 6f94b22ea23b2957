"""
Application configuration management.

This module handles configuration from environment variables using Pydantic Settings.
"""

from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application configuration from environment variables.

    All settings can be overridden via environment variables with the same name.
    """

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Processing limits
    max_email_size_mb: int = 25
    max_sessions: int = 100  # In-memory masking sessions kept by the API

    # Edit history
    history_cap: int = 50

    # "From" field: only the name part before "@" may be hidden
    restrict_from_to_name: bool = True

    # Body search variants
    body_html_entity_variants: bool = True
    body_crlf_variants: bool = True

    # Headers assumed signed when a message carries no DKIM-Signature
    default_signed_headers: str = (
        "date,from,to,subject,mime-version,content-type,message-id"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    def signed_header_names(self) -> List[str]:
        """Return default_signed_headers as a list of lower-cased names."""
        return [
            name.strip().lower()
            for name in self.default_signed_headers.split(",")
            if name.strip()
        ]


# Global settings instance
settings = Settings()
