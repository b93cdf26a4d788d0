"""
Pydantic models for API requests/responses.
"""

from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel, Field


class GenerationSettings(BaseModel):
    """Settings for a generation request."""
    content_provider: Literal["gemini", "claude"] = Field(default="gemini", description="Provider for the deck structure")
    image_delay: float = Field(default=0.8, ge=0.0, description="Seconds to wait before each diagram request")

    model_config = {
        "json_schema_extra": {
            "example": {
                "content_provider": "gemini",
                "image_delay": 0.8,
            }
        }
    }


class DeckSessionResponse(BaseModel):
    """State of a deck generation session, as surfaced to the front end."""
    session_id: str
    state: str
    progress: float = 0.0
    error: Optional[str] = None
    warning: Optional[str] = None
    chapter_filename: Optional[str] = None
    created_at: str
    updated_at: str
    deck: Optional[Dict[str, Any]] = None


class SettingsRequest(BaseModel):
    """Settings update request."""
    gemini_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    default_content_provider: Optional[Literal["gemini", "claude"]] = None
