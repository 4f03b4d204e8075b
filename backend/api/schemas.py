"""
Pydantic Schemas for API Request/Response

Defines the data models used in API endpoints. Field names on the wire are
camelCase to match the browser client.
"""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


ActionName = Literal[
    "navigate",
    "click",
    "filter",
    "form_submit",
    "play_media",
    "scroll",
    "search",
    "clarify",
    "speak",
]


# =============================================================================
# Request Schemas
# =============================================================================


class PageContextIn(BaseModel):
    """What the client found on the current page."""

    title: Optional[str] = Field(default=None, description="Document title")
    url: Optional[str] = Field(default=None, description="Page URL")
    has_form: bool = Field(default=False, alias="hasForm")
    has_search: bool = Field(default=False, alias="hasSearch")
    has_media: bool = Field(default=False, alias="hasMedia")

    class Config:
        populate_by_name = True


class AssistantRequest(BaseModel):
    """Request body for both assistant endpoints."""

    message: Optional[str] = Field(
        default=None,
        description="Transcribed or typed user message",
        examples=["open the job portal", "search for wheelchair accessible jobs", "नौकरी खोलो"],
    )
    language: str = Field(default="en", description="Language of the message")
    target_language: str = Field(
        default="en",
        alias="targetLanguage",
        description="Language to reply in",
    )
    session_id: Optional[str] = Field(
        default=None,
        alias="sessionId",
        description="Client-generated session ID",
        examples=["session_1700000000000_k2j4h5"],
    )
    current_url: Optional[str] = Field(default=None, alias="currentUrl")
    page_context: Optional[PageContextIn] = Field(default=None, alias="pageContext")

    class Config:
        populate_by_name = True


# =============================================================================
# Response Schemas
# =============================================================================


class AssistantResponse(BaseModel):
    """Response body for both assistant endpoints."""

    message: str = Field(..., description="Reply text in the requested language")
    action: Optional[ActionName] = Field(None, description="Directive for the client to execute")
    target: Optional[str] = Field(None, description="Route, selector or scroll position")
    extra: Optional[dict[str, Any]] = Field(None, description="Directive payload")
    session_id: Optional[str] = Field(None, alias="sessionId")
    error: Optional[str] = Field(None, description="Error summary on failure")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "message": 'I\'ll search for "wheelchair accessible jobs" on this page for you.',
                "action": "search",
                "extra": {"searchTerm": "wheelchair accessible jobs"},
                "sessionId": "session_1700000000000_k2j4h5",
            }
        }

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class CapabilityResponse(BaseModel):
    """Static descriptor returned by GET on an assistant endpoint."""

    message: str
    supported_languages: list[str] = Field(..., alias="supportedLanguages")
    actions: list[str]
    capabilities: list[str] = Field(default_factory=list)
    rulebook_version: str = Field(..., alias="rulebookVersion")

    class Config:
        populate_by_name = True


# =============================================================================
# Health Check Schemas
# =============================================================================


class ServiceHealth(BaseModel):
    """Health status of a single component."""

    status: str = Field(..., description="ok or error")
    latency_ms: Optional[int] = Field(None, description="Response latency")
    error: Optional[str] = Field(None, description="Error message if unhealthy")
    details: Optional[dict[str, Any]] = Field(None, description="Component stats")


class HealthResponse(BaseModel):
    """Response for health check endpoint."""

    status: str = Field(..., description="Overall status: healthy or unhealthy")
    services: dict[str, ServiceHealth] = Field(
        ..., description="Status of each component"
    )
    timestamp: datetime = Field(..., description="Check timestamp")

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "services": {
                    "assistant": {"status": "ok", "latency_ms": 0},
                    "session_store": {
                        "status": "ok",
                        "latency_ms": 1,
                        "details": {"backend": "memory", "sessions": 3},
                    },
                },
                "timestamp": "2026-02-02T08:30:00Z",
            }
        }
