"""
API Routes

Defines all HTTP endpoints for the JeetAble assistant.
"""

from datetime import datetime
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from backend.api.schemas import (
    AssistantRequest,
    AssistantResponse,
    CapabilityResponse,
    HealthResponse,
    PageContextIn,
    ServiceHealth,
)
from backend.core.config import settings
from backend.services.assistant_service import (
    ASSISTANT,
    BASIC,
    EMPTY_MESSAGE_REPLY,
    AssistantService,
    get_assistant_service,
)
from jeetable.actions import PageContext


# =============================================================================
# Router Setup
# =============================================================================

router = APIRouter()


def bad_request(error: str, session_id: Optional[str] = None) -> JSONResponse:
    """HTTP 400 with the fixed apology reply."""
    body = AssistantResponse(
        message=EMPTY_MESSAGE_REPLY,
        action="clarify",
        error=error,
        session_id=session_id,
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.to_json())


def _page_context(page: Optional[PageContextIn]) -> Optional[PageContext]:
    if page is None:
        return None
    return PageContext(
        has_form=page.has_form,
        has_search=page.has_search,
        has_media=page.has_media,
        title=page.title or "",
        url=page.url or "",
    )


async def _respond(variant: str, request: AssistantRequest, assistant: AssistantService):
    message = (request.message or "").strip()
    if not message:
        return bad_request("Message is required", request.session_id)
    if len(message) > settings.max_message_length:
        return bad_request(
            f"Message exceeds {settings.max_message_length} characters",
            request.session_id,
        )

    result = await assistant.respond(
        variant=variant,
        message=message,
        language=request.language or settings.default_language,
        target_language=request.target_language or request.language or settings.default_language,
        session_id=request.session_id,
        current_url=request.current_url,
        page_context=_page_context(request.page_context),
    )

    success = result.pop("success")
    response = AssistantResponse(**result)
    if not success:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=response.to_json(),
        )
    return response


# =============================================================================
# Assistant Endpoints
# =============================================================================

_ERROR_RESPONSES = {
    200: {"description": "Successful response"},
    400: {"model": AssistantResponse, "description": "Missing or invalid message"},
    500: {"model": AssistantResponse, "description": "Internal server error"},
}


@router.post(
    "/aiagent",
    response_model=AssistantResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
    summary="Ask the basic assistant",
    description="Navigation and site information with spoken replies. A supplied sessionId is logged but never consulted.",
)
async def aiagent(
    request: AssistantRequest,
    assistant: Annotated[AssistantService, Depends(get_assistant_service)],
):
    """
    Process a message with the basic assistant.

    The assistant will:
    - Navigate to a section when asked ("open jobs", "go to learning")
    - Describe the site's features
    - Answer in the requested language where a phrasebook exists
    """
    return await _respond(BASIC, request, assistant)


@router.post(
    "/humanai",
    response_model=AssistantResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
    summary="Ask the human-like assistant",
    description="Page actions (search, forms, media, scrolling) with per-session memory.",
)
async def humanai(
    request: AssistantRequest,
    assistant: Annotated[AssistantService, Depends(get_assistant_service)],
):
    """
    Process a message with the human-like assistant.

    The reply's action is checked against the page context the client sent;
    actions the page cannot perform come back as a clarification.
    """
    return await _respond(ASSISTANT, request, assistant)


@router.get("/aiagent", response_model=CapabilityResponse, summary="Basic assistant capabilities")
async def aiagent_info(
    assistant: Annotated[AssistantService, Depends(get_assistant_service)],
) -> CapabilityResponse:
    return CapabilityResponse(**assistant.describe(BASIC))


@router.get("/humanai", response_model=CapabilityResponse, summary="Human-like assistant capabilities")
async def humanai_info(
    assistant: Annotated[AssistantService, Depends(get_assistant_service)],
) -> CapabilityResponse:
    return CapabilityResponse(**assistant.describe(ASSISTANT))


# =============================================================================
# Health Check Endpoint
# =============================================================================


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check the health status of the assistant and the session store.",
)
async def health_check(
    assistant: Annotated[AssistantService, Depends(get_assistant_service)],
) -> HealthResponse:
    """
    Check health of all services.

    Returns status of:
    - Assistant (routers built)
    - Session store (memory or Redis)
    """
    checks = await assistant.health_check()
    services = {name: ServiceHealth(**check) for name, check in checks.items()}
    overall_healthy = all(check.status == "ok" for check in services.values())

    return HealthResponse(
        status="healthy" if overall_healthy else "unhealthy",
        services=services,
        timestamp=datetime.now(),
    )


# =============================================================================
# Root Endpoint (for testing)
# =============================================================================


@router.get(
    "/",
    summary="API Root",
    description="Basic endpoint to verify API is running.",
)
async def root():
    """Root endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "docs": "/docs",
    }
