"""
JeetAble Assistant - FastAPI Backend

Main entry point for the backend API server.
Provides the REST endpoints the in-page voice assistant talks to.
"""

import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from backend.core.config import settings
from backend.api.routes import bad_request, router
from backend.api.schemas import AssistantResponse
from backend.services.assistant_service import INTERNAL_ERROR_REPLY, get_assistant_service
from jeetable.logging_config import setup_logging, get_logger
from jeetable.pipeline_logger import log_error

DEBUG_LOG = os.environ.get("DEBUG_LOG", os.environ.get("DEBUG_MODE", "false")).lower() in (
    "true",
    "1",
    "yes",
    "on",
)
setup_logging(
    service_name=os.environ.get("LOGFIRE_SERVICE_NAME", "jeetable-assistant-backend"),
    level="DEBUG" if DEBUG_LOG else "ERROR",
)
logger = get_logger(__name__)


# =============================================================================
# Logfire Instrumentation (optional)
# =============================================================================

USE_LOGFIRE = os.environ.get("USE_LOGFIRE", "false").lower() in ("true", "1", "yes")
_logfire_ready = False

if USE_LOGFIRE:
    try:
        import logfire

        _logfire_token = os.environ.get("LOGFIRE_TOKEN", "")
        if not _logfire_token:
            raise ValueError("LOGFIRE_TOKEN environment variable is not set")

        logfire.configure(
            token=_logfire_token,
            service_name=os.environ.get("LOGFIRE_SERVICE_NAME", "jeetable-assistant-backend"),
            service_version=settings.app_version,
            environment=os.environ.get("LOGFIRE_ENVIRONMENT", "production"),
        )
        _logfire_ready = True
    except Exception as e:
        logger.warning(f"Logfire init failed: {e}")


# =============================================================================
# Lifespan Manager
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    - Startup: Build routers and connect the session store
    - Shutdown: Close the session store
    """
    logger.info("Starting JeetAble Assistant Backend")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"Session backend: {settings.session_backend}")

    assistant_service = get_assistant_service()
    try:
        await assistant_service.initialize()
        logger.success("Assistant initialized successfully")
    except Exception as e:
        logger.warning(f"Assistant initialization failed: {e}")
        logger.info("Assistant will be initialized on first request")

    yield

    logger.info("Shutting down backend")
    await assistant_service.close()


# =============================================================================
# FastAPI App
# =============================================================================


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
## ♿ JeetAble Assistant API

In-page voice assistant for the JeetAble accessibility platform.

### Features:
- 🗣️ Keyword intent routing with multilingual replies (en, hi, mr, raj, ta)
- 🧭 Navigation, search, form, media and scroll actions
- 🆘 Emergency requests routed to the help page first

### Endpoints:
- `POST /api/aiagent` - Basic assistant
- `POST /api/humanai` - Human-like assistant with session memory
- `GET /api/health` - Check service health
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


# =============================================================================
# CORS Middleware
# =============================================================================


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Error Handlers
# =============================================================================


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies get the same 400 apology as an empty message."""
    errors = exc.errors()
    summary = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()) if part != 'body')}: {err.get('msg', 'invalid')}"
        for err in errors[:3]
    )
    return bad_request(summary or "Invalid request body")


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Anything that escapes the service still gets the apology body."""
    log_error("ASSISTANT", f"Unhandled error on {request.url.path}", exc)
    body = AssistantResponse(message=INTERNAL_ERROR_REPLY, action="clarify", error="Internal server error")
    return JSONResponse(status_code=500, content=body.to_json())


# =============================================================================
# Include Routers
# =============================================================================


app.include_router(router, prefix="/api", tags=["API"])


# =============================================================================
# Logfire FastAPI Instrumentation
# =============================================================================

if USE_LOGFIRE and _logfire_ready:
    try:
        logfire.instrument_fastapi(app)
        logger.info("Logfire: FastAPI instrumented")
    except Exception as e:
        logger.warning(f"Logfire instrumentation failed: {e}")


# =============================================================================
# Root Redirect
# =============================================================================


@app.get("/", include_in_schema=False)
async def root_redirect():
    """Redirect root to API docs."""
    return RedirectResponse(url="/docs")


# =============================================================================
# Main Entry Point
# =============================================================================


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "backend.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
