"""
Assistant Service

Wrapper around the two IntentRouter variants for use in FastAPI.
Owns the session store, turns router replies into response dicts and
converts any failure into the generic apology reply.
"""

import uuid
from time import perf_counter
from typing import Optional

from backend.core.config import settings
from jeetable.actions import PageContext
from jeetable.intents import ASSISTANT_RULEBOOK, BASIC_RULEBOOK
from jeetable.language import SUPPORTED_LANGUAGES
from jeetable.logging_config import get_logger
from jeetable.pipeline_logger import log_error, log_latency_summary, trace_query
from jeetable.resolver import SUPPORTED_ACTIONS
from jeetable.router import IntentRouter, Utterance
from jeetable.session_store import InMemorySessionStore, RedisSessionStore, SessionStore

logger = get_logger(__name__)


BASIC = "basic"
ASSISTANT = "assistant"

EMPTY_MESSAGE_REPLY = "I didn't receive your message. Could you please try again?"
INTERNAL_ERROR_REPLY = (
    "I encountered an issue processing your request. Please try again, and I'll do my best to help you."
)

CAPABILITIES = {
    BASIC: {
        "message": "AI Agent API is running",
        "actions": ["navigate", "speak"],
        "capabilities": [
            "Section navigation",
            "Feature information",
            "Multilingual support",
        ],
    },
    ASSISTANT: {
        "message": "Human-like AI Agent API is running",
        "actions": list(SUPPORTED_ACTIONS),
        "capabilities": [
            "Natural language understanding",
            "Context awareness",
            "Session memory",
            "Multilingual support",
            "Website action automation",
        ],
    },
}


class AssistantService:
    """
    Service wrapper for the intent routers.

    Provides a clean interface for the API: lazy initialization of the
    session store, session id assignment and failure handling.
    """

    def __init__(self, session_store: Optional[SessionStore] = None):
        self._sessions: Optional[SessionStore] = session_store
        self._routers: dict[str, IntentRouter] = {}
        self._initialized = False

    async def initialize(self) -> None:
        """Create the session store and routers (lazy loading)."""
        if self._initialized:
            return
        if self._sessions is None:
            self._sessions = await self._build_session_store()
        self._routers = {
            BASIC: IntentRouter.basic(self._sessions),
            ASSISTANT: IntentRouter.assistant(self._sessions),
        }
        self._initialized = True

    @staticmethod
    async def _build_session_store() -> SessionStore:
        if settings.session_backend.strip().lower() == "redis":
            store = RedisSessionStore(
                redis_host=settings.redis_host,
                redis_port=settings.redis_port,
                redis_password=settings.redis_password,
                redis_db=settings.redis_db,
                ttl_seconds=settings.session_ttl_seconds,
                max_entries=settings.session_max_entries,
                key_prefix=settings.session_key_prefix,
            )
            if await store.connect():
                logger.info("Using Redis session store")
                return store
            logger.warning("Redis session store unavailable, falling back to in-memory store")

        logger.debug("Using in-memory session store", ttl_seconds=settings.session_ttl_seconds)
        return InMemorySessionStore(
            ttl_seconds=settings.session_ttl_seconds,
            max_entries=settings.session_max_entries,
            sweep_interval=settings.session_sweep_interval,
        )

    @property
    def sessions(self) -> SessionStore:
        if self._sessions is None:
            raise RuntimeError("Service not initialized. Call initialize() first.")
        return self._sessions

    def router(self, variant: str) -> IntentRouter:
        if variant not in self._routers:
            raise RuntimeError(f"Unknown or uninitialized router variant: {variant}")
        return self._routers[variant]

    async def respond(
        self,
        variant: str,
        message: str,
        language: str = "en",
        target_language: str = "en",
        session_id: Optional[str] = None,
        current_url: Optional[str] = None,
        page_context: Optional[PageContext] = None,
    ) -> dict:
        """
        Process one assistant message and return a response dict.

        Args:
            variant: "basic" or "assistant"
            message: User message, already transcribed
            language: Language of the message
            target_language: Language to reply in
            session_id: Client session id; generated for the assistant variant when missing
            current_url: Page the user is on
            page_context: Capabilities the client found on the page

        Returns:
            Dictionary with success flag, message, optional action/target/extra
            and the session id
        """
        request_start = perf_counter()
        if variant == ASSISTANT and not session_id:
            session_id = str(uuid.uuid4())

        with trace_query(message, session_id or "", variant) as trace:
            try:
                await self.initialize()
                with logger.span("route", variant=variant, trace_id=trace.trace_id):
                    reply = await self.router(variant).route(
                        Utterance(message, language, target_language),
                        session_id=session_id,
                        current_url=current_url or "",
                        page_context=page_context,
                    )
                result = {"success": True, **reply.to_dict()}
                log_latency_summary(
                    "ASSISTANT",
                    f"assistant_service.{variant}",
                    int((perf_counter() - request_start) * 1000),
                    breakdown_ms={s["stage"].lower(): s.get("elapsed_ms", 0) for s in trace.stages},
                    meta={"success": True, "intent": reply.intent, "action": reply.action},
                )
            except Exception as e:
                log_error("ASSISTANT", f"{variant} request failed", e)
                logger.error("Assistant request failed", error=e, variant=variant, trace_id=trace.trace_id)
                result = {
                    "success": False,
                    "message": INTERNAL_ERROR_REPLY,
                    "action": "clarify",
                    "error": "Internal server error",
                }

        if session_id:
            result["session_id"] = session_id
        return result

    def describe(self, variant: str) -> dict:
        """Static capability descriptor for GET requests."""
        info = CAPABILITIES[variant]
        rulebook = BASIC_RULEBOOK if variant == BASIC else ASSISTANT_RULEBOOK
        return {
            "message": info["message"],
            "supported_languages": list(SUPPORTED_LANGUAGES),
            "actions": info["actions"],
            "capabilities": info["capabilities"],
            "rulebook_version": rulebook.version,
        }

    async def health_check(self) -> dict:
        """Check the routers and the session store."""
        try:
            await self.initialize()
        except Exception as e:
            return {"assistant": {"status": "error", "error": str(e)}}

        health = {"assistant": {"status": "ok", "latency_ms": 0}}
        start = perf_counter()
        stats = await self.sessions.get_stats()
        latency = int((perf_counter() - start) * 1000)
        if stats.get("available"):
            health["session_store"] = {"status": "ok", "latency_ms": latency, "details": stats}
        else:
            health["session_store"] = {
                "status": "error",
                "latency_ms": latency,
                "error": stats.get("error", "unavailable"),
                "details": stats,
            }
        return health

    async def close(self) -> None:
        if self._sessions is not None:
            await self._sessions.close()


# Global service instance
_assistant_service: Optional[AssistantService] = None


def get_assistant_service() -> AssistantService:
    """Get or create the assistant service instance."""
    global _assistant_service
    if _assistant_service is None:
        _assistant_service = AssistantService()
    return _assistant_service
