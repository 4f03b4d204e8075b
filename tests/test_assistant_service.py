import asyncio

import backend.services.assistant_service as assistant_service
from backend.services.assistant_service import (
    INTERNAL_ERROR_REPLY,
    AssistantService,
)
from jeetable.actions import PageContext
from jeetable.session_store import InMemorySessionStore


class BrokenStore(InMemorySessionStore):
    async def record(self, session_id, entry):
        raise ConnectionError("store down")


def test_respond_generates_session_for_assistant():
    service = AssistantService(session_store=InMemorySessionStore())
    result = asyncio.run(service.respond("assistant", "open jobs"))

    assert result["success"] is True
    assert result["action"] == "navigate"
    assert result["target"] == "/jobs"
    assert result["session_id"]


def test_respond_keeps_given_session():
    store = InMemorySessionStore()
    service = AssistantService(session_store=store)
    result = asyncio.run(
        service.respond(
            "assistant",
            "search for wheelchair accessible jobs",
            session_id="sess-1",
            page_context=PageContext(has_search=True),
        )
    )

    assert result["session_id"] == "sess-1"
    assert result["extra"] == {"searchTerm": "wheelchair accessible jobs"}
    assert len(asyncio.run(store.get_history("sess-1"))) == 1


def test_basic_variant_has_no_session():
    service = AssistantService(session_store=InMemorySessionStore())
    result = asyncio.run(service.respond("basic", "what can you do"))

    assert result["success"] is True
    assert result["action"] == "speak"
    assert "session_id" not in result


def test_basic_variant_logs_supplied_session():
    store = InMemorySessionStore()
    service = AssistantService(session_store=store)

    async def scenario():
        results = [await service.respond("basic", "go to learning", session_id="b1") for _ in range(3)]
        return results, await store.get_history("b1")

    results, history = asyncio.run(scenario())
    assert all(r["session_id"] == "b1" for r in results)
    assert all(r["target"] == "/learning" for r in results)
    assert len(history) == 3


def test_failure_after_routing_becomes_generic_reply(monkeypatch):
    def broken_summary(*args, meta=None, **kwargs):
        if meta and meta.get("success"):
            raise RuntimeError("latency sink down")

    monkeypatch.setattr(assistant_service, "log_latency_summary", broken_summary)
    service = AssistantService(session_store=InMemorySessionStore())
    result = asyncio.run(service.respond("assistant", "open jobs", session_id="sess-2"))

    assert result == {
        "success": False,
        "message": INTERNAL_ERROR_REPLY,
        "action": "clarify",
        "error": "Internal server error",
        "session_id": "sess-2",
    }



def test_failure_becomes_generic_reply():
    service = AssistantService(session_store=BrokenStore())
    result = asyncio.run(service.respond("assistant", "open jobs", session_id="sess-1"))

    assert result == {
        "success": False,
        "message": INTERNAL_ERROR_REPLY,
        "action": "clarify",
        "error": "Internal server error",
        "session_id": "sess-1",
    }


def test_describe():
    service = AssistantService(session_store=InMemorySessionStore())
    info = service.describe("assistant")
    assert info["rulebook_version"] == "assistant-1"
    assert "ta" in info["supported_languages"]
    assert "form_submit" in info["actions"]
    assert service.describe("basic")["actions"] == ["navigate", "speak"]


def test_health_check_reports_session_store():
    service = AssistantService(session_store=InMemorySessionStore())
    health = asyncio.run(service.health_check())
    assert health["assistant"]["status"] == "ok"
    assert health["session_store"]["status"] == "ok"
    assert health["session_store"]["details"]["backend"] == "memory"


def test_unreachable_redis_falls_back_to_memory(monkeypatch):
    async def refuse(self):
        return False

    monkeypatch.setattr(assistant_service.settings, "session_backend", "redis")
    monkeypatch.setattr(assistant_service.RedisSessionStore, "connect", refuse)

    service = AssistantService()
    asyncio.run(service.initialize())
    assert isinstance(service.sessions, InMemorySessionStore)
