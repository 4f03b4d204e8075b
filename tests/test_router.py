import asyncio

import pytest

import jeetable.router as router_module
from jeetable.actions import PageContext
from jeetable.resolver import REPEAT_REPLIES
from jeetable.intents import IntentName
from jeetable.router import IntentRouter, Utterance
from jeetable.session_store import InMemorySessionStore


def test_assistant_route_records_session():
    store = InMemorySessionStore()
    router = IntentRouter.assistant(store)

    async def scenario():
        reply = await router.route(Utterance("open jobs"), session_id="s1", current_url="/")
        return reply, await store.get_history("s1")

    reply, history = asyncio.run(scenario())
    assert reply.action == "navigate"
    assert reply.to_dict()["target"] == "/jobs"
    assert len(history) == 1
    assert history[0].utterance == "open jobs"
    assert history[0].page_url == "/"
    assert history[0].intent == "navigate_jobs"


def test_route_without_session_id_does_not_touch_store():
    store = InMemorySessionStore()
    router = IntentRouter.assistant(store)
    asyncio.run(router.route(Utterance("open jobs")))
    assert asyncio.run(store.get_stats())["sessions"] == 0


def test_hindi_request_is_classified_in_english():
    router = IntentRouter.assistant(InMemorySessionStore())
    reply = asyncio.run(router.route(Utterance("नौकरी खोलो", "hi", "en"), session_id="s1"))
    assert reply.intent == IntentName.NAVIGATE_JOBS.value
    assert reply.to_dict()["target"] == "/jobs"


def test_reply_is_translated_to_target_language():
    router = IntentRouter.assistant(InMemorySessionStore())
    reply = asyncio.run(router.route(Utterance("नमस्ते", "hi", "hi"), session_id="s1"))
    assert reply.intent == IntentName.GREETING.value
    assert reply.message.startswith("नमस्ते!")


def test_repeated_greeting_in_same_session():
    router = IntentRouter.assistant(InMemorySessionStore())

    async def scenario():
        first = await router.route(Utterance("hello"), session_id="s1")
        second = await router.route(Utterance("hello"), session_id="s1")
        other = await router.route(Utterance("hello"), session_id="s2")
        return first, second, other

    first, second, other = asyncio.run(scenario())
    assert first.metadata == {}
    assert second.message == REPEAT_REPLIES[IntentName.GREETING]
    assert other.metadata == {}


def test_interleaved_requests_do_not_mark_first_greeting_as_repeat():
    class YieldingStore(InMemorySessionStore):
        async def record(self, session_id, entry):
            await asyncio.sleep(0)
            snapshot = await super().record(session_id, entry)
            await asyncio.sleep(0)
            return snapshot

        async def get_history(self, session_id):
            await asyncio.sleep(0)
            return await super().get_history(session_id)

    store = YieldingStore()
    router = IntentRouter.assistant(store)

    async def scenario():
        greeting, jobs = await asyncio.gather(
            router.route(Utterance("hello"), session_id="s1"),
            router.route(Utterance("open jobs"), session_id="s1"),
        )
        return greeting, jobs, await store.get_history("s1")

    greeting, jobs, history = asyncio.run(scenario())
    assert greeting.metadata == {}
    assert greeting.message.startswith("Hello! I'm your intelligent assistant")
    assert jobs.to_dict()["target"] == "/jobs"
    assert [e.utterance for e in history] == ["hello", "open jobs"]



def test_page_context_gates_actions():
    router = IntentRouter.assistant(InMemorySessionStore())

    async def scenario():
        gated = await router.route(Utterance("play the video"), session_id="s1", page_context=PageContext())
        allowed = await router.route(
            Utterance("play the video"), session_id="s1", page_context=PageContext(has_media=True)
        )
        return gated, allowed

    gated, allowed = asyncio.run(scenario())
    assert gated.action == "clarify"
    assert allowed.action == "play_media"


def test_page_scoped_rule_uses_current_url():
    router = IntentRouter.assistant(InMemorySessionStore())
    reply = asyncio.run(router.route(Utterance("I want to apply"), session_id="s1", current_url="/jobs"))
    assert reply.intent == IntentName.JOB_APPLICATION.value


def test_basic_router():
    router = IntentRouter.basic()
    assert router.rulebook_version == "basic-1"
    assert router.sessions is None

    reply = asyncio.run(router.route(Utterance("go to learning"), session_id="ignored"))
    assert reply.to_dict()["target"] == "/learning"
    assert asyncio.run(router.route(Utterance("what can you do"))).action == "speak"


def test_basic_router_keeps_session_log_when_given_a_store():
    store = InMemorySessionStore()
    router = IntentRouter.basic(store)

    async def scenario():
        first = await router.route(Utterance("hello"), session_id="b1")
        second = await router.route(Utterance("hello"), session_id="b1")
        return first, second, await store.get_history("b1")

    first, second, history = asyncio.run(scenario())
    assert first.message == second.message
    assert second.metadata == {}
    assert [e.intent for e in history] == ["greeting", "greeting"]


def test_store_failure_propagates():
    class BrokenStore(InMemorySessionStore):
        async def record(self, session_id, entry):
            raise ConnectionError("store down")

    router = IntentRouter.assistant(BrokenStore())
    with pytest.raises(ConnectionError):
        asyncio.run(router.route(Utterance("open jobs"), session_id="s1"))


def test_intent_summary_is_logged(monkeypatch):
    calls = []
    monkeypatch.setattr(router_module, "log_intent_summary", lambda *args: calls.append(args))

    router = IntentRouter.assistant(None)
    asyncio.run(router.route(Utterance("purple elephants", "ta", "ta")))

    assert calls == [("assistant", "unhandled", "clarify", "ta", "purple elephants", None)]
