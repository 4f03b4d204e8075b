from jeetable.actions import AssistantReply, Click, Navigate, PageContext, Speak
from jeetable.intents import BASIC_RULEBOOK, IntentClassifier, IntentName, classify
from jeetable.resolver import (
    FILTER_NO_MATCH,
    FORM_CLARIFY,
    REPEAT_REPLIES,
    SEARCH_CLARIFY,
    SUPPORTED_ACTIONS,
    assistant_resolver,
    basic_resolver,
)
from jeetable.session_store import SessionEntry


def _resolve(text, page=None, history=()):
    return assistant_resolver().resolve(classify(text), history, page)


def test_navigation_reply():
    reply = _resolve("open the job portal")
    assert reply.action == "navigate"
    assert reply.to_dict()["target"] == "/jobs"
    assert reply.intent == IntentName.NAVIGATE_JOBS.value


def test_emergency_navigates_to_help():
    reply = _resolve("I need emergency help")
    assert reply.directive == Navigate("/help")


def test_search_extracts_term():
    reply = _resolve("search for wheelchair accessible jobs")
    assert reply.action == "search"
    assert reply.to_dict() == {
        "message": 'I\'ll search for "wheelchair accessible jobs" on this page for you.',
        "action": "search",
        "extra": {"searchTerm": "wheelchair accessible jobs"},
    }


def test_search_without_term_asks():
    reply = _resolve("find")
    assert reply.action == "clarify"
    assert reply.message == SEARCH_CLARIFY


def test_search_for_with_nothing_after_asks():
    for text in ("search for", "look for", "search for?"):
        reply = _resolve(text)
        assert reply.action == "clarify", text
        assert reply.message == SEARCH_CLARIFY
        assert "extra" not in reply.to_dict()


def test_form_needs_a_form_on_the_page():
    reply = _resolve("fill name: John, email: j@x.com", PageContext(has_form=False))
    assert reply.action == "clarify"
    assert reply.message.startswith("I don't see any forms on this page")


def test_form_without_page_context_is_gated():
    reply = _resolve("fill name: John, email: j@x.com")
    assert reply.action == "clarify"


def test_form_submit_with_fields():
    reply = _resolve("fill name: John, email: j@x.com", PageContext(has_form=True))
    body = reply.to_dict()
    assert body["action"] == "form_submit"
    assert body["target"] == "form"
    assert body["extra"] == {"formData": {"name": "John", "email": "j@x.com"}}


def test_form_without_fields_asks_for_them():
    reply = _resolve("please fill the form", PageContext(has_form=True))
    assert reply.action == "clarify"
    assert reply.message == FORM_CLARIFY


def test_play_media_is_downgraded_without_media():
    reply = _resolve("play the video", PageContext(has_media=False))
    assert reply.action == "clarify"
    assert reply.metadata["downgraded_from"] == "play_media"
    assert "media" in reply.message


def test_play_media_with_media():
    reply = _resolve("play the video", PageContext(has_media=True))
    assert reply.action == "play_media"
    assert reply.to_dict()["target"] == "video, audio"


def test_filter_reply():
    reply = _resolve("filter remote jobs")
    assert reply.to_dict()["extra"] == {"filters": {"remote": "true"}}


def test_filter_without_known_criteria_has_no_action():
    reply = _resolve("filter by salary")
    assert reply.action is None
    assert reply.to_dict() == {"message": FILTER_NO_MATCH}


def test_scroll_reply():
    assert _resolve("scroll to the top").to_dict()["target"] == "top"
    assert _resolve("scroll down").to_dict()["target"] == "bottom"


def test_unhandled_echoes_utterance():
    reply = _resolve("purple elephants dance slowly")
    assert reply.action == "clarify"
    assert '"purple elephants dance slowly"' in reply.message
    assert reply.intent == "unhandled"


def test_first_greeting_gets_full_reply():
    history = [SessionEntry("hello", 1.0, "/", "greeting")]
    reply = _resolve("hello", history=history)
    assert reply.message.startswith("Hello! I'm your intelligent assistant")
    assert reply.action is None
    assert "repeat" not in reply.metadata


def test_repeated_greeting_gets_short_reply():
    history = [
        SessionEntry("hello", 1.0, "/", "greeting"),
        SessionEntry("open jobs", 2.0, "/", "navigate_jobs"),
        SessionEntry("hi", 3.0, "/jobs", "greeting"),
    ]
    reply = _resolve("hi", history=history)
    assert reply.message == REPEAT_REPLIES[IntentName.GREETING]
    assert reply.metadata == {"repeat": True}


def test_basic_replies_speak():
    classifier = IntentClassifier(BASIC_RULEBOOK)
    resolver = basic_resolver()
    assert resolver.resolve(classifier.classify("what can you do")).directive == Speak()
    assert resolver.resolve(classifier.classify("purple elephants")).action == "speak"
    assert resolver.resolve(classifier.classify("open learning")).to_dict()["target"] == "/learning"


def test_basic_greeting_is_not_deduplicated():
    classifier = IntentClassifier(BASIC_RULEBOOK)
    history = [SessionEntry("hello", 1.0), SessionEntry("hello", 2.0)]
    reply = basic_resolver().resolve(classifier.classify("hello"), history)
    assert reply.message.startswith("Hello! Welcome to JeetAble")


def test_reply_with_message_keeps_directive():
    reply = AssistantReply("Opening", Navigate("/jobs"), "navigate_jobs")
    translated = reply.with_message("खोलो")
    assert translated.message == "खोलो"
    assert translated.directive == Navigate("/jobs")


def test_supported_actions():
    assert set(SUPPORTED_ACTIONS) == {
        "navigate", "click", "filter", "form_submit", "play_media",
        "scroll", "search", "clarify", "speak",
    }


def test_click_directive_payload():
    assert Click("#apply-button").payload() == ("#apply-button", None)
