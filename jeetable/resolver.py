"""
Action Resolver

Turns a classified intent into an ``AssistantReply``. Static intents are
served from a reply table; search, form filling, filtering, the fallback and
repeated greetings are built per call. Every reply passes the feasibility
check against the caller's ``PageContext`` before it is returned, so a
directive the page cannot execute never reaches the client.
"""

from __future__ import annotations

from typing import Callable, Mapping, Optional, Sequence

from jeetable.actions import (
    ActionKind,
    AssistantReply,
    Clarify,
    Directive,
    Filter,
    FormSubmit,
    Navigate,
    PageContext,
    PlayMedia,
    Scroll,
    Search,
    Speak,
    unmet_requirement,
)
from jeetable.extractors import extract_filters, extract_form_fields, extract_search_term
from jeetable.intents import Intent, IntentName
from jeetable.session_store import SessionEntry


CannedReply = tuple[str, Optional[Directive]]


BASIC_REPLIES: dict[IntentName, CannedReply] = {
    IntentName.NAVIGATE_LEARNING: ("Opening the Learning Hub for you.", Navigate("/learning")),
    IntentName.NAVIGATE_JOBS: ("Taking you to the Job Portal.", Navigate("/jobs")),
    IntentName.NAVIGATE_DEAF_MODE: ("Opening Deaf Mode features.", Navigate("/deaf-mode")),
    IntentName.NAVIGATE_HELP: ("Opening Emergency Help section.", Navigate("/help")),
    IntentName.NAVIGATE_DASHBOARD: ("Going to your dashboard.", Navigate("/dashboard")),
    IntentName.NAVIGATE_HOME: ("Taking you to the homepage.", Navigate("/")),
    IntentName.EMERGENCY: (
        "Taking you to the Emergency Help section. It has SOS buttons, emergency contacts "
        "and location-based services.",
        Navigate("/help"),
    ),
    IntentName.CAPABILITIES: (
        "I can help you navigate JeetAble, open different sections like Learning Hub, Job Portal, "
        "Deaf Mode, and Emergency Help. I can also read content aloud and answer questions about "
        'accessibility features. Just ask me to "open learning hub" or "go to jobs" for example.',
        Speak(),
    ),
    IntentName.ACCESSIBILITY: (
        "JeetAble offers voice navigation, deaf mode with speech-to-text, learning resources, "
        "accessible job listings, and emergency help. All features are designed with accessibility "
        "in mind including screen reader support, keyboard navigation, and high contrast modes.",
        Speak(),
    ),
    IntentName.VOICE: (
        "Voice features include voice navigation commands, text-to-speech for reading content, and "
        "speech-to-text conversion. You can control most of the website using voice commands.",
        Speak(),
    ),
    IntentName.GREETING: (
        "Hello! Welcome to JeetAble. I'm here to help you navigate and use all the accessibility "
        "features. What would you like to do today?",
        Speak(),
    ),
    IntentName.GRATITUDE: (
        "You're welcome! I'm always here to help make your experience more accessible.",
        Speak(),
    ),
    IntentName.LEARNING_INFO: (
        "Our Learning Hub offers sign language tutorials, Braille learning, text-to-speech tools, "
        "and accessibility best practices. Would you like me to open the Learning Hub?",
        Speak(),
    ),
    IntentName.JOBS_INFO: (
        "The Job Portal features disability-friendly job listings with accessibility filters like "
        "remote work, wheelchair accessible offices, and flexible hours. Shall I open the Job Portal for you?",
        Speak(),
    ),
}

BASIC_FALLBACK = (
    'I understand you said "{utterance}". I can help you navigate JeetAble, open different sections, '
    "or provide information about accessibility features. Try asking me to \"open learning hub\", "
    '"go to jobs", or "what can you do".'
)


ASSISTANT_REPLIES: dict[IntentName, CannedReply] = {
    IntentName.NAVIGATE_LEARNING: (
        "I'll take you to the Learning Hub where you can access educational resources, tutorials, "
        "and interactive learning tools.",
        Navigate("/learning"),
    ),
    IntentName.NAVIGATE_JOBS: (
        "Opening the Job Portal for you. Here you'll find disability-friendly job opportunities "
        "with accessibility features.",
        Navigate("/jobs"),
    ),
    IntentName.NAVIGATE_DEAF_MODE: (
        "Taking you to Deaf Mode where you can use speech-to-text features and sign language resources.",
        Navigate("/deaf-mode"),
    ),
    IntentName.NAVIGATE_HELP: (
        "Opening Emergency Help section immediately. You'll find SOS buttons, emergency contacts, "
        "and crisis support.",
        Navigate("/help"),
    ),
    IntentName.NAVIGATE_DASHBOARD: (
        "Taking you to your personal dashboard where you can manage your profile and accessibility preferences.",
        Navigate("/dashboard"),
    ),
    IntentName.NAVIGATE_HOME: (
        "Going back to the homepage where you can see all available features and get started.",
        Navigate("/"),
    ),
    IntentName.EMERGENCY: (
        "This sounds urgent. Opening Emergency Help now, where you'll find SOS buttons, emergency "
        "contacts, and crisis support.",
        Navigate("/help"),
    ),
    IntentName.SCROLL_TOP: ("Scrolling to the top of the page for you.", Scroll("top")),
    IntentName.SCROLL_BOTTOM: ("Scrolling to the bottom of the page.", Scroll("bottom")),
    IntentName.CLICK: (
        "Which specific button or link would you like me to click? Please describe it or tell me what it says.",
        Clarify(),
    ),
    IntentName.PLAY_MEDIA: ("I'll start playing the media content for you.", PlayMedia()),
    IntentName.CAPABILITIES: (
        "I'm your intelligent assistant! I can navigate pages, fill forms, search content, apply "
        "filters, click buttons, scroll pages, play media, and perform almost any action you need on "
        "this website. I understand natural language in multiple languages including English, Hindi, "
        "Marathi, Rajasthani, and Tamil. Just tell me what you want to do in your own words!",
        Clarify(),
    ),
    IntentName.ACCESSIBILITY: (
        "JeetAble offers comprehensive accessibility features: voice navigation, deaf mode with "
        "speech-to-text, learning resources, accessible job listings, emergency help, high contrast "
        "modes, dyslexia-friendly fonts, and full keyboard navigation. All features are designed "
        "following WCAG guidelines. Would you like me to show you any specific accessibility feature?",
        Clarify(),
    ),
    IntentName.GREETING: (
        "Hello! I'm your intelligent assistant here to help you with anything on JeetAble. I can "
        "navigate pages, fill forms, search content, and perform any action you need. What would you "
        "like me to help you with today?",
        None,
    ),
    IntentName.GRATITUDE: (
        "You're very welcome! I'm always here to help make your experience on JeetAble as smooth and "
        "accessible as possible. Is there anything else I can assist you with?",
        None,
    ),
    IntentName.JOB_APPLICATION: (
        "I can help you apply for jobs! Just tell me which job you're interested in, or I can help you "
        "filter jobs based on your preferences like remote work, accessibility features, or job type.",
        Clarify(),
    ),
    IntentName.START_LEARNING: (
        "Great! I can help you start learning. Would you like to begin with sign language basics, "
        "text-to-speech tools, or accessibility best practices? Just let me know what interests you most.",
        Clarify(),
    ),
}

ASSISTANT_FALLBACK = (
    'I understand you said "{utterance}". I can help you navigate JeetAble, perform actions like '
    "filling forms, searching content, applying filters, or accessing any feature. Could you tell me "
    "more specifically what you'd like me to do? For example, you could say \"open the jobs page\", "
    '"search for accessibility jobs", or "fill out the contact form".'
)

# Short replies for a greeting or thanks already seen in the same session
REPEAT_REPLIES: dict[IntentName, str] = {
    IntentName.GREETING: "Hello again! What would you like me to help you with next?",
    IntentName.GRATITUDE: "Happy to help anytime! Is there anything else you need?",
}

SEARCH_CLARIFY = "What would you like me to search for? Please tell me the specific term or topic."
FORM_CLARIFY = (
    "I can help you fill out the form. Please tell me what information you'd like to enter, "
    'for example: "Fill name: John Doe, email: john@example.com"'
)
FILTER_NO_MATCH = (
    "Which filters would you like? You can ask for remote, wheelchair accessible, flexible, "
    "full-time or part-time jobs."
)


Handler = Callable[[Intent, Sequence[SessionEntry], PageContext], AssistantReply]


class ActionResolver:
    """Map intents to replies using a reply table plus the dynamic handlers."""

    def __init__(
        self,
        replies: Mapping[IntentName, CannedReply],
        fallback: str,
        fallback_directive: Optional[Directive] = None,
        dedupe_repeats: bool = False,
    ):
        self._replies = dict(replies)
        self._fallback = fallback
        self._fallback_directive = fallback_directive
        self._dedupe_repeats = dedupe_repeats
        self._handlers: dict[IntentName, Handler] = {
            IntentName.SEARCH: self._search,
            IntentName.FILL_FORM: self._fill_form,
            IntentName.FILTER: self._filter,
            IntentName.UNHANDLED: self._unhandled,
        }
        if dedupe_repeats:
            self._handlers[IntentName.GREETING] = self._repeatable
            self._handlers[IntentName.GRATITUDE] = self._repeatable

    def resolve(
        self,
        intent: Intent,
        history: Sequence[SessionEntry] = (),
        page_context: Optional[PageContext] = None,
    ) -> AssistantReply:
        page = page_context or PageContext()
        handler = self._handlers.get(intent.name)
        if handler is not None:
            reply = handler(intent, history, page)
        elif intent.name in self._replies:
            message, directive = self._replies[intent.name]
            reply = AssistantReply(message, directive, intent.name.value)
        else:
            reply = self._unhandled(intent, history, page)
        return self._enforce_feasibility(reply, page)

    @staticmethod
    def _enforce_feasibility(reply: AssistantReply, page: PageContext) -> AssistantReply:
        fallback = unmet_requirement(reply.directive, page)
        if fallback is None:
            return reply
        return AssistantReply(
            fallback,
            Clarify(),
            reply.intent,
            {**reply.metadata, "downgraded_from": reply.action},
        )

    def _search(self, intent: Intent, history: Sequence[SessionEntry], page: PageContext) -> AssistantReply:
        term = extract_search_term(intent.utterance)
        if term is None:
            return AssistantReply(SEARCH_CLARIFY, Clarify(), intent.name.value)
        return AssistantReply(
            f'I\'ll search for "{term}" on this page for you.',
            Search(term),
            intent.name.value,
        )

    def _fill_form(self, intent: Intent, history: Sequence[SessionEntry], page: PageContext) -> AssistantReply:
        no_form = unmet_requirement(FormSubmit({}), page)
        if no_form is not None:
            return AssistantReply(no_form, Clarify(), intent.name.value)
        fields = extract_form_fields(intent.utterance)
        if not fields:
            return AssistantReply(FORM_CLARIFY, Clarify(), intent.name.value)
        return AssistantReply(
            "I'll fill out the form with the information you provided.",
            FormSubmit(fields),
            intent.name.value,
        )

    def _filter(self, intent: Intent, history: Sequence[SessionEntry], page: PageContext) -> AssistantReply:
        criteria = extract_filters(intent.utterance)
        if not criteria:
            return AssistantReply(FILTER_NO_MATCH, None, intent.name.value)
        return AssistantReply(
            "I'll apply those filters to help you find the right opportunities.",
            Filter(criteria),
            intent.name.value,
        )

    def _unhandled(self, intent: Intent, history: Sequence[SessionEntry], page: PageContext) -> AssistantReply:
        return AssistantReply(
            self._fallback.format(utterance=intent.utterance),
            self._fallback_directive,
            IntentName.UNHANDLED.value,
        )

    def _repeatable(self, intent: Intent, history: Sequence[SessionEntry], page: PageContext) -> AssistantReply:
        message, directive = self._replies[intent.name]
        # The snapshot from the session store ends with the current utterance
        earlier = history[:-1] if history else ()
        if any(entry.intent == intent.name.value for entry in earlier):
            return AssistantReply(REPEAT_REPLIES[intent.name], directive, intent.name.value, {"repeat": True})
        return AssistantReply(message, directive, intent.name.value)


def basic_resolver() -> ActionResolver:
    return ActionResolver(BASIC_REPLIES, BASIC_FALLBACK, fallback_directive=Speak())


def assistant_resolver() -> ActionResolver:
    return ActionResolver(
        ASSISTANT_REPLIES,
        ASSISTANT_FALLBACK,
        fallback_directive=Clarify(),
        dedupe_repeats=True,
    )


SUPPORTED_ACTIONS: tuple[str, ...] = tuple(kind.value for kind in ActionKind)
