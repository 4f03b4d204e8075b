"""
Intent classification.

Rules are evaluated strictly in order and the first match wins, so the order
of a rulebook is its priority list. Each rulebook is versioned; changing the
order of rules means bumping the version and updating the precedence tests.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence


class IntentName(str, Enum):
    NAVIGATE_LEARNING = "navigate_learning"
    NAVIGATE_JOBS = "navigate_jobs"
    NAVIGATE_DEAF_MODE = "navigate_deaf_mode"
    NAVIGATE_HELP = "navigate_help"
    NAVIGATE_DASHBOARD = "navigate_dashboard"
    NAVIGATE_HOME = "navigate_home"
    EMERGENCY = "emergency"
    SEARCH = "search"
    FILL_FORM = "fill_form"
    SCROLL_TOP = "scroll_top"
    SCROLL_BOTTOM = "scroll_bottom"
    CLICK = "click"
    FILTER = "filter"
    PLAY_MEDIA = "play_media"
    CAPABILITIES = "capabilities"
    ACCESSIBILITY = "accessibility"
    VOICE = "voice"
    GREETING = "greeting"
    GRATITUDE = "gratitude"
    LEARNING_INFO = "learning_info"
    JOBS_INFO = "jobs_info"
    JOB_APPLICATION = "job_application"
    START_LEARNING = "start_learning"
    UNHANDLED = "unhandled"


@dataclass(frozen=True)
class Rule:
    """
    One classification rule.

    Matches when the utterance contains any of ``any_of`` (substring) or any
    of ``any_word`` (whole word), and, if ``topic`` is set, also contains one
    of the topic keywords. ``page`` restricts the rule to pages whose URL
    contains that path.
    """

    intent: IntentName
    any_of: tuple[str, ...] = ()
    any_word: tuple[str, ...] = ()
    topic: tuple[str, ...] = ()
    page: Optional[str] = None

    def matches(self, text: str, current_url: str = "") -> bool:
        if self.page is not None and self.page not in (current_url or ""):
            return False
        triggered = any(keyword in text for keyword in self.any_of) or any(
            re.search(rf"\b{re.escape(word)}\b", text) for word in self.any_word
        )
        if not triggered:
            return False
        if self.topic:
            return any(keyword in text for keyword in self.topic)
        return True


@dataclass(frozen=True)
class Intent:
    """Classification result: the intent plus the text it was derived from."""

    name: IntentName
    utterance: str
    rule_index: Optional[int] = None

    @property
    def handled(self) -> bool:
        return self.name is not IntentName.UNHANDLED


@dataclass(frozen=True)
class Rulebook:
    version: str
    rules: tuple[Rule, ...]


def _navigation_group(verbs: tuple[str, ...], topics: Sequence[tuple[IntentName, tuple[str, ...]]]) -> tuple[Rule, ...]:
    # Within the group the first listed topic wins when several are mentioned
    return tuple(Rule(intent, any_of=verbs, topic=keywords) for intent, keywords in topics)


EMERGENCY_KEYWORDS = ("emergency", "urgent", "sos", "crisis")

BASIC_RULEBOOK = Rulebook(
    version="basic-1",
    rules=(
        *_navigation_group(
            ("open", "go to", "navigate"),
            (
                (IntentName.NAVIGATE_LEARNING, ("learning", "learn")),
                (IntentName.NAVIGATE_JOBS, ("job", "career")),
                (IntentName.NAVIGATE_DEAF_MODE, ("deaf", "hearing")),
                (IntentName.NAVIGATE_HELP, ("help", "emergency")),
                (IntentName.NAVIGATE_DASHBOARD, ("dashboard", "profile")),
                (IntentName.NAVIGATE_HOME, ("home",)),
            ),
        ),
        Rule(IntentName.EMERGENCY, any_of=EMERGENCY_KEYWORDS),
        Rule(IntentName.CAPABILITIES, any_of=("what can you do", "help me")),
        Rule(IntentName.ACCESSIBILITY, any_of=("accessibility", "features")),
        Rule(IntentName.VOICE, any_of=("voice", "speech")),
        Rule(IntentName.GREETING, any_of=("hello",), any_word=("hi", "hey")),
        Rule(IntentName.GRATITUDE, any_of=("thank",)),
        Rule(IntentName.LEARNING_INFO, any_of=("learn", "study", "education")),
        Rule(IntentName.JOBS_INFO, any_of=("job", "work", "employment")),
    ),
)

ASSISTANT_RULEBOOK = Rulebook(
    version="assistant-1",
    rules=(
        *_navigation_group(
            ("open", "go to", "navigate", "take me", "show me", "visit"),
            (
                (IntentName.NAVIGATE_LEARNING, ("learning", "learn", "study", "education", "tutorial")),
                (IntentName.NAVIGATE_JOBS, ("job", "career", "work", "employment", "hiring")),
                (IntentName.NAVIGATE_DEAF_MODE, ("deaf", "hearing", "speech to text", "sign language")),
                (IntentName.NAVIGATE_HELP, ("help", "emergency", "sos", "urgent", "crisis")),
                (IntentName.NAVIGATE_DASHBOARD, ("dashboard", "profile", "account", "settings", "preferences")),
                (IntentName.NAVIGATE_HOME, ("home", "main", "start")),
            ),
        ),
        Rule(IntentName.EMERGENCY, any_of=EMERGENCY_KEYWORDS),
        Rule(IntentName.SEARCH, any_of=("search", "find", "look for")),
        Rule(IntentName.FILL_FORM, any_of=("fill", "complete", "submit form")),
        Rule(IntentName.SCROLL_TOP, any_of=("scroll",), topic=("top", "up")),
        Rule(IntentName.SCROLL_BOTTOM, any_of=("scroll",), topic=("bottom", "down", "end")),
        Rule(IntentName.CLICK, any_of=("click", "press", "tap"), topic=("button", "link")),
        Rule(IntentName.FILTER, any_of=("filter", "show only", "apply filter")),
        Rule(IntentName.PLAY_MEDIA, any_of=("start video", "start audio"), any_word=("play",)),
        Rule(IntentName.CAPABILITIES, any_of=("what can you do", "help me", "capabilities")),
        Rule(IntentName.ACCESSIBILITY, any_of=("accessibility", "features", "disability")),
        Rule(IntentName.GREETING, any_of=("hello", "namaste", "vanakkam"), any_word=("hi", "hey")),
        Rule(IntentName.GRATITUDE, any_of=("thank", "dhanyawad")),
        Rule(IntentName.JOB_APPLICATION, any_of=("apply", "job application"), page="/jobs"),
        Rule(IntentName.START_LEARNING, any_of=("start", "begin"), page="/learning"),
    ),
)


class IntentClassifier:
    """First-match-wins classifier over a rulebook."""

    def __init__(self, rulebook: Rulebook = ASSISTANT_RULEBOOK):
        self._rulebook = rulebook

    @property
    def version(self) -> str:
        return self._rulebook.version

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rulebook.rules

    def classify(self, text: str, current_url: str = "") -> Intent:
        lowered = (text or "").lower()
        for index, rule in enumerate(self._rulebook.rules):
            if rule.matches(lowered, current_url):
                return Intent(rule.intent, text, index)
        return Intent(IntentName.UNHANDLED, text)


def classify(text: str, current_url: str = "") -> Intent:
    """Classify with the human-like assistant rulebook."""
    return IntentClassifier(ASSISTANT_RULEBOOK).classify(text, current_url)
