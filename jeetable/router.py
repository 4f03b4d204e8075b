"""
Intent Router

Runs one utterance through the assistant:

  normalize (caller language → en) → classify → record in session log
  → resolve against page context → normalize (en → caller language)

The router does no network I/O of its own apart from the session store it is
given.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

from jeetable.actions import AssistantReply, PageContext
from jeetable.intents import ASSISTANT_RULEBOOK, BASIC_RULEBOOK, IntentClassifier
from jeetable.language import DEFAULT_LANGUAGE, Translator, get_translator, normalize_language_code
from jeetable.pipeline_logger import log_intent_summary, trace_stage
from jeetable.resolver import ActionResolver, assistant_resolver, basic_resolver
from jeetable.session_store import SessionEntry, SessionStore


@dataclass(frozen=True)
class Utterance:
    """Raw user input with its declared language and the language to reply in."""

    text: str
    language: str = DEFAULT_LANGUAGE
    target_language: str = DEFAULT_LANGUAGE


class IntentRouter:
    """
    Compose the normalizer, classifier, session log and resolver.

    Usage:
        router = IntentRouter.assistant(InMemorySessionStore())
        reply = await router.route(Utterance("open jobs"), session_id="sess-1")
    """

    def __init__(
        self,
        classifier: IntentClassifier,
        resolver: ActionResolver,
        sessions: Optional[SessionStore] = None,
        translator: Optional[Translator] = None,
        variant: str = "assistant",
    ):
        self.classifier = classifier
        self.resolver = resolver
        self.sessions = sessions
        self.translator = translator or get_translator()
        self.variant = variant

    @classmethod
    def basic(cls, sessions: Optional[SessionStore] = None, translator: Optional[Translator] = None) -> "IntentRouter":
        """Router behind the basic assistant: spoken replies, the log is kept but never consulted."""
        return cls(IntentClassifier(BASIC_RULEBOOK), basic_resolver(), sessions, translator, "basic")

    @classmethod
    def assistant(cls, sessions: Optional[SessionStore], translator: Optional[Translator] = None) -> "IntentRouter":
        """Router behind the human-like assistant: page actions plus session log."""
        return cls(IntentClassifier(ASSISTANT_RULEBOOK), assistant_resolver(), sessions, translator, "assistant")

    @property
    def rulebook_version(self) -> str:
        return self.classifier.version

    async def route(
        self,
        utterance: Utterance,
        session_id: Optional[str] = None,
        current_url: str = "",
        page_context: Optional[PageContext] = None,
    ) -> AssistantReply:
        source = normalize_language_code(utterance.language)
        target = normalize_language_code(utterance.target_language)

        with trace_stage("NORMALIZE", f"{source} → en"):
            english = self.translator.translate(utterance.text, source, DEFAULT_LANGUAGE)

        with trace_stage("CLASSIFY", self.classifier.version):
            intent = self.classifier.classify(english, current_url)

        history: list[SessionEntry] = []
        if self.sessions is not None and session_id:
            with trace_stage("SESSION", "record"):
                entry = SessionEntry(utterance.text, time.time(), current_url or "", intent.name.value)
                history = await self.sessions.record(session_id, entry)

        with trace_stage("RESOLVE", intent.name.value):
            reply = self.resolver.resolve(intent, history, page_context)

        with trace_stage("NORMALIZE", f"en → {target}"):
            message = self.translator.translate(reply.message, DEFAULT_LANGUAGE, target)

        log_intent_summary(
            self.variant,
            intent.name.value,
            reply.action,
            source,
            utterance.text,
            intent.rule_index,
        )
        return reply.with_message(message)
