"""
JeetAble assistant core: language normalizer, intent classifier, action
resolver and session log behind the in-page voice assistant.
"""

from .actions import ActionKind, AssistantReply, PageContext
from .intents import IntentClassifier, IntentName, classify
from .language import SUPPORTED_LANGUAGES, normalize
from .router import IntentRouter, Utterance
from .session_store import InMemorySessionStore, RedisSessionStore, SessionEntry

__all__ = [
    'ActionKind',
    'AssistantReply',
    'PageContext',
    'IntentClassifier',
    'IntentName',
    'classify',
    'SUPPORTED_LANGUAGES',
    'normalize',
    'IntentRouter',
    'Utterance',
    'InMemorySessionStore',
    'RedisSessionStore',
    'SessionEntry',
]
