"""
Language Normalizer

Phrasebook-based stand-in for a translation service. Inbound utterances are
mapped to English before classification and replies are mapped back into the
caller's language afterwards.

The output is best-effort only: whole words found in the phrasebook are
substituted, everything else passes through untouched. Any object with a
``translate(text, from_lang, to_lang)`` method can replace the phrasebook
without changing the router.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Mapping, Optional, Protocol


DEFAULT_LANGUAGE = "en"

# English phrase -> phrase in the target language
PHRASEBOOK: dict[str, dict[str, str]] = {
    "hi": {
        "hello": "नमस्ते",
        "open": "खोलो",
        "search": "खोजो",
        "help": "मदद",
        "jobs": "नौकरी",
        "learning": "सीखना",
        "emergency": "आपातकाल",
        "thank you": "धन्यवाद",
        "goodbye": "अलविदा",
    },
    "mr": {
        "hello": "नमस्कार",
        "open": "उघडा",
        "search": "शोधा",
        "help": "मदत",
        "jobs": "नोकरी",
        "learning": "शिकणे",
        "emergency": "आणीबाणी",
        "thank you": "धन्यवाद",
        "goodbye": "निरोप",
    },
    "raj": {
        "hello": "नमस्कार",
        "open": "खोलो",
        "search": "ढूंढो",
        "help": "मदद",
        "jobs": "काम",
        "learning": "सीखणो",
        "emergency": "आपातकाल",
    },
    "ta": {
        "hello": "வணக்கம்",
        "open": "திற",
        "search": "தேடு",
        "help": "உதவி",
        "jobs": "வேலை",
        "learning": "கற்றல்",
        "emergency": "அவசரம்",
    },
}

SUPPORTED_LANGUAGES: tuple[str, ...] = (DEFAULT_LANGUAGE, *PHRASEBOOK.keys())

# Indic vowel signs are not matched by \w, so the whole Devanagari..Sinhala
# range counts as word characters for boundary purposes.
_WORD_CHARS = r"\w\u0900-\u0DFF"


class Translator(Protocol):
    """Anything that can turn text in one language into another."""

    def translate(self, text: str, from_lang: str, to_lang: str) -> str:
        ...


def normalize_language_code(code: Optional[str]) -> str:
    """Lower-case and strip a language code; empty means English."""
    value = (code or "").strip().lower()
    return value or DEFAULT_LANGUAGE


def _compile_table(table: Mapping[str, str]) -> Optional[re.Pattern]:
    if not table:
        return None
    # Longest phrases first so "thank you" wins over a shorter overlapping key
    phrases = sorted(table, key=len, reverse=True)
    alternation = "|".join(re.escape(phrase) for phrase in phrases)
    return re.compile(
        rf"(?<![{_WORD_CHARS}])(?:{alternation})(?![{_WORD_CHARS}])",
        flags=re.IGNORECASE,
    )


class PhrasebookTranslator:
    """
    Whole-word, case-insensitive phrase substitution.

    English is the pivot: ``hi -> mr`` goes ``hi -> en -> mr``. Languages
    without a phrasebook entry fall through unchanged.
    """

    def __init__(self, phrasebook: Optional[Mapping[str, Mapping[str, str]]] = None):
        source = PHRASEBOOK if phrasebook is None else phrasebook
        self._forward: dict[str, dict[str, str]] = {
            lang: {en.lower(): native for en, native in table.items()}
            for lang, table in source.items()
        }
        self._reverse: dict[str, dict[str, str]] = {}
        for lang, table in self._forward.items():
            reverse: dict[str, str] = {}
            for english, native in table.items():
                reverse.setdefault(native.lower(), english)
            self._reverse[lang] = reverse
        self._patterns: dict[tuple[str, str], Optional[re.Pattern]] = {}

    @property
    def languages(self) -> tuple[str, ...]:
        return (DEFAULT_LANGUAGE, *self._forward.keys())

    def _pattern(self, lang: str, direction: str) -> Optional[re.Pattern]:
        key = (lang, direction)
        if key not in self._patterns:
            tables = self._forward if direction == "out" else self._reverse
            self._patterns[key] = _compile_table(tables.get(lang, {}))
        return self._patterns[key]

    def _substitute(self, text: str, lang: str, direction: str) -> str:
        pattern = self._pattern(lang, direction)
        if pattern is None:
            return text
        table = (self._forward if direction == "out" else self._reverse)[lang]
        return pattern.sub(lambda m: table.get(m.group(0).lower(), m.group(0)), text)

    def translate(self, text: str, from_lang: str, to_lang: str) -> str:
        if from_lang == to_lang or not text:
            return text

        source = normalize_language_code(from_lang)
        target = normalize_language_code(to_lang)
        if source == target:
            return text

        result = text
        if source != DEFAULT_LANGUAGE:
            result = self._substitute(result, source, "in")
        if target != DEFAULT_LANGUAGE:
            result = self._substitute(result, target, "out")
        return result


@lru_cache
def get_translator() -> PhrasebookTranslator:
    """Shared phrasebook translator."""
    return PhrasebookTranslator()


def normalize(text: str, from_lang: str, to_lang: str) -> str:
    """Translate ``text`` from ``from_lang`` to ``to_lang`` on a best-effort basis."""
    return get_translator().translate(text, from_lang, to_lang)
