"""
Slot extraction utilities.

Each extractor pulls a single value out of an English utterance and returns
``None`` when the slot is absent, so extractors can be tested and composed
independently of the classifier.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional


_TRAILING_PUNCTUATION = " \t.!?;:\"'"


@dataclass(frozen=True)
class SlotExtractor:
    """Regex extractor for one named slot (first capture group is the value)."""

    slot: str
    pattern: re.Pattern

    def extract(self, text: str) -> Optional[str]:
        match = self.pattern.search(text or "")
        if not match:
            return None
        value = match.group(1).strip().rstrip(_TRAILING_PUNCTUATION).strip()
        return value or None


NAME = SlotExtractor("name", re.compile(r"\bname[:\s]+([^,\n]+)", re.IGNORECASE))
EMAIL = SlotExtractor("email", re.compile(r"\bemail[:\s]+([^\s,\n]+)", re.IGNORECASE))
PHONE = SlotExtractor("phone", re.compile(r"\bphone[:\s]+([^\s,\n]+)", re.IGNORECASE))
SEARCH_TERM = SlotExtractor(
    "searchTerm",
    re.compile(r"(?:search|find|look for)\s+(?!for[\s.!?]*$)(?:for\s+)?(.+)", re.IGNORECASE),
)

FORM_FIELDS: tuple[SlotExtractor, ...] = (NAME, EMAIL, PHONE)


def extract_slots(text: str, extractors: Iterable[SlotExtractor]) -> dict[str, str]:
    """Run several extractors and keep only the slots that were found."""
    slots: dict[str, str] = {}
    for extractor in extractors:
        value = extractor.extract(text)
        if value is not None:
            slots[extractor.slot] = value
    return slots


def extract_form_fields(text: str) -> dict[str, str]:
    return extract_slots(text, FORM_FIELDS)


def extract_search_term(text: str) -> Optional[str]:
    return SEARCH_TERM.extract(text)


# (keywords, filter key, filter value); later entries overwrite earlier ones
# for the same key, so "part time" beats "full time" when both are present.
JOB_FILTERS: tuple[tuple[tuple[str, ...], str, str], ...] = (
    (("remote",), "remote", "true"),
    (("wheelchair", "accessible"), "wheelchair", "true"),
    (("flexible",), "flexible", "true"),
    (("full time", "full-time", "fulltime"), "type", "full-time"),
    (("part time", "part-time", "parttime"), "type", "part-time"),
)


def extract_filters(text: str) -> dict[str, str]:
    """Scan for the job-portal filter keywords and return the matched subset."""
    lowered = (text or "").lower()
    filters: dict[str, str] = {}
    for keywords, key, value in JOB_FILTERS:
        if any(keyword in lowered for keyword in keywords):
            filters[key] = value
    return filters
