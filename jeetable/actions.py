"""
Action directives returned to the client.

A reply carries at most one directive. The set of directive kinds is closed;
the client executes them against the live page (navigate, scroll, fill a
form, ...). Directives that the caller's page cannot execute are replaced by
a clarification before the reply leaves the resolver.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, ClassVar, Optional, Union


class ActionKind(str, Enum):
    NAVIGATE = "navigate"
    CLICK = "click"
    FILTER = "filter"
    FORM_SUBMIT = "form_submit"
    PLAY_MEDIA = "play_media"
    SCROLL = "scroll"
    SEARCH = "search"
    CLARIFY = "clarify"
    SPEAK = "speak"


@dataclass(frozen=True)
class Navigate:
    kind: ClassVar[ActionKind] = ActionKind.NAVIGATE
    route: str

    def payload(self) -> tuple[Optional[str], Optional[dict]]:
        return self.route, None


@dataclass(frozen=True)
class Click:
    kind: ClassVar[ActionKind] = ActionKind.CLICK
    selector: str

    def payload(self) -> tuple[Optional[str], Optional[dict]]:
        return self.selector, None


@dataclass(frozen=True)
class Scroll:
    """``target`` is ``top``, ``bottom`` or a CSS selector."""

    kind: ClassVar[ActionKind] = ActionKind.SCROLL
    target: str

    def payload(self) -> tuple[Optional[str], Optional[dict]]:
        return self.target, None


@dataclass(frozen=True)
class FormSubmit:
    kind: ClassVar[ActionKind] = ActionKind.FORM_SUBMIT
    fields: dict[str, str]
    selector: str = "form"

    def payload(self) -> tuple[Optional[str], Optional[dict]]:
        return self.selector, {"formData": dict(self.fields)}


@dataclass(frozen=True)
class Filter:
    kind: ClassVar[ActionKind] = ActionKind.FILTER
    criteria: dict[str, str]

    def payload(self) -> tuple[Optional[str], Optional[dict]]:
        return None, {"filters": dict(self.criteria)}


@dataclass(frozen=True)
class Search:
    kind: ClassVar[ActionKind] = ActionKind.SEARCH
    term: str

    def payload(self) -> tuple[Optional[str], Optional[dict]]:
        return None, {"searchTerm": self.term}


@dataclass(frozen=True)
class PlayMedia:
    kind: ClassVar[ActionKind] = ActionKind.PLAY_MEDIA
    selector: str = "video, audio"

    def payload(self) -> tuple[Optional[str], Optional[dict]]:
        return self.selector, None


@dataclass(frozen=True)
class Speak:
    kind: ClassVar[ActionKind] = ActionKind.SPEAK

    def payload(self) -> tuple[Optional[str], Optional[dict]]:
        return None, None


@dataclass(frozen=True)
class Clarify:
    kind: ClassVar[ActionKind] = ActionKind.CLARIFY

    def payload(self) -> tuple[Optional[str], Optional[dict]]:
        return None, None


Directive = Union[Navigate, Click, Scroll, FormSubmit, Filter, Search, PlayMedia, Speak, Clarify]


@dataclass(frozen=True)
class PageContext:
    """Caller-declared capabilities of the page the user is on."""

    has_form: bool = False
    has_search: bool = False
    has_media: bool = False
    title: str = ""
    url: str = ""


# Directive kind -> (required PageContext flag, reply when the flag is false)
FEASIBILITY: dict[ActionKind, tuple[str, str]] = {
    ActionKind.FORM_SUBMIT: (
        "has_form",
        "I don't see any forms on this page. Would you like me to navigate to a page that has a form?",
    ),
    ActionKind.PLAY_MEDIA: (
        "has_media",
        "I don't see any media content on this page. Would you like me to navigate to a page with videos or audio?",
    ),
}


def unmet_requirement(directive: Optional[Directive], page: PageContext) -> Optional[str]:
    """Return the fallback message if ``page`` cannot execute ``directive``."""
    if directive is None:
        return None
    requirement = FEASIBILITY.get(directive.kind)
    if requirement is None:
        return None
    flag, message = requirement
    return None if getattr(page, flag) else message


@dataclass(frozen=True)
class AssistantReply:
    """Structured reply: a message plus at most one directive."""

    message: str
    directive: Optional[Directive] = None
    intent: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def action(self) -> Optional[str]:
        return self.directive.kind.value if self.directive is not None else None

    def with_message(self, message: str) -> "AssistantReply":
        return replace(self, message=message)

    def to_dict(self) -> dict[str, Any]:
        """Wire form; absent fields are omitted."""
        body: dict[str, Any] = {"message": self.message}
        if self.directive is None:
            return body
        target, extra = self.directive.payload()
        body["action"] = self.action
        if target is not None:
            body["target"] = target
        if extra is not None:
            body["extra"] = extra
        return body
