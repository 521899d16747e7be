"""Dataclasses shared by the capture, correction and ledger modules."""

from dataclasses import dataclass, field
from typing import Any

PEOPLE = "PEOPLE"
PROJECTS = "PROJECTS"
IDEAS = "IDEAS"
ADMIN = "ADMIN"
CATEGORIES: tuple[str, ...] = (PEOPLE, PROJECTS, IDEAS, ADMIN)

NEEDS_REVIEW = "needs_review"
STATUS_PENDING = "Pending"
STATUS_FIXED = "Fixed"

DEGRADED_CONFIDENCE = 0.3
FORCED_CONFIDENCE = 1.0


@dataclass(frozen=True)
class Capture:
    """One raw message awaiting classification."""

    text: str
    correlation_id: str
    channel: str
    user: str = ""


@dataclass(frozen=True)
class Classification:
    """Category, confidence and category-specific fields for one capture.

    `degraded` marks the fallback produced when the model reply could not be
    parsed; callers log it and otherwise treat it like any other result.
    """

    category: str
    confidence: float
    fields: dict[str, Any] = field(default_factory=dict)
    degraded: bool = False


@dataclass(frozen=True)
class Record:
    """A task created in the external store."""

    id: str
    name: str
    url: str


@dataclass
class LedgerEntry:
    """Audit row correlating a capture with where it was filed."""

    original_text: str
    filed_to: str
    destination_name: str
    destination_url: str
    confidence: float
    correlation_id: str
    record_id: str = ""
    status: str = STATUS_PENDING


@dataclass(frozen=True)
class LedgerMatch:
    """Ledger task located by correlation id."""

    task_id: str
    description: str


@dataclass(frozen=True)
class SlackMessage:
    """Inner `message` event from the Slack Events API envelope."""

    channel: str
    text: str
    ts: str
    user: str = ""
    thread_ts: str | None = None
    bot_id: str | None = None
    subtype: str | None = None

    @classmethod
    def from_event(cls, event: dict[str, Any]) -> "SlackMessage":
        return cls(
            channel=str(event.get("channel") or ""),
            text=str(event.get("text") or ""),
            ts=str(event.get("ts") or ""),
            user=str(event.get("user") or ""),
            thread_ts=event.get("thread_ts") or None,
            bot_id=event.get("bot_id") or None,
            subtype=event.get("subtype") or None,
        )

    @property
    def is_threaded_reply(self) -> bool:
        return bool(self.thread_ts) and self.thread_ts != self.ts
