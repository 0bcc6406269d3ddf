"""Domain models for the StrangerTalk bot."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Union


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class User:
    user_id: int
    is_active: bool = True
    safe_mode: bool = True
    report_count: int = 0
    cumulative_support: int = 0
    last_support_at: Optional[datetime] = None
    joined_at: datetime = field(default_factory=utcnow)
    username: str | None = None
    total_shares: int = 0

    @property
    def supporter(self) -> bool:
        return self.cumulative_support > 0

    def add_support(self, amount: int, at: datetime | None = None) -> None:
        if amount <= 0:
            raise ValueError("Support amount must be positive")
        self.cumulative_support += amount
        self.last_support_at = at or utcnow()


@dataclass(slots=True)
class ReportRecord:
    reporter_id: int
    reported_id: int
    created_at: datetime = field(default_factory=utcnow)
    session_id: int | None = None


@dataclass(slots=True)
class PaymentRecord:
    transaction_id: str
    user_id: int
    amount: int
    created_at: datetime = field(default_factory=utcnow)


class MessageKind(enum.Enum):
    TEXT = "text"
    PHOTO = "photo"
    VIDEO = "video"
    DOCUMENT = "document"
    AUDIO = "audio"
    VOICE = "voice"
    STICKER = "sticker"


class RelayOutcome(enum.Enum):
    DELIVERED = "delivered"
    BLOCKED_BY_SAFE_MODE = "blocked_by_safe_mode"
    NO_SESSION = "no_session"
    DELIVERY_FAILED = "delivery_failed"


@dataclass(slots=True, frozen=True)
class Paired:
    partner_id: int


@dataclass(slots=True, frozen=True)
class Queued:
    priority: bool = False


MatchResult = Union[Paired, Queued]


# Inbound events -----------------------------------------------------------


@dataclass(slots=True, frozen=True)
class SessionRequest:
    user_id: int


@dataclass(slots=True, frozen=True)
class StopRequest:
    user_id: int


@dataclass(slots=True, frozen=True)
class InboundMessage:
    user_id: int
    kind: MessageKind
    text: str | None = None
    file_id: str | None = None
    caption: str | None = None


@dataclass(slots=True, frozen=True)
class ReportRequest:
    user_id: int


@dataclass(slots=True, frozen=True)
class PaymentConfirmed:
    user_id: int
    amount: int
    transaction_id: str | None


@dataclass(slots=True, frozen=True)
class BanRequest:
    user_id: int


@dataclass(slots=True, frozen=True)
class UnbanRequest:
    user_id: int


InboundEvent = Union[
    SessionRequest,
    StopRequest,
    InboundMessage,
    ReportRequest,
    PaymentConfirmed,
    BanRequest,
    UnbanRequest,
]
