"""Core domain logic for the StrangerTalk anonymous chat bot."""

from .config import FilterConfig, ModerationConfig, SupportConfig
from .delivery import AbstractDeliverySink, DeliveryError, OutboundMessage
from .filtering import FilterResult, WordFilter
from .matching import MatchingQueue
from .models import (
    InboundMessage,
    MessageKind,
    Paired,
    PaymentConfirmed,
    Queued,
    RelayOutcome,
    User,
)
from .moderation import ModerationGate, ReportOutcome
from .registry import UserRegistry
from .relay import RelayDispatcher
from .services import ChatRelayService
from .sessions import SessionConflictError, SessionTable
from .storage import InMemoryStorage, JsonStorage
from .support import SupportTier, SupportTierResolver, tier_of

__all__ = [
    "AbstractDeliverySink",
    "ChatRelayService",
    "DeliveryError",
    "FilterConfig",
    "FilterResult",
    "InMemoryStorage",
    "InboundMessage",
    "JsonStorage",
    "MatchingQueue",
    "MessageKind",
    "ModerationConfig",
    "ModerationGate",
    "OutboundMessage",
    "Paired",
    "PaymentConfirmed",
    "Queued",
    "RelayDispatcher",
    "RelayOutcome",
    "ReportOutcome",
    "SessionConflictError",
    "SessionTable",
    "SupportConfig",
    "SupportTier",
    "SupportTierResolver",
    "User",
    "UserRegistry",
    "WordFilter",
    "tier_of",
]
