"""Support tiers derived from cumulative Stars donations."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime

from .models import PaymentRecord, User, utcnow
from .payments import PaymentError
from .registry import UserRegistry
from .storage import AbstractStorage

LOGGER = logging.getLogger(__name__)


class SupportTier(enum.IntEnum):
    """Ordered tiers; each value is the inclusive lower bound in Stars."""

    BASELINE = 0
    SUPPORTER = 25
    PREMIUM = 50
    VIP = 100
    CHAMPION = 500

    @property
    def label(self) -> str:
        return _TIER_LABELS[self]

    @property
    def badge(self) -> str:
        return "⭐" * (list(SupportTier).index(self) + 1)


_TIER_LABELS = {
    SupportTier.BASELINE: "Starter",
    SupportTier.SUPPORTER: "Supporter",
    SupportTier.PREMIUM: "Premium",
    SupportTier.VIP: "VIP",
    SupportTier.CHAMPION: "Champion",
}

_TIER_BENEFITS = (
    (SupportTier.BASELINE, "Priority matching"),
    (SupportTier.SUPPORTER, "Supporter badge in chats"),
    (SupportTier.PREMIUM, "Premium supporter features"),
    (SupportTier.VIP, "VIP status and priority support"),
    (SupportTier.CHAMPION, "Champion status and direct developer access"),
)


def tier_of(cumulative_support: int) -> SupportTier:
    for tier in reversed(SupportTier):
        if cumulative_support >= tier.value:
            return tier
    return SupportTier.BASELINE


def benefits_for(cumulative_support: int) -> list[str]:
    if cumulative_support <= 0:
        return []
    tier = tier_of(cumulative_support)
    return [benefit for required, benefit in _TIER_BENEFITS if tier >= required]


@dataclass(slots=True)
class SupportTierResolver:
    registry: UserRegistry
    storage: AbstractStorage

    def apply_payment(
        self,
        user_id: int,
        amount: int,
        transaction_id: str | None,
        *,
        at: datetime | None = None,
    ) -> User:
        if amount <= 0:
            raise PaymentError(f"Payment amount must be positive (got {amount})")
        if not transaction_id:
            raise PaymentError("Missing transaction id")
        if self.storage.get_payment(transaction_id) is not None:
            raise PaymentError(f"Transaction {transaction_id} was already applied")

        when = at or utcnow()
        user = self.registry.credit_support(user_id, amount, when)
        self.storage.save_payment(
            PaymentRecord(
                transaction_id=transaction_id,
                user_id=user_id,
                amount=amount,
                created_at=when,
            )
        )
        LOGGER.info(
            "Applied payment %s: user %s paid %s Stars (total %s, tier %s)",
            transaction_id,
            user_id,
            amount,
            user.cumulative_support,
            tier_of(user.cumulative_support).label,
        )
        return user
