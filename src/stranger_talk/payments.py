"""Helpers for Telegram Stars support invoices."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Any

PAYLOAD_TYPE = "stars_donation"
STARS_CURRENCY = "XTR"


class PaymentError(ValueError):
    """Raised when a payment payload or confirmation cannot be applied."""


@dataclass(slots=True, frozen=True)
class SupportPackage:
    """A fixed Stars donation offered in the support menu."""

    amount: int
    title: str
    description: str
    benefits: tuple[str, ...]

    @property
    def invoice_description(self) -> str:
        lines = "\n".join(f"• {benefit}" for benefit in self.benefits)
        return f"{self.description}\n\nWhat you get:\n{lines}"


SUPPORT_PACKAGES: dict[int, SupportPackage] = {
    5: SupportPackage(
        amount=5,
        title="Starter Support ⭐",
        description="Thank you for supporting our bot with 5 Stars!",
        benefits=("Basic supporter badge", "Priority queue"),
    ),
    25: SupportPackage(
        amount=25,
        title="Supporter Package ⭐⭐",
        description="Amazing! 25 Stars helps us keep growing!",
        benefits=(
            "Supporter badge in chats",
            "Priority matching",
            "Supporter-to-supporter matching",
        ),
    ),
    50: SupportPackage(
        amount=50,
        title="Premium Support ⭐⭐⭐",
        description="Fantastic! 50 Stars unlocks premium features!",
        benefits=(
            "Premium supporter badge",
            "Priority matching",
            "Special welcome messages",
            "Early feature access",
        ),
    ),
    100: SupportPackage(
        amount=100,
        title="VIP Support ⭐⭐⭐⭐",
        description="Incredible! 100 Stars - you're a VIP supporter!",
        benefits=(
            "VIP supporter status",
            "All premium features",
            "Priority customer support",
            "Exclusive supporter group access",
        ),
    ),
    500: SupportPackage(
        amount=500,
        title="Champion Support ⭐⭐⭐⭐⭐",
        description="WOW! 500 Stars - you're our champion supporter!",
        benefits=(
            "Champion supporter status",
            "All premium features",
            "Direct line to developers",
            "Feature request priority",
            "Lifetime supporter status",
        ),
    ),
}


@dataclass(slots=True, frozen=True)
class DonationPayload:
    user_id: int
    amount: int
    timestamp: int


def package_for(amount: int) -> SupportPackage:
    package = SUPPORT_PACKAGES.get(amount)
    if package is None:
        raise PaymentError(f"Unknown support package: {amount} Stars")
    return package


def build_invoice_payload(user_id: int, amount: int, *, timestamp: int | None = None) -> str:
    if amount <= 0:
        raise PaymentError("Amount must be positive")
    return json.dumps(
        {
            "type": PAYLOAD_TYPE,
            "amount": amount,
            "userId": user_id,
            "timestamp": timestamp if timestamp is not None else int(time.time() * 1000),
        }
    )


def parse_invoice_payload(
    raw: str | None,
    *,
    expected_user_id: int,
    total_amount: int | None = None,
) -> DonationPayload:
    """Validate an invoice payload echoed back by Telegram."""

    if not raw:
        raise PaymentError("Missing invoice payload")
    try:
        payload: Any = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise PaymentError("Invoice payload is not valid JSON") from exc
    if not isinstance(payload, dict) or payload.get("type") != PAYLOAD_TYPE:
        raise PaymentError("Invalid payment data")

    try:
        user_id = int(payload["userId"])
        amount = int(payload["amount"])
        timestamp = int(payload.get("timestamp") or 0)
    except (KeyError, TypeError, ValueError) as exc:
        raise PaymentError("Invalid payment data") from exc

    if user_id != expected_user_id:
        raise PaymentError("Invoice was issued for another user")
    if amount <= 0:
        raise PaymentError("Amount must be positive")
    if total_amount is not None and total_amount != amount:
        raise PaymentError(
            f"Paid amount {total_amount} does not match invoice amount {amount}"
        )
    return DonationPayload(user_id=user_id, amount=amount, timestamp=timestamp)
