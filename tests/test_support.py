from datetime import datetime, timezone

import pytest

from stranger_talk.payments import PaymentError
from stranger_talk.registry import UserRegistry
from stranger_talk.storage import InMemoryStorage
from stranger_talk.support import SupportTier, SupportTierResolver, benefits_for, tier_of


@pytest.fixture()
def resolver() -> SupportTierResolver:
    storage = InMemoryStorage()
    return SupportTierResolver(registry=UserRegistry(storage), storage=storage)


@pytest.mark.parametrize(
    ("amount", "expected"),
    [
        (0, SupportTier.BASELINE),
        (24, SupportTier.BASELINE),
        (25, SupportTier.SUPPORTER),
        (49, SupportTier.SUPPORTER),
        (50, SupportTier.PREMIUM),
        (99, SupportTier.PREMIUM),
        (100, SupportTier.VIP),
        (499, SupportTier.VIP),
        (500, SupportTier.CHAMPION),
        (10_000, SupportTier.CHAMPION),
    ],
)
def test_tier_boundaries_are_inclusive(amount: int, expected: SupportTier) -> None:
    assert tier_of(amount) is expected


def test_tiers_are_ordered() -> None:
    assert SupportTier.BASELINE < SupportTier.SUPPORTER < SupportTier.PREMIUM
    assert SupportTier.PREMIUM < SupportTier.VIP < SupportTier.CHAMPION
    assert SupportTier.PREMIUM.label == "Premium"
    assert SupportTier.CHAMPION.badge == "⭐⭐⭐⭐⭐"


def test_payments_accumulate(resolver: SupportTierResolver) -> None:
    resolver.apply_payment(1, 30, "tx-1")
    user = resolver.apply_payment(1, 30, "tx-2")
    assert user.cumulative_support == 60
    assert user.supporter
    assert user.last_support_at is not None
    assert tier_of(user.cumulative_support) is SupportTier.PREMIUM
    assert len(list(resolver.storage.list_payments(1))) == 2


def test_payment_records_timestamp(resolver: SupportTierResolver) -> None:
    when = datetime(2024, 5, 1, tzinfo=timezone.utc)
    user = resolver.apply_payment(1, 5, "tx-1", at=when)
    assert user.last_support_at == when


@pytest.mark.parametrize("amount", [0, -5])
def test_non_positive_amount_is_rejected(resolver: SupportTierResolver, amount: int) -> None:
    with pytest.raises(PaymentError):
        resolver.apply_payment(1, amount, "tx-1")
    assert resolver.registry.get(1) is None


def test_missing_transaction_id_is_rejected(resolver: SupportTierResolver) -> None:
    with pytest.raises(PaymentError):
        resolver.apply_payment(1, 25, None)
    assert resolver.registry.get(1) is None


def test_duplicate_transaction_is_not_credited_twice(resolver: SupportTierResolver) -> None:
    resolver.apply_payment(1, 25, "tx-1")
    with pytest.raises(PaymentError):
        resolver.apply_payment(1, 25, "tx-1")
    assert resolver.registry.get(1).cumulative_support == 25


def test_benefits_grow_with_tier() -> None:
    assert benefits_for(0) == []
    assert benefits_for(5) == ["Priority matching"]
    assert len(benefits_for(100)) == 4
    assert len(benefits_for(500)) == 5
