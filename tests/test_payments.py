"""Tests for Telegram Stars invoice payload helpers."""

from __future__ import annotations

import json

import pytest

from stranger_talk.payments import (
    PAYLOAD_TYPE,
    SUPPORT_PACKAGES,
    PaymentError,
    build_invoice_payload,
    package_for,
    parse_invoice_payload,
)


def test_payload_round_trip_for_matching_user() -> None:
    raw = build_invoice_payload(42, 50, timestamp=1700000000000)
    assert json.loads(raw)["type"] == PAYLOAD_TYPE

    payload = parse_invoice_payload(raw, expected_user_id=42, total_amount=50)
    assert payload.user_id == 42
    assert payload.amount == 50
    assert payload.timestamp == 1700000000000


def test_payload_for_other_user_is_rejected() -> None:
    raw = build_invoice_payload(42, 50)
    with pytest.raises(PaymentError):
        parse_invoice_payload(raw, expected_user_id=7)


def test_amount_mismatch_is_rejected() -> None:
    raw = build_invoice_payload(42, 50)
    with pytest.raises(PaymentError) as excinfo:
        parse_invoice_payload(raw, expected_user_id=42, total_amount=5)
    assert "does not match" in str(excinfo.value)


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "",
        "not json",
        json.dumps(["list"]),
        json.dumps({"type": "other", "userId": 1, "amount": 5}),
        json.dumps({"type": PAYLOAD_TYPE, "userId": "abc", "amount": 5}),
        json.dumps({"type": PAYLOAD_TYPE, "amount": 5}),
        json.dumps({"type": PAYLOAD_TYPE, "userId": 1, "amount": 0}),
    ],
)
def test_malformed_payloads_are_rejected(raw: str | None) -> None:
    with pytest.raises(PaymentError):
        parse_invoice_payload(raw, expected_user_id=1)


def test_support_packages_cover_all_tiers() -> None:
    assert sorted(SUPPORT_PACKAGES) == [5, 25, 50, 100, 500]
    package = package_for(100)
    assert "VIP" in package.title
    assert "• Priority customer support" in package.invoice_description
    assert len(package.invoice_description) <= 255


def test_unknown_package_is_rejected() -> None:
    with pytest.raises(PaymentError):
        package_for(7)


def test_build_payload_requires_positive_amount() -> None:
    with pytest.raises(PaymentError):
        build_invoice_payload(1, 0)
