"""Tests for the JSON backed storage implementation."""

from __future__ import annotations

from stranger_talk.models import PaymentRecord, ReportRecord, User, utcnow
from stranger_talk.storage import JsonStorage


def test_json_storage_persists_between_sessions(tmp_path) -> None:
    db_path = tmp_path / "storage.json"

    storage = JsonStorage(db_path)

    user = User(user_id=1, safe_mode=False, username="night_owl")
    user.add_support(60)
    user.report_count = 2
    user.total_shares = 3
    storage.save_user(user)
    storage.save_user(User(user_id=2, is_active=False))

    storage.add_report(ReportRecord(reporter_id=2, reported_id=1, session_id=7))
    storage.save_payment(
        PaymentRecord(transaction_id="tx-1", user_id=1, amount=60, created_at=utcnow())
    )

    reloaded = JsonStorage(db_path)

    restored = reloaded.get_user(1)
    assert restored is not None
    assert restored.safe_mode is False
    assert restored.username == "night_owl"
    assert restored.cumulative_support == 60
    assert restored.last_support_at == user.last_support_at
    assert restored.report_count == 2
    assert restored.total_shares == 3
    assert restored.joined_at == user.joined_at

    assert reloaded.get_user(2).is_active is False
    assert reloaded.count_users() == 2

    [report] = reloaded.list_reports(reported_id=1)
    assert report.reporter_id == 2
    assert report.session_id == 7
    assert reloaded.count_reports() == 1

    payment = reloaded.get_payment("tx-1")
    assert payment is not None
    assert payment.user_id == 1
    assert payment.amount == 60
    assert [p.transaction_id for p in reloaded.list_payments(user_id=1)] == ["tx-1"]


def test_json_storage_ignores_corrupt_file(tmp_path) -> None:
    db_path = tmp_path / "storage.json"
    db_path.write_text("{not json", encoding="utf-8")

    storage = JsonStorage(db_path)

    assert storage.count_users() == 0
    storage.save_user(User(user_id=5))
    assert JsonStorage(db_path).get_user(5) is not None


def test_in_memory_copies_are_detached(tmp_path) -> None:
    storage = JsonStorage(tmp_path / "nested" / "storage.json")
    storage.save_user(User(user_id=1))

    copy = storage.get_user(1)
    copy.cumulative_support = 500

    assert storage.get_user(1).cumulative_support == 0
