import pytest

from stranger_talk.config import FilterConfig, ModerationConfig
from stranger_talk.filtering import WordFilter
from stranger_talk.matching import MatchingQueue
from stranger_talk.models import Queued
from stranger_talk.moderation import ModerationGate
from stranger_talk.registry import UserRegistry
from stranger_talk.sessions import SessionTable
from stranger_talk.storage import InMemoryStorage


def _gate(*, dedupe: bool = False) -> ModerationGate:
    storage = InMemoryStorage()
    registry = UserRegistry(storage)
    return ModerationGate(
        registry=registry,
        sessions=SessionTable(),
        queue=MatchingQueue(registry),
        storage=storage,
        word_filter=WordFilter.from_iterable(FilterConfig().banned_words),
        config=ModerationConfig(report_threshold=3, dedupe_reports_per_session=dedupe),
    )


def test_filter_masks_without_blocking() -> None:
    result = _gate().filter("no spam please")
    assert not result.clean
    assert result.display_text == "no **** please"


def test_reports_accumulate_below_threshold() -> None:
    gate = _gate()
    gate.sessions.open(1, 2)
    outcome = gate.report(1, 2)
    assert outcome.report_count == 1
    assert not outcome.banned
    assert gate.registry.get(2).is_active
    assert gate.sessions.peer_of(1) == 2
    assert outcome.record is not None
    assert outcome.record.session_id == gate.sessions.session_id_of(1)


def test_third_report_bans_and_closes_session_once() -> None:
    gate = _gate()
    gate.sessions.open(1, 2)
    gate.report(1, 2)
    gate.report(1, 2)
    third = gate.report(1, 2)

    assert third.banned
    assert third.report_count == 3
    assert third.former_partner_id == 1
    assert not gate.registry.get(2).is_active
    assert gate.sessions.peer_of(1) is None
    assert gate.sessions.peer_of(2) is None

    fourth = gate.report(1, 2)
    assert not fourth.banned
    assert fourth.former_partner_id is None
    assert fourth.report_count == 4
    assert gate.storage.count_reports() == 4


def test_ban_after_threshold_without_session() -> None:
    gate = _gate()
    for reporter in (1, 3, 4):
        outcome = gate.report(reporter, 2)
    assert outcome.banned
    assert outcome.former_partner_id is None


def test_ban_after_threshold_removes_waiting_user() -> None:
    gate = _gate()
    gate.queue.request_match(2)
    assert 2 in gate.queue

    for reporter in (1, 3, 4):
        outcome = gate.report(reporter, 2)

    assert outcome.banned
    assert 2 not in gate.queue
    assert gate.queue.request_match(5) == Queued(priority=False)


def test_unban_resets_threshold() -> None:
    gate = _gate()
    for _ in range(3):
        gate.report(1, 2)
    gate.registry.reactivate(2)
    assert gate.registry.get(2).report_count == 0
    gate.report(1, 2)
    assert gate.registry.get(2).is_active


def test_dedupe_counts_reporter_once_per_session() -> None:
    gate = _gate(dedupe=True)
    gate.sessions.open(1, 2)
    first = gate.report(1, 2)
    second = gate.report(1, 2)
    assert not first.duplicate
    assert second.duplicate
    assert second.record is None
    assert gate.registry.get(2).report_count == 1

    gate.sessions.close(1)
    gate.sessions.open(1, 2)
    assert not gate.report(1, 2).duplicate
    assert gate.registry.get(2).report_count == 2


def test_cannot_report_self() -> None:
    with pytest.raises(ValueError):
        _gate().report(1, 1)
