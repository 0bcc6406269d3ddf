"""Moderation gate: text masking, report accumulation and auto-ban."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .config import ModerationConfig
from .filtering import FilterResult, WordFilter
from .matching import MatchingQueue
from .models import ReportRecord
from .registry import UserRegistry
from .sessions import SessionTable
from .storage import AbstractStorage

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ReportOutcome:
    """Result of a single report.

    ``banned`` is true only for the report that crossed the threshold.
    ``former_partner_id`` is the user whose session with the banned user was
    closed as part of that transition.
    """

    record: ReportRecord | None
    report_count: int
    banned: bool = False
    former_partner_id: int | None = None
    duplicate: bool = False


@dataclass(slots=True)
class ModerationGate:
    registry: UserRegistry
    sessions: SessionTable
    queue: MatchingQueue
    storage: AbstractStorage
    word_filter: WordFilter
    config: ModerationConfig

    def filter(self, text: str) -> FilterResult:
        return self.word_filter.filter(text)

    def report(self, reporter_id: int, reported_id: int) -> ReportOutcome:
        if reporter_id == reported_id:
            raise ValueError("You cannot report yourself")

        session_id = None
        if self.sessions.peer_of(reporter_id) == reported_id:
            session_id = self.sessions.session_id_of(reporter_id)

        if self.config.dedupe_reports_per_session and self._already_reported(
            reporter_id, reported_id, session_id
        ):
            current = self.registry.get_or_create(reported_id)
            return ReportOutcome(
                record=None, report_count=current.report_count, duplicate=True
            )

        record = ReportRecord(
            reporter_id=reporter_id, reported_id=reported_id, session_id=session_id
        )
        self.storage.add_report(record)

        was_active = self.registry.get_or_create(reported_id).is_active
        reported = self.registry.increment_reports(reported_id)
        LOGGER.info(
            "User %s reported %s (%s/%s)",
            reporter_id,
            reported_id,
            reported.report_count,
            self.config.report_threshold,
        )

        if not was_active or reported.report_count < self.config.report_threshold:
            return ReportOutcome(record=record, report_count=reported.report_count)

        self.registry.deactivate(reported_id)
        self.queue.remove(reported_id)
        former_partner_id = self.sessions.close(reported_id)
        LOGGER.warning(
            "User %s banned after %s reports", reported_id, reported.report_count
        )
        return ReportOutcome(
            record=record,
            report_count=reported.report_count,
            banned=True,
            former_partner_id=former_partner_id,
        )

    def _already_reported(
        self, reporter_id: int, reported_id: int, session_id: int | None
    ) -> bool:
        return any(
            report.reporter_id == reporter_id and report.session_id == session_id
            for report in self.storage.list_reports(reported_id)
        )
