"""Storage layer abstractions."""

from __future__ import annotations

import contextlib
import json
import logging
from copy import deepcopy
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, Optional

from .models import PaymentRecord, ReportRecord, User

LOGGER = logging.getLogger(__name__)


def _datetime_to_iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


def _iso_to_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        LOGGER.warning("Failed to parse datetime value %r", value)
        return None


def _safe_int(value: object, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        LOGGER.warning("Failed to parse integer value %r; using %s", value, default)
        return default


def _safe_optional_int(value: object | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        LOGGER.warning("Failed to parse optional integer value %r", value)
        return None


def _epoch() -> datetime:
    return datetime.fromtimestamp(0, tz=timezone.utc)


def _serialize_user(user: User) -> dict:
    return {
        "user_id": user.user_id,
        "is_active": user.is_active,
        "safe_mode": user.safe_mode,
        "report_count": user.report_count,
        "cumulative_support": user.cumulative_support,
        "last_support_at": _datetime_to_iso(user.last_support_at),
        "joined_at": _datetime_to_iso(user.joined_at),
        "username": user.username,
        "total_shares": user.total_shares,
    }


def _deserialize_user(payload: dict) -> User:
    return User(
        user_id=_safe_int(payload.get("user_id", 0)),
        is_active=bool(payload.get("is_active", True)),
        safe_mode=bool(payload.get("safe_mode", True)),
        report_count=max(_safe_int(payload.get("report_count", 0)), 0),
        cumulative_support=max(_safe_int(payload.get("cumulative_support", 0)), 0),
        last_support_at=_iso_to_datetime(payload.get("last_support_at")),
        joined_at=_iso_to_datetime(payload.get("joined_at")) or _epoch(),
        username=payload.get("username"),
        total_shares=max(_safe_int(payload.get("total_shares", 0)), 0),
    )


def _serialize_report(report: ReportRecord) -> dict:
    return {
        "reporter_id": report.reporter_id,
        "reported_id": report.reported_id,
        "created_at": _datetime_to_iso(report.created_at),
        "session_id": report.session_id,
    }


def _deserialize_report(payload: dict) -> ReportRecord:
    return ReportRecord(
        reporter_id=_safe_int(payload.get("reporter_id", 0)),
        reported_id=_safe_int(payload.get("reported_id", 0)),
        created_at=_iso_to_datetime(payload.get("created_at")) or _epoch(),
        session_id=_safe_optional_int(payload.get("session_id")),
    )


def _serialize_payment(payment: PaymentRecord) -> dict:
    return {
        "transaction_id": payment.transaction_id,
        "user_id": payment.user_id,
        "amount": payment.amount,
        "created_at": _datetime_to_iso(payment.created_at),
    }


def _deserialize_payment(payload: dict) -> PaymentRecord:
    return PaymentRecord(
        transaction_id=str(payload.get("transaction_id") or ""),
        user_id=_safe_int(payload.get("user_id", 0)),
        amount=_safe_int(payload.get("amount", 0)),
        created_at=_iso_to_datetime(payload.get("created_at")) or _epoch(),
    )


class AbstractStorage:
    """Interface for persisting users, reports and the payment ledger."""

    def get_user(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def save_user(self, user: User) -> None:
        raise NotImplementedError

    def list_users(self) -> Iterable[User]:
        raise NotImplementedError

    def count_users(self) -> int:
        raise NotImplementedError

    def add_report(self, report: ReportRecord) -> None:
        raise NotImplementedError

    def list_reports(self, reported_id: Optional[int] = None) -> Iterable[ReportRecord]:
        raise NotImplementedError

    def count_reports(self) -> int:
        raise NotImplementedError

    def save_payment(self, payment: PaymentRecord) -> None:
        raise NotImplementedError

    def get_payment(self, transaction_id: str) -> Optional[PaymentRecord]:
        raise NotImplementedError

    def list_payments(self, user_id: Optional[int] = None) -> Iterable[PaymentRecord]:
        raise NotImplementedError


class InMemoryStorage(AbstractStorage):
    """Simple dictionary-based storage for demos and tests."""

    def __init__(self) -> None:
        self._users: Dict[int, User] = {}
        self._reports: list[ReportRecord] = []
        self._payments: Dict[str, PaymentRecord] = {}

    def get_user(self, user_id: int) -> Optional[User]:
        user = self._users.get(user_id)
        if user is None:
            return None
        return deepcopy(user)

    def save_user(self, user: User) -> None:
        self._users[user.user_id] = deepcopy(user)

    def list_users(self) -> Iterable[User]:
        return [
            deepcopy(user)
            for user in sorted(self._users.values(), key=lambda u: u.joined_at)
        ]

    def count_users(self) -> int:
        return len(self._users)

    def add_report(self, report: ReportRecord) -> None:
        self._reports.append(deepcopy(report))

    def list_reports(self, reported_id: Optional[int] = None) -> Iterable[ReportRecord]:
        return [
            deepcopy(report)
            for report in self._reports
            if reported_id is None or report.reported_id == reported_id
        ]

    def count_reports(self) -> int:
        return len(self._reports)

    def save_payment(self, payment: PaymentRecord) -> None:
        if not payment.transaction_id:
            raise ValueError("Payment must have a transaction id before saving")
        self._payments[payment.transaction_id] = deepcopy(payment)

    def get_payment(self, transaction_id: str) -> Optional[PaymentRecord]:
        payment = self._payments.get(transaction_id)
        if payment is None:
            return None
        return deepcopy(payment)

    def list_payments(self, user_id: Optional[int] = None) -> Iterable[PaymentRecord]:
        return [
            deepcopy(payment)
            for payment in sorted(self._payments.values(), key=lambda p: p.created_at)
            if user_id is None or payment.user_id == user_id
        ]


class JsonStorage(InMemoryStorage):
    """JSON-backed storage persisted on disk."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        super().__init__()
        self._load()

    # Persistence helpers -------------------------------------------------

    def _persist(self) -> None:
        payload = {
            "users": {str(user_id): _serialize_user(user) for user_id, user in self._users.items()},
            "reports": [_serialize_report(report) for report in self._reports],
            "payments": {
                transaction_id: _serialize_payment(payment)
                for transaction_id, payment in self._payments.items()
            },
        }
        temp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            with temp_path.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=False, indent=2)
            temp_path.replace(self._path)
        except OSError as exc:
            LOGGER.error("Failed to write storage file %s: %s", self._path, exc)
            with contextlib.suppress(OSError):
                temp_path.unlink(missing_ok=True)

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except json.JSONDecodeError as exc:
            LOGGER.error("Failed to parse storage file %s: %s", self._path, exc)
            return
        except OSError as exc:
            LOGGER.error("Failed to read storage file %s: %s", self._path, exc)
            return

        try:
            raw_users = payload.get("users", {}) or {}
            self._users = {
                int(user_id): _deserialize_user({**user_payload, "user_id": user_id})
                for user_id, user_payload in raw_users.items()
            }

            raw_reports = payload.get("reports", []) or []
            self._reports = [_deserialize_report(raw) for raw in raw_reports]

            raw_payments = payload.get("payments", {}) or {}
            self._payments = {
                str(transaction_id): _deserialize_payment(
                    {**payment_payload, "transaction_id": transaction_id}
                )
                for transaction_id, payment_payload in raw_payments.items()
            }
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            LOGGER.error("Failed to load storage data from %s: %s", self._path, exc)
            super().__init__()

    # AbstractStorage implementation -------------------------------------

    def save_user(self, user: User) -> None:
        super().save_user(user)
        self._persist()

    def add_report(self, report: ReportRecord) -> None:
        super().add_report(report)
        self._persist()

    def save_payment(self, payment: PaymentRecord) -> None:
        super().save_payment(payment)
        self._persist()
