"""Bidirectional table of active chat sessions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterator, Optional

from .models import utcnow


class SessionConflictError(RuntimeError):
    """Raised when a session would overwrite an existing pairing."""


@dataclass(slots=True, frozen=True)
class SessionEntry:
    partner_id: int
    session_id: int
    started_at: datetime


@dataclass(slots=True)
class SessionTable:
    """Stores each session as two directed entries, one per participant."""

    _entries: Dict[int, SessionEntry] = field(default_factory=dict)
    _sequence: int = 1

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._entries

    def __len__(self) -> int:
        return len(self._entries) // 2

    def open(self, first_id: int, second_id: int) -> int:
        if first_id == second_id:
            raise SessionConflictError(f"User {first_id} cannot be paired with themselves")
        for user_id in (first_id, second_id):
            if user_id in self._entries:
                raise SessionConflictError(f"User {user_id} is already in a session")
        session_id = self._sequence
        self._sequence += 1
        started_at = utcnow()
        self._entries[first_id] = SessionEntry(second_id, session_id, started_at)
        self._entries[second_id] = SessionEntry(first_id, session_id, started_at)
        return session_id

    def close(self, user_id: int) -> Optional[int]:
        entry = self._entries.pop(user_id, None)
        if entry is None:
            return None
        self._entries.pop(entry.partner_id, None)
        return entry.partner_id

    def peer_of(self, user_id: int) -> Optional[int]:
        entry = self._entries.get(user_id)
        return entry.partner_id if entry else None

    def session_id_of(self, user_id: int) -> Optional[int]:
        entry = self._entries.get(user_id)
        return entry.session_id if entry else None

    def participants(self) -> set[int]:
        return set(self._entries)

    def pairs(self) -> Iterator[tuple[int, int]]:
        for user_id, entry in self._entries.items():
            if user_id < entry.partner_id:
                yield user_id, entry.partner_id
