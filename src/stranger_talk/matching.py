"""Waiting queue that pairs users, giving supporters priority."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from .models import MatchResult, Paired, Queued
from .registry import UserRegistry


@dataclass(slots=True)
class MatchingQueue:
    """FIFO queue of users waiting for a partner.

    Supporters prefer other supporters but fall back to anyone waiting, and an
    unmatched supporter is placed ahead of every queued non-supporter. Banned
    users are never handed out as partners.
    """

    registry: UserRegistry
    _waiting: list[int] = field(default_factory=list)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._waiting

    def __len__(self) -> int:
        return len(self._waiting)

    def waiting(self) -> list[int]:
        return list(self._waiting)

    def remove(self, user_id: int) -> bool:
        try:
            self._waiting.remove(user_id)
        except ValueError:
            return False
        return True

    def request_match(self, user_id: int) -> MatchResult:
        self.remove(user_id)
        is_supporter = self.registry.is_supporter(user_id)

        if is_supporter:
            partner_id = self._pop_first(self.registry.is_supporter)
            if partner_id is not None:
                return Paired(partner_id)

        partner_id = self._pop_first(lambda _candidate: True)
        if partner_id is not None:
            return Paired(partner_id)

        if is_supporter:
            self._waiting.insert(self._supporter_prefix_length(), user_id)
        else:
            self._waiting.append(user_id)
        return Queued(priority=is_supporter)

    def _pop_first(self, predicate: Callable[[int], bool]) -> Optional[int]:
        for index, candidate in enumerate(self._waiting):
            if predicate(candidate) and not self.registry.is_banned(candidate):
                return self._waiting.pop(index)
        return None

    def _supporter_prefix_length(self) -> int:
        count = 0
        for candidate in self._waiting:
            if not self.registry.is_supporter(candidate):
                break
            count += 1
        return count
