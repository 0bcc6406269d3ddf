"""User registry: the single owner of per-user state."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .models import User
from .storage import AbstractStorage


@dataclass(slots=True)
class UserRegistry:
    storage: AbstractStorage

    def get(self, user_id: int) -> Optional[User]:
        return self.storage.get_user(user_id)

    def get_or_create(self, user_id: int, *, username: str | None = None) -> User:
        user = self.storage.get_user(user_id)
        if user is None:
            user = User(user_id=user_id, username=username)
            self.storage.save_user(user)
            return user
        if username is not None and username != user.username:
            user.username = username
            self.storage.save_user(user)
        return user

    def save(self, user: User) -> None:
        self.storage.save_user(user)

    def is_supporter(self, user_id: int) -> bool:
        user = self.storage.get_user(user_id)
        return bool(user and user.supporter)

    def is_banned(self, user_id: int) -> bool:
        user = self.storage.get_user(user_id)
        return user is not None and not user.is_active

    def set_safe_mode(self, user_id: int, enabled: bool) -> User:
        user = self.get_or_create(user_id)
        user.safe_mode = enabled
        self.storage.save_user(user)
        return user

    def toggle_safe_mode(self, user_id: int) -> User:
        user = self.get_or_create(user_id)
        return self.set_safe_mode(user_id, not user.safe_mode)

    def deactivate(self, user_id: int) -> User:
        user = self.get_or_create(user_id)
        user.is_active = False
        self.storage.save_user(user)
        return user

    def reactivate(self, user_id: int) -> User:
        user = self.get_or_create(user_id)
        user.is_active = True
        user.report_count = 0
        self.storage.save_user(user)
        return user

    def increment_reports(self, user_id: int) -> User:
        user = self.get_or_create(user_id)
        user.report_count += 1
        self.storage.save_user(user)
        return user

    def credit_support(self, user_id: int, amount: int, at: datetime | None = None) -> User:
        user = self.get_or_create(user_id)
        user.add_support(amount, at)
        self.storage.save_user(user)
        return user

    def record_share(self, user_id: int) -> User:
        user = self.get_or_create(user_id)
        user.total_shares += 1
        self.storage.save_user(user)
        return user

    def list_users(self) -> list[User]:
        return list(self.storage.list_users())

    def list_supporters(self) -> list[User]:
        supporters = [user for user in self.storage.list_users() if user.supporter]
        supporters.sort(key=lambda u: u.cumulative_support, reverse=True)
        return supporters

    def list_banned(self) -> list[User]:
        return [user for user in self.storage.list_users() if not user.is_active]
