"""Shared fixtures for the relay core tests."""

from __future__ import annotations

import pytest

from stranger_talk.config import ModerationConfig
from stranger_talk.delivery import AbstractDeliverySink, DeliveryError, OutboundMessage
from stranger_talk.services import ChatRelayService
from stranger_talk.storage import InMemoryStorage


class RecordingSink(AbstractDeliverySink):
    """Delivery sink that records messages and fails for unreachable users."""

    def __init__(self) -> None:
        self.sent: list[tuple[int, OutboundMessage]] = []
        self.unreachable: set[int] = set()

    async def send(self, user_id: int, message: OutboundMessage) -> None:
        if user_id in self.unreachable:
            raise DeliveryError(f"user {user_id} blocked the bot")
        self.sent.append((user_id, message))

    def messages_for(self, user_id: int) -> list[OutboundMessage]:
        return [message for recipient, message in self.sent if recipient == user_id]

    def texts_for(self, user_id: int) -> list[str]:
        return [message.text or "" for message in self.messages_for(user_id)]

    def clear(self) -> None:
        self.sent.clear()


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture()
def service(storage: InMemoryStorage, sink: RecordingSink) -> ChatRelayService:
    return ChatRelayService(
        storage=storage,
        sink=sink,
        moderation_config=ModerationConfig(report_threshold=3),
        admin_ids={999},
    )
