"""Outbound delivery boundary used by the relay core."""

from __future__ import annotations

from dataclasses import dataclass

from .models import MessageKind


class DeliveryError(RuntimeError):
    """Raised by a sink when the recipient cannot be reached."""


@dataclass(slots=True, frozen=True)
class OutboundMessage:
    kind: MessageKind
    text: str | None = None
    file_id: str | None = None
    caption: str | None = None

    @classmethod
    def notice(cls, text: str) -> "OutboundMessage":
        return cls(kind=MessageKind.TEXT, text=text)


class AbstractDeliverySink:
    """Interface for sending rendered content to a user."""

    async def send(self, user_id: int, message: OutboundMessage) -> None:
        raise NotImplementedError
