"""Relay dispatcher deciding how each inbound message reaches the partner."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .config import SupportConfig
from .delivery import AbstractDeliverySink, DeliveryError, OutboundMessage
from .models import InboundMessage, MessageKind, RelayOutcome
from .moderation import ModerationGate
from .registry import UserRegistry
from .sessions import SessionTable

LOGGER = logging.getLogger(__name__)

SUPPORTER_ANNOTATION = "⭐ From Premium Supporter"
FILTERED_WARNING = "⚠️ Your message contained inappropriate content and was filtered."
DELIVERY_FAILED_NOTICE = "⏹ Failed to send message. Your partner might have left."
RESTRICTED_NOTICE = "⏹ Chat ended due to user restrictions."

# kind -> (emoji, placeholder label, sender-facing noun)
_MEDIA_LABELS = {
    MessageKind.PHOTO: ("📷", "Photo", "photo"),
    MessageKind.VIDEO: ("🎥", "Video", "video"),
    MessageKind.DOCUMENT: ("📄", "Document", "document"),
    MessageKind.AUDIO: ("🎵", "Audio", "audio"),
    MessageKind.VOICE: ("🎤", "Voice message", "voice message"),
    MessageKind.STICKER: ("😀", "Sticker", "sticker"),
}


def safe_mode_placeholder(kind: MessageKind) -> str:
    emoji, label, _noun = _MEDIA_LABELS[kind]
    return f"{emoji} [{label} blocked by Safe Mode]"


def safe_mode_sender_notice(kind: MessageKind) -> str:
    emoji, _label, noun = _MEDIA_LABELS[kind]
    return f"{emoji} Your {noun} was blocked by your partner's Safe Mode."


@dataclass(slots=True)
class RelayDispatcher:
    registry: UserRegistry
    sessions: SessionTable
    moderation: ModerationGate
    sink: AbstractDeliverySink
    support_config: SupportConfig

    async def relay(self, sender_id: int, message: InboundMessage) -> RelayOutcome:
        partner_id = self.sessions.peer_of(sender_id)
        if partner_id is None:
            return RelayOutcome.NO_SESSION

        sender = self.registry.get_or_create(sender_id)
        partner = self.registry.get_or_create(partner_id)
        if not sender.is_active or not partner.is_active:
            self.sessions.close(sender_id)
            for user in (sender, partner):
                if user.is_active:
                    await self._notify(user.user_id, RESTRICTED_NOTICE)
            return RelayOutcome.NO_SESSION

        annotate = sender.cumulative_support >= self.support_config.annotation_threshold
        kind = message.kind

        if kind is MessageKind.TEXT:
            result = self.moderation.filter(message.text or "")
            text = result.display_text
            if annotate:
                text = f"{text}\n\n{SUPPORTER_ANNOTATION}"
            if not await self._deliver(sender_id, partner_id, OutboundMessage.notice(text)):
                return RelayOutcome.DELIVERY_FAILED
            if not result.clean:
                await self._notify(sender_id, FILTERED_WARNING)
            return RelayOutcome.DELIVERED

        if kind in _MEDIA_LABELS:
            if partner.safe_mode:
                placeholder = OutboundMessage.notice(safe_mode_placeholder(kind))
                if not await self._deliver(sender_id, partner_id, placeholder):
                    return RelayOutcome.DELIVERY_FAILED
                await self._notify(sender_id, safe_mode_sender_notice(kind))
                return RelayOutcome.BLOCKED_BY_SAFE_MODE

            media = OutboundMessage(
                kind=kind, file_id=message.file_id, caption=message.caption
            )
            if not await self._deliver(sender_id, partner_id, media):
                return RelayOutcome.DELIVERY_FAILED
            if kind is MessageKind.STICKER and annotate:
                annotation = OutboundMessage.notice(SUPPORTER_ANNOTATION)
                if not await self._deliver(sender_id, partner_id, annotation):
                    return RelayOutcome.DELIVERY_FAILED
            return RelayOutcome.DELIVERED

        raise ValueError(f"Unsupported message kind: {kind!r}")

    async def _deliver(
        self, sender_id: int, partner_id: int, message: OutboundMessage
    ) -> bool:
        try:
            await self.sink.send(partner_id, message)
        except DeliveryError as exc:
            LOGGER.warning(
                "Failed to relay %s from %s to %s: %s",
                message.kind.value,
                sender_id,
                partner_id,
                exc,
            )
            self.sessions.close(sender_id)
            await self._notify(sender_id, DELIVERY_FAILED_NOTICE)
            return False
        return True

    async def _notify(self, user_id: int, text: str) -> bool:
        try:
            await self.sink.send(user_id, OutboundMessage.notice(text))
        except DeliveryError as exc:
            LOGGER.warning("Failed to notify %s: %s", user_id, exc)
            return False
        return True
