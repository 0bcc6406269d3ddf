"""Core service coordinating pairing, relaying, moderation and support."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, Optional

from .config import FilterConfig, ModerationConfig, SupportConfig
from .delivery import AbstractDeliverySink, DeliveryError, OutboundMessage
from .filtering import WordFilter
from .matching import MatchingQueue
from .models import (
    BanRequest,
    InboundEvent,
    InboundMessage,
    MatchResult,
    Paired,
    PaymentConfirmed,
    RelayOutcome,
    ReportRecord,
    ReportRequest,
    SessionRequest,
    StopRequest,
    UnbanRequest,
    User,
)
from .moderation import ModerationGate, ReportOutcome
from .payments import PaymentError
from .registry import UserRegistry
from .relay import RelayDispatcher
from .sessions import SessionTable
from .storage import AbstractStorage
from .support import SupportTierResolver, benefits_for, tier_of

LOGGER = logging.getLogger(__name__)

SUPPORT_TIPS = (
    "💡 Tip: Support us with /support to get priority matching!",
    "🌟 Love our bot? Consider supporting us with Telegram Stars!",
    "⚡ Supporters get faster matching and special features!",
    "💖 Help us grow by using /support - every Star counts!",
    "🚀 Want premium features? Check out /support!",
    "⭐ Share the love! Use /share to tell friends about us!",
)

CONNECTED = "💬 Connected! You can now chat anonymously. Use /stop to end chat."
CONNECTED_SUPPORTERS = (
    "💬✨ Connected with fellow supporter! You can now chat anonymously. "
    "Use /stop to end chat.\n\n🌟 Thank you both for supporting our bot!"
)
CONNECTED_AS_SUPPORTER = (
    "💬⭐ Connected! As a supporter, you get priority matching. Chat away!"
)
SEARCHING = "🔍 Looking for a partner... Please wait!"
SEARCHING_SUPPORTER = (
    "🔍⭐ Looking for a partner... Supporters get priority matching!\n\n"
    "✨ Thank you for your support!"
)
PARTNER_UNAVAILABLE = (
    "⏹ Your partner is no longer reachable. Use /chat to find a new partner!"
)
PARTNER_LEFT = "⏹ Your partner left the chat. Use /chat to find a new partner!"
PARTNER_REMOVED = (
    "⏹ Your partner was removed after multiple reports. "
    "Use /chat to find a new partner!"
)
BANNED_BY_REPORTS = "🚫 You have been banned due to multiple reports."
BANNED_BY_ADMIN = "🚫 You have been banned by an administrator."
UNBANNED = (
    "✅ You have been unbanned! You can now use the bot again. "
    "Use /chat to start chatting."
)


def random_support_tip() -> str:
    return random.choice(SUPPORT_TIPS)


@dataclass(slots=True)
class ChatRelayService:
    """State container owning the registry, queue and session table.

    Every mutation for an event finishes before the first outbound send, so the
    queue/session invariants hold whenever control returns to the event loop.
    """

    storage: AbstractStorage
    sink: AbstractDeliverySink
    filter_config: FilterConfig = field(default_factory=FilterConfig)
    moderation_config: ModerationConfig = field(default_factory=ModerationConfig)
    support_config: SupportConfig = field(default_factory=SupportConfig)
    admin_ids: set[int] = field(default_factory=set)
    registry: UserRegistry = field(init=False)
    queue: MatchingQueue = field(init=False)
    sessions: SessionTable = field(init=False)
    moderation: ModerationGate = field(init=False)
    dispatcher: RelayDispatcher = field(init=False)
    resolver: SupportTierResolver = field(init=False)

    def __post_init__(self) -> None:
        self.registry = UserRegistry(self.storage)
        self.queue = MatchingQueue(self.registry)
        self.sessions = SessionTable()
        word_filter = WordFilter.from_iterable(
            self.filter_config.banned_words, mask_char=self.filter_config.mask_char
        )
        self.moderation = ModerationGate(
            registry=self.registry,
            sessions=self.sessions,
            queue=self.queue,
            storage=self.storage,
            word_filter=word_filter,
            config=self.moderation_config,
        )
        self.dispatcher = RelayDispatcher(
            registry=self.registry,
            sessions=self.sessions,
            moderation=self.moderation,
            sink=self.sink,
            support_config=self.support_config,
        )
        self.resolver = SupportTierResolver(registry=self.registry, storage=self.storage)

    # Users ---------------------------------------------------------------

    def register(self, user_id: int, *, username: str | None = None) -> User:
        return self.registry.get_or_create(user_id, username=username)

    def get_user(self, user_id: int) -> Optional[User]:
        return self.registry.get(user_id)

    def toggle_safe_mode(self, user_id: int) -> User:
        return self.registry.toggle_safe_mode(user_id)

    def record_share(self, user_id: int) -> User:
        return self.registry.record_share(user_id)

    # Pairing -------------------------------------------------------------

    async def request_chat(self, user_id: int) -> MatchResult:
        user = self.registry.get_or_create(user_id)
        if not user.is_active:
            raise ValueError("🚫 You have been banned from using this bot.")
        if user_id in self.sessions:
            raise ValueError(
                "💬 You are already in a chat! Use /stop to end current chat first."
            )

        result = self.queue.request_match(user_id)
        if not isinstance(result, Paired):
            text = SEARCHING_SUPPORTER if user.supporter else f"{SEARCHING}\n\n{random_support_tip()}"
            await self._notify(user_id, text)
            return result

        partner_id = result.partner_id
        self.sessions.open(user_id, partner_id)
        LOGGER.info("Paired %s with %s", user_id, partner_id)
        await self._announce_pairing(user_id, partner_id)
        return result

    async def _announce_pairing(self, user_id: int, partner_id: int) -> None:
        user = self.registry.get_or_create(user_id)
        partner = self.registry.get_or_create(partner_id)
        if user.supporter and partner.supporter:
            texts = {partner_id: CONNECTED_SUPPORTERS, user_id: CONNECTED_SUPPORTERS}
        else:
            texts = {
                participant.user_id: (
                    CONNECTED_AS_SUPPORTER if participant.supporter else CONNECTED
                )
                for participant in (partner, user)
            }

        for recipient_id, text in texts.items():
            try:
                await self.sink.send(recipient_id, OutboundMessage.notice(text))
            except DeliveryError as exc:
                LOGGER.warning(
                    "Pairing notice to %s failed, closing session: %s", recipient_id, exc
                )
                other_id = self.sessions.close(recipient_id)
                if other_id is not None:
                    await self._notify(other_id, PARTNER_UNAVAILABLE)
                return

    async def stop_chat(self, user_id: int) -> Optional[int]:
        partner_id = self.sessions.close(user_id)
        was_waiting = self.queue.remove(user_id)

        if partner_id is not None:
            LOGGER.info("User %s ended chat with %s", user_id, partner_id)
            await self._notify(
                user_id,
                "⏹ Chat ended. Use /chat to start a new conversation!\n\n"
                + random_support_tip(),
            )
            await self._notify(partner_id, PARTNER_LEFT)
        elif was_waiting:
            await self._notify(user_id, "⏹ Search cancelled. Use /chat to try again!")
        else:
            await self._notify(user_id, "⏹ You are not in a chat currently.")
        return partner_id

    # Relay ---------------------------------------------------------------

    async def relay_message(self, message: InboundMessage) -> RelayOutcome:
        self.registry.get_or_create(message.user_id)
        return await self.dispatcher.relay(message.user_id, message)

    # Moderation ----------------------------------------------------------

    async def report_partner(self, user_id: int) -> ReportOutcome:
        partner_id = self.sessions.peer_of(user_id)
        if partner_id is None:
            raise ValueError("⏹ You are not in a chat currently.")

        outcome = self.moderation.report(user_id, partner_id)
        if outcome.duplicate:
            await self._notify(user_id, "ℹ️ You have already reported this user in this chat.")
            return outcome

        await self._notify(
            user_id,
            "✅ User reported successfully. Thank you for keeping our community safe!\n\n"
            + random_support_tip(),
        )
        if outcome.banned:
            await self._notify(partner_id, BANNED_BY_REPORTS)
            if outcome.former_partner_id is not None:
                await self._notify(outcome.former_partner_id, PARTNER_REMOVED)
        return outcome

    async def ban_user(self, user_id: int) -> User:
        user = self.registry.get(user_id)
        if user is None:
            raise ValueError("⏹ User not found.")
        if not user.is_active:
            raise ValueError(f"⚠️ User {user_id} is already banned.")

        user = self.registry.deactivate(user_id)
        self.queue.remove(user_id)
        partner_id = self.sessions.close(user_id)
        LOGGER.info("User %s banned by administrator", user_id)

        await self._notify(user_id, BANNED_BY_ADMIN)
        if partner_id is not None:
            await self._notify(partner_id, "⏹ Chat ended due to user restrictions.")
        return user

    async def unban_user(self, user_id: int) -> User:
        user = self.registry.get(user_id)
        if user is None:
            raise ValueError("⏹ User not found.")
        if user.is_active:
            raise ValueError(f"⚠️ User {user_id} is not banned.")

        user = self.registry.reactivate(user_id)
        LOGGER.info("User %s unbanned", user_id)
        await self._notify(user_id, UNBANNED)
        return user

    # Payments ------------------------------------------------------------

    async def confirm_payment(self, confirmation: PaymentConfirmed) -> Optional[User]:
        try:
            user = self.resolver.apply_payment(
                confirmation.user_id,
                confirmation.amount,
                confirmation.transaction_id,
            )
        except PaymentError as exc:
            LOGGER.warning(
                "Dropping payment confirmation for user %s: %s", confirmation.user_id, exc
            )
            return None

        tier = tier_of(user.cumulative_support)
        benefits = "\n".join(f"• ✅ {benefit}" for benefit in benefits_for(user.cumulative_support))
        await self._notify(
            user.user_id,
            "🎉 Payment Successful!\n\n"
            f"Thank you for your generous {confirmation.amount} Stars donation! {tier.badge}\n\n"
            f"🏆 Your Status: {tier.label}\n"
            f"💎 Total Support: {user.cumulative_support} Stars\n"
            f"⚡ Benefits Unlocked:\n{benefits}\n\n"
            "Ready to chat with priority matching? Use /chat",
        )

        admin_text = (
            "💰 Payment Received!\n\n"
            f"🆔 ID: {user.user_id}\n"
            f"💳 Amount: {confirmation.amount} Stars ⭐\n"
            f"💎 Total Support: {user.cumulative_support} Stars\n"
            f"🏆 Tier: {tier.label} {tier.badge}\n"
            f"🧾 Transaction: {confirmation.transaction_id}"
        )
        for admin_id in sorted(self.admin_ids):
            await self._notify(admin_id, admin_text)
        return user

    # Events --------------------------------------------------------------

    async def handle_event(self, event: InboundEvent) -> object:
        if isinstance(event, SessionRequest):
            return await self.request_chat(event.user_id)
        if isinstance(event, StopRequest):
            return await self.stop_chat(event.user_id)
        if isinstance(event, InboundMessage):
            return await self.relay_message(event)
        if isinstance(event, ReportRequest):
            return await self.report_partner(event.user_id)
        if isinstance(event, PaymentConfirmed):
            return await self.confirm_payment(event)
        if isinstance(event, BanRequest):
            return await self.ban_user(event.user_id)
        if isinstance(event, UnbanRequest):
            return await self.unban_user(event.user_id)
        raise TypeError(f"Unsupported event: {event!r}")

    # Admin views ---------------------------------------------------------

    async def broadcast(self, text: str) -> tuple[int, int]:
        message = (text or "").strip()
        if not message:
            raise ValueError(
                "⏹ Please provide a message to broadcast. Usage: /broadcast <message>"
            )
        sent = failed = 0
        for user in self.registry.list_users():
            if await self._notify(user.user_id, f"📢 Announcement:\n\n{message}"):
                sent += 1
            else:
                failed += 1
        LOGGER.info("Broadcast finished: %s sent, %s failed", sent, failed)
        return sent, failed

    def get_statistics(self) -> Dict[str, int]:
        users = self.registry.list_users()
        return {
            "users": len(users),
            "supporters": sum(1 for user in users if user.supporter),
            "banned": sum(1 for user in users if not user.is_active),
            "active_chats": len(self.sessions),
            "waiting": len(self.queue),
            "reports": self.storage.count_reports(),
            "total_support": sum(user.cumulative_support for user in users),
            "total_shares": sum(user.total_shares for user in users),
        }

    def list_supporters(self) -> list[User]:
        return self.registry.list_supporters()

    def list_banned(self) -> list[User]:
        return self.registry.list_banned()

    def list_reports(self) -> Dict[int, list[ReportRecord]]:
        grouped: Dict[int, list[ReportRecord]] = {}
        for report in self.storage.list_reports():
            grouped.setdefault(report.reported_id, []).append(report)
        return grouped

    async def _notify(self, user_id: int, text: str) -> bool:
        try:
            await self.sink.send(user_id, OutboundMessage.notice(text))
        except DeliveryError as exc:
            LOGGER.warning("Failed to notify %s: %s", user_id, exc)
            return False
        return True
