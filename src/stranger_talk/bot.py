"""Executable Telegram bot wiring for the StrangerTalk service."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from telegram import Bot, InlineKeyboardButton, InlineKeyboardMarkup, LabeledPrice, Update
from telegram.error import TelegramError
from telegram.ext import (
    AIORateLimiter,
    Application,
    ApplicationBuilder,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    PreCheckoutQueryHandler,
    filters,
)

from dotenv import load_dotenv

from .config import FilterConfig, ModerationConfig, SupportConfig
from .delivery import AbstractDeliverySink, DeliveryError, OutboundMessage
from .health import start_health_server
from .models import InboundMessage, MessageKind, PaymentConfirmed
from .payments import (
    STARS_CURRENCY,
    SUPPORT_PACKAGES,
    PaymentError,
    build_invoice_payload,
    package_for,
    parse_invoice_payload,
)
from .services import ChatRelayService, random_support_tip
from .storage import AbstractStorage, InMemoryStorage, JsonStorage
from .support import tier_of

LOGGER = logging.getLogger(__name__)


load_dotenv()


def _parse_int_env(name: str) -> int | None:
    raw = os.environ.get(name)
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        LOGGER.warning("Environment variable %s must be an integer (got %r)", name, raw)
        return None


def _parse_bool_env(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _parse_admin_ids(raw: str | None) -> set[int]:
    if not raw:
        return set()
    admin_ids: set[int] = set()
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        try:
            admin_ids.add(int(chunk))
        except ValueError:
            LOGGER.warning("Skipping invalid admin id %r", chunk)
    return admin_ids


ADMIN_USER_IDS: set[int] = _parse_admin_ids(os.environ.get("ADMIN_USER_IDS"))
JSON_STORAGE_PATH: str | None = os.environ.get("JSON_STORAGE_PATH")
DEFAULT_JSON_STORAGE_PATH = Path.home() / ".stranger_talk" / "storage.json"
BOT_USERNAME: str = os.environ.get("BOT_USERNAME", "YourBotUsername")
CHANNEL_LINK: str = os.environ.get("CHANNEL_LINK", "https://t.me/yourchannel")
GROUP_LINK: str = os.environ.get("GROUP_LINK", "https://t.me/yourgroup")
HEALTH_HOST: str = os.environ.get("HEALTH_HOST", "0.0.0.0")
HEALTH_PORT: int | None = _parse_int_env("HEALTH_PORT")
DEDUPE_REPORTS: bool = _parse_bool_env("DEDUPE_REPORTS_PER_SESSION")

LIST_LIMIT = 10
BANNED_LIST_LIMIT = 15
ACCESS_DENIED = "⏹ Access denied. Admin only command."


class TelegramDeliverySink(AbstractDeliverySink):
    """Delivers outbound messages through the Telegram Bot API."""

    def __init__(self, bot: Bot) -> None:
        self._bot = bot

    async def send(self, user_id: int, message: OutboundMessage) -> None:
        kind = message.kind
        try:
            if kind is MessageKind.TEXT:
                await self._bot.send_message(chat_id=user_id, text=message.text or "")
            elif kind is MessageKind.PHOTO:
                await self._bot.send_photo(
                    chat_id=user_id, photo=message.file_id, caption=message.caption
                )
            elif kind is MessageKind.VIDEO:
                await self._bot.send_video(
                    chat_id=user_id, video=message.file_id, caption=message.caption
                )
            elif kind is MessageKind.DOCUMENT:
                await self._bot.send_document(
                    chat_id=user_id, document=message.file_id, caption=message.caption
                )
            elif kind is MessageKind.AUDIO:
                await self._bot.send_audio(
                    chat_id=user_id, audio=message.file_id, caption=message.caption
                )
            elif kind is MessageKind.VOICE:
                await self._bot.send_voice(
                    chat_id=user_id, voice=message.file_id, caption=message.caption
                )
            elif kind is MessageKind.STICKER:
                await self._bot.send_sticker(chat_id=user_id, sticker=message.file_id)
            else:
                raise ValueError(f"Unsupported message kind: {kind!r}")
        except TelegramError as exc:
            raise DeliveryError(f"Telegram rejected delivery to {user_id}: {exc}") from exc


def message_from_update(update: Update) -> InboundMessage | None:
    message = update.effective_message
    tg_user = update.effective_user
    if message is None or tg_user is None:
        return None
    if message.text:
        if message.text.startswith("/"):
            return None
        return InboundMessage(tg_user.id, MessageKind.TEXT, text=message.text)
    if message.photo:
        return InboundMessage(
            tg_user.id,
            MessageKind.PHOTO,
            file_id=message.photo[-1].file_id,
            caption=message.caption,
        )
    media = (
        (message.video, MessageKind.VIDEO),
        (message.document, MessageKind.DOCUMENT),
        (message.audio, MessageKind.AUDIO),
        (message.voice, MessageKind.VOICE),
        (message.sticker, MessageKind.STICKER),
    )
    for attachment, kind in media:
        if attachment is not None:
            caption = None if kind is MessageKind.STICKER else message.caption
            return InboundMessage(
                tg_user.id, kind, file_id=attachment.file_id, caption=caption
            )
    return None


def build_storage() -> AbstractStorage:
    storage_path = Path(JSON_STORAGE_PATH) if JSON_STORAGE_PATH else DEFAULT_JSON_STORAGE_PATH
    try:
        return JsonStorage(storage_path)
    except OSError as exc:
        LOGGER.error(
            "Failed to initialise JSON storage at %s: %s", storage_path, exc
        )
    return InMemoryStorage()


def build_service(bot: Bot) -> ChatRelayService:
    return ChatRelayService(
        storage=build_storage(),
        sink=TelegramDeliverySink(bot),
        filter_config=FilterConfig(),
        moderation_config=ModerationConfig(dedupe_reports_per_session=DEDUPE_REPORTS),
        support_config=SupportConfig(),
        admin_ids=set(ADMIN_USER_IDS),
    )


def ensure_dependencies(application: Application) -> ChatRelayService:
    service = application.bot_data.get("service")
    if service is None:
        service = build_service(application.bot)
        application.bot_data["service"] = service
    return service


def get_service(context: ContextTypes.DEFAULT_TYPE) -> ChatRelayService:
    return ensure_dependencies(context.application)


def is_admin_id(user_id: int | None) -> bool:
    return user_id is not None and user_id in ADMIN_USER_IDS


async def _reply(update: Update, text: str, **kwargs) -> None:
    message = update.effective_message
    if message is not None:
        await message.reply_text(text, **kwargs)


async def _require_admin(update: Update) -> bool:
    user_id = update.effective_user.id if update.effective_user else None
    if is_admin_id(user_id):
        return True
    await _reply(update, ACCESS_DENIED)
    return False


def _parse_target_id(context: ContextTypes.DEFAULT_TYPE) -> int | None:
    if not context.args:
        return None
    try:
        return int(context.args[0])
    except ValueError:
        return None


# Keyboards -----------------------------------------------------------------


def main_menu_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [
            [
                InlineKeyboardButton("💬 Start Chatting", callback_data="action:chat"),
                InlineKeyboardButton("⭐ Support Us", callback_data="action:support"),
            ],
            [
                InlineKeyboardButton("📢 Channel", url=CHANNEL_LINK),
                InlineKeyboardButton("👥 Group", url=GROUP_LINK),
            ],
            [InlineKeyboardButton("📤 Share Bot", callback_data="action:share")],
        ]
    )


def support_keyboard() -> InlineKeyboardMarkup:
    rows: list[list[InlineKeyboardButton]] = []
    row: list[InlineKeyboardButton] = []
    for amount in SUPPORT_PACKAGES:
        label = f"{tier_of(amount).badge} {amount} Stars"
        row.append(InlineKeyboardButton(label, callback_data=f"donate:{amount}"))
        if len(row) == 2:
            rows.append(row)
            row = []
    if row:
        rows.append(row)
    rows.append([InlineKeyboardButton("📤 Share Bot Instead", callback_data="action:share")])
    return InlineKeyboardMarkup(rows)


def safe_mode_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [
            [
                InlineKeyboardButton("🔒 Toggle Safe Mode", callback_data="safemode:toggle"),
                InlineKeyboardButton("📤 Share Bot", callback_data="action:share"),
            ]
        ]
    )


def _safe_mode_text(enabled: bool) -> str:
    status = "ON" if enabled else "OFF"
    return (
        "🔒 Safe Mode Settings\n\n"
        f"Current Status: {status}\n\n"
        "Safe Mode blocks ALL media from strangers (photos, videos, documents, "
        "audio, voice messages, stickers).\n\n"
        "• ON = Only text messages allowed (safest)\n"
        "• OFF = All media types allowed\n\n"
        f"{random_support_tip()}"
    )


# User commands -------------------------------------------------------------


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    service = get_service(context)
    tg_user = update.effective_user
    if tg_user is None:
        return
    user = service.register(tg_user.id, username=tg_user.username)
    if user.supporter:
        text = (
            "🎉 Welcome back, Premium User!\n\n"
            f"⭐ Thank you for your {user.cumulative_support} Stars support!\n"
            "🚀 You have priority matching and exclusive features!\n\n"
            "💬 Ready to chat? Use /chat to get matched faster!"
        )
    else:
        text = (
            "🎉 Welcome to StrangerTalk Bot!\n"
            "Stay anonymous, safe & have fun chatting with strangers worldwide.\n\n"
            "💬 Tap /chat to find someone to talk with!\n"
            "🔒 Use /safemode to control media filtering\n"
            "📊 Check /premium for exclusive features\n\n"
            f"{random_support_tip()}"
        )
    await _reply(update, text, reply_markup=main_menu_keyboard())


async def chat(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    service = get_service(context)
    tg_user = update.effective_user
    if tg_user is None:
        return
    try:
        await service.request_chat(tg_user.id)
    except ValueError as exc:
        await _reply(update, str(exc))


async def stop(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    service = get_service(context)
    if update.effective_user is not None:
        await service.stop_chat(update.effective_user.id)


async def report(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    service = get_service(context)
    if update.effective_user is None:
        return
    try:
        await service.report_partner(update.effective_user.id)
    except ValueError as exc:
        await _reply(update, str(exc))


async def share(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    service = get_service(context)
    tg_user = update.effective_user
    if tg_user is None:
        return
    service.record_share(tg_user.id)
    share_url = f"https://t.me/{BOT_USERNAME}?start=shared_by_{tg_user.id}"
    await _reply(
        update,
        "📤 Share StrangerTalk Bot!\n\n"
        "Help us grow our community! Share the bot with your friends and family.\n\n"
        "🎁 The more users join, the faster matching becomes for everyone!\n\n"
        f"📋 Copy this link to share:\n{share_url}\n\n"
        f"{random_support_tip()}",
    )


async def support(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _reply(
        update,
        "⭐ Support Our Bot!\n\n"
        "Your donations with Telegram Stars help us:\n"
        "• Keep the service free for everyone\n"
        "• Add new features and improvements\n"
        "• Maintain fast, reliable servers\n"
        "• Create a safe community\n\n"
        "Choose your support level:\n\n"
        "💡 All supporters get premium features instantly!",
        reply_markup=support_keyboard(),
    )


async def premium(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    service = get_service(context)
    tg_user = update.effective_user
    if tg_user is None:
        return
    user = service.register(tg_user.id, username=tg_user.username)
    if not user.supporter:
        await _reply(
            update,
            "🌟 Premium Features\n\n"
            "Support our bot with Telegram Stars and unlock:\n"
            "⚡ Priority matching: skip to the front of the waiting queue\n"
            "👑 Supporter badge on your messages (50+ Stars)\n"
            "🤝 Supporter-to-supporter matching\n\n"
            "Ready to upgrade? Use /support to donate with Telegram Stars!\n\n"
            f"{random_support_tip()}",
            reply_markup=support_keyboard(),
        )
        return

    tier = tier_of(user.cumulative_support)
    last_support = (
        user.last_support_at.strftime("%Y-%m-%d") if user.last_support_at else "-"
    )
    await _reply(
        update,
        "👑 Your Premium Status\n\n"
        f"✅ {tier.label} {tier.badge}\n"
        f"⭐ Total Support: {user.cumulative_support} Stars\n"
        f"📅 Last Support: {last_support}\n"
        f"📤 Total Shares: {user.total_shares}\n\n"
        "Thank you for supporting StrangerTalk Bot! 💖\n\n"
        "Want to support more? Use /support",
        reply_markup=support_keyboard(),
    )


async def safemode(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    service = get_service(context)
    tg_user = update.effective_user
    if tg_user is None:
        return
    user = service.register(tg_user.id, username=tg_user.username)
    await _reply(update, _safe_mode_text(user.safe_mode), reply_markup=safe_mode_keyboard())


# Callbacks -----------------------------------------------------------------


async def handle_menu_action(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    assert query is not None
    action = query.data.split(":", 1)[1]
    if action not in {"chat", "support", "share"}:
        await query.answer("Unknown action", show_alert=True)
        return
    await query.answer()
    if action == "chat":
        await chat(update, context)
    elif action == "support":
        await support(update, context)
    else:
        await share(update, context)


async def handle_safe_mode_toggle(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    service = get_service(context)
    query = update.callback_query
    assert query is not None
    user = service.toggle_safe_mode(query.from_user.id)
    await query.answer(f"Safe Mode: {'ON' if user.safe_mode else 'OFF'}")
    await query.message.edit_text(
        _safe_mode_text(user.safe_mode), reply_markup=safe_mode_keyboard()
    )


async def handle_donation_selection(
    update: Update, context: ContextTypes.DEFAULT_TYPE
) -> None:
    query = update.callback_query
    assert query is not None
    try:
        package = package_for(int(query.data.split(":", 1)[1]))
    except (ValueError, PaymentError):
        await query.answer("Unknown support package", show_alert=True)
        return

    try:
        await context.bot.send_invoice(
            chat_id=query.message.chat_id,
            title=package.title,
            description=package.invoice_description,
            payload=build_invoice_payload(query.from_user.id, package.amount),
            provider_token="",
            currency=STARS_CURRENCY,
            prices=[LabeledPrice(f"{package.amount} Telegram Stars", package.amount)],
        )
    except TelegramError as exc:
        LOGGER.error("Failed to send invoice to %s: %s", query.from_user.id, exc)
        await query.answer("❌ Payment temporarily unavailable", show_alert=True)
        return
    await query.answer(f"💫 Invoice sent for {package.amount} Stars!")


async def handle_pre_checkout(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.pre_checkout_query
    assert query is not None
    try:
        parse_invoice_payload(
            query.invoice_payload,
            expected_user_id=query.from_user.id,
            total_amount=query.total_amount,
        )
    except PaymentError as exc:
        LOGGER.warning("Pre-checkout rejected for %s: %s", query.from_user.id, exc)
        await query.answer(ok=False, error_message="Invalid payment data")
        return
    LOGGER.info(
        "Pre-checkout approved: user %s - %s Stars", query.from_user.id, query.total_amount
    )
    await query.answer(ok=True)


async def handle_successful_payment(
    update: Update, context: ContextTypes.DEFAULT_TYPE
) -> None:
    service = get_service(context)
    message = update.effective_message
    tg_user = update.effective_user
    if message is None or tg_user is None or message.successful_payment is None:
        return
    payment = message.successful_payment
    try:
        parse_invoice_payload(
            payment.invoice_payload,
            expected_user_id=tg_user.id,
            total_amount=payment.total_amount,
        )
    except PaymentError as exc:
        LOGGER.warning("Dropping successful payment from %s: %s", tg_user.id, exc)
        await _reply(
            update,
            "Payment received but there was an error processing your supporter "
            "status. Please contact an admin.",
        )
        return

    user = await service.confirm_payment(
        PaymentConfirmed(
            user_id=tg_user.id,
            amount=payment.total_amount,
            transaction_id=payment.telegram_payment_charge_id,
        )
    )
    if user is None:
        await _reply(
            update,
            "Payment received but there was an error processing your supporter "
            "status. Please contact an admin.",
        )


async def handle_user_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    inbound = message_from_update(update)
    if inbound is None:
        return
    service = get_service(context)
    await service.relay_message(inbound)


# Admin commands ------------------------------------------------------------


async def admin_stats(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _require_admin(update):
        return
    service = get_service(context)
    stats = service.get_statistics()
    users = stats["users"]
    avg_shares = stats["total_shares"] / users if users else 0.0
    usd = service.support_config.convert_stars_to_usd(stats["total_support"])
    await _reply(
        update,
        "📊 Bot Statistics:\n\n"
        "👥 Users:\n"
        f"• Total Users: {users}\n"
        f"• Supporters: {stats['supporters']}\n"
        f"• Banned: {stats['banned']}\n\n"
        "💬 Activity:\n"
        f"• Current Chats: {stats['active_chats']}\n"
        f"• Waiting Queue: {stats['waiting']}\n"
        f"• Total Reports: {stats['reports']}\n\n"
        "💰 Revenue:\n"
        f"• Total Donations: {stats['total_support']} Stars ⭐\n"
        f"• Total Earnings: ${usd:.2f} USD\n\n"
        "📤 Growth:\n"
        f"• Total Shares: {stats['total_shares']}\n"
        f"• Avg. Shares/User: {avg_shares:.1f}",
    )


async def admin_users(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _require_admin(update):
        return
    service = get_service(context)
    recent = sorted(service.registry.list_users(), key=lambda u: u.joined_at, reverse=True)
    lines = [f"👥 Recent Users (Last {LIST_LIMIT}):", ""]
    for index, user in enumerate(recent[:LIST_LIMIT], start=1):
        status = "✅" if user.is_active else "🚫"
        badge = "⭐" if user.supporter else ""
        lines.append(
            f"{index}. {status}{badge} ID: {user.user_id} ({user.joined_at:%Y-%m-%d})"
        )
    await _reply(update, "\n".join(lines))


async def admin_reports(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _require_admin(update):
        return
    service = get_service(context)
    grouped = service.list_reports()
    if not grouped:
        await _reply(update, "📋 No reports found.")
        return
    lines = ["🚨 Flagged Users:", ""]
    for reported_id, records in list(grouped.items())[:LIST_LIMIT]:
        user = service.get_user(reported_id)
        status = "✅" if user and user.is_active else "🚫"
        latest = max(record.created_at for record in records)
        lines.append(f"{status} User ID: {reported_id}")
        lines.append(f"Reports: {len(records)}")
        lines.append(f"Latest: {latest:%Y-%m-%d}")
        lines.append("")
    await _reply(update, "\n".join(lines).rstrip())


async def admin_broadcast(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _require_admin(update):
        return
    service = get_service(context)
    text = " ".join(context.args or [])
    try:
        sent, failed = await service.broadcast(text)
    except ValueError as exc:
        await _reply(update, str(exc))
        return
    await _reply(update, f"✅ Broadcast completed!\nSuccess: {sent}\nFailed: {failed}")


async def admin_ban(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _require_admin(update):
        return
    target_id = _parse_target_id(context)
    if target_id is None:
        await _reply(update, "⏹ Please provide a user ID. Usage: /ban <user_id>")
        return
    service = get_service(context)
    try:
        await service.ban_user(target_id)
    except ValueError as exc:
        await _reply(update, str(exc))
        return
    await _reply(update, f"✅ User {target_id} has been banned.")


async def admin_unban(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _require_admin(update):
        return
    target_id = _parse_target_id(context)
    if target_id is None:
        await _reply(update, "⏹ Please provide a user ID. Usage: /unban <user_id>")
        return
    service = get_service(context)
    try:
        await service.unban_user(target_id)
    except ValueError as exc:
        await _reply(update, str(exc))
        return
    await _reply(update, f"✅ User {target_id} has been unbanned.")


async def admin_supporters(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _require_admin(update):
        return
    service = get_service(context)
    supporters = service.list_supporters()
    if not supporters:
        await _reply(update, "💫 No supporters yet. Share the /support command to get donations!")
        return
    lines = [f"💖 Bot Supporters ({len(supporters)}):", ""]
    for index, user in enumerate(supporters[:LIST_LIMIT], start=1):
        last_support = (
            user.last_support_at.strftime("%Y-%m-%d") if user.last_support_at else "-"
        )
        lines.append(f"{index}. ID: {user.user_id}")
        lines.append(f"   ⭐ {user.cumulative_support} Stars")
        lines.append(f"   📅 {last_support}")
        lines.append(f"   📤 Shares: {user.total_shares}")
        lines.append("")
    if len(supporters) > LIST_LIMIT:
        lines.append(f"... and {len(supporters) - LIST_LIMIT} more supporters")
        lines.append("")
    total = sum(user.cumulative_support for user in supporters)
    usd = service.support_config.convert_stars_to_usd(total)
    lines.append(f"💰 Total Support: {total} Stars ⭐")
    lines.append(f"💵 Estimated Revenue: ${usd:.2f} USD")
    await _reply(update, "\n".join(lines))


async def admin_banned(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _require_admin(update):
        return
    service = get_service(context)
    banned = service.list_banned()
    if not banned:
        await _reply(update, "✅ No banned users found.")
        return
    lines = ["🚫 Banned Users:", ""]
    for index, user in enumerate(banned[:BANNED_LIST_LIMIT], start=1):
        lines.append(f"{index}. ID: {user.user_id}")
        lines.append(f"   Reports: {user.report_count}")
        lines.append(f"   Joined: {user.joined_at:%Y-%m-%d}")
        lines.append(f"   Unban: /unban {user.user_id}")
        lines.append("")
    if len(banned) > BANNED_LIST_LIMIT:
        lines.append(f"... and {len(banned) - BANNED_LIST_LIMIT} more banned users")
    await _reply(update, "\n".join(lines).rstrip())


# Application lifecycle -----------------------------------------------------


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    LOGGER.error("Error while handling update %r", update, exc_info=context.error)


async def on_startup(application: Application) -> None:
    service = ensure_dependencies(application)
    if HEALTH_PORT is not None:
        application.bot_data["health_runner"] = await start_health_server(
            service, host=HEALTH_HOST, port=HEALTH_PORT
        )


async def on_shutdown(application: Application) -> None:
    runner = application.bot_data.pop("health_runner", None)
    if runner is not None:
        await runner.cleanup()


def main() -> None:
    token = os.environ.get("TELEGRAM_BOT_TOKEN")
    if not token:
        raise RuntimeError("TELEGRAM_BOT_TOKEN environment variable is required")
    application = (
        ApplicationBuilder()
        .token(token)
        .rate_limiter(AIORateLimiter())
        .post_init(on_startup)
        .post_shutdown(on_shutdown)
        .build()
    )

    application.add_handler(CommandHandler("start", start))
    application.add_handler(CommandHandler("chat", chat))
    application.add_handler(CommandHandler("stop", stop))
    application.add_handler(CommandHandler("share", share))
    application.add_handler(CommandHandler("support", support))
    application.add_handler(CommandHandler("premium", premium))
    application.add_handler(CommandHandler("safemode", safemode))
    application.add_handler(CommandHandler("report", report))
    application.add_handler(CommandHandler("stats", admin_stats))
    application.add_handler(CommandHandler("users", admin_users))
    application.add_handler(CommandHandler("reports", admin_reports))
    application.add_handler(CommandHandler("broadcast", admin_broadcast))
    application.add_handler(CommandHandler("ban", admin_ban))
    application.add_handler(CommandHandler("unban", admin_unban))
    application.add_handler(CommandHandler("supporters", admin_supporters))
    application.add_handler(CommandHandler("banned", admin_banned))
    application.add_handler(CallbackQueryHandler(handle_menu_action, pattern="^action:"))
    application.add_handler(CallbackQueryHandler(handle_safe_mode_toggle, pattern="^safemode:"))
    application.add_handler(CallbackQueryHandler(handle_donation_selection, pattern="^donate:"))
    application.add_handler(PreCheckoutQueryHandler(handle_pre_checkout))
    application.add_handler(
        MessageHandler(filters.SUCCESSFUL_PAYMENT, handle_successful_payment)
    )
    application.add_handler(
        MessageHandler(
            (filters.TEXT & ~filters.COMMAND)
            | filters.PHOTO
            | filters.VIDEO
            | filters.Document.ALL
            | filters.AUDIO
            | filters.VOICE
            | filters.Sticker.ALL,
            handle_user_message,
        )
    )
    application.add_error_handler(error_handler)

    LOGGER.info("Bot started (admins configured: %s)", len(ADMIN_USER_IDS))
    application.run_polling(close_loop=True)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
