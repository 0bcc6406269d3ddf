import asyncio
from types import SimpleNamespace

import pytest
from telegram.error import Forbidden

from stranger_talk import bot
from stranger_talk.delivery import DeliveryError, OutboundMessage
from stranger_talk.models import MessageKind
from stranger_talk.payments import build_invoice_payload


class FakeBot:
    def __init__(self, *, fail: bool = False) -> None:
        self.calls: list[tuple[str, dict]] = []
        self.fail = fail

    def __getattr__(self, name: str):
        if not name.startswith("send_"):
            raise AttributeError(name)

        async def _send(**kwargs):
            if self.fail:
                raise Forbidden("Forbidden: bot was blocked by the user")
            self.calls.append((name, kwargs))

        return _send


class FakePreCheckoutQuery:
    def __init__(self, payload: str, user_id: int, total_amount: int) -> None:
        self.invoice_payload = payload
        self.from_user = SimpleNamespace(id=user_id)
        self.total_amount = total_amount
        self.answers: list[dict] = []

    async def answer(self, **kwargs) -> None:
        self.answers.append(kwargs)


def test_parse_admin_ids_skips_invalid_chunks() -> None:
    assert bot._parse_admin_ids("1, 2,abc,,3") == {1, 2, 3}
    assert bot._parse_admin_ids(None) == set()


def test_parse_bool_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEDUPE_REPORTS_PER_SESSION", "Yes")
    assert bot._parse_bool_env("DEDUPE_REPORTS_PER_SESSION") is True
    monkeypatch.setenv("DEDUPE_REPORTS_PER_SESSION", "off")
    assert bot._parse_bool_env("DEDUPE_REPORTS_PER_SESSION") is False
    monkeypatch.delenv("DEDUPE_REPORTS_PER_SESSION")
    assert bot._parse_bool_env("DEDUPE_REPORTS_PER_SESSION", default=True) is True


def test_sink_routes_message_kinds() -> None:
    fake = FakeBot()
    sink = bot.TelegramDeliverySink(fake)

    asyncio.run(sink.send(1, OutboundMessage.notice("hello")))
    asyncio.run(
        sink.send(1, OutboundMessage(MessageKind.PHOTO, file_id="p1", caption="cap"))
    )
    asyncio.run(sink.send(1, OutboundMessage(MessageKind.STICKER, file_id="s1")))

    assert fake.calls == [
        ("send_message", {"chat_id": 1, "text": "hello"}),
        ("send_photo", {"chat_id": 1, "photo": "p1", "caption": "cap"}),
        ("send_sticker", {"chat_id": 1, "sticker": "s1"}),
    ]


def test_sink_wraps_telegram_errors() -> None:
    sink = bot.TelegramDeliverySink(FakeBot(fail=True))

    with pytest.raises(DeliveryError):
        asyncio.run(sink.send(7, OutboundMessage.notice("hi")))


def test_message_from_update_maps_text_and_media() -> None:
    user = SimpleNamespace(id=42)
    text_update = SimpleNamespace(
        effective_user=user,
        effective_message=SimpleNamespace(text="hey", photo=[], caption=None),
    )
    inbound = bot.message_from_update(text_update)
    assert inbound.kind is MessageKind.TEXT
    assert inbound.text == "hey"

    photo_update = SimpleNamespace(
        effective_user=user,
        effective_message=SimpleNamespace(
            text=None,
            photo=[SimpleNamespace(file_id="small"), SimpleNamespace(file_id="large")],
            caption="sunset",
        ),
    )
    inbound = bot.message_from_update(photo_update)
    assert inbound.kind is MessageKind.PHOTO
    assert inbound.file_id == "large"
    assert inbound.caption == "sunset"

    command_update = SimpleNamespace(
        effective_user=user,
        effective_message=SimpleNamespace(text="/chat", photo=[], caption=None),
    )
    assert bot.message_from_update(command_update) is None


def test_pre_checkout_accepts_matching_payload() -> None:
    query = FakePreCheckoutQuery(build_invoice_payload(5, 25), 5, 25)
    update = SimpleNamespace(pre_checkout_query=query)

    asyncio.run(bot.handle_pre_checkout(update, SimpleNamespace()))

    assert query.answers == [{"ok": True}]


def test_pre_checkout_rejects_foreign_payload() -> None:
    query = FakePreCheckoutQuery(build_invoice_payload(5, 25), 6, 25)
    update = SimpleNamespace(pre_checkout_query=query)

    asyncio.run(bot.handle_pre_checkout(update, SimpleNamespace()))

    assert query.answers == [{"ok": False, "error_message": "Invalid payment data"}]
