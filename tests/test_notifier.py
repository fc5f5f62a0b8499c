from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import pytest
from telegram.error import NetworkError

from roster_bot.errors import NotificationDispatchError
from roster_bot.models import BotInfo
from roster_bot.notifier import TelegramNotificationSender


@dataclass
class FakeTelegramUser:
    id: int
    username: str | None
    first_name: str


@dataclass
class FakeBot:
    fail_messages: bool = False
    fail_photos: bool = False
    fail_get_me: bool = False
    messages: list[tuple[int, str]] = field(default_factory=list)
    photos: list[tuple[int, object, str]] = field(default_factory=list)

    async def send_message(self, chat_id: int, text: str) -> None:
        if self.fail_messages:
            raise NetworkError("offline")
        self.messages.append((chat_id, text))

    async def send_photo(self, chat_id: int, photo: object, caption: str) -> None:
        if self.fail_photos:
            raise NetworkError("offline")
        self.photos.append((chat_id, photo, caption))

    async def get_me(self) -> FakeTelegramUser:
        if self.fail_get_me:
            raise NetworkError("offline")
        return FakeTelegramUser(id=42, username="roster_bot", first_name="Roster")


def test_send_reports_success() -> None:
    bot = FakeBot()

    assert asyncio.run(TelegramNotificationSender(bot).send(5, "hi")) is True
    assert bot.messages == [(5, "hi")]


def test_send_reports_failure() -> None:
    bot = FakeBot(fail_messages=True)

    assert asyncio.run(TelegramNotificationSender(bot).send(5, "hi")) is False


def test_photo_falls_back_to_text() -> None:
    bot = FakeBot(fail_photos=True)

    delivered = asyncio.run(TelegramNotificationSender(bot).send_with_image(5, "https://example.com/cake.jpg", "hi"))

    assert delivered is True
    assert bot.photos == []
    assert bot.messages == [(5, "hi")]


def test_photo_from_local_file(tmp_path) -> None:
    image = tmp_path / "cake.jpg"
    image.write_bytes(b"\xff\xd8cake")
    bot = FakeBot()

    asyncio.run(TelegramNotificationSender(bot).send_with_image(5, str(image), "hi"))

    assert bot.photos == [(5, b"\xff\xd8cake", "hi")]


def test_send_test_message_delivers() -> None:
    bot = FakeBot()

    asyncio.run(TelegramNotificationSender(bot).send_test_message(5, "ping"))

    assert bot.messages == [(5, "ping")]


def test_send_test_message_failure_raises_dispatch_error() -> None:
    with pytest.raises(NotificationDispatchError):
        asyncio.run(TelegramNotificationSender(FakeBot(fail_messages=True)).send_test_message(5, "ping"))


def test_get_bot_info() -> None:
    info = asyncio.run(TelegramNotificationSender(FakeBot()).get_bot_info())

    assert info == BotInfo(id=42, username="roster_bot", first_name="Roster")


def test_get_bot_info_failure_raises_dispatch_error() -> None:
    with pytest.raises(NotificationDispatchError):
        asyncio.run(TelegramNotificationSender(FakeBot(fail_get_me=True)).get_bot_info())
