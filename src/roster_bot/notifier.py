from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

from telegram import Bot
from telegram.error import TelegramError

from roster_bot.errors import NotificationDispatchError
from roster_bot.models import BotInfo

LOGGER = logging.getLogger(__name__)


class NotificationSender(Protocol):
    async def send(self, target: int, text: str) -> bool: ...

    async def send_with_image(self, target: int, image_ref: str, caption: str) -> bool: ...


class TelegramNotificationSender:
    def __init__(self, bot: Bot) -> None:
        self._bot = bot

    async def send(self, target: int, text: str) -> bool:
        try:
            await self._bot.send_message(chat_id=target, text=text)
        except TelegramError as exc:
            LOGGER.error("Could not send message to %s: %s", target, exc)
            return False
        return True

    async def send_with_image(self, target: int, image_ref: str, caption: str) -> bool:
        try:
            await self._bot.send_photo(chat_id=target, photo=_photo_input(image_ref), caption=caption)
        except (TelegramError, OSError) as exc:
            LOGGER.warning("Could not send photo to %s, falling back to text: %s", target, exc)
            return await self.send(target, caption)
        return True

    async def send_test_message(self, target: int, text: str) -> None:
        try:
            await self._bot.send_message(chat_id=target, text=text)
        except TelegramError as exc:
            LOGGER.error("Could not send test message to %s: %s", target, exc)
            raise NotificationDispatchError(f"Could not send test message: {exc}") from exc
        LOGGER.info("Test message sent to %s", target)

    async def get_bot_info(self) -> BotInfo:
        try:
            user = await self._bot.get_me()
        except TelegramError as exc:
            LOGGER.error("Could not fetch bot info: %s", exc)
            raise NotificationDispatchError(f"Could not fetch bot info: {exc}") from exc
        return BotInfo(id=user.id, username=user.username, first_name=user.first_name)


def _photo_input(image_ref: str) -> Any:
    path = Path(image_ref)
    if path.is_file():
        return path.read_bytes()
    return image_ref
