from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Settings:
    telegram_bot_token: str
    telegram_chat_id: int
    bot_config_path: Path
    roster_path: Path
    notification_state_path: Path


def _required_env(name: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        raise ValueError(f"Missing required environment variable: {name}")
    return value.strip()


def load_settings() -> Settings:
    root = Path.cwd()

    token = _required_env("TELEGRAM_BOT_TOKEN")
    chat_id = int(_required_env("TELEGRAM_CHAT_ID"))

    bot_config_path = Path(os.getenv("BOT_CONFIG_PATH", root / "config" / "bot.toml"))
    roster_path = Path(os.getenv("ROSTER_PATH", root / "data" / "roster.json"))
    notification_state_path = Path(
        os.getenv("NOTIFICATION_STATE_PATH", root / "data" / "notification_state.json")
    )

    return Settings(
        telegram_bot_token=token,
        telegram_chat_id=chat_id,
        bot_config_path=bot_config_path,
        roster_path=roster_path,
        notification_state_path=notification_state_path,
    )
