from __future__ import annotations

from dataclasses import dataclass, field


DEFAULT_TIMEZONE = "Europe/Moscow"
DEFAULT_SEND_TIME = "11:00"


@dataclass(frozen=True)
class Person:
    id: int
    name: str
    birth_date: str
    handle: str | None = None

    @property
    def mention(self) -> str:
        if self.handle:
            return f"@{self.handle}"
        return self.name


@dataclass(frozen=True)
class NewPerson:
    name: str
    birth_date: str
    handle: str | None = None


@dataclass(frozen=True)
class RosterStatistics:
    total: int
    this_month: int
    next_month: int
    per_month: tuple[int, ...]
    average_per_month: str


@dataclass(frozen=True)
class AppConfig:
    timezone: str = DEFAULT_TIMEZONE
    daily_send_time: str = DEFAULT_SEND_TIME
    storage: str = "file"
    admins: list[str] = field(default_factory=list)
    greeting_image: str | None = None
    people: list[NewPerson] = field(default_factory=list)


@dataclass(frozen=True)
class BotInfo:
    id: int
    username: str | None
    first_name: str
