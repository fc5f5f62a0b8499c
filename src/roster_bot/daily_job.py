from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path
from zoneinfo import ZoneInfo

from roster_bot.date_logic import age_at
from roster_bot.errors import NotificationDispatchError
from roster_bot.messages import render_congratulation
from roster_bot.models import DEFAULT_SEND_TIME, DEFAULT_TIMEZONE, Person
from roster_bot.notification_state import (
    NotificationState,
    dedupe_key,
    load_state,
    prune_old_keys,
    save_state_atomic,
)
from roster_bot.notifier import NotificationSender
from roster_bot.roster_store import RosterStore

LOGGER = logging.getLogger(__name__)


def parse_time_string(value: str) -> tuple[int, int]:
    hour, minute = value.split(":")
    return int(hour), int(minute)


@dataclass(frozen=True)
class ScheduleConfig:
    daily_send_time: str = DEFAULT_SEND_TIME
    timezone: str = DEFAULT_TIMEZONE

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def send_time(self) -> time:
        hour, minute = parse_time_string(self.daily_send_time)
        return time(hour=hour, minute=minute, tzinfo=self.tzinfo)

    def now(self) -> datetime:
        return datetime.now(self.tzinfo)

    def today(self) -> date:
        return self.now().date()

    def send_time_passed(self, now: datetime) -> bool:
        hour, minute = parse_time_string(self.daily_send_time)
        scheduled = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
        return now >= scheduled


@dataclass(frozen=True)
class DispatchOutcome:
    sent: int = 0
    failed: int = 0
    skipped: bool = False


class DailyBirthdayJob:
    """Announces today's birthdays to the configured chat.

    Only one run may be in flight; a fire that arrives while a run is still
    sending is skipped. Successful sends are recorded per day and timezone in
    the state file so a second fire on the same day does not repeat them.
    """

    def __init__(
        self,
        *,
        store: RosterStore,
        sender: NotificationSender,
        chat_id: int,
        schedule: ScheduleConfig,
        state_path: Path | None = None,
        greeting_image: str | None = None,
    ) -> None:
        self._store = store
        self._sender = sender
        self._chat_id = chat_id
        self._schedule = schedule
        self._state_path = state_path
        self._greeting_image = greeting_image
        self._lock = asyncio.Lock()

    @property
    def schedule(self) -> ScheduleConfig:
        return self._schedule

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    async def run(self, today: date | None = None) -> DispatchOutcome:
        if self._lock.locked():
            LOGGER.warning("Birthday check already in progress, skipping this fire")
            return DispatchOutcome(skipped=True)

        async with self._lock:
            return await self._run(today if today is not None else self._schedule.today())

    async def _run(self, today: date) -> DispatchOutcome:
        LOGGER.info("Running birthday check for %s (%s)", today.isoformat(), self._schedule.timezone)

        people = self._store.people_with_birthday_on(today)
        if not people:
            LOGGER.info("No birthdays today")
            return DispatchOutcome()

        state = None
        if self._state_path is not None:
            state = load_state(self._state_path)
            prune_old_keys(state, today)

        sent = 0
        failed = 0
        for person in people:
            key = dedupe_key(today, self._schedule.timezone, person.id)
            if state is not None and key in state.sent_keys:
                LOGGER.info("Already congratulated %s today", person.name)
                continue

            try:
                await self._notify(person, today)
            except Exception:
                LOGGER.exception("Could not congratulate %s", person.name)
                failed += 1
                continue

            sent += 1
            LOGGER.info("Congratulation sent: %s", person.name)
            if state is not None:
                state.sent_keys.add(key)
                self._save_state(state)

        LOGGER.info("Sent %s congratulations for %s, %s failed", sent, today.isoformat(), failed)
        return DispatchOutcome(sent=sent, failed=failed)

    async def _notify(self, person: Person, today: date) -> None:
        text = render_congratulation(person, age_at(person, today))
        if self._greeting_image:
            delivered = await self._sender.send_with_image(self._chat_id, self._greeting_image, text)
        else:
            delivered = await self._sender.send(self._chat_id, text)

        if not delivered:
            raise NotificationDispatchError(f"Sender reported failure for person {person.id}")

    def _save_state(self, state: NotificationState) -> None:
        try:
            save_state_atomic(self._state_path, state)
        except OSError:
            LOGGER.exception("Could not save notification state to %s", self._state_path)
