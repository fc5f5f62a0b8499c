from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from roster_bot.date_logic import statistics_at
from roster_bot.errors import DuplicateError, NotFoundError, NotificationDispatchError, ValidationError
from roster_bot.messages import (
    render_bot_info,
    render_help,
    render_roster,
    render_statistics,
    render_today,
    render_welcome,
)
from roster_bot.models import BotInfo, NewPerson
from roster_bot.roster_store import RosterStore, normalize_handle

LOGGER = logging.getLogger(__name__)

ADMIN_COMMANDS = {"add", "remove", "ping", "botinfo"}


class BotTools(Protocol):
    async def send_test_message(self, target: int, text: str) -> None: ...

    async def get_bot_info(self) -> BotInfo: ...


@dataclass(frozen=True)
class CommandRequest:
    command: str
    args: str = ""
    caller_handle: str | None = None


@dataclass(frozen=True)
class CommandResult:
    ok: bool
    message: str


def parse_add_args(raw_args: str) -> NewPerson:
    """Parse `<DD.MM.YYYY> <name...> [@handle]`."""
    tokens = raw_args.split()
    if len(tokens) < 2:
        raise ValidationError("Usage: /add <DD.MM.YYYY> <name> [@handle]")

    birth_date = tokens[0]
    rest = tokens[1:]
    handle = None
    if len(rest) > 1 and rest[-1].startswith("@"):
        handle = rest.pop()

    return NewPerson(name=" ".join(rest), birth_date=birth_date, handle=handle)


class CommandService:
    def __init__(
        self,
        *,
        store: RosterStore,
        admins: Iterable[str],
        today_provider: Callable[[], date],
        send_time: str,
        bot_tools: BotTools | None = None,
        chat_id: int | None = None,
    ) -> None:
        self._store = store
        self._admins = {handle.casefold() for handle in (normalize_handle(a) for a in admins) if handle}
        self._today = today_provider
        self._send_time = send_time
        self._bot_tools = bot_tools
        self._chat_id = chat_id
        self._handlers: dict[str, Callable[[CommandRequest], Awaitable[CommandResult]]] = {
            "start": self._start,
            "help": self._help,
            "birthdays": self._birthdays,
            "today": self._today_birthdays,
            "find": self._find,
            "stats": self._stats,
            "add": self._add,
            "remove": self._remove,
        }
        if bot_tools is not None and chat_id is not None:
            self._handlers["ping"] = self._ping
            self._handlers["botinfo"] = self._botinfo

    @property
    def commands(self) -> list[str]:
        return list(self._handlers)

    def is_admin(self, handle: str | None) -> bool:
        normalized = normalize_handle(handle)
        return normalized is not None and normalized.casefold() in self._admins

    async def handle(self, request: CommandRequest) -> CommandResult:
        command = request.command.strip().lstrip("/").lower()
        handler = self._handlers.get(command)
        if handler is None:
            return CommandResult(ok=False, message=f"Unknown command: /{command}. Send /help.")

        if command in ADMIN_COMMANDS and not self.is_admin(request.caller_handle):
            LOGGER.info("Denied /%s for %s", command, request.caller_handle)
            return CommandResult(ok=False, message="⛔ This command is for administrators only.")

        return await handler(request)

    async def _start(self, request: CommandRequest) -> CommandResult:
        return CommandResult(ok=True, message=render_welcome(self._send_time))

    async def _help(self, request: CommandRequest) -> CommandResult:
        return CommandResult(ok=True, message=render_help(self._send_time))

    async def _birthdays(self, request: CommandRequest) -> CommandResult:
        return CommandResult(ok=True, message=render_roster(self._store.list(), self._today()))

    async def _today_birthdays(self, request: CommandRequest) -> CommandResult:
        today = self._today()
        return CommandResult(ok=True, message=render_today(self._store.people_with_birthday_on(today), today))

    async def _find(self, request: CommandRequest) -> CommandResult:
        term = request.args.strip()
        if not term:
            return CommandResult(ok=False, message="Usage: /find <text>")

        matches = self._store.find_by_name_substring(term)
        if not matches:
            return CommandResult(ok=True, message=f"🔍 Nobody matches \"{term}\".")
        return CommandResult(ok=True, message=render_roster(matches, self._today(), title="🔍 Matches"))

    async def _stats(self, request: CommandRequest) -> CommandResult:
        today = self._today()
        stats = statistics_at(today, self._store.list())
        return CommandResult(ok=True, message=render_statistics(stats, today))

    async def _add(self, request: CommandRequest) -> CommandResult:
        try:
            person = self._store.add(parse_add_args(request.args))
        except ValidationError as exc:
            LOGGER.info("Rejected /add %r: %s", request.args, exc)
            return CommandResult(ok=False, message=f"❌ {exc}")
        except DuplicateError as exc:
            return CommandResult(ok=False, message=f"❌ {exc}")

        return CommandResult(
            ok=True,
            message=f"✅ Added {person.mention} ({person.birth_date}) with id {person.id}.",
        )

    async def _remove(self, request: CommandRequest) -> CommandResult:
        target = request.args.strip()
        if not target:
            return CommandResult(ok=False, message="Usage: /remove <id or name>")

        if target.isdigit():
            person = self._store.get_by_id(int(target))
            if person is None or not self._store.remove_by_id(person.id):
                return CommandResult(ok=False, message=f"❌ No person with id {target}.")
        else:
            try:
                person = self._store.remove_by_name(target)
            except NotFoundError as exc:
                return CommandResult(ok=False, message=f"❌ {exc}")

        return CommandResult(ok=True, message=f"🗑️ Removed {person.mention} (id {person.id}).")

    async def _ping(self, request: CommandRequest) -> CommandResult:
        text = request.args.strip() or "🏓 Test message from the birthday bot."
        try:
            await self._bot_tools.send_test_message(self._chat_id, text)
        except NotificationDispatchError as exc:
            return CommandResult(ok=False, message=f"❌ {exc}")
        return CommandResult(ok=True, message="✅ Test message sent.")

    async def _botinfo(self, request: CommandRequest) -> CommandResult:
        try:
            info = await self._bot_tools.get_bot_info()
        except NotificationDispatchError as exc:
            return CommandResult(ok=False, message=f"❌ {exc}")
        return CommandResult(ok=True, message=render_bot_info(info))
