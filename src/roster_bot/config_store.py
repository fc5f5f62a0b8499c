from __future__ import annotations

import tomllib
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from roster_bot.atomic_file import write_text_atomic
from roster_bot.date_logic import parse_birth_date
from roster_bot.errors import ValidationError
from roster_bot.models import DEFAULT_SEND_TIME, DEFAULT_TIMEZONE, AppConfig, NewPerson
from roster_bot.roster_store import normalize_handle
from roster_bot.roster_storage import STORAGE_KINDS


def _toml_escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _parse_daily_send_time(value: str) -> str:
    pieces = value.split(":")
    if len(pieces) != 2:
        raise ValueError("daily_send_time must be in HH:MM format")

    hour, minute = pieces
    if not hour.isdigit() or not minute.isdigit():
        raise ValueError("daily_send_time must contain numeric hour/minute")

    hour_i = int(hour)
    minute_i = int(minute)
    if hour_i < 0 or hour_i > 23 or minute_i < 0 or minute_i > 59:
        raise ValueError("daily_send_time must be a valid 24-hour time")

    return f"{hour_i:02d}:{minute_i:02d}"


def _validate_timezone(value: str) -> str:
    timezone = value.strip()
    if not timezone:
        raise ValueError("timezone must not be empty")
    try:
        ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {timezone}") from exc
    return timezone


def validate_config(config: AppConfig) -> AppConfig:
    timezone = _validate_timezone(config.timezone)
    daily_send_time = _parse_daily_send_time(config.daily_send_time)

    storage = config.storage.strip().lower()
    if storage not in STORAGE_KINDS:
        raise ValueError(f"storage must be one of {sorted(STORAGE_KINDS)}")

    admins: list[str] = []
    for admin in config.admins:
        handle = normalize_handle(admin)
        if handle is not None and handle.casefold() not in {a.casefold() for a in admins}:
            admins.append(handle)

    greeting_image = (config.greeting_image or "").strip() or None

    people: list[NewPerson] = []
    for person in config.people:
        name = person.name.strip()
        if not name:
            raise ValueError("person name must not be empty")
        try:
            parse_birth_date(person.birth_date)
        except ValidationError as exc:
            raise ValueError(str(exc)) from exc
        people.append(
            NewPerson(name=name, birth_date=person.birth_date.strip(), handle=normalize_handle(person.handle))
        )

    return AppConfig(
        timezone=timezone,
        daily_send_time=daily_send_time,
        storage=storage,
        admins=admins,
        greeting_image=greeting_image,
        people=people,
    )


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with path.open("rb") as file_obj:
        data = tomllib.load(file_obj)

    people: list[NewPerson] = []
    for row in data.get("people", []):
        people.append(
            NewPerson(
                name=str(row.get("name", "")),
                birth_date=str(row.get("birth_date", "")),
                handle=str(row["handle"]) if row.get("handle") else None,
            )
        )

    greeting_image = data.get("greeting_image")
    config = AppConfig(
        timezone=str(data.get("timezone", DEFAULT_TIMEZONE)),
        daily_send_time=str(data.get("daily_send_time", DEFAULT_SEND_TIME)),
        storage=str(data.get("storage", "file")),
        admins=[str(value) for value in data.get("admins", [])],
        greeting_image=str(greeting_image) if greeting_image else None,
        people=people,
    )
    return validate_config(config)


def render_config(config: AppConfig) -> str:
    validated = validate_config(config)

    admins = ", ".join(f'"{_toml_escape(admin)}"' for admin in validated.admins)
    lines: list[str] = [
        f'timezone = "{_toml_escape(validated.timezone)}"',
        f'daily_send_time = "{validated.daily_send_time}"',
        f'storage = "{validated.storage}"',
        f"admins = [{admins}]",
    ]
    if validated.greeting_image is not None:
        lines.append(f'greeting_image = "{_toml_escape(validated.greeting_image)}"')
    lines.extend(
        [
            "",
            "# [[people]] rows seed the roster only while stored roster is empty.",
            '# Example: name = "Ivan Petrov", birth_date = "15.06.1990", handle = "ivan_petrov"',
            "",
        ]
    )

    for person in validated.people:
        lines.append("[[people]]")
        lines.append(f'name = "{_toml_escape(person.name)}"')
        lines.append(f'birth_date = "{person.birth_date}"')
        if person.handle is not None:
            lines.append(f'handle = "{_toml_escape(person.handle)}"')
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def save_config_atomic(path: Path, config: AppConfig) -> None:
    write_text_atomic(path, render_config(config))


def ensure_default_config(path: Path) -> None:
    if path.exists():
        return
    save_config_atomic(path, AppConfig())
