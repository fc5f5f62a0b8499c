from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from pathlib import Path

from roster_bot.atomic_file import write_text_atomic

LOGGER = logging.getLogger(__name__)


@dataclass
class NotificationState:
    sent_keys: set[str] = field(default_factory=set)
    last_pruned: str | None = None


def load_state(path: Path) -> NotificationState:
    if not path.exists():
        return NotificationState()

    try:
        with path.open("r", encoding="utf-8") as file_obj:
            data = json.load(file_obj)
        sent_keys = {str(value) for value in data.get("sent_keys", [])}
        last_pruned = data.get("last_pruned")
    except (OSError, ValueError, AttributeError) as exc:
        LOGGER.error("Could not read notification state from %s: %s", path, exc)
        return NotificationState()

    return NotificationState(sent_keys=sent_keys, last_pruned=str(last_pruned) if last_pruned else None)


def save_state_atomic(path: Path, state: NotificationState) -> None:
    payload = {
        "sent_keys": sorted(state.sent_keys),
        "last_pruned": state.last_pruned,
    }
    write_text_atomic(path, json.dumps(payload, indent=2) + "\n")


def dedupe_key(send_date: date, timezone: str, person_id: int) -> str:
    return f"{send_date.isoformat()}|{timezone}|{person_id}"


def prune_old_keys(state: NotificationState, today: date, *, retention_days: int = 400) -> None:
    cutoff = today - timedelta(days=retention_days)
    retained: set[str] = set()

    for key in state.sent_keys:
        parts = key.split("|")
        if len(parts) != 3:
            continue
        try:
            send_date = date.fromisoformat(parts[0])
        except ValueError:
            continue

        if send_date >= cutoff:
            retained.add(key)

    state.sent_keys = retained
    state.last_pruned = today.isoformat()
