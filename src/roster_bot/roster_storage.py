from __future__ import annotations

import json
import sqlite3
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from roster_bot.atomic_file import write_text_atomic
from roster_bot.errors import PersistenceError
from roster_bot.models import Person

STORAGE_KINDS = {"none", "file", "sqlite"}


class RosterBackend(Protocol):
    def load_all(self) -> list[Person]: ...

    def save_all(self, people: Sequence[Person]) -> None: ...


def _person_to_row(person: Person) -> dict[str, object]:
    return {
        "id": person.id,
        "name": person.name,
        "birth_date": person.birth_date,
        "handle": person.handle,
    }


def _person_from_row(row: dict) -> Person:
    handle = row.get("handle")
    return Person(
        id=int(row["id"]),
        name=str(row["name"]),
        birth_date=str(row["birth_date"]),
        handle=str(handle) if handle else None,
    )


class NullBackend:
    def load_all(self) -> list[Person]:
        return []

    def save_all(self, people: Sequence[Person]) -> None:
        return None


class JsonFileBackend:
    def __init__(self, path: Path) -> None:
        self._path = path

    def load_all(self) -> list[Person]:
        if not self._path.exists():
            return []

        try:
            with self._path.open("r", encoding="utf-8") as file_obj:
                data = json.load(file_obj)
            rows = data.get("people", [])
            if not isinstance(rows, list):
                raise PersistenceError(f"Malformed roster file: {self._path}")
            return [_person_from_row(row) for row in rows]
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            raise PersistenceError(f"Could not read roster from {self._path}: {exc}") from exc

    def save_all(self, people: Sequence[Person]) -> None:
        payload = {"version": 1, "people": [_person_to_row(person) for person in people]}

        try:
            write_text_atomic(self._path, json.dumps(payload, indent=2, ensure_ascii=False) + "\n")
        except OSError as exc:
            raise PersistenceError(f"Could not write roster to {self._path}: {exc}") from exc


class SqliteBackend:
    def __init__(self, path: Path) -> None:
        self._path = path

    def _connect(self) -> sqlite3.Connection:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self._path)
        conn.execute(
            "CREATE TABLE IF NOT EXISTS people ("
            " position INTEGER NOT NULL,"
            " id INTEGER PRIMARY KEY,"
            " name TEXT NOT NULL,"
            " birth_date TEXT NOT NULL,"
            " handle TEXT"
            ")"
        )
        return conn

    def load_all(self) -> list[Person]:
        try:
            conn = self._connect()
            try:
                rows = conn.execute(
                    "SELECT id, name, birth_date, handle FROM people ORDER BY position"
                ).fetchall()
            finally:
                conn.close()
        except (OSError, sqlite3.Error) as exc:
            raise PersistenceError(f"Could not read roster from {self._path}: {exc}") from exc

        return [
            Person(id=int(row[0]), name=row[1], birth_date=row[2], handle=row[3] or None)
            for row in rows
        ]

    def save_all(self, people: Sequence[Person]) -> None:
        try:
            conn = self._connect()
            try:
                with conn:
                    conn.execute("DELETE FROM people")
                    conn.executemany(
                        "INSERT INTO people (position, id, name, birth_date, handle) VALUES (?, ?, ?, ?, ?)",
                        [
                            (position, person.id, person.name, person.birth_date, person.handle)
                            for position, person in enumerate(people)
                        ],
                    )
            finally:
                conn.close()
        except (OSError, sqlite3.Error) as exc:
            raise PersistenceError(f"Could not write roster to {self._path}: {exc}") from exc


def build_backend(kind: str, path: Path) -> RosterBackend:
    if kind == "none":
        return NullBackend()
    if kind == "file":
        return JsonFileBackend(path)
    if kind == "sqlite":
        return SqliteBackend(path)
    raise ValueError(f"storage must be one of {sorted(STORAGE_KINDS)}")
