from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from datetime import date

from roster_bot.date_logic import format_birth_date, is_birthday_on, parse_birth_date
from roster_bot.errors import DuplicateError, NotFoundError, PersistenceError, ValidationError
from roster_bot.models import NewPerson, Person
from roster_bot.roster_storage import NullBackend, RosterBackend

LOGGER = logging.getLogger(__name__)

HANDLE_PATTERN = re.compile(r"[A-Za-z0-9_]{1,64}")


def normalize_handle(handle: str | None) -> str | None:
    if handle is None:
        return None
    cleaned = handle.strip().lstrip("@")
    return cleaned or None


def _handle_key(handle: str | None) -> str | None:
    return handle.casefold() if handle else None


class RosterStore:
    """In-memory roster keyed by id, mirrored to a backend after each mutation.

    The in-memory mapping is authoritative for the running process; backend
    failures are logged and never undo a mutation.
    """

    def __init__(self, backend: RosterBackend | None = None) -> None:
        self._backend = backend if backend is not None else NullBackend()
        self._people: dict[int, Person] = {}
        self._next_id = 1

    @classmethod
    def open(cls, backend: RosterBackend, *, seed: Iterable[NewPerson] = ()) -> RosterStore:
        store = cls(backend)
        load_failed = False
        try:
            loaded = backend.load_all()
        except PersistenceError:
            LOGGER.exception("Could not load roster, starting empty without seeding")
            loaded = []
            load_failed = True

        for person in loaded:
            store._people[person.id] = person
            store._next_id = max(store._next_id, person.id + 1)

        # An unreadable backing must not be overwritten by the seed.
        if not store._people and not load_failed:
            for candidate in seed:
                try:
                    store.add(candidate)
                except (ValidationError, DuplicateError):
                    LOGGER.warning("Skipping invalid seed entry %r", candidate.name)

        LOGGER.info("Roster ready with %s people", len(store._people))
        return store

    def __len__(self) -> int:
        return len(self._people)

    def list(self) -> list[Person]:
        return list(self._people.values())

    def get_by_id(self, person_id: int) -> Person | None:
        return self._people.get(person_id)

    def add(self, candidate: NewPerson) -> Person:
        name = candidate.name.strip()
        if not name:
            raise ValidationError("Name must not be empty")

        birth_date = format_birth_date(parse_birth_date(candidate.birth_date))

        handle = normalize_handle(candidate.handle)
        if handle is not None:
            if not HANDLE_PATTERN.fullmatch(handle):
                raise ValidationError(f"Invalid handle: {candidate.handle}")
            key = _handle_key(handle)
            if any(_handle_key(person.handle) == key for person in self._people.values()):
                raise DuplicateError(f"Handle @{handle} is already in the roster")

        person = Person(id=self._next_id, name=name, birth_date=birth_date, handle=handle)
        self._people[person.id] = person
        self._next_id += 1

        self._persist()
        LOGGER.info("Added person %s (%s)", person.id, person.name)
        return person

    def remove_by_id(self, person_id: int) -> bool:
        removed = self._people.pop(person_id, None)
        if removed is None:
            return False

        self._persist()
        LOGGER.info("Removed person %s (%s)", removed.id, removed.name)
        return True

    def remove_by_name(self, name: str) -> Person:
        wanted = name.strip().casefold()
        for person in self._people.values():
            if person.name.casefold() == wanted:
                self.remove_by_id(person.id)
                return person
        raise NotFoundError(f"No person named {name.strip()!r}")

    def find_by_name_substring(self, term: str) -> list[Person]:
        needle = term.strip().casefold()
        return [person for person in self._people.values() if needle in person.name.casefold()]

    def people_with_birthday_on(self, reference_date: date) -> list[Person]:
        return [person for person in self._people.values() if is_birthday_on(person, reference_date)]

    def _persist(self) -> None:
        try:
            self._backend.save_all(self.list())
        except PersistenceError:
            LOGGER.exception("Could not persist roster; keeping in-memory state")
