from pathlib import Path

import pytest

from roster_bot.errors import PersistenceError
from roster_bot.models import Person
from roster_bot.roster_storage import JsonFileBackend, NullBackend, SqliteBackend, build_backend

PEOPLE = [
    Person(id=1, name="Ivan Petrov", birth_date="15.06.1990", handle="ivan_petrov"),
    Person(id=3, name="Maria Sidorova", birth_date="15.06.1985"),
]


def test_json_backend_missing_file_is_empty(tmp_path: Path) -> None:
    assert JsonFileBackend(tmp_path / "roster.json").load_all() == []


def test_json_backend_overwrites_snapshot(tmp_path: Path) -> None:
    backend = JsonFileBackend(tmp_path / "nested" / "roster.json")

    backend.save_all(PEOPLE)
    backend.save_all(PEOPLE[:1])

    assert backend.load_all() == PEOPLE[:1]


def test_json_backend_malformed_file(tmp_path: Path) -> None:
    path = tmp_path / "roster.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(PersistenceError):
        JsonFileBackend(path).load_all()


def test_sqlite_backend_keeps_order(tmp_path: Path) -> None:
    backend = SqliteBackend(tmp_path / "roster.db")

    backend.save_all(list(reversed(PEOPLE)))

    assert backend.load_all() == list(reversed(PEOPLE))


def test_build_backend_kinds(tmp_path: Path) -> None:
    assert isinstance(build_backend("none", tmp_path / "x"), NullBackend)
    assert isinstance(build_backend("file", tmp_path / "x.json"), JsonFileBackend)
    assert isinstance(build_backend("sqlite", tmp_path / "x.db"), SqliteBackend)

    with pytest.raises(ValueError):
        build_backend("redis", tmp_path / "x")
