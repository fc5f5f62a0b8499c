from pathlib import Path

import pytest

from roster_bot.config_store import ensure_default_config, load_config, save_config_atomic
from roster_bot.models import AppConfig, NewPerson


def test_roundtrip_config(tmp_path: Path) -> None:
    path = tmp_path / "bot.toml"
    config = AppConfig(
        timezone="Europe/Moscow",
        daily_send_time="9:05",
        storage="sqlite",
        admins=["@Boss", "boss", "helper"],
        greeting_image="images/cake.jpg",
        people=[NewPerson(name="Ivan \"The\" Petrov", birth_date="15.06.1990", handle="@ivan_petrov")],
    )

    save_config_atomic(path, config)
    loaded = load_config(path)

    assert loaded.timezone == "Europe/Moscow"
    assert loaded.daily_send_time == "09:05"
    assert loaded.storage == "sqlite"
    assert loaded.admins == ["Boss", "helper"]
    assert loaded.greeting_image == "images/cake.jpg"
    assert loaded.people == [NewPerson(name="Ivan \"The\" Petrov", birth_date="15.06.1990", handle="ivan_petrov")]


def test_default_config_written_once(tmp_path: Path) -> None:
    path = tmp_path / "config" / "bot.toml"

    ensure_default_config(path)
    loaded = load_config(path)

    assert loaded.timezone == "Europe/Moscow"
    assert loaded.daily_send_time == "11:00"
    assert loaded.storage == "file"
    assert loaded.people == []


@pytest.mark.parametrize(
    "body",
    [
        'timezone = "Mars/Olympus"',
        'daily_send_time = "25:00"',
        'storage = "redis"',
        '[[people]]\nname = "Bad"\nbirth_date = "31.02.2000"',
    ],
)
def test_invalid_config_rejected(tmp_path: Path, body: str) -> None:
    path = tmp_path / "bot.toml"
    path.write_text(body + "\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(path)


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.toml")
