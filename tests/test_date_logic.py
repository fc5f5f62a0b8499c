from datetime import date

import pytest

from roster_bot.date_logic import age_at, is_birthday_on, parse_birth_date, statistics_at
from roster_bot.errors import ValidationError
from roster_bot.models import Person


def _person(birth_date: str, person_id: int = 1) -> Person:
    return Person(id=person_id, name=f"P{person_id}", birth_date=birth_date)


def test_parse_birth_date_valid() -> None:
    assert parse_birth_date("15.06.1990") == date(1990, 6, 15)


@pytest.mark.parametrize(
    "value",
    ["31.02.2000", "15-06-1990", "1.6.1990", "15.13.1990", "", "15.06.90", "١٥.٠٦.١٩٩٠"],
)
def test_parse_birth_date_rejects_invalid(value: str) -> None:
    with pytest.raises(ValidationError):
        parse_birth_date(value)


def test_is_birthday_on_ignores_year() -> None:
    person = _person("15.06.1990")

    assert is_birthday_on(person, date(2024, 6, 15)) is True
    assert is_birthday_on(person, date(1990, 6, 15)) is True
    assert is_birthday_on(person, date(2024, 6, 16)) is False


def test_is_birthday_on_unparseable_date_is_false() -> None:
    assert is_birthday_on(_person("not a date"), date(2024, 6, 15)) is False


def test_feb_29_only_matches_on_leap_years() -> None:
    person = _person("29.02.2000")

    assert is_birthday_on(person, date(2024, 2, 29)) is True
    assert is_birthday_on(person, date(2025, 2, 28)) is False
    assert is_birthday_on(person, date(2025, 3, 1)) is False


def test_age_increments_on_anniversary() -> None:
    person = _person("15.06.1990")

    assert age_at(person, date(2024, 6, 14)) == 33
    assert age_at(person, date(2024, 6, 15)) == 34
    assert age_at(person, date(1990, 6, 15)) == 0


def test_age_scenario_new_year() -> None:
    assert age_at(_person("01.01.2000"), date(2025, 1, 1)) == 25


def test_age_unparseable_date_is_none() -> None:
    assert age_at(_person("31.02.2000"), date(2025, 1, 1)) is None


def test_statistics_same_month() -> None:
    roster = [_person("01.06.1990", 1), _person("15.06.1985", 2), _person("30.06.2001", 3)]

    stats = statistics_at(date(2024, 6, 10), roster)

    assert stats.total == 3
    assert stats.this_month == 3
    assert stats.next_month == 0
    assert stats.average_per_month == "0.3"
    assert stats.per_month[5] == 3
    assert sum(stats.per_month) == 3


def test_statistics_next_month_wraps_to_january() -> None:
    roster = [_person("05.01.1990", 1), _person("05.12.1990", 2)]

    stats = statistics_at(date(2024, 12, 1), roster)

    assert stats.this_month == 1
    assert stats.next_month == 1


def test_statistics_empty_roster() -> None:
    stats = statistics_at(date(2024, 1, 1), [])

    assert stats.total == 0
    assert stats.per_month == (0,) * 12
    assert stats.average_per_month == "0.0"
