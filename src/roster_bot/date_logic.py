from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from roster_bot.errors import ValidationError
from roster_bot.models import Person, RosterStatistics

LOGGER = logging.getLogger(__name__)

BIRTH_DATE_PATTERN = re.compile(r"([0-9]{2})\.([0-9]{2})\.([0-9]{4})")


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def parse_birth_date(value: str) -> date:
    match = BIRTH_DATE_PATTERN.fullmatch(value.strip())
    if not match:
        raise ValidationError(f"Birth date must use DD.MM.YYYY, got {value!r}")

    day, month, year = (int(piece) for piece in match.groups())
    try:
        return date(year, month, day)
    except ValueError as exc:
        raise ValidationError(f"Not a real calendar date: {value}") from exc


def format_birth_date(value: date) -> str:
    return f"{value.day:02d}.{value.month:02d}.{value.year:04d}"


def _safe_birth_date(person: Person) -> date | None:
    try:
        return parse_birth_date(person.birth_date)
    except ValidationError:
        LOGGER.warning("Unparseable birth date %r for person %s", person.birth_date, person.id)
        return None


def is_birthday_on(person: Person, reference_date: date) -> bool:
    """Day and month must match; the year is ignored.

    A Feb 29 birthday only matches Feb 29 itself, so it is announced in leap
    years only.
    """
    born = _safe_birth_date(person)
    if born is None:
        return False
    return born.day == reference_date.day and born.month == reference_date.month


def age_at(person: Person, reference_date: date) -> int | None:
    born = _safe_birth_date(person)
    if born is None:
        return None

    years = reference_date.year - born.year
    if (reference_date.month, reference_date.day) < (born.month, born.day):
        years -= 1
    return years


def _next_month(month: int) -> int:
    return month % 12 + 1


def statistics_at(reference_date: date, roster: Iterable[Person]) -> RosterStatistics:
    per_month = [0] * 12
    total = 0

    for person in roster:
        total += 1
        born = _safe_birth_date(person)
        if born is not None:
            per_month[born.month - 1] += 1

    average = (Decimal(total) / Decimal(12)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return RosterStatistics(
        total=total,
        this_month=per_month[reference_date.month - 1],
        next_month=per_month[_next_month(reference_date.month) - 1],
        per_month=tuple(per_month),
        average_per_month=str(average),
    )
