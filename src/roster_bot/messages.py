from __future__ import annotations

from datetime import date

from roster_bot.date_logic import age_at
from roster_bot.models import BotInfo, Person, RosterStatistics

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def _age_text(age: int | None) -> str:
    if age is None:
        return "age unknown"
    if age == 1:
        return "1 year"
    return f"{age} years"


def render_welcome(send_time: str) -> str:
    return (
        "🎉 Welcome to the Birthday Roster Bot!\n\n"
        "I make sure nobody's birthday slips by.\n\n"
        f"{render_help(send_time)}"
    )


def render_help(send_time: str) -> str:
    return (
        "Commands:\n"
        "/start - Show the welcome message\n"
        "/help - Show this help message\n"
        "/birthdays - List every tracked birthday\n"
        "/today - Show today's birthdays\n"
        "/find <text> - Search people by name\n"
        "/stats - Birthday statistics by month\n\n"
        "Admin commands:\n"
        "/add <DD.MM.YYYY> <name> [@handle] - Add a person\n"
        "/remove <id or name> - Remove a person\n"
        "/ping [text] - Send a test message to the birthday chat\n"
        "/botinfo - Show which bot account is running\n\n"
        f"⏰ Every day at {send_time} I check the roster and congratulate whoever has a birthday."
    )


def render_roster(people: list[Person], today: date, *, title: str = "🎂 Birthdays") -> str:
    if not people:
        return "📭 The birthday list is empty."

    lines = [f"{title} ({len(people)})", ""]
    for person in people:
        lines.append(f"{person.id}. {person.mention}")
        lines.append(f"   📅 {person.birth_date} ({_age_text(age_at(person, today))})")
    return "\n".join(lines)


def render_today(people: list[Person], today: date) -> str:
    if not people:
        return "🎈 No birthdays today."

    lines = ["🎉 Today's birthdays:", ""]
    for person in people:
        age = age_at(person, today)
        if age is None:
            lines.append(f"🎂 {person.mention}!")
        else:
            lines.append(f"🎂 {person.mention} turns {age}!")
    lines.append("")
    lines.append("🎊 Happy birthday!")
    return "\n".join(lines)


def render_statistics(stats: RosterStatistics, today: date) -> str:
    this_month = MONTH_NAMES[today.month - 1]
    next_month = MONTH_NAMES[today.month % 12]

    lines = [
        "📊 Birthday statistics",
        "",
        f"Total people: {stats.total}",
        f"This month ({this_month}): {stats.this_month}",
        f"Next month ({next_month}): {stats.next_month}",
        f"Average per month: {stats.average_per_month}",
        "",
        "By month:",
    ]
    for month_name, count in zip(MONTH_NAMES, stats.per_month, strict=True):
        lines.append(f"   {month_name}: {count}")
    return "\n".join(lines)


def render_congratulation(person: Person, age: int | None) -> str:
    if age is None:
        headline = "Today is your day! 🎈"
    else:
        headline = f"Today you turn {age}! 🎈"

    return (
        "🎉🎂🎊\n"
        f"Happy birthday, {person.mention}! 🥳\n\n"
        f"{headline}\n\n"
        "Wishing you:\n"
        "🌟 Health and happiness\n"
        "💪 Success in everything you start\n"
        "❤️ Love and harmony\n"
        "🚀 Every wish come true\n\n"
        "May today be full of joy and smiles! 🎁"
    )


def render_bot_info(info: BotInfo) -> str:
    username = f"@{info.username}" if info.username else "(no username)"
    return f"🤖 {info.first_name} {username}\nId: {info.id}"
