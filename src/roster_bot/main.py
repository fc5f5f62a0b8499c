from __future__ import annotations

import logging

from telegram.ext import Application, CallbackContext

from roster_bot.bot_handlers import build_handlers, error_handler
from roster_bot.commands import CommandService
from roster_bot.config_store import ensure_default_config, load_config
from roster_bot.daily_job import DailyBirthdayJob, ScheduleConfig
from roster_bot.notifier import TelegramNotificationSender
from roster_bot.roster_storage import build_backend
from roster_bot.roster_store import RosterStore
from roster_bot.settings import load_settings

LOGGER = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def scheduled_birthday_callback(context: CallbackContext) -> None:
    job: DailyBirthdayJob = context.application.bot_data["daily_job"]
    await job.run()


async def startup_catchup(application: Application) -> None:
    job: DailyBirthdayJob = application.bot_data["daily_job"]
    if job.schedule.send_time_passed(job.schedule.now()):
        LOGGER.info("Send time already passed today, running catch-up check")
        await job.run()


def main() -> None:
    configure_logging()

    settings = load_settings()
    ensure_default_config(settings.bot_config_path)
    config = load_config(settings.bot_config_path)

    backend = build_backend(config.storage, settings.roster_path)
    store = RosterStore.open(backend, seed=config.people)
    schedule = ScheduleConfig(daily_send_time=config.daily_send_time, timezone=config.timezone)

    application = Application.builder().token(settings.telegram_bot_token).build()

    sender = TelegramNotificationSender(application.bot)
    command_service = CommandService(
        store=store,
        admins=config.admins,
        today_provider=schedule.today,
        send_time=schedule.daily_send_time,
        bot_tools=sender,
        chat_id=settings.telegram_chat_id,
    )
    daily_job = DailyBirthdayJob(
        store=store,
        sender=sender,
        chat_id=settings.telegram_chat_id,
        schedule=schedule,
        state_path=settings.notification_state_path,
        greeting_image=config.greeting_image,
    )
    application.bot_data["command_service"] = command_service
    application.bot_data["daily_job"] = daily_job

    for handler in build_handlers(command_service):
        application.add_handler(handler)
    application.add_error_handler(error_handler)

    application.job_queue.run_daily(
        scheduled_birthday_callback,
        time=schedule.send_time(),
        name="daily-birthday-check",
    )

    application.post_init = startup_catchup
    LOGGER.info(
        "Birthday checks scheduled daily at %s %s",
        schedule.daily_send_time,
        schedule.timezone,
    )
    application.run_polling()


if __name__ == "__main__":
    main()
