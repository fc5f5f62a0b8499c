from __future__ import annotations

import logging

from telegram import Update
from telegram.ext import CallbackContext, CommandHandler

from roster_bot.commands import CommandRequest, CommandService

LOGGER = logging.getLogger(__name__)


def command_request_from_update(update: Update, command: str) -> CommandRequest:
    message = update.effective_message
    text = (message.text or "") if message is not None else ""
    _, _, raw_args = text.partition(" ")

    user = update.effective_user
    handle = user.username if user is not None else None
    return CommandRequest(command=command, args=raw_args.strip(), caller_handle=handle)


def _make_callback(command: str):
    async def callback(update: Update, context: CallbackContext) -> None:
        service: CommandService = context.application.bot_data["command_service"]
        request = command_request_from_update(update, command)
        result = await service.handle(request)
        if update.effective_message is not None:
            await update.effective_message.reply_text(result.message)

    callback.__name__ = f"{command}_command"
    return callback


async def error_handler(update: object, context: CallbackContext) -> None:
    LOGGER.error("Update %s caused an error", update, exc_info=context.error)


def build_handlers(service: CommandService) -> list[CommandHandler]:
    return [CommandHandler(command, _make_callback(command)) for command in service.commands]
