from __future__ import annotations


class RosterBotError(Exception):
    pass


class ValidationError(RosterBotError, ValueError):
    pass


class DuplicateError(RosterBotError):
    pass


class NotFoundError(RosterBotError):
    pass


class PersistenceError(RosterBotError):
    pass


class NotificationDispatchError(RosterBotError):
    pass
