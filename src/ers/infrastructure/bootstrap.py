"""Composition root for the CLI.

Builds the JSON unit of work, buffer policy and notification dispatcher
from the environment-derived settings.
"""

from __future__ import annotations

from functools import lru_cache

from ers.domain.model.date_range import BufferPolicy
from ers.domain.service.notification_dispatcher import NotificationDispatcher
from ers.infrastructure.config import Settings
from ers.infrastructure.notifications import LoggingNotificationDispatcher
from ers.infrastructure.persistence.json_unit_of_work import JsonUnitOfWork


@lru_cache(maxsize=1)
def settings() -> Settings:
    return Settings.from_env()


def unit_of_work() -> JsonUnitOfWork:
    return JsonUnitOfWork(settings().store_path)


def buffer_policy() -> BufferPolicy:
    return settings().buffer_policy


def dispatcher() -> NotificationDispatcher:
    return LoggingNotificationDispatcher()
