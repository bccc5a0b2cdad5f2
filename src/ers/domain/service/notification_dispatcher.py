"""Port for delivering notification intents.

Delivery is fire-and-forget from the core's point of view: a failing
dispatcher is logged and never undoes the transition that raised the
intent.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from ers.domain.model.notification import NotificationType

logger = logging.getLogger(__name__)


class NotificationDispatcher(ABC):

    @abstractmethod
    def dispatch(self, notification_type: NotificationType, order_id: int) -> None:
        """Hand a notification intent to the delivery side."""


def dispatch_safely(
    dispatcher: NotificationDispatcher,
    intents: list[tuple[NotificationType, int]],
) -> None:
    """Dispatch each intent, logging failures instead of raising them."""
    for notification_type, order_id in intents:
        try:
            dispatcher.dispatch(notification_type, order_id)
        except Exception:
            logger.warning(
                "Failed to send %s notification for order #%s",
                notification_type.value,
                order_id,
                exc_info=True,
            )
