"""NotificationDispatcher that records intents in the log.

Email delivery lives outside this system; whatever consumes the log (or
replaces this class) owns templates and transport.
"""

from __future__ import annotations

import logging

from ers.domain.model.notification import NotificationType
from ers.domain.service.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)


class LoggingNotificationDispatcher(NotificationDispatcher):

    def dispatch(self, notification_type: NotificationType, order_id: int) -> None:
        logger.info("Notification %s queued for order #%s", notification_type.value, order_id)
