"""Shared helper for notification event handlers: render, then queue."""

import structlog
from protean.utils.globals import current_domain

from storefront.notifications.notification import Notification
from storefront.notifications.templates import get_template
from storefront.utils.config import setting

logger = structlog.get_logger(__name__)


def queue_notification(
    recipient_id: str,
    notification_type: str,
    context: dict,
    source_event_type: str | None = None,
    source_id: str | None = None,
) -> str:
    """Render the template for ``notification_type`` and create a Notification.

    Returns the notification id. Dispatch happens when ``NotificationCreated``
    reaches the dispatcher.
    """
    rendered = get_template(notification_type).render(context)

    notification = Notification.create(
        recipient_id=recipient_id,
        notification_type=notification_type,
        subject=rendered.get("subject"),
        body=rendered["body"],
        source_event_type=source_event_type,
        source_id=source_id,
        max_retries=setting("notification_max_retries"),
    )
    current_domain.repository_for(Notification).add(notification)

    logger.info(
        "Notification queued",
        recipient_id=recipient_id,
        notification_type=notification_type,
        notification_id=str(notification.id),
    )
    return str(notification.id)
