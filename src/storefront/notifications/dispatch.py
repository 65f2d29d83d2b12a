"""Internal dispatch handler: sends notifications via channel adapters.

Reacts to NotificationCreated and NotificationRetried and hands the
notification to its channel adapter, then records SENT or FAILED.
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.notifications.channel import get_channel
from storefront.notifications.events import NotificationCreated, NotificationRetried
from storefront.notifications.notification import Notification, NotificationStatus

logger = structlog.get_logger(__name__)


@storefront.event_handler(part_of=Notification)
class NotificationDispatcher:
    @handle(NotificationCreated)
    def on_notification_created(self, event: NotificationCreated) -> None:
        dispatch_notification(event.notification_id)

    @handle(NotificationRetried)
    def on_notification_retried(self, event: NotificationRetried) -> None:
        dispatch_notification(event.notification_id)


def dispatch_notification(notification_id) -> None:
    """Send a PENDING notification through its channel and record the outcome."""
    repo = current_domain.repository_for(Notification)

    try:
        notification = repo.get(notification_id)
    except ObjectNotFoundError:
        logger.error("Failed to load notification for dispatch", notification_id=str(notification_id))
        return

    if NotificationStatus(notification.status) != NotificationStatus.PENDING:
        logger.info(
            "Notification not in PENDING status, skipping dispatch",
            notification_id=str(notification_id),
            status=notification.status,
        )
        return

    try:
        adapter = get_channel(notification.channel)
        result = adapter.send(
            to=str(notification.recipient_id),
            subject=notification.subject or "",
            body=notification.body,
        )

        if result.get("status") == "sent":
            notification.mark_sent()
        else:
            notification.mark_failed(result.get("error", "Unknown dispatch error"))
    except Exception as e:
        notification.mark_failed(str(e))
        logger.error(
            "Notification dispatch failed",
            notification_id=str(notification.id),
            error=str(e),
        )

    repo.add(notification)
