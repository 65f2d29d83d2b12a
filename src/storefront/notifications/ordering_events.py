"""Notifications reacts to Order events.

Listens for OrderPlaced (confirmation) and OrderCancelled (cancellation
notice). With sync event processing these handlers run while the order's
unit of work commits, so a failure to render or queue a notice is logged
here and never reaches the caller of PlaceOrder or CancelOrder.
"""

import json

import structlog
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.notifications.helpers import queue_notification
from storefront.notifications.notification import Notification, NotificationType
from storefront.order.events import OrderCancelled, OrderPlaced

logger = structlog.get_logger(__name__)


def _queue_or_log(**kwargs) -> str | None:
    try:
        return queue_notification(**kwargs)
    except Exception:
        logger.exception(
            "Failed to queue notification",
            notification_type=kwargs.get("notification_type"),
            source_id=kwargs.get("source_id"),
        )
        return None


@storefront.event_handler(part_of=Notification, stream_category="storefront::order")
class OrderEventsHandler:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        """Send the order confirmation to the customer."""
        _queue_or_log(
            recipient_id=str(event.user_id),
            notification_type=NotificationType.ORDER_CONFIRMATION.value,
            context={
                "order_id": str(event.order_id),
                "total": event.total,
                "items": json.loads(event.items) if event.items else [],
            },
            source_event_type="Storefront.OrderPlaced.v1",
            source_id=str(event.order_id),
        )

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        _queue_or_log(
            recipient_id=str(event.user_id),
            notification_type=NotificationType.ORDER_CANCELLATION.value,
            context={"order_id": str(event.order_id), "reason": event.reason},
            source_event_type="Storefront.OrderCancelled.v1",
            source_id=str(event.order_id),
        )
