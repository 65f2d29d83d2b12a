"""Notification aggregate (CQRS): one message to one recipient.

Notifications are created reactively from order events and sent by the
dispatcher through a channel adapter. A failed send can be retried until
``max_retries`` attempts have failed.

State Machine:
    PENDING → SENT
    PENDING → FAILED → (retry) → PENDING
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text

from storefront.domain import storefront
from storefront.notifications.events import (
    NotificationCreated,
    NotificationFailed,
    NotificationRetried,
    NotificationSent,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class NotificationType(Enum):
    ORDER_CONFIRMATION = "OrderConfirmation"
    ORDER_CANCELLATION = "OrderCancellation"


class NotificationChannel(Enum):
    EMAIL = "Email"


class NotificationStatus(Enum):
    PENDING = "Pending"
    SENT = "Sent"
    FAILED = "Failed"


# ---------------------------------------------------------------------------
# State Machine
# ---------------------------------------------------------------------------
_VALID_TRANSITIONS = {
    NotificationStatus.PENDING: {NotificationStatus.SENT, NotificationStatus.FAILED},
    NotificationStatus.FAILED: {NotificationStatus.PENDING},  # Via retry
    NotificationStatus.SENT: set(),  # Terminal
}


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Notification:
    # Recipient
    recipient_id: Identifier(required=True)

    # Notification type and channel
    notification_type: String(choices=NotificationType, required=True)
    channel: String(choices=NotificationChannel, default=NotificationChannel.EMAIL.value)

    # Content
    subject: String(max_length=500)
    body: Text(required=True)

    # Source event correlation
    source_event_type: String(max_length=200)
    source_id: String(max_length=200)

    # Status
    status: String(choices=NotificationStatus, default=NotificationStatus.PENDING.value)
    sent_at: DateTime()
    failure_reason: String(max_length=500)

    # Retry
    retry_count: Integer(default=0)
    max_retries: Integer(default=3)

    # Timestamps
    created_at: DateTime()
    updated_at: DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        recipient_id,
        notification_type,
        body,
        subject=None,
        channel=NotificationChannel.EMAIL.value,
        source_event_type=None,
        source_id=None,
        max_retries=3,
    ):
        """Create a new notification in PENDING status."""
        now = datetime.now(UTC)

        notification = cls(
            recipient_id=recipient_id,
            notification_type=notification_type,
            channel=channel,
            subject=subject,
            body=body,
            source_event_type=source_event_type,
            source_id=source_id,
            status=NotificationStatus.PENDING.value,
            retry_count=0,
            max_retries=max_retries,
            created_at=now,
            updated_at=now,
        )

        notification.raise_(
            NotificationCreated(
                notification_id=str(notification.id),
                recipient_id=str(recipient_id),
                notification_type=notification_type,
                channel=channel,
                subject=subject,
                source_event_type=source_event_type,
                created_at=now,
            )
        )

        return notification

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = NotificationStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def mark_sent(self):
        self._assert_can_transition(NotificationStatus.SENT)

        now = datetime.now(UTC)
        self.status = NotificationStatus.SENT.value
        self.sent_at = now
        self.updated_at = now

        self.raise_(
            NotificationSent(
                notification_id=str(self.id),
                recipient_id=str(self.recipient_id),
                channel=self.channel,
                sent_at=now,
            )
        )

    def mark_failed(self, reason):
        """Record a failed delivery attempt."""
        self._assert_can_transition(NotificationStatus.FAILED)

        now = datetime.now(UTC)
        self.status = NotificationStatus.FAILED.value
        self.failure_reason = reason
        self.retry_count = self.retry_count + 1
        self.updated_at = now

        self.raise_(
            NotificationFailed(
                notification_id=str(self.id),
                recipient_id=str(self.recipient_id),
                channel=self.channel,
                reason=reason,
                retry_count=self.retry_count,
                max_retries=self.max_retries,
                failed_at=now,
            )
        )

    def retry(self):
        """Put a failed notification back in the queue."""
        if NotificationStatus(self.status) != NotificationStatus.FAILED:
            raise ValidationError({"status": ["Only failed notifications can be retried"]})
        if self.retry_count >= self.max_retries:
            raise ValidationError({"retry_count": ["Maximum retry attempts exceeded"]})

        now = datetime.now(UTC)
        self.status = NotificationStatus.PENDING.value
        self.failure_reason = None
        self.updated_at = now

        self.raise_(
            NotificationRetried(
                notification_id=str(self.id),
                recipient_id=str(self.recipient_id),
                channel=self.channel,
                retry_count=self.retry_count,
                retried_at=now,
            )
        )
