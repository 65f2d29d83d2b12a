"""Order cancellation template: sent when an order is withdrawn."""

from storefront.notifications.notification import NotificationType


class OrderCancellationTemplate:
    notification_type = NotificationType.ORDER_CANCELLATION.value

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        if context.get("reason") == "All_Items_Cancelled":
            detail = "Every item in your order has been cancelled, so the order has been closed."
        else:
            detail = "Your order has been cancelled."
        return {
            "subject": f"Order #{order_id} Cancelled",
            "body": f"{detail}\n\nOrder #{order_id}\n\nAny items not yet delivered have been returned to stock.",
        }
