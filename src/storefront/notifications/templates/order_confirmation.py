"""Order confirmation template: sent once an order has been placed."""

from storefront.notifications.notification import NotificationType


class OrderConfirmationTemplate:
    notification_type = NotificationType.ORDER_CONFIRMATION.value

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        total = context.get("total", 0.0)
        items = context.get("items") or []

        lines = []
        for item in items:
            name = item.get("name") or item.get("product_id")
            brand = f" ({item['brand']})" if item.get("brand") else ""
            lines.append(f"  {item.get('quantity', 0)} x {name}{brand} @ {float(item.get('unit_price') or 0):.2f}")

        return {
            "subject": f"Order Confirmation {order_id}",
            "body": (
                f"Thank you for your order #{order_id}.\n\n"
                + ("\n".join(lines) + "\n\n" if lines else "")
                + f"Order Total: {float(total):.2f}\n\n"
                "We'll let you know as each item ships."
            ),
        }
