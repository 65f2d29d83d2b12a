"""Repository for the Order aggregate."""

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.repository(part_of=Order)
class OrderRepository:
    def bound_to_cart(self, cart_id) -> Order | None:
        """The order placed from ``cart_id``, if any."""
        return self._dao.query.filter(cart_id=str(cart_id)).all().first

    def newest_first(self, page: int, page_size: int, user_id=None):
        """One page of orders, most recent first.

        Returns the ``ResultSet``; its ``total`` counts every matching order.
        """
        query = self._dao.query
        if user_id is not None:
            query = query.filter(user_id=str(user_id))
        return query.order_by("-created_at").offset((page - 1) * page_size).limit(page_size).all()

    def remove(self, order: Order) -> None:
        self._dao.delete(order)
