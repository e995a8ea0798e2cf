"""Order management services."""

from shop.services.orders.order_service import NewOrderItem, OrderService

__all__ = [
    "NewOrderItem",
    "OrderService",
]
