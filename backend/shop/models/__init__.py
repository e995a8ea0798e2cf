"""Database models."""

from sqlmodel import SQLModel

from shop.models.enums import RefundStatus, ShipStatus
from shop.models.order import ORDER_NO_CONSTRAINT, ORDER_REFUND_NO_CONSTRAINT, Order, OrderItem, User

__all__ = [
    "SQLModel",
    "User",
    "Order",
    "OrderItem",
    "RefundStatus",
    "ShipStatus",
    "ORDER_NO_CONSTRAINT",
    "ORDER_REFUND_NO_CONSTRAINT",
]
