"""API schemas for orders endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_serializer

from shop.models.enums import RefundStatus, ShipStatus
from shop.models.order import Order, OrderItem
from shop.services.orders.order_service import NewOrderItem
from shop.utils.datetime_utils import to_local_timezone

# =============================================================================
# Request Schemas
# =============================================================================


class OrderItemRequest(BaseModel):
    """Single line of a new order."""

    product_sku_id: int
    amount: int
    price: Decimal = Field(decimal_places=2)

    def to_new_item(self) -> NewOrderItem:
        return NewOrderItem(product_sku_id=self.product_sku_id, amount=self.amount, price=self.price)


class OrderCreateRequest(BaseModel):
    """Request to create an order."""

    user_id: int
    address: dict[str, Any]
    items: list[OrderItemRequest]
    remark: str | None = Field(default=None, max_length=255)


class RefundRequest(BaseModel):
    """Request to apply for a refund."""

    reason: str = Field(min_length=1, max_length=255)


# =============================================================================
# Response Schemas
# =============================================================================


def _serialize_local(dt: datetime | None) -> str | None:
    localized_dt = to_local_timezone(dt)
    return localized_dt.isoformat() if localized_dt else None


class OrderItemResponse(BaseModel):
    """Order item response schema."""

    id: int
    product_sku_id: int
    amount: int
    price: Decimal

    @field_serializer("price")
    def serialize_price(self, price: Decimal) -> str:
        return f"{price:.2f}"

    @classmethod
    def from_model(cls, item: OrderItem) -> "OrderItemResponse":
        """Create response from OrderItem model."""
        return cls(
            id=item.id,  # type: ignore[arg-type]
            product_sku_id=item.product_sku_id,
            amount=item.amount,
            price=item.price,
        )


class OrderResponse(BaseModel):
    """Order response schema with display labels for statuses."""

    id: str
    no: str
    user_id: int
    address: dict[str, Any]
    total_amount: Decimal
    remark: str | None
    paid_at: datetime | None
    refund_status: RefundStatus
    refund_status_label: str
    refund_no: str | None
    ship_status: ShipStatus
    ship_status_label: str
    closed: bool
    reviewed: bool
    items: list[OrderItemResponse]
    created_at: datetime

    @field_serializer("total_amount")
    def serialize_total_amount(self, total_amount: Decimal) -> str:
        return f"{total_amount:.2f}"

    @field_serializer("created_at", "paid_at")
    def serialize_datetime(self, dt: datetime | None) -> str | None:
        """Serialize datetime to local timezone."""
        return _serialize_local(dt)

    @classmethod
    def from_model(cls, order: Order) -> "OrderResponse":
        """Create response from Order model."""
        return cls(
            id=order.id,
            no=order.no,
            user_id=order.user_id,
            address=order.address,
            total_amount=order.total_amount,
            remark=order.remark,
            paid_at=order.paid_at,
            refund_status=order.refund_status,
            refund_status_label=order.refund_status.display,
            refund_no=order.refund_no,
            ship_status=order.ship_status,
            ship_status_label=order.ship_status.display,
            closed=order.closed,
            reviewed=order.reviewed,
            items=[OrderItemResponse.from_model(item) for item in order.items],
            created_at=order.created_at,
        )


class OrderListResponse(BaseModel):
    """Orders of one user."""

    orders: list[OrderResponse]
    total: int
