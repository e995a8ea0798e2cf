"""User, Order, and OrderItem database models."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel
from ulid import ULID

from shop.models.enums import RefundStatus, ShipStatus, status_column_type
from shop.models.types import JSONType, ULIDType
from shop.utils.datetime_utils import utc_now


def _ulid() -> str:
    """Generate a new ULID string."""
    return str(ULID())


class User(SQLModel, table=True):
    """Customer placing orders."""

    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    name: str
    email: str = Field(unique=True, index=True)

    # Relationships
    orders: list["Order"] = Relationship(back_populates="user")


# Named constraints so insert-time conflicts can be told apart from other integrity errors
ORDER_NO_CONSTRAINT = UniqueConstraint("no", name="uq_orders_no")
ORDER_REFUND_NO_CONSTRAINT = UniqueConstraint("refund_no", name="uq_orders_refund_no")


class Order(SQLModel, table=True):
    """Customer order.

    `no` is assigned by OrderService before insert and never changes afterwards.
    """

    __tablename__ = "orders"
    __table_args__ = (ORDER_NO_CONSTRAINT, ORDER_REFUND_NO_CONSTRAINT)

    # ULID stored as UUID
    id: str = Field(
        default_factory=_ulid,
        max_length=26,
        sa_column=Column(ULIDType, primary_key=True),
    )

    # Order number: 14-digit local timestamp + 6 random digits
    no: str = Field(max_length=20)
    user_id: int = Field(foreign_key="users.id", index=True)

    address: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSONType, nullable=False))
    total_amount: Decimal = Field(sa_column=Column(Numeric(10, 2), nullable=False))
    remark: str | None = None

    # Payment (filled by the payment gateway callback)
    paid_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True)))
    payment_method: str | None = None
    payment_no: str | None = None

    # Refund
    refund_status: RefundStatus = Field(
        default=RefundStatus.PENDING,
        sa_column=Column(status_column_type(RefundStatus, "refundstatus"), nullable=False),
    )
    refund_no: str | None = Field(default=None, max_length=32)

    closed: bool = False
    reviewed: bool = False

    # Shipping
    ship_status: ShipStatus = Field(
        default=ShipStatus.PENDING,
        sa_column=Column(status_column_type(ShipStatus, "shipstatus"), nullable=False),
    )
    ship_data: dict[str, Any] | None = Field(default=None, sa_column=Column(JSONType, nullable=True))

    extra: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSONType, nullable=False))

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))

    # Relationships
    user: User = Relationship(back_populates="orders")
    items: list["OrderItem"] = Relationship(back_populates="order")


class OrderItem(SQLModel, table=True):
    """Single product line within an order."""

    __tablename__ = "order_items"

    id: int | None = Field(default=None, primary_key=True)
    order_id: str = Field(
        sa_column=Column(ULIDType, ForeignKey("orders.id"), index=True, nullable=False),
    )
    product_sku_id: int
    amount: int
    price: Decimal = Field(sa_column=Column(Numeric(10, 2), nullable=False))

    # Review (filled after the order is received)
    rating: int | None = None
    review: str | None = None
    reviewed_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True)))

    # Relationships
    order: Order = Relationship(back_populates="items")
