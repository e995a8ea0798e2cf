"""Enum definitions for database models."""

from sqlalchemy import Enum

from shop.models.status import Label, LabeledStatusEnum


class RefundStatus(LabeledStatusEnum):
    """Refund state of an order.

    Status flow:
        PENDING -> APPLIED -> PROCESSING -> SUCCESS | FAILED
    """

    PENDING = Label("pending", display="未退款")
    APPLIED = Label("applied", display="已申请退款")
    PROCESSING = Label("processing", display="退款中")
    SUCCESS = Label("success", display="退款成功", final=True)
    FAILED = Label("failed", display="退款失败", final=True)


class ShipStatus(LabeledStatusEnum):
    """Shipping state of an order.

    Status flow:
        PENDING -> DELIVERED -> RECEIVED
    """

    PENDING = Label("pending", display="未发货")
    DELIVERED = Label("delivered", display="已发货")
    RECEIVED = Label("received", display="已收货", final=True)


def status_column_type(enum_class: type[LabeledStatusEnum], name: str) -> Enum:
    """VARCHAR-backed enum column storing member values (portable across dialects)."""
    return Enum(
        enum_class,
        name=name,
        native_enum=False,
        length=32,
        values_callable=lambda e: [member.value for member in e],
    )
