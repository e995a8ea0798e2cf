"""Tests for labeled status enums."""

import pytest

from shop.models.enums import RefundStatus, ShipStatus
from shop.models.status import Label


def test_refund_labels() -> None:
    assert dict(RefundStatus.labels()) == {
        "pending": "未退款",
        "applied": "已申请退款",
        "processing": "退款中",
        "success": "退款成功",
        "failed": "退款失败",
    }


def test_ship_labels() -> None:
    assert dict(ShipStatus.labels()) == {
        "pending": "未发货",
        "delivered": "已发货",
        "received": "已收货",
    }


def test_labels_are_built_once_and_read_only() -> None:
    labels = RefundStatus.labels()

    assert RefundStatus.labels() is labels
    with pytest.raises(TypeError):
        labels["pending"] = "changed"  # type: ignore[index]


def test_lookup_tables_are_per_enum() -> None:
    assert RefundStatus.labels()["pending"] == "未退款"
    assert ShipStatus.labels()["pending"] == "未发货"


def test_members_are_plain_strings() -> None:
    assert RefundStatus("applied") is RefundStatus.APPLIED
    assert RefundStatus.APPLIED == "applied"
    assert ShipStatus.DELIVERED.display == "已发货"


def test_final_states() -> None:
    assert RefundStatus.final_states() == {RefundStatus.SUCCESS, RefundStatus.FAILED}
    assert ShipStatus.final_states() == {ShipStatus.RECEIVED}
    assert not RefundStatus.PENDING.is_final


def test_unknown_value_is_rejected() -> None:
    with pytest.raises(ValueError):
        RefundStatus("lost")


def test_label_requires_value() -> None:
    with pytest.raises(ValueError):
        Label("")
