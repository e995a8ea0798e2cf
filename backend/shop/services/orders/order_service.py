"""Order management service.

Creating a record is an explicit two-step operation: the identifier is
generated first (IdentifierIssuer), then the record is persisted. Both steps
run inside a RetryOnUniqueConflict attempt so that a value claimed by a
concurrent writer between check and insert leads to a fresh attempt instead
of a duplicate.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlmodel import select

from shop.config import settings
from shop.models.enums import RefundStatus
from shop.models.order import ORDER_NO_CONSTRAINT, ORDER_REFUND_NO_CONSTRAINT, Order, OrderItem, User
from shop.models.utils.unique_conflict import RetryOnUniqueConflict, UniqueConflictExhaustedError
from shop.services.identifiers.issuer import IdentifierIssuer, RefundTokenExhaustedError
from shop.services.identifiers.oracle import ModelUniquenessOracle
from shop.services.orders.exceptions import (
    InvalidOrderItems,
    OrderNotFound,
    OrderNumberUnavailable,
    RefundNotAllowed,
    RefundNumberUnavailable,
    UserNotFound,
)
from shop.utils.datetime_utils import utc_now

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class NewOrderItem:
    """Line of an order that is about to be created."""

    product_sku_id: int
    amount: int
    price: Decimal


class OrderService:
    """Service for order management operations."""

    def __init__(self, session: AsyncSession, issuer: IdentifierIssuer | None = None):
        self.session = session
        self.issuer = issuer or IdentifierIssuer(
            ModelUniquenessOracle(session, Order),
            max_attempts=settings.order_number_max_attempts,
            refund_max_attempts=settings.refund_number_max_attempts,
        )

    async def create_order(
        self,
        *,
        user_id: int,
        address: dict[str, Any],
        items: Sequence[NewOrderItem],
        remark: str | None = None,
    ) -> Order:
        """Create an order with a freshly issued order number.

        Raises:
            InvalidOrderItems: no items, non-positive amount or negative price
            UserNotFound: user_id does not exist
            OrderNumberUnavailable: no order number could be issued or stored
            StoreUnavailableError: the uniqueness check could not be performed
        """
        _validate_items(items)
        if await self.session.get(User, user_id) is None:
            raise UserNotFound()

        total_amount = sum((item.price * item.amount for item in items), Decimal("0"))

        order: Order | None = None
        try:
            async for attempt in RetryOnUniqueConflict(
                session=self.session,
                constraint=ORDER_NO_CONSTRAINT,
                max_retries=settings.order_create_max_retries,
            ):
                async with attempt:
                    # Step 1: generate
                    no = await self.issuer.issue_order_number()
                    if no is None:
                        raise OrderNumberUnavailable("No unused order number available")

                    # Step 2: persist (unique constraint is the final check)
                    order = Order(
                        no=no,
                        user_id=user_id,
                        address=address,
                        remark=remark,
                        total_amount=total_amount,
                        items=[
                            OrderItem(product_sku_id=item.product_sku_id, amount=item.amount, price=item.price)
                            for item in items
                        ],
                    )
                    self.session.add(order)
                    await self.session.flush()
        except UniqueConflictExhaustedError as e:
            logger.warning("Order number kept conflicting on insert", attempts=e.attempts)
            raise OrderNumberUnavailable("Order number conflicted on every insert attempt") from e

        assert order is not None
        logger.info(
            "Order created",
            order_id=order.id,
            no=order.no,
            user_id=user_id,
            total_amount=str(total_amount),
        )
        return order

    async def get_order(self, no: str) -> Order:
        """Get order by order number with its items."""
        return await self._load_order(no)

    async def list_user_orders(self, user_id: int) -> list[Order]:
        """All orders of a user, newest first."""
        if await self.session.get(User, user_id) is None:
            raise UserNotFound()
        statement = (
            select(Order)
            .options(selectinload(Order.items))  # type: ignore[arg-type]
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.no.desc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def request_refund(self, no: str, reason: str) -> Order:
        """Mark an order as refund-applied and assign it a refund number.

        Raises:
            OrderNotFound: no order with this number
            RefundNotAllowed: order is closed or a refund was already requested
            RefundNumberUnavailable: no unused refund number could be assigned
        """
        order: Order | None = None
        try:
            async for attempt in RetryOnUniqueConflict(
                session=self.session,
                constraint=ORDER_REFUND_NO_CONSTRAINT,
                max_retries=settings.order_create_max_retries,
            ):
                async with attempt:
                    # Reload on every attempt, a rolled back savepoint expires the instance
                    order = await self._load_order(no, refresh=True)
                    if order.closed:
                        raise RefundNotAllowed("Order is closed")
                    if order.refund_status != RefundStatus.PENDING:
                        raise RefundNotAllowed(f"Refund already {order.refund_status.value}")

                    order.refund_no = await self.issuer.issue_refund_token()
                    order.refund_status = RefundStatus.APPLIED
                    order.extra = {**(order.extra or {}), "refund_reason": reason}
                    order.updated_at = utc_now()
                    await self.session.flush()
        except UniqueConflictExhaustedError as e:
            # 128-bit tokens colliding repeatedly means something is badly wrong
            logger.error("Refund number kept conflicting on update", no=no, attempts=e.attempts)
            raise RefundNumberUnavailable(f"Refund number kept conflicting after {e.attempts} attempts") from e
        except RefundTokenExhaustedError as e:
            raise RefundNumberUnavailable(str(e)) from e

        assert order is not None
        logger.info("Refund requested", order_id=order.id, no=order.no, refund_no=order.refund_no)
        return order

    async def _load_order(self, no: str, *, refresh: bool = False) -> Order:
        statement = (
            select(Order)
            .options(selectinload(Order.items))  # type: ignore[arg-type]
            .where(Order.no == no)
        )
        if refresh:
            statement = statement.execution_options(populate_existing=True)
        result = await self.session.execute(statement)
        order = result.scalars().first()
        if not order:
            raise OrderNotFound()
        return order


def _validate_items(items: Sequence[NewOrderItem]) -> None:
    if not items:
        raise InvalidOrderItems("Order must contain at least one item")
    for item in items:
        if item.amount <= 0:
            raise InvalidOrderItems(f"Amount must be positive (sku {item.product_sku_id})")
        if item.price < 0:
            raise InvalidOrderItems(f"Price must not be negative (sku {item.product_sku_id})")
