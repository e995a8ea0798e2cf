"""Order API endpoints."""

import structlog
from fastapi import APIRouter, HTTPException, status

from shop.api.v1.orders.dependencies import OrderServiceDep
from shop.api.v1.orders.schemas import (
    OrderCreateRequest,
    OrderListResponse,
    OrderResponse,
    RefundRequest,
)
from shop.services.exceptions import StoreUnavailableError
from shop.services.orders.exceptions import (
    InvalidOrderItems,
    OrderNotFound,
    OrderNumberUnavailable,
    RefundNotAllowed,
    RefundNumberUnavailable,
    UserNotFound,
)

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["orders"])


@router.post(
    "/orders",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createOrder",
)
async def create_order(
    payload: OrderCreateRequest,
    service: OrderServiceDep,
) -> OrderResponse:
    """Create an order; the order number is issued by the server."""
    try:
        order = await service.create_order(
            user_id=payload.user_id,
            address=payload.address,
            items=[item.to_new_item() for item in payload.items],
            remark=payload.remark,
        )
    except UserNotFound:
        raise HTTPException(status_code=404, detail="User not found")
    except InvalidOrderItems as e:
        raise HTTPException(status_code=422, detail=str(e))
    except (OrderNumberUnavailable, StoreUnavailableError) as e:
        logger.warning("Order creation aborted", user_id=payload.user_id, reason=str(e))
        raise HTTPException(status_code=503, detail="Order could not be created, try again")
    return OrderResponse.from_model(order)


@router.get("/orders/{no}", response_model=OrderResponse, operation_id="getOrder")
async def get_order(
    no: str,
    service: OrderServiceDep,
) -> OrderResponse:
    """Get a single order with its items by order number."""
    try:
        order = await service.get_order(no)
    except OrderNotFound:
        raise HTTPException(status_code=404, detail="Order not found")
    return OrderResponse.from_model(order)


@router.get("/users/{user_id}/orders", response_model=OrderListResponse, operation_id="listUserOrders")
async def list_user_orders(
    user_id: int,
    service: OrderServiceDep,
) -> OrderListResponse:
    """List all orders of a user, newest first."""
    try:
        orders = await service.list_user_orders(user_id)
    except UserNotFound:
        raise HTTPException(status_code=404, detail="User not found")
    return OrderListResponse(
        orders=[OrderResponse.from_model(order) for order in orders],
        total=len(orders),
    )


@router.post("/orders/{no}/refund", response_model=OrderResponse, operation_id="requestRefund")
async def request_refund(
    no: str,
    payload: RefundRequest,
    service: OrderServiceDep,
) -> OrderResponse:
    """Apply for a refund; a refund number is issued by the server."""
    try:
        order = await service.request_refund(no, payload.reason)
    except OrderNotFound:
        raise HTTPException(status_code=404, detail="Order not found")
    except RefundNotAllowed as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (RefundNumberUnavailable, StoreUnavailableError) as e:
        logger.warning("Refund request aborted", no=no, reason=str(e))
        raise HTTPException(status_code=503, detail="Refund could not be requested, try again")
    return OrderResponse.from_model(order)
