"""HTTP-level tests for the orders API."""

from collections.abc import AsyncIterator
from typing import Annotated

import pytest
from fastapi import Depends
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shop.api.v1.orders.dependencies import get_order_service
from shop.db import get_session
from shop.main import app
from shop.models.order import User
from shop.services.identifiers import ORDER_NUMBER_PATTERN, REFUND_TOKEN_PATTERN
from shop.services.orders import OrderService

ORDER_PAYLOAD = {
    "address": {"province": "Shanghai", "city": "Shanghai", "address": "Nanjing Rd 1"},
    "items": [{"product_sku_id": 3, "amount": 2, "price": "12.50"}],
    "remark": "gift wrap",
}


@pytest.fixture
async def client(session_maker: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncClient]:
    async def override_get_session() -> AsyncIterator[AsyncSession]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


async def _create(client: AsyncClient, user: User) -> dict:  # type: ignore[type-arg]
    response = await client.post("/api/v1/orders", json={**ORDER_PAYLOAD, "user_id": user.id})
    assert response.status_code == 201, response.text
    return response.json()


async def test_health(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


async def test_create_order(client: AsyncClient, user: User) -> None:
    body = await _create(client, user)

    assert ORDER_NUMBER_PATTERN.match(body["no"])
    assert body["total_amount"] == "25.00"
    assert body["refund_status"] == "pending"
    assert body["refund_status_label"] == "未退款"
    assert body["ship_status"] == "pending"
    assert body["ship_status_label"] == "未发货"
    assert body["refund_no"] is None
    assert body["items"][0]["price"] == "12.50"
    assert body["created_at"].endswith("+08:00")


async def test_get_order(client: AsyncClient, user: User) -> None:
    created = await _create(client, user)

    response = await client.get(f"/api/v1/orders/{created['no']}")

    assert response.status_code == 200
    assert response.json()["id"] == created["id"]
    assert response.json()["remark"] == "gift wrap"


async def test_get_missing_order(client: AsyncClient) -> None:
    response = await client.get("/api/v1/orders/20240101120000000001")

    assert response.status_code == 404


async def test_create_for_unknown_user(client: AsyncClient) -> None:
    response = await client.post("/api/v1/orders", json={**ORDER_PAYLOAD, "user_id": 999})

    assert response.status_code == 404


async def test_create_without_items(client: AsyncClient, user: User) -> None:
    response = await client.post("/api/v1/orders", json={**ORDER_PAYLOAD, "items": [], "user_id": user.id})

    assert response.status_code == 422


async def test_exhausted_order_numbers_return_503(client: AsyncClient, user: User) -> None:
    class ExhaustedIssuer:
        async def issue_order_number(self) -> str | None:
            return None

    async def override_service(session: Annotated[AsyncSession, Depends(get_session)]) -> OrderService:
        return OrderService(session, issuer=ExhaustedIssuer())  # type: ignore[arg-type]

    app.dependency_overrides[get_order_service] = override_service

    response = await client.post("/api/v1/orders", json={**ORDER_PAYLOAD, "user_id": user.id})

    assert response.status_code == 503


async def test_list_user_orders(client: AsyncClient, user: User) -> None:
    first = await _create(client, user)
    second = await _create(client, user)

    response = await client.get(f"/api/v1/users/{user.id}/orders")

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert {order["no"] for order in body["orders"]} == {first["no"], second["no"]}


async def test_request_refund(client: AsyncClient, user: User) -> None:
    created = await _create(client, user)

    response = await client.post(f"/api/v1/orders/{created['no']}/refund", json={"reason": "wrong size"})

    assert response.status_code == 200
    body = response.json()
    assert REFUND_TOKEN_PATTERN.match(body["refund_no"])
    assert body["refund_status"] == "applied"
    assert body["refund_status_label"] == "已申请退款"

    again = await client.post(f"/api/v1/orders/{created['no']}/refund", json={"reason": "again"})
    assert again.status_code == 409


async def test_refund_for_missing_order(client: AsyncClient) -> None:
    response = await client.post("/api/v1/orders/20240101120000000001/refund", json={"reason": "?"})

    assert response.status_code == 404


async def test_conflicting_refund_numbers_return_503(client: AsyncClient, user: User, make_order) -> None:  # type: ignore[no-untyped-def]
    await make_order("20240101120000000001", refund_no="a" * 32)
    await make_order("20240101120000000002")

    class CollidingIssuer:
        async def issue_refund_token(self) -> str:
            return "a" * 32

    async def override_service(session: Annotated[AsyncSession, Depends(get_session)]) -> OrderService:
        return OrderService(session, issuer=CollidingIssuer())  # type: ignore[arg-type]

    app.dependency_overrides[get_order_service] = override_service

    response = await client.post("/api/v1/orders/20240101120000000002/refund", json={"reason": "damaged"})

    assert response.status_code == 503
    order = (await client.get("/api/v1/orders/20240101120000000002")).json()
    assert order["refund_status"] == "pending"
    assert order["refund_no"] is None
