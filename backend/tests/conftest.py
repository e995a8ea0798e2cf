"""Shared fixtures: in-memory SQLite database with savepoint support."""

import os

# Must be set before shop.config is imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["TIMEZONE"] = "Asia/Shanghai"

from collections.abc import AsyncIterator  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

from shop.models.order import Order, User  # noqa: E402


def _enable_savepoints(engine: AsyncEngine) -> None:
    """Let SQLAlchemy emit BEGIN itself so SAVEPOINT works with the sqlite driver."""

    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):  # type: ignore[no-untyped-def]
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):  # type: ignore[no-untyped-def]
        conn.exec_driver_sql("BEGIN")


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    _enable_savepoints(engine)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_maker: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_maker() as session:
        yield session


@pytest.fixture
async def user(session: AsyncSession) -> User:
    user = User(name="Alice", email="alice@example.com")
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
def make_order(session: AsyncSession, user: User):  # type: ignore[no-untyped-def]
    """Insert and commit an order with a fixed number."""

    async def _make_order(no: str, **fields: object) -> Order:
        order = Order(
            no=no,
            user_id=user.id,  # type: ignore[arg-type]
            address={"city": "Shanghai"},
            total_amount=Decimal("10.00"),
            **fields,
        )
        session.add(order)
        await session.commit()
        return order

    return _make_order
