"""Race-condition-safe inserts of uniquely constrained values using savepoints."""

from collections.abc import AsyncIterator
from typing import Any

import structlog
from sqlalchemy import UniqueConstraint
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction

logger = structlog.get_logger(__name__)


class UniqueConflictExhaustedError(RuntimeError):
    """Every attempt hit the unique constraint."""

    def __init__(self, constraint: str, attempts: int):
        self.constraint = constraint
        self.attempts = attempts
        super().__init__(f"Failed to store unique value after {attempts} attempts (constraint: {constraint})")


class RetryOnUniqueConflict:
    """Async iterator with savepoint-based retry on unique constraint conflict.

    Checking a candidate value before inserting it leaves a window in which a
    concurrent writer can claim the same value. The database constraint is the
    final arbiter: each iteration runs the generate-and-persist body inside a
    savepoint, and a violation of `constraint` rolls the savepoint back and
    starts the next attempt with a fresh value.

    Usage:
        async for attempt in RetryOnUniqueConflict(
            session=self.session,
            constraint=ORDER_NO_CONSTRAINT,
        ):
            async with attempt:
                order = Order(no=await issuer.issue_order_number(), ...)
                session.add(order)
                await session.flush()
    """

    def __init__(
        self,
        session: AsyncSession,
        constraint: UniqueConstraint,
        max_retries: int = 3,
    ):
        self.session = session
        self.constraint = constraint
        self.max_retries = max_retries
        self.current_attempt = 0
        self._savepoint: AsyncSessionTransaction | None = None
        self._success = False

        if not self.constraint.name:
            raise ValueError("UniqueConstraint must have a name for conflict detection.")
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")

    async def __aiter__(self) -> AsyncIterator["RetryOnUniqueConflict"]:
        while self.current_attempt < self.max_retries and not self._success:
            self.current_attempt += 1
            yield self
        if not self._success:
            raise UniqueConflictExhaustedError(str(self.constraint.name), self.current_attempt)

    @property
    def succeeded(self) -> bool:
        return self._success

    def is_conflict(self, error: IntegrityError) -> bool:
        """Whether the error is a violation of this constraint.

        PostgreSQL names the constraint ('... unique constraint "uq_orders_no"'),
        SQLite names the columns ('UNIQUE constraint failed: orders.no').
        """
        error_str = str(error.orig if error.orig is not None else error).lower()
        if f'"{self.constraint.name}"' in error_str:
            return True
        if "unique constraint failed" not in error_str:
            return False
        table_name = self.constraint.table.name
        columns = [f"{table_name}.{column.name}".lower() for column in self.constraint.columns]
        return bool(columns) and all(column in error_str for column in columns)

    async def __aenter__(self) -> "RetryOnUniqueConflict":
        self._savepoint = await self.session.begin_nested()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> bool:
        savepoint = self._savepoint
        self._savepoint = None
        assert savepoint is not None, "attempt used without 'async with'"

        if exc_type is None:
            await savepoint.commit()
            await self.session.commit()
            self._success = True
            return False

        await savepoint.rollback()
        if isinstance(exc_val, IntegrityError) and self.is_conflict(exc_val):
            logger.warning(
                "Unique constraint conflict, retrying",
                attempt=self.current_attempt,
                max_retries=self.max_retries,
                constraint=self.constraint.name,
            )
            return True  # Suppress, next iteration retries
        return False  # Re-raise everything else
