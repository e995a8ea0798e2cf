"""Uniqueness oracles: answer whether a candidate identifier is already taken."""

from typing import Any, Protocol

import structlog
from sqlalchemy import exists, select
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from shop.services.exceptions import StoreUnavailableError

logger = structlog.get_logger(__name__)


class UniquenessOracle(Protocol):
    """Read-only view of an identifier namespace."""

    async def exists(self, field: str, candidate: str) -> bool:
        """Return True if a committed record already holds `candidate` in `field`."""
        ...


class ModelUniquenessOracle:
    """Checks candidates against a table column through an async session.

    Reflects committed rows (plus anything flushed in the same session); it can
    race with concurrent inserts, which the column's unique constraint catches.
    """

    def __init__(self, session: AsyncSession, model_class: type[SQLModel]):
        self.session = session
        self.model_class = model_class

    def _column(self, field: str) -> Any:
        column = self.model_class.__table__.columns.get(field)  # type: ignore[attr-defined]
        if column is None:
            raise ValueError(f"{self.model_class.__name__} has no column {field!r}")
        return column

    async def exists(self, field: str, candidate: str) -> bool:
        column = self._column(field)
        statement = select(exists().where(column == candidate))
        try:
            result = await self.session.execute(statement)
        except (DBAPIError, PoolTimeoutError) as e:
            if not _is_store_failure(e):
                raise
            logger.error(
                "Uniqueness check failed",
                model=self.model_class.__name__,
                field=field,
                error=str(e),
            )
            raise StoreUnavailableError(f"Cannot check {self.model_class.__name__}.{field}") from e
        return bool(result.scalar())


def _is_store_failure(error: Exception) -> bool:
    """Connection-level failures; other driver errors are bugs and propagate as-is."""
    if isinstance(error, (OperationalError, InterfaceError, PoolTimeoutError)):
        return True
    return isinstance(error, DBAPIError) and error.connection_invalidated
