"""Issuing of order numbers and refund numbers.

Order numbers are human-readable and sortable by creation second:

    20240101120000 042017
    ^ local time   ^ random suffix (6 digits)

The suffix space is small enough for same-second collisions to happen, so each
candidate is checked against a uniqueness oracle and redrawn a bounded number
of times. Refund numbers are 128-bit random hex tokens; a collision is not
expected to ever happen, the check is kept anyway.

Neither check replaces the unique constraints on the columns: a value can be
claimed by a concurrent writer between the check and the insert (see
RetryOnUniqueConflict).
"""

import re
import secrets
from collections.abc import Callable
from datetime import datetime
from typing import Any

import structlog

from shop.services.identifiers.oracle import UniquenessOracle
from shop.utils.datetime_utils import now_local

ORDER_NUMBER_FIELD = "no"
REFUND_NUMBER_FIELD = "refund_no"

PREFIX_FORMAT = "%Y%m%d%H%M%S"
SUFFIX_WIDTH = 6
SUFFIX_SPACE = 10**SUFFIX_WIDTH
MAX_ATTEMPTS = 10
REFUND_MAX_ATTEMPTS = 10_000

ORDER_NUMBER_PATTERN = re.compile(r"^\d{14}\d{6}$")
REFUND_TOKEN_PATTERN = re.compile(r"^[0-9a-f]{32}$")


class RefundTokenExhaustedError(RuntimeError):
    """Every refund token candidate was already taken.

    With 128-bit tokens this means the random source is broken, not bad luck.
    """


def format_order_number(prefix: str, suffix: int) -> str:
    """Join timestamp prefix and zero-padded suffix."""
    if not 0 <= suffix < SUFFIX_SPACE:
        raise ValueError(f"suffix must be in [0, {SUFFIX_SPACE}), got {suffix}")
    return f"{prefix}{suffix:0{SUFFIX_WIDTH}d}"


def _random_hex_token() -> str:
    """128 bits from the OS CSPRNG as 32 lowercase hex chars."""
    return secrets.token_hex(16)


class IdentifierIssuer:
    """Generates identifiers that were unused at the time of the check.

    Time and randomness are injected so tests can freeze the clock and script
    the random draws.

    Args:
        oracle: Answers whether a candidate already exists in a field
        clock: Returns "now"; the prefix uses its wall-clock fields as-is
        randbelow: randbelow(n) -> uniformly random int in [0, n)
        token_factory: Returns a new 32-char lowercase hex token
        max_attempts: Order number candidates tried per call
        refund_max_attempts: Refund token candidates tried before giving up
        logger: Structlog-compatible logger receiving the exhaustion diagnostics
    """

    def __init__(
        self,
        oracle: UniquenessOracle,
        *,
        clock: Callable[[], datetime] = now_local,
        randbelow: Callable[[int], int] = secrets.randbelow,
        token_factory: Callable[[], str] = _random_hex_token,
        max_attempts: int = MAX_ATTEMPTS,
        refund_max_attempts: int = REFUND_MAX_ATTEMPTS,
        logger: Any = None,
    ):
        if max_attempts < 1 or refund_max_attempts < 1:
            raise ValueError("Attempt bounds must be at least 1")
        self.oracle = oracle
        self.clock = clock
        self.randbelow = randbelow
        self.token_factory = token_factory
        self.max_attempts = max_attempts
        self.refund_max_attempts = refund_max_attempts
        self.logger = logger if logger is not None else structlog.get_logger(__name__)

    async def issue_order_number(self) -> str | None:
        """Return an unused order number, or None if every candidate collided.

        Performs at most `max_attempts` oracle queries. Exhaustion is logged
        once at warning level and reported as None; the caller must abort
        creating the record.
        """
        prefix = self.clock().strftime(PREFIX_FORMAT)
        for _ in range(self.max_attempts):
            candidate = format_order_number(prefix, self.randbelow(SUFFIX_SPACE))
            if not await self.oracle.exists(ORDER_NUMBER_FIELD, candidate):
                return candidate

        # Candidates are not logged, they reveal the draw sequence
        self.logger.warning("Order number generation exhausted", attempts=self.max_attempts)
        return None

    async def issue_refund_token(self) -> str:
        """Return an unused refund number (32 lowercase hex chars)."""
        for _ in range(self.refund_max_attempts):
            candidate = self.token_factory()
            if not await self.oracle.exists(REFUND_NUMBER_FIELD, candidate):
                return candidate

        self.logger.error("Refund number generation exhausted", attempts=self.refund_max_attempts)
        raise RefundTokenExhaustedError(f"No unused refund number after {self.refund_max_attempts} attempts")
