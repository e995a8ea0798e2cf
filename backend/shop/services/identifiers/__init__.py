"""Unique identifier issuing for business records."""

from shop.services.identifiers.issuer import (
    MAX_ATTEMPTS,
    ORDER_NUMBER_FIELD,
    ORDER_NUMBER_PATTERN,
    REFUND_NUMBER_FIELD,
    REFUND_TOKEN_PATTERN,
    SUFFIX_SPACE,
    IdentifierIssuer,
    RefundTokenExhaustedError,
    format_order_number,
)
from shop.services.identifiers.oracle import ModelUniquenessOracle, UniquenessOracle

__all__ = [
    "MAX_ATTEMPTS",
    "ORDER_NUMBER_FIELD",
    "ORDER_NUMBER_PATTERN",
    "REFUND_NUMBER_FIELD",
    "REFUND_TOKEN_PATTERN",
    "SUFFIX_SPACE",
    "IdentifierIssuer",
    "ModelUniquenessOracle",
    "RefundTokenExhaustedError",
    "UniquenessOracle",
    "format_order_number",
]
