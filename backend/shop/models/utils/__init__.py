"""Model-level helpers."""

from shop.models.utils.unique_conflict import RetryOnUniqueConflict, UniqueConflictExhaustedError

__all__ = [
    "RetryOnUniqueConflict",
    "UniqueConflictExhaustedError",
]
