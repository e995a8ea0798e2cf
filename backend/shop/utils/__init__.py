"""Utility functions and helpers."""

from shop.utils.datetime_utils import now_local, to_local_timezone, utc_now

__all__ = [
    "now_local",
    "to_local_timezone",
    "utc_now",
]
