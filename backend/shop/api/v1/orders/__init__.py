"""Orders API package.

- order_routes: Order creation, lookup, per-user listing, refund requests
"""

from shop.api.v1.orders.order_routes import router

__all__ = ["router"]
