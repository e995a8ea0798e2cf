"""Services module.

This module provides the service layer architecture:
- exceptions: Custom service exceptions
- identifiers: Order number / refund number issuing
- orders: Order management services
"""
