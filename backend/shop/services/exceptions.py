"""Base service exceptions.

These exceptions are raised by the service layer and should be caught
by the API layer and converted to appropriate HTTP responses.
"""


class ServiceError(Exception):
    """Base service exception."""

    pass


class NotFoundError(ServiceError):
    """Resource not found."""

    pass


class ValidationError(ServiceError):
    """Validation error."""

    pass


class StoreUnavailableError(ServiceError):
    """The backing store could not answer a query (connection lost, timeout, ...).

    Distinct from a negative or positive answer: callers must not treat it as
    "value exists" or "value is free".
    """

    pass
