"""Order domain exceptions."""

from shop.services.exceptions import NotFoundError, ServiceError, ValidationError


class OrderNotFound(NotFoundError):
    """Order not found."""

    pass


class UserNotFound(NotFoundError):
    """User not found."""

    pass


class InvalidOrderItems(ValidationError):
    """Order items are missing or malformed."""

    pass


class RefundNotAllowed(ValidationError):
    """Order is not in a state that allows requesting a refund."""

    pass


class OrderNumberUnavailable(ServiceError):
    """No unused order number could be issued; the order was not created."""

    pass


class RefundNumberUnavailable(ServiceError):
    """No unused refund number could be assigned; the refund was not requested."""

    pass
