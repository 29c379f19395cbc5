"""Domain-level exceptions.

Every failure the checkout pipeline can surface is a subclass of
DomainException so the CLI layer can catch them uniformly and display
user-friendly messages.

Partial fulfillment is deliberately *not* an exception: an order that was
created while some stock updates failed is still a successful checkout.
See ``storefront.domain.model.stock.PartialFulfillment``.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or input format was violated."""


class Unauthenticated(DomainException):
    """No session token/user is available for an operation that needs one."""


class EmptyCart(DomainException):
    """Checkout was attempted with no lines in the cart."""


class NotFound(DomainException):
    """A referenced order or product does not exist server-side."""


class NetworkError(DomainException):
    """A backend call failed (transport error or non-2xx response)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
