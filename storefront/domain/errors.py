"""Business error taxonomy shared by services and the HTTP layer.

Everything except ``TransientStorageFailure`` is an expected outcome:
services raise it, the API maps it to a status code, nothing logs it as
an error.
"""

from __future__ import annotations


class ShopError(Exception):
    """Base class for all storefront errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(ShopError):
    pass


class InactiveError(ShopError):
    pass


class InsufficientCapacityError(ShopError):
    """Stock or delivery slot capacity cannot satisfy the request."""

    def __init__(self, message: str, available: int | None = None) -> None:
        super().__init__(message)
        self.available = available


class InvalidTransitionError(ShopError):
    pass


class CancellationWindowClosedError(InvalidTransitionError):
    pass


class ForbiddenError(ShopError):
    pass


class AuthenticationRequired(ShopError):
    pass


class TransientStorageFailure(ShopError):
    """Storage I/O failed mid-sequence; nothing was committed, retry is safe."""


class EmptyCartError(ShopError):
    pass


class CartRejectedError(ShopError):
    """A cart change was refused; the cart is left as it was."""
