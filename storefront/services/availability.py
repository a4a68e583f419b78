"""Availability gate: decides how much of a product a cart may hold.

Two policies share one check:

* ``clamp=True`` (add, merge): cap the held quantity at the current stock
  and only reject when nothing at all can be held.
* ``clamp=False`` (set exact quantity, checkout): reject whenever the
  requested total exceeds stock, so the caller can show why.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront.data.models.product import ProductModel
from storefront.domain.errors import InactiveError, InsufficientCapacityError, NotFoundError
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Reservation:
    product: ProductModel
    quantity: int
    clamped: bool = False


def clamp_to_stock(quantity: int, stock_quantity: int | None) -> int:
    if stock_quantity is None:
        return quantity
    return max(0, min(quantity, stock_quantity))


class AvailabilityGate:

    def __init__(self, repo: ProductRepo):
        self.repo = repo

    def reserve(
        self,
        product_id: int,
        requested_qty: int,
        already_held_qty: int = 0,
        clamp: bool = True,
    ) -> Reservation:
        """Validate ``already_held_qty + requested_qty`` against the product.

        The product row is read with a row lock so the decision and the
        caller's write land in the same transaction. Nothing is written here.
        """
        if requested_qty <= 0:
            raise ValueError("requested quantity must be positive")
        if already_held_qty < 0:
            raise ValueError("held quantity cannot be negative")

        product = self.repo.get_product_for_update(product_id)
        if product is None:
            logger.info(f"Product {product_id} not found")
            raise NotFoundError(f"Product {product_id} does not exist")

        if not product.is_active:
            logger.info(f"Product {product_id} is not active")
            raise InactiveError(f"{product.name} is no longer available")

        wanted = already_held_qty + requested_qty
        stock = product.stock_quantity

        if stock is None or wanted <= stock:
            return Reservation(product=product, quantity=wanted)

        if clamp and stock > 0:
            logger.info(
                f"Clamping product {product_id} from {wanted} to available stock {stock}"
            )
            return Reservation(product=product, quantity=stock, clamped=True)

        logger.warning(
            f"Insufficient stock for product {product_id}: "
            f"held {already_held_qty}, requested {requested_qty}, available {stock}"
        )
        if stock == 0:
            raise InsufficientCapacityError(f"{product.name} is out of stock", available=0)
        raise InsufficientCapacityError(f"Only {stock} left of {product.name}", available=stock)
