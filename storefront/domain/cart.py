# storefront/domain/cart.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class CartOwner:
    """Who a cart belongs to for the duration of one request.

    ``user_id`` set means the Durable (database) cart is used, otherwise
    the Ephemeral cart keyed by ``session_id``.
    """

    session_id: str | None = None
    user_id: int | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


@dataclass
class CartLine:
    product_id: int
    quantity: int
    unit_price: Decimal  # snapshot at time of add
    name: str = ""
    stock_quantity: int | None = None

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def exceeds_stock(self) -> bool:
        return self.stock_quantity is not None and self.quantity > self.stock_quantity


@dataclass(frozen=True)
class CartTotals:
    subtotal: Decimal
    total: Decimal
    total_items: int
    distinct_items: int


def compute_totals(lines: list[CartLine]) -> CartTotals:
    subtotal = sum((line.line_total for line in lines), Decimal("0.00"))
    subtotal = subtotal.quantize(Decimal("0.01"))
    return CartTotals(
        subtotal=subtotal,
        # delivery fee is only known at checkout
        total=subtotal,
        total_items=sum(line.quantity for line in lines),
        distinct_items=len(lines),
    )
