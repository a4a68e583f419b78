from typing import Dict, Any
from sqlalchemy.orm import Session

from storefront.data.transaction import atomic
from storefront.domain.cart import CartLine, CartOwner, CartTotals, compute_totals
from storefront.domain.errors import NotFoundError
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.availability import AvailabilityGate
from storefront.services.cart_backends import CartBackend, DurableCartBackend, EphemeralCartBackend
from storefront.services.catalog import CatalogReader
from storefront.services.session_store import SessionStore
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Cart with one contract for both backends:
    anonymous visitors -> session store, signed-in users -> cart_items table.
    commands (add, set_quantity, remove, clear) modify state,
    queries (items, totals) read and sweep dead lines.
    """

    def __init__(self, db: Session, session_store: SessionStore):
        self.db = db
        self.products = ProductRepo(db)
        self.catalog = CatalogReader(self.products)
        self.gate = AvailabilityGate(self.products)
        self.durable = DurableCartBackend(CartRepo(db))
        self.ephemeral = EphemeralCartBackend(session_store)

    def backend_for(self, owner: CartOwner) -> CartBackend:
        if owner.is_authenticated:
            return self.durable
        return self.ephemeral

    #query - read
    def items(self, owner: CartOwner) -> list[CartLine]:
        """
        Lines of the owner's cart, in insertion order.
        Lines whose product is gone or inactive are deleted from the backend here.
        """
        backend = self.backend_for(owner)

        with atomic(self.db, "cart read"):
            visible: list[CartLine] = []
            dead: list[int] = []

            for line in backend.lines(owner):
                product = self.catalog.get_product(line.product_id)
                if product is None or not product.is_active:
                    dead.append(line.product_id)
                    continue

                line.name = product.name
                line.stock_quantity = product.stock_quantity
                visible.append(line)

            if dead:
                logger.info(f"Dropping unavailable products {dead} from cart of {self._describe(owner)}")
                backend.discard(owner, dead)

        return visible

    def totals(self, owner: CartOwner) -> CartTotals:
        return compute_totals(self.items(owner))

    def quantity_of(self, owner: CartOwner, product_id: int) -> int:
        line = self.backend_for(owner).get_line(owner, product_id)
        return line.quantity if line else 0

    def snapshot(self, owner: CartOwner) -> Dict[str, Any]:
        items = self.items(owner)
        totals = compute_totals(items)
        #dict -> json response
        return {
            "items": [
                {
                    "product_id": i.product_id,
                    "name": i.name,
                    "quantity": i.quantity,
                    "price": i.unit_price,
                    "line_total": i.line_total,
                    "stock_quantity": i.stock_quantity,
                    "exceeds_stock": i.exceeds_stock,
                }
                for i in items
            ],
            "totals": self.totals_dict(totals),
        }

    @staticmethod
    def totals_dict(totals: CartTotals) -> Dict[str, Any]:
        return {
            "subtotal": totals.subtotal,
            "total": totals.total,
            "total_items": totals.total_items,
            "distinct_items": totals.distinct_items,
        }

    #commands
    def add(self, owner: CartOwner, product_id: int, quantity: int = 1) -> CartLine:
        """
        Add ``quantity`` units, clamping the line to available stock.
        A new line captures the current (promotion aware) price,
        an existing line keeps its price snapshot.
        """
        backend = self.backend_for(owner)

        with atomic(self.db, "cart add"):
            # lock the product before reading the line so concurrent adds serialize
            self.products.get_product_for_update(product_id)
            existing = backend.get_line(owner, product_id)
            held = existing.quantity if existing else 0

            reservation = self.gate.reserve(product_id, quantity, already_held_qty=held, clamp=True)

            if existing:
                logger.info(
                    f"Product {product_id} already in cart, quantity "
                    f"{existing.quantity} -> {reservation.quantity}"
                )
                backend.set_quantity(owner, product_id, reservation.quantity)
                line = CartLine(product_id, reservation.quantity, existing.unit_price)
            else:
                price = self.catalog.get_current_price(reservation.product)
                line = CartLine(product_id, reservation.quantity, price)
                logger.info(f"Adding product {product_id} x{line.quantity} at {price} to cart")
                backend.put_line(owner, line)

        line.name = reservation.product.name
        line.stock_quantity = reservation.product.stock_quantity
        return line

    def set_quantity(self, owner: CartOwner, product_id: int, quantity: int) -> CartLine | None:
        """
        Overwrite the line quantity. 0 removes the line.
        Over-stock requests are rejected, not clamped.
        """
        if quantity < 0:
            raise ValueError("quantity cannot be negative")

        if quantity == 0:
            self.remove(owner, product_id)
            return None

        backend = self.backend_for(owner)

        with atomic(self.db, "cart update"):
            existing = backend.get_line(owner, product_id)
            if existing is None:
                raise NotFoundError(f"Product {product_id} is not in the cart")

            reservation = self.gate.reserve(product_id, quantity, already_held_qty=0, clamp=False)
            backend.set_quantity(owner, product_id, quantity)

        logger.info(f"Cart quantity for product {product_id} set to {quantity}")
        return CartLine(
            product_id=product_id,
            quantity=quantity,
            unit_price=existing.unit_price,
            name=reservation.product.name,
            stock_quantity=reservation.product.stock_quantity,
        )

    def remove(self, owner: CartOwner, product_id: int) -> None:
        with atomic(self.db, "cart remove"):
            self.backend_for(owner).discard(owner, [product_id])
        logger.info(f"Removed product {product_id} from cart of {self._describe(owner)}")

    def clear(self, owner: CartOwner) -> None:
        with atomic(self.db, "cart clear"):
            self.backend_for(owner).clear(owner)
        logger.info(f"Cleared cart of {self._describe(owner)}")

    @staticmethod
    def _describe(owner: CartOwner) -> str:
        if owner.is_authenticated:
            return f"user {owner.user_id}"
        return f"session {owner.session_id}"
