"""Merge an anonymous session cart into the user's cart at login."""

from __future__ import annotations

from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from storefront.data.models.cart_item import CartItemModel
from storefront.data.transaction import atomic
from storefront.domain.cart import CartOwner
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.availability import clamp_to_stock
from storefront.services.cart_backends import EphemeralCartBackend
from storefront.services.session_store import SessionStore
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartMigration:

    def __init__(self, db: Session, session_store: SessionStore):
        self.db = db
        self.products = ProductRepo(db)
        self.carts = CartRepo(db)
        self.ephemeral = EphemeralCartBackend(session_store)

    def migrate(self, session_id: str, user_id: int) -> int:
        """Move every session line into the user's cart; returns lines merged.

        Quantities are clamped to stock, never rejected. Unavailable products
        are dropped. All database writes commit together; on failure nothing
        is written and the session cart is left for a retry. The session cart
        is deleted only after the commit.
        """
        session_owner = CartOwner(session_id=session_id)

        merged = 0
        with atomic(self.db, "cart migration"):
            lines = self.ephemeral.lines(session_owner)
            for line in lines:
                product = self.products.get_product_for_update(line.product_id)
                if product is None or not product.is_active:
                    logger.info(f"Skipping unavailable product {line.product_id} during cart migration")
                    continue

                existing = self.carts.get_cart_item(user_id, line.product_id)
                if existing:
                    quantity = clamp_to_stock(existing.quantity + line.quantity, product.stock_quantity)
                    if quantity == 0:
                        self.carts.delete_cart_items(user_id, [line.product_id])
                        continue
                    existing.quantity = quantity
                    self.carts.add_cart_item(existing)
                else:
                    quantity = clamp_to_stock(line.quantity, product.stock_quantity)
                    if quantity == 0:
                        continue
                    self.carts.add_cart_item(
                        CartItemModel(
                            user_id=user_id,
                            product_id=line.product_id,
                            quantity=quantity,
                            price=line.unit_price,
                        )
                    )
                merged += 1

        if not lines:
            return 0

        try:
            self.ephemeral.clear(session_owner)
        except RedisError as e:
            # merge is committed; the session cart expires on its own TTL
            logger.error(f"Merged cart of session {session_id} but could not delete it: {e}")

        logger.info(f"Migrated {merged} cart lines from session {session_id} to user {user_id}")
        return merged
