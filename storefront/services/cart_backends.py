"""The two places a cart can live.

``EphemeralCartBackend`` keeps an anonymous visitor's cart in the session
store, ``DurableCartBackend`` keeps a signed-in user's cart in the
``cart_items`` table. Both satisfy ``CartBackend``; ``CartService`` picks
one per call from ``CartOwner.is_authenticated``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol

from storefront.data.models.cart_item import CartItemModel
from storefront.domain.cart import CartLine, CartOwner
from storefront.repos.cart_repo import CartRepo
from storefront.services.session_store import SessionStore


class CartBackend(Protocol):
    def lines(self, owner: CartOwner) -> list[CartLine]: ...

    def get_line(self, owner: CartOwner, product_id: int) -> CartLine | None: ...

    def put_line(self, owner: CartOwner, line: CartLine) -> None: ...

    def set_quantity(self, owner: CartOwner, product_id: int, quantity: int) -> bool: ...

    def discard(self, owner: CartOwner, product_ids: list[int]) -> None: ...

    def clear(self, owner: CartOwner) -> None: ...


class EphemeralCartBackend:
    """Session document: ``{"<product_id>": {"quantity": int, "price": "9.99"}}``."""

    def __init__(self, store: SessionStore):
        self.store = store

    @staticmethod
    def _session(owner: CartOwner) -> str:
        if not owner.session_id:
            raise ValueError("anonymous cart requires a session id")
        return owner.session_id

    def _load(self, owner: CartOwner) -> dict:
        return self.store.load(self._session(owner))

    def _save(self, owner: CartOwner, doc: dict) -> None:
        self.store.save(self._session(owner), doc)

    def lines(self, owner: CartOwner) -> list[CartLine]:
        return [
            CartLine(
                product_id=int(pid),
                quantity=int(entry["quantity"]),
                unit_price=Decimal(str(entry["price"])),
            )
            for pid, entry in self._load(owner).items()
        ]

    def get_line(self, owner: CartOwner, product_id: int) -> CartLine | None:
        entry = self._load(owner).get(str(product_id))
        if entry is None:
            return None
        return CartLine(
            product_id=product_id,
            quantity=int(entry["quantity"]),
            unit_price=Decimal(str(entry["price"])),
        )

    def put_line(self, owner: CartOwner, line: CartLine) -> None:
        doc = self._load(owner)
        doc[str(line.product_id)] = {"quantity": line.quantity, "price": str(line.unit_price)}
        self._save(owner, doc)

    def set_quantity(self, owner: CartOwner, product_id: int, quantity: int) -> bool:
        doc = self._load(owner)
        entry = doc.get(str(product_id))
        if entry is None:
            return False
        entry["quantity"] = quantity
        self._save(owner, doc)
        return True

    def discard(self, owner: CartOwner, product_ids: list[int]) -> None:
        doc = self._load(owner)
        changed = False
        for pid in product_ids:
            if doc.pop(str(pid), None) is not None:
                changed = True
        if changed:
            self._save(owner, doc)

    def clear(self, owner: CartOwner) -> None:
        self.store.forget(self._session(owner))


class DurableCartBackend:

    def __init__(self, repo: CartRepo):
        self.repo = repo

    @staticmethod
    def _user(owner: CartOwner) -> int:
        if owner.user_id is None:
            raise ValueError("durable cart requires a user id")
        return owner.user_id

    @staticmethod
    def _to_line(item: CartItemModel) -> CartLine:
        return CartLine(
            product_id=item.product_id,
            quantity=item.quantity,
            unit_price=Decimal(item.price),
        )

    def lines(self, owner: CartOwner) -> list[CartLine]:
        return [self._to_line(i) for i in self.repo.get_cart_items(self._user(owner))]

    def get_line(self, owner: CartOwner, product_id: int) -> CartLine | None:
        item = self.repo.get_cart_item(self._user(owner), product_id)
        return self._to_line(item) if item else None

    def put_line(self, owner: CartOwner, line: CartLine) -> None:
        user_id = self._user(owner)
        item = self.repo.get_cart_item(user_id, line.product_id)
        if item:
            item.quantity = line.quantity
            item.price = line.unit_price
            self.repo.add_cart_item(item)
        else:
            self.repo.add_cart_item(
                CartItemModel(
                    user_id=user_id,
                    product_id=line.product_id,
                    quantity=line.quantity,
                    price=line.unit_price,
                )
            )

    def set_quantity(self, owner: CartOwner, product_id: int, quantity: int) -> bool:
        item = self.repo.get_cart_item(self._user(owner), product_id)
        if not item:
            return False
        item.quantity = quantity
        self.repo.add_cart_item(item)
        return True

    def discard(self, owner: CartOwner, product_ids: list[int]) -> None:
        self.repo.delete_cart_items(self._user(owner), product_ids)

    def clear(self, owner: CartOwner) -> None:
        self.repo.clear(self._user(owner))
