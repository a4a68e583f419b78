# storefront/repos/cart_repo.py
from sqlalchemy import delete, select
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.cart_item import CartItemModel


class CartRepo:
    """Durable cart lines, one row per (user, product)."""

    def __init__(self, db: Session):
        self.db = db

    def get_cart_items(self, user_id: int) -> list[CartItemModel]:
        stmt = (
            select(CartItemModel)
            .where(CartItemModel.user_id == user_id)
            .options(selectinload(CartItemModel.product))
            .order_by(CartItemModel.id)
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_cart_item(self, user_id: int, product_id: int) -> CartItemModel | None:
        stmt = select(CartItemModel).where(
            CartItemModel.user_id == user_id,
            CartItemModel.product_id == product_id,
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def delete_cart_items(self, user_id: int, product_ids: list[int]) -> int:
        if not product_ids:
            return 0
        stmt = (
            delete(CartItemModel)
            .where(
                CartItemModel.user_id == user_id,
                CartItemModel.product_id.in_(product_ids),
            )
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount

    def clear(self, user_id: int) -> int:
        stmt = (
            delete(CartItemModel)
            .where(CartItemModel.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount
