# storefront/repos/product_repo.py
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.data.models.promotion import PromotionModel, PromotionProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id, populate_existing=True)

    def get_product_for_update(self, product_id: int) -> ProductModel | None:
        # row lock until the surrounding transaction ends (no-op on sqlite)
        stmt = (
            select(ProductModel)
            .where(ProductModel.id == product_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_offers(self, product_id: int) -> list[tuple[PromotionModel, Decimal]]:
        stmt = (
            select(PromotionModel, PromotionProductModel.discount_price)
            .join(PromotionProductModel, PromotionProductModel.promotion_id == PromotionModel.id)
            .where(PromotionProductModel.product_id == product_id)
        )
        return [(promo, price) for promo, price in self.db.execute(stmt).all()]

    def try_decrement_stock(self, product_id: int, quantity: int) -> bool:
        """
        Compare-and-swap: stock drops only if enough is left.
        Untracked stock (NULL) always passes and stays NULL.
        """
        stmt = (
            update(ProductModel)
            .where(
                ProductModel.id == product_id,
                ProductModel.is_active.is_(True),
                (ProductModel.stock_quantity.is_(None)) | (ProductModel.stock_quantity >= quantity),
            )
            .values(stock_quantity=ProductModel.stock_quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1

    def restock(self, product_id: int, quantity: int) -> bool:
        # only active products with tracked stock get their units back
        stmt = (
            update(ProductModel)
            .where(
                ProductModel.id == product_id,
                ProductModel.is_active.is_(True),
                ProductModel.stock_quantity.is_not(None),
            )
            .values(stock_quantity=ProductModel.stock_quantity + quantity)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1
