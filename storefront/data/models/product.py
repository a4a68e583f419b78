# storefront/data/models/product.py
from sqlalchemy import Boolean, CheckConstraint, Column, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    short_description = Column(Text, nullable=True)

    price = Column(Numeric(10, 2), nullable=False)
    # NULL = stock is not tracked
    stock_quantity = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    promotions = relationship(
        "PromotionModel",
        secondary="promotion_products",
        back_populates="products",
        viewonly=True,
    )

    __table_args__ = (
        CheckConstraint(
            "stock_quantity IS NULL OR stock_quantity >= 0",
            name="ck_products_stock_non_negative",
        ),
    )
