# storefront/data/models/promotion.py
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class PromotionProductModel(Base):
    __tablename__ = "promotion_products"

    promotion_id = Column(Integer, ForeignKey("promotions.id", ondelete="CASCADE"), primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True)
    discount_price = Column(Numeric(10, 2), nullable=False)


class PromotionModel(Base):
    __tablename__ = "promotions"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)

    products = relationship(
        "ProductModel",
        secondary="promotion_products",
        back_populates="promotions",
        viewonly=True,
    )
