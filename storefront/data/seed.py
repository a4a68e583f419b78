# storefront/data/seed.py
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from storefront.data.database import SessionLocal, init_db
from storefront.data.models import DeliverySlotModel, ProductModel, PromotionModel, PromotionProductModel, UserModel
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

PRODUCTS = [
    ("Whole milk 1L", "Fresh whole milk", "1.29", 120),
    ("Sourdough bread", "Baked this morning", "3.49", 25),
    ("Free range eggs (10)", "Barn eggs, size M", "3.99", 40),
    ("Bananas 1kg", "Fairtrade bananas", "1.89", 60),
    ("Olive oil 500ml", "Extra virgin", "7.95", 15),
    ("Paper bags", "Reusable paper bags", "0.25", None),
]

SLOT_TIMES = [("08:00", "10:00", "2.95"), ("12:00", "14:00", "1.95"), ("18:00", "20:00", "3.95")]


def seed(days: int = 14):
    init_db()
    db = SessionLocal()
    try:
        # only seed an empty database
        if db.query(ProductModel).first():
            return

        db.add(UserModel(id=1, name="Demo customer", email="demo@example.com"))

        products = [
            ProductModel(name=name, short_description=desc, price=Decimal(price), stock_quantity=stock)
            for name, desc, price, stock in PRODUCTS
        ]
        db.add_all(products)
        db.flush()

        now = datetime.now(timezone.utc)
        promo = PromotionModel(title="Breakfast week", start_date=now, end_date=now + timedelta(days=7))
        db.add(promo)
        db.flush()
        db.add(PromotionProductModel(promotion_id=promo.id, product_id=products[0].id, discount_price=Decimal("0.99")))
        db.add(PromotionProductModel(promotion_id=promo.id, product_id=products[2].id, discount_price=Decimal("3.49")))

        today = date.today()
        for offset in range(days):
            for start, end, price in SLOT_TIMES:
                db.add(
                    DeliverySlotModel(
                        date=today + timedelta(days=offset),
                        start_time=start,
                        end_time=end,
                        price=Decimal(price),
                        total_capacity=10,
                    )
                )

        db.commit()
        logger.info(f"Seeded {len(products)} products and {days * len(SLOT_TIMES)} delivery slots")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
