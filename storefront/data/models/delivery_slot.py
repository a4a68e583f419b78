# storefront/data/models/delivery_slot.py
from sqlalchemy import CheckConstraint, Column, Date, Integer, Numeric, String

from storefront.data.database import Base


class DeliverySlotModel(Base):
    __tablename__ = "delivery_slots"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=0)

    total_capacity = Column(Integer, nullable=False)
    consumed_capacity = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint(
            "consumed_capacity >= 0 AND consumed_capacity <= total_capacity",
            name="ck_delivery_slots_capacity",
        ),
    )

    @property
    def remaining_capacity(self) -> int:
        return max(0, self.total_capacity - self.consumed_capacity)
