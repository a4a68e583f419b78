# storefront/repos/slot_repo.py
from datetime import date

from sqlalchemy import case, select, update
from sqlalchemy.orm import Session

from storefront.data.models.delivery_slot import DeliverySlotModel


class SlotRepo:
    def __init__(self, db: Session):
        self.db = db

    def refresh_slot(self, slot_id: int) -> DeliverySlotModel | None:
        stmt = (
            select(DeliverySlotModel)
            .where(DeliverySlotModel.id == slot_id)
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def try_consume(self, slot_id: int, amount: int, not_before: date | None = None) -> bool:
        # check-and-increment in one statement
        conditions = [
            DeliverySlotModel.id == slot_id,
            DeliverySlotModel.consumed_capacity + amount <= DeliverySlotModel.total_capacity,
        ]
        if not_before is not None:
            conditions.append(DeliverySlotModel.date >= not_before)

        stmt = (
            update(DeliverySlotModel)
            .where(*conditions)
            .values(consumed_capacity=DeliverySlotModel.consumed_capacity + amount)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1

    def release(self, slot_id: int, amount: int) -> bool:
        # never below zero
        stmt = (
            update(DeliverySlotModel)
            .where(DeliverySlotModel.id == slot_id)
            .values(
                consumed_capacity=case(
                    (DeliverySlotModel.consumed_capacity >= amount, DeliverySlotModel.consumed_capacity - amount),
                    else_=0,
                )
            )
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1

    def list_open_slots(self, today: date) -> list[DeliverySlotModel]:
        stmt = (
            select(DeliverySlotModel)
            .where(
                DeliverySlotModel.date >= today,
                DeliverySlotModel.consumed_capacity < DeliverySlotModel.total_capacity,
            )
            .order_by(DeliverySlotModel.date, DeliverySlotModel.start_time)
        )
        return list(self.db.execute(stmt).scalars().all())
