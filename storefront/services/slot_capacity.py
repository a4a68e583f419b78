# storefront/services/slot_capacity.py
from collections import OrderedDict
from datetime import date
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from storefront.data.models.delivery_slot import DeliverySlotModel
from storefront.domain.errors import InsufficientCapacityError, NotFoundError
from storefront.repos.slot_repo import SlotRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class DeliverySlotCapacity:
    """
    Capacity pool per delivery slot.
    consume/release run inside the caller's transaction, the caller commits.
    """

    def __init__(self, db: Session):
        self.repo = SlotRepo(db)

    def consume(self, slot_id: int, amount: int = 1, not_before: date | None = None) -> DeliverySlotModel:
        if amount <= 0:
            raise ValueError("amount must be positive")

        if self.repo.try_consume(slot_id, amount, not_before=not_before):
            logger.info(f"Consumed {amount} from delivery slot {slot_id}")
            return self.repo.refresh_slot(slot_id)

        # nothing changed, find out why
        slot = self.repo.refresh_slot(slot_id)
        if slot is None:
            raise NotFoundError(f"Delivery slot {slot_id} does not exist")
        if not_before is not None and slot.date < not_before:
            raise InsufficientCapacityError("This delivery slot has expired", available=0)

        logger.info(f"Delivery slot {slot_id} is full ({slot.consumed_capacity}/{slot.total_capacity})")
        raise InsufficientCapacityError(
            "This delivery slot is no longer available",
            available=slot.remaining_capacity,
        )

    def release(self, slot_id: int, amount: int = 1) -> None:
        # over-release clamps at zero so a repeated cancel stays harmless
        if amount <= 0:
            raise ValueError("amount must be positive")
        if not self.repo.release(slot_id, amount):
            raise NotFoundError(f"Delivery slot {slot_id} does not exist")
        logger.info(f"Released {amount} to delivery slot {slot_id}")

    def available_slots(self, today: date) -> List[Dict[str, Any]]:
        """Open slots from ``today`` on, grouped per day."""
        days: "OrderedDict[date, List[Dict[str, Any]]]" = OrderedDict()
        for slot in self.repo.list_open_slots(today):
            days.setdefault(slot.date, []).append(
                {
                    "id": slot.id,
                    "start_time": slot.start_time,
                    "end_time": slot.end_time,
                    "time_display": f"{slot.start_time} - {slot.end_time}",
                    "price": slot.price,
                    "total_capacity": slot.total_capacity,
                    "remaining_capacity": slot.remaining_capacity,
                }
            )

        return [
            {
                "date": day,
                "day_name": day.strftime("%A"),
                "formatted_date": f"{day.day} {day.strftime('%b')}",
                "slots": slots,
            }
            for day, slots in days.items()
        ]
