"""Order status machine.

pending -> confirmed -> processing -> out_for_delivery -> delivered, with
cancelled reachable from pending/confirmed while the delivery date is more
than the cutoff away. Forward steps are guarded single-step advances that
return False instead of raising. Cancellation gives stock and slot capacity
back in the same transaction that flips the status.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta, timezone

from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.transaction import atomic
from storefront.domain.errors import (
    CancellationWindowClosedError,
    InvalidTransitionError,
    NotFoundError,
)
from storefront.domain.order_status import (
    CANCELLABLE_STATUSES,
    FORWARD_PREDECESSOR,
    OrderStatus,
    PaymentStatus,
)
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.slot_capacity import DeliverySlotCapacity
from storefront.utils.logging import get_logger
from storefront.utils.settings import CANCELLATION_CUTOFF_HOURS

logger = get_logger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def delivery_starts_at(order: OrderModel) -> datetime | None:
    if order.delivery_slot is None:
        return None
    return datetime.combine(order.delivery_slot.date, time.min, tzinfo=timezone.utc)


def within_cancellation_window(order: OrderModel, now: datetime) -> bool:
    starts = delivery_starts_at(order)
    if starts is None:
        return False
    return starts > now + timedelta(hours=CANCELLATION_CUTOFF_HOURS)


def can_cancel(order: OrderModel, now: datetime | None = None) -> bool:
    return order.status in CANCELLABLE_STATUSES and within_cancellation_window(order, now or _now())


def can_track(order: OrderModel) -> bool:
    return order.status != OrderStatus.CANCELLED


class OrderLifecycle:

    def __init__(self, db: Session):
        self.db = db
        self.orders = OrderRepo(db)
        self.products = ProductRepo(db)
        self.slots = DeliverySlotCapacity(db)

    def _advance(self, order_id: int, target: OrderStatus) -> bool:
        predecessor = FORWARD_PREDECESSOR[target]
        with atomic(self.db, f"mark order {order_id} {target.value}"):
            moved = self.orders.transition(order_id, [predecessor.value], target.value)

        if moved:
            logger.info(f"Order {order_id}: {predecessor.value} -> {target.value}")
        else:
            logger.info(f"Order {order_id} not in {predecessor.value}, cannot move to {target.value}")
        return moved

    def mark_as_confirmed(self, order_id: int) -> bool:
        return self._advance(order_id, OrderStatus.CONFIRMED)

    def mark_as_processing(self, order_id: int) -> bool:
        return self._advance(order_id, OrderStatus.PROCESSING)

    def mark_as_out_for_delivery(self, order_id: int) -> bool:
        return self._advance(order_id, OrderStatus.OUT_FOR_DELIVERY)

    def mark_as_delivered(self, order_id: int) -> bool:
        return self._advance(order_id, OrderStatus.DELIVERED)

    def mark_as_cancelled(self, order_id: int, now: datetime | None = None) -> OrderModel:
        """Cancel the order and restore stock and slot capacity.

        Stock goes back only for products that still exist and are active.
        Raises ``InvalidTransitionError`` when the status does not allow it,
        ``CancellationWindowClosedError`` when delivery is too close.
        """
        now = now or _now()
        order = self.orders.get_order(order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} does not exist")

        if order.status not in CANCELLABLE_STATUSES:
            logger.info(f"Order {order_id} in status {order.status} cannot be cancelled")
            raise InvalidTransitionError(
                f"Order {order.order_number} is {order.status} and can no longer be cancelled"
            )

        if not within_cancellation_window(order, now):
            logger.info(f"Order {order_id} is past the cancellation cutoff")
            raise CancellationWindowClosedError(
                "It is too late to cancel this order, delivery is less than a day away"
            )

        with atomic(self.db, f"cancel order {order_id}"):
            # status flip first: a concurrent cancel loses here and restores nothing
            flipped = self.orders.transition(
                order_id,
                [s.value for s in CANCELLABLE_STATUSES],
                OrderStatus.CANCELLED.value,
                payment_status=PaymentStatus.CANCELLED.value,
            )
            if not flipped:
                raise InvalidTransitionError(f"Order {order.order_number} was already cancelled or moved on")

            for item in order.items:
                if item.product_id is None:
                    continue
                if not self.products.restock(item.product_id, item.quantity):
                    logger.info(f"Stock not restored for inactive or untracked product {item.product_id}")

            if order.delivery_slot_id is not None:
                self.slots.release(order.delivery_slot_id, 1)

        logger.info(f"Order {order_id} cancelled, stock and delivery slot restored")
        return self.orders.get_order(order_id)
