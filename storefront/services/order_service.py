# storefront/services/order_service.py
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.domain.errors import ForbiddenError, NotFoundError
from storefront.domain.order_status import OrderStatus, payment_status_display, status_display
from storefront.repos.order_repo import OrderRepo
from storefront.services.notification_service import NotificationService
from storefront.services.order_lifecycle import OrderLifecycle, can_cancel, can_track
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

_TRACKING_STEPS = [
    ("Order received", "Your order has been placed", "check-circle"),
    ("Order confirmed", "We confirmed your order and will start preparing it", "clipboard-check"),
    ("Being prepared", "Your order is being packed for delivery", "cog"),
    ("Out for delivery", "Your order is on its way to your address", "truck"),
    ("Delivered", "Your order has been delivered", "home"),
]

_STEP_INDEX = {
    OrderStatus.PENDING.value: 0,
    OrderStatus.CONFIRMED.value: 1,
    OrderStatus.PROCESSING.value: 2,
    OrderStatus.OUT_FOR_DELIVERY.value: 3,
    OrderStatus.DELIVERED.value: 4,
    OrderStatus.CANCELLED.value: -1,
}


class OrderService:
    """
    Customer side of orders: history, detail, tracking, cancellation.
    Every per-order call checks ownership before looking at the order.
    """

    def __init__(self, db: Session, notifier: NotificationService | None = None):
        self.db = db
        self.repo = OrderRepo(db)
        self.lifecycle = OrderLifecycle(db)
        self.notifier = notifier or NotificationService()

    def _authorize(self, order_id: int, user_id: int) -> None:
        owner_id = self.repo.get_owner_id(order_id)
        if owner_id is None:
            raise NotFoundError("Order not found")
        if owner_id != user_id:
            logger.warning(f"User {user_id} denied access to order {order_id}")
            raise ForbiddenError("You do not have access to this order")

    def _load(self, order_id: int, user_id: int) -> OrderModel:
        self._authorize(order_id, user_id)
        return self.repo.get_order(order_id)

    @staticmethod
    def _slot(order: OrderModel) -> Dict[str, Any] | None:
        slot = order.delivery_slot
        if slot is None:
            return None
        return {
            "id": slot.id,
            "date": slot.date,
            "start_time": slot.start_time,
            "end_time": slot.end_time,
            "formatted_date": slot.date.strftime("%A, %d %B %Y"),
            "formatted_time": f"{slot.start_time} - {slot.end_time}",
        }

    @staticmethod
    def estimated_delivery(order: OrderModel) -> str | None:
        slot = order.delivery_slot
        if slot is None:
            return None
        return f"{slot.date.strftime('%A, %d %B %Y')} between {slot.start_time} and {slot.end_time}"

    def _summary(self, order: OrderModel, now: datetime) -> Dict[str, Any]:
        return {
            "id": order.id,
            "order_number": order.order_number,
            "status": order.status,
            "status_display": status_display(order.status),
            "subtotal": order.subtotal,
            "delivery_fee": order.delivery_fee,
            "total": order.total,
            "item_count": len(order.items),
            "total_items": sum(i.quantity for i in order.items),
            "first_item_name": order.items[0].product_name if order.items else None,
            "created_at": order.created_at,
            "delivery_slot": self._slot(order),
            "can_cancel": can_cancel(order, now),
            "can_track": can_track(order),
        }

    #query
    def list_orders(
        self,
        user_id: int,
        status: str | None = None,
        search: str | None = None,
        page: int = 1,
        per_page: int = 10,
    ) -> Dict[str, Any]:
        if status == "all":
            status = None

        orders, total = self.repo.list_for_user(user_id, status=status, search=search, page=page, per_page=per_page)
        now = datetime.now(timezone.utc)
        return {
            "orders": [self._summary(o, now) for o in orders],
            "page": page,
            "per_page": per_page,
            "total": total,
        }

    def get_order(self, order_id: int, user_id: int) -> Dict[str, Any]:
        order = self._load(order_id, user_id)
        detail = self._summary(order, datetime.now(timezone.utc))
        detail.update(
            {
                "payment_method": order.payment_method,
                "payment_status": order.payment_status,
                "payment_status_display": payment_status_display(order.payment_status),
                "order_notes": order.order_notes,
                "delivery_address": order.delivery_address,
                "updated_at": order.updated_at,
                "estimated_delivery": self.estimated_delivery(order),
                "items": [
                    {
                        "id": i.id,
                        "product_id": i.product_id,
                        "product_name": i.product_name,
                        "quantity": i.quantity,
                        "price": i.price,
                        "total": i.line_total,
                    }
                    for i in order.items
                ],
            }
        )
        return detail

    def track(self, order_id: int, user_id: int) -> Dict[str, Any]:
        order = self._load(order_id, user_id)
        current = _STEP_INDEX.get(order.status, 0)
        cancelled = order.status == OrderStatus.CANCELLED

        steps: List[Dict[str, Any]] = []
        for index, (title, description, icon) in enumerate(_TRACKING_STEPS):
            if index == 0 or (not cancelled and index <= current):
                state = "completed"
            elif not cancelled and index >= 2 and index == current + 1:
                state = "current"
            else:
                state = "cancelled" if cancelled else "pending"

            if state != "completed":
                when = None
            elif index <= 1:
                when = order.created_at
            else:
                when = order.updated_at

            steps.append(
                {
                    "title": title,
                    "description": description,
                    "status": state,
                    "icon": icon,
                    "date": when,
                }
            )

        return {
            "id": order.id,
            "order_number": order.order_number,
            "status": order.status,
            "status_display": status_display(order.status),
            "estimated_delivery": self.estimated_delivery(order),
            "delivery_slot": self._slot(order),
            "steps": steps,
            "current_step": current,
        }

    #commands
    def cancel(self, order_id: int, user_id: int, now: datetime | None = None) -> Dict[str, Any]:
        self._authorize(order_id, user_id)
        order = self.lifecycle.mark_as_cancelled(order_id, now=now)
        return self._summary(order, now or datetime.now(timezone.utc))

    def send_confirmation(self, order_id: int, user_id: int) -> bool:
        order = self._load(order_id, user_id)
        return self.notifier.send_order_confirmation(user_id, order.id, order.order_number)
