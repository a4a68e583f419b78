# storefront/services/checkout_service.py
import random
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.data.transaction import atomic
from storefront.domain.cart import CartOwner, compute_totals
from storefront.domain.errors import AuthenticationRequired, EmptyCartError, InsufficientCapacityError
from storefront.domain.order_status import OrderStatus, PaymentStatus
from storefront.repos.order_repo import OrderRepo
from storefront.services.cart_service import CartService
from storefront.services.notification_service import NotificationService
from storefront.services.session_store import SessionStore
from storefront.services.slot_capacity import DeliverySlotCapacity
from storefront.utils.logging import get_logger
from storefront.utils.settings import ORDER_NUMBER_PREFIX

logger = get_logger(__name__)


class CheckoutService:
    """
    Turns the signed-in user's cart into an order.
    Everything between reading the cart and clearing it is one transaction:
    a failure anywhere leaves the cart intact and no order behind.
    """

    def __init__(self, db: Session, session_store: SessionStore, notifier: NotificationService):
        self.db = db
        self.cart = CartService(db, session_store)
        self.orders = OrderRepo(db)
        self.slots = DeliverySlotCapacity(db)
        self.notifier = notifier

    def generate_order_number(self, now: datetime) -> str:
        # <PREFIX>-<YYYY>-<NNNNNN>
        while True:
            number = f"{ORDER_NUMBER_PREFIX}-{now.year}-{random.randint(1, 999999):06d}"
            if not self.orders.order_number_exists(number):
                return number

    def place_order(
        self,
        owner: CartOwner,
        delivery_slot_id: int,
        payment_method: str,
        order_notes: str | None = None,
        delivery_address: dict | None = None,
        now: datetime | None = None,
    ) -> OrderModel:
        if not owner.is_authenticated:
            raise AuthenticationRequired("You need to log in to check out")

        now = now or datetime.now(timezone.utc)
        lines = self.cart.items(owner)
        if not lines:
            raise EmptyCartError("Your cart is empty")

        logger.info(f"Checkout for user {owner.user_id}: {len(lines)} lines, slot {delivery_slot_id}")

        with atomic(self.db, "checkout"):
            items = []
            for line in lines:
                # stock may have moved since the cart was last touched
                reservation = self.cart.gate.reserve(line.product_id, line.quantity, clamp=False)
                if not self.cart.products.try_decrement_stock(line.product_id, line.quantity):
                    raise InsufficientCapacityError(
                        f"{reservation.product.name} is no longer sufficiently in stock",
                        available=reservation.product.stock_quantity,
                    )
                items.append(
                    OrderItemModel(
                        product_id=line.product_id,
                        product_name=reservation.product.name,
                        quantity=line.quantity,
                        price=line.unit_price,
                    )
                )

            slot = self.slots.consume(delivery_slot_id, 1, not_before=now.date())

            subtotal = compute_totals(lines).subtotal
            delivery_fee = Decimal(slot.price).quantize(Decimal("0.01"))

            order = OrderModel(
                order_number=self.generate_order_number(now),
                user_id=owner.user_id,
                delivery_slot_id=slot.id,
                # no payment provider yet: orders are confirmed and paid on placement
                status=OrderStatus.CONFIRMED.value,
                payment_method=payment_method,
                payment_status=PaymentStatus.COMPLETED.value,
                subtotal=subtotal,
                delivery_fee=delivery_fee,
                total=subtotal + delivery_fee,
                delivery_address=delivery_address,
                order_notes=order_notes,
                created_at=now,
                updated_at=now,
                items=items,
            )
            self.orders.add_order(order)
            self.cart.durable.clear(owner)

        logger.info(f"Order {order.order_number} (id {order.id}) placed by user {owner.user_id}, total {order.total}")

        self.notifier.send_order_confirmation(owner.user_id, order.id, order.order_number)
        return self.orders.get_order(order.id)
