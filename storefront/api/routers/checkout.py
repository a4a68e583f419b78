# storefront/api/routers/checkout.py
from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_notifier, get_session_store, require_user
from storefront.data.database import get_db
from storefront.domain.cart import CartOwner
from storefront.domain.schemas import CheckoutIn, DeliveryDayOut, OrderPlacedOut
from storefront.services.checkout_service import CheckoutService
from storefront.services.notification_service import NotificationService
from storefront.services.session_store import SessionStore
from storefront.services.slot_capacity import DeliverySlotCapacity

router = APIRouter(tags=["checkout"])


@router.get("/delivery-slots", response_model=list[DeliveryDayOut])
def list_delivery_slots(db: Session = Depends(get_db)):
    return DeliverySlotCapacity(db).available_slots(date.today())


@router.post("/checkout", response_model=OrderPlacedOut, status_code=201)
def checkout(
    payload: CheckoutIn,
    owner: CartOwner = Depends(require_user),
    session_store: SessionStore = Depends(get_session_store),
    notifier: NotificationService = Depends(get_notifier),
    db: Session = Depends(get_db),
):
    """
    Places the order from the signed-in user's cart.
    Stock and slot capacity are taken in the same transaction that writes the order.
    """
    svc = CheckoutService(db, session_store, notifier)
    order = svc.place_order(
        owner,
        delivery_slot_id=payload.delivery_slot_id,
        payment_method=payload.payment_method,
        order_notes=payload.order_notes,
        delivery_address=payload.delivery_address,
    )
    return {
        "message": "Order placed",
        "order_id": order.id,
        "order_number": order.order_number,
        "total": order.total,
    }
