# storefront/api/routers/orders.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_notifier, require_user
from storefront.data.database import get_db
from storefront.domain.cart import CartOwner
from storefront.domain.schemas import CancelOut, MessageOut, OrderDetailOut, OrderListOut, TrackingOut
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> OrderService:
    return OrderService(db, notifier)


@router.get("", response_model=OrderListOut)
def list_orders(
    status: str | None = Query(None, description="Order status or 'all'"),
    search: str | None = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=50),
    owner: CartOwner = Depends(require_user),
    svc: OrderService = Depends(get_service),
):
    return svc.list_orders(owner.user_id, status=status, search=search, page=page, per_page=per_page)


@router.get("/{order_id}", response_model=OrderDetailOut)
def get_order(
    order_id: int,
    owner: CartOwner = Depends(require_user),
    svc: OrderService = Depends(get_service),
):
    return svc.get_order(order_id, owner.user_id)


@router.get("/{order_id}/track", response_model=TrackingOut)
def track_order(
    order_id: int,
    owner: CartOwner = Depends(require_user),
    svc: OrderService = Depends(get_service),
):
    return svc.track(order_id, owner.user_id)


@router.patch("/{order_id}/cancel", response_model=CancelOut)
def cancel_order(
    order_id: int,
    owner: CartOwner = Depends(require_user),
    svc: OrderService = Depends(get_service),
):
    """
    Cancels the order and gives back its stock and delivery slot.
    Only allowed until a day before the delivery slot.
    """
    order = svc.cancel(order_id, owner.user_id)
    return {"message": f"Order {order['order_number']} has been cancelled", "order": order}


@router.post("/{order_id}/send-confirmation", response_model=MessageOut)
def send_confirmation(
    order_id: int,
    owner: CartOwner = Depends(require_user),
    svc: OrderService = Depends(get_service),
):
    if svc.send_confirmation(order_id, owner.user_id):
        return {"message": "Confirmation email queued"}
    return {"message": "Confirmation could not be queued, please try again later"}
