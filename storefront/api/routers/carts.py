# storefront/api/routers/carts.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_owner, get_session_store
from storefront.data.database import get_db
from storefront.domain.cart import CartOwner
from storefront.domain.errors import CartRejectedError, NotFoundError
from storefront.domain.schemas import AddItemIn, CartMutationOut, CartOut, UpdateItemIn
from storefront.services.cart_service import CartService
from storefront.services.session_store import SessionStore

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(
    db: Session = Depends(get_db),
    session_store: SessionStore = Depends(get_session_store),
) -> CartService:
    return CartService(db, session_store)


def _mutation(svc: CartService, owner: CartOwner, message: str):
    return {"message": message, "totals": svc.totals_dict(svc.totals(owner))}


@router.get("", response_model=CartOut)
def get_cart(owner: CartOwner = Depends(get_owner), svc: CartService = Depends(get_service)):
    return svc.snapshot(owner)


@router.post("/add", response_model=CartMutationOut)
def add_item(
    payload: AddItemIn,
    owner: CartOwner = Depends(get_owner),
    svc: CartService = Depends(get_service),
):
    """
    Adds to the existing line. Asking for more than is in stock
    fills the line up to stock instead of failing.
    """
    try:
        line = svc.add(owner, payload.product_id, payload.quantity)
    except NotFoundError as e:
        # unknown product is a rejected add, not a missing resource
        raise CartRejectedError(e.message) from e
    return _mutation(svc, owner, f"{line.name} added to cart")


@router.patch("/{product_id}", response_model=CartMutationOut)
def update_item(
    product_id: int,
    payload: UpdateItemIn,
    owner: CartOwner = Depends(get_owner),
    svc: CartService = Depends(get_service),
):
    try:
        line = svc.set_quantity(owner, product_id, payload.quantity)
    except NotFoundError as e:
        raise CartRejectedError(e.message) from e
    message = "Cart updated" if line else "Product removed from cart"
    return _mutation(svc, owner, message)


@router.delete("/{product_id}", response_model=CartMutationOut)
def remove_item(
    product_id: int,
    owner: CartOwner = Depends(get_owner),
    svc: CartService = Depends(get_service),
):
    svc.remove(owner, product_id)
    return _mutation(svc, owner, "Product removed from cart")


@router.delete("", response_model=CartMutationOut)
def clear_cart(owner: CartOwner = Depends(get_owner), svc: CartService = Depends(get_service)):
    svc.clear(owner)
    return _mutation(svc, owner, "Cart emptied")
