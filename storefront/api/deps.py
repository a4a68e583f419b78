# storefront/api/deps.py
import uuid
from functools import lru_cache

from fastapi import Cookie, Depends, Query, Response

from storefront.domain.cart import CartOwner
from storefront.domain.errors import AuthenticationRequired
from storefront.services.notification_service import NotificationService
from storefront.services.session_store import RedisSessionStore, SessionStore
from storefront.utils.settings import CART_SESSION_COOKIE, CART_TTL_SECONDS


@lru_cache
def get_session_store() -> SessionStore:
    return RedisSessionStore()


def get_notifier() -> NotificationService:
    return NotificationService()


def get_session_id(
    response: Response,
    session_id: str | None = Cookie(None, alias=CART_SESSION_COOKIE),
) -> str:
    """Opaque cart session id; issued on first visit."""
    if not session_id:
        session_id = uuid.uuid4().hex
        response.set_cookie(
            CART_SESSION_COOKIE,
            session_id,
            max_age=CART_TTL_SECONDS,
            httponly=True,
            samesite="lax",
        )
    return session_id


def get_owner(
    session_id: str = Depends(get_session_id),
    user_id: int | None = Query(None, gt=0),
) -> CartOwner:
    # login stub: a user_id on the request marks it as signed in
    return CartOwner(session_id=session_id, user_id=user_id)


def require_user(owner: CartOwner = Depends(get_owner)) -> CartOwner:
    if not owner.is_authenticated:
        raise AuthenticationRequired("You need to log in first")
    return owner
