# storefront/api/routers/users.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_session_id, get_session_store
from storefront.data.database import get_db
from storefront.domain.schemas import LoginIn, LoginOut, UserCreate, UserRead
from storefront.services.session_store import SessionStore
from storefront.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])
auth_router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/", response_model=UserRead)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    return UserService(db).create_user(payload)


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: int, db: Session = Depends(get_db)):
    return UserService(db).get_user(user_id)


@auth_router.post("/login", response_model=LoginOut)
def login(
    payload: LoginIn,
    session_id: str = Depends(get_session_id),
    session_store: SessionStore = Depends(get_session_store),
    db: Session = Depends(get_db),
):
    """
    Login stub. The anonymous cart of this session is merged into
    the user's cart; a failed merge does not fail the login.
    """
    return UserService(db).login(payload.user_id, session_id, session_store)
