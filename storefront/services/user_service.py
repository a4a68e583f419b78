from sqlalchemy.orm import Session
from storefront.data.models.user import UserModel
from storefront.data.transaction import atomic
from storefront.domain.errors import NotFoundError, TransientStorageFailure
from storefront.domain.schemas import LoginOut, UserCreate, UserRead
from storefront.repos.user_repo import UserRepo
from storefront.services.cart_migration import CartMigration
from storefront.services.session_store import SessionStore
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        existing = self.repo.get_user(payload.id)
        if existing:
            return UserRead.model_validate(existing)

        with atomic(self.db, "user registration"):
            if payload.email and self.repo.get_user_by_email(payload.email):
                raise ValueError(f"Email {payload.email} is already registered")
            created = self.repo.add_user(UserModel(id=payload.id, name=payload.name, email=payload.email))
        logger.info(f"Registered user {created.id}")
        return UserRead.model_validate(created)

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")
        return UserRead.model_validate(user)

    def login(self, user_id: int, session_id: str | None, session_store: SessionStore) -> LoginOut:
        """
        Login stub: identity is trusted, the real work is moving the
        anonymous cart over. A failed migration never blocks the login,
        the session cart stays put and is merged on the next login.
        """
        user = self.get_user(user_id)

        if not session_id:
            return LoginOut(user=user, cart_migrated=True)

        try:
            merged = CartMigration(self.db, session_store).migrate(session_id, user_id)
        except TransientStorageFailure as e:
            logger.warning(f"Cart migration for user {user_id} failed, session cart kept: {e}")
            return LoginOut(user=user, cart_migrated=False)

        return LoginOut(user=user, cart_migrated=True, migrated_lines=merged)
