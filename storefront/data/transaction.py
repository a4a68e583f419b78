# storefront/data/transaction.py
from contextlib import contextmanager

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.domain.errors import TransientStorageFailure
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def atomic(db: Session, operation: str):
    """
    One unit of work: commit on success, rollback on any failure.
    Storage errors come out as TransientStorageFailure, business errors unchanged.
    """
    try:
        yield
        db.commit()
    except (SQLAlchemyError, RedisError) as e:
        db.rollback()
        logger.error(f"Storage failure during {operation}, rolled back: {e}")
        raise TransientStorageFailure(f"{operation} failed, please try again") from e
    except Exception:
        db.rollback()
        raise
