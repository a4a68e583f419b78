import json
from typing import Any, Dict, Protocol

import redis
from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL, CART_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class SessionStore(Protocol):
    """Session scoped key-value storage for anonymous carts."""

    def load(self, session_id: str) -> Dict[str, Any]: ...

    def save(self, session_id: str, data: Dict[str, Any]) -> None: ...

    def forget(self, session_id: str) -> None: ...


class RedisSessionStore:
    """
    -one JSON document per session
    -TTL refreshed on every write
    -empty document = no key
    """

    def __init__(self, url: str | None = None, ttl: int = CART_TTL_SECONDS, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.ttl = ttl

    @staticmethod
    def _key(session_id: str) -> str:
        return f"cart:session:{session_id}"

    @redis_retry()
    def load(self, session_id: str) -> Dict[str, Any]:
        raw = self.redis.get(self._key(session_id))
        if not raw:
            return {}
        return json.loads(raw)

    @redis_retry()
    def save(self, session_id: str, data: Dict[str, Any]) -> None:
        key = self._key(session_id)
        if not data:
            self.redis.delete(key)
            return
        #SET cart:session:abc "{...}" EX ttl
        self.redis.set(name=key, value=json.dumps(data), ex=self.ttl)

    @redis_retry()
    def forget(self, session_id: str) -> None:
        logger.info(f"Forget session cart {session_id}")
        self.redis.delete(self._key(session_id))
