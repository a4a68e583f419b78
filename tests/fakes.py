"""In-memory stand-ins for Redis and Celery.

Same interfaces as RedisSessionStore and NotificationService, everything
kept in dicts and lists. No network, no broker.
"""

from __future__ import annotations

import json
from typing import Any, Dict

from redis.exceptions import ConnectionError as RedisConnectionError


class FakeSessionStore:

    def __init__(self) -> None:
        self._docs: dict[str, str] = {}
        self.fail_on: set[str] = set()

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail_on:
            raise RedisConnectionError(f"redis unavailable during {operation}")

    def load(self, session_id: str) -> Dict[str, Any]:
        self._maybe_fail("load")
        raw = self._docs.get(session_id)
        return json.loads(raw) if raw else {}

    def save(self, session_id: str, data: Dict[str, Any]) -> None:
        self._maybe_fail("save")
        if not data:
            self._docs.pop(session_id, None)
            return
        self._docs[session_id] = json.dumps(data)

    def forget(self, session_id: str) -> None:
        self._maybe_fail("forget")
        self._docs.pop(session_id, None)

    def has(self, session_id: str) -> bool:
        return session_id in self._docs


class FakeNotifier:

    def __init__(self, available: bool = True) -> None:
        self.sent: list[tuple[int, int, str]] = []
        self.available = available

    def send_order_confirmation(self, user_id: int, order_id: int, order_number: str) -> bool:
        if not self.available:
            return False
        self.sent.append((user_id, order_id, order_number))
        return True


class FakeRedis:
    """Just enough of redis.Redis for RedisSessionStore."""

    def __init__(self, failures: int = 0) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.failures = failures
        self.calls = 0

    def _tick(self) -> None:
        self.calls += 1
        if self.failures > 0:
            self.failures -= 1
            raise RedisConnectionError("connection reset")

    def get(self, name):
        self._tick()
        return self.data.get(name)

    def set(self, name, value, ex=None):
        self._tick()
        self.data[name] = value
        if ex is not None:
            self.ttls[name] = ex
        return True

    def delete(self, *names):
        self._tick()
        removed = 0
        for name in names:
            if self.data.pop(name, None) is not None:
                removed += 1
            self.ttls.pop(name, None)
        return removed
