"""Per-parent regeneration locks so two schedule passes never interleave."""

import threading
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol

import redis

from backend.trips.errors import ConflictError


def make_regeneration_key(kind: str, parent_id: uuid.UUID) -> str:
    """Lock key for regenerating one parent's derived children.

    Args:
        kind: Schedule kind (e.g., "cruise_port", "tour_day")
        parent_id: Parent component id

    Returns:
        Lock key
    """
    return f"regen:{kind}:{parent_id}"


class RegenerationLock(Protocol):
    """Mutual exclusion keyed by parent component."""

    def acquire(self, key: str) -> str | None:
        """Try to take the lock.

        Returns:
            Owner token if acquired, None if already held
        """
        ...

    def release(self, key: str, token: str) -> None:
        """Release the lock if `token` still owns it."""
        ...


class InMemoryRegenerationLock:
    """Process-local lock with expiry, for single-worker deployments and tests."""

    def __init__(self, ttl_seconds: int = 60) -> None:
        self._ttl_seconds = ttl_seconds
        self._held: dict[str, tuple[str, float]] = {}
        self._mutex = threading.Lock()

    def acquire(self, key: str) -> str | None:
        now = time.monotonic()
        with self._mutex:
            held = self._held.get(key)
            if held is not None and held[1] > now:
                return None
            token = uuid.uuid4().hex
            self._held[key] = (token, now + self._ttl_seconds)
            return token

    def release(self, key: str, token: str) -> None:
        with self._mutex:
            held = self._held.get(key)
            if held is not None and held[0] == token:
                del self._held[key]


class RedisRegenerationLock:
    """Redis-based lock using SET NX EX."""

    def __init__(self, redis_client: redis.Redis, ttl_seconds: int = 60) -> None:
        """Initialize lock.

        Args:
            redis_client: Redis client
            ttl_seconds: Lock expiry in seconds
        """
        self._redis = redis_client
        self._ttl_seconds = ttl_seconds

    def acquire(self, key: str) -> str | None:
        token = uuid.uuid4().hex
        acquired = self._redis.set(key, token, nx=True, ex=self._ttl_seconds)
        return token if acquired else None

    def release(self, key: str, token: str) -> None:
        current = self._redis.get(key)
        if isinstance(current, bytes):
            current = current.decode()
        if current == token:
            self._redis.delete(key)


@contextmanager
def hold_regeneration_lock(lock: RegenerationLock, key: str) -> Iterator[None]:
    """Hold `key` for the duration of the block.

    Raises:
        ConflictError: If another regeneration holds the key
    """
    token = lock.acquire(key)
    if token is None:
        raise ConflictError("Schedule regeneration already in progress for this component")
    try:
        yield
    finally:
        lock.release(key, token)
