"""Unit tests for per-parent regeneration locks."""

import uuid
from unittest.mock import MagicMock

import pytest

from backend.trips.errors import ConflictError
from backend.trips.locks import (
    InMemoryRegenerationLock,
    RedisRegenerationLock,
    hold_regeneration_lock,
    make_regeneration_key,
)


def test_key_includes_kind_and_parent() -> None:
    parent_id = uuid.uuid4()
    assert make_regeneration_key("cruise_port", parent_id) == f"regen:cruise_port:{parent_id}"


class TestInMemoryLock:
    def test_second_acquire_fails_until_release(self) -> None:
        lock = InMemoryRegenerationLock()

        token = lock.acquire("k")
        assert token is not None
        assert lock.acquire("k") is None

        lock.release("k", token)
        assert lock.acquire("k") is not None

    def test_release_with_stale_token_keeps_lock(self) -> None:
        lock = InMemoryRegenerationLock()
        lock.acquire("k")

        lock.release("k", "someone-else")

        assert lock.acquire("k") is None

    def test_expired_lock_can_be_taken(self) -> None:
        lock = InMemoryRegenerationLock(ttl_seconds=0)
        lock.acquire("k")

        assert lock.acquire("k") is not None

    def test_keys_are_independent(self) -> None:
        lock = InMemoryRegenerationLock()
        assert lock.acquire("a") is not None
        assert lock.acquire("b") is not None


class TestRedisLock:
    def test_acquire_uses_set_nx_ex(self) -> None:
        client = MagicMock()
        client.set.return_value = True
        lock = RedisRegenerationLock(client, ttl_seconds=30)

        token = lock.acquire("k")

        assert token is not None
        client.set.assert_called_once_with("k", token, nx=True, ex=30)

    def test_acquire_returns_none_when_held(self) -> None:
        client = MagicMock()
        client.set.return_value = None
        assert RedisRegenerationLock(client).acquire("k") is None

    def test_release_only_deletes_own_token(self) -> None:
        client = MagicMock()
        client.get.return_value = "other-token"
        lock = RedisRegenerationLock(client)

        lock.release("k", "my-token")
        client.delete.assert_not_called()

        client.get.return_value = "my-token"
        lock.release("k", "my-token")
        client.delete.assert_called_once_with("k")


def test_hold_raises_conflict_when_held() -> None:
    lock = InMemoryRegenerationLock()

    with hold_regeneration_lock(lock, "k"):
        with pytest.raises(ConflictError, match="already in progress"):
            with hold_regeneration_lock(lock, "k"):
                pass

    # Released after the outer block
    assert lock.acquire("k") is not None


def test_hold_releases_on_error() -> None:
    lock = InMemoryRegenerationLock()

    with pytest.raises(RuntimeError):
        with hold_regeneration_lock(lock, "k"):
            raise RuntimeError("boom")

    assert lock.acquire("k") is not None
