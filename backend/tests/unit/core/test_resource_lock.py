# backend/tests/unit/core/test_resource_lock.py
"""ResourceLockRegistry: sorted acquisition, release, timeouts and backends."""

from datetime import date
import threading
from unittest.mock import Mock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError, RedisError

from garage_booking.core.resource_lock import (
    ResourceKey,
    ResourceLockRegistry,
    ResourceLockTimeout,
)
from tests.helpers.fake_redis import FakeRedis

DAY = date(2030, 1, 7)
BAY_1 = ResourceKey("bay", "1", DAY)


class TestLocalLocks:
    def test_hold_returns_sorted_unique_keys(self):
        registry = ResourceLockRegistry(timeout_seconds=1)
        keys = [
            ResourceKey("staff", "b", DAY),
            ResourceKey("bay", "1", DAY),
            ResourceKey("staff", "b", DAY),
            ResourceKey("staff", "a", DAY),
        ]

        with registry.hold(keys) as held:
            assert held == [
                ResourceKey("bay", "1", DAY),
                ResourceKey("staff", "a", DAY),
                ResourceKey("staff", "b", DAY),
            ]
            assert len(registry) == 3

    def test_entries_are_dropped_once_released(self):
        registry = ResourceLockRegistry(timeout_seconds=1)

        for day in (date(2030, 1, 7), date(2030, 1, 8), date(2030, 1, 9)):
            with registry.hold([ResourceKey("bay", "1", day), ResourceKey("staff", "a", day)]):
                pass

        assert len(registry) == 0

    def test_locks_are_released_after_block(self):
        registry = ResourceLockRegistry(timeout_seconds=0.1)

        with registry.hold([BAY_1]):
            pass

        with registry.hold([BAY_1]):
            pass

    def test_timeout_when_another_thread_holds_the_lock(self):
        registry = ResourceLockRegistry(timeout_seconds=0.05)
        holding = threading.Event()
        release = threading.Event()

        def holder():
            with registry.hold([BAY_1]):
                holding.set()
                release.wait(2)

        thread = threading.Thread(target=holder)
        thread.start()
        try:
            assert holding.wait(2)
            with pytest.raises(ResourceLockTimeout) as exc_info:
                with registry.hold([ResourceKey("bay", "0", DAY), BAY_1]):
                    pass
            assert exc_info.value.key == BAY_1
            # Only the holder's entry is left; the timed-out waiter dropped its references.
            assert len(registry) == 1
        finally:
            release.set()
            thread.join()

        assert len(registry) == 0
        with registry.hold([ResourceKey("bay", "0", DAY)], timeout=0.05):
            pass

    def test_different_days_do_not_contend(self):
        registry = ResourceLockRegistry(timeout_seconds=0.05)

        with registry.hold([BAY_1]):
            with registry.hold([ResourceKey("bay", "1", date(2030, 1, 8))]):
                pass


class TestRedisLocks:
    def test_key_is_set_with_ttl_and_deleted_on_release(self):
        client = FakeRedis()
        registry = ResourceLockRegistry(timeout_seconds=0.1, redis_client=client, ttl_seconds=30)

        with registry.hold([BAY_1]):
            assert client.get("garage:lock:bay:1:2030-01-07") is not None
            assert client.expire_times["garage:lock:bay:1:2030-01-07"] == 30
            assert len(registry) == 0

        assert client.get("garage:lock:bay:1:2030-01-07") is None

    def test_registries_sharing_redis_exclude_each_other(self):
        client = FakeRedis()
        first = ResourceLockRegistry(timeout_seconds=0.1, redis_client=client, poll_interval=0.01)
        second = ResourceLockRegistry(timeout_seconds=0.1, redis_client=client, poll_interval=0.01)

        with first.hold([BAY_1]):
            with pytest.raises(ResourceLockTimeout):
                with second.hold([BAY_1]):
                    pass

        with second.hold([BAY_1]):
            pass

    def test_waiter_gets_the_lock_once_released(self):
        client = FakeRedis()
        first = ResourceLockRegistry(timeout_seconds=1, redis_client=client, poll_interval=0.01)
        second = ResourceLockRegistry(timeout_seconds=2, redis_client=client, poll_interval=0.01)
        holding = threading.Event()

        def holder():
            with first.hold([BAY_1]):
                holding.set()
                threading.Event().wait(0.1)

        thread = threading.Thread(target=holder)
        thread.start()
        assert holding.wait(2)
        with second.hold([BAY_1]) as held:
            assert held == [BAY_1]
        thread.join()

    def test_release_leaves_a_key_taken_over_after_expiry(self):
        client = FakeRedis()
        registry = ResourceLockRegistry(timeout_seconds=0.1, redis_client=client)

        with registry.hold([BAY_1]):
            client.set("garage:lock:bay:1:2030-01-07", "someone-else")

        assert client.get("garage:lock:bay:1:2030-01-07") == "someone-else"

    def test_redis_error_falls_back_to_local_lock(self):
        client = Mock()
        client.set.side_effect = RedisError("boom")
        registry = ResourceLockRegistry(timeout_seconds=0.05, redis_client=client)

        with registry.hold([BAY_1]):
            assert len(registry) == 1
            with pytest.raises(ResourceLockTimeout):
                with registry.hold([BAY_1]):
                    pass

        assert len(registry) == 0


class TestFromUrl:
    def test_no_url_uses_memory(self):
        assert ResourceLockRegistry.from_url(None).backend == "memory"

    def test_unreachable_redis_falls_back_to_memory(self):
        client = Mock()
        client.ping.side_effect = RedisConnectionError("refused")
        with patch("garage_booking.core.resource_lock.redis.from_url", return_value=client):
            registry = ResourceLockRegistry.from_url("redis://localhost:6399/0")

        assert registry.backend == "memory"

    def test_reachable_redis_is_used(self):
        client = Mock()
        with patch("garage_booking.core.resource_lock.redis.from_url", return_value=client):
            registry = ResourceLockRegistry.from_url(
                "redis://localhost:6379/0", timeout_seconds=3, ttl_seconds=45
            )

        assert registry.backend == "redis"
        assert (registry.timeout_seconds, registry.ttl_seconds) == (3, 45)
        client.ping.assert_called_once()
