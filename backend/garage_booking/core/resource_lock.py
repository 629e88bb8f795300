# backend/garage_booking/core/resource_lock.py
"""
Locks for bookable resources.

A booking holds the lock of its bay and of every staff member it plans to use
while it re-verifies committed state and writes. Locks are keyed by
(resource kind, resource id, date) and always acquired in sorted key order, so
two bookings competing for overlapping resource sets cannot deadlock.

With Redis configured the locks are ``SET key token NX EX ttl`` entries shared
by every worker process; a worker that dies while holding one loses it when
the TTL runs out. Without Redis the registry falls back to per-process
mutexes. A Redis error while acquiring a key also falls back to the local
mutex for that key.

The registry is owned by the application (created in the FastAPI lifespan)
and shared by every request handled by that process.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date
import logging
import threading
import time
from typing import Callable, Dict, Iterable, Iterator, List, NamedTuple, Optional

import redis
from redis import Redis
from redis.exceptions import RedisError
import ulid

from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

RESOURCE_LOCK_PREFIX = "garage:lock"
DEFAULT_LOCK_TTL_SECONDS = 90
POLL_INTERVAL_SECONDS = 0.05


class ResourceLockTimeout(Exception):
    """Raised when a resource lock cannot be acquired in time."""

    def __init__(self, key: "ResourceKey", timeout: float):
        self.key = key
        self.timeout = timeout
        super().__init__(f"Timed out after {timeout:.1f}s waiting for {key.label()}")


class ResourceKey(NamedTuple):
    kind: str
    resource_id: str
    day: date

    def label(self) -> str:
        return f"{self.kind}:{self.resource_id}:{self.day.isoformat()}"

    def redis_key(self) -> str:
        return f"{RESOURCE_LOCK_PREFIX}:{self.label()}"


@dataclass
class _LocalEntry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    refs: int = 0


class ResourceLockRegistry:
    """Registry of per-resource, per-day locks."""

    def __init__(
        self,
        timeout_seconds: float = 10.0,
        redis_client: Optional[Redis] = None,
        ttl_seconds: int = DEFAULT_LOCK_TTL_SECONDS,
        poll_interval: float = POLL_INTERVAL_SECONDS,
    ):
        self.timeout_seconds = timeout_seconds
        self.redis: Optional[Redis] = redis_client
        self.ttl_seconds = ttl_seconds
        self.poll_interval = poll_interval
        self._local: Dict[ResourceKey, _LocalEntry] = {}
        self._guard = threading.Lock()

    @classmethod
    def from_url(
        cls,
        redis_url: Optional[str],
        timeout_seconds: float = 10.0,
        ttl_seconds: int = DEFAULT_LOCK_TTL_SECONDS,
    ) -> "ResourceLockRegistry":
        """Registry backed by ``redis_url``, or by local mutexes when Redis is unreachable."""
        if not redis_url:
            logger.info("REDIS_URL not set, using in-process resource locks")
            return cls(timeout_seconds, ttl_seconds=ttl_seconds)
        try:
            client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                retry_on_timeout=True,
            )
            client.ping()
            logger.info("Connected to Redis for resource locks")
            return cls(timeout_seconds, redis_client=client, ttl_seconds=ttl_seconds)
        except (RedisError, ConnectionError) as e:
            logger.warning(f"Redis not available: {e}. Using in-process resource locks.")
            return cls(timeout_seconds, ttl_seconds=ttl_seconds)

    @property
    def backend(self) -> str:
        return "redis" if self.redis is not None else "memory"

    # Local mutexes, reference counted so released keys do not accumulate

    def _acquire_local(self, key: ResourceKey, wait: float) -> bool:
        with self._guard:
            entry = self._local.setdefault(key, _LocalEntry())
            entry.refs += 1
        if entry.lock.acquire(timeout=wait):
            return True
        self._drop_local(key, entry)
        return False

    def _release_local(self, key: ResourceKey) -> None:
        with self._guard:
            entry = self._local[key]
        entry.lock.release()
        self._drop_local(key, entry)

    def _drop_local(self, key: ResourceKey, entry: _LocalEntry) -> None:
        with self._guard:
            entry.refs -= 1
            if entry.refs == 0 and self._local.get(key) is entry:
                del self._local[key]

    # Redis locks

    def _acquire_redis(self, client: Redis, key: ResourceKey, token: str, wait: float) -> bool:
        deadline = time.monotonic() + wait
        while True:
            if client.set(key.redis_key(), token, nx=True, ex=self.ttl_seconds):
                return True
            if time.monotonic() >= deadline:
                return False
            time.sleep(self.poll_interval)

    def _release_redis(self, client: Redis, key: ResourceKey, token: str) -> None:
        try:
            if client.get(key.redis_key()) != token:
                # Expired and possibly taken by someone else.
                prometheus_metrics.record_resource_lock("release", "not_found")
                logger.warning("Resource lock %s expired before release", key.label())
                return
            client.delete(key.redis_key())
            prometheus_metrics.record_resource_lock("release", "success")
        except RedisError as exc:
            prometheus_metrics.record_resource_lock("release", "error")
            logger.warning(
                "resource_lock_release_failed",
                extra={"key": key.label(), "error": str(exc), "error_type": type(exc).__name__},
            )

    def _acquire(self, key: ResourceKey, token: str, wait: float) -> Callable[[], None]:
        """Take one key; return the callable that releases it."""
        client = self.redis
        if client is not None:
            try:
                if not self._acquire_redis(client, key, token, wait):
                    raise ResourceLockTimeout(key, wait)
                return lambda: self._release_redis(client, key, token)
            except RedisError as exc:
                prometheus_metrics.record_resource_lock("acquire", "error")
                logger.warning(
                    "resource_lock_redis_unavailable",
                    extra={"key": key.label(), "error": str(exc), "error_type": type(exc).__name__},
                )

        if not self._acquire_local(key, wait):
            raise ResourceLockTimeout(key, wait)

        def release_local() -> None:
            self._release_local(key)
            prometheus_metrics.record_resource_lock("release", "success")

        return release_local

    @contextmanager
    def hold(
        self, keys: Iterable[ResourceKey], timeout: Optional[float] = None
    ) -> Iterator[List[ResourceKey]]:
        """
        Hold every lock in ``keys`` for the duration of the block.

        Duplicate keys are collapsed. On timeout every lock already taken is
        released before ResourceLockTimeout is raised.
        """
        ordered = sorted(set(keys))
        wait = self.timeout_seconds if timeout is None else timeout
        token = str(ulid.ULID())
        releases: List[Callable[[], None]] = []
        try:
            for key in ordered:
                try:
                    releases.append(self._acquire(key, token, wait))
                except ResourceLockTimeout:
                    prometheus_metrics.record_resource_lock("acquire", "timeout")
                    logger.warning("Resource lock timeout for %s", key.label())
                    raise
                prometheus_metrics.record_resource_lock("acquire", "success")
            yield ordered
        finally:
            for release in reversed(releases):
                release()

    def __len__(self) -> int:
        """Local lock entries currently held or waited on."""
        with self._guard:
            return len(self._local)
