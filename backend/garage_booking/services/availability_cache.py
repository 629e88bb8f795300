# backend/garage_booking/services/availability_cache.py
"""
Availability cache for the garage booking engine

Memoizes calculator results per (date, operation set). Entries never expire on
their own; a successful booking evicts the entry for the booked date and
operation set. The cache is created once at application start and handed to
the services that need it.

Redis backs the cache when REDIS_URL is set, otherwise a thread-safe in-memory
dict does. A cache failure is logged and treated as a miss: it never fails the
request.
"""

from datetime import date
import json
import logging
import threading
from typing import Dict, Iterable, List, Optional

import redis
from redis import Redis
from redis.exceptions import RedisError

from ..core.constants import AVAILABILITY_CACHE_PREFIX
from ..domain.intervals import TimeWindow
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)


class AvailabilityCacheKey:
    """Canonical cache key generation."""

    @staticmethod
    def build(target_date: date, operation_ids: Iterable[str]) -> str:
        """
        Build the key for a date and operation set.

        Examples:
            build(date(2025, 6, 18), ['b', 'a', 'b']) -> 'avail:2025-06-18:a,b'
        """
        canonical = ",".join(sorted(set(operation_ids)))
        return f"{AVAILABILITY_CACHE_PREFIX}:{target_date.isoformat()}:{canonical}"


class AvailabilityCache:
    """Date + operation-set keyed store of advisory availability windows."""

    def __init__(self, redis_client: Optional[Redis] = None):
        self.redis: Optional[Redis] = redis_client
        self._memory_cache: Dict[str, str] = {}
        self._lock = threading.Lock()
        self._stats: Dict[str, int] = {"hits": 0, "misses": 0, "sets": 0, "evictions": 0, "errors": 0}

    @classmethod
    def from_url(cls, redis_url: Optional[str]) -> "AvailabilityCache":
        """
        Create a cache for ``redis_url``, falling back to memory when Redis is unreachable.
        """
        if not redis_url:
            logger.info("REDIS_URL not set, using in-memory availability cache")
            return cls()
        try:
            client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_keepalive=True,
                socket_connect_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30,
            )
            client.ping()
            logger.info("Connected to Redis for availability cache")
            return cls(client)
        except (RedisError, ConnectionError) as e:
            logger.warning(f"Redis not available: {e}. Using in-memory availability cache.")
            return cls()

    @property
    def backend(self) -> str:
        return "redis" if self.redis is not None else "memory"

    def _read(self, key: str) -> Optional[str]:
        if self.redis is not None:
            return self.redis.get(key)
        with self._lock:
            return self._memory_cache.get(key)

    def _write(self, key: str, payload: str) -> None:
        if self.redis is not None:
            self.redis.set(key, payload)
            return
        with self._lock:
            self._memory_cache[key] = payload

    def _delete(self, key: str) -> None:
        if self.redis is not None:
            self.redis.delete(key)
            return
        with self._lock:
            self._memory_cache.pop(key, None)

    def get(self, target_date: date, operation_ids: Iterable[str]) -> Optional[List[TimeWindow]]:
        """Cached windows, or None on a miss or a cache failure."""
        key = AvailabilityCacheKey.build(target_date, operation_ids)
        try:
            payload = self._read(key)
        except RedisError as e:
            logger.error(f"Availability cache get error for key {key}: {e}")
            self._stats["errors"] += 1
            prometheus_metrics.record_availability_cache("error")
            return None

        if payload is None:
            self._stats["misses"] += 1
            prometheus_metrics.record_availability_cache("miss")
            return None

        try:
            windows = [TimeWindow.from_dict(item) for item in json.loads(payload)]
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Discarding unreadable availability cache entry {key}: {e}")
            self._stats["errors"] += 1
            prometheus_metrics.record_availability_cache("error")
            return None

        self._stats["hits"] += 1
        prometheus_metrics.record_availability_cache("hit")
        return windows

    def set(self, target_date: date, operation_ids: Iterable[str], windows: List[TimeWindow]) -> bool:
        """Store windows; returns False when the write failed."""
        key = AvailabilityCacheKey.build(target_date, operation_ids)
        payload = json.dumps([w.to_dict() for w in windows])
        try:
            self._write(key, payload)
        except RedisError as e:
            logger.error(f"Availability cache set error for key {key}: {e}")
            self._stats["errors"] += 1
            return False
        self._stats["sets"] += 1
        return True

    def invalidate(self, target_date: date, operation_ids: Iterable[str]) -> bool:
        """Evict the entry for a date and operation set; returns False when the delete failed."""
        key = AvailabilityCacheKey.build(target_date, operation_ids)
        try:
            self._delete(key)
        except RedisError as e:
            logger.error(f"Availability cache delete error for key {key}: {e}")
            self._stats["errors"] += 1
            prometheus_metrics.record_availability_cache("error")
            return False
        self._stats["evictions"] += 1
        prometheus_metrics.record_availability_cache("evict")
        logger.debug("Evicted availability cache key %s", key)
        return True

    def contains(self, target_date: date, operation_ids: Iterable[str]) -> bool:
        key = AvailabilityCacheKey.build(target_date, operation_ids)
        try:
            return self._read(key) is not None
        except RedisError:
            return False

    def clear(self) -> None:
        """Drop every in-memory entry (Redis entries are left alone)."""
        with self._lock:
            self._memory_cache.clear()

    def get_stats(self) -> Dict[str, int]:
        return dict(self._stats)
