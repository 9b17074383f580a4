"""Best-effort read-through cache over Redis.

The gate never raises a cache error to its callers: when Redis is missing,
unreachable or returns garbage, reads fall through to the fetcher and writes
are dropped. Availability is tracked as an explicit state machine::

    DISABLED                       no REDIS_URL configured (terminal)
    UNKNOWN -> CONNECTING -> READY
    CONNECTING | READY -> UNAVAILABLE   after ``max_failures`` consecutive
                                        connection errors
    UNAVAILABLE -> READY                a reconnect probe (at most one per
                                        ``reconnect_interval``) succeeds
"""
import enum
import json
import threading
import time
from typing import Any, Callable, Dict, List, Optional

import redis

from app.middleware.monitoring import record_cache_result
from app.utils.logger import logger


class CacheState(str, enum.Enum):
    DISABLED = "disabled"
    UNKNOWN = "unknown"
    CONNECTING = "connecting"
    READY = "ready"
    UNAVAILABLE = "unavailable"


_CONNECTION_ERRORS = (redis.ConnectionError, redis.TimeoutError)


def cache_key(namespace: str, **params: Any) -> str:
    """Build a deterministic key: ``<namespace>:<name>=<value>:...`` with names sorted.

    ``None`` renders as an empty value so that "no filter" and "filter absent"
    share one key.
    """
    parts = [namespace]
    for name in sorted(params):
        value = params[name]
        parts.append(f"{name}={'' if value is None else value}")
    return ":".join(parts)


class CacheGate:
    """Read-through cache with pattern invalidation over a Redis client."""

    def __init__(
        self,
        url: str = "",
        client: Optional[Any] = None,
        default_ttl: int = 60,
        max_failures: int = 3,
        reconnect_interval: float = 30,
        log_interval: float = 60,
        socket_timeout: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._url = url
        self._client = client
        self.default_ttl = default_ttl
        self.max_failures = max_failures
        self.reconnect_interval = reconnect_interval
        self.log_interval = log_interval
        self._socket_timeout = socket_timeout
        self._clock = clock

        self._lock = threading.Lock()
        self._failures = 0
        self._last_probe = 0.0
        self._last_error_log: Optional[float] = None
        self._probing = False
        self._state = CacheState.UNKNOWN if (url or client is not None) else CacheState.DISABLED

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    @property
    def state(self) -> CacheState:
        return self._state

    def connect(self) -> CacheState:
        """Create the client and probe it once. Called from app startup."""
        with self._lock:
            if self._state == CacheState.DISABLED:
                logger.info("Cache disabled: REDIS_URL not configured")
                return self._state
            self._state = CacheState.CONNECTING
            self._ensure_client()

        try:
            self._client.ping()
        except redis.RedisError as exc:
            self._record_failure("connect", exc)
        else:
            self._record_success()
            logger.info("Cache connected")
        return self._state

    def close(self) -> None:
        if self._client is not None and hasattr(self._client, "close"):
            try:
                self._client.close()
            except redis.RedisError as exc:
                logger.debug(f"Cache close failed: {exc}")

    def status(self) -> Dict[str, Any]:
        """Snapshot for the health endpoint"""
        return {"state": self._state.value, "consecutive_failures": self._failures}

    def _ensure_client(self) -> None:
        if self._client is None:
            self._client = redis.Redis.from_url(
                self._url,
                decode_responses=True,
                socket_timeout=self._socket_timeout,
                socket_connect_timeout=self._socket_timeout,
            )

    def _available(self) -> bool:
        """Whether an operation should be attempted against the store.

        While UNAVAILABLE, a single caller per ``reconnect_interval`` is elected
        to ping the store; everyone else bypasses the cache.
        """
        with self._lock:
            if self._state == CacheState.DISABLED:
                return False
            if self._state != CacheState.UNAVAILABLE:
                if self._state == CacheState.UNKNOWN:
                    self._state = CacheState.CONNECTING
                self._ensure_client()
                return True
            if self._probing or self._clock() - self._last_probe < self.reconnect_interval:
                return False
            self._probing = True
            self._last_probe = self._clock()

        try:
            self._client.ping()
        except redis.RedisError as exc:
            with self._lock:
                self._probing = False
            self._log_error("reconnect", exc)
            return False

        with self._lock:
            self._probing = False
            self._failures = 0
            self._state = CacheState.READY
        logger.info("Cache reconnected")
        return True

    def _record_success(self) -> None:
        with self._lock:
            self._failures = 0
            self._state = CacheState.READY

    def _record_failure(self, operation: str, exc: Exception) -> None:
        if isinstance(exc, _CONNECTION_ERRORS):
            with self._lock:
                self._failures += 1
                if self._failures >= self.max_failures and self._state != CacheState.UNAVAILABLE:
                    self._state = CacheState.UNAVAILABLE
                    self._last_probe = self._clock()
                    logger.warning(
                        "Cache marked unavailable",
                        extra={"error": str(exc)},
                    )
        self._log_error(operation, exc)

    def _log_error(self, operation: str, exc: Exception) -> None:
        with self._lock:
            now = self._clock()
            if self._last_error_log is not None and now - self._last_error_log < self.log_interval:
                return
            self._last_error_log = now
        logger.error(f"Cache {operation} failed", extra={"error": str(exc)})

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def get_cached(self, key: str, fetcher: Callable[[], Any], ttl: Optional[int] = None) -> Any:
        """Return the cached JSON value for ``key``, or ``fetcher()`` (stored for ``ttl`` seconds).

        Errors raised by ``fetcher`` propagate unchanged.
        """
        if not self._available():
            return fetcher()

        raw = None
        try:
            raw = self._client.get(key)
        except redis.RedisError as exc:
            self._record_failure("read", exc)
        else:
            self._record_success()

        if raw is not None:
            try:
                value = json.loads(raw)
            except (TypeError, ValueError):
                logger.warning("Discarding corrupt cache entry", extra={"cache_key": key})
                self.delete_key(key)
            else:
                record_cache_result("hit")
                return value

        record_cache_result("miss")
        value = fetcher()
        self._store(key, value, ttl if ttl is not None else self.default_ttl)
        return value

    def _store(self, key: str, value: Any, ttl: int) -> None:
        if self._state == CacheState.UNAVAILABLE:
            return
        try:
            payload = json.dumps(value, default=str)
        except (TypeError, ValueError) as exc:
            logger.warning("Value not cacheable", extra={"cache_key": key, "error": str(exc)})
            return
        try:
            self._client.setex(key, ttl, payload)
        except redis.RedisError as exc:
            self._record_failure("write", exc)
        else:
            self._record_success()

    def invalidate(self, pattern: str) -> int:
        """Delete every key matching the glob ``pattern``; returns how many were deleted"""
        if not self._available():
            return 0
        try:
            keys: List[str] = list(self._client.scan_iter(match=pattern, count=100))
            deleted = self._client.delete(*keys) if keys else 0
        except redis.RedisError as exc:
            self._record_failure("invalidate", exc)
            return 0
        self._record_success()
        if deleted:
            logger.debug(f"Invalidated {deleted} cache keys", extra={"cache_key": pattern})
        return deleted

    def delete_key(self, key: str) -> None:
        if not self._available():
            return
        try:
            self._client.delete(key)
        except redis.RedisError as exc:
            self._record_failure("delete", exc)
        else:
            self._record_success()
