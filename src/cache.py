"""In-memory cache with TTL for link preview responses."""

import threading
import time
import weakref
from typing import Any, Callable, Optional, Protocol

from loguru import logger

from models import Response


def options_text(options: Any) -> str:
    """Reduce crawl options to the text used in cache keys."""
    return str(getattr(options, "value", options))


def cache_key(url: str, options: Any) -> str:
    """Build the cache key for a (url, options) pair. The URL is used as given."""
    return f"{url} options:{options_text(options)}"


class Cache(Protocol):
    """Anything that can store and return preview responses."""

    def get(self, url: str, options: Any) -> Optional[Response]: ...

    def put(self, url: str, options: Any, response: Optional[Response]) -> None: ...


class DisabledCache:
    """Cache that never stores anything."""

    instance: "DisabledCache"

    def __new__(cls):
        try:
            return cls.instance
        except AttributeError:
            cls.instance = super().__new__(cls)
            return cls.instance

    def get(self, url: str, options: Any) -> Optional[Response]:
        return None

    def put(self, url: str, options: Any, response: Optional[Response]) -> None:
        pass


disabled_cache = DisabledCache()


def _next_deadline(deadline: float, interval: float, now: float) -> float:
    """Next tick time. Ticks missed during a stall are skipped, not run back to back."""
    deadline += interval
    if deadline <= now:
        deadline = now + interval
    return deadline


def _cleanup_loop(ref: "weakref.ref[InMemoryCache]", stop: threading.Event, interval: float) -> None:
    """Run cleanup ticks at fixed intervals until stopped or the cache is gone."""
    deadline = time.monotonic() + interval
    while not stop.wait(max(0.0, deadline - time.monotonic())):
        deadline = _next_deadline(deadline, interval, time.monotonic())
        cache = ref()
        if cache is None:
            return
        try:
            cache.cleanup()
        except Exception:
            logger.exception("Cache cleanup tick failed")
        # Drop the strong reference before sleeping
        del cache


class InMemoryCache:
    """
    Thread-safe TTL cache for preview responses.

    Entries are evicted lazily on `get` and by a background thread every
    `cleanup_interval` seconds. The thread only holds a weak reference, so
    dropping the last reference to the cache also stops it.
    """

    def __init__(
        self,
        invalidation_timeout: float = 300.0,
        cleanup_interval: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if invalidation_timeout <= 0:
            raise ValueError(f"invalidation_timeout must be positive, got {invalidation_timeout}")
        if cleanup_interval <= 0:
            raise ValueError(f"cleanup_interval must be positive, got {cleanup_interval}")

        self._store: dict[str, tuple[Response, float]] = {}
        self._lock = threading.Lock()
        self._closed = False
        self._clock = clock
        self.invalidation_timeout = invalidation_timeout
        self.cleanup_interval = cleanup_interval

        self._stop = threading.Event()
        self._worker: Optional[threading.Thread] = threading.Thread(
            target=_cleanup_loop,
            args=(weakref.ref(self), self._stop, cleanup_interval),
            name="InMemoryCacheCleanup",
            daemon=True,
        )
        try:
            self._worker.start()
        except RuntimeError as e:
            # get() still enforces expiry without the worker
            logger.warning(f"Could not start cache cleanup thread: {e}")
            self._worker = None

    def _expired(self, timestamp: float, now: float) -> bool:
        # A negative age (clock moved backwards) counts as fresh
        return now - timestamp >= self.invalidation_timeout

    def get(self, url: str, options: Any) -> Optional[Response]:
        """Return the cached response if present and not expired."""
        key = cache_key(url, options)
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            response, timestamp = entry
            if not self._expired(timestamp, self._clock()):
                return response
            del self._store[key]
        logger.debug(f"Evicted expired entry on read: {key}")
        return None

    def put(self, url: str, options: Any, response: Optional[Response]) -> None:
        """Store a response, or remove the entry when `response` is None."""
        key = cache_key(url, options)
        with self._lock:
            if response is None:
                self._store.pop(key, None)
            else:
                self._store[key] = (response, self._clock())

    def cleanup(self) -> int:
        """Evict every expired entry. Returns the number of entries removed."""
        with self._lock:
            if self._closed:
                return 0
            now = self._clock()
            expired = [k for k, (_, ts) in self._store.items() if self._expired(ts, now)]
            for k in expired:
                del self._store[k]
        if expired:
            logger.debug(f"Cache cleanup evicted {len(expired)} entries")
        return len(expired)

    def clear(self) -> None:
        """Clear all cached entries."""
        with self._lock:
            self._store.clear()

    def close(self) -> None:
        """Stop the cleanup thread. Safe to call more than once."""
        self._stop.set()
        with self._lock:
            self._closed = True

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __enter__(self) -> "InMemoryCache":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __del__(self):
        # The constructor may have failed before the event existed
        stop = getattr(self, "_stop", None)
        if stop is not None:
            stop.set()
