"""Keyed query cache used by the pages and API to read from the backend.

Every read pairs a cache key (a tuple of strings / principal values) with a
backend call. Writes go through :meth:`QueryClient.mutate`, which drops the
listed key prefixes once the call succeeds so the next read refetches.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from flask import current_app
from tenacity import Retrying, stop_after_attempt, wait_exponential, wait_fixed, before_sleep_log

logger = logging.getLogger(__name__)

QueryKey = Tuple[Any, ...]


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to call a query function and how long to wait between calls.

    `max_attempts` counts the first call, so ``RetryPolicy(3, ...)`` means
    "retry twice".
    """

    max_attempts: int
    wait: Any

    def retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self.wait,
            reraise=True,
            before_sleep=before_sleep_log(logger, logging.DEBUG),
        )


def fixed_delay(seconds: float):
    return wait_fixed(seconds)


def capped_exponential(base: float = 1.0, cap: float = 3.0):
    # 1s, 2s, 3s, 3s ...
    return wait_exponential(multiplier=base, min=base, max=cap)


NO_RETRY = RetryPolicy(max_attempts=1, wait=wait_fixed(0))


@dataclass
class QueryResult:
    data: Any = None
    error: Optional[BaseException] = None
    status: str = "idle"  # idle | success | error
    is_loading: bool = False
    is_fetched: bool = False

    @property
    def is_success(self) -> bool:
        return self.status == "success"


@dataclass
class _Entry:
    data: Any
    fetched_at: float


class QueryClient:
    """Thread-safe in-process cache of query results keyed by tuples."""

    def __init__(self, stale_after: Optional[float] = 30.0):
        self.stale_after = stale_after
        self._entries: Dict[QueryKey, _Entry] = {}
        self._lock = threading.Lock()

    def get_data(self, key: QueryKey) -> Any:
        with self._lock:
            entry = self._entries.get(tuple(key))
        return entry.data if entry else None

    def set_data(self, key: QueryKey, data: Any) -> None:
        with self._lock:
            self._entries[tuple(key)] = _Entry(data=data, fetched_at=time.monotonic())

    def _fresh(self, key: QueryKey, stale_after: Optional[float]) -> Optional[_Entry]:
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        if stale_after is not None and time.monotonic() - entry.fetched_at >= stale_after:
            return None
        return entry

    def query(
        self,
        key: QueryKey,
        fn: Callable[[], Any],
        enabled: bool = True,
        retry: Optional[RetryPolicy] = None,
        stale_after: Any = "default",
    ) -> QueryResult:
        """Return cached data for `key`, calling `fn` when missing or stale.

        A disabled query never calls `fn`; it reports ``idle`` and carries
        whatever is already cached for the key. Errors are captured on the
        result rather than raised.
        """
        key = tuple(key)
        if not enabled:
            return QueryResult(data=self.get_data(key), status="idle")

        if stale_after == "default":
            stale_after = self.stale_after

        entry = self._fresh(key, stale_after)
        if entry is not None:
            return QueryResult(data=entry.data, status="success", is_fetched=True)

        policy = retry or NO_RETRY
        try:
            data = policy.retrying()(fn)
        except Exception as exc:
            logger.debug("query %r failed: %s", key, exc)
            return QueryResult(error=exc, status="error", is_fetched=True)

        self.set_data(key, data)
        return QueryResult(data=data, status="success", is_fetched=True)

    def invalidate(self, prefix: Iterable[Any]) -> int:
        """Drop every entry whose key starts with `prefix`. Returns the count."""
        prefix = tuple(prefix)
        n = len(prefix)
        return self.invalidate_where(lambda k: k[:n] == prefix)

    def invalidate_where(self, predicate: Callable[[QueryKey], bool]) -> int:
        with self._lock:
            doomed = [k for k in self._entries if predicate(k)]
            for k in doomed:
                del self._entries[k]
        return len(doomed)

    def mutate(self, fn: Callable[..., Any], *args: Any, invalidates: Iterable[QueryKey] = (), **kwargs: Any) -> Any:
        """Run a write. On success, invalidate each key prefix in `invalidates`."""
        result = fn(*args, **kwargs)
        for prefix in invalidates:
            self.invalidate(prefix)
        return result

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def get_query_client() -> QueryClient:
    return current_app.extensions["query_client"]
