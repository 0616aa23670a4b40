from __future__ import annotations

import threading
import time
from typing import Callable, Dict, NamedTuple, Optional

from .record_types import RecordType
from .response import ResolveResponse

""" Bounded response cache keyed by query fingerprint; each entry has its own TTL. """

DEFAULT_TTL = 60
DEFAULT_MAX_SIZE = 100


class QueryFingerprint(NamedTuple):
    """Cache key for one query: (name, record type, server identity, DNSSEC flag)."""

    name: str
    record_type: RecordType
    server: Optional[str]
    dnssec: bool

    @classmethod
    def build(
        cls,
        name: str,
        record_type: RecordType,
        server: Optional[str] = None,
        dnssec: bool = False,
    ) -> "QueryFingerprint":
        """
        Build a fingerprint with the name normalized (lowercase, no trailing dot).

        Example:
            >>> QueryFingerprint.build("Example.COM.", RecordType.A).name
            'example.com'
        """
        return cls(
            name=name.rstrip(".").lower(),
            record_type=RecordType(record_type),
            server=server,
            dnssec=bool(dnssec),
        )


class CacheEntry(NamedTuple):
    response: ResolveResponse
    expires_at: float
    ttl: int


def response_ttl(response: ResolveResponse, default_ttl: int = DEFAULT_TTL) -> int:
    """Minimum TTL across the answer records, or default_ttl when there are none."""
    ttl = response.answer.min_ttl()
    return default_ttl if ttl is None else max(0, int(ttl))


class ResponseCache:
    """
    Thread-safe in-memory response cache with per-entry TTL and bounded size.

    Inputs:
        max_size: Maximum number of entries held (>= 1).
        default_ttl: TTL in seconds used for answers without records.
        clock: Callable returning the current time in seconds.
    Outputs:
        ResponseCache instance

    Notes:
        All dictionary operations are synchronized with an RLock.
        Expired entries are removed lazily by get().
        When full, put() of a new key evicts the oldest-inserted entry first.

    Example use:
        >>> from dnsolve.cache import QueryFingerprint, ResponseCache
        >>> from dnsolve.response import ResolveResponse
        >>> cache = ResponseCache(max_size=2)
        >>> key = QueryFingerprint.build("example.com", RecordType.A)
        >>> cache.put(key, ResolveResponse(status=0))
        >>> cache.get(key).status
        0
    """

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_SIZE,
        default_ttl: int = DEFAULT_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if int(max_size) < 1:
            raise ValueError("max_size must be >= 1")
        self.max_size = int(max_size)
        self.default_ttl = max(0, int(default_ttl))
        self._clock = clock
        # dict preserves insertion order, so the first key is the oldest entry
        self._store: Dict[QueryFingerprint, CacheEntry] = {}
        self._lock = threading.RLock()
        self.hits = 0
        self.misses = 0

    def get(self, key: QueryFingerprint) -> Optional[ResolveResponse]:
        """
        Retrieves a response from the cache.

        Inputs:
            key: Query fingerprint.

        Outputs:
            The cached response, or None if the key is not found or has expired.
        """
        now = self._clock()
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self.misses += 1
                return None
            # Check if the entry has expired.
            if now >= entry.expires_at:
                del self._store[key]
                self.misses += 1
                return None
            self.hits += 1
            return entry.response

    def put(self, key: QueryFingerprint, response: ResolveResponse) -> None:
        """
        Adds a response to the cache.

        Inputs:
            key: Query fingerprint.
            response: Response to store; its TTL is the minimum record TTL.
        Outputs:
            None
        """
        ttl = response_ttl(response, self.default_ttl)
        with self._lock:
            if key in self._store:
                # Re-inserting moves the key to the newest position.
                del self._store[key]
            elif len(self._store) >= self.max_size:
                oldest = next(iter(self._store))
                del self._store[oldest]
            self._store[key] = CacheEntry(
                response=response, expires_at=self._clock() + ttl, ttl=ttl
            )

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._store)

    def __len__(self) -> int:
        return self.size
