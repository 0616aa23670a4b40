"""
DNSolve: the public resolver handle.

Composes the response cache, retry controller, record parser and statistics
recorder around a pluggable transport. Lookups are coroutines; blocking
transports run on a thread pool owned by the handle and each attempt races a
timer via asyncio.wait_for.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Awaitable, Callable, Iterable, List, Mapping, Optional, Union

from .cache import QueryFingerprint, ResponseCache
from .config.config_schema import ResolverConfig
from .exceptions import (
    DisposedError,
    DNSolveError,
    InvalidInputError,
    QueryTimeoutError,
    SRVRecordFormatError,
    TransportError,
)
from .record_types import RecordType, code_for, parse_record_type
from .response import Record, ResolveResponse
from .retry import RetryController
from .reverse import build_reverse_name
from .stats import StatisticsRecorder
from .transports.base import Transport

logger = logging.getLogger(__name__)

RecordTypeLike = Union[RecordType, str, int]


class DNSolve:
    """
    Brief: Resolver handle with caching, retries, statistics and a lifecycle.

    Inputs:
    - transport: Transport collaborator; defaults to DoHJsonTransport (Google)
    - config: ResolverConfig (defaults: no cache, no statistics, no retries)
    - cache: explicit ResponseCache; overrides config.enable_cache
    - stats: explicit StatisticsRecorder; overrides config.enable_statistics
    - sleep: awaitable sleep used for retry backoff (tests inject a fake)

    Outputs:
    - DNSolve instance

    Notes:
    - Every public operation raises DisposedError once dispose() was called.
    - dispose() is idempotent and clears the cache.

    Example:
        >>> async def main():
        ...     async with DNSolve() as resolver:
        ...         response = await resolver.lookup("example.com", "MX")
        ...         return response.answer.mx
    """

    def __init__(
        self,
        transport: Optional[Transport] = None,
        *,
        config: Optional[ResolverConfig] = None,
        cache: Optional[ResponseCache] = None,
        stats: Optional[StatisticsRecorder] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ) -> None:
        self.config = config or ResolverConfig()
        self._owns_transport = transport is None
        if transport is None:
            from .transports.doh import DoHJsonTransport

            transport = DoHJsonTransport()
        self._transport = transport

        if cache is None and self.config.enable_cache:
            cache = ResponseCache(max_size=self.config.cache_max_size)
        self._cache = cache
        if stats is None and self.config.enable_statistics:
            stats = StatisticsRecorder()
        self._stats = stats

        self._retry = RetryController(
            max_retries=self.config.max_retries,
            base_delay=self.config.retry_delay,
            sleep=sleep,
        )
        self._executor = ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="dnsolve"
        )
        self._lock = threading.Lock()
        self._disposed = False
        self._slots: Optional[asyncio.Semaphore] = None
        self._slots_loop: Optional[asyncio.AbstractEventLoop] = None

    # ------------------------------------------------------------------ state

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def cache(self) -> Optional[ResponseCache]:
        return self._cache

    @property
    def statistics(self) -> Optional[StatisticsRecorder]:
        return self._stats

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def _ensure_active(self) -> None:
        if self._disposed:
            raise DisposedError("resolver has been disposed")

    def _deadline(self, timeout: Optional[float]) -> float:
        if timeout is None:
            return float(self.config.timeout)
        try:
            value = float(timeout)
        except (TypeError, ValueError):
            raise InvalidInputError("timeout must be a number", str(timeout)) from None
        if value <= 0:
            raise InvalidInputError("timeout must be positive", str(timeout))
        return value

    # ---------------------------------------------------------------- queries

    async def lookup(
        self,
        domain: str,
        record_type: RecordTypeLike = RecordType.A,
        *,
        dnssec: bool = False,
        server: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ResolveResponse:
        """
        Brief: Resolve a domain for one record type.

        Inputs:
        - domain: non-empty domain name
        - record_type: RecordType, type name ('mx') or numeric code
        - dnssec: request DNSSEC data
        - server: per-call server/endpoint override
        - timeout: per-attempt deadline in seconds (config.timeout by default)

        Outputs:
        - ResolveResponse with status 0

        Raises:
        - InvalidInputError, DisposedError, QueryTimeoutError, TransportError,
          LookupStatusError, SRVRecordFormatError
        """
        self._ensure_active()
        if not isinstance(domain, str) or not domain.strip():
            raise InvalidInputError("domain must not be empty", domain)
        rtype = parse_record_type(record_type)
        deadline = self._deadline(timeout)
        name = domain.strip()
        if server:
            self._transport.validate_server(server)

        key = QueryFingerprint.build(
            name, rtype, server or self._transport.identity, dnssec
        )
        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug("Cache hit for %s %s", name, rtype.name)
                return cached
            logger.debug("Cache miss for %s %s", name, rtype.name)

        response = await self._query(name, rtype, dnssec, server, deadline)
        # A handle disposed mid-flight must not repopulate its cleared cache.
        if self._cache is not None and not self._disposed:
            self._cache.put(key, response)
        return response

    async def reverse_lookup(
        self,
        address: str,
        *,
        server: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> List[Record]:
        """
        Brief: Resolve PTR records for an IPv4 or IPv6 address.

        Inputs:
        - address: textual IP address
        - server: per-call server/endpoint override
        - timeout: per-attempt deadline in seconds

        Outputs:
        - list of generic PTR answer records (empty when the answer has none)

        Notes:
        - Never consults or populates the cache.
        """
        self._ensure_active()
        if not isinstance(address, str) or not address.strip():
            raise InvalidInputError("address must not be empty", address)
        name = build_reverse_name(address)
        if name is None:
            raise InvalidInputError("malformed IP address", address)
        deadline = self._deadline(timeout)
        if server:
            self._transport.validate_server(server)
        response = await self._query(name, RecordType.PTR, False, server, deadline)
        return response.records

    async def lookup_batch(
        self,
        domains: Iterable[str],
        record_type: RecordTypeLike = RecordType.A,
        *,
        dnssec: bool = False,
        server: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> List[ResolveResponse]:
        """
        Brief: Resolve many domains concurrently.

        Inputs:
        - domains: iterable of domain names
        - record_type, dnssec, server, timeout: as for lookup()

        Outputs:
        - list of ResolveResponse in the same order as domains

        Notes:
        - All member lookups are joined before returning; if any failed, the
          failure of the earliest domain in input order is raised.
        """
        self._ensure_active()
        names = list(domains)
        if not names:
            return []
        results = await asyncio.gather(
            *(
                self.lookup(
                    name, record_type, dnssec=dnssec, server=server, timeout=timeout
                )
                for name in names
            ),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return list(results)

    async def _query(
        self,
        name: str,
        rtype: RecordType,
        dnssec: bool,
        server: Optional[str],
        timeout: float,
    ) -> ResolveResponse:
        """Run the retry path for one query and record its outcome."""
        label = f"{name} {rtype.name}"
        started = time.monotonic()
        try:
            response = await self._retry.execute(
                functools.partial(self._attempt, name, rtype, server, dnssec, timeout),
                label=label,
            )
        except DisposedError:
            raise
        except DNSolveError as exc:
            logger.debug("Lookup for %s failed: %s", label, exc)
            self._record(started, False)
            raise
        self._record(started, True)
        return response

    def _worker_slots(self) -> asyncio.Semaphore:
        """Semaphore bounding in-flight transport calls for the running loop."""
        loop = asyncio.get_running_loop()
        with self._lock:
            if self._slots is None or self._slots_loop is not loop:
                self._slots = asyncio.Semaphore(self.config.max_workers)
                self._slots_loop = loop
            return self._slots

    @staticmethod
    def _release_slot(
        loop: asyncio.AbstractEventLoop, slots: asyncio.Semaphore, _future: Any
    ) -> None:
        # Runs on the worker thread once the transport call has returned.
        try:
            loop.call_soon_threadsafe(slots.release)
        except RuntimeError:
            logger.debug("Event loop closed before worker slot was released")

    async def _attempt(
        self,
        name: str,
        rtype: RecordType,
        server: Optional[str],
        dnssec: bool,
        timeout: float,
    ) -> ResolveResponse:
        """
        One transport round trip raced against the per-attempt deadline.

        The deadline starts once a worker slot is held, so time spent queued
        behind other lookups or behind abandoned attempts does not count. A
        slot is released when the worker thread finishes, not when the
        deadline fires.
        """
        loop = asyncio.get_running_loop()
        slots = self._worker_slots()
        await slots.acquire()
        try:
            self._ensure_active()
            call = functools.partial(
                self._transport.perform_query,
                name,
                code_for(rtype),
                server,
                dnssec,
                timeout,
            )
            try:
                work = self._executor.submit(call)
            except RuntimeError as exc:
                raise DisposedError("resolver has been disposed") from exc
        except BaseException:
            slots.release()
            raise
        work.add_done_callback(functools.partial(self._release_slot, loop, slots))
        try:
            # On timeout the worker keeps its slot until it returns and its
            # late result is discarded.
            doc = await asyncio.wait_for(asyncio.wrap_future(work), timeout)
        except asyncio.TimeoutError as exc:
            raise QueryTimeoutError(f"query for {name} timed out", timeout) from exc
        except DNSolveError:
            raise
        except Exception as exc:
            raise TransportError(f"transport failed for {name}: {exc}") from exc
        return self._decode(doc)

    @staticmethod
    def _decode(doc: Any) -> ResolveResponse:
        if not isinstance(doc, Mapping):
            raise TransportError(
                f"transport returned {type(doc).__name__}, expected a mapping"
            )
        try:
            return ResolveResponse.from_json(doc)
        except SRVRecordFormatError:
            raise
        except (AttributeError, TypeError, ValueError) as exc:
            raise TransportError(f"malformed answer document: {exc}") from exc

    def _record(self, started: float, success: bool) -> None:
        if self._stats is not None:
            self._stats.record_query(time.monotonic() - started, success)

    # -------------------------------------------------------------- lifecycle

    def dispose(self) -> None:
        """
        Release the handle: clear the cache, reject new work, stop the pool.

        Safe to call more than once; in-flight queries are not cancelled.
        """
        with self._lock:
            if self._disposed:
                return
            if self._cache is not None:
                self._cache.clear()
            self._disposed = True
        self._executor.shutdown(wait=False)
        if self._owns_transport:
            self._transport.close()
        logger.debug("Resolver disposed")

    def __enter__(self) -> "DNSolve":
        self._ensure_active()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()

    async def __aenter__(self) -> "DNSolve":
        self._ensure_active()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.dispose()
