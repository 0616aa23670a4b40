from __future__ import annotations

from typing import Awaitable, Callable, Optional

from .config.config_schema import ResolverConfig
from .resolver import DNSolve
from .transports.base import Transport


class DNSolveBuilder:
    """
    Fluent builder for DNSolve handles.

    Example:
        >>> resolver = (
        ...     DNSolveBuilder()
        ...     .with_cache(max_size=50)
        ...     .with_statistics()
        ...     .with_retries(2)
        ...     .with_retry_delay(0.1)
        ...     .build()
        ... )
        >>> resolver.cache.max_size
        50
        >>> resolver.dispose()
    """

    def __init__(self) -> None:
        self._transport: Optional[Transport] = None
        self._sleep: Optional[Callable[[float], Awaitable[None]]] = None
        self._settings: dict = {}

    def with_transport(self, transport: Transport) -> "DNSolveBuilder":
        self._transport = transport
        return self

    def with_cache(self, enable: bool = True, max_size: int = 100) -> "DNSolveBuilder":
        self._settings["enable_cache"] = enable
        self._settings["cache_max_size"] = max_size
        return self

    def with_statistics(self, enable: bool = True) -> "DNSolveBuilder":
        self._settings["enable_statistics"] = enable
        return self

    def with_retries(self, max_retries: int) -> "DNSolveBuilder":
        self._settings["max_retries"] = max_retries
        return self

    def with_retry_delay(self, seconds: float) -> "DNSolveBuilder":
        self._settings["retry_delay"] = seconds
        return self

    def with_timeout(self, seconds: float) -> "DNSolveBuilder":
        self._settings["timeout"] = seconds
        return self

    def with_sleep(
        self, sleep: Callable[[float], Awaitable[None]]
    ) -> "DNSolveBuilder":
        """Override the backoff sleep (used by tests to avoid real delays)."""
        self._sleep = sleep
        return self

    def build(self) -> DNSolve:
        """Validate the collected settings and build the handle.

        Raises pydantic.ValidationError for out-of-range settings.
        """
        config = ResolverConfig(**self._settings)
        return DNSolve(self._transport, config=config, sleep=self._sleep)
