from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Tuple, Type

from .exceptions import LookupStatusError, QueryTimeoutError, TransportError
from .response import ResolveResponse

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS: Tuple[Type[BaseException], ...] = (QueryTimeoutError, TransportError)


class RetryController:
    """Bounded retry around a single transport round trip.

    Inputs:
      - max_retries: Number of retries after the first attempt (>= 0).
      - base_delay: Seconds; the delay before retry k is base_delay * k.
      - sleep: Awaitable sleep function (asyncio.sleep by default).

    Outputs:
      - RetryController instance.

    Notes:
      - Timeouts and transport failures are retried until the budget runs out,
        then the last failure is raised.
      - A decoded response with a non-zero status raises LookupStatusError at
        once and is never retried.
      - Any other exception (for example SRVRecordFormatError) propagates
        immediately.
    """

    def __init__(
        self,
        max_retries: int = 0,
        base_delay: float = 0.5,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ) -> None:
        if int(max_retries) < 0:
            raise ValueError("max_retries must be >= 0")
        self.max_retries = int(max_retries)
        self.base_delay = max(0.0, float(base_delay))
        self._sleep = sleep or asyncio.sleep

    def delay_for(self, attempts_so_far: int) -> float:
        """Delay in seconds before the retry that follows attempts_so_far tries."""
        return self.base_delay * attempts_so_far

    async def execute(
        self,
        attempt: Callable[[], Awaitable[ResolveResponse]],
        *,
        label: str = "",
    ) -> ResolveResponse:
        """Brief: Run attempt() until success, a fatal error, or budget exhaustion.

        Inputs:
          - attempt: Coroutine function performing exactly one round trip.
          - label: Optional query description used in log messages.

        Outputs:
          - ResolveResponse with status 0.
        """

        attempts = 0
        while True:
            attempts += 1
            try:
                response = await attempt()
            except RETRYABLE_ERRORS as exc:
                if attempts > self.max_retries:
                    logger.debug(
                        "Giving up on %s after %d attempt(s): %s", label, attempts, exc
                    )
                    raise
                delay = self.delay_for(attempts)
                logger.warning(
                    "Attempt %d for %s failed (%s); retrying in %.3fs",
                    attempts,
                    label,
                    exc,
                    delay,
                )
                if delay > 0:
                    await self._sleep(delay)
                continue

            if response.status != 0:
                raise LookupStatusError(response.status)
            return response
