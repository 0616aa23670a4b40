"""
Thread-safe query statistics for dnsolve.

Counters are updated under a single lock so concurrent lookups (for example
from lookup_batch) never produce torn updates. Derived metrics (average
latency, success rate, latency percentiles) are computed on read and never
stored.
"""

from __future__ import annotations

import json
import math
import threading
import time
from collections import deque
from dataclasses import asdict, dataclass
from typing import Deque, Sequence

DEFAULT_SAMPLE_WINDOW = 1024


def nearest_rank(sorted_ms: Sequence[float], fraction: float) -> float:
    """
    Brief: Nearest-rank percentile of an ascending sequence.

    Inputs:
        sorted_ms: Latency samples in milliseconds, sorted ascending.
        fraction: Percentile as a fraction in (0, 1].

    Outputs:
        The sample at rank ceil(fraction * n), or 0.0 for no samples.

    Example:
        >>> nearest_rank([1.0, 2.0, 3.0, 4.0], 0.5)
        2.0
    """
    if not sorted_ms:
        return 0.0
    rank = max(1, math.ceil(fraction * len(sorted_ms)))
    return float(sorted_ms[min(rank, len(sorted_ms)) - 1])


@dataclass(frozen=True)
class StatsSnapshot:
    """
    Point-in-time copy of the statistics counters.

    Percentiles and max_latency_ms cover the most recent samples only (see
    StatisticsRecorder.sample_window); the counters cover every query.
    """

    created_at: float
    total: int
    succeeded: int
    failed: int
    total_time_ms: float
    average_latency_ms: float
    success_rate: float
    p50_latency_ms: float
    p95_latency_ms: float
    max_latency_ms: float


class StatisticsRecorder:
    """
    Aggregate count, timing and success data across queries.

    Inputs (constructor):
        sample_window: Number of recent latency samples kept for percentiles.

    Outputs:
        StatisticsRecorder instance

    Example:
        >>> stats = StatisticsRecorder()
        >>> stats.record_query(0.010, True)
        >>> stats.record_query(0.030, False)
        >>> stats.average_latency_ms
        20.0
        >>> stats.success_rate
        50.0
    """

    def __init__(self, sample_window: int = DEFAULT_SAMPLE_WINDOW) -> None:
        if int(sample_window) < 1:
            raise ValueError("sample_window must be >= 1")
        self.sample_window = int(sample_window)
        self._lock = threading.Lock()
        self.total = 0
        self.succeeded = 0
        self.failed = 0
        self.total_time_ms = 0.0
        self._recent_ms: Deque[float] = deque(maxlen=self.sample_window)

    def record_query(self, elapsed: float, success: bool) -> None:
        """Record one query outcome.

        Inputs:
            elapsed: Wall-clock duration of the query in seconds.
            success: True when a response was returned.

        Outputs:
            None
        """
        ms = max(0.0, elapsed) * 1000.0
        with self._lock:
            self.total += 1
            if success:
                self.succeeded += 1
            else:
                self.failed += 1
            self.total_time_ms += ms
            self._recent_ms.append(ms)

    def reset(self) -> None:
        """Reset all counters to zero."""
        with self._lock:
            self.total = 0
            self.succeeded = 0
            self.failed = 0
            self.total_time_ms = 0.0
            self._recent_ms.clear()

    @property
    def average_latency_ms(self) -> float:
        """Average query duration in milliseconds (0.0 before any query)."""
        with self._lock:
            return self.total_time_ms / self.total if self.total else 0.0

    @property
    def success_rate(self) -> float:
        """Percentage of successful queries (0.0 before any query)."""
        with self._lock:
            return (self.succeeded / self.total) * 100.0 if self.total else 0.0

    def snapshot(self) -> StatsSnapshot:
        """Return a consistent copy of all counters and derived metrics."""
        with self._lock:
            total = self.total
            succeeded = self.succeeded
            failed = self.failed
            total_time_ms = self.total_time_ms
            recent = sorted(self._recent_ms)
        return StatsSnapshot(
            created_at=time.time(),
            total=total,
            succeeded=succeeded,
            failed=failed,
            total_time_ms=round(total_time_ms, 3),
            average_latency_ms=total_time_ms / total if total else 0.0,
            success_rate=(succeeded / total) * 100.0 if total else 0.0,
            p50_latency_ms=round(nearest_rank(recent, 0.50), 3),
            p95_latency_ms=round(nearest_rank(recent, 0.95), 3),
            max_latency_ms=round(recent[-1], 3) if recent else 0.0,
        )

    def __repr__(self) -> str:
        snap = self.snapshot()
        return (
            f"StatisticsRecorder(total={snap.total}, succeeded={snap.succeeded}, "
            f"failed={snap.failed}, avg={snap.average_latency_ms:.2f}ms, "
            f"success_rate={snap.success_rate:.2f}%)"
        )


def format_snapshot_json(snapshot: StatsSnapshot) -> str:
    """Serialize a StatsSnapshot to a single-line JSON string for logging."""
    return json.dumps(asdict(snapshot), sort_keys=True)
