"""
Brief: Tests for dnsolve.stats StatisticsRecorder and percentile helpers.

Inputs:
  - None

Outputs:
  - None
"""

import json
import threading

import pytest

from dnsolve.stats import StatisticsRecorder, format_snapshot_json, nearest_rank


def test_empty_recorder_reports_zeroes():
    stats = StatisticsRecorder()
    assert stats.total == 0
    assert stats.average_latency_ms == 0.0
    assert stats.success_rate == 0.0
    snap = stats.snapshot()
    assert snap.p50_latency_ms == 0.0
    assert snap.max_latency_ms == 0.0


def test_average_and_success_rate():
    """
    Brief: Average latency is total_time/total and success rate is a percentage.

    Inputs:
      - None

    Outputs:
      - None: Asserts derived metrics after four queries
    """
    stats = StatisticsRecorder()
    stats.record_query(0.010, True)
    stats.record_query(0.020, True)
    stats.record_query(0.030, True)
    stats.record_query(0.040, False)

    assert stats.total == 4
    assert stats.succeeded == 3
    assert stats.failed == 1
    assert stats.average_latency_ms == pytest.approx(25.0)
    assert stats.success_rate == pytest.approx(75.0)


def test_reset_zeroes_counters():
    stats = StatisticsRecorder()
    stats.record_query(0.5, False)
    stats.reset()
    assert (stats.total, stats.succeeded, stats.failed) == (0, 0, 0)
    assert stats.total_time_ms == 0.0


def test_snapshot_is_consistent_and_serializable():
    stats = StatisticsRecorder()
    stats.record_query(0.002, True)
    snap = stats.snapshot()
    assert snap.total == snap.succeeded + snap.failed
    doc = json.loads(format_snapshot_json(snap))
    assert doc["total"] == 1
    assert doc["success_rate"] == 100.0
    assert doc["p50_latency_ms"] == pytest.approx(2.0)


def test_repr_mentions_counts():
    stats = StatisticsRecorder()
    stats.record_query(0.001, True)
    assert "total=1" in repr(stats)


def test_concurrent_recording_has_no_torn_updates():
    stats = StatisticsRecorder()

    def worker():
        for i in range(500):
            stats.record_query(0.001, i % 2 == 0)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert stats.total == 4000
    assert stats.succeeded + stats.failed == stats.total
    assert stats.succeeded == 2000


def test_percentiles_are_computed_from_recorded_samples():
    """
    Brief: p50/p95/max come from the recorded latencies by nearest rank.

    Inputs:
      - None

    Outputs:
      - None: Asserts percentile values for 1..100 ms samples
    """
    stats = StatisticsRecorder()
    for ms in range(100, 0, -1):
        stats.record_query(ms / 1000.0, True)
    snap = stats.snapshot()
    assert snap.p50_latency_ms == pytest.approx(50.0)
    assert snap.p95_latency_ms == pytest.approx(95.0)
    assert snap.max_latency_ms == pytest.approx(100.0)


def test_percentiles_cover_recent_window_only():
    stats = StatisticsRecorder(sample_window=3)
    stats.record_query(5.0, False)
    for _ in range(3):
        stats.record_query(0.001, True)
    snap = stats.snapshot()
    assert snap.max_latency_ms == pytest.approx(1.0)
    assert snap.total == 4
    assert snap.average_latency_ms == pytest.approx((5000.0 + 3.0) / 4)


def test_nearest_rank_edges():
    assert nearest_rank([], 0.5) == 0.0
    assert nearest_rank([7.0], 0.99) == 7.0
    assert nearest_rank([1.0, 2.0, 3.0, 4.0], 0.5) == 2.0
    assert nearest_rank([1.0, 2.0, 3.0, 4.0], 1.0) == 4.0


def test_invalid_sample_window_rejected():
    with pytest.raises(ValueError):
        StatisticsRecorder(sample_window=0)
