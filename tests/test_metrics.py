"""
Unit tests for metrics module.

Tests cover:
- Counter increment (single-threaded and multi-threaded)
- Skip reason tracking
- Histogram window and statistics
- Snapshot and summary output
"""

import threading
import time

import pytest

from arloc_core.metrics import MetricsCollector, get_metrics, reset_metrics


class TestMetricsCollectorBasic:
    """Tests for basic metrics collector functionality."""

    def test_initialization(self):
        """Summary counters start at zero; unknown counters read as zero."""
        collector = MetricsCollector()
        snapshot = collector.snapshot()

        assert snapshot.counters['fixes_in'] == 0
        assert snapshot.counters['ticks'] == 0
        assert collector.get_counter('unknown_counter') == 0
        assert all(snapshot.drop_reasons[reason] == 0 for reason in collector.DROP_REASONS)

    def test_increment_counter(self):
        collector = MetricsCollector()

        collector.increment('estimates_added')
        assert collector.get_counter('estimates_added') == 1

        collector.increment('estimates_added', 5)
        assert collector.get_counter('estimates_added') == 6

    def test_increment_drop_with_valid_reason(self):
        collector = MetricsCollector()

        collector.increment_drop('no_scene_position')

        assert collector.get_counter('operations_skipped') == 1
        assert collector.get_drop_count('no_scene_position') == 1

    def test_increment_drop_unknown_reason(self, caplog):
        """Unknown reasons are logged but still counted."""
        collector = MetricsCollector()

        collector.increment_drop('mystery')

        assert 'mystery' in caplog.text
        assert collector.get_drop_count('mystery') == 1
        assert collector.get_counter('operations_skipped') == 1

    def test_total_dropped(self):
        collector = MetricsCollector()

        collector.increment_drop('no_current_location', 3)
        collector.increment_drop('queue_full', 5)
        collector.increment_drop('invalid_heading', 2)

        assert collector.snapshot().total_dropped() == 10


class TestHistograms:
    """Tests for histogram functionality."""

    def test_record_histogram(self):
        collector = MetricsCollector()

        collector.record_histogram('tick_duration_ms', 1.23)
        collector.record_histogram('tick_duration_ms', 2.45)
        collector.record_histogram('tick_duration_ms', 1.80)

        stats = collector.get_histogram_stats('tick_duration_ms')

        assert stats['count'] == 3
        assert abs(stats['mean'] - 1.826) < 0.01
        assert stats['p50'] == pytest.approx(1.80)
        assert stats['max'] == 2.45

    def test_histogram_empty(self):
        assert MetricsCollector().get_histogram_stats('nonexistent') is None

    def test_histogram_percentiles(self):
        collector = MetricsCollector()
        for i in range(101):
            collector.record_histogram('node_distance_m', float(i))

        stats = collector.get_histogram_stats('node_distance_m')

        assert stats['p50'] == pytest.approx(50.0)
        assert stats['p95'] == pytest.approx(95.0)

    def test_histogram_keeps_recent_window(self):
        collector = MetricsCollector(histogram_window=100)
        for i in range(1000):
            collector.record_histogram('test', float(i))

        samples = collector.snapshot().histograms['test']
        assert len(samples) == 100
        assert samples[0] == 900.0
        assert samples[-1] == 999.0


class TestSnapshot:
    """Tests for snapshots."""

    def test_snapshot_creates_copy(self):
        collector = MetricsCollector()

        collector.increment('fixes_in', 10)
        snapshot1 = collector.snapshot()
        collector.increment('fixes_in', 5)
        snapshot2 = collector.snapshot()

        assert snapshot1.counters['fixes_in'] == 10
        assert snapshot2.counters['fixes_in'] == 15


class TestThreadSafety:
    """Tests for thread-safe operations."""

    def test_concurrent_increment(self):
        collector = MetricsCollector()
        num_threads = 10
        increments_per_thread = 1000

        def worker():
            for _ in range(increments_per_thread):
                collector.increment('fixes_in')

        threads = [threading.Thread(target=worker) for _ in range(num_threads)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert collector.get_counter('fixes_in') == num_threads * increments_per_thread

    def test_concurrent_drop_reasons(self):
        collector = MetricsCollector()
        num_threads = 5
        increments_per_thread = 200

        def worker(reason: str):
            for _ in range(increments_per_thread):
                collector.increment_drop(reason)

        threads = [
            threading.Thread(target=worker, args=(reason,))
            for reason in ['no_scene_position', 'queue_full']
            for _ in range(num_threads)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        expected = num_threads * increments_per_thread
        assert collector.get_drop_count('no_scene_position') == expected
        assert collector.get_drop_count('queue_full') == expected


class TestGlobalSingleton:
    """Tests for global metrics singleton."""

    def test_get_metrics_returns_same_instance(self):
        assert get_metrics() is get_metrics()

    def test_reset_metrics_creates_new_instance(self):
        get_metrics().increment('ticks', 100)
        reset_metrics()
        assert get_metrics().get_counter('ticks') == 0


class TestUptimeAndSummary:
    """Tests for uptime and print_summary."""

    def test_uptime_increases(self):
        collector = MetricsCollector()
        uptime1 = collector.get_uptime()
        time.sleep(0.05)
        assert collector.get_uptime() > uptime1

    def test_print_summary(self, capsys):
        collector = MetricsCollector()
        collector.increment('fixes_in', 100)
        collector.increment_drop('no_current_location', 5)
        collector.record_histogram('tick_duration_ms', 1.23)

        collector.print_summary()

        out = capsys.readouterr().out
        assert 'ENGINE METRICS' in out
        assert 'fixes_in=100' in out
        assert 'no_current_location: 5' in out
        assert 'tick_duration_ms' in out

    def test_print_summary_omits_skips_when_none(self, capsys):
        MetricsCollector().print_summary()
        assert 'Skipped' not in capsys.readouterr().out
