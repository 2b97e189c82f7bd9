"""
Engine counters, skip reasons and histograms.

Every skipped operation is counted under a reason code; nothing is dropped
silently.
"""

import logging
import threading
import time
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Optional

import numpy as np

logger = logging.getLogger(__name__)


HISTOGRAM_WINDOW = 5000


@dataclass
class CounterSnapshot:
    """Copy of the collector state at one point in time."""

    timestamp: float
    counters: Dict[str, int]
    drop_reasons: Dict[str, int]
    histograms: Dict[str, List[float]]

    def total_dropped(self) -> int:
        return sum(self.drop_reasons.values())


class MetricsCollector:
    """
    Thread-safe metrics for the reconciliation engine.

    Usage:
        collector = MetricsCollector()
        collector.increment('fixes_in')
        collector.increment_drop('no_scene_position')
        collector.record_histogram('tick_duration_ms', 0.42)
    """

    DROP_REASONS = {
        'no_scene_position': 'Tracking frame not established yet',
        'no_current_location': 'No derived location (empty store or no raw fix)',
        'no_node_location': 'Marker node has no resolvable location',
        'unconfirmed_placement': 'Confirmed placement without a confirmed location',
        'projection_out_of_range': 'Projected location outside the coordinate range',
        'queue_full': 'Bounded feed queue overflow, oldest event dropped',
        'invalid_heading': 'Heading reading with no usable value',
    }

    # Summary sections: title -> counters shown under it
    SECTIONS = {
        'Sensor input': ('fixes_in', 'headings_in'),
        'Estimate store': ('estimates_added', 'estimates_evicted'),
        'Marker nodes': ('nodes_placed', 'nodes_removed', 'nodes_confirmed', 'node_updates'),
        'Engine': ('ticks',),
    }

    def __init__(self, histogram_window: int = HISTOGRAM_WINDOW):
        """
        Initialize collector.

        Args:
            histogram_window: Most recent samples kept per histogram
        """
        self._lock = threading.Lock()
        self._histogram_window = histogram_window
        self._counters: Dict[str, int] = defaultdict(int)
        self._drop_reasons: Dict[str, int] = {reason: 0 for reason in self.DROP_REASONS}
        self._histograms: Dict[str, Deque[float]] = {}
        self._start_time = time.time()

        for names in self.SECTIONS.values():
            for name in names:
                self._counters[name] = 0

    def increment(self, counter_name: str, value: int = 1):
        with self._lock:
            self._counters[counter_name] += value

    def increment_drop(self, reason: str, value: int = 1):
        """
        Count a skipped operation under a reason code.

        Unknown codes are still counted, with a warning.
        """
        if reason not in self.DROP_REASONS:
            logger.warning(f"Unknown drop reason '{reason}'")

        with self._lock:
            self._drop_reasons[reason] = self._drop_reasons.get(reason, 0) + value
            self._counters['operations_skipped'] += value

    def get_counter(self, counter_name: str) -> int:
        with self._lock:
            return self._counters.get(counter_name, 0)

    def get_drop_count(self, reason: str) -> int:
        with self._lock:
            return self._drop_reasons.get(reason, 0)

    def record_histogram(self, histogram_name: str, value: float):
        """Record a sample; only the most recent window is kept."""
        with self._lock:
            samples = self._histograms.get(histogram_name)
            if samples is None:
                samples = deque(maxlen=self._histogram_window)
                self._histograms[histogram_name] = samples
            samples.append(value)

    def get_histogram_stats(self, histogram_name: str) -> Optional[Dict[str, float]]:
        """
        Summary of a histogram.

        Returns:
            Dict with count, mean, p50, p95, max, or None if empty
        """
        with self._lock:
            samples = np.asarray(self._histograms.get(histogram_name, ()), dtype=float)

        if samples.size == 0:
            return None

        p50, p95 = np.percentile(samples, [50, 95])
        return {
            'count': int(samples.size),
            'mean': float(samples.mean()),
            'p50': float(p50),
            'p95': float(p95),
            'max': float(samples.max()),
        }

    def snapshot(self) -> CounterSnapshot:
        with self._lock:
            return CounterSnapshot(
                timestamp=time.time(),
                counters=dict(self._counters),
                drop_reasons=dict(self._drop_reasons),
                histograms={k: list(v) for k, v in self._histograms.items()},
            )

    def get_uptime(self) -> float:
        return time.time() - self._start_time

    def print_summary(self):
        """Print counters grouped by engine stage, then skips and histograms."""
        snapshot = self.snapshot()

        print(f"\nENGINE METRICS  (uptime {self.get_uptime():.1f}s)")
        for title, names in self.SECTIONS.items():
            values = ', '.join(f"{name}={snapshot.counters.get(name, 0)}" for name in names)
            print(f"  {title:16s} {values}")

        skipped = {reason: count for reason, count in snapshot.drop_reasons.items() if count}
        if skipped:
            print(f"  {'Skipped':16s} total={snapshot.total_dropped()}")
            for reason, count in sorted(skipped.items(), key=lambda item: -item[1]):
                print(f"    - {reason}: {count}")

        for name in sorted(snapshot.histograms):
            stats = self.get_histogram_stats(name)
            if stats:
                print(f"  {name:24s} n={stats['count']:<6d} mean={stats['mean']:.3f} "
                      f"p95={stats['p95']:.3f} max={stats['max']:.3f}")
