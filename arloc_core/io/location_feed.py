"""
Location source feed.

Sensor callbacks (GPS fixes, compass headings) arrive on whatever thread the
platform delivers them on. The feed keeps the latest raw values and queues
every reading in a bounded queue; the engine drains the queue on its own
turn, so the estimate store is only ever mutated from one place.
"""

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from typing import List, Optional, Union

from arloc_core.proto.geo_fix import GeoFix
from arloc_core.metrics import get_metrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeadingReading:
    """
    Compass heading.

    Attributes:
        heading: Heading in degrees (true north when accuracy >= 0, else magnetic)
        accuracy: Reported accuracy in degrees (negative means invalid true heading)
        timestamp: Time of the reading (epoch seconds)
    """

    heading: float
    accuracy: float
    timestamp: float = field(default_factory=time.time)


FeedItem = Union[GeoFix, HeadingReading]


class LocationFeed:
    """
    Bounded, thread-safe inbox for location and heading updates.

    Usage:
        feed = LocationFeed()
        feed.on_location_update(fix)          # from the sensor thread
        feed.on_heading_update(87.0, 5.0)
        for item in feed.drain():             # from the engine
            ...
    """

    def __init__(self, queue_size: int = 256):
        """
        Initialize feed.

        Args:
            queue_size: Maximum pending readings; the oldest is dropped on overflow
        """
        self._queue: "queue.Queue[FeedItem]" = queue.Queue(maxsize=queue_size)
        self._put_lock = threading.Lock()
        self._current_location: Optional[GeoFix] = None
        self._heading: Optional[float] = None
        self._heading_accuracy: Optional[float] = None
        self.metrics = get_metrics()

    @property
    def current_location(self) -> Optional[GeoFix]:
        """Latest raw GPS fix."""
        return self._current_location

    @property
    def heading(self) -> Optional[float]:
        return self._heading

    @property
    def heading_accuracy(self) -> Optional[float]:
        return self._heading_accuracy

    def on_location_update(self, fix: GeoFix):
        """Location source callback: a new GPS fix arrived."""
        self.metrics.increment('fixes_in')
        self._current_location = fix
        self._enqueue(fix)
        logger.debug(f"Fix received: ({fix.latitude:.6f}, {fix.longitude:.6f}), "
                     f"accuracy={fix.horizontal_accuracy:.1f}m")

    def on_heading_update(
        self,
        heading: Optional[float],
        accuracy: float,
        magnetic_heading: Optional[float] = None,
    ):
        """
        Location source callback: a new compass heading arrived.

        Args:
            heading: True heading in degrees
            accuracy: Heading accuracy in degrees; negative means the true
                heading is unusable and magnetic_heading is used instead
            magnetic_heading: Magnetic heading in degrees (optional)
        """
        value = heading if accuracy >= 0 else magnetic_heading
        if value is None:
            logger.debug("Heading update without a usable value, ignored")
            self.metrics.increment_drop('invalid_heading')
            return

        self.metrics.increment('headings_in')
        self._heading = value
        self._heading_accuracy = accuracy
        self._enqueue(HeadingReading(heading=value, accuracy=accuracy))

    def _enqueue(self, item: FeedItem):
        with self._put_lock:
            try:
                self._queue.put_nowait(item)
            except queue.Full:
                try:
                    self._queue.get_nowait()
                except queue.Empty:
                    pass
                self._queue.put_nowait(item)
                self.metrics.increment_drop('queue_full')
                logger.warning("Location feed queue full, dropped oldest reading")

    def drain(self) -> List[FeedItem]:
        """Take every pending reading, oldest first."""
        items = []
        while True:
            try:
                items.append(self._queue.get_nowait())
            except queue.Empty:
                return items

    def discard_pending(self) -> int:
        """Drop every pending reading; returns how many were discarded."""
        return len(self.drain())

    def has_pending(self) -> bool:
        return not self._queue.empty()
