"""
Scene location estimates.

A LocationEstimate pairs a GPS fix with the viewer's scene position at the
moment the fix arrived. The store keeps every estimate that is still close to
the viewer on the ground plane; which one is "best" depends on where the
viewer is, so nothing is collapsed to a single value.

Eviction is distance based, not time based: the tracking frame drifts as the
viewer moves away, so an old estimate captured nearby stays useful while a
recent one captured far away does not.
"""

import logging
import threading
from dataclasses import dataclass
from typing import List, Optional, Tuple

from arloc_core.proto.geo_fix import GeoFix, LocalPosition, Translation
from arloc_core.localization.geodetic import (
    local_translation,
    radius_contains,
    translated_fix,
)
from arloc_core.metrics import get_metrics

logger = logging.getLogger(__name__)


SCENE_LIMIT_M = 100.0


@dataclass(frozen=True)
class LocationEstimate:
    """
    Viewer location at a known scene position.

    Attributes:
        location: GPS fix received while the viewer was at position
        position: Viewer scene position when the fix arrived
    """

    location: GeoFix
    position: LocalPosition

    def location_translation(self, position: LocalPosition) -> Translation:
        """Geodetic-axis offset from this estimate's position to another scene position."""
        return local_translation(self.position, position)

    def translated_location(self, position: LocalPosition) -> GeoFix:
        """
        Location of an arbitrary scene position according to this estimate.

        The result keeps the accuracy and timestamp of the estimate's fix.
        """
        return translated_fix(self.location, self.location_translation(position))

    def sort_key(self) -> Tuple[float, float]:
        """Tighter accuracy first, then most recent."""
        return (self.location.horizontal_accuracy, -self.location.timestamp)


class LocationEstimateStore:
    """
    Rolling set of location estimates.

    Usage:
        store = LocationEstimateStore()
        store.add_estimate(fix, scene.viewer_position())
        removed = store.evict_stale(scene.viewer_position())
        best = store.best_estimate()
    """

    def __init__(self, scene_limit_m: float = SCENE_LIMIT_M):
        """
        Initialize estimate store.

        Args:
            scene_limit_m: Ground-plane radius around the viewer beyond which
                estimates are evicted
        """
        self.scene_limit_m = scene_limit_m
        self._lock = threading.Lock()
        self._estimates: Tuple[LocationEstimate, ...] = ()
        self.metrics = get_metrics()

    def __len__(self) -> int:
        return len(self._estimates)

    def snapshot(self) -> Tuple[LocationEstimate, ...]:
        """Immutable view of the current estimates, in insertion order."""
        return self._estimates

    def add_estimate(
        self,
        location: GeoFix,
        current_position: Optional[LocalPosition],
    ) -> Optional[LocationEstimate]:
        """
        Record a fix against the viewer's current scene position.

        Args:
            location: GPS fix
            current_position: Viewer scene position, None if tracking is not established

        Returns:
            The new estimate, or None if there is no scene position yet
        """
        if current_position is None:
            logger.debug("No scene position yet, fix not recorded as estimate")
            self.metrics.increment_drop('no_scene_position')
            return None

        estimate = LocationEstimate(location=location, position=current_position)
        with self._lock:
            self._estimates = self._estimates + (estimate,)

        self.metrics.increment('estimates_added')
        self.metrics.record_histogram('estimate_accuracy_m', location.horizontal_accuracy)
        logger.debug(f"Estimate added at ({current_position.x:.2f}, {current_position.y:.2f}, "
                     f"{current_position.z:.2f}), accuracy={location.horizontal_accuracy:.1f}m")
        return estimate

    def evict_stale(self, current_position: LocalPosition) -> List[LocationEstimate]:
        """
        Drop estimates outside the scene limit of the viewer.

        Args:
            current_position: Viewer scene position

        Returns:
            Removed estimates, in insertion order
        """
        with self._lock:
            kept = []
            removed = []
            for estimate in self._estimates:
                if radius_contains(current_position, estimate.position, self.scene_limit_m):
                    kept.append(estimate)
                else:
                    removed.append(estimate)
            self._estimates = tuple(kept)

        if removed:
            self.metrics.increment('estimates_evicted', len(removed))
            logger.debug(f"Evicted {len(removed)} estimate(s), {len(kept)} remaining")
        return removed

    def best_estimate(self) -> Optional[LocationEstimate]:
        """
        Most trustworthy estimate: lowest horizontal accuracy, newest on ties.

        Returns:
            LocationEstimate or None if the store is empty
        """
        estimates = self._estimates
        if not estimates:
            return None
        return min(estimates, key=LocationEstimate.sort_key)

    def clear(self):
        with self._lock:
            self._estimates = ()
