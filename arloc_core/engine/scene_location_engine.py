"""
Scene Location Engine.

Reconciles GPS fixes with the scene tracking frame and keeps marker nodes
anchored to their geodetic locations as the viewer moves.

Each tick:
1. Drain pending location readings into the estimate store
2. Evict estimates that drifted beyond the scene limit
3. Confirm unconfirmed nodes that are now far from the viewer
4. Recompute position and scale of continually updated nodes

Distance policy:
- Confirmed nodes beyond the scene limit are pulled in to the limit and
  scaled down by the same factor, so they stay visible in the right direction.
- Within the limit, confirmed nodes sit at their true offset.
- Unconfirmed nodes are tracked visually and never moved by the engine.

Concurrency: every public mutator holds one re-entrant lock, and sensor
callbacks only touch the LocationFeed queue, which is drained under that lock.
"""

import logging
import threading
import time
from typing import List, Optional, Tuple

from arloc_core.proto.geo_fix import GeoFix, LocalPosition
from arloc_core.proto.events import (
    EngineEvent,
    EventListener,
    EstimateAdded,
    EstimateRemoved,
    NodeConfirmed,
    NodeUpdated,
    RootNodeEstablished,
)
from arloc_core.localization.geodetic import (
    geodetic_distance,
    ground_distance,
    radius_contains,
    translation,
    translation_to_local_offset,
)
from arloc_core.localization.scene_estimate import LocationEstimate, LocationEstimateStore
from arloc_core.domain.location_node import MarkerNode
from arloc_core.domain.node_registry import MarkerNodeRegistry
from arloc_core.io.location_feed import LocationFeed
from arloc_core.io.scene import SceneCollaborator, WorldAlignment
from arloc_core.metrics import get_metrics
from .config import EngineConfig
from .ticker import Ticker

logger = logging.getLogger(__name__)


class SceneLocationEngine:
    """
    Geospatial-to-scene reconciliation engine.

    Usage:
        engine = SceneLocationEngine(scene, feed, EngineConfig())
        engine.add_listener(print)
        engine.run()

        # per rendered frame
        engine.on_render_tick()

        engine.add_node_with_confirmed_location(MarkerNode(location=fix, tag="cafe"))
        ...
        engine.pause()
    """

    # Content scale per meter of distance, so markers keep a readable size
    DISTANCE_SCALE_FACTOR = 0.181

    # Beyond this distance content is shrunk further for perspective
    FAR_DISTANCE_M = 3000.0
    FAR_SCALE_REDUCTION = 0.75

    # Pivot offset per unit of content scale (content rests on the ground)
    PIVOT_HEIGHT_FACTOR = -1.1

    HEADING_STEP_DEG = 1.0

    def __init__(
        self,
        scene: SceneCollaborator,
        location_feed: LocationFeed,
        config: Optional[EngineConfig] = None,
    ):
        """
        Initialize engine.

        Args:
            scene: Scene collaborator (pose source and node sink)
            location_feed: Location source feed; injected, not owned
            config: Engine configuration (uses defaults if None)
        """
        self.scene = scene
        self.feed = location_feed
        self.config = config or EngineConfig()
        self.metrics = get_metrics()

        self.store = LocationEstimateStore(scene_limit_m=self.config.scene_limit_m)
        self.registry = MarkerNodeRegistry()

        self._lock = threading.RLock()
        self._listeners: List[EventListener] = []
        self._root = None
        self._did_fetch_initial_location = False
        self._ticker: Optional[Ticker] = None

        logger.info(f"SceneLocationEngine initialized ({self.config.estimate_method.value})")

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: EventListener):
        self._listeners.append(listener)

    def remove_listener(self, listener: EventListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, events: List[EngineEvent], event: EngineEvent):
        events.append(event)
        for listener in list(self._listeners):
            listener(event)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    @property
    def root_node(self):
        return self._root

    @property
    def is_running(self) -> bool:
        return self._ticker is not None and self._ticker.is_running

    def run(self):
        """Configure tracking and start the periodic reconciliation tick."""
        if self.config.orient_to_true_north:
            alignment = WorldAlignment.GRAVITY_AND_HEADING
        else:
            alignment = WorldAlignment.GRAVITY
        self.scene.configure(alignment)

        if self._ticker is not None:
            self._ticker.stop()
        self._ticker = Ticker(self.config.update_interval_s, self.update_location_data)
        self._ticker.start()

    def pause(self):
        """
        Stop ticking and pause tracking.

        Pending location readings are discarded, not kept for later.
        """
        if self._ticker is not None:
            self._ticker.stop()
            self._ticker = None

        with self._lock:
            self.scene.pause()
            discarded = self.feed.discard_pending()

        if discarded:
            logger.info(f"Discarded {discarded} pending location reading(s)")

    # ------------------------------------------------------------------
    # Scene location estimates
    # ------------------------------------------------------------------

    def current_scene_position(self) -> Optional[LocalPosition]:
        return self.scene.viewer_position()

    def current_euler_angles(self) -> Optional[Tuple[float, float, float]]:
        return self.scene.viewer_orientation()

    def best_location_estimate(self) -> Optional[LocationEstimate]:
        return self.store.best_estimate()

    def current_location(self) -> Optional[GeoFix]:
        """
        Viewer's current location.

        GPS_ONLY: latest raw fix. BEST_ESTIMATE: best estimate translated to
        the viewer's scene position.

        Returns:
            GeoFix or None if unavailable
        """
        if self.config.gps_only:
            return self.feed.current_location

        best = self.best_location_estimate()
        position = self.current_scene_position()
        if best is None or position is None:
            return None

        return self._project_estimate(best, position)

    def _project_estimate(self, estimate: LocationEstimate, position: LocalPosition) -> Optional[GeoFix]:
        """
        Location of a scene position according to an estimate.

        Returns:
            GeoFix, or None if the projection leaves the valid coordinate
            range (the flat-earth model does not wrap at the antimeridian)
        """
        try:
            return estimate.translated_location(position)
        except ValueError as e:
            logger.debug(f"Projection out of coordinate range: {e}")
            self.metrics.increment_drop('projection_out_of_range')
            return None

    def add_scene_location_estimate(self, location: GeoFix) -> Optional[LocationEstimate]:
        """Record a fix against the viewer's current scene position."""
        with self._lock:
            return self._add_estimate(location, [])

    def _add_estimate(self, location: GeoFix, events: List[EngineEvent]) -> Optional[LocationEstimate]:
        estimate = self.store.add_estimate(location, self.current_scene_position())
        if estimate is not None:
            self._emit(events, EstimateAdded(position=estimate.position, location=estimate.location))
        return estimate

    def _drain_feed(self, events: List[EngineEvent]):
        for item in self.feed.drain():
            if isinstance(item, GeoFix):
                if self._add_estimate(item, events) is not None:
                    self._did_fetch_initial_location = True
            else:
                logger.debug(f"Heading {item.heading:.1f}deg (accuracy {item.accuracy:.1f}deg)")

    def _remove_old_location_estimates(self, events: List[EngineEvent]):
        position = self.current_scene_position()
        if position is None:
            return

        for estimate in self.store.evict_stale(position):
            self._emit(events, EstimateRemoved(position=estimate.position, location=estimate.location))

    # ------------------------------------------------------------------
    # Marker nodes
    # ------------------------------------------------------------------

    @property
    def location_nodes(self) -> Tuple[MarkerNode, ...]:
        return self.registry.nodes()

    def add_node_for_current_position(self, node: MarkerNode) -> bool:
        """
        Place a node where the viewer is standing.

        The node is confirmed straight away only in GPS_ONLY mode; otherwise
        its location keeps being refined until it is far enough to confirm.

        Returns:
            False (and nothing changes) if the viewer position or the
            current location is unavailable

        Raises:
            ValueError: If the node already has a confirmed location
        """
        with self._lock:
            position = self.current_scene_position()
            if position is None:
                logger.debug(f"Cannot place {node.tag!r}: no scene position")
                self.metrics.increment_drop('no_scene_position')
                return False

            location = self.current_location()
            if location is None:
                logger.debug(f"Cannot place {node.tag!r}: no current location")
                self.metrics.increment_drop('no_current_location')
                return False

            node.place(location, position, confirmed=self.config.gps_only)
            self._attach(node)
            return True

    def add_node_with_confirmed_location(self, node: MarkerNode) -> bool:
        """
        Place a node with a known, confirmed location.

        Position and scale are computed immediately, without animation.

        Returns:
            False if the node has no location or is not confirmed
        """
        with self._lock:
            if node.location is None or not node.confirmed:
                logger.warning(f"Node {node.tag!r} needs a confirmed location for confirmed placement")
                self.metrics.increment_drop('unconfirmed_placement')
                return False

            events: List[EngineEvent] = []
            self._update_node(node, events, initial_setup=True, animated=False)
            self._attach(node)
            return True

    def _attach(self, node: MarkerNode):
        if self.registry.add(node):
            self.metrics.increment('nodes_placed')
            if self._root is not None:
                self.scene.add_node(node)
            logger.info(f"Node {node.tag!r} placed (confirmed={node.confirmed})")

    def remove_node(self, node: MarkerNode) -> bool:
        """Detach a node from the scene and forget it; no-op if unknown."""
        with self._lock:
            removed = self.registry.remove(node)
            if removed:
                self.scene.remove_node(node)
                self.metrics.increment('nodes_removed')
            return removed

    def find_nodes(self, tag: str) -> List[MarkerNode]:
        return self.registry.find_by_tag(tag)

    def contains_node_with_tag(self, tag: str) -> bool:
        return self.registry.contains_tag(tag)

    def location_of_node(self, node: MarkerNode) -> Optional[GeoFix]:
        """
        Best known location of a node.

        Confirmed nodes (and every node in GPS_ONLY mode) report their stored
        location. Otherwise the node is re-projected through the best estimate
        when that estimate is more accurate than what the node has and the
        projection stays within the coordinate range.

        Returns:
            GeoFix, or None if nothing is known
        """
        if node.confirmed or self.config.gps_only:
            return node.location

        best = self.best_location_estimate()
        if best is not None and (
            node.location is None
            or best.location.horizontal_accuracy < node.location.horizontal_accuracy
        ):
            projected = self._project_estimate(best, node.position)
            if projected is not None:
                return projected

        return node.location

    def _confirm_location_of_distant_nodes(self, events: List[EngineEvent]):
        position = self.current_scene_position()
        if position is None:
            return

        for node in self.registry.unconfirmed():
            if radius_contains(position, node.position, self.config.scene_limit_m):
                continue
            self._confirm_location_of_node(node, events)

    def _confirm_location_of_node(self, node: MarkerNode, events: List[EngineEvent]):
        location = self.location_of_node(node)
        if location is None:
            logger.warning(f"Node {node.tag!r} out of range but has no location to confirm")
            self.metrics.increment_drop('no_node_location')
            return

        node.confirm(location)
        self.metrics.increment('nodes_confirmed')
        self._emit(events, NodeConfirmed(node=node))

    def update_position_and_scale_of_node(
        self,
        node: MarkerNode,
        initial_setup: bool = False,
        animated: bool = False,
        duration: Optional[float] = None,
    ) -> bool:
        """
        Recompute a node's scene position, scale and pivot.

        Args:
            node: Node to update
            initial_setup: First placement; confirmed nodes are positioned
                even when they would otherwise stay put
            animated: Interpolate the change
            duration: Animation duration (defaults to the configured one)

        Returns:
            False if there is not enough information this turn
        """
        with self._lock:
            return self._update_node(node, [], initial_setup, animated, duration)

    def _update_node(
        self,
        node: MarkerNode,
        events: List[EngineEvent],
        initial_setup: bool = False,
        animated: bool = False,
        duration: Optional[float] = None,
    ) -> bool:
        current_position = self.current_scene_position()
        current_location = self.current_location()
        if current_position is None or current_location is None:
            self.metrics.increment_drop('no_scene_position' if current_position is None else 'no_current_location')
            return False

        node_location = self.location_of_node(node)
        if node_location is None:
            self.metrics.increment_drop('no_node_location')
            return False

        if animated:
            animation = self.config.animation_duration_s if duration is None else duration
        else:
            animation = 0.0

        limit = self.config.scene_limit_m
        offset = translation(current_location.point, node_location.point)
        distance = geodetic_distance(current_location.point, node_location.point)

        with self.scene.transaction(animation):
            if node.confirmed and (
                distance > limit
                or node.continually_adjust_position_when_within_range
                or initial_setup
            ):
                if distance > limit:
                    # Too far away: bring it in to the limit and shrink it
                    scale = limit / distance
                    adjusted_distance = distance * scale
                    node.position = current_position + translation_to_local_offset(offset.scaled(scale))
                    node.scale = scale
                else:
                    adjusted_distance = distance
                    node.position = current_position + translation_to_local_offset(offset)
                    node.scale = 1.0
            else:
                # Location not settled yet; the node stays where it was placed
                adjusted_distance = ground_distance(current_position, node.position)
                node.scale = 1.0

            if node.scale_relative_to_distance:
                render_scale = node.scale
            else:
                render_scale = adjusted_distance * self.DISTANCE_SCALE_FACTOR
                if distance > self.FAR_DISTANCE_M:
                    render_scale *= self.FAR_SCALE_REDUCTION

            node.render_scale = render_scale
            node.pivot = LocalPosition(0.0, self.PIVOT_HEIGHT_FACTOR * render_scale, 0.0)
            self.scene.apply_node(node)

        self.metrics.increment('node_updates')
        self.metrics.record_histogram('node_distance_m', distance)
        self._emit(events, NodeUpdated(node=node))
        return True

    def _update_position_and_scale_of_nodes(self, events: List[EngineEvent]):
        for node in self.registry.continually_updated():
            self._update_node(node, events, animated=True)

    # ------------------------------------------------------------------
    # Ticks
    # ------------------------------------------------------------------

    def update_location_data(self) -> List[EngineEvent]:
        """
        One reconciliation tick.

        Returns:
            Events produced during the tick, in order
        """
        t_start = time.perf_counter()
        events: List[EngineEvent] = []

        with self._lock:
            self._drain_feed(events)
            self._remove_old_location_estimates(events)
            self._confirm_location_of_distant_nodes(events)
            self._update_position_and_scale_of_nodes(events)

            best = self.best_location_estimate()
            if best is not None:
                self.metrics.record_histogram('best_accuracy_m', best.location.horizontal_accuracy)

        self.metrics.increment('ticks')
        self.metrics.record_histogram('tick_duration_ms', (time.perf_counter() - t_start) * 1000.0)
        return events

    def on_render_tick(self) -> List[EngineEvent]:
        """
        Per-frame hook from the renderer.

        Sets up the root node on the first frame and captures the first
        estimate as soon as both a scene position and a raw fix exist.
        """
        events: List[EngineEvent] = []

        with self._lock:
            if self._root is None:
                self._root = self.scene.setup_root_node(show_axes=self.config.show_axes)
                for node in self.registry:
                    self.scene.add_node(node)
                logger.info("Root scene node established")
                self._emit(events, RootNodeEstablished(root=self._root))

            self._drain_feed(events)

            if not self._did_fetch_initial_location:
                location = self.feed.current_location
                if location is not None and self.scene.has_current_frame():
                    self._did_fetch_initial_location = True
                    self._add_estimate(location, events)

        return events

    # ------------------------------------------------------------------
    # Heading correction
    # ------------------------------------------------------------------

    def move_scene_heading_clockwise(self):
        self._rotate_scene(-self.HEADING_STEP_DEG)

    def move_scene_heading_anticlockwise(self):
        self._rotate_scene(self.HEADING_STEP_DEG)

    def reset_scene_heading(self):
        with self._lock:
            if self._root is not None:
                self.scene.reset_scene_heading()

    def _rotate_scene(self, degrees: float):
        with self._lock:
            if self._root is not None:
                self.scene.rotate_scene(degrees)
