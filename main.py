"""
Simulated walk through the AR location engine.

Drives the engine with a noisy GPS feed and a slowly drifting tracking frame,
places a few points of interest plus a pin dropped at the viewer position,
and prints where everything ends up.
"""

import sys
import json
import logging
import argparse
from collections import Counter
from typing import Optional

import numpy as np

import config
from arloc_core.proto import GeoFix, GeoPoint, Translation, NodeConfirmed
from arloc_core.localization import translated_location
from arloc_core.domain import MarkerNode, PointOfInterest, load_points_of_interest
from arloc_core.engine import SceneLocationEngine, EngineConfig
from arloc_core.io import InMemoryScene, LocationFeed
from arloc_core.metrics import get_metrics

logging.basicConfig(
    level=getattr(logging, config.LOGGING_CONFIG["level"]),
    format=config.LOGGING_CONFIG["format"]
)
logger = logging.getLogger(__name__)


class WalkSimulator:
    """Simulated viewer walking east with a phone."""

    def __init__(self, engine_config: EngineConfig, sim_config: dict, seed: Optional[int] = None):
        self.sim = sim_config
        self.rng = np.random.default_rng(seed)

        origin = sim_config["origin"]
        self.origin = GeoPoint(origin["lat"], origin["lon"], origin["alt"])

        self.scene = InMemoryScene()
        self.feed = LocationFeed(queue_size=engine_config.queue_size)
        self.engine = SceneLocationEngine(self.scene, self.feed, engine_config)
        self.event_counts: Counter = Counter()
        self.engine.add_listener(self._on_event)

        self.pin: Optional[MarkerNode] = None
        self.step = 0

    def _on_event(self, event):
        self.event_counts[type(event).__name__] += 1
        if isinstance(event, NodeConfirmed):
            location = event.node.location
            logger.info(f"Confirmed {event.node.tag!r} at ({location.latitude:.6f}, {location.longitude:.6f})")

    def point_from_offset(self, north_m: float, east_m: float, up_m: float = 0.0) -> GeoPoint:
        return translated_location(self.origin, Translation(north_m, east_m, up_m))

    def place_points_of_interest(self, points):
        for poi in points:
            self.engine.add_node_with_confirmed_location(poi.to_node())

    def _gps_fix(self, true_north: float, true_east: float, t: float) -> GeoFix:
        noise = self.rng.normal(0.0, self.sim["gps_noise_std_m"], size=2)
        accuracy = float(self.rng.choice(self.sim["accuracies_m"]))
        point = self.point_from_offset(true_north + noise[0], true_east + noise[1], 0.0)
        return GeoFix(point=point, horizontal_accuracy=accuracy, timestamp=t)

    def run(self, steps: int):
        dt = self.engine.config.update_interval_s
        speed = self.sim["walk_speed_m_s"]
        drift = self.sim["tracking_drift"]

        for _ in range(steps):
            step = self.step
            self.step += 1
            t = step * dt
            east = speed * t
            north = 0.0

            # Tracking frame slowly stretches relative to the real world
            self.scene.move_camera(east * (1.0 + drift), 1.5, -north)
            self.engine.on_render_tick()

            if step % self.sim["fix_every_ticks"] == 0:
                self.feed.on_location_update(self._gps_fix(north, east, t))

            if step == self.sim["drop_pin_at_tick"]:
                pin = MarkerNode(tag="pin")
                if self.engine.add_node_for_current_position(pin):
                    self.pin = pin

            self.engine.update_location_data()

    def report(self):
        print("\n" + "=" * 70)
        print("  MARKERS")
        print("=" * 70)
        for node in self.engine.location_nodes:
            x, y, z = node.position.as_tuple()
            print(f"  {node.tag:10s} confirmed={str(node.confirmed):5s} "
                  f"pos=({x:8.2f}, {y:7.2f}, {z:8.2f}) scale={node.scale:.3f} "
                  f"render={node.render_scale:.3f}")

        print("\nEVENTS:")
        for name, count in sorted(self.event_counts.items()):
            print(f"  {name:30s}: {count:8d}")

        best = self.engine.best_location_estimate()
        if best is not None:
            print(f"\nBest estimate accuracy: {best.location.horizontal_accuracy:.1f} m, "
                  f"estimates kept: {len(self.engine.store)}")

        location = self.engine.current_location()
        if location is not None:
            print(f"Current location: {json.dumps(location.to_dict())}")


def main():
    """Entry point."""
    parser = argparse.ArgumentParser(description='AR location engine walk simulator')
    parser.add_argument('--steps', '-n', type=int, default=None,
                        help='number of ticks to simulate')
    parser.add_argument('--method', '-m', choices=['gps_only', 'best_estimate'], default=None,
                        help='location estimate method')
    parser.add_argument('--poi-file', type=str, default=None,
                        help='JSON file with points of interest')
    parser.add_argument('--seed', type=int, default=None,
                        help='random seed for GPS noise')
    parser.add_argument('--debug', '-d', action='store_true',
                        help='enable debug logging')

    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    engine_values = dict(config.ENGINE_CONFIG)
    if args.method:
        engine_values["estimate_method"] = args.method

    try:
        engine_config = EngineConfig.from_dict(engine_values)
    except ValueError as e:
        logger.error(f"Invalid engine configuration: {e}")
        return 1

    simulator = WalkSimulator(engine_config, config.SIMULATION_CONFIG, seed=args.seed)

    if args.poi_file:
        try:
            points = load_points_of_interest(args.poi_file)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load points of interest: {e}")
            return 1
    else:
        points = []
        for entry in config.SIMULATION_CONFIG["points_of_interest"]:
            point = simulator.point_from_offset(entry["north_m"], entry["east_m"], entry["up_m"])
            points.append(PointOfInterest(entry["title"], point.latitude, point.longitude, point.altitude))

    # Confirmed placement needs a current location, so get one fix in first
    simulator.run(1)
    simulator.place_points_of_interest(points)

    steps = args.steps if args.steps is not None else config.SIMULATION_CONFIG["steps"]
    simulator.run(max(steps - 1, 0))

    simulator.report()
    get_metrics().print_summary()
    return 0


if __name__ == "__main__":
    sys.exit(main())
