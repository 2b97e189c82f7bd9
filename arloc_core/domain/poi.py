"""
Points of interest and route segments.

Plain records for content anchored to the map, with factories that turn them
into marker nodes.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from arloc_core.proto.geo_fix import GeoPoint
from .location_node import MarkerNode, RouteAnnotationNode

logger = logging.getLogger(__name__)


@dataclass
class PointOfInterest:
    """Named place to mark in the scene."""

    title: str
    latitude: float
    longitude: float
    altitude: float = 0.0

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(self.latitude, self.longitude, self.altitude)

    def to_node(self) -> MarkerNode:
        """Confirmed marker node tagged with the title."""
        return MarkerNode(location=self.point, tag=self.title)


@dataclass
class RouteSegment:
    """Straight route leg between two geodetic points."""

    start_latitude: float
    start_longitude: float
    start_altitude: float
    end_latitude: float
    end_longitude: float
    end_altitude: float

    @property
    def start(self) -> GeoPoint:
        return GeoPoint(self.start_latitude, self.start_longitude, self.start_altitude)

    @property
    def end(self) -> GeoPoint:
        return GeoPoint(self.end_latitude, self.end_longitude, self.end_altitude)

    def to_nodes(self, color: str = "blue", tag: str = "route") -> List[RouteAnnotationNode]:
        """Waypoint markers at both ends of the segment."""
        return [
            RouteAnnotationNode(self.start, color=color, tag=tag),
            RouteAnnotationNode(self.end, color=color, tag=tag),
        ]


def load_points_of_interest(path: Union[str, Path]) -> List[PointOfInterest]:
    """
    Load points of interest from a JSON file.

    Expected format: a list of {"title", "latitude", "longitude", "altitude"}
    objects; altitude is optional.

    Raises:
        ValueError: If the file does not hold a list of valid entries
    """
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError(f"Expected a list of points of interest in {path}")

    points = []
    for i, entry in enumerate(data):
        try:
            title = str(entry["title"])
            point = GeoPoint(
                float(entry["latitude"]),
                float(entry["longitude"]),
                float(entry.get("altitude", 0.0)),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Invalid point of interest at index {i}: {e}") from e

        points.append(PointOfInterest(title, point.latitude, point.longitude, point.altitude))

    logger.info(f"Loaded {len(points)} point(s) of interest from {path}")
    return points
