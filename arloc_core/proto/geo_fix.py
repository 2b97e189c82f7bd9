"""
Geodetic and scene-frame value types.

GeoPoint / GeoFix describe where the viewer (or a marker) is on Earth.
LocalPosition is a point in the drift-prone tracking frame of the scene.
Translation is a short-range, axis-aligned offset between two geodetic points.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple
import math
import time

import numpy as np


@dataclass(frozen=True)
class GeoPoint:
    """
    Geodetic point.

    Attributes:
        latitude: Latitude in degrees [-90, 90]
        longitude: Longitude in degrees [-180, 180]
        altitude: Altitude in meters
    """

    latitude: float
    longitude: float
    altitude: float = 0.0

    def __post_init__(self):
        """Validate coordinate ranges."""
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude out of range [-90, 90]: {self.latitude}")

        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude out of range [-180, 180]: {self.longitude}")

    def to_dict(self) -> dict:
        return {
            'lat': self.latitude,
            'lon': self.longitude,
            'alt': self.altitude,
        }


@dataclass(frozen=True)
class GeoFix:
    """
    Single GPS reading.

    Attributes:
        point: Geodetic position of the fix
        horizontal_accuracy: Horizontal accuracy radius in meters (>= 0, lower is better)
        timestamp: Time of the reading (epoch seconds)
        vertical_accuracy: Vertical accuracy in meters (optional)
    """

    point: GeoPoint
    horizontal_accuracy: float = 0.0
    timestamp: float = field(default_factory=time.time)
    vertical_accuracy: Optional[float] = None

    def __post_init__(self):
        """Validate accuracy."""
        if self.horizontal_accuracy < 0:
            raise ValueError(f"Horizontal accuracy cannot be negative: {self.horizontal_accuracy}")

    @classmethod
    def from_coordinates(
        cls,
        latitude: float,
        longitude: float,
        altitude: float = 0.0,
        horizontal_accuracy: float = 0.0,
        timestamp: Optional[float] = None,
    ) -> 'GeoFix':
        """Build a fix straight from coordinate values."""
        return cls(
            point=GeoPoint(latitude, longitude, altitude),
            horizontal_accuracy=horizontal_accuracy,
            timestamp=time.time() if timestamp is None else timestamp,
        )

    @property
    def latitude(self) -> float:
        return self.point.latitude

    @property
    def longitude(self) -> float:
        return self.point.longitude

    @property
    def altitude(self) -> float:
        return self.point.altitude

    def with_point(self, point: GeoPoint) -> 'GeoFix':
        """Same fix metadata (accuracy, timestamp) at another position."""
        return replace(self, point=point)

    def to_dict(self) -> dict:
        return {
            **self.point.to_dict(),
            'horizontal_accuracy': self.horizontal_accuracy,
            'vertical_accuracy': self.vertical_accuracy,
            'timestamp': self.timestamp,
        }


@dataclass(frozen=True)
class LocalPosition:
    """
    Point in the scene tracking frame (meters).

    Axes follow the tracking subsystem: x right/east, y up, -z forward/north.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: 'LocalPosition') -> 'LocalPosition':
        return LocalPosition(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: 'LocalPosition') -> 'LocalPosition':
        return LocalPosition(self.x - other.x, self.y - other.y, self.z - other.z)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    @classmethod
    def from_array(cls, values) -> 'LocalPosition':
        x, y, z = np.asarray(values, dtype=float).reshape(3)
        return cls(float(x), float(y), float(z))

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class Translation:
    """
    Signed offset between two geodetic points along local axes.

    Flat-earth approximation, valid for short ranges only.

    Attributes:
        latitude: Offset along the latitude axis (north positive), meters
        longitude: Offset along the longitude axis (east positive), meters
        altitude: Altitude difference, meters
    """

    latitude: float = 0.0
    longitude: float = 0.0
    altitude: float = 0.0

    def scaled(self, factor: float) -> 'Translation':
        return Translation(
            self.latitude * factor,
            self.longitude * factor,
            self.altitude * factor,
        )

    @property
    def horizontal_m(self) -> float:
        """Horizontal length of the offset (altitude ignored)."""
        return math.hypot(self.latitude, self.longitude)
