"""
Geodetic math for the scene frame.

Flat-earth projection between geodetic coordinates and short-range local
offsets, plus ground-plane helpers for the scene tracking frame.

The projection radii are not WGS84 radii. They are fixed constants used
consistently by the forward projection (coordinate_with_bearing) and its
inverse (translation), so a round trip is stable to well under a meter for
offsets up to a kilometer.
"""

import math
from typing import Tuple

from arloc_core.proto.geo_fix import GeoPoint, GeoFix, LocalPosition, Translation


LATITUDE_RADIUS_M = 6360500.0   # meters per radian along the latitude axis
LONGITUDE_RADIUS_M = 5602900.0  # meters per radian along the longitude axis

BEARING_LATITUDE = 0.0
BEARING_LONGITUDE = math.pi / 2


def degrees_to_radians(value: float) -> float:
    return value * math.pi / 180.0


def radians_to_degrees(value: float) -> float:
    return value * 180.0 / math.pi


def meters_to_latitude_radians(meters: float) -> float:
    return meters / LATITUDE_RADIUS_M


def meters_to_longitude_radians(meters: float) -> float:
    return meters / LONGITUDE_RADIUS_M


# -------------------------
# Geodetic <-> translation
# -------------------------
def coordinate_with_bearing(origin: GeoPoint, bearing_rad: float, distance_m: float) -> GeoPoint:
    """
    Project a point from origin along a bearing.

    Args:
        origin: Start point
        bearing_rad: Bearing in radians (0 = latitude axis, pi/2 = longitude axis)
        distance_m: Distance in meters (>= 0; negative values project backwards)

    Returns:
        Projected GeoPoint, altitude carried over from origin
    """
    dist_rad_lat = meters_to_latitude_radians(distance_m)
    dist_rad_lon = meters_to_longitude_radians(distance_m)

    lat1 = degrees_to_radians(origin.latitude)
    lon1 = degrees_to_radians(origin.longitude)

    lat2 = math.asin(
        math.sin(lat1) * math.cos(dist_rad_lat)
        + math.cos(lat1) * math.sin(dist_rad_lat) * math.cos(bearing_rad)
    )
    lon2 = lon1 + math.atan2(
        math.sin(bearing_rad) * math.sin(dist_rad_lon) * math.cos(lat1),
        math.cos(dist_rad_lon) - math.sin(lat1) * math.sin(lat2),
    )

    return GeoPoint(
        latitude=radians_to_degrees(lat2),
        longitude=radians_to_degrees(lon2),
        altitude=origin.altitude,
    )


def central_angle(a: GeoPoint, b: GeoPoint) -> float:
    """Haversine central angle between two points on the unit sphere (radians)."""
    p1 = degrees_to_radians(a.latitude)
    p2 = degrees_to_radians(b.latitude)
    dphi = p2 - p1
    dl = degrees_to_radians(b.longitude - a.longitude)
    h = math.sin(dphi / 2.0) ** 2 + math.cos(p1) * math.cos(p2) * math.sin(dl / 2.0) ** 2
    return 2.0 * math.asin(math.sqrt(min(1.0, h)))


def translation(from_point: GeoPoint, to_point: GeoPoint) -> Translation:
    """
    Axis-aligned offset from one geodetic point to another.

    The two horizontal legs are measured independently through an
    intermediate point that shares from_point's latitude and to_point's
    longitude.

    Args:
        from_point: Reference point
        to_point: Target point

    Returns:
        Translation (north, east, up) in meters
    """
    inbetween = GeoPoint(latitude=from_point.latitude, longitude=to_point.longitude)

    distance_latitude = central_angle(to_point, inbetween) * LATITUDE_RADIUS_M
    if to_point.latitude > inbetween.latitude:
        latitude_translation = distance_latitude
    else:
        latitude_translation = -distance_latitude

    distance_longitude = central_angle(from_point, inbetween) * LONGITUDE_RADIUS_M
    if from_point.longitude > inbetween.longitude:
        longitude_translation = -distance_longitude
    else:
        longitude_translation = distance_longitude

    return Translation(
        latitude=latitude_translation,
        longitude=longitude_translation,
        altitude=to_point.altitude - from_point.altitude,
    )


def translated_location(origin: GeoPoint, offset: Translation) -> GeoPoint:
    """
    Apply a translation to a geodetic point (inverse of translation()).

    Args:
        origin: Start point
        offset: Offset to apply

    Returns:
        Translated GeoPoint

    Raises:
        ValueError: If the result leaves the coordinate range (no wraparound)
    """
    latitude_coordinate = coordinate_with_bearing(origin, BEARING_LATITUDE, offset.latitude)
    longitude_coordinate = coordinate_with_bearing(origin, BEARING_LONGITUDE, offset.longitude)

    return GeoPoint(
        latitude=latitude_coordinate.latitude,
        longitude=longitude_coordinate.longitude,
        altitude=origin.altitude + offset.altitude,
    )


def translated_fix(origin: GeoFix, offset: Translation) -> GeoFix:
    """translated_location() for a fix; accuracy and timestamp are kept."""
    return origin.with_point(translated_location(origin.point, offset))


def geodetic_distance(a: GeoPoint, b: GeoPoint) -> float:
    """
    Horizontal distance between two points in the projection (meters).

    Same measure as the horizontal length of translation(a, b), so a marker
    clamped by distance lands at the clamp radius in the scene.
    """
    return translation(a, b).horizontal_m


# -------------------------
# Scene frame helpers
# -------------------------
def local_to_ground_point(position: LocalPosition) -> Tuple[float, float]:
    """Project a scene position onto the ground plane as (x, -z)."""
    return (position.x, -position.z)


def ground_distance(a: LocalPosition, b: LocalPosition) -> float:
    """Distance in the XZ ground plane (y ignored)."""
    ax, ay = local_to_ground_point(a)
    bx, by = local_to_ground_point(b)
    return math.hypot(bx - ax, by - ay)


def radius_contains(center: LocalPosition, point: LocalPosition, radius: float) -> bool:
    """True if point lies within radius of center on the ground plane (inclusive)."""
    cx, cy = local_to_ground_point(center)
    px, py = local_to_ground_point(point)
    return (px - cx) ** 2 + (py - cy) ** 2 <= radius ** 2


def local_translation(from_position: LocalPosition, to_position: LocalPosition) -> Translation:
    """
    Geodetic-axis translation between two scene positions.

    North is -z, east is +x, up is +y.
    """
    return Translation(
        latitude=from_position.z - to_position.z,
        longitude=to_position.x - from_position.x,
        altitude=to_position.y - from_position.y,
    )


def translation_to_local_offset(offset: Translation) -> LocalPosition:
    """Scene-frame vector for a geodetic translation (inverse of local_translation)."""
    return LocalPosition(
        x=offset.longitude,
        y=offset.altitude,
        z=-offset.latitude,
    )
