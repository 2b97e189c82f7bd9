"""
Localization Module: Geodetic math and scene location estimates.

Key pieces:
- geodetic: flat-earth projection between geodetic points and local offsets,
  ground-plane distance helpers
- LocationEstimate: GPS fix paired with the viewer's scene position
- LocationEstimateStore: rolling estimate window, eviction, best-estimate selection
"""

from .geodetic import (
    LATITUDE_RADIUS_M,
    LONGITUDE_RADIUS_M,
    coordinate_with_bearing,
    translation,
    translated_location,
    translated_fix,
    geodetic_distance,
    local_to_ground_point,
    ground_distance,
    radius_contains,
    local_translation,
    translation_to_local_offset,
)
from .scene_estimate import (
    SCENE_LIMIT_M,
    LocationEstimate,
    LocationEstimateStore,
)

__all__ = [
    'LATITUDE_RADIUS_M',
    'LONGITUDE_RADIUS_M',
    'coordinate_with_bearing',
    'translation',
    'translated_location',
    'translated_fix',
    'geodetic_distance',
    'local_to_ground_point',
    'ground_distance',
    'radius_contains',
    'local_translation',
    'translation_to_local_offset',
    'SCENE_LIMIT_M',
    'LocationEstimate',
    'LocationEstimateStore',
]
