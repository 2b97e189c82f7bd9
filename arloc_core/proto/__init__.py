"""
Protocol Module: Value types and engine events.
"""

from .geo_fix import (
    GeoPoint,
    GeoFix,
    LocalPosition,
    Translation,
)
from .events import (
    EstimateAdded,
    EstimateRemoved,
    NodeConfirmed,
    RootNodeEstablished,
    NodeUpdated,
    EngineEvent,
    EventListener,
)

__all__ = [
    'GeoPoint',
    'GeoFix',
    'LocalPosition',
    'Translation',
    'EstimateAdded',
    'EstimateRemoved',
    'NodeConfirmed',
    'RootNodeEstablished',
    'NodeUpdated',
    'EngineEvent',
    'EventListener',
]
