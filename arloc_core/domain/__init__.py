"""
Domain Module: Marker nodes and the content placed in the scene.

Implements:
- MarkerNode / RouteAnnotationNode
- MarkerNodeRegistry
- PointOfInterest / RouteSegment models
"""

from .location_node import (
    MarkerNode,
    RouteAnnotationNode,
)
from .node_registry import MarkerNodeRegistry
from .poi import (
    PointOfInterest,
    RouteSegment,
    load_points_of_interest,
)

__all__ = [
    'MarkerNode',
    'RouteAnnotationNode',
    'MarkerNodeRegistry',
    'PointOfInterest',
    'RouteSegment',
    'load_points_of_interest',
]
