"""
Marker nodes anchored to geodetic locations.

A MarkerNode is either confirmed (its location is authoritative and its scene
position is derived from it) or unconfirmed (its scene position is
authoritative and its location is derived from the best estimate). The only
transition is Unconfirmed -> Confirmed.
"""

import logging
from typing import Any, List, Optional, Union

from arloc_core.proto.geo_fix import GeoFix, GeoPoint, LocalPosition

logger = logging.getLogger(__name__)


def _as_fix(location: Union[GeoFix, GeoPoint, None]) -> Optional[GeoFix]:
    if location is None or isinstance(location, GeoFix):
        return location
    return GeoFix(point=location, horizontal_accuracy=0.0)


class MarkerNode:
    """
    Virtual marker placed in the scene.

    Attributes:
        tag: Free-form label used for lookups
        position: Scene position of the node
        scale: Distance scale factor from the last update (1.0 within range)
        render_scale: Uniform scale applied to the node's content (children)
        pivot: Pivot offset so content rests on the ground below its anchor
        children: Renderable content; opaque to the engine
        continually_update_position_and_scale: Recompute every tick
        continually_adjust_position_when_within_range: Keep following the
            geodetic location while within the scene limit
        scale_relative_to_distance: Shrink content with distance instead of
            keeping a constant apparent size

    Equality is identity: two nodes at the same place are still two markers.
    """

    def __init__(
        self,
        location: Union[GeoFix, GeoPoint, None] = None,
        tag: str = "",
        children: Optional[List[Any]] = None,
    ):
        """
        Initialize marker node.

        Args:
            location: Known location; a node created with one starts confirmed
            tag: Label for find/contains lookups
            children: Renderable content
        """
        self._location = _as_fix(location)
        self._confirmed = self._location is not None
        self.tag = tag
        self.children: List[Any] = list(children or [])

        self.position = LocalPosition()
        self.scale = 1.0
        self.render_scale = 1.0
        self.pivot = LocalPosition()

        self.continually_update_position_and_scale = True
        self.continually_adjust_position_when_within_range = True
        self.scale_relative_to_distance = False

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(tag={self.tag!r}, confirmed={self._confirmed}, "
                f"position={self.position.as_tuple()})")

    @property
    def location(self) -> Optional[GeoFix]:
        return self._location

    @property
    def confirmed(self) -> bool:
        return self._confirmed

    def place(self, location: GeoFix, position: LocalPosition, confirmed: bool):
        """
        Stamp a fresh placement.

        Raises:
            ValueError: If the node's location is already confirmed
        """
        if self._confirmed:
            raise ValueError(f"Node {self.tag!r} already has a confirmed location")
        self._location = location
        self.position = position
        self._confirmed = confirmed

    def confirm(self, location: Optional[GeoFix] = None):
        """
        Freeze the node's location.

        Args:
            location: Location to freeze (defaults to the current one)

        Raises:
            ValueError: If already confirmed or no location is available
        """
        if self._confirmed:
            raise ValueError(f"Node {self.tag!r} already has a confirmed location")

        frozen = location if location is not None else self._location
        if frozen is None:
            raise ValueError(f"Node {self.tag!r} has no location to confirm")

        self._location = frozen
        self._confirmed = True
        logger.debug(f"Node {self.tag!r} confirmed at ({frozen.latitude:.6f}, {frozen.longitude:.6f})")


class RouteAnnotationNode(MarkerNode):
    """
    Route waypoint marker.

    Drawn as a sphere that shrinks with distance, so far waypoints read as
    far away.
    """

    def __init__(
        self,
        location: Union[GeoFix, GeoPoint],
        color: str = "blue",
        radius_m: float = 5.0,
        tag: str = "",
    ):
        self.color = color
        self.radius_m = radius_m
        super().__init__(location=location, tag=tag, children=[{'shape': 'sphere', 'radius': radius_m, 'color': color}])
        self.scale_relative_to_distance = True
