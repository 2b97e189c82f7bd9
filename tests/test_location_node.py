"""
Unit tests for marker nodes, the node registry and points of interest.

Tests cover:
- Node construction defaults and the Unconfirmed -> Confirmed transition
- Registry add/remove/lookups
- Point of interest and route segment factories
- Loading points of interest from JSON
"""

import json

import pytest

from arloc_core.proto import GeoFix, GeoPoint, LocalPosition
from arloc_core.domain import (
    MarkerNode,
    RouteAnnotationNode,
    MarkerNodeRegistry,
    PointOfInterest,
    RouteSegment,
    load_points_of_interest,
)
from tests.conftest import ORIGIN, make_fix


# =============================================================================
# Marker Nodes
# =============================================================================


class TestMarkerNode:
    """Tests for MarkerNode."""

    def test_defaults_without_location(self):
        node = MarkerNode(tag="pin")

        assert node.location is None
        assert not node.confirmed
        assert node.position == LocalPosition()
        assert node.scale == 1.0
        assert node.continually_update_position_and_scale
        assert node.continually_adjust_position_when_within_range
        assert not node.scale_relative_to_distance

    def test_location_given_means_confirmed(self):
        node = MarkerNode(location=make_fix(), tag="cafe")
        assert node.confirmed

    def test_geopoint_location_wrapped_as_fix(self):
        node = MarkerNode(location=ORIGIN)

        assert isinstance(node.location, GeoFix)
        assert node.location.point == ORIGIN
        assert node.location.horizontal_accuracy == 0.0

    def test_place_unconfirmed(self):
        node = MarkerNode()
        node.place(make_fix(), LocalPosition(1.0, 0.0, 2.0), confirmed=False)

        assert not node.confirmed
        assert node.position == LocalPosition(1.0, 0.0, 2.0)
        assert node.location is not None

    def test_place_confirmed_node_raises(self):
        node = MarkerNode(location=make_fix())
        with pytest.raises(ValueError):
            node.place(make_fix(), LocalPosition(), confirmed=False)

    def test_confirm_freezes_location(self):
        node = MarkerNode()
        node.place(make_fix(accuracy=9.0), LocalPosition(), confirmed=False)

        refined = make_fix(north_m=2.0, accuracy=3.0)
        node.confirm(refined)

        assert node.confirmed
        assert node.location is refined

    def test_confirm_without_location_raises(self):
        with pytest.raises(ValueError):
            MarkerNode().confirm()

    def test_confirm_twice_raises(self):
        """Confirmed is terminal."""
        node = MarkerNode(location=make_fix())
        with pytest.raises(ValueError):
            node.confirm(make_fix(north_m=1.0))

    def test_equality_is_identity(self):
        a = MarkerNode(location=ORIGIN, tag="same")
        b = MarkerNode(location=ORIGIN, tag="same")
        assert a != b
        assert a == a


class TestRouteAnnotationNode:
    """Tests for RouteAnnotationNode."""

    def test_scales_with_distance(self):
        node = RouteAnnotationNode(ORIGIN, color="red", radius_m=3.0, tag="leg")

        assert node.confirmed
        assert node.scale_relative_to_distance
        assert node.children[0]['radius'] == 3.0
        assert node.children[0]['color'] == "red"


# =============================================================================
# Registry
# =============================================================================


class TestMarkerNodeRegistry:
    """Tests for MarkerNodeRegistry."""

    def test_add_and_contains(self):
        registry = MarkerNodeRegistry()
        node = MarkerNode(tag="a")

        assert registry.add(node)
        assert node in registry
        assert len(registry) == 1

    def test_add_twice_is_noop(self):
        registry = MarkerNodeRegistry()
        node = MarkerNode(tag="a")
        registry.add(node)

        assert not registry.add(node)
        assert len(registry) == 1

    def test_remove(self):
        registry = MarkerNodeRegistry()
        node = MarkerNode(tag="a")
        registry.add(node)

        assert registry.remove(node)
        assert node not in registry
        assert not registry.remove(node)

    def test_find_by_tag(self):
        registry = MarkerNodeRegistry()
        a1, a2, b = MarkerNode(tag="a"), MarkerNode(tag="a"), MarkerNode(tag="b")
        for node in (a1, a2, b):
            registry.add(node)

        assert registry.find_by_tag("a") == [a1, a2]
        assert registry.contains_tag("b")
        assert not registry.contains_tag("c")

    def test_empty_tag_matches_nothing(self):
        registry = MarkerNodeRegistry()
        registry.add(MarkerNode())

        assert registry.find_by_tag("") == []
        assert not registry.contains_tag("")

    def test_unconfirmed_and_continually_updated(self):
        registry = MarkerNodeRegistry()
        pending = MarkerNode(tag="pending")
        fixed = MarkerNode(location=ORIGIN, tag="fixed")
        fixed.continually_update_position_and_scale = False
        registry.add(pending)
        registry.add(fixed)

        assert registry.unconfirmed() == [pending]
        assert registry.continually_updated() == [pending]

    def test_iteration_keeps_insertion_order(self):
        registry = MarkerNodeRegistry()
        nodes = [MarkerNode(tag=str(i)) for i in range(4)]
        for node in nodes:
            registry.add(node)

        assert list(registry) == nodes
        assert registry.nodes() == tuple(nodes)


# =============================================================================
# Points of Interest
# =============================================================================


class TestPointsOfInterest:
    """Tests for PointOfInterest, RouteSegment and load_points_of_interest()."""

    def test_poi_to_node(self):
        poi = PointOfInterest("Pier", 22.2904, 114.1703, 3.0)
        node = poi.to_node()

        assert node.tag == "Pier"
        assert node.confirmed
        assert node.location.point == GeoPoint(22.2904, 114.1703, 3.0)

    def test_route_segment_to_nodes(self):
        segment = RouteSegment(22.29, 114.17, 0.0, 22.30, 114.18, 5.0)
        start, end = segment.to_nodes(color="green")

        assert isinstance(start, RouteAnnotationNode)
        assert start.location.point == segment.start
        assert end.location.point == segment.end
        assert start.color == "green"
        assert start.tag == end.tag == "route"

    def test_load_valid_file(self, tmp_path):
        path = tmp_path / "poi.json"
        path.write_text(json.dumps([
            {"title": "Pier", "latitude": 22.2904, "longitude": 114.1703, "altitude": 3.0},
            {"title": "Tower", "latitude": 22.2954, "longitude": 114.1676},
        ]))

        points = load_points_of_interest(path)

        assert [p.title for p in points] == ["Pier", "Tower"]
        assert points[1].altitude == 0.0

    def test_load_not_a_list(self, tmp_path):
        path = tmp_path / "poi.json"
        path.write_text(json.dumps({"title": "Pier"}))

        with pytest.raises(ValueError):
            load_points_of_interest(path)

    def test_load_missing_field(self, tmp_path):
        path = tmp_path / "poi.json"
        path.write_text(json.dumps([{"title": "Pier", "latitude": 22.29}]))

        with pytest.raises(ValueError, match="index 0"):
            load_points_of_interest(path)

    def test_load_out_of_range(self, tmp_path):
        path = tmp_path / "poi.json"
        path.write_text(json.dumps([{"title": "Nowhere", "latitude": 95.0, "longitude": 0.0}]))

        with pytest.raises(ValueError):
            load_points_of_interest(path)
