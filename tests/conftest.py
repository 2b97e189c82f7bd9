"""
Pytest configuration and shared fixtures for AR location engine tests.

Provides a fixed geodetic origin, a headless scene with the camera at the
scene origin, a location feed, and engines in both estimate modes.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from arloc_core.proto import GeoFix, GeoPoint, Translation
from arloc_core.localization import translated_location
from arloc_core.engine import SceneLocationEngine, EngineConfig
from arloc_core.io import InMemoryScene, LocationFeed
from arloc_core.metrics import reset_metrics


# Hong Kong harbour front
ORIGIN = GeoPoint(latitude=22.2900, longitude=114.1700, altitude=2.0)


# =============================================================================
# Helper Functions
# =============================================================================


def point_at(north_m: float = 0.0, east_m: float = 0.0, up_m: float = 0.0, origin: GeoPoint = ORIGIN) -> GeoPoint:
    """
    Geodetic point at a local offset from the origin.

    Args:
        north_m: Offset along the latitude axis (m)
        east_m: Offset along the longitude axis (m)
        up_m: Altitude offset (m)
        origin: Reference point

    Returns:
        GeoPoint
    """
    return translated_location(origin, Translation(north_m, east_m, up_m))


def make_fix(
    north_m: float = 0.0,
    east_m: float = 0.0,
    up_m: float = 0.0,
    accuracy: float = 5.0,
    timestamp: float = 1000.0,
) -> GeoFix:
    """GPS fix at a local offset from the origin."""
    return GeoFix(
        point=point_at(north_m, east_m, up_m),
        horizontal_accuracy=accuracy,
        timestamp=timestamp,
    )


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def fresh_metrics():
    """Every test starts with empty global metrics."""
    reset_metrics()
    yield


@pytest.fixture
def origin() -> GeoPoint:
    return ORIGIN


@pytest.fixture
def scene() -> InMemoryScene:
    """Headless scene with the camera tracking at the scene origin."""
    s = InMemoryScene()
    s.move_camera(0.0, 0.0, 0.0)
    return s


@pytest.fixture
def feed() -> LocationFeed:
    return LocationFeed()


@pytest.fixture
def engine(scene: InMemoryScene, feed: LocationFeed) -> SceneLocationEngine:
    """Engine in best-estimate mode, no root node and no estimates yet."""
    return SceneLocationEngine(scene, feed, EngineConfig())


@pytest.fixture
def gps_engine(scene: InMemoryScene, feed: LocationFeed) -> SceneLocationEngine:
    """Engine in GPS-only mode."""
    return SceneLocationEngine(scene, feed, EngineConfig(estimate_method="gps_only"))


@pytest.fixture
def primed_engine(engine: SceneLocationEngine, feed: LocationFeed) -> SceneLocationEngine:
    """
    Best-estimate engine with a root node and one estimate.

    The estimate pairs a 5 m accuracy fix at ORIGIN with scene position (0, 0, 0).
    """
    feed.on_location_update(make_fix(accuracy=5.0, timestamp=1000.0))
    engine.on_render_tick()
    assert len(engine.store) == 1
    return engine
