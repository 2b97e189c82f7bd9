"""
Engine events.

Emitted by the reconciliation engine for whatever presentation layer is wired
in. Observational only: nothing in the engine depends on a listener existing.
"""

from dataclasses import dataclass
from typing import Any, Callable, Union

from .geo_fix import GeoFix, LocalPosition


@dataclass(frozen=True)
class EstimateAdded:
    """A location estimate was captured."""

    position: LocalPosition
    location: GeoFix


@dataclass(frozen=True)
class EstimateRemoved:
    """A location estimate drifted out of range and was evicted."""

    position: LocalPosition
    location: GeoFix


@dataclass(frozen=True)
class NodeConfirmed:
    """A marker node's geodetic location was frozen."""

    node: Any  # MarkerNode


@dataclass(frozen=True)
class RootNodeEstablished:
    """The scene root node was created on the first rendered frame."""

    root: Any


@dataclass(frozen=True)
class NodeUpdated:
    """A marker node's position, scale or pivot was recomputed."""

    node: Any  # MarkerNode


EngineEvent = Union[EstimateAdded, EstimateRemoved, NodeConfirmed, RootNodeEstablished, NodeUpdated]

EventListener = Callable[[EngineEvent], None]
