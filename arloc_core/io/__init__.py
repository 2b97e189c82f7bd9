"""
I/O Module: Collaborator boundaries.

- LocationFeed: bounded inbox for GPS fixes and compass headings
- SceneCollaborator: what the engine needs from the 3D scene
- InMemoryScene: headless scene for simulation and tests
"""

from .location_feed import (
    LocationFeed,
    HeadingReading,
)
from .scene import (
    SceneCollaborator,
    InMemoryScene,
    RootNode,
    AppliedNodeState,
    WorldAlignment,
)

__all__ = [
    'LocationFeed',
    'HeadingReading',
    'SceneCollaborator',
    'InMemoryScene',
    'RootNode',
    'AppliedNodeState',
    'WorldAlignment',
]
