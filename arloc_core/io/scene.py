"""
Scene collaborator interface.

The engine never renders anything itself. It reads the viewer pose from the
scene and pushes node mutations back inside scoped transactions. InMemoryScene
is a headless implementation used by the simulator and the tests.
"""

import logging
import math
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

import numpy as np

from arloc_core.proto.geo_fix import LocalPosition

logger = logging.getLogger(__name__)


class WorldAlignment(Enum):
    """How the tracking frame is oriented at session start."""

    GRAVITY = "gravity"                            # y up, heading arbitrary
    GRAVITY_AND_HEADING = "gravity_and_heading"    # y up, -z true north


class SceneCollaborator(ABC):
    """What the engine needs from the 3D scene / tracking subsystem."""

    @abstractmethod
    def configure(self, world_alignment: WorldAlignment):
        """Start (or restart) tracking with the given alignment."""

    @abstractmethod
    def pause(self):
        """Pause tracking."""

    @abstractmethod
    def viewer_position(self) -> Optional[LocalPosition]:
        """Viewer position in the root node frame, None until tracking is up."""

    @abstractmethod
    def has_current_frame(self) -> bool:
        """True once the tracking session has produced a frame."""

    @abstractmethod
    def viewer_orientation(self) -> Optional[Tuple[float, float, float]]:
        """Viewer euler angles (pitch, yaw, roll) in radians."""

    @abstractmethod
    def setup_root_node(self, show_axes: bool = False) -> Any:
        """Create the root node that marker nodes are attached to."""

    @abstractmethod
    def add_node(self, node: Any):
        """Attach a marker node to the root node."""

    @abstractmethod
    def remove_node(self, node: Any):
        """Detach a marker node."""

    @abstractmethod
    def apply_node(self, node: Any):
        """Push a node's position, content scale and pivot to the renderer."""

    @abstractmethod
    def transaction(self, duration: float):
        """Context manager grouping node mutations into one animated change."""

    @abstractmethod
    def rotate_scene(self, degrees: float):
        """Rotate the root node about the vertical axis."""

    @abstractmethod
    def reset_scene_heading(self):
        """Undo all manual heading rotation."""


@dataclass
class RootNode:
    """Root node of the headless scene."""

    yaw_rad: float = 0.0
    children: List[Any] = field(default_factory=list)
    has_axes: bool = False


@dataclass
class AppliedNodeState:
    """What the renderer last received for a node."""

    position: LocalPosition
    render_scale: float
    pivot: LocalPosition
    duration: float


def _yaw_matrix(yaw_rad: float) -> np.ndarray:
    """Rotation about +y."""
    c, s = math.cos(yaw_rad), math.sin(yaw_rad)
    return np.array(
        [
            [c, 0.0, s],
            [0.0, 1.0, 0.0],
            [-s, 0.0, c],
        ],
        dtype=float,
    )


class InMemoryScene(SceneCollaborator):
    """
    Headless scene.

    The camera lives in world coordinates; viewer_position() reports it in the
    root node's frame, so manual heading rotation moves markers around the
    viewer the same way it would on screen.
    """

    def __init__(self):
        self.world_alignment: Optional[WorldAlignment] = None
        self.running = False
        self.root: Optional[RootNode] = None
        self.applied: Dict[int, AppliedNodeState] = {}
        self.transactions: List[float] = []
        self._camera_position: Optional[np.ndarray] = None
        self._camera_euler: Tuple[float, float, float] = (0.0, 0.0, 0.0)
        self._current_duration: Optional[float] = None

    # -- test / simulator controls --------------------------------------

    def move_camera(self, x: float, y: float, z: float):
        """Place the camera in world coordinates (starts tracking)."""
        self._camera_position = np.array([x, y, z], dtype=float)

    def set_camera_orientation(self, pitch: float, yaw: float, roll: float):
        self._camera_euler = (pitch, yaw, roll)

    def lose_tracking(self):
        self._camera_position = None

    def applied_state(self, node: Any) -> Optional[AppliedNodeState]:
        return self.applied.get(id(node))

    # -- SceneCollaborator ----------------------------------------------

    def configure(self, world_alignment: WorldAlignment):
        self.world_alignment = world_alignment
        self.running = True
        logger.info(f"Scene configured, alignment={world_alignment.value}")

    def pause(self):
        self.running = False
        logger.info("Scene paused")

    def viewer_position(self) -> Optional[LocalPosition]:
        if self._camera_position is None:
            return None
        if self.root is None:
            return LocalPosition.from_array(self._camera_position)
        local = _yaw_matrix(self.root.yaw_rad).T @ self._camera_position
        return LocalPosition.from_array(local)

    def has_current_frame(self) -> bool:
        return self._camera_position is not None

    def viewer_orientation(self) -> Optional[Tuple[float, float, float]]:
        if self._camera_position is None:
            return None
        return self._camera_euler

    def setup_root_node(self, show_axes: bool = False) -> RootNode:
        self.root = RootNode(has_axes=show_axes)
        return self.root

    def add_node(self, node: Any):
        if self.root is None:
            raise RuntimeError("Root node not set up")
        if not any(child is node for child in self.root.children):
            self.root.children.append(node)

    def remove_node(self, node: Any):
        if self.root is not None:
            self.root.children = [child for child in self.root.children if child is not node]
        self.applied.pop(id(node), None)

    def apply_node(self, node: Any):
        self.applied[id(node)] = AppliedNodeState(
            position=node.position,
            render_scale=node.render_scale,
            pivot=node.pivot,
            duration=self._current_duration if self._current_duration is not None else 0.0,
        )

    @contextmanager
    def transaction(self, duration: float) -> Iterator[None]:
        self._current_duration = duration
        try:
            yield
        finally:
            self._current_duration = None
            self.transactions.append(duration)

    def rotate_scene(self, degrees: float):
        if self.root is not None:
            self.root.yaw_rad += math.radians(degrees)

    def reset_scene_heading(self):
        if self.root is not None:
            self.root.yaw_rad = 0.0
