"""
Engine configuration.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Union


class EstimateMethod(Enum):
    """Where the current location comes from."""

    GPS_ONLY = "gps_only"            # Raw location source data
    BEST_ESTIMATE = "best_estimate"  # Best scene location estimate, translated to the viewer


@dataclass
class EngineConfig:
    """
    Configuration for the scene location engine.

    Attributes:
        estimate_method: GPS_ONLY or BEST_ESTIMATE (enum or its string value)
        update_interval_s: Reconciliation tick period (s)
        scene_limit_m: Ground radius for estimate eviction, node confirmation
            and marker distance clamping (m)
        animation_duration_s: Interpolation time for per-tick node updates (s)
        show_axes: Attach an axes helper to the root node
        orient_to_true_north: Align the tracking frame with true north
        queue_size: Maximum pending location/heading readings
    """

    estimate_method: Union[EstimateMethod, str] = EstimateMethod.BEST_ESTIMATE
    update_interval_s: float = 0.1
    scene_limit_m: float = 100.0
    animation_duration_s: float = 0.1
    show_axes: bool = False
    orient_to_true_north: bool = True
    queue_size: int = 256

    def __post_init__(self):
        """Normalize and validate."""
        if not isinstance(self.estimate_method, EstimateMethod):
            try:
                self.estimate_method = EstimateMethod(self.estimate_method)
            except ValueError:
                valid = ', '.join(m.value for m in EstimateMethod)
                raise ValueError(f"Unknown estimate method {self.estimate_method!r} (expected one of: {valid})")

        if self.update_interval_s <= 0:
            raise ValueError(f"Update interval must be positive: {self.update_interval_s}")

        if self.scene_limit_m <= 0:
            raise ValueError(f"Scene limit must be positive: {self.scene_limit_m}")

        if self.animation_duration_s < 0:
            raise ValueError(f"Animation duration cannot be negative: {self.animation_duration_s}")

        if self.queue_size < 1:
            raise ValueError(f"Queue size must be at least 1: {self.queue_size}")

    @property
    def gps_only(self) -> bool:
        return self.estimate_method == EstimateMethod.GPS_ONLY

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> 'EngineConfig':
        """Build from a config dict; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in values.items() if k in known})

    def to_dict(self) -> dict:
        return {
            'estimate_method': self.estimate_method.value,
            'update_interval_s': self.update_interval_s,
            'scene_limit_m': self.scene_limit_m,
            'animation_duration_s': self.animation_duration_s,
            'show_axes': self.show_axes,
            'orient_to_true_north': self.orient_to_true_north,
            'queue_size': self.queue_size,
        }
