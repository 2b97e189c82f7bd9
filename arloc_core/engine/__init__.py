"""
Engine Module: Reconciliation loop and session driving.

Key classes:
- SceneLocationEngine: estimate upkeep, node confirmation, node position/scale
- Ticker: fixed-period tick thread
- EngineConfig / EstimateMethod: configuration surface
"""

from .config import EngineConfig, EstimateMethod
from .ticker import Ticker
from .scene_location_engine import SceneLocationEngine

__all__ = [
    'EngineConfig',
    'EstimateMethod',
    'Ticker',
    'SceneLocationEngine',
]
