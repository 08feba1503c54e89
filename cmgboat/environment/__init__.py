"""Environment models for boat simulation.

Provides the wave disturbance model acting on the roll and yaw axes.
"""

from cmgboat.environment.disturbance import (
    DisturbanceModel,
    SinusoidalDisturbance,
)

__all__ = [
    "DisturbanceModel",
    "SinusoidalDisturbance",
]
