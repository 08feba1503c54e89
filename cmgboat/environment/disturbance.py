"""Wave disturbance model.

Synthetic wave forcing on the roll and yaw axes, expressed as a sum of
sinusoids per axis. The default model is one sinusoid per axis:

- Roll: 3.0 * sin(2*pi*0.25*t)          (period 4 s)
- Yaw:  2.5 * sin(2*pi*0.2*t + pi/4)    (period 5 s)

Example:
    >>> from cmgboat.environment import DisturbanceModel
    >>>
    >>> waves = DisturbanceModel()
    >>> roll_forcing, yaw_forcing = waves.at(1.25)
"""

from dataclasses import dataclass, field

import numpy as np

from cmgboat.typecheck import beartype

# =============================================================================
# Default Wave Parameters
# =============================================================================

ROLL_AMPLITUDE = 3.0     # [deg/s^2]
ROLL_FREQUENCY = 0.25    # [Hz]
ROLL_PHASE = 0.0         # [rad]

YAW_AMPLITUDE = 2.5      # [deg/s^2]
YAW_FREQUENCY = 0.2      # [Hz]
YAW_PHASE = np.pi / 4    # [rad]


@beartype
@dataclass(frozen=True)
class SinusoidalDisturbance:
    """Single sinusoidal forcing term.

    Attributes:
        amplitude: Peak forcing [deg/s^2]
        frequency_hz: Frequency [Hz]
        phase_rad: Phase offset [rad]
    """
    amplitude: float
    frequency_hz: float
    phase_rad: float = 0.0

    def __call__(self, t: float) -> float:
        return float(self.amplitude * np.sin(2.0 * np.pi * self.frequency_hz * t + self.phase_rad))


def _default_roll() -> tuple[SinusoidalDisturbance, ...]:
    return (SinusoidalDisturbance(ROLL_AMPLITUDE, ROLL_FREQUENCY, ROLL_PHASE),)


def _default_yaw() -> tuple[SinusoidalDisturbance, ...]:
    return (SinusoidalDisturbance(YAW_AMPLITUDE, YAW_FREQUENCY, float(YAW_PHASE)),)


@beartype
@dataclass(frozen=True)
class DisturbanceModel:
    """Sum-of-sinusoids forcing on the roll and yaw axes.

    Stateless: every method is a pure function of elapsed time.

    Attributes:
        roll_terms: Sinusoids summed for roll forcing
        yaw_terms: Sinusoids summed for yaw forcing
    """
    roll_terms: tuple[SinusoidalDisturbance, ...] = field(default_factory=_default_roll)
    yaw_terms: tuple[SinusoidalDisturbance, ...] = field(default_factory=_default_yaw)

    @classmethod
    def calm(cls) -> "DisturbanceModel":
        """Model with no forcing on either axis."""
        return cls(roll_terms=(), yaw_terms=())

    def roll(self, t: float) -> float:
        """Roll forcing at time t [s]."""
        return float(sum(term(t) for term in self.roll_terms))

    def yaw(self, t: float) -> float:
        """Yaw forcing at time t [s]."""
        return float(sum(term(t) for term in self.yaw_terms))

    def at(self, t: float) -> tuple[float, float]:
        """(roll, yaw) forcing at time t [s]."""
        return self.roll(t), self.yaw(t)
