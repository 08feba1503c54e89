"""PID controller for CMG gimbal commands.

Provides a PID controller with:
- Anti-windup by clamping the integrator itself
- Output saturation to the gimbal deflection range
- A pure step function over an immutable state, wrapped by a mutable class

Example:
    >>> from cmgboat.control import PIDController
    >>>
    >>> # Roll axis: hold attitude at zero, gimbal limited to +/-30 deg
    >>> ctrl = PIDController(kp=4.0, ki=1.0, kd=2.5, output_min=-30.0, output_max=30.0)
    >>>
    >>> servo_angle = ctrl.compute(current_value=roll, setpoint=0.0, dt=0.01)
"""

import math
from dataclasses import dataclass, field, replace

import numpy as np

from cmgboat.typecheck import beartype

# Keeps the integrator bound finite when ki == 0
INTEGRATOR_EPSILON = 1e-6

# =============================================================================
# PID Gains
# =============================================================================


@beartype
@dataclass(frozen=True)
class PIDGains:
    """PID controller gains.

    Attributes:
        kp: Proportional gain
        ki: Integral gain
        kd: Derivative gain
    """
    kp: float = 1.0
    ki: float = 0.0
    kd: float = 0.0

    def scale(self, factor: float) -> "PIDGains":
        """Scale all gains by a factor."""
        return PIDGains(
            kp=self.kp * factor,
            ki=self.ki * factor,
            kd=self.kd * factor,
        )


# =============================================================================
# Pure PID Step
# =============================================================================


@beartype
@dataclass(frozen=True)
class PIDState:
    """Complete state of one PID control law.

    Attributes:
        gains: Controller gains
        output_min: Lower output bound
        output_max: Upper output bound
        integrator: Accumulated error integral
        prev_error: Error from the previous call, None before the first call
    """
    gains: PIDGains
    output_min: float
    output_max: float
    integrator: float = 0.0
    prev_error: float | None = None

    def __post_init__(self) -> None:
        if self.output_min > self.output_max:
            raise ValueError(
                f"output_min ({self.output_min}) must not exceed output_max ({self.output_max})"
            )

    @property
    def integrator_limit(self) -> float:
        """Magnitude bound on the integrator (anti-windup)."""
        output_range = self.output_max - self.output_min
        return abs(output_range / (self.gains.ki + INTEGRATOR_EPSILON))

    def cleared(self) -> "PIDState":
        """Same gains and bounds with the integrator and error history zeroed."""
        return replace(self, integrator=0.0, prev_error=None)


@beartype
def pid_step(
    state: PIDState,
    current_value: float,
    setpoint: float,
    dt: float,
) -> tuple[float, PIDState]:
    """Advance a PID control law by one sample.

    Args:
        state: Controller state before the sample
        current_value: Measured value
        setpoint: Desired value
        dt: Time step [s], must be positive

    Returns:
        (output, next_state), output clipped to [output_min, output_max]

    Raises:
        ValueError: If dt is not a positive finite number
    """
    if not (dt > 0 and math.isfinite(dt)):
        raise ValueError(f"dt must be positive and finite, got {dt}")

    error = float(setpoint - current_value)
    gains = state.gains

    # Proportional term
    p_term = gains.kp * error

    # Integral term, integrator clamped so saturation cannot wind it up
    limit = state.integrator_limit
    integrator = float(np.clip(state.integrator + error * dt, -limit, limit))
    i_term = gains.ki * integrator

    # Derivative term, zero until an error history exists
    d_term = 0.0
    if state.prev_error is not None:
        d_term = gains.kd * (error - state.prev_error) / dt

    output = float(np.clip(p_term + i_term + d_term, state.output_min, state.output_max))

    return output, replace(state, integrator=integrator, prev_error=error)


# =============================================================================
# PID Controller
# =============================================================================


@beartype
@dataclass
class PIDController:
    """Stateful PID controller.

    Implements the parallel PID form:
        u = kp * e + ki * integral(e) + kd * de/dt

    with e = setpoint - measurement. The integrator is bounded to
    +/- |(output_max - output_min) / (ki + eps)| and the output is clipped to
    [output_min, output_max].

    Attributes:
        kp: Proportional gain
        ki: Integral gain
        kd: Derivative gain
        output_min: Lower output bound
        output_max: Upper output bound
    """
    kp: float = 1.0
    ki: float = 0.0
    kd: float = 0.0
    output_min: float = -1.0
    output_max: float = 1.0

    # Internal state
    _state: PIDState = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._state = PIDState(
            gains=PIDGains(kp=self.kp, ki=self.ki, kd=self.kd),
            output_min=self.output_min,
            output_max=self.output_max,
        )

    @classmethod
    def from_gains(
        cls,
        gains: PIDGains,
        output_limits: tuple[float, float],
    ) -> "PIDController":
        """Create controller from PIDGains object."""
        return cls(
            kp=gains.kp,
            ki=gains.ki,
            kd=gains.kd,
            output_min=output_limits[0],
            output_max=output_limits[1],
        )

    def reset(self) -> None:
        """Reset controller state (integral and derivative history)."""
        self._state = self._state.cleared()

    def compute(self, current_value: float, setpoint: float, dt: float) -> float:
        """Compute PID control output.

        Args:
            current_value: Current measured value
            setpoint: Desired value
            dt: Time step [s]

        Returns:
            Control output within the output limits

        Raises:
            ValueError: If dt <= 0; the controller state is left unchanged
        """
        output, self._state = pid_step(self._state, current_value, setpoint, dt)
        return output

    @property
    def state(self) -> PIDState:
        """Snapshot of the controller state."""
        return self._state

    @property
    def integrator(self) -> float:
        """Accumulated error integral."""
        return self._state.integrator

    @property
    def prev_error(self) -> float | None:
        """Error seen on the previous call, None before the first call."""
        return self._state.prev_error

    @property
    def gains(self) -> PIDGains:
        """Get current gains as PIDGains object."""
        return self._state.gains
