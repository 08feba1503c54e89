"""Damped-spring rotational dynamics for the roll and yaw axes.

Each axis is modeled independently as

    rate_dot = -damping * rate - stiffness * angle + control_torque + disturbance

and advanced with explicit (semi-implicit) Euler integration: the rate is
updated first and the new rate is used to update the angle.

Example:
    >>> from cmgboat.dynamics import AxisDynamics, DynamicsIntegrator
    >>>
    >>> integrator = DynamicsIntegrator(
    ...     roll=AxisDynamics(damping=0.5, stiffness=0.1),
    ...     yaw=AxisDynamics(damping=0.4, stiffness=0.08),
    ... )
    >>> integrator.step(state, roll_torque=1.2, yaw_torque=-0.4,
    ...                 roll_disturbance=0.0, yaw_disturbance=0.0, dt=0.01)
"""

from dataclasses import dataclass

from numba import njit

from cmgboat.dynamics.state import BoatState
from cmgboat.typecheck import beartype

# =============================================================================
# Numba-Optimized Kernels
# =============================================================================


@njit(cache=True, fastmath=True)
def _rate_derivative(
    angle: float, rate: float,
    damping: float, stiffness: float,
    torque: float, disturbance: float,
) -> float:
    """Angular acceleration of one axis."""
    return -damping * rate - stiffness * angle + torque + disturbance


@njit(cache=True, fastmath=True)
def _euler_axis_step(
    angle: float, rate: float,
    damping: float, stiffness: float,
    torque: float, disturbance: float,
    dt: float,
) -> tuple[float, float]:
    """One Euler step of one axis, returns (angle, rate)."""
    rate_dot = _rate_derivative(angle, rate, damping, stiffness, torque, disturbance)
    new_rate = rate + rate_dot * dt
    new_angle = angle + new_rate * dt
    return new_angle, new_rate


@beartype
def euler_axis_step(
    angle: float,
    rate: float,
    damping: float,
    stiffness: float,
    torque: float,
    disturbance: float,
    dt: float,
) -> tuple[float, float]:
    """Advance one axis by one Euler step.

    Args:
        angle: Axis angle [deg]
        rate: Axis rate [deg/s]
        damping: Damping coefficient [1/s]
        stiffness: Stiffness coefficient [1/s^2]
        torque: Control torque [deg/s^2]
        disturbance: Disturbance forcing [deg/s^2]
        dt: Time step [s]

    Returns:
        (new_angle, new_rate)
    """
    new_angle, new_rate = _euler_axis_step(
        angle, rate, damping, stiffness, torque, disturbance, dt
    )
    return float(new_angle), float(new_rate)


# =============================================================================
# Integrator
# =============================================================================


@beartype
@dataclass(frozen=True)
class AxisDynamics:
    """Second-order parameters of one rotational axis.

    Attributes:
        damping: Damping coefficient c [1/s]
        stiffness: Restoring stiffness k [1/s^2]
    """
    damping: float
    stiffness: float

    def rate_derivative(self, angle: float, rate: float, torque: float, disturbance: float) -> float:
        """Angular acceleration [deg/s^2]."""
        return float(_rate_derivative(angle, rate, self.damping, self.stiffness, torque, disturbance))


@beartype
@dataclass(frozen=True)
class DynamicsIntegrator:
    """Explicit Euler integrator for the roll and yaw axes."""
    roll: AxisDynamics
    yaw: AxisDynamics

    def step(
        self,
        state: BoatState,
        roll_torque: float,
        yaw_torque: float,
        roll_disturbance: float,
        yaw_disturbance: float,
        dt: float,
    ) -> None:
        """Advance roll and yaw of state in place by dt.

        Only the angle and rate fields are touched; time, servo angles and
        disk speeds are left to the caller.
        """
        state.roll, state.roll_rate = euler_axis_step(
            state.roll, state.roll_rate,
            self.roll.damping, self.roll.stiffness,
            roll_torque, roll_disturbance, dt,
        )
        state.yaw, state.yaw_rate = euler_axis_step(
            state.yaw, state.yaw_rate,
            self.yaw.damping, self.yaw.stiffness,
            yaw_torque, yaw_disturbance, dt,
        )
