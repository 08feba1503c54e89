"""Dynamics module for the two-axis boat model.

Provides the boat state and the damped-spring Euler integrator for the
roll and yaw axes.

Example:
    >>> from cmgboat.dynamics import AxisDynamics, BoatState, DynamicsIntegrator
    >>>
    >>> state = BoatState.initial(roll=5.0)
    >>> integrator = DynamicsIntegrator(
    ...     roll=AxisDynamics(damping=0.5, stiffness=0.1),
    ...     yaw=AxisDynamics(damping=0.4, stiffness=0.08),
    ... )
"""

from cmgboat.dynamics.integrator import (
    AxisDynamics,
    DynamicsIntegrator,
    euler_axis_step,
)
from cmgboat.dynamics.state import (
    DEFAULT_BASE_RPM,
    BoatState,
)

__all__ = [
    # State
    "BoatState",
    "DEFAULT_BASE_RPM",
    # Integration
    "AxisDynamics",
    "DynamicsIntegrator",
    "euler_axis_step",
]
