"""Control algorithms for CMG stabilization.

Provides the PID law that turns attitude error into a gimbal command.
"""

from cmgboat.control.pid import (
    INTEGRATOR_EPSILON,
    PIDController,
    PIDGains,
    PIDState,
    pid_step,
)

__all__ = [
    "INTEGRATOR_EPSILON",
    "PIDController",
    "PIDGains",
    "PIDState",
    "pid_step",
]
