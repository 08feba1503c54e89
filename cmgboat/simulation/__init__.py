"""Simulation module for the CMG boat stabilization loop.

Provides the step-driven simulator and the fixed-rate drivers that feed it
wall-clock time.

Example:
    >>> from cmgboat.simulation import CMGSimulation, FixedStepRunner
    >>>
    >>> runner = FixedStepRunner(CMGSimulation.from_disturbed_start(roll=5.0, yaw=3.0))
    >>> result = runner.run(duration_s=20.0)
    >>> print(f"RMS roll: {result.rms_roll:.2f} deg")
"""

from cmgboat.simulation.runner import (
    FixedStepRunner,
    SimulationLoop,
)
from cmgboat.simulation.simulator import (
    CMGSimulation,
    SimulationConfig,
    SimulationResult,
)

__all__ = [
    "CMGSimulation",
    "FixedStepRunner",
    "SimulationConfig",
    "SimulationLoop",
    "SimulationResult",
]
