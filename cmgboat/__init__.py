"""cmgboat - Control-moment-gyro boat stabilization simulation and telemetry.

This package provides a closed-loop simulation of a small vessel whose roll
and yaw are stabilized by two CMGs, and a realtime pipeline that ingests the
same telemetry from hardware through a polling relay.

Example:
    >>> from cmgboat import CMGSimulation
    >>>
    >>> sim = CMGSimulation.from_disturbed_start(roll=5.0, yaw=3.0)
    >>> for _ in range(500):
    ...     sim.step(0.01)
    >>> frame = sim.to_telemetry_frame()
    >>> print(f"Roll: {frame.roll:.2f} deg, gimbal: {frame.servo_roll_angle:.1f} deg")
"""

__version__ = "0.1.0"

# Control
from cmgboat.control import (
    PIDController,
    PIDGains,
    PIDState,
    pid_step,
)

# Dynamics and environment
from cmgboat.dynamics import (
    AxisDynamics,
    BoatState,
    DynamicsIntegrator,
)
from cmgboat.environment import (
    DisturbanceModel,
    SinusoidalDisturbance,
)

# Errors
from cmgboat.errors import (
    MalformedFrameError,
    TelemetryError,
    TransportError,
)

# Simulation
from cmgboat.simulation import (
    CMGSimulation,
    FixedStepRunner,
    SimulationConfig,
    SimulationLoop,
    SimulationResult,
)

# Telemetry
from cmgboat.telemetry import (
    IngestionConfig,
    TelemetryBuffer,
    TelemetryFrame,
    TelemetryIngestionPipeline,
    TelemetryMode,
    TelemetryRecorder,
    create_telemetry_source,
)

__all__ = [
    # Control
    "PIDController",
    "PIDGains",
    "PIDState",
    "pid_step",
    # Dynamics and environment
    "AxisDynamics",
    "BoatState",
    "DynamicsIntegrator",
    "DisturbanceModel",
    "SinusoidalDisturbance",
    # Errors
    "MalformedFrameError",
    "TelemetryError",
    "TransportError",
    # Simulation
    "CMGSimulation",
    "FixedStepRunner",
    "SimulationConfig",
    "SimulationLoop",
    "SimulationResult",
    # Telemetry
    "IngestionConfig",
    "TelemetryBuffer",
    "TelemetryFrame",
    "TelemetryIngestionPipeline",
    "TelemetryMode",
    "TelemetryRecorder",
    "create_telemetry_source",
]
