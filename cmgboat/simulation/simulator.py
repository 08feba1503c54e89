"""Step-driven CMG boat stabilization simulation.

The simulator owns the boat's truth state and one PID controller per
stabilized axis (roll and yaw). Each step it:

1. Evaluates the wave disturbance at the current time
2. Runs each PID with the current angle as measurement and setpoint 0
3. Converts the gimbal commands to control torques
4. Integrates the damped-spring dynamics with explicit Euler
5. Reports the gimbal commands as servo angles
6. Samples new flywheel speeds (base speed plus bounded noise)
7. Advances time

Example:
    >>> from cmgboat.simulation import CMGSimulation
    >>>
    >>> sim = CMGSimulation.from_disturbed_start(roll=5.0, yaw=3.0)
    >>> for _ in range(1000):  # 10 seconds at 100 Hz
    ...     sim.step(0.01)
    >>> frame = sim.to_telemetry_frame()
"""

import math
from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

import numpy as np
import polars as pl
from numpy.typing import NDArray

from cmgboat.control.pid import PIDController, PIDGains
from cmgboat.dynamics.integrator import AxisDynamics, DynamicsIntegrator
from cmgboat.dynamics.state import DEFAULT_BASE_RPM, BoatState
from cmgboat.environment.disturbance import DisturbanceModel
from cmgboat.telemetry.frame import TelemetryFrame
from cmgboat.typecheck import beartype

# =============================================================================
# Configuration
# =============================================================================


@beartype
@dataclass(frozen=True)
class SimulationConfig:
    """Simulation tuning parameters.

    Attributes:
        roll_damping: Roll damping coefficient c_R [1/s]
        roll_stiffness: Roll stiffness coefficient k_R [1/s^2]
        yaw_damping: Yaw damping coefficient c_Y [1/s]
        yaw_stiffness: Yaw stiffness coefficient k_Y [1/s^2]
        roll_control_gain: Roll torque per degree of gimbal angle
        yaw_control_gain: Yaw torque per degree of gimbal angle
        roll_pid: Roll controller gains
        yaw_pid: Yaw controller gains
        servo_angle_min: Minimum gimbal deflection [deg]
        servo_angle_max: Maximum gimbal deflection [deg]
        base_rpm: Nominal flywheel speed for both disks [RPM]
        rpm_noise: Peak-to-peak flywheel speed noise [RPM]
        disturbance: Wave forcing model
    """
    roll_damping: float = 0.5
    roll_stiffness: float = 0.1
    yaw_damping: float = 0.4
    yaw_stiffness: float = 0.08
    roll_control_gain: float = 0.3
    yaw_control_gain: float = 0.25
    roll_pid: PIDGains = field(default_factory=lambda: PIDGains(kp=4.0, ki=1.0, kd=2.5))
    yaw_pid: PIDGains = field(default_factory=lambda: PIDGains(kp=3.5, ki=0.8, kd=2.0))
    servo_angle_min: float = -30.0
    servo_angle_max: float = 30.0
    base_rpm: float = DEFAULT_BASE_RPM
    rpm_noise: float = 50.0
    disturbance: DisturbanceModel = field(default_factory=DisturbanceModel)

    def __post_init__(self) -> None:
        if self.servo_angle_min > self.servo_angle_max:
            raise ValueError(
                f"servo_angle_min ({self.servo_angle_min}) must not exceed "
                f"servo_angle_max ({self.servo_angle_max})"
            )
        if self.rpm_noise < 0:
            raise ValueError(f"rpm_noise must be non-negative, got {self.rpm_noise}")

    def with_overrides(self, **overrides: Any) -> "SimulationConfig":
        """Copy of this config with the given parameters replaced.

        PID gains may be given as a PIDGains or as a mapping of the gains
        to change (e.g. ``roll_pid={"kp": 5.0}``); numeric values are
        converted to float.

        Raises:
            ValueError: If an override names an unknown parameter
        """
        known = set(self.__dataclass_fields__)
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ValueError(f"Unknown SimulationConfig parameters: {', '.join(unknown)}")

        merged: dict[str, Any] = {}
        for name, value in overrides.items():
            if name in ("roll_pid", "yaw_pid") and isinstance(value, Mapping):
                value = replace(getattr(self, name), **{k: float(v) for k, v in value.items()})
            elif isinstance(value, (int, float)) and not isinstance(value, bool):
                value = float(value)
            merged[name] = value
        return replace(self, **merged)


# =============================================================================
# Simulator
# =============================================================================


@beartype
@dataclass
class CMGSimulation:
    """Step-driven two-axis CMG stabilization simulator.

    Maintains the boat state and the per-axis PID controllers. An external
    timer drives the simulation by calling ``step``.

    Attributes:
        config: Tuning parameters, fixed for the lifetime of the simulator
        initial_state: BoatState field overrides applied at construction
        seed: Seed for the flywheel speed noise generator
        history_size: Number of frames kept by the history (0 disables it)
    """
    config: SimulationConfig = field(default_factory=SimulationConfig)
    initial_state: Mapping[str, Any] = field(default_factory=dict)
    seed: int | None = None
    history_size: int = 0

    # Internal
    _state: BoatState = field(init=False, repr=False)
    _roll_pid: PIDController = field(init=False, repr=False)
    _yaw_pid: PIDController = field(init=False, repr=False)
    _integrator: DynamicsIntegrator = field(init=False, repr=False)
    _rng: np.random.Generator = field(init=False, repr=False)
    _history: deque = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Initialize controllers, dynamics and state."""
        if self.history_size < 0:
            raise ValueError(f"history_size must be non-negative, got {self.history_size}")

        limits = (self.config.servo_angle_min, self.config.servo_angle_max)
        self._roll_pid = PIDController.from_gains(self.config.roll_pid, limits)
        self._yaw_pid = PIDController.from_gains(self.config.yaw_pid, limits)
        self._integrator = DynamicsIntegrator(
            roll=AxisDynamics(self.config.roll_damping, self.config.roll_stiffness),
            yaw=AxisDynamics(self.config.yaw_damping, self.config.yaw_stiffness),
        )
        self._rng = np.random.default_rng(self.seed)
        self._history = deque(maxlen=self.history_size or None)
        self._state = BoatState.initial(self.config.base_rpm, **self.initial_state)
        if self.history_size:
            self._history.append(self.to_telemetry_frame())

    @classmethod
    def from_overrides(
        cls,
        initial_state: Mapping[str, Any] | None = None,
        config: Mapping[str, Any] | None = None,
        seed: int | None = None,
        history_size: int = 0,
    ) -> "CMGSimulation":
        """Create simulator from partial state and partial config.

        Args:
            initial_state: BoatState fields to seed (e.g. {"roll": 5.0})
            config: SimulationConfig parameters merged over the defaults
            seed: Seed for the flywheel speed noise
            history_size: Frames of history to keep
        """
        return cls(
            config=SimulationConfig().with_overrides(**(config or {})),
            initial_state=dict(initial_state or {}),
            seed=seed,
            history_size=history_size,
        )

    @classmethod
    def from_disturbed_start(
        cls,
        roll: float = 5.0,
        yaw: float = 3.0,
        config: SimulationConfig | None = None,
        seed: int | None = None,
        history_size: int = 0,
    ) -> "CMGSimulation":
        """Create simulator with the boat initially heeled and turned.

        Args:
            roll: Initial roll angle [deg]
            yaw: Initial yaw angle [deg]
            config: Simulation configuration
            seed: Seed for the flywheel speed noise
            history_size: Frames of history to keep
        """
        return cls(
            config=config or SimulationConfig(),
            initial_state={"roll": roll, "yaw": yaw},
            seed=seed,
            history_size=history_size,
        )

    def get_state(self) -> BoatState:
        """Get current state.

        Returns a copy to prevent external modification.
        """
        return self._state.copy()

    def reset(self, **initial_state: Any) -> None:
        """Reinitialize the state and both controllers.

        Args:
            **initial_state: BoatState fields merged over the zeroed defaults

        Raises:
            ValueError: If an override names an unknown field
        """
        self._state = BoatState.initial(self.config.base_rpm, **initial_state)
        self._roll_pid.reset()
        self._yaw_pid.reset()
        self.clear_history()

    def set_attitude(self, roll: float, pitch: float, yaw: float) -> None:
        """Override the attitude directly (manual control).

        Angular rates are discarded along with the old attitude.

        Args:
            roll: Roll angle [deg]
            pitch: Pitch angle [deg]
            yaw: Yaw angle [deg]
        """
        self._state.roll = float(roll)
        self._state.pitch = float(pitch)
        self._state.yaw = float(yaw)
        self._state.roll_rate = 0.0
        self._state.yaw_rate = 0.0

    def step(self, dt: float) -> BoatState:
        """Propagate the closed loop by one time step.

        Args:
            dt: Time step [s]

        Returns:
            Copy of the state after the step

        Raises:
            ValueError: If dt is not positive and finite; nothing is changed
        """
        if not (dt > 0 and math.isfinite(dt)):
            raise ValueError(f"dt must be positive and finite, got {dt}")

        state = self._state
        roll_disturbance, yaw_disturbance = self.config.disturbance.at(state.t)

        # Hold attitude at zero
        servo_roll = self._roll_pid.compute(state.roll, 0.0, dt)
        servo_yaw = self._yaw_pid.compute(state.yaw, 0.0, dt)

        # Torque proportional to gimbal angle
        roll_torque = self.config.roll_control_gain * servo_roll
        yaw_torque = self.config.yaw_control_gain * servo_yaw

        self._integrator.step(
            state,
            roll_torque=roll_torque,
            yaw_torque=yaw_torque,
            roll_disturbance=roll_disturbance,
            yaw_disturbance=yaw_disturbance,
            dt=dt,
        )

        state.servo_roll_angle = servo_roll
        state.servo_yaw_angle = servo_yaw
        state.disk_roll_rpm = self._sample_disk_rpm()
        state.disk_yaw_rpm = self._sample_disk_rpm()
        state.t += dt

        if self.history_size:
            self._history.append(self.to_telemetry_frame())

        return state.copy()

    def _sample_disk_rpm(self) -> float:
        """Flywheel speed: base speed plus uniform noise in +/- rpm_noise/2."""
        return float(self.config.base_rpm + (self._rng.random() - 0.5) * self.config.rpm_noise)

    def to_telemetry_frame(self) -> TelemetryFrame:
        """Current state as a telemetry frame.

        Pitch has no dynamic model, so gyro_y is always reported as 0.
        """
        state = self._state
        return TelemetryFrame(
            t=state.t,
            roll=state.roll,
            pitch=state.pitch,
            yaw=state.yaw,
            gyro_x=state.roll_rate,
            gyro_y=0.0,
            gyro_z=state.yaw_rate,
            servo_roll_angle=state.servo_roll_angle,
            servo_yaw_angle=state.servo_yaw_angle,
            disk_roll_rpm=state.disk_roll_rpm,
            disk_yaw_rpm=state.disk_yaw_rpm,
        )

    def get_history(self) -> list[TelemetryFrame]:
        """Get recorded frame history (oldest first)."""
        return list(self._history)

    def clear_history(self) -> None:
        """Clear recorded history, keeping the current frame."""
        self._history.clear()
        if self.history_size:
            self._history.append(self.to_telemetry_frame())

    @property
    def time(self) -> float:
        """Current simulation time [s]."""
        return self._state.t


# =============================================================================
# Results and Analysis
# =============================================================================


@beartype
@dataclass
class SimulationResult:
    """Frames from a simulation run.

    Provides convenient access to the time histories and simple
    stabilization metrics.
    """
    frames: list[TelemetryFrame]

    def _column(self, name: str) -> NDArray[np.float64]:
        return np.array([getattr(frame, name) for frame in self.frames], dtype=np.float64)

    @property
    def time(self) -> NDArray[np.float64]:
        """Time array [s]."""
        return self._column("t")

    @property
    def roll(self) -> NDArray[np.float64]:
        """Roll history [deg]."""
        return self._column("roll")

    @property
    def yaw(self) -> NDArray[np.float64]:
        """Yaw history [deg]."""
        return self._column("yaw")

    @property
    def servo_roll_angle(self) -> NDArray[np.float64]:
        """Roll gimbal history [deg]."""
        return self._column("servo_roll_angle")

    @property
    def servo_yaw_angle(self) -> NDArray[np.float64]:
        """Yaw gimbal history [deg]."""
        return self._column("servo_yaw_angle")

    @property
    def rms_roll(self) -> float:
        """Root-mean-square roll angle [deg]."""
        return float(np.sqrt(np.mean(self.roll**2))) if self.frames else 0.0

    @property
    def rms_yaw(self) -> float:
        """Root-mean-square yaw angle [deg]."""
        return float(np.sqrt(np.mean(self.yaw**2))) if self.frames else 0.0

    @property
    def peak_servo_angle(self) -> float:
        """Largest gimbal deflection on either axis [deg]."""
        if not self.frames:
            return 0.0
        return float(max(np.max(np.abs(self.servo_roll_angle)), np.max(np.abs(self.servo_yaw_angle))))

    @classmethod
    def from_simulator(cls, sim: CMGSimulation) -> "SimulationResult":
        """Create result from simulator history."""
        return cls(frames=sim.get_history())

    def to_dataframe(self) -> pl.DataFrame:
        """Convert to Polars DataFrame, one row per frame."""
        return pl.DataFrame([frame.to_dict() for frame in self.frames])
