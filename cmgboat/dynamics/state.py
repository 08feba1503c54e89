"""Boat state for the two-axis CMG simulation.

The state holds:
- Time [s]
- Roll angle and rate [deg, deg/s] (dynamically modeled)
- Yaw angle and rate [deg, deg/s] (dynamically modeled)
- Pitch angle [deg] (not modeled, settable only by manual override)
- Gimbal (servo) angles of the roll and yaw CMGs [deg]
- Flywheel speeds of the roll and yaw CMGs [RPM]
"""

from dataclasses import asdict, dataclass, fields, replace
from typing import Any

from cmgboat.typecheck import beartype

DEFAULT_BASE_RPM = 6000.0


@beartype
@dataclass
class BoatState:
    """Mutable simulation state owned by one simulator.

    Attributes:
        t: Simulation time [s]
        roll: Roll angle [deg]
        roll_rate: Roll rate [deg/s]
        pitch: Pitch angle [deg]
        yaw: Yaw angle [deg]
        yaw_rate: Yaw rate [deg/s]
        servo_roll_angle: Roll CMG gimbal angle [deg]
        servo_yaw_angle: Yaw CMG gimbal angle [deg]
        disk_roll_rpm: Roll CMG flywheel speed [RPM]
        disk_yaw_rpm: Yaw CMG flywheel speed [RPM]
    """
    t: float = 0.0
    roll: float = 0.0
    roll_rate: float = 0.0
    pitch: float = 0.0
    yaw: float = 0.0
    yaw_rate: float = 0.0
    servo_roll_angle: float = 0.0
    servo_yaw_angle: float = 0.0
    disk_roll_rpm: float = DEFAULT_BASE_RPM
    disk_yaw_rpm: float = DEFAULT_BASE_RPM

    @classmethod
    def initial(cls, base_rpm: float = DEFAULT_BASE_RPM, **overrides: Any) -> "BoatState":
        """Zeroed state at rest with both disks at base speed, then overrides applied.

        Args:
            base_rpm: Flywheel speed used for both disks [RPM]
            **overrides: Field values replacing the defaults (e.g. roll=5.0)

        Raises:
            ValueError: If an override names an unknown field
        """
        state = cls(disk_roll_rpm=base_rpm, disk_yaw_rpm=base_rpm)
        return state.with_overrides(**overrides)

    def with_overrides(self, **overrides: Any) -> "BoatState":
        """Copy of this state with the given fields replaced."""
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ValueError(f"Unknown BoatState fields: {', '.join(unknown)}")
        return replace(self, **{name: float(value) for name, value in overrides.items()})

    def copy(self) -> "BoatState":
        """Create a copy of this state."""
        return replace(self)

    def to_dict(self) -> dict[str, float]:
        """State as a plain dictionary."""
        return asdict(self)
