"""Telemetry frame record shared by the simulator and the ingestion pipeline.

A frame is one sample of the boat's IMU and CMG state:

- Angles in degrees
- Gyro rates in degrees per second
- Disk speeds in revolutions per minute

On the wire a frame is a JSON object with camelCase keys; in Python the
fields are snake_case. ``WIRE_FIELDS`` maps one to the other.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from numbers import Real
from typing import Any

from cmgboat.errors import MalformedFrameError
from cmgboat.typecheck import beartype

# Python attribute name -> wire (JSON) key
WIRE_FIELDS: dict[str, str] = {
    "t": "t",
    "roll": "roll",
    "pitch": "pitch",
    "yaw": "yaw",
    "gyro_x": "gyroX",
    "gyro_y": "gyroY",
    "gyro_z": "gyroZ",
    "servo_roll_angle": "servoRollAngle",
    "servo_yaw_angle": "servoYawAngle",
    "disk_roll_rpm": "diskRollRPM",
    "disk_yaw_rpm": "diskYawRPM",
}


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


@beartype
@dataclass(frozen=True)
class TelemetryFrame:
    """One telemetry sample.

    Attributes:
        t: Time [s], simulation or source clock
        roll: Roll angle [deg]
        pitch: Pitch angle [deg]
        yaw: Yaw angle [deg]
        gyro_x: Roll rate [deg/s]
        gyro_y: Pitch rate [deg/s]
        gyro_z: Yaw rate [deg/s]
        servo_roll_angle: Roll CMG gimbal command [deg]
        servo_yaw_angle: Yaw CMG gimbal command [deg]
        disk_roll_rpm: Roll CMG flywheel speed [RPM]
        disk_yaw_rpm: Yaw CMG flywheel speed [RPM]
    """
    t: float
    roll: float = 0.0
    pitch: float = 0.0
    yaw: float = 0.0
    gyro_x: float = 0.0
    gyro_y: float = 0.0
    gyro_z: float = 0.0
    servo_roll_angle: float = 0.0
    servo_yaw_angle: float = 0.0
    disk_roll_rpm: float = 0.0
    disk_yaw_rpm: float = 0.0

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TelemetryFrame":
        """Build a frame from a decoded wire object.

        The payload must carry a finite numeric ``t``. Every other field
        defaults to 0 when absent or null. Unknown keys are ignored.

        Raises:
            MalformedFrameError: If ``t`` is missing, non-numeric or not
                finite, or a field is non-numeric or out of float range
        """
        t = payload.get("t")
        if not _is_number(t):
            raise MalformedFrameError(f"Frame needs a finite numeric 't', got {t!r}")

        values: dict[str, float] = {}
        for name, key in WIRE_FIELDS.items():
            value = payload.get(key)
            if value is None:
                values[name] = 0.0
                continue
            if not _is_number(value):
                raise MalformedFrameError(f"Field '{key}' is not numeric: {value!r}")
            try:
                values[name] = float(value)
            except OverflowError as e:
                raise MalformedFrameError(f"Field '{key}' is out of range") from e

        if not math.isfinite(values["t"]):
            raise MalformedFrameError(f"Frame needs a finite numeric 't', got {t!r}")
        return cls(**values)

    def to_dict(self) -> dict[str, float]:
        """Frame as a wire object (camelCase keys)."""
        return {WIRE_FIELDS[f.name]: getattr(self, f.name) for f in fields(self)}

    def with_time(self, t: float) -> "TelemetryFrame":
        """Copy of this frame stamped with a different time."""
        return replace(self, t=float(t))
