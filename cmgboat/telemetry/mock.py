"""Synthetic telemetry for playback mode.

Generates a plausible recording without running the closed loop:

- Roll and yaw oscillate as sinusoids (periods ~4 s and ~6 s)
- Pitch is small with noise
- Gyro rates are the analytic derivatives plus noise
- Servo commands oppose the motion (proportional, gain 0.8) with noise
- Disk speeds are nearly constant with small noise
"""

from dataclasses import dataclass, field

import numpy as np

from cmgboat.telemetry.frame import TelemetryFrame
from cmgboat.telemetry.subscribers import FrameCallback, SubscriberList
from cmgboat.typecheck import beartype

ROLL_AMPLITUDE = 5.0     # [deg]
ROLL_FREQUENCY = 0.25    # [Hz]
YAW_AMPLITUDE = 3.0      # [deg]
YAW_FREQUENCY = 0.167    # [Hz]
PITCH_AMPLITUDE = 0.5    # [deg]
PITCH_FREQUENCY = 0.1    # [Hz]
SERVO_GAIN = 0.8
MOCK_BASE_RPM = 3000.0
MOCK_RPM_NOISE = 50.0


@beartype
def generate_mock_telemetry(
    duration_s: float = 30.0,
    sample_rate_hz: float = 10.0,
    seed: int | None = None,
) -> list[TelemetryFrame]:
    """Generate a synthetic recording.

    Args:
        duration_s: Length of the recording [s]
        sample_rate_hz: Sample rate [Hz]
        seed: Seed for the noise generator

    Returns:
        floor(duration_s * sample_rate_hz) frames starting at t=0
    """
    if sample_rate_hz <= 0:
        raise ValueError(f"sample_rate_hz must be positive, got {sample_rate_hz}")

    rng = np.random.default_rng(seed)
    n = int(np.floor(duration_s * sample_rate_hz))
    t = np.arange(n) / sample_rate_hz

    def noise(amplitude: float) -> np.ndarray:
        return (rng.random(n) - 0.5) * amplitude

    w_roll = 2 * np.pi * ROLL_FREQUENCY
    w_yaw = 2 * np.pi * YAW_FREQUENCY
    w_pitch = 2 * np.pi * PITCH_FREQUENCY

    roll = ROLL_AMPLITUDE * np.sin(w_roll * t)
    yaw = YAW_AMPLITUDE * np.sin(w_yaw * t + np.pi / 4)
    pitch = PITCH_AMPLITUDE * np.sin(w_pitch * t) + noise(0.5)

    gyro_x = w_roll * ROLL_AMPLITUDE * np.cos(w_roll * t) + noise(2.0)
    gyro_y = w_pitch * PITCH_AMPLITUDE * np.cos(w_pitch * t) + noise(1.0)
    gyro_z = w_yaw * YAW_AMPLITUDE * np.cos(w_yaw * t + np.pi / 4) + noise(1.5)

    servo_roll = -roll * SERVO_GAIN + noise(1.0)
    servo_yaw = -yaw * SERVO_GAIN + noise(1.0)

    disk_roll = MOCK_BASE_RPM + noise(MOCK_RPM_NOISE)
    disk_yaw = MOCK_BASE_RPM + noise(MOCK_RPM_NOISE)

    return [
        TelemetryFrame(
            t=float(t[i]),
            roll=float(roll[i]),
            pitch=float(pitch[i]),
            yaw=float(yaw[i]),
            gyro_x=float(gyro_x[i]),
            gyro_y=float(gyro_y[i]),
            gyro_z=float(gyro_z[i]),
            servo_roll_angle=float(servo_roll[i]),
            servo_yaw_angle=float(servo_yaw[i]),
            disk_roll_rpm=float(disk_roll[i]),
            disk_yaw_rpm=float(disk_yaw[i]),
        )
        for i in range(n)
    ]


@beartype
@dataclass
class MockTelemetrySource:
    """Playback source serving a fixed recording.

    Implements the ``TelemetrySource`` capability interface. The recording
    is available up front, so no live frames are ever delivered.
    """
    frames: list[TelemetryFrame] = field(default_factory=generate_mock_telemetry)

    _accepted: SubscriberList = field(init=False, repr=False)
    _ignored: SubscriberList = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._accepted = SubscriberList("accepted")
        self._ignored = SubscriberList("ignored")

    def get_initial_data(self) -> list[TelemetryFrame]:
        return list(self.frames)

    def subscribe_accepted(self, callback: FrameCallback) -> None:
        self._accepted.add(callback)

    def subscribe_ignored(self, callback: FrameCallback) -> None:
        self._ignored.add(callback)

    def unsubscribe_accepted(self, callback: FrameCallback) -> bool:
        return self._accepted.remove(callback)

    def unsubscribe_ignored(self, callback: FrameCallback) -> bool:
        return self._ignored.remove(callback)

    def disconnect(self) -> None:
        self._accepted.clear()
        self._ignored.clear()
