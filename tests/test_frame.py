"""Tests for telemetry frames, the wire format and the frame buffer."""

import json

import polars as pl
import pytest

from cmgboat.errors import MalformedFrameError
from cmgboat.telemetry import (
    WIRE_FIELDS,
    TelemetryBuffer,
    TelemetryFrame,
    decode_frame_line,
    encode_frame_line,
)
from cmgboat.telemetry.subscribers import SubscriberList

# =============================================================================
# Frame Validation
# =============================================================================


class TestFromPayload:
    """Test building frames from wire objects."""

    def test_full_payload(self):
        payload = {
            "t": 1.5, "roll": 2.0, "pitch": 0.1, "yaw": -1.0,
            "gyroX": 0.5, "gyroY": 0.0, "gyroZ": -0.2,
            "servoRollAngle": -8.0, "servoYawAngle": 3.0,
            "diskRollRPM": 5990.0, "diskYawRPM": 6010.0,
        }

        frame = TelemetryFrame.from_payload(payload)

        assert frame.t == 1.5
        assert frame.gyro_x == 0.5
        assert frame.servo_roll_angle == -8.0
        assert frame.disk_yaw_rpm == 6010.0
        assert frame.to_dict() == payload

    def test_missing_fields_default_to_zero(self):
        frame = TelemetryFrame.from_payload({"t": 3, "roll": None})

        assert frame.t == 3.0
        assert isinstance(frame.t, float)
        assert frame.roll == 0.0
        assert frame.disk_roll_rpm == 0.0

    def test_unknown_keys_ignored(self):
        frame = TelemetryFrame.from_payload({"t": 1.0, "battery": "low"})

        assert frame == TelemetryFrame(t=1.0)

    @pytest.mark.parametrize(
        "t", [None, "1.0", True, float("nan"), float("inf"), [1.0]]
    )
    def test_invalid_time_rejected(self, t):
        payload = {"roll": 1.0}
        if t is not None:
            payload["t"] = t

        with pytest.raises(MalformedFrameError):
            TelemetryFrame.from_payload(payload)

    def test_non_numeric_field_rejected(self):
        with pytest.raises(MalformedFrameError, match="gyroX"):
            TelemetryFrame.from_payload({"t": 1.0, "gyroX": "fast"})

    @pytest.mark.parametrize(
        "payload",
        [{"t": 10**400}, {"t": 1.0, "roll": 10**400}, {"t": 1.0, "diskYawRPM": -(10**400)}],
    )
    def test_out_of_range_integer_rejected(self, payload):
        with pytest.raises(MalformedFrameError):
            TelemetryFrame.from_payload(payload)

    def test_large_integer_within_float_range(self):
        frame = TelemetryFrame.from_payload({"t": 10**20})

        assert frame.t == 1e20

    def test_with_time(self):
        frame = TelemetryFrame(t=10.0, roll=2.0)

        restamped = frame.with_time(0.5)

        assert restamped.t == 0.5
        assert restamped.roll == 2.0
        assert frame.t == 10.0


# =============================================================================
# Newline-Delimited JSON
# =============================================================================


class TestWireFormat:
    """Test line encoding."""

    def test_encode_line(self):
        line = encode_frame_line(TelemetryFrame(t=0.25, roll=1.0))

        assert line.endswith("\n")
        assert line.count("\n") == 1
        obj = json.loads(line)
        assert obj["t"] == 0.25
        assert obj["servoRollAngle"] == 0.0
        assert set(obj) == set(WIRE_FIELDS.values())

    def test_decode_bytes(self):
        frame = decode_frame_line(b'{"t": 2.0, "yaw": 4.5}\n')

        assert frame.t == 2.0
        assert frame.yaw == 4.5

    def test_decode_invalid_json(self):
        with pytest.raises(MalformedFrameError):
            decode_frame_line("{not json")

    def test_decode_non_object(self):
        with pytest.raises(MalformedFrameError, match="list"):
            decode_frame_line("[1, 2, 3]")


# =============================================================================
# Buffer
# =============================================================================


class TestTelemetryBuffer:
    """Test the bounded FIFO window."""

    def test_oldest_evicted_first(self):
        buffer = TelemetryBuffer(capacity=3)

        for t in [1.0, 2.0, 3.0, 4.0, 5.0]:
            buffer.append(TelemetryFrame(t=t))

        assert [frame.t for frame in buffer] == [3.0, 4.0, 5.0]
        assert len(buffer) == 3

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            TelemetryBuffer(capacity=0)

    def test_latest(self):
        buffer = TelemetryBuffer(capacity=10)
        assert buffer.latest is None

        buffer.extend([TelemetryFrame(t=1.0), TelemetryFrame(t=2.0)])

        assert buffer.latest.t == 2.0

    def test_snapshot_is_copy(self):
        buffer = TelemetryBuffer(capacity=10)
        buffer.append(TelemetryFrame(t=1.0))

        snapshot = buffer.snapshot()
        snapshot.clear()

        assert len(buffer) == 1

    def test_times_and_dataframe(self):
        buffer = TelemetryBuffer(capacity=10)
        buffer.extend([TelemetryFrame(t=0.5, roll=1.0), TelemetryFrame(t=1.0, roll=-1.0)])

        assert buffer.times().tolist() == [0.5, 1.0]
        df = buffer.to_dataframe()
        assert isinstance(df, pl.DataFrame)
        assert df["roll"].to_list() == [1.0, -1.0]
        assert "diskRollRPM" in df.columns

    def test_clear(self):
        buffer = TelemetryBuffer(capacity=10)
        buffer.append(TelemetryFrame(t=1.0))

        buffer.clear()

        assert len(buffer) == 0


# =============================================================================
# Subscribers
# =============================================================================


class TestSubscriberList:
    """Test callback isolation."""

    def test_failing_callback_isolated(self):
        subscribers = SubscriberList("accepted")
        received = []

        def broken(frame):
            raise RuntimeError("display crashed")

        subscribers.add(broken)
        subscribers.add(received.append)

        failures = subscribers.notify(TelemetryFrame(t=1.0))

        assert failures == 1
        assert [frame.t for frame in received] == [1.0]

    def test_callback_may_unsubscribe_itself(self):
        subscribers = SubscriberList("accepted")
        calls = []

        def once(frame):
            calls.append(frame.t)
            subscribers.remove(once)

        subscribers.add(once)
        subscribers.notify(TelemetryFrame(t=1.0))
        subscribers.notify(TelemetryFrame(t=2.0))

        assert calls == [1.0]
        assert len(subscribers) == 0

    def test_remove_unknown(self):
        assert not SubscriberList("ignored").remove(print)
