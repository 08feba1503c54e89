"""Tests for telemetry sources: HTTP transport, playback and mode selection."""

import asyncio

import numpy as np
import pytest
import requests

from cmgboat.errors import TransportError
from cmgboat.telemetry import (
    FrameSource,
    HttpFrameSource,
    IngestionConfig,
    MockTelemetrySource,
    TelemetryFrame,
    TelemetryIngestionPipeline,
    TelemetryMode,
    TelemetrySource,
    create_telemetry_source,
    generate_mock_telemetry,
    split_snapshot,
)

from conftest import FakeFrameSource

# =============================================================================
# Fake HTTP Session
# =============================================================================


class FakeResponse:
    def __init__(self, status_code, body=None, reason="OK"):
        self.status_code = status_code
        self.body = body
        self.reason = reason

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if isinstance(self.body, Exception):
            raise self.body
        return self.body


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []
        self.closed = False

    def get(self, url, timeout=None):
        self.requests.append((url, timeout))
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


def fetch(source):
    return asyncio.run(source.fetch())


# =============================================================================
# Configuration
# =============================================================================


class TestIngestionConfig:
    """Test ingestion settings."""

    def test_defaults(self):
        config = IngestionConfig()

        assert config.url == "http://localhost:3001/api/telemetry"
        assert config.polling_interval_ms == 100
        assert config.polling_interval_s == 0.1
        assert config.use_local_time is False
        assert config.buffer_capacity == 3000

    def test_from_mapping_aliases(self):
        config = IngestionConfig.from_mapping(
            {"apiUrl": "http://relay:8080/api/", "pollingInterval": 50, "useLocalTime": True}
        )

        assert config.url == "http://relay:8080/api/telemetry"
        assert config.polling_interval_ms == 50
        assert config.use_local_time is True

    def test_from_mapping_unknown(self):
        with pytest.raises(ValueError, match="refreshRate"):
            IngestionConfig.from_mapping({"refreshRate": 10})

    @pytest.mark.parametrize(
        "overrides",
        [{"polling_interval_ms": 0}, {"buffer_capacity": 0}, {"request_timeout_s": -1.0}],
    )
    def test_invalid_values(self, overrides):
        with pytest.raises(ValueError):
            IngestionConfig(**overrides)


# =============================================================================
# HTTP Transport
# =============================================================================


class TestHttpFrameSource:
    """Test response handling of the polling transport."""

    @pytest.fixture
    def config(self):
        return IngestionConfig(api_url="http://relay:3001/api", request_timeout_s=1.5)

    def test_success(self, config):
        body = {"t": 1.0, "roll": 2.0, "serverTimestamp": 17}
        session = FakeSession(FakeResponse(200, body))

        assert fetch(HttpFrameSource(config, session=session)) == body
        assert session.requests == [("http://relay:3001/api/telemetry", 1.5)]

    def test_no_content(self, config):
        session = FakeSession(FakeResponse(204, reason="No Content"))

        assert fetch(HttpFrameSource(config, session=session)) is None

    def test_http_error(self, config):
        session = FakeSession(FakeResponse(500, reason="Internal Server Error"))

        with pytest.raises(TransportError) as exc_info:
            fetch(HttpFrameSource(config, session=session))

        assert exc_info.value.status_code == 500
        assert "500" in str(exc_info.value)

    def test_invalid_json(self, config):
        session = FakeSession(FakeResponse(200, ValueError("Expecting value")))

        with pytest.raises(TransportError, match="Invalid JSON"):
            fetch(HttpFrameSource(config, session=session))

    def test_connection_error(self, config):
        session = FakeSession(error=requests.exceptions.ConnectionError("refused"))

        with pytest.raises(TransportError) as exc_info:
            fetch(HttpFrameSource(config, session=session))

        assert exc_info.value.status_code is None

    def test_timeout(self, config):
        session = FakeSession(error=requests.exceptions.Timeout())

        with pytest.raises(TransportError, match="timed out"):
            fetch(HttpFrameSource(config, session=session))

    def test_close(self, config):
        session = FakeSession()

        HttpFrameSource(config, session=session).close()

        assert session.closed

    def test_satisfies_protocol(self, config):
        assert isinstance(HttpFrameSource(config, session=FakeSession()), FrameSource)


class TestSplitSnapshot:
    def test_tag_removed(self):
        body = {"t": 1.0, "serverTimestamp": 99}

        tag, payload = split_snapshot(body, "serverTimestamp")

        assert tag == 99
        assert payload == {"t": 1.0}
        assert "serverTimestamp" in body

    def test_no_tag(self):
        assert split_snapshot({"t": 1.0}, "serverTimestamp") == (None, {"t": 1.0})


# =============================================================================
# Playback
# =============================================================================


class TestMockTelemetry:
    """Test the synthetic recording."""

    def test_frame_count_and_spacing(self):
        frames = generate_mock_telemetry(duration_s=2.0, sample_rate_hz=10.0, seed=0)

        assert len(frames) == 20
        assert frames[0].t == 0.0
        np.testing.assert_allclose(np.diff([f.t for f in frames]), 0.1)

    def test_default_length(self):
        assert len(generate_mock_telemetry(seed=0)) == 300

    def test_seed_reproducible(self):
        a = generate_mock_telemetry(duration_s=1.0, seed=5)
        b = generate_mock_telemetry(duration_s=1.0, seed=5)

        assert a == b

    def test_signal_shape(self):
        frames = generate_mock_telemetry(duration_s=30.0, seed=1)
        roll = np.array([f.roll for f in frames])
        servo = np.array([f.servo_roll_angle for f in frames])
        disks = np.array([f.disk_roll_rpm for f in frames])

        assert np.max(np.abs(roll)) <= 5.0
        assert np.corrcoef(roll, servo)[0, 1] < -0.9
        assert np.all((disks >= 2975.0) & (disks <= 3025.0))

    def test_source_interface(self):
        frames = generate_mock_telemetry(duration_s=1.0, seed=0)
        source = MockTelemetrySource(frames=frames)
        source.subscribe_accepted(print)

        assert isinstance(source, TelemetrySource)
        assert source.get_initial_data() == frames
        assert source.get_initial_data() is not frames

        source.disconnect()
        assert not source.unsubscribe_accepted(print)


# =============================================================================
# Mode Selection
# =============================================================================


class TestCreateTelemetrySource:
    """Test the mode factory."""

    def test_playback(self):
        recording = [TelemetryFrame(t=0.0), TelemetryFrame(t=0.1)]

        source = create_telemetry_source(TelemetryMode.PLAYBACK, recording=recording)

        assert isinstance(source, MockTelemetrySource)
        assert source.get_initial_data() == recording

    def test_realtime_from_string(self):
        frame_source = FakeFrameSource()
        config = IngestionConfig(polling_interval_ms=20)

        source = create_telemetry_source("realtime", config=config, frame_source=frame_source)

        assert isinstance(source, TelemetryIngestionPipeline)
        assert isinstance(source, TelemetrySource)
        assert source.source is frame_source
        assert source.config is config

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            create_telemetry_source("simulation")
