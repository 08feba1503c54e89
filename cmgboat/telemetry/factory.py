"""Selection of the telemetry source variant by operating mode."""

from enum import Enum

from cmgboat.telemetry.config import IngestionConfig
from cmgboat.telemetry.frame import TelemetryFrame
from cmgboat.telemetry.mock import MockTelemetrySource, generate_mock_telemetry
from cmgboat.telemetry.pipeline import TelemetryIngestionPipeline
from cmgboat.telemetry.sources import FrameSource, TelemetrySource


class TelemetryMode(str, Enum):
    """Externally sourced telemetry modes."""
    PLAYBACK = "playback"   # synthetic recording
    REALTIME = "realtime"   # polled from a relay


def create_telemetry_source(
    mode: TelemetryMode | str,
    config: IngestionConfig | None = None,
    frame_source: FrameSource | None = None,
    recording: list[TelemetryFrame] | None = None,
) -> TelemetrySource:
    """Build the telemetry source for a mode.

    Args:
        mode: Operating mode
        config: Ingestion settings for realtime mode
        frame_source: Transport override for realtime mode
        recording: Frames served in playback mode (synthetic if None)

    Raises:
        ValueError: If the mode is unknown
    """
    mode = TelemetryMode(mode)
    if mode is TelemetryMode.PLAYBACK:
        return MockTelemetrySource(
            frames=recording if recording is not None else generate_mock_telemetry()
        )
    return TelemetryIngestionPipeline(config=config, source=frame_source)
