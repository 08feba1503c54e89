"""Telemetry records, sources and realtime ingestion.

Provides the frame record shared with the simulator, the bounded frame
buffer, the polling ingestion pipeline and the playback source.

Example:
    >>> from cmgboat.telemetry import IngestionConfig, TelemetryMode, create_telemetry_source
    >>>
    >>> source = create_telemetry_source(TelemetryMode.REALTIME, IngestionConfig(polling_interval_ms=50))
    >>> source.subscribe_accepted(on_frame)
"""

from cmgboat.telemetry.buffer import (
    DEFAULT_CAPACITY,
    TelemetryBuffer,
)
from cmgboat.telemetry.config import (
    IngestionConfig,
)
from cmgboat.telemetry.factory import (
    TelemetryMode,
    create_telemetry_source,
)
from cmgboat.telemetry.frame import (
    WIRE_FIELDS,
    TelemetryFrame,
)
from cmgboat.telemetry.mock import (
    MockTelemetrySource,
    generate_mock_telemetry,
)
from cmgboat.telemetry.pipeline import (
    IngestionStatistics,
    IngestOutcome,
    TelemetryIngestionPipeline,
)
from cmgboat.telemetry.recorder import (
    TelemetryRecorder,
)
from cmgboat.telemetry.sources import (
    FrameSource,
    HttpFrameSource,
    TelemetrySource,
    split_snapshot,
)
from cmgboat.telemetry.wire import (
    decode_frame_line,
    encode_frame_line,
)

__all__ = [
    # Records
    "TelemetryFrame",
    "WIRE_FIELDS",
    "TelemetryBuffer",
    "DEFAULT_CAPACITY",
    # Wire format
    "encode_frame_line",
    "decode_frame_line",
    # Sources
    "FrameSource",
    "HttpFrameSource",
    "TelemetrySource",
    "MockTelemetrySource",
    "generate_mock_telemetry",
    "split_snapshot",
    "TelemetryMode",
    "create_telemetry_source",
    # Ingestion
    "IngestionConfig",
    "IngestionStatistics",
    "IngestOutcome",
    "TelemetryIngestionPipeline",
    # Consumer
    "TelemetryRecorder",
]
