"""Newline-delimited JSON encoding of telemetry frames.

External frame generators (hardware or emulators) emit one JSON object per
line at a fixed rate over a byte stream or TCP socket. These helpers produce
and parse that format.
"""

import json

from cmgboat.errors import MalformedFrameError
from cmgboat.telemetry.frame import TelemetryFrame


def encode_frame_line(frame: TelemetryFrame) -> str:
    """Encode a frame as one newline-terminated JSON line."""
    return json.dumps(frame.to_dict()) + "\n"


def decode_frame_line(line: str | bytes) -> TelemetryFrame:
    """Parse one JSON line into a frame.

    Raises:
        MalformedFrameError: If the line is not a JSON object with a valid frame
    """
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as e:
        raise MalformedFrameError(f"Invalid JSON frame: {e}") from e
    if not isinstance(payload, dict):
        raise MalformedFrameError(f"Frame must be a JSON object, got {type(payload).__name__}")
    return TelemetryFrame.from_payload(payload)
