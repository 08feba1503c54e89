"""Error types for telemetry handling.

Malformed frames and transport failures are recovered locally by the
ingestion pipeline (skip and continue); these types let the recovery sites
tell the two apart.
"""


class TelemetryError(Exception):
    """Base class for telemetry errors."""


class MalformedFrameError(TelemetryError):
    """Frame payload is missing a numeric time field or has non-numeric values."""


class TransportError(TelemetryError):
    """Fetching a snapshot from the frame source failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
