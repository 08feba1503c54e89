"""Telemetry source interfaces and the HTTP polling transport.

Two protocols live here:

- ``FrameSource``: the transport polled by the ingestion pipeline. One
  ``fetch`` returns the relay's latest snapshot, or None when the relay has
  no data yet.
- ``TelemetrySource``: what a display layer consumes. Implemented by the
  ingestion pipeline (realtime) and by the mock source (playback).
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

import requests

from cmgboat.errors import TransportError
from cmgboat.telemetry.config import IngestionConfig
from cmgboat.telemetry.frame import TelemetryFrame
from cmgboat.telemetry.subscribers import FrameCallback

logger = logging.getLogger(__name__)

HTTP_NO_CONTENT = 204

# =============================================================================
# Protocols
# =============================================================================


@runtime_checkable
class FrameSource(Protocol):
    """Transport that yields the latest snapshot on demand."""

    async def fetch(self) -> Any:
        """Return the decoded snapshot body, or None if there is no data yet.

        Raises:
            TransportError: If the request or decoding failed
        """
        ...


@runtime_checkable
class TelemetrySource(Protocol):
    """Capability interface consumed by the display layer."""

    def get_initial_data(self) -> list[TelemetryFrame]:
        ...

    def subscribe_accepted(self, callback: FrameCallback) -> None:
        ...

    def subscribe_ignored(self, callback: FrameCallback) -> None:
        ...

    def disconnect(self) -> None:
        ...


# =============================================================================
# HTTP Polling Transport
# =============================================================================


class HttpFrameSource:
    """Polls ``GET {api_url}/{endpoint}`` on a relay.

    - 204 No Content: no data yet, ``fetch`` returns None
    - 2xx: JSON body returned as decoded
    - anything else, network failures and undecodable bodies: TransportError

    The blocking request runs in a worker thread so the event loop stays
    responsive.
    """

    def __init__(self, config: IngestionConfig | None = None, session: requests.Session | None = None):
        self.config = config or IngestionConfig()
        self.session = session or requests.Session()

    async def fetch(self) -> Any:
        return await asyncio.to_thread(self._get)

    def _get(self) -> Any:
        url = self.config.url
        try:
            response = self.session.get(url, timeout=self.config.request_timeout_s)
        except requests.exceptions.Timeout as e:
            raise TransportError(
                f"Request to {url} timed out after {self.config.request_timeout_s}s"
            ) from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request to {url} failed: {e}") from e

        if response.status_code == HTTP_NO_CONTENT:
            return None
        if not response.ok:
            raise TransportError(
                f"HTTP {response.status_code}: {response.reason}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"Invalid JSON response from {url}: {e}") from e

    def close(self) -> None:
        self.session.close()


def split_snapshot(body: Mapping[str, Any], tag_field: str) -> tuple[Any, dict[str, Any]]:
    """Separate the relay's dedup tag from the frame fields.

    Returns:
        (tag, payload); tag is None when the body carries none
    """
    payload = dict(body)
    tag = payload.pop(tag_field, None)
    return tag, payload
