"""Shared fakes for telemetry tests."""

import asyncio
from collections import deque
from typing import Any

import pytest

from cmgboat.telemetry import IngestionConfig, TelemetryIngestionPipeline


def frame_body(t: Any, tag: Any = None, **fields: Any) -> dict[str, Any]:
    """Relay response body for a frame at time t."""
    body = {"t": t, **fields}
    if tag is not None:
        body["serverTimestamp"] = tag
    return body


class FakeFrameSource:
    """Frame source replaying scripted responses.

    Each entry is returned by one fetch; exceptions are raised instead.
    Once the script is exhausted every fetch reports "no data yet".
    """

    def __init__(self, responses: list[Any] | None = None):
        self.responses = deque(responses or [])
        self.calls = 0

    async def fetch(self) -> Any:
        self.calls += 1
        if not self.responses:
            return None
        response = self.responses.popleft()
        if isinstance(response, BaseException):
            raise response
        return response


class GatedFrameSource:
    """Frame source whose fetch blocks until released.

    The fetch then returns the body, or raises it if it is an exception.
    """

    def __init__(self, body: Any):
        self.body = body
        self.release = asyncio.Event()
        self.started = asyncio.Event()
        self.calls = 0

    async def fetch(self) -> Any:
        self.calls += 1
        self.started.set()
        await self.release.wait()
        if isinstance(self.body, BaseException):
            raise self.body
        return self.body


@pytest.fixture
def fake_source() -> FakeFrameSource:
    return FakeFrameSource()


@pytest.fixture
def pipeline(fake_source: FakeFrameSource) -> TelemetryIngestionPipeline:
    return TelemetryIngestionPipeline(IngestionConfig(polling_interval_ms=1), source=fake_source)
