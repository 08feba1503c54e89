"""Realtime telemetry ingestion.

Turns an unreliable, possibly reordering polled feed into a strictly ordered,
deduplicated, bounded stream of frames.

Each poll tick:

1. Fetch the relay's latest snapshot (None means "no data yet", skipped)
2. Split the dedup tag from the frame fields
3. Drop the snapshot if its tag equals the previous tick's tag
4. Validate the frame (numeric ``t`` required, other fields default to 0)
5. Reject frames with ``t`` not after the last accepted frame; they are
   reported on the "ignored" channel only
6. Otherwise buffer the frame and notify the "accepted" channel

Ticks are serialized: the next one is scheduled only after the previous
fetch completed. ``connect`` and ``disconnect`` bump a generation counter and
any fetch that completes under an older generation is discarded, so nothing
mutates the pipeline after ``disconnect`` returns.

Example:
    >>> import asyncio
    >>> from cmgboat.telemetry import IngestionConfig, TelemetryIngestionPipeline
    >>>
    >>> pipeline = TelemetryIngestionPipeline(IngestionConfig(polling_interval_ms=50))
    >>> pipeline.subscribe_accepted(lambda frame: print(frame.t, frame.roll))
    >>>
    >>> async def main():
    ...     await pipeline.connect()
    ...     await asyncio.sleep(5.0)
    ...     pipeline.disconnect()
    >>> asyncio.run(main())
"""

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from enum import Enum, auto
from typing import Any

from cmgboat.errors import MalformedFrameError, TransportError
from cmgboat.telemetry.buffer import TelemetryBuffer
from cmgboat.telemetry.config import IngestionConfig
from cmgboat.telemetry.frame import TelemetryFrame
from cmgboat.telemetry.sources import FrameSource, HttpFrameSource, split_snapshot
from cmgboat.telemetry.subscribers import FrameCallback, SubscriberList

logger = logging.getLogger(__name__)


class IngestOutcome(Enum):
    """What happened to one snapshot."""
    ACCEPTED = auto()         # buffered and delivered on the accepted channel
    IGNORED = auto()          # out of order, delivered on the ignored channel
    DUPLICATE = auto()        # same dedup tag as the previous snapshot
    MALFORMED = auto()        # failed validation
    EMPTY = auto()            # source had no data yet
    TRANSPORT_ERROR = auto()  # fetch failed
    DISCARDED = auto()        # response arrived after disconnect/reconnect


@dataclass
class IngestionStatistics:
    """Running counters of a pipeline."""
    accepted: int = 0
    ignored: int = 0
    duplicates: int = 0
    malformed: int = 0
    transport_errors: int = 0
    discarded: int = 0


class TelemetryIngestionPipeline:
    """Polls a frame source and publishes an ordered, deduplicated stream.

    Implements the ``TelemetrySource`` capability interface.
    """

    def __init__(
        self,
        config: IngestionConfig | None = None,
        source: FrameSource | None = None,
    ):
        """
        Initialize the pipeline.

        Args:
            config: Ingestion settings (uses defaults if None)
            source: Frame transport (HTTP polling of config.url if None)
        """
        self.config = config or IngestionConfig()
        self.source = source if source is not None else HttpFrameSource(self.config)
        self.buffer = TelemetryBuffer(capacity=self.config.buffer_capacity)
        self.stats = IngestionStatistics()

        self._accepted = SubscriberList("accepted")
        self._ignored = SubscriberList("ignored")

        # Dedup and ordering state
        self._last_tag: Any = None
        self._last_accepted_t: float | None = None

        # Loop state
        self._active = False
        self._generation = 0
        self._task: asyncio.Task | None = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def connect(self) -> None:
        """Start polling; a no-op while already connected.

        Resets the dedup and ordering state and the buffer. The first tick
        runs without waiting for the polling interval.
        """
        if self._active:
            return

        self._active = True
        self._generation += 1
        self._last_tag = None
        self._last_accepted_t = None
        self.buffer.clear()

        logger.info(f"Polling {self.config.url} every {self.config.polling_interval_ms}ms")
        self._task = asyncio.get_running_loop().create_task(self._poll_loop(self._generation))

    def disconnect(self) -> None:
        """Stop polling; safe to call multiple times."""
        was_active = self._active
        self._active = False
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        if was_active:
            logger.info("Stopped telemetry polling")

    def close(self) -> None:
        """Disconnect and release the transport."""
        self.disconnect()
        close = getattr(self.source, "close", None)
        if callable(close):
            close()

    @property
    def is_connected(self) -> bool:
        return self._active

    # -------------------------------------------------------------------------
    # Polling
    # -------------------------------------------------------------------------

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def _poll_loop(self, generation: int) -> None:
        while self._active and self._is_current(generation):
            try:
                await self._tick(generation)
            except Exception:
                logger.exception("Unexpected error while processing telemetry snapshot")
            if not (self._active and self._is_current(generation)):
                break
            await asyncio.sleep(self.config.polling_interval_s)

    async def _tick(self, generation: int) -> IngestOutcome:
        try:
            body = await self.source.fetch()
        except TransportError as e:
            if not self._is_current(generation):
                self.stats.discarded += 1
                return IngestOutcome.DISCARDED
            self.stats.transport_errors += 1
            logger.warning(f"Polling error: {e}")
            return IngestOutcome.TRANSPORT_ERROR
        except Exception:
            if not self._is_current(generation):
                self.stats.discarded += 1
                return IngestOutcome.DISCARDED
            self.stats.transport_errors += 1
            logger.exception("Unexpected error while polling telemetry source")
            return IngestOutcome.TRANSPORT_ERROR

        if not self._is_current(generation):
            self.stats.discarded += 1
            logger.debug("Discarding snapshot that arrived after disconnect")
            return IngestOutcome.DISCARDED

        if body is None:
            return IngestOutcome.EMPTY
        return self.process_snapshot(body)

    async def poll_once(self) -> IngestOutcome:
        """Run one tick now, outside the polling schedule."""
        return await self._tick(self._generation)

    # -------------------------------------------------------------------------
    # Dedup / validation / ordering
    # -------------------------------------------------------------------------

    def process_snapshot(self, body: Any) -> IngestOutcome:
        """Apply the dedup, validation and ordering rules to one snapshot.

        Args:
            body: Decoded relay response (frame fields plus the dedup tag)

        Returns:
            Outcome of the snapshot
        """
        if not isinstance(body, Mapping):
            self.stats.malformed += 1
            logger.debug(f"Dropping snapshot that is not an object: {type(body).__name__}")
            return IngestOutcome.MALFORMED

        tag, payload = split_snapshot(body, self.config.tag_field)
        if tag is not None and tag == self._last_tag:
            self.stats.duplicates += 1
            return IngestOutcome.DUPLICATE
        self._last_tag = tag

        try:
            frame = TelemetryFrame.from_payload(payload)
        except MalformedFrameError as e:
            self.stats.malformed += 1
            logger.debug(f"Dropping malformed frame: {e}")
            return IngestOutcome.MALFORMED

        return self.ingest_frame(frame)

    def ingest_frame(self, frame: TelemetryFrame) -> IngestOutcome:
        """Apply the ordering rule to an already validated frame.

        Push-based transports (e.g. newline JSON streams) call this directly.
        """
        if self._last_accepted_t is not None and frame.t <= self._last_accepted_t:
            self.stats.ignored += 1
            logger.warning(f"Ignoring old frame: t={frame.t} <= last t={self._last_accepted_t}")
            self._ignored.notify(frame)
            return IngestOutcome.IGNORED

        self._last_accepted_t = frame.t
        self.buffer.append(frame)
        self.stats.accepted += 1
        self._accepted.notify(frame)
        return IngestOutcome.ACCEPTED

    def clear_buffer(self) -> None:
        """Empty the buffer and accept the next frame as a fresh stream start."""
        self.buffer.clear()
        self._last_accepted_t = None

    @property
    def last_accepted_t(self) -> float | None:
        """Time of the most recently accepted frame."""
        return self._last_accepted_t

    # -------------------------------------------------------------------------
    # TelemetrySource interface
    # -------------------------------------------------------------------------

    def get_initial_data(self) -> list[TelemetryFrame]:
        """Frames accepted so far, oldest first."""
        return self.buffer.snapshot()

    def subscribe_accepted(self, callback: FrameCallback) -> None:
        self._accepted.add(callback)

    def subscribe_ignored(self, callback: FrameCallback) -> None:
        self._ignored.add(callback)

    def unsubscribe_accepted(self, callback: FrameCallback) -> bool:
        return self._accepted.remove(callback)

    def unsubscribe_ignored(self, callback: FrameCallback) -> bool:
        return self._ignored.remove(callback)

    def get_statistics(self) -> dict[str, Any]:
        """Counters plus the current buffer fill."""
        return {
            **asdict(self.stats),
            "buffered": len(self.buffer),
            "connected": self._active,
            "last_accepted_t": self._last_accepted_t,
        }
