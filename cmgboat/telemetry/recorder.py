"""Display-side consumer of a telemetry source.

Keeps the windows a display layer draws from: recent accepted frames and
recent ignored (out-of-order) frames. Optionally restamps accepted frames
with local elapsed time, for sources whose own clock is static or jumps
backwards.
"""

import logging
import time
from collections.abc import Callable

from cmgboat.telemetry.buffer import DEFAULT_CAPACITY, TelemetryBuffer
from cmgboat.telemetry.frame import TelemetryFrame
from cmgboat.telemetry.sources import TelemetrySource

logger = logging.getLogger(__name__)

DEFAULT_IGNORED_CAPACITY = 100


class TelemetryRecorder:
    """Bounded accepted/ignored windows fed by one telemetry source.

    With ``use_local_time`` set, each accepted frame's ``t`` is replaced by
    the seconds elapsed on the local clock since the first frame received
    with the option on. Turning the option off restarts that reference.
    """

    def __init__(
        self,
        use_local_time: bool = False,
        capacity: int = DEFAULT_CAPACITY,
        ignored_capacity: int = DEFAULT_IGNORED_CAPACITY,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.use_local_time = use_local_time
        self.clock = clock
        self.frames = TelemetryBuffer(capacity=capacity)
        self.ignored = TelemetryBuffer(capacity=ignored_capacity)
        self._start_time: float | None = None
        self._source: TelemetrySource | None = None

    def attach(self, source: TelemetrySource) -> None:
        """Load the source's existing frames and subscribe to new ones.

        With local time on, the existing frames are shifted to start at 0
        and the local reference is set so live frames continue after them.
        """
        if self._source is not None:
            self.detach()
        self._source = source
        initial = source.get_initial_data()
        if self.use_local_time and initial:
            origin = initial[0].t
            initial = [frame.with_time(frame.t - origin) for frame in initial]
            self._start_time = self.clock() - initial[-1].t
        self.frames.extend(initial)
        source.subscribe_accepted(self.on_accepted)
        source.subscribe_ignored(self.on_ignored)

    def detach(self) -> None:
        """Stop receiving frames from the attached source."""
        source, self._source = self._source, None
        if source is None:
            return
        for name, callback in (
            ("unsubscribe_accepted", self.on_accepted),
            ("unsubscribe_ignored", self.on_ignored),
        ):
            unsubscribe = getattr(source, name, None)
            if callable(unsubscribe):
                unsubscribe(callback)

    def on_accepted(self, frame: TelemetryFrame) -> None:
        if self.use_local_time:
            now = self.clock()
            if self._start_time is None:
                self._start_time = now
            frame = frame.with_time(now - self._start_time)
        else:
            self._start_time = None
        self.frames.append(frame)

    def on_ignored(self, frame: TelemetryFrame) -> None:
        self.ignored.append(frame)

    def set_use_local_time(self, enabled: bool) -> None:
        self.use_local_time = enabled
        if not enabled:
            self._start_time = None

    @property
    def current_frame(self) -> TelemetryFrame | None:
        """Most recent accepted frame."""
        return self.frames.latest

    def clear(self) -> None:
        self.frames.clear()
        self.ignored.clear()
        self._start_time = None
