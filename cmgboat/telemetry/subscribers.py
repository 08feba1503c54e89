"""Callback registry for telemetry notification channels."""

import logging
from collections.abc import Callable

from cmgboat.telemetry.frame import TelemetryFrame

logger = logging.getLogger(__name__)

FrameCallback = Callable[[TelemetryFrame], None]


class SubscriberList:
    """Ordered set of frame callbacks for one channel.

    A callback that raises is logged and skipped; the remaining callbacks
    still receive the frame.
    """

    def __init__(self, channel: str):
        self.channel = channel
        self._callbacks: list[FrameCallback] = []

    def add(self, callback: FrameCallback) -> None:
        self._callbacks.append(callback)

    def remove(self, callback: FrameCallback) -> bool:
        """Remove a callback, returns False if it was not registered."""
        try:
            self._callbacks.remove(callback)
        except ValueError:
            return False
        return True

    def notify(self, frame: TelemetryFrame) -> int:
        """Deliver a frame to every callback.

        Returns:
            Number of callbacks that raised
        """
        failures = 0
        # Copy so a callback may unsubscribe itself
        for callback in list(self._callbacks):
            try:
                callback(frame)
            except Exception:
                failures += 1
                logger.exception(f"Error in {self.channel} callback for frame t={frame.t}")
        return failures

    def clear(self) -> None:
        self._callbacks.clear()

    def __len__(self) -> int:
        return len(self._callbacks)
