"""Bounded in-memory window of telemetry frames.

Frames are kept in arrival order. When the capacity is exceeded the oldest
frame is evicted first.
"""

from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass, field

import numpy as np
import polars as pl
from numpy.typing import NDArray

from cmgboat.telemetry.frame import TelemetryFrame
from cmgboat.typecheck import beartype

DEFAULT_CAPACITY = 3000


@beartype
@dataclass
class TelemetryBuffer:
    """FIFO window of the most recent frames.

    Attributes:
        capacity: Maximum number of frames kept
    """
    capacity: int = DEFAULT_CAPACITY

    _frames: deque = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {self.capacity}")
        self._frames = deque(maxlen=self.capacity)

    def append(self, frame: TelemetryFrame) -> None:
        """Add a frame, evicting the oldest one when full."""
        self._frames.append(frame)

    def extend(self, frames: list[TelemetryFrame]) -> None:
        """Add several frames in order."""
        self._frames.extend(frames)

    def clear(self) -> None:
        """Drop every frame."""
        self._frames.clear()

    def snapshot(self) -> list[TelemetryFrame]:
        """Copy of the buffered frames, oldest first."""
        return list(self._frames)

    @property
    def latest(self) -> TelemetryFrame | None:
        """Most recent frame, None when empty."""
        return self._frames[-1] if self._frames else None

    def times(self) -> NDArray[np.float64]:
        """Frame times [s], oldest first."""
        return np.array([frame.t for frame in self._frames], dtype=np.float64)

    def to_dataframe(self) -> pl.DataFrame:
        """Convert to Polars DataFrame with wire column names."""
        return pl.DataFrame([frame.to_dict() for frame in self._frames])

    def __len__(self) -> int:
        return len(self._frames)

    def __iter__(self) -> Iterator[TelemetryFrame]:
        return iter(list(self._frames))
