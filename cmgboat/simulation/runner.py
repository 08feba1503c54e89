"""Fixed-rate drivers for the CMG simulation.

``FixedStepRunner`` turns arbitrary elapsed wall-clock time into whole
simulation steps of a fixed size (100 Hz by default), carrying the remainder
over to the next call so the simulated rate stays constant even when the
caller ticks irregularly.

``SimulationLoop`` schedules the runner on an asyncio recurring timer and
delivers every new frame to subscribers.

Example:
    >>> import asyncio
    >>> from cmgboat.simulation import CMGSimulation, FixedStepRunner, SimulationLoop
    >>>
    >>> runner = FixedStepRunner(CMGSimulation.from_disturbed_start())
    >>> loop = SimulationLoop(runner)
    >>> loop.subscribe(lambda frame: print(frame.t, frame.roll))
    >>>
    >>> async def main():
    ...     loop.start()
    ...     await asyncio.sleep(2.0)
    ...     loop.stop()
    >>> asyncio.run(main())
"""

import asyncio
import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from cmgboat.simulation.simulator import CMGSimulation, SimulationResult
from cmgboat.telemetry.buffer import DEFAULT_CAPACITY, TelemetryBuffer
from cmgboat.telemetry.frame import TelemetryFrame
from cmgboat.telemetry.subscribers import FrameCallback, SubscriberList
from cmgboat.typecheck import beartype

logger = logging.getLogger(__name__)

DEFAULT_STEP_S = 0.01           # 100 Hz
DEFAULT_FRAME_INTERVAL_S = 1 / 60
DEFAULT_MAX_CATCH_UP_STEPS = 500

# =============================================================================
# Fixed-Step Runner
# =============================================================================


@beartype
@dataclass
class FixedStepRunner:
    """Accumulates elapsed time and runs whole simulation steps.

    Attributes:
        simulation: Simulator being driven
        dt: Simulation step [s]
        buffer_size: Frames kept in the display buffer
        max_catch_up_steps: Upper bound on steps per advance; time beyond
            it is dropped so a long stall cannot block the caller
    """
    simulation: CMGSimulation
    dt: float = DEFAULT_STEP_S
    buffer_size: int = DEFAULT_CAPACITY
    max_catch_up_steps: int = DEFAULT_MAX_CATCH_UP_STEPS

    _accumulator: float = field(default=0.0, init=False, repr=False)
    _buffer: TelemetryBuffer = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not (self.dt > 0 and math.isfinite(self.dt)):
            raise ValueError(f"dt must be positive and finite, got {self.dt}")
        if self.max_catch_up_steps < 1:
            raise ValueError("max_catch_up_steps must be at least 1")
        self._buffer = TelemetryBuffer(capacity=self.buffer_size)
        self._buffer.append(self.simulation.to_telemetry_frame())

    def advance(self, elapsed_s: float) -> list[TelemetryFrame]:
        """Run as many whole steps as fit in the accumulated time.

        Args:
            elapsed_s: Wall-clock time since the previous call [s]

        Returns:
            Frames produced by this call, oldest first
        """
        if elapsed_s < 0 or not math.isfinite(elapsed_s):
            raise ValueError(f"elapsed_s must be non-negative and finite, got {elapsed_s}")

        self._accumulator += elapsed_s
        frames: list[TelemetryFrame] = []
        while self._accumulator >= self.dt:
            if len(frames) >= self.max_catch_up_steps:
                logger.warning(
                    f"Simulation fell behind by {self._accumulator:.3f}s, dropping the backlog"
                )
                self._accumulator = 0.0
                break
            self.simulation.step(self.dt)
            frames.append(self.simulation.to_telemetry_frame())
            self._accumulator -= self.dt

        self._buffer.extend(frames)
        return frames

    def run(self, duration_s: float) -> SimulationResult:
        """Step the simulation for a fixed duration, independent of wall time.

        Args:
            duration_s: Simulated time to cover [s]

        Returns:
            Frames produced during the run
        """
        if duration_s < 0:
            raise ValueError(f"duration_s must be non-negative, got {duration_s}")
        steps = int(round(duration_s / self.dt))
        frames = []
        for _ in range(steps):
            self.simulation.step(self.dt)
            frames.append(self.simulation.to_telemetry_frame())
        self._buffer.extend(frames)
        return SimulationResult(frames=frames)

    def reset(self) -> None:
        """Reset the simulation and drop the buffered frames."""
        self.simulation.reset()
        self._accumulator = 0.0
        self._buffer.clear()
        self._buffer.append(self.simulation.to_telemetry_frame())

    @property
    def buffer(self) -> TelemetryBuffer:
        """Recent frames for display."""
        return self._buffer


# =============================================================================
# Asyncio Loop
# =============================================================================


class SimulationLoop:
    """Recurring asyncio timer that drives a FixedStepRunner.

    ``start`` is idempotent and ``stop`` takes effect immediately: once it
    returns, no further step runs and no frame is delivered.
    """

    def __init__(
        self,
        runner: FixedStepRunner,
        frame_interval_s: float = DEFAULT_FRAME_INTERVAL_S,
        clock: Callable[[], float] = time.monotonic,
    ):
        if frame_interval_s <= 0:
            raise ValueError("frame_interval_s must be positive")
        self.runner = runner
        self.frame_interval_s = frame_interval_s
        self.clock = clock
        self._subscribers = SubscriberList("simulation")
        self._task: asyncio.Task | None = None
        self._generation = 0
        self._running = False

    def subscribe(self, callback: FrameCallback) -> None:
        self._subscribers.add(callback)

    def unsubscribe(self, callback: FrameCallback) -> bool:
        return self._subscribers.remove(callback)

    def start(self) -> None:
        """Start stepping; must be called from a running event loop."""
        if self._running:
            return
        self._running = True
        self._generation += 1
        self._task = asyncio.get_running_loop().create_task(self._run(self._generation))

    def stop(self) -> None:
        """Stop stepping; safe to call multiple times."""
        self._running = False
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    @property
    def is_running(self) -> bool:
        return self._running

    def _is_current(self, generation: int) -> bool:
        return self._running and generation == self._generation

    async def _run(self, generation: int) -> None:
        last = self.clock()
        while self._is_current(generation):
            await asyncio.sleep(self.frame_interval_s)
            if not self._is_current(generation):
                break
            now = self.clock()
            frames = self.runner.advance(max(now - last, 0.0))
            last = now
            for frame in frames:
                if not self._is_current(generation):
                    return
                self._subscribers.notify(frame)
