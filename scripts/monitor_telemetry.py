#!/usr/bin/env python
"""Realtime telemetry monitor.

Polls a telemetry relay and prints every accepted frame, reporting
out-of-order frames and a statistics summary on exit:

- Relay address and polling rate from the command line
- Optional local-time restamping for sources with a static clock

Usage:
    uv run python scripts/monitor_telemetry.py [api_url] [polling_ms] [duration_s]
"""

import asyncio
import logging
import sys

from cmgboat.telemetry import (
    IngestionConfig,
    TelemetryFrame,
    TelemetryIngestionPipeline,
    TelemetryRecorder,
)


def print_frame(frame: TelemetryFrame) -> None:
    print(
        f"t={frame.t:8.2f}  roll={frame.roll:7.2f}  yaw={frame.yaw:7.2f}  "
        f"servo=({frame.servo_roll_angle:6.1f}, {frame.servo_yaw_angle:6.1f})  "
        f"rpm=({frame.disk_roll_rpm:6.0f}, {frame.disk_yaw_rpm:6.0f})"
    )


async def monitor(config: IngestionConfig, duration_s: float) -> None:
    pipeline = TelemetryIngestionPipeline(config)
    recorder = TelemetryRecorder(use_local_time=config.use_local_time)
    recorder.attach(pipeline)
    pipeline.subscribe_accepted(print_frame)

    await pipeline.connect()
    try:
        await asyncio.sleep(duration_s)
    finally:
        pipeline.close()

    print("\n" + "=" * 60)
    for name, value in pipeline.get_statistics().items():
        print(f"  {name:<18}{value}")
    print(f"  {'recorded':<18}{len(recorder.frames)}")
    print(f"  {'out_of_order':<18}{len(recorder.ignored)}")
    print("=" * 60)


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    settings = {}
    if len(sys.argv) > 1:
        settings["apiUrl"] = sys.argv[1]
    if len(sys.argv) > 2:
        settings["pollingInterval"] = int(sys.argv[2])
    duration_s = float(sys.argv[3]) if len(sys.argv) > 3 else 30.0

    config = IngestionConfig.from_mapping(settings)
    print("=" * 60)
    print(f"MONITORING {config.url}")
    print("=" * 60)
    try:
        asyncio.run(monitor(config, duration_s))
    except KeyboardInterrupt:
        print("\nStopped")


if __name__ == "__main__":
    main()
