#!/usr/bin/env python3
"""Watch a fleet animation from the terminal.

Connects to the realtime service, runs one animation session and prints
how many vehicles are visible as animation time moves.

Usage
-----
::

    export FLEET_API_KEY="..."
    export FLEET_KEY="..."
    python scripts/watch_fleet.py --live
    python scripts/watch_fleet.py --start 2026-01-01T08:00:00Z --speed 60

Options::

    --live               Follow live data (default: replay from --start)
    --start ISO          Replay start time (default: one hour ago)
    --speed X            Playback speed multiplier (default: 1)
    --seconds N          How long to watch, in wall-clock seconds (default: 30)
    --every N            Print every Nth frame (default: 60)
    --bbox S,W,N,E       Only count vehicles inside this bounding box
    --verbose / -v       Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyfleetanim import (  # noqa: E402
    AnimationOptions,
    BoundingBox,
    FleetClient,
    FleetConfig,
    FleetError,
    VehicleFrameState,
    format_iso8601,
    parse_timestamp,
)


def _parse_bbox(value: str) -> BoundingBox:
    try:
        south, west, north, east = (float(part) for part in value.split(","))
    except ValueError as exc:
        raise argparse.ArgumentTypeError("expected S,W,N,E") from exc
    return BoundingBox(south=south, west=west, north=north, east=east)


def _parse_start(value: str) -> datetime:
    parsed = parse_timestamp(value)
    if parsed is None:
        raise argparse.ArgumentTypeError(f"not a timestamp: {value!r}")
    return parsed


async def main() -> None:
    parser = argparse.ArgumentParser(description="Print per-frame vehicle counts for a fleet animation.")
    parser.add_argument("--live", action="store_true", help="Follow live data")
    parser.add_argument("--start", type=_parse_start, help="Replay start time (ISO-8601 or epoch)")
    parser.add_argument("--speed", type=float, default=1.0, help="Playback speed multiplier")
    parser.add_argument("--seconds", type=float, default=30.0, help="How long to watch")
    parser.add_argument("--every", type=int, default=60, help="Print every Nth frame")
    parser.add_argument("--bbox", type=_parse_bbox, help="Viewport as S,W,N,E")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        config = FleetConfig.from_env()
    except FleetError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc

    now = datetime.now(UTC)
    start = now if args.live else (args.start or now - timedelta(hours=1))
    options = AnimationOptions(
        viewport=args.bbox,
        animation_time=start,
        is_live=args.live,
        speed_multiplier=args.speed,
    )

    frame_count = 0

    def on_frame(states: list[VehicleFrameState]) -> None:
        nonlocal frame_count
        frame_count += 1
        if frame_count % args.every:
            return
        print(f"{format_iso8601(animation.animation_time)}  vehicles={len(states)}")

    def on_loading_change(loading: bool) -> None:
        print("loading..." if loading else "first frame rendered", file=sys.stderr)

    async with FleetClient(config) as client:
        animation = client.animate(options, on_frame=on_frame, on_loading_change=on_loading_change)
        async with animation:
            await asyncio.sleep(args.seconds)

    print(f"{frame_count} frames", file=sys.stderr)


if __name__ == "__main__":
    asyncio.run(main())
