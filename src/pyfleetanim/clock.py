"""Frame clock and animation clock state."""

from __future__ import annotations

import asyncio
import dataclasses
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any, Protocol

FrameCallback = Callable[[float], None]


class ClockSource(Protocol):
    """One-shot frame scheduler, the ``requestAnimationFrame`` analogue.

    Each request delivers exactly one timestamp (milliseconds, monotonically
    increasing); callers must request again to keep receiving frames.
    """

    def request_frame(self, callback: FrameCallback) -> Any: ...

    def cancel_frame(self, handle: Any) -> None: ...


class AsyncioFrameClock:
    """:class:`ClockSource` driven by ``loop.call_later`` at a fixed frame rate."""

    def __init__(
        self,
        frame_rate: float = 60.0,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        if frame_rate <= 0:
            raise ValueError(f"frame_rate must be positive, got {frame_rate}")
        self._interval = 1.0 / frame_rate
        self._loop = loop

    def _running_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def request_frame(self, callback: FrameCallback) -> asyncio.TimerHandle:
        loop = self._running_loop()
        return loop.call_later(self._interval, lambda: callback(loop.time() * 1000.0))

    def cancel_frame(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()


@dataclasses.dataclass
class AnimationClock:
    """Virtual timeline position, advancing at ``speed`` × real time while playing."""

    animation_time: datetime
    playing: bool = True
    speed: float = 1.0
    is_live: bool = False

    def advance(self, elapsed_ms: float) -> datetime:
        """Move animation time forward by ``speed × elapsed_ms``.

        Negative elapsed time (clock anomalies) never moves time backwards.
        """
        if self.playing and elapsed_ms > 0:
            self.animation_time = self.animation_time + timedelta(milliseconds=self.speed * elapsed_ms)
        return self.animation_time
