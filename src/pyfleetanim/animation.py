"""Animation driver: the frame loop tying clock, fetches, merges and projection together."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pyfleetanim._api.updates import UpdatesFetcher, fetch_vehicle_updates
from pyfleetanim._transport import Transport
from pyfleetanim.clock import AnimationClock, AsyncioFrameClock, ClockSource
from pyfleetanim.models._base import format_iso8601
from pyfleetanim.models.frame import VehicleFrameState
from pyfleetanim.models.options import AnimationOptions
from pyfleetanim.models.vehicle import VehicleRecord
from pyfleetanim.projection import FrameProjector, project_frame, select_current_updates
from pyfleetanim.session import Credentials
from pyfleetanim.state.events import DriverState
from pyfleetanim.state.policy import LIVE_START_OFFSET, WindowPolicy, policy_for
from pyfleetanim.state.store import Buffer, merge_batch
from pyfleetanim.state.window import BufferWindow

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class VehicleAnimation:
    """One animation session over a fleet's vehicle updates.

    The session owns the buffer, the fetch window and the animation clock.
    Every frame delivered by the clock source it advances animation time,
    fetches the next window when the current one runs low, and hands the
    vehicles visible at the current instant to ``on_frame``.

    Usage::

        async with VehicleAnimation(options, credentials=creds, transport=ws, on_frame=draw):
            await asyncio.sleep(60)
    """

    def __init__(
        self,
        options: AnimationOptions,
        *,
        credentials: Credentials,
        transport: Transport | None,
        on_frame: Callable[[list[VehicleFrameState]], None],
        on_loading_change: Callable[[bool], None] | None = None,
        fetcher: UpdatesFetcher = fetch_vehicle_updates,
        clock_source: ClockSource | None = None,
        projector: FrameProjector = select_current_updates,
        wall_clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._options = options
        self._credentials = credentials
        self._transport = transport
        self._on_frame = on_frame
        self._on_loading_change = on_loading_change
        self._fetcher = fetcher
        self._clock_source: ClockSource = clock_source or AsyncioFrameClock()
        self._projector = projector
        self._wall_clock = wall_clock

        self._state = DriverState.UNINITIALIZED
        self._frame_handle: Any = None
        self._fetch_tasks: set[asyncio.Task[None]] = set()
        # Fetch results are applied only when they belong to the latest generation.
        self._generation = 0
        self._fetch_pending = False
        self._loading = False
        self._reset_session()

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> VehicleAnimation:
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def state(self) -> DriverState:
        return self._state

    @property
    def options(self) -> AnimationOptions:
        return self._options

    @property
    def animation_time(self) -> datetime:
        return self._clock.animation_time

    @property
    def playing(self) -> bool:
        return self._clock.playing

    @property
    def speed(self) -> float:
        return self._clock.speed

    @property
    def buffer(self) -> Buffer:
        """Snapshot of the most recently merged buffer."""
        return self._buffer

    @property
    def window_policy(self) -> WindowPolicy:
        return self._policy

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def fetch_in_flight(self) -> bool:
        return self._fetch_pending

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def _reset_session(self) -> None:
        options = self._options
        self._policy = policy_for(options.is_live)
        self._period = self._policy.initial_period
        self._clock = AnimationClock(
            animation_time=options.animation_time,
            playing=options.is_playing,
            speed=options.speed_multiplier,
            is_live=options.is_live,
        )
        self._buffer = Buffer(window=BufferWindow.initialize(options.animation_time, self._period))
        self._seeking = options.is_seeking
        self._first_frame = True
        self._previous_tick: float | None = None
        self._previously_empty = True
        self._has_merged = False
        self._refetch = False

    def start(self) -> None:
        """Begin a new session and request the first frame."""
        if self._state is DriverState.RUNNING:
            return
        self._reset_session()
        self._state = DriverState.RUNNING
        _logger.debug(
            "Animation started mode=%s animation_time=%s",
            self._policy.mode,
            format_iso8601(self._clock.animation_time),
        )
        self._set_loading(True, force=True)
        self._schedule_frame()

    def stop(self) -> None:
        """Cancel the frame loop and discard the buffer.

        Fetches already in flight run to completion but their results are
        ignored. Calling ``stop`` more than once is harmless.
        """
        if self._state is not DriverState.RUNNING:
            return
        self._state = DriverState.STOPPED
        handle = self._frame_handle
        self._frame_handle = None
        if handle is not None:
            self._clock_source.cancel_frame(handle)
        self._generation += 1
        self._fetch_pending = False
        self._buffer = Buffer(window=self._buffer.window)
        _logger.debug("Animation stopped")

    def restart(self) -> None:
        self.stop()
        self.start()

    async def aclose(self) -> None:
        """Stop the session and wait for outstanding fetches to settle."""
        self.stop()
        if self._fetch_tasks:
            await asyncio.gather(*self._fetch_tasks, return_exceptions=True)

    # ------------------------------------------------------------------
    # Option changes
    # ------------------------------------------------------------------

    def set_playing(self, playing: bool) -> None:
        self._clock.playing = playing

    def set_speed(self, speed: float) -> None:
        if speed < 0:
            raise ValueError(f"speed must not be negative, got {speed}")
        self._clock.speed = speed

    def set_seeking(self, seeking: bool) -> None:
        self._seeking = seeking

    def update_options(self, options: AnimationOptions) -> None:
        """Apply new options, restarting the session when the timeline itself changed."""
        previous = self._options
        self._options = options
        needs_restart = (
            options.viewport != previous.viewport
            or options.is_live != previous.is_live
            or options.animation_time != previous.animation_time
        )
        if needs_restart and self._state is DriverState.RUNNING:
            self.restart()
            return
        if needs_restart:
            self._reset_session()
            return
        self.set_playing(options.is_playing)
        self.set_speed(options.speed_multiplier)
        self.set_seeking(options.is_seeking)

    def set_transport(self, transport: Transport | None) -> None:
        if transport is self._transport:
            return
        self._transport = transport
        if self._state is DriverState.RUNNING:
            self.restart()

    def set_credentials(self, credentials: Credentials) -> None:
        if credentials == self._credentials:
            return
        self._credentials = credentials
        if self._state is DriverState.RUNNING:
            self.restart()

    # ------------------------------------------------------------------
    # Frame loop
    # ------------------------------------------------------------------

    def _schedule_frame(self) -> None:
        self._frame_handle = self._clock_source.request_frame(self._on_clock_frame)

    def _on_clock_frame(self, timestamp_ms: float) -> None:
        self._frame_handle = None
        if self._state is not DriverState.RUNNING:
            return
        self.tick(timestamp_ms)
        # A restart during the tick has already requested its own frame.
        if self._state is DriverState.RUNNING and self._frame_handle is None:
            self._schedule_frame()

    def _transport_ready(self) -> bool:
        return self._transport is not None and self._transport.is_ready

    def tick(self, timestamp_ms: float) -> None:
        """Run the per-frame logic for one clock timestamp (milliseconds)."""
        if self._state is not DriverState.RUNNING:
            return
        if self._seeking or not self._transport_ready():
            # Suspended: time spent here must not count as elapsed playback.
            self._previous_tick = None
            return

        policy = self._policy
        window = self._buffer.window
        near_end = window.is_near_end(self._clock.animation_time, policy.retrieve_before)

        elapsed = 0.0 if self._previous_tick is None else timestamp_ms - self._previous_tick
        animation_time = self._clock.advance(elapsed)

        if policy.is_live and not self._first_frame and window.was_suspended(animation_time):
            _logger.debug("Animation time drifted from window start; rebuilding window")
            self._reinitialize_window()

        if near_end and self._fetch_pending:
            _logger.debug("Window advance deferred while a fetch is in flight")
        elif near_end:
            self._buffer = dataclasses.replace(self._buffer, window=self._buffer.window.advance(self._period))
            self._issue_fetch(self._buffer.window)
        elif (self._first_frame or self._refetch) and not self._fetch_pending:
            self._issue_fetch(self._buffer.window)

        generation = self._generation
        rendered = self._emit_frame()
        if self._state is not DriverState.RUNNING or self._generation != generation:
            # on_frame stopped or restarted the session.
            return

        self._period = policy.subsequent_period
        self._previous_tick = timestamp_ms
        self._first_frame = False
        if rendered:
            self._set_loading(False)

    def _reinitialize_window(self) -> None:
        window = BufferWindow.initialize(self._clock.animation_time, self._period)
        self._buffer = dataclasses.replace(self._buffer, window=window)

    def _emit_frame(self) -> bool:
        try:
            states = project_frame(
                self._buffer.data,
                self._clock.animation_time,
                self._options.viewport,
                self._projector,
            )
            self._on_frame(states)
        except Exception:
            _logger.warning("Frame projection failed", exc_info=True)
            return False
        return True

    def _set_loading(self, loading: bool, *, force: bool = False) -> None:
        if loading == self._loading and not force:
            return
        self._loading = loading
        if self._on_loading_change is None:
            return
        try:
            self._on_loading_change(loading)
        except Exception:
            _logger.warning("on_loading_change callback failed", exc_info=True)

    # ------------------------------------------------------------------
    # Fetch + merge
    # ------------------------------------------------------------------

    def _issue_fetch(self, window: BufferWindow) -> None:
        self._generation += 1
        self._fetch_pending = True
        self._refetch = False
        transport = self._transport
        assert transport is not None  # noqa: S101
        length = (window.end - window.start).total_seconds()
        task = asyncio.get_running_loop().create_task(
            self._run_fetch(self._generation, self._credentials, transport, format_iso8601(window.start), length)
        )
        self._fetch_tasks.add(task)
        task.add_done_callback(self._fetch_tasks.discard)

    async def _run_fetch(
        self,
        generation: int,
        credentials: Credentials,
        transport: Transport,
        window_start_iso: str,
        length: float,
    ) -> None:
        try:
            batch = await self._fetcher(
                credentials,
                credentials.fleet_key,
                window_start_iso,
                length,
                transport,
            )
        except Exception:
            if generation != self._generation or self._state is not DriverState.RUNNING:
                return
            self._fetch_pending = False
            _logger.warning("Vehicle update fetch failed start=%s duration=%s", window_start_iso, length)
            _logger.debug("Fetch failure details", exc_info=True)
            if not self._has_merged:
                self._refetch = True
            return

        if generation != self._generation or self._state is not DriverState.RUNNING:
            _logger.debug("Discarding stale fetch result start=%s", window_start_iso)
            return
        self._fetch_pending = False
        self._apply_batch(batch)

    def _apply_batch(self, batch: list[VehicleRecord]) -> None:
        if self._policy.is_live and batch and self._previously_empty:
            # First live data: align animation time with the wall clock.
            self._clock.animation_time = self._wall_clock() - LIVE_START_OFFSET
            self._reinitialize_window()
            self._previously_empty = False

        records = merge_batch(self._buffer.data, batch, self._clock.animation_time)
        self._buffer = dataclasses.replace(self._buffer, data=tuple(records))
        self._has_merged = True
