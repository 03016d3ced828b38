"""High-level async client for the realtime fleet service."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

import aiohttp

from pyfleetanim._api.updates import fetch_vehicle_updates
from pyfleetanim._transport import WebsocketTransport
from pyfleetanim.animation import VehicleAnimation
from pyfleetanim.clock import AsyncioFrameClock, ClockSource
from pyfleetanim.config import FleetConfig
from pyfleetanim.exceptions import FleetError
from pyfleetanim.models._base import format_iso8601
from pyfleetanim.models.frame import VehicleFrameState
from pyfleetanim.models.options import AnimationOptions
from pyfleetanim.models.vehicle import VehicleRecord
from pyfleetanim.projection import FrameProjector, select_current_updates
from pyfleetanim.state.events import DriverState

_logger = logging.getLogger(__name__)


class FleetClient:
    """Async client for the realtime fleet service.

    Usage::

        async with FleetClient(config) as client:
            records = await client.get_vehicle_updates(start, 600)
            async with client.animate(options, on_frame=draw) as animation:
                ...
    """

    def __init__(
        self,
        config: FleetConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        clock_source: ClockSource | None = None,
    ) -> None:
        self._config = config
        self._credentials = config.credentials()
        self._external_session = session is not None
        self._http_session = session
        self._clock_source = clock_source
        self._transport: WebsocketTransport | None = None
        self._animations: list[VehicleAnimation] = []

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FleetClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = WebsocketTransport(
            self._config.realtime_url,
            self._http_session,
            request_timeout=self._config.request_timeout,
        )
        await self._transport.connect()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        for animation in self._animations:
            await animation.aclose()
        self._animations.clear()
        if self._transport is not None:
            await self._transport.close()
            self._transport = None
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    def _require_transport(self) -> WebsocketTransport:
        if self._transport is None:
            raise FleetError("Client not initialized. Use 'async with FleetClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_vehicle_updates(self, start: datetime, duration_seconds: float) -> list[VehicleRecord]:
        """Fetch one window of vehicle updates for the configured fleet."""
        transport = self._require_transport()
        return await fetch_vehicle_updates(
            self._credentials,
            self._credentials.fleet_key,
            format_iso8601(start),
            duration_seconds,
            transport,
        )

    # ------------------------------------------------------------------
    # Animation
    # ------------------------------------------------------------------

    def animate(
        self,
        options: AnimationOptions,
        *,
        on_frame: Callable[[list[VehicleFrameState]], None],
        on_loading_change: Callable[[bool], None] | None = None,
        projector: FrameProjector = select_current_updates,
    ) -> VehicleAnimation:
        """Create an animation session bound to this client's transport.

        The session is not started; use it as an async context manager or
        call :meth:`VehicleAnimation.start`. It is stopped when the client
        closes.
        """
        transport = self._require_transport()
        animation = VehicleAnimation(
            options,
            credentials=self._credentials,
            transport=transport,
            on_frame=on_frame,
            on_loading_change=on_loading_change,
            clock_source=self._clock_source or AsyncioFrameClock(self._config.frame_rate),
            projector=projector,
        )
        self._animations = [session for session in self._animations if session.state is not DriverState.STOPPED]
        self._animations.append(animation)
        _logger.debug("Created animation session live=%s", options.is_live)
        return animation
