"""Websocket transport to the realtime vehicle update service."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyfleetanim._redact import redact_for_log
from pyfleetanim.exceptions import FleetTransportError

_logger = logging.getLogger(__name__)

_CLOSED_TYPES = frozenset(
    {
        aiohttp.WSMsgType.CLOSE,
        aiohttp.WSMsgType.CLOSING,
        aiohttp.WSMsgType.CLOSED,
        aiohttp.WSMsgType.ERROR,
    }
)


class Transport(Protocol):
    """Structural transport interface used by the data fetcher.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`WebsocketTransport`) concrete.
    """

    @property
    def is_ready(self) -> bool: ...

    async def request(self, message: Mapping[str, Any]) -> dict[str, Any]: ...


class WebsocketTransport:
    """Request/reply over a single websocket, correlated by ``requestId``.

    Requests are serialized: one outstanding reply at a time. Messages that
    do not answer the current request (unsolicited pushes, late replies to
    timed-out requests) are skipped.
    """

    def __init__(
        self,
        url: str,
        http_session: aiohttp.ClientSession,
        *,
        request_timeout: float = 15.0,
        heartbeat: float | None = 30.0,
    ) -> None:
        self._url = url
        self._http = http_session
        self._request_timeout = request_timeout
        self._heartbeat = heartbeat
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._lock = asyncio.Lock()

    @property
    def is_ready(self) -> bool:
        """Whether the websocket is connected and open."""
        return self._ws is not None and not self._ws.closed

    async def connect(self) -> None:
        if self.is_ready:
            return
        _logger.debug("Connecting websocket %s", self._url)
        try:
            self._ws = await self._http.ws_connect(self._url, heartbeat=self._heartbeat)
        except aiohttp.ClientError as exc:
            raise FleetTransportError(
                f"Websocket connection to {self._url} failed: {exc}",
                endpoint=self._url,
            ) from exc

    async def close(self) -> None:
        ws = self._ws
        self._ws = None
        if ws is not None and not ws.closed:
            await ws.close()
            _logger.debug("Websocket %s closed", self._url)

    def _decode(self, text: str) -> dict[str, Any]:
        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise FleetTransportError(
                f"Invalid JSON from {self._url}: {text[:200]}",
                endpoint=self._url,
            ) from exc
        if not isinstance(body, dict):
            raise FleetTransportError(
                f"Reply from {self._url} is not a JSON object",
                endpoint=self._url,
            )
        return body

    async def _await_reply(self, ws: aiohttp.ClientWebSocketResponse, request_id: Any) -> dict[str, Any]:
        while True:
            msg = await ws.receive()
            if msg.type in _CLOSED_TYPES:
                raise FleetTransportError(
                    f"Websocket {self._url} closed while awaiting reply",
                    endpoint=self._url,
                )
            if msg.type != aiohttp.WSMsgType.TEXT:
                continue
            body = self._decode(msg.data)
            if request_id is None or body.get("requestId") == request_id:
                return body
            _logger.debug("Skipping unrelated message requestId=%s", body.get("requestId"))

    async def request(self, message: Mapping[str, Any]) -> dict[str, Any]:
        """Send *message* and return the JSON reply carrying the same ``requestId``."""
        ws = self._ws
        if ws is None or ws.closed:
            raise FleetTransportError("Websocket is not connected", endpoint=self._url)

        request_id = message.get("requestId")
        async with self._lock:
            _logger.debug("SEND %s %s", self._url, redact_for_log(message))
            try:
                await ws.send_str(json.dumps(dict(message), separators=(",", ":")))
                async with asyncio.timeout(self._request_timeout):
                    reply = await self._await_reply(ws, request_id)
            except FleetTransportError:
                raise
            except TimeoutError as exc:
                raise FleetTransportError(
                    f"No reply from {self._url} within {self._request_timeout}s",
                    endpoint=self._url,
                ) from exc
            except (aiohttp.ClientError, ConnectionResetError) as exc:
                raise FleetTransportError(
                    f"Request to {self._url} failed: {exc}",
                    endpoint=self._url,
                ) from exc

        _logger.debug("RECV %s %s", self._url, redact_for_log(reply))
        return reply
