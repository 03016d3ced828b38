"""Vehicle update batch endpoint.

One request asks for every update produced by a fleet during
``[start, start + duration)``; the reply carries one record per vehicle.
"""

from __future__ import annotations

import logging
import secrets
from typing import Any, Protocol

from pyfleetanim._constants import AUTH_ERROR_CODES, UPDATES_ACTION
from pyfleetanim._transport import Transport
from pyfleetanim.exceptions import FleetApiError, FleetAuthenticationError
from pyfleetanim.ingestion.updates import parse_batch
from pyfleetanim.models.vehicle import VehicleRecord
from pyfleetanim.session import Credentials

_logger = logging.getLogger(__name__)


class UpdatesFetcher(Protocol):
    """Async data fetcher consumed by the animation driver.

    The awaited return value is the single result delivery of a call.
    """

    async def __call__(
        self,
        credentials: Credentials,
        source_id: str,
        window_start_iso: str,
        window_length_seconds: float,
        transport: Transport,
    ) -> list[VehicleRecord]: ...


def _duration_value(seconds: float) -> float | int:
    value = float(seconds)
    return int(value) if value.is_integer() else value


def build_updates_request(
    credentials: Credentials,
    source_id: str,
    window_start_iso: str,
    window_length_seconds: float,
) -> dict[str, Any]:
    """Build the request message for one update window."""
    return {
        "action": UPDATES_ACTION,
        "requestId": secrets.token_hex(8).upper(),
        "apiKey": credentials.api_key,
        "fleetKey": source_id,
        "start": window_start_iso,
        "duration": _duration_value(window_length_seconds),
    }


async def fetch_vehicle_updates(
    credentials: Credentials,
    source_id: str,
    window_start_iso: str,
    window_length_seconds: float,
    transport: Transport,
) -> list[VehicleRecord]:
    """Fetch every vehicle update of *source_id* within one window.

    Parameters
    ----------
    credentials : Credentials
        Credentials of the current user session.
    source_id : str
        Fleet whose updates are requested.
    window_start_iso : str
        Window start, ISO-8601 in UTC.
    window_length_seconds : float
        Window length in seconds.
    transport : Transport
        Connected transport.

    Returns
    -------
    list[VehicleRecord]
        One record per vehicle; malformed entries are dropped.

    Raises
    ------
    FleetAuthenticationError
        If the service rejects the credentials.
    FleetApiError
        If the service replies with any other non-zero code.
    FleetTransportError
        If the transport fails.
    """
    message = build_updates_request(credentials, source_id, window_start_iso, window_length_seconds)
    response = await transport.request(message)

    code = str(response.get("code", "0"))
    if code != "0":
        error_cls = FleetAuthenticationError if code in AUTH_ERROR_CODES else FleetApiError
        raise error_cls(
            f"{UPDATES_ACTION} failed: code={code} message={response.get('message', '')}",
            code=code,
            endpoint=UPDATES_ACTION,
        )

    records = parse_batch(response.get("data"))
    _logger.debug(
        "Fetched %d vehicle records start=%s duration=%s",
        len(records),
        window_start_iso,
        message["duration"],
    )
    return records
