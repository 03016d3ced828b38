"""Frame projection: which vehicle states are visible at an animation instant."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Protocol

from pyfleetanim.models.frame import VehicleFrameState
from pyfleetanim.models.vehicle import VehicleRecord, VehicleUpdate


class Viewport(Protocol):
    """Spatial filter supplied by the map layer."""

    def contains(self, latitude: float, longitude: float) -> bool: ...


FrameProjector = Callable[[Sequence[VehicleRecord], datetime, Viewport | None], list[VehicleFrameState]]


def _current_update(updates: Sequence[VehicleUpdate], animation_time: datetime) -> VehicleUpdate | None:
    current: VehicleUpdate | None = None
    for update in updates:
        if update.time > animation_time:
            continue
        if current is None or update.time >= current.time:
            current = update
    return current


def select_current_updates(
    records: Sequence[VehicleRecord],
    animation_time: datetime,
    viewport: Viewport | None,
) -> list[VehicleFrameState]:
    """Pick the latest update at or before *animation_time* for every vehicle.

    Vehicles without such an update are not shown. With a viewport, vehicles
    outside it (or without a position) are filtered out.
    """
    states: list[VehicleFrameState] = []
    for record in records:
        update = _current_update(record.updates, animation_time)
        if update is None:
            continue
        if viewport is not None:
            latitude, longitude = update.latitude, update.longitude
            if latitude is None or longitude is None:
                continue
            if not viewport.contains(latitude, longitude):
                continue
        states.append(VehicleFrameState(vehicle_id=record.vehicle_id, update=update, schedule=record.schedule))
    return states


def project_frame(
    records: Sequence[VehicleRecord],
    animation_time: datetime,
    viewport: Viewport | None,
    projector: FrameProjector = select_current_updates,
) -> list[VehicleFrameState]:
    """Run *projector* over a fully merged buffer snapshot."""
    return projector(tuple(records), animation_time, viewport)
