"""Vehicle update and record models."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import AliasChoices, Field, field_validator, model_validator

from pyfleetanim.ingestion.normalize import first_float, safe_str
from pyfleetanim.models._base import FleetBaseModel, FleetTimestamp, parse_timestamp

_logger = logging.getLogger(__name__)


class VehicleUpdate(FleetBaseModel):
    """One observation of a vehicle at an instant.

    Every key of the raw update other than ``time`` is kept verbatim in
    :attr:`payload`.
    """

    time: FleetTimestamp
    """Observation instant (UTC)."""
    payload: dict[str, Any] = Field(default_factory=dict)
    """Observation data (position, bearing, status...)."""

    @model_validator(mode="before")
    @classmethod
    def _collect_payload(cls, values: Any) -> Any:
        if not isinstance(values, dict) or "payload" in values:
            return values
        payload = {key: value for key, value in values.items() if key != "time"}
        return {"time": values.get("time"), "payload": payload}

    @property
    def latitude(self) -> float | None:
        return first_float(self.payload, "latitude", "lat")

    @property
    def longitude(self) -> float | None:
        return first_float(self.payload, "longitude", "lng", "lon")

    @property
    def bearing(self) -> float | None:
        return first_float(self.payload, "bearing", "heading", "direction")


class VehicleRecord(FleetBaseModel):
    """Per-vehicle aggregate of static schedule data and time-stamped updates.

    Two records with the same :attr:`vehicle_id` describe the same
    physical vehicle.
    """

    vehicle_id: str = Field(validation_alias=AliasChoices("vehicleId", "vehicle_id", "entityId", "id", "vid"))
    """Stable vehicle identity."""
    schedule: list[Any] | None = None
    """Static plan data (trips, stops). Always replaced wholesale, never merged."""
    updates: list[VehicleUpdate] = Field(default_factory=list)
    """Observations, ascending by time when the source delivers them in order."""

    @field_validator("vehicle_id", mode="before")
    @classmethod
    def _normalize_vehicle_id(cls, value: Any) -> str:
        vehicle_id = safe_str(value)
        if vehicle_id is None:
            raise ValueError("vehicle_id must be non-empty")
        return vehicle_id

    @field_validator("schedule", mode="before")
    @classmethod
    def _coerce_schedule(cls, value: Any) -> list[Any] | None:
        return value if isinstance(value, list) else None

    @field_validator("updates", mode="before")
    @classmethod
    def _drop_unparseable_updates(cls, value: Any) -> list[Any]:
        if not isinstance(value, list):
            return []
        kept: list[Any] = []
        for item in value:
            if isinstance(item, VehicleUpdate):
                kept.append(item)
            elif isinstance(item, dict) and parse_timestamp(item.get("time")) is not None:
                kept.append(item)
            else:
                _logger.debug("Dropping update without usable time: %r", item)
        return kept

    @property
    def has_content(self) -> bool:
        """Whether the record carries at least one update or a non-empty schedule."""
        return bool(self.updates) or bool(self.schedule)
