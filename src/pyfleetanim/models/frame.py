"""Per-frame output and viewport models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from pyfleetanim.models.vehicle import VehicleUpdate


class BoundingBox(BaseModel):
    """Rectangular map viewport in degrees.

    ``west > east`` describes a box crossing the antimeridian.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    south: float = Field(ge=-90.0, le=90.0)
    west: float = Field(ge=-180.0, le=180.0)
    north: float = Field(ge=-90.0, le=90.0)
    east: float = Field(ge=-180.0, le=180.0)

    @model_validator(mode="after")
    def _check_latitudes(self) -> BoundingBox:
        if self.south > self.north:
            raise ValueError("south must not exceed north")
        return self

    def contains(self, latitude: float, longitude: float) -> bool:
        if not self.south <= latitude <= self.north:
            return False
        if self.west <= self.east:
            return self.west <= longitude <= self.east
        return longitude >= self.west or longitude <= self.east


class VehicleFrameState(BaseModel):
    """State of one vehicle as displayed in a single frame."""

    model_config = ConfigDict(frozen=True)

    vehicle_id: str
    update: VehicleUpdate
    schedule: list[Any] | None = None
