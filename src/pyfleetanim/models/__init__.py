"""Data models for realtime vehicle payloads."""

from pyfleetanim.models._base import FleetBaseModel, FleetTimestamp, format_iso8601, parse_timestamp
from pyfleetanim.models.frame import BoundingBox, VehicleFrameState
from pyfleetanim.models.options import AnimationOptions
from pyfleetanim.models.vehicle import VehicleRecord, VehicleUpdate

__all__ = [
    "AnimationOptions",
    "BoundingBox",
    "FleetBaseModel",
    "FleetTimestamp",
    "VehicleFrameState",
    "VehicleRecord",
    "VehicleUpdate",
    "format_iso8601",
    "parse_timestamp",
]
