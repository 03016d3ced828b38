"""Animation session options."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pyfleetanim.models._base import FleetTimestamp


class AnimationOptions(BaseModel):
    """Options recognised by an animation session.

    Changing ``viewport``, ``is_live`` or ``animation_time`` restarts the
    session; ``is_playing``, ``speed_multiplier`` and ``is_seeking`` are
    applied in place.

    Parameters
    ----------
    viewport : object or None
        Spatial filter with a ``contains(latitude, longitude)`` method
        (e.g. :class:`~pyfleetanim.models.frame.BoundingBox`).
    animation_time : datetime
        Initial animation instant.
    is_live : bool
        Track near-real-time data instead of replaying history.
    is_seeking : bool
        The user is dragging the timeline; all logic is suspended.
    is_playing : bool
        Whether animation time advances.
    speed_multiplier : float
        Animation time advanced per unit of wall time.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    viewport: Any = None
    animation_time: FleetTimestamp
    is_live: bool = False
    is_seeking: bool = False
    is_playing: bool = True
    speed_multiplier: float = Field(default=1.0, ge=0.0)
