"""Enumerations shared by the state layer and the animation driver."""

from __future__ import annotations

from enum import StrEnum


class AnimationMode(StrEnum):
    LIVE = "live"
    REPLAY = "replay"


class DriverState(StrEnum):
    """Lifecycle of one animation session.

    There is no paused state: pausing keeps the loop ``RUNNING`` with
    playback frozen.
    """

    UNINITIALIZED = "uninitialized"
    RUNNING = "running"
    STOPPED = "stopped"
