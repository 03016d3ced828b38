"""Fetch interval over source time."""

from __future__ import annotations

import dataclasses
from datetime import datetime, timedelta

from pyfleetanim.state.policy import BACKGROUND_RESUME_THRESHOLD, WINDOW_BACK_OFFSET


@dataclasses.dataclass(frozen=True)
class BufferWindow:
    """The ``[start, end)`` interval of source time being fetched.

    Instances are immutable; every operation returns a new window.
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"window start {self.start} is after end {self.end}")

    @classmethod
    def initialize(cls, animation_time: datetime, period_seconds: float) -> BufferWindow:
        start = animation_time - WINDOW_BACK_OFFSET
        return cls(start=start, end=start + timedelta(seconds=period_seconds))

    def is_near_end(self, animation_time: datetime, retrieve_before_seconds: float) -> bool:
        """Whether the window is close enough to exhaustion that the next fetch is due."""
        return (self.end - animation_time).total_seconds() <= retrieve_before_seconds

    def advance(self, period_seconds: float) -> BufferWindow:
        """Next contiguous window: the old end becomes the new start."""
        return BufferWindow(start=self.end, end=self.end + timedelta(seconds=period_seconds))

    def was_suspended(
        self,
        animation_time: datetime,
        threshold: timedelta = BACKGROUND_RESUME_THRESHOLD,
    ) -> bool:
        """Whether animation time drifted so far from the window that it must be rebuilt.

        Happens when the process (or the page hosting it) was suspended
        long enough for the wall clock to leave the window behind.
        """
        return abs(animation_time - self.start) > threshold
