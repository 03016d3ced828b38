"""Buffer window policy per animation mode.

Live data is sparse and recent, so live sessions fetch small windows
often. Historical data can be fetched in bulk, so replay sessions fetch
ten-minute windows.
"""

from __future__ import annotations

import dataclasses
from datetime import timedelta

from pyfleetanim.state.events import AnimationMode

#: Window start sits this far behind animation time, absorbing skew between
#: live production of data and its consumption.
WINDOW_BACK_OFFSET = timedelta(seconds=20)

#: Updates older than ``animation_time - TRIM_HORIZON`` are no longer renderable.
TRIM_HORIZON = timedelta(seconds=10)

#: A live window whose start drifts further than this from animation time is stale.
BACKGROUND_RESUME_THRESHOLD = timedelta(seconds=30)

#: Live animation time snaps to ``now - LIVE_START_OFFSET`` when data first arrives.
LIVE_START_OFFSET = timedelta(seconds=20)


@dataclasses.dataclass(frozen=True)
class WindowPolicy:
    """Fetch window sizing for one animation mode.

    Parameters
    ----------
    mode : AnimationMode
        Mode the constants apply to.
    initial_period : float
        Seconds of data requested by the first fetch.
    subsequent_period : float
        Seconds of data requested by every later fetch.
    retrieve_before : float
        A new fetch is issued once the window end is this many seconds
        (or fewer) ahead of animation time.
    """

    mode: AnimationMode
    initial_period: float
    subsequent_period: float
    retrieve_before: float

    @property
    def is_live(self) -> bool:
        return self.mode == AnimationMode.LIVE


LIVE_POLICY = WindowPolicy(
    mode=AnimationMode.LIVE,
    initial_period=40.0,
    subsequent_period=5.0,
    retrieve_before=10.0,
)

REPLAY_POLICY = WindowPolicy(
    mode=AnimationMode.REPLAY,
    initial_period=600.0,
    subsequent_period=600.0,
    retrieve_before=60.0,
)


def policy_for(is_live: bool) -> WindowPolicy:
    return LIVE_POLICY if is_live else REPLAY_POLICY
