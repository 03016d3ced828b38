from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from pyfleetanim.state.events import AnimationMode
from pyfleetanim.state.policy import LIVE_POLICY, REPLAY_POLICY, policy_for
from pyfleetanim.state.window import BufferWindow

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


def _window(start_offset: float, end_offset: float) -> BufferWindow:
    return BufferWindow(start=T0 + timedelta(seconds=start_offset), end=T0 + timedelta(seconds=end_offset))


def test_initialize_backs_start_off_by_twenty_seconds() -> None:
    window = BufferWindow.initialize(T0, 40)

    assert window.start == T0 - timedelta(seconds=20)
    assert window.end == window.start + timedelta(seconds=40)


def test_advance_is_contiguous() -> None:
    window = BufferWindow.initialize(T0, 600)
    nxt = window.advance(5)

    assert nxt.start == window.end
    assert nxt.end == window.end + timedelta(seconds=5)
    # The original window is untouched.
    assert window.end - window.start == timedelta(seconds=600)


@pytest.mark.parametrize("policy", [LIVE_POLICY, REPLAY_POLICY])
def test_near_end_boundary(policy) -> None:  # type: ignore[no-untyped-def]
    at_threshold = _window(-20, policy.retrieve_before)
    one_second_more = _window(-20, policy.retrieve_before + 1)

    assert at_threshold.is_near_end(T0, policy.retrieve_before) is True
    assert one_second_more.is_near_end(T0, policy.retrieve_before) is False


def test_near_end_when_window_already_exhausted() -> None:
    assert _window(-60, -30).is_near_end(T0, LIVE_POLICY.retrieve_before) is True


def test_was_suspended_uses_strict_thirty_second_threshold() -> None:
    window = _window(-20, 20)

    assert window.was_suspended(window.start + timedelta(seconds=31)) is True
    assert window.was_suspended(window.start - timedelta(seconds=31)) is True
    assert window.was_suspended(window.start + timedelta(seconds=30)) is False
    assert window.was_suspended(window.start + timedelta(seconds=29)) is False


def test_window_rejects_inverted_bounds() -> None:
    with pytest.raises(ValueError):
        _window(10, 0)


def test_policy_constants_per_mode() -> None:
    live = policy_for(True)
    replay = policy_for(False)

    assert live.mode == AnimationMode.LIVE
    assert (live.initial_period, live.subsequent_period, live.retrieve_before) == (40.0, 5.0, 10.0)
    assert replay.mode == AnimationMode.REPLAY
    assert (replay.initial_period, replay.subsequent_period, replay.retrieve_before) == (600.0, 600.0, 60.0)
    assert live.is_live and not replay.is_live
