"""Tests for the navigation module."""

import pytest

from lesson_progress.navigation import (
    DEFAULT_DWELL_MS,
    NavigateAction,
    SlideNavigator,
    compute_dwell_target,
    compute_next_on_finish,
    compute_target_index,
)

PREV = NavigateAction.PREV
NEXT = NavigateAction.NEXT


class TestComputeTargetIndex:
    """Tests for manual prev/next steps."""

    @pytest.mark.parametrize("total", [0, -1, -5])
    @pytest.mark.parametrize("loop", [False, True])
    @pytest.mark.parametrize("current", [0, 3, -2])
    def test_degenerate_sequence_returns_current(self, total, loop, current):
        """Test that an empty sequence leaves the index untouched."""
        assert compute_target_index(current, total, loop, PREV) == current
        assert compute_target_index(current, total, loop, NEXT) == current

    def test_prev_clamps_at_start(self):
        """Test that prev at index 0 stays put without loop."""
        assert compute_target_index(0, 5, False, PREV) == 0

    def test_prev_wraps_to_last(self):
        """Test that prev at index 0 wraps to the last item with loop."""
        assert compute_target_index(0, 5, True, PREV) == 4

    def test_next_clamps_at_end(self):
        """Test that next at the last index stays put without loop."""
        assert compute_target_index(4, 5, False, NEXT) == 4

    def test_next_wraps_to_first(self):
        """Test that next at the last index wraps to 0 with loop."""
        assert compute_target_index(4, 5, True, NEXT) == 0

    def test_middle_steps(self):
        """Test plain steps away from the ends."""
        assert compute_target_index(2, 5, False, PREV) == 1
        assert compute_target_index(2, 5, False, NEXT) == 3
        assert compute_target_index(4, 5, True, PREV) == 3

    @pytest.mark.parametrize("loop", [False, True])
    def test_single_item(self, loop):
        """Test that a one-item sequence never moves."""
        assert compute_target_index(0, 1, loop, PREV) == 0
        assert compute_target_index(0, 1, loop, NEXT) == 0

    def test_no_loop_is_monotonic_and_bounded(self):
        """Test that without loop, next never decreases and prev never increases."""
        total = 6
        for current in range(total):
            nxt = compute_target_index(current, total, False, NEXT)
            prev = compute_target_index(current, total, False, PREV)
            assert current <= nxt <= total - 1
            assert 0 <= prev <= current

    def test_accepts_action_strings(self):
        """Test that plain "prev"/"next" strings work."""
        assert compute_target_index(1, 3, False, "prev") == 0
        assert compute_target_index(1, 3, False, "next") == 2

    def test_rejects_unknown_action(self):
        """Test that an unknown action is rejected."""
        with pytest.raises(ValueError):
            compute_target_index(1, 3, False, "sideways")


class TestComputeNextOnFinish:
    """Tests for auto-advance after an item finishes."""

    @pytest.mark.parametrize("loop", [False, True])
    def test_degenerate_sequence(self, loop):
        """Test that an empty sequence has no next item."""
        assert compute_next_on_finish(0, 0, loop) is None
        assert compute_next_on_finish(2, -1, loop) is None

    def test_advances_in_middle(self):
        """Test advancing from a non-final item."""
        assert compute_next_on_finish(0, 5, False) == 1
        assert compute_next_on_finish(3, 5, True) == 4

    def test_complete_without_loop(self):
        """Test that the last item completes the sequence without loop."""
        assert compute_next_on_finish(4, 5, False) is None

    def test_restarts_with_loop(self):
        """Test that the last item restarts the cycle with loop."""
        assert compute_next_on_finish(4, 5, True) == 0

    def test_single_item(self):
        """Test the one-item sequence for both loop settings."""
        assert compute_next_on_finish(0, 1, False) is None
        assert compute_next_on_finish(0, 1, True) == 0


class TestComputeDwellTarget:
    """Tests for silent slide auto-advance."""

    def test_slide_with_audio_does_not_dwell(self):
        """Test that audio slides wait for the track instead."""
        assert compute_dwell_target(0, 5, has_audio=True) is None

    def test_silent_slide_advances(self):
        """Test that a silent slide moves to the next one."""
        assert compute_dwell_target(1, 5, has_audio=False) == 2

    def test_never_wraps(self):
        """Test that dwell advancing stops at the last slide."""
        assert compute_dwell_target(4, 5, has_audio=False) is None

    def test_empty_sequence(self):
        """Test that an empty sequence never dwells."""
        assert compute_dwell_target(0, 0, has_audio=False) is None


class TestSlideNavigator:
    """Tests for the SlideNavigator state holder."""

    def test_defaults(self):
        """Test default position and dwell time."""
        nav = SlideNavigator(total=3)
        assert nav.current == 0
        assert nav.loop is False
        assert nav.dwell_ms == DEFAULT_DWELL_MS

    def test_navigate_reports_change(self):
        """Test that navigate returns whether the index moved."""
        nav = SlideNavigator(total=3)
        assert nav.navigate(NEXT) is True
        assert nav.current == 1
        assert nav.navigate(PREV) is True
        assert nav.navigate(PREV) is False
        assert nav.current == 0

    def test_navigate_with_loop(self):
        """Test wrapping through the navigator."""
        nav = SlideNavigator(total=3, loop=True)
        nav.navigate(PREV)
        assert nav.current == 2
        nav.navigate(NEXT)
        assert nav.current == 0

    def test_finish_track_completes(self):
        """Test that finishing the last track leaves the index alone."""
        nav = SlideNavigator(total=2, current=1)
        assert nav.finish_track() is None
        assert nav.current == 1

    def test_finish_track_advances_and_loops(self):
        """Test that finishing a track moves forward and wraps with loop."""
        nav = SlideNavigator(total=2, loop=True)
        assert nav.finish_track() == 1
        assert nav.finish_track() == 0
        assert nav.current == 0

    def test_dwell_target(self):
        """Test dwell target from the current position."""
        nav = SlideNavigator(total=3, current=1)
        assert nav.dwell_target(has_audio=False) == 2
        assert nav.dwell_target(has_audio=True) is None

    def test_resize_clamps_index(self):
        """Test that shrinking the slide count keeps the index in bounds."""
        nav = SlideNavigator(total=5, current=4)
        nav.resize(3)
        assert nav.current == 2
        nav.resize(0)
        assert nav.current == 0

    def test_resize_keeps_valid_index(self):
        """Test that growing the slide count leaves the index alone."""
        nav = SlideNavigator(total=3, current=1)
        nav.resize(10)
        assert nav.current == 1
        assert nav.total == 10

    def test_reset(self):
        """Test returning to the first slide."""
        nav = SlideNavigator(total=5, current=3)
        nav.reset()
        assert nav.current == 0
