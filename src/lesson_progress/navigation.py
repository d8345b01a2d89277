"""Index arithmetic for moving through an ordered list of slides or questions.

All functions are total: a sequence with ``total <= 0`` has no valid index
and the current position is handed back unchanged (or ``None`` where the
caller asks for a next item).
"""

from dataclasses import dataclass
from enum import Enum

# Silent slides stay on screen this long before moving on
DEFAULT_DWELL_MS = 2500


class NavigateAction(str, Enum):
    """Manual navigation direction."""

    PREV = "prev"
    NEXT = "next"


def compute_target_index(
    current: int,
    total: int,
    loop: bool,
    action: NavigateAction | str,
) -> int:
    """Get the index a manual prev/next step lands on.

    Args:
        current: Current zero-based index.
        total: Number of items in the sequence.
        loop: Wrap around at either end instead of clamping.
        action: ``NavigateAction.PREV`` or ``NavigateAction.NEXT``.

    Returns:
        The target index, or ``current`` if there is nowhere to go.
    """
    action = NavigateAction(action)
    if total <= 0:
        return current
    last = total - 1

    if action is NavigateAction.PREV:
        if current > 0:
            return current - 1
        return last if loop else current

    if current < last:
        return current + 1
    return 0 if loop else current


def compute_next_on_finish(current: int, total: int, loop: bool) -> int | None:
    """Get the index to auto-advance to once the current item finishes.

    Returns:
        The next index, or None when the sequence is complete.
    """
    if total <= 0:
        return None
    if current < total - 1:
        return current + 1
    if loop:
        return 0
    return None


def compute_dwell_target(current: int, total: int, has_audio: bool) -> int | None:
    """Get the index a silent slide advances to after its dwell period.

    Slides with audio advance on track finish instead, and dwell
    advancing never wraps around.
    """
    if has_audio or total <= 0:
        return None
    target = current + 1
    if target >= total:
        return None
    return target


@dataclass
class SlideNavigator:
    """Current position within one lesson's slides.

    ``dwell_ms`` is not used here; it is the delay the caller's timer waits
    before moving to ``dwell_target()`` on a silent slide.
    """

    total: int
    loop: bool = False
    current: int = 0
    dwell_ms: int = DEFAULT_DWELL_MS

    def navigate(self, action: NavigateAction | str) -> bool:
        """Step manually. Returns True if the index changed."""
        target = compute_target_index(self.current, self.total, self.loop, action)
        if target == self.current:
            return False
        self.current = target
        return True

    def finish_track(self) -> int | None:
        """Advance after the current slide's audio finished.

        Returns:
            The new index, or None if the lesson is complete (index unchanged).
        """
        target = compute_next_on_finish(self.current, self.total, self.loop)
        if target is not None:
            self.current = target
        return target

    def dwell_target(self, has_audio: bool) -> int | None:
        return compute_dwell_target(self.current, self.total, has_audio)

    def resize(self, total: int) -> None:
        """Keep the index in bounds after the slide count changed."""
        self.total = total
        if self.current >= total:
            self.current = max(0, total - 1)

    def reset(self) -> None:
        self.current = 0
