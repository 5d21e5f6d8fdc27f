"""Review-status cycling.

The review state machine is the fixed ordered set Draft -> Needs Review ->
Ready, cycled in both directions with wraparound.  No transition is gated.
"""
from __future__ import annotations

from typing import Union

from rundown_editor.models import ReviewStatus

_ORDER = (ReviewStatus.DRAFT, ReviewStatus.NEEDS_REVIEW, ReviewStatus.READY)


def _step(status: Union[ReviewStatus, str], direction: int) -> ReviewStatus:
    index = _ORDER.index(ReviewStatus(status))
    return _ORDER[(index + direction) % len(_ORDER)]


def next_status(status: Union[ReviewStatus, str]) -> ReviewStatus:
    """``Ready`` wraps to ``Draft``."""
    return _step(status, 1)


def prev_status(status: Union[ReviewStatus, str]) -> ReviewStatus:
    """``Draft`` wraps to ``Ready``."""
    return _step(status, -1)


def cycle_status(status: Union[ReviewStatus, str], direction: int) -> ReviewStatus:
    """Move one step forward (direction > 0) or back (direction < 0)."""
    if direction == 0:
        raise ValueError("direction must be non-zero")
    return next_status(status) if direction > 0 else prev_status(status)
