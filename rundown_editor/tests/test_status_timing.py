"""Tests for review-status cycling and the timing snapshot."""
from __future__ import annotations

import pytest

from rundown_editor.models import ReviewStatus, Segment, TimingStatus
from rundown_editor.status import cycle_status, next_status, prev_status
from rundown_editor.timing import classify_delta, compute_timing, total_duration


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------

class TestStatusCycle:

    def test_forward_order(self):
        assert next_status("Draft") is ReviewStatus.NEEDS_REVIEW
        assert next_status(ReviewStatus.NEEDS_REVIEW) is ReviewStatus.READY

    def test_ready_wraps_to_draft(self):
        assert next_status("Ready") is ReviewStatus.DRAFT

    def test_draft_wraps_back_to_ready(self):
        assert prev_status("Draft") is ReviewStatus.READY

    def test_three_steps_return_to_start(self):
        status = ReviewStatus.NEEDS_REVIEW
        for _ in range(3):
            status = next_status(status)
        assert status is ReviewStatus.NEEDS_REVIEW

    def test_cycle_direction(self):
        assert cycle_status("Draft", 1) is ReviewStatus.NEEDS_REVIEW
        assert cycle_status("Draft", -1) is ReviewStatus.READY

    def test_zero_direction_rejected(self):
        with pytest.raises(ValueError):
            cycle_status("Draft", 0)

    def test_unknown_status_rejected(self):
        with pytest.raises(ValueError):
            next_status("Archived")


# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------

class TestTiming:

    def test_exact_match_is_balanced(self):
        snap = compute_timing(1200, 1200)
        assert snap.status is TimingStatus.BALANCED
        assert snap.delta == 0
        assert snap.label == "Balanced"

    def test_over(self):
        snap = compute_timing(1300, 1200)
        assert snap.status is TimingStatus.OVER
        assert snap.abs_delta == 100
        assert snap.label == "Over 01:40"

    def test_under_shows_absolute_delta(self):
        snap = compute_timing(1100, 1200)
        assert snap.status is TimingStatus.UNDER
        assert snap.delta == -100
        assert snap.abs_delta == 100
        assert snap.label == "Under 01:40"

    def test_one_second_off_is_not_balanced(self):
        assert classify_delta(1) is TimingStatus.OVER
        assert classify_delta(-1) is TimingStatus.UNDER

    def test_total_duration(self):
        segs = [Segment(id=i, duration=d) for i, d in enumerate([60, 0, 45])]
        assert total_duration(segs) == 105
