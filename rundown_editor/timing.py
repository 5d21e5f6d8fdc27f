"""Timing snapshot: total runtime against the target duration.

All functions are pure.  The snapshot is a view-model recomputed from scratch
on every segment mutation; it is never persisted.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from rundown_editor.models import Segment, TimingStatus
from rundown_editor.timecode import format_time


@dataclass(frozen=True)
class TimingSnapshot:
    total_seconds: int
    target_seconds: int
    delta: int  # total - target; the sign only drives classification
    status: TimingStatus

    @property
    def abs_delta(self) -> int:
        return abs(self.delta)

    @property
    def label(self) -> str:
        """``Balanced``, ``Over 01:40`` or ``Under 01:40``."""
        if self.status is TimingStatus.BALANCED:
            return TimingStatus.BALANCED.value
        return f"{self.status.value} {format_time(self.abs_delta)}"


def classify_delta(delta: int) -> TimingStatus:
    if delta == 0:
        return TimingStatus.BALANCED
    return TimingStatus.OVER if delta > 0 else TimingStatus.UNDER


def total_duration(segments: Iterable[Segment]) -> int:
    return sum(seg.duration for seg in segments)


def compute_timing(total_seconds: int, target_seconds: int) -> TimingSnapshot:
    """Build a snapshot from an already-summed total."""
    delta = total_seconds - target_seconds
    return TimingSnapshot(
        total_seconds=total_seconds,
        target_seconds=target_seconds,
        delta=delta,
        status=classify_delta(delta),
    )
