# Rundown Editor: segment timing, ordering and auto-save for one show at a time
from .controller import RundownController, RundownState
from .segment_store import SegmentStore
from .timecode import format_time, parse_time

__all__ = ["RundownController", "RundownState", "SegmentStore", "format_time", "parse_time"]
