"""
segment_store.py: Ordered segment collection for the active rundown.

Invariants maintained after every mutation:
  * ordinals form the dense sequence 0..N-1 in list order
  * every duration is >= 0
  * pinned segments (show intro/outro) are never removed

Each mutating operation calls the owner's ``on_change(reason)`` callback
synchronously, after the new state is in place.  ``load`` is a wholesale
replace from the server and does not notify.

Totals are recomputed from scratch on demand; segment counts are small.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Union

from pydantic import ValidationError

from rundown_editor.errors import SegmentError
from rundown_editor.models import Identifier, Segment

logger = logging.getLogger(__name__)

OnChange = Callable[[str], None]

TRANSIENT_PREFIX = "new-"

_EDITABLE_FIELDS = frozenset({"title", "duration", "notes", "segment_type", "status"})


def new_transient_id() -> str:
    """Identifier for a segment the server has not stored yet."""
    return f"{TRANSIENT_PREFIX}{uuid.uuid4().hex[:12]}"


def is_transient_id(segment_id: Identifier) -> bool:
    return isinstance(segment_id, str) and segment_id.startswith(TRANSIENT_PREFIX)


def default_segments() -> List[Segment]:
    """Pinned intro/outro pair for a rundown that starts out empty."""
    return [
        Segment(id=new_transient_id(), title="Show Intro", ordinal=0, duration=60,
                segment_type="intro", pinned=True),
        Segment(id=new_transient_id(), title="Show Outro", ordinal=1, duration=45,
                segment_type="outro", pinned=True),
    ]


class SegmentStore:
    """In-memory ordered segments of the currently loaded rundown.

    Args:
        on_change: Called with a short reason string after each mutation.
    """

    def __init__(self, on_change: Optional[OnChange] = None) -> None:
        self._segments: List[Segment] = []
        self.on_change = on_change

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def segments(self) -> List[Segment]:
        return list(self._segments)

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[Segment]:
        return iter(list(self._segments))

    def index_of(self, segment_id: Identifier) -> int:
        for i, seg in enumerate(self._segments):
            if str(seg.id) == str(segment_id):
                return i
        raise SegmentError(f"Segment not found: {segment_id}")

    def get(self, segment_id: Identifier) -> Segment:
        return self._segments[self.index_of(segment_id)]

    def total_duration_seconds(self) -> int:
        return sum(seg.duration for seg in self._segments)

    def neighbour(self, segment_id: Identifier, step: int) -> Identifier:
        """Id of the segment *step* places away, clamped to the ends."""
        if not self._segments:
            raise SegmentError("No segments loaded")
        index = self.index_of(segment_id) + step
        index = max(0, min(len(self._segments) - 1, index))
        return self._segments[index].id

    def to_payload(self) -> List[Dict[str, Any]]:
        """Persisted form of the sequence (wire names, no UI state)."""
        return [seg.model_dump(mode="json", by_alias=True) for seg in self._segments]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def load(self, segments: Iterable[Union[Segment, Dict[str, Any]]]) -> None:
        """Replace the sequence with *segments* in the server's order."""
        loaded = [
            seg if isinstance(seg, Segment) else Segment.model_validate(seg)
            for seg in segments
        ]
        # stable sort: equal ordinals keep the order they arrived in
        loaded.sort(key=lambda s: s.ordinal)
        self._segments = loaded
        self._renumber()

    def clear(self) -> None:
        self._segments = []

    def move_segment(self, from_index: int, to_index: int) -> None:
        """Remove the segment at *from_index* and reinsert it at *to_index*."""
        n = len(self._segments)
        if not 0 <= from_index < n:
            raise SegmentError(f"from_index {from_index} out of range (0..{n - 1})")
        if not 0 <= to_index < n:
            raise SegmentError(f"to_index {to_index} out of range (0..{n - 1})")
        if from_index == to_index:
            return
        seg = self._segments.pop(from_index)
        self._segments.insert(to_index, seg)
        self._renumber()
        logger.debug("Moved segment %s from %d to %d", seg.id, from_index, to_index)
        self._notify("move")

    def insert_segment(
        self,
        data: Union[Segment, Dict[str, Any]],
        after_segment_id: Optional[Identifier] = None,
    ) -> Segment:
        """Add a segment at the end, or right after *after_segment_id*.

        The new segment always gets a fresh transient id.
        """
        fields = data.model_dump(by_alias=False) if isinstance(data, Segment) else dict(data)
        fields.pop("id", None)
        fields.pop("ordinal", None)
        fields.pop("order_index", None)
        try:
            seg = Segment.model_validate({**fields, "id": new_transient_id()})
        except ValidationError as exc:
            raise SegmentError(f"Invalid segment: {exc.errors()[0]['msg']}") from exc

        if after_segment_id is None:
            position = len(self._segments)
        else:
            position = self.index_of(after_segment_id) + 1
        self._segments.insert(position, seg)
        self._renumber()
        self._notify("insert")
        return seg

    def remove_segment(self, segment_id: Identifier) -> Segment:
        index = self.index_of(segment_id)
        seg = self._segments[index]
        if seg.pinned:
            raise SegmentError(f"Cannot delete pinned segment '{seg.title}'")
        del self._segments[index]
        self._renumber()
        self._notify("remove")
        return seg

    def update_segment(self, segment_id: Identifier, **fields: Any) -> Segment:
        """Edit title, duration, notes, segment_type or status."""
        unknown = set(fields) - _EDITABLE_FIELDS
        if unknown:
            raise SegmentError(f"Cannot edit segment field(s): {', '.join(sorted(unknown))}")
        seg = self.get(segment_id)
        try:
            updated = seg.model_copy()
            for name, value in fields.items():
                setattr(updated, name, value)  # validate_assignment checks each value
        except ValidationError as exc:
            raise SegmentError(f"Invalid value for segment: {exc.errors()[0]['msg']}") from exc
        self._segments[self.index_of(segment_id)] = updated
        self._notify("update")
        return updated

    def duplicate_segment(self, segment_id: Identifier) -> Segment:
        source = self.get(segment_id)
        copy_fields = source.model_dump(by_alias=False)
        copy_fields["title"] = f"{source.title} (copy)"
        copy_fields["pinned"] = False
        return self.insert_segment(copy_fields, after_segment_id=segment_id)

    # ------------------------------------------------------------------
    # Transient UI state (not persisted, no notification)
    # ------------------------------------------------------------------

    def toggle_open(self, segment_id: Identifier) -> bool:
        seg = self.get(segment_id)
        seg.is_open = not seg.is_open
        return seg.is_open

    def expand_all(self) -> None:
        for seg in self._segments:
            seg.is_open = True

    def collapse_all(self) -> None:
        for seg in self._segments:
            seg.is_open = False

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _renumber(self) -> None:
        for i, seg in enumerate(self._segments):
            if seg.ordinal != i:
                seg.ordinal = i

    def _notify(self, reason: str) -> None:
        if self.on_change is not None:
            self.on_change(reason)
