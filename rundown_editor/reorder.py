"""Pointer-drag list reordering, independent of what is being reordered.

The controller maps a drag gesture over a vertical list onto a
``(original_index, new_index)`` pair and hands it to the caller's drop
callback.  It knows nothing about segments; any sequence of items with a
vertical geometry can be reordered (segments, talent, ...).

State machine::

    Idle --drag_start--> Dragging --drag_over*--> Dragging
    Dragging --drop--> callback(item, original, new) --> Idle
    Dragging --drag_end--> Idle           (cancel; no callback)

The insertion indicator is hidden on every exit from Dragging, including
when the drop callback raises.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Generic, Optional, Protocol, Sequence, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# (top, height) in the same coordinate space as the pointer
Geometry = Callable[[T], Tuple[float, float]]


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


class Indicator(Protocol):
    def show(self, index: int) -> None: ...

    def hide(self) -> None: ...


class _NullIndicator:
    def show(self, index: int) -> None:
        pass

    def hide(self) -> None:
        pass


def insertion_index(
    siblings: Sequence[T],
    geometry: Geometry,
    pointer_y: float,
) -> int:
    """Index among *siblings* before which a dropped item lands.

    The sibling whose vertical midpoint is the closest one below the pointer
    (smallest negative offset ``pointer_y - midpoint``) wins; when the pointer
    is below every midpoint the result is ``len(siblings)`` (end of list).
    """
    best_index = len(siblings)
    best_offset = float("-inf")
    for i, sibling in enumerate(siblings):
        top, height = geometry(sibling)
        offset = pointer_y - top - height / 2
        if best_offset < offset < 0:
            best_offset = offset
            best_index = i
    return best_index


class DragReorderController(Generic[T]):
    """Drive one drag gesture at a time over a list of items.

    Args:
        items:         Returns the current items in display order.
        geometry:      Returns ``(top, height)`` for an item.
        drop_callback: ``(item, original_index, new_index)`` on a completed drop.
        is_handle:     Optional gate ``(item, target) -> bool``; when given, a
                       drag only starts if the pressed target is the handle.
        indicator:     Optional insertion-indicator renderer.
    """

    def __init__(
        self,
        items: Callable[[], Sequence[T]],
        geometry: Geometry,
        drop_callback: Callable[[T, int, int], None],
        *,
        is_handle: Optional[Callable[[T, object], bool]] = None,
        indicator: Optional[Indicator] = None,
    ) -> None:
        self._items = items
        self._geometry = geometry
        self._drop_callback = drop_callback
        self._is_handle = is_handle
        self.indicator: Indicator = indicator or _NullIndicator()

        self.state = DragState.IDLE
        self._dragged: Optional[T] = None
        self._original_index: Optional[int] = None
        self._target_index: Optional[int] = None

    @property
    def dragged(self) -> Optional[T]:
        return self._dragged

    def _siblings(self) -> list:
        return [item for item in self._items() if item is not self._dragged]

    def drag_start(self, item: T, target: object = None) -> bool:
        """Begin dragging *item*.  Returns False when the drag is refused."""
        if self.state is DragState.DRAGGING:
            return False
        if self._is_handle is not None and not self._is_handle(item, target):
            return False
        items = list(self._items())
        for index, candidate in enumerate(items):
            if candidate is item:
                break
        else:
            return False
        self._dragged = item
        self._original_index = index
        self._target_index = index
        self.state = DragState.DRAGGING
        return True

    def drag_over(self, pointer_y: float) -> int:
        """Recompute the drop position for the pointer and show the indicator."""
        if self.state is not DragState.DRAGGING:
            raise RuntimeError("drag_over called while idle")
        self._target_index = insertion_index(self._siblings(), self._geometry, pointer_y)
        self.indicator.show(self._target_index)
        return self._target_index

    def drop(self, pointer_y: Optional[float] = None) -> Optional[Tuple[int, int]]:
        """Finish the gesture and report ``(original_index, new_index)``."""
        if self.state is not DragState.DRAGGING:
            return None
        try:
            if pointer_y is not None:
                self._target_index = insertion_index(self._siblings(), self._geometry, pointer_y)
            item, original, new = self._dragged, self._original_index, self._target_index
            self._drop_callback(item, original, new)
            return original, new
        finally:
            self._reset()

    def drag_end(self) -> None:
        """Cancel the gesture (Escape, pointer left the window, ...)."""
        if self.state is DragState.DRAGGING:
            logger.debug("Drag cancelled at index %s", self._original_index)
        self._reset()

    def _reset(self) -> None:
        self.indicator.hide()
        self.state = DragState.IDLE
        self._dragged = None
        self._original_index = None
        self._target_index = None
