"""Debounced auto-save.

Bursts of edits are coalesced into a single persisted write: every
``trigger(snapshot)`` records the latest snapshot and restarts a short timer,
and the save runs once the timer expires without another edit (trailing-edge
debounce).  Snapshots are taken by the caller when the edit happens, so a
save that runs later on the timer thread writes exactly what was edited, to
the rundown it was edited on.

At most one save is in flight, whether it came from the timer, ``flush`` or
``save_now``.  A timer that expires while a save is running sets a single
``pending`` flag and the running save loops once more with the newest
snapshot.  ``flush`` and ``save_now`` wait for the running save (and its
pending follow-up) before they take the slot.

Auto-save failures are logged and recorded, never raised and never retried.
``save_now`` is the explicit path and raises.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Generic, Optional, TypeVar

from rundown_api.errors import ApiError

logger = logging.getLogger(__name__)

DEFAULT_DELAY_SECONDS = 0.3

T = TypeVar("T")

TimerFactory = Callable[[float, Callable[[], None]], "threading.Timer"]


@dataclass(frozen=True)
class AutoSaveStatus:
    dirty: bool
    saving: bool
    pending: bool
    paused: bool
    last_saved_at: Optional[datetime]
    last_error: Optional[ApiError]


class AutoSaveScheduler(Generic[T]):
    """Run ``save(snapshot)`` after a quiet period of *delay* seconds.

    Args:
        save:          Persists one snapshot; raises ApiError on failure.
        delay:         Debounce window in seconds.
        timer_factory: ``(interval, function) -> timer`` with ``start`` and
                       ``cancel``; ``threading.Timer`` by default.
    """

    def __init__(
        self,
        save: Callable[[T], None],
        delay: float = DEFAULT_DELAY_SECONDS,
        *,
        timer_factory: TimerFactory = threading.Timer,
    ) -> None:
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self._save = save
        self.delay = delay
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._timer = None
        self._snapshot: Optional[T] = None
        self._dirty = False
        self._saving = False
        self._saving_thread: Optional[int] = None
        self._pending = False
        self._paused = False
        self._closed = False
        self._last_saved_at: Optional[datetime] = None
        self._last_error: Optional[ApiError] = None

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def trigger(self, snapshot: T) -> None:
        """Record an edit as *snapshot* and restart the debounce window."""
        with self._lock:
            if self._closed:
                return
            self._snapshot = snapshot
            self._dirty = True
            if self._paused:
                return
            self._arm_locked()

    def flush(self) -> bool:
        """Wait for any save in flight, then save outstanding edits now.

        Returns False when the last save failed.  Called from inside a save
        (the slot is already held by this thread) it only marks the edits
        pending and returns False.
        """
        with self._lock:
            self._cancel_timer_locked()
            if self._saving and self._saving_thread == threading.get_ident():
                self._pending = True
                return False
            waited = self._wait_idle_locked()
            self._cancel_timer_locked()
            if not self._dirty:
                return not (waited and self._last_error is not None)
            self._claim_locked()
        return self._drain()

    def save_now(self, snapshot: T) -> None:
        """Persist *snapshot* in the single save slot and raise on failure.

        Waits for a save in flight first.  Outstanding edits are superseded
        by *snapshot*.
        """
        with self._lock:
            self._wait_idle_locked()
            self._cancel_timer_locked()
            self._claim_locked()
            self._snapshot = None
            self._dirty = False
            self._pending = False
        try:
            self._save(snapshot)
        except ApiError as exc:
            with self._lock:
                self._last_error = exc
            raise
        else:
            with self._lock:
                self._last_saved_at = datetime.now(timezone.utc)
                self._last_error = None
        finally:
            with self._lock:
                self._release_locked()
                # an edit landed while this save was running
                if self._dirty and not (self._paused or self._closed):
                    self._arm_locked()

    def set_visible(self, visible: bool) -> None:
        """Hide: flush outstanding edits and pause.  Show: resume."""
        if not visible:
            self.flush()
            with self._lock:
                self._paused = True
            return
        with self._lock:
            self._paused = False
            if self._dirty and not self._closed:
                self._arm_locked()

    def cancel(self) -> None:
        """Drop the armed timer and forget outstanding edits."""
        with self._lock:
            self._cancel_timer_locked()
            self._snapshot = None
            self._dirty = False
            self._pending = False

    def close(self) -> None:
        with self._lock:
            self._cancel_timer_locked()
            self._closed = True

    def status(self) -> AutoSaveStatus:
        with self._lock:
            return AutoSaveStatus(
                dirty=self._dirty,
                saving=self._saving,
                pending=self._pending,
                paused=self._paused,
                last_saved_at=self._last_saved_at,
                last_error=self._last_error,
            )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _arm_locked(self) -> None:
        self._cancel_timer_locked()
        timer = self._timer_factory(self.delay, self._fire)
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _cancel_timer_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _wait_idle_locked(self) -> bool:
        waited = False
        while self._saving:
            waited = True
            self._idle.wait()
        return waited

    def _claim_locked(self) -> None:
        self._saving = True
        self._saving_thread = threading.get_ident()

    def _release_locked(self) -> None:
        self._saving = False
        self._saving_thread = None
        self._idle.notify_all()

    def _fire(self) -> None:
        with self._lock:
            self._timer = None
            if self._closed or not self._dirty:
                return
            if self._saving:
                self._pending = True
                return
            self._claim_locked()
        self._drain()

    def _drain(self) -> bool:
        """Save the newest snapshot until no pending request is left.

        The caller holds the slot; it is released on the way out.
        """
        ok = True
        try:
            while True:
                with self._lock:
                    snapshot = self._snapshot
                    self._snapshot = None
                    self._dirty = False
                    self._pending = False
                ok = self._save_once(snapshot)
                with self._lock:
                    if not (self._pending and self._dirty):
                        return ok
                logger.debug("Running pending auto-save")
        finally:
            with self._lock:
                self._release_locked()

    def _save_once(self, snapshot: T) -> bool:
        try:
            self._save(snapshot)
        except ApiError as exc:
            logger.warning("Auto-save failed (%s): %s", exc.kind.value, exc.message)
            with self._lock:
                self._last_error = exc
            return False
        with self._lock:
            self._last_saved_at = datetime.now(timezone.utc)
            self._last_error = None
        logger.debug("Auto-save complete")
        return True
