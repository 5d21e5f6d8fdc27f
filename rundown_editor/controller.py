"""
controller.py: Owner of the currently selected rundown.

``RundownController`` composes the SegmentStore, TalentRoster,
StoryIntegrationPanel and AutoSaveScheduler for exactly one rundown at a
time and exposes the editor's operations.  Everything a front end needs to
draw is mirrored in ``RundownState``; listeners registered with
``subscribe`` are called with ``(state, reason)`` after each change.

Error policy:
  * explicit actions (create, save, delete, export, segment and talent
    edits) report failures through the notifier and re-raise them,
  * auto-save failures are logged by the scheduler and never surface,
  * unauthorized errors are not notified here; the API client's
    ``on_unauthorized`` hook owns that path.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Union

from pydantic import ValidationError

from rundown_api.client import RundownApiClient
from rundown_api.errors import ApiError, ErrorKind
from rundown_editor.autosave import DEFAULT_DELAY_SECONDS, AutoSaveScheduler
from rundown_editor.errors import RundownValidationError
from rundown_editor.models import (
    CreateRundownForm,
    Identifier,
    Rundown,
    RundownDetail,
    Segment,
    Story,
    StoryIntegration,
    Talent,
    TalentBuckets,
    TalentRole,
)
from rundown_editor.notify import Confirm, Notifier, always_confirm
from rundown_editor.reorder import DragReorderController, Indicator
from rundown_editor.segment_store import SegmentStore, default_segments
from rundown_editor.status import cycle_status
from rundown_editor.stories import DEFAULT_PAGE_SIZE, StoryIntegrationPanel
from rundown_editor.talent import TalentRoster
from rundown_editor.timecode import parse_time_strict
from rundown_editor.timing import TimingSnapshot, compute_timing

logger = logging.getLogger(__name__)

Listener = Callable[["RundownState", str], None]
Geometry = Callable[[Any], Tuple[float, float]]
Snapshot = Tuple[Identifier, Dict[str, Any]]

_HEADER_FIELDS = frozenset(
    {"show_name", "air_date", "target_duration", "share_with_class", "class_id", "status"}
)


@dataclass
class RundownState:
    """Everything a rendering layer needs; replaced wholesale on change."""

    rundowns: List[Rundown] = field(default_factory=list)
    current: Optional[Rundown] = None
    segments: List[Segment] = field(default_factory=list)
    talent: TalentBuckets = field(default_factory=TalentBuckets)
    stories: List[StoryIntegration] = field(default_factory=list)
    timing: Optional[TimingSnapshot] = None
    selected_segment_id: Optional[Identifier] = None
    form: CreateRundownForm = field(default_factory=CreateRundownForm)

    @property
    def has_selection(self) -> bool:
        return self.current is not None


class RundownController:
    """Compose the editor for one selected rundown.

    Args:
        client:          API client.
        notifier:        Receives user-facing messages.
        confirm:         Asked before destructive actions.
        autosave_delay:  Debounce window in seconds.
        story_page_size: Search page size for the story panel.
        timer_factory:   Timer constructor for the auto-save scheduler.
    """

    def __init__(
        self,
        client: RundownApiClient,
        notifier: Optional[Notifier] = None,
        confirm: Confirm = always_confirm,
        *,
        autosave_delay: float = DEFAULT_DELAY_SECONDS,
        story_page_size: int = DEFAULT_PAGE_SIZE,
        timer_factory=threading.Timer,
    ) -> None:
        self.client = client
        self.notifier = notifier or Notifier()
        self.confirm = confirm
        self.state = RundownState()
        self._listeners: List[Listener] = []

        self.segments = SegmentStore(on_change=self._on_content_change)
        self.talent = TalentRoster(on_change=self._on_content_change)
        self.stories = StoryIntegrationPanel(client, self.notifier, confirm, story_page_size)
        self.autosave: AutoSaveScheduler[Snapshot] = AutoSaveScheduler(
            self._persist, autosave_delay, timer_factory=timer_factory
        )

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, reason: str) -> None:
        self.state.segments = self.segments.segments
        self.state.talent = TalentBuckets(hosts=self.talent.hosts, guests=self.talent.guests)
        self.state.stories = list(self.stories.integrations)
        for listener in list(self._listeners):
            listener(self.state, reason)

    def _recompute_timing(self) -> None:
        if self.state.current is None:
            self.state.timing = None
            return
        self.state.timing = compute_timing(
            self.segments.total_duration_seconds(),
            self.state.current.target_duration,
        )

    def _on_content_change(self, reason: str) -> None:
        self._recompute_timing()
        self._publish(reason)
        if self.state.current is not None:
            self.autosave.trigger(self._snapshot())

    @contextmanager
    def _surface(self) -> Iterator[None]:
        try:
            yield
        except RundownValidationError as exc:
            self.notifier.error(str(exc))
            raise
        except ApiError as exc:
            if exc.kind is not ErrorKind.UNAUTHORIZED:
                self.notifier.error(exc.message)
            raise

    def _require_current(self) -> Rundown:
        if self.state.current is None:
            raise RundownValidationError("No rundown selected")
        return self.state.current

    # ------------------------------------------------------------------
    # Rundown list / selection
    # ------------------------------------------------------------------

    def list_rundowns(self) -> List[Rundown]:
        with self._surface():
            rows = self.client.list_rundowns()
        self.state.rundowns = [Rundown.model_validate(r) for r in rows]
        self._publish("list")
        return list(self.state.rundowns)

    def select_rundown(self, rundown_id: Optional[Identifier]) -> Optional[RundownDetail]:
        """Load a rundown with its segments, talent and stories.

        An empty id clears the view; that is a valid state, not an error.
        """
        if self.state.current is not None:
            self.autosave.flush()
        if rundown_id is None or str(rundown_id).strip() == "":
            self._clear()
            return None

        with self._surface():
            detail = RundownDetail.model_validate(self.client.get_rundown(rundown_id))

        self.autosave.cancel()
        self.state.current = Rundown.model_validate(detail.model_dump())
        self.segments.load(detail.segments or default_segments())
        self.talent.load(detail.talent)
        self.stories.load(detail.id, detail.stories)
        self.state.selected_segment_id = self.segments.segments[0].id if len(self.segments) else None
        self._recompute_timing()
        self._publish("select")
        logger.info("Selected rundown %s (%d segments)", detail.id, len(self.segments))
        return detail

    def _clear(self) -> None:
        self.autosave.cancel()
        self.state.current = None
        self.state.selected_segment_id = None
        self.segments.clear()
        self.talent.clear()
        self.stories.clear()
        self._recompute_timing()
        self._publish("clear")

    def create_rundown(self, form: Optional[CreateRundownForm] = None) -> Rundown:
        """Create a rundown from *form* (default: the controller's own form).

        On success the list is refreshed, the new rundown selected and the
        form reset with today's air date.
        """
        form = form or self.state.form
        with self._surface():
            if not form.show_name.strip():
                raise RundownValidationError("Show name is required")
            if not form.air_date:
                raise RundownValidationError("Air date is required")
            data = self.client.create_rundown(form.to_payload())
        created = Rundown.model_validate(data)
        self.state.form = CreateRundownForm()
        self.list_rundowns()
        self.select_rundown(created.id)
        self.notifier.success(f"Created rundown '{created.show_name or form.show_name.strip()}'")
        return created

    def delete_rundown(self, rundown_id: Optional[Identifier] = None) -> bool:
        if rundown_id is None:
            rundown_id = self._require_current().id
        if not self.confirm("Delete this rundown? This cannot be undone."):
            return False
        with self._surface():
            self.client.delete_rundown(rundown_id)
        if self.state.current is not None and str(self.state.current.id) == str(rundown_id):
            self._clear()
        self.notifier.success("Rundown deleted")
        self.list_rundowns()
        return True

    # ------------------------------------------------------------------
    # Header
    # ------------------------------------------------------------------

    def update_header(self, **fields: Any) -> Rundown:
        """Edit show name, air date, target, sharing, class or status."""
        with self._surface():
            current = self._require_current()
            unknown = set(fields) - _HEADER_FIELDS
            if unknown:
                raise RundownValidationError(
                    f"Cannot edit rundown field(s): {', '.join(sorted(unknown))}"
                )
            if "show_name" in fields and not str(fields["show_name"] or "").strip():
                raise RundownValidationError("Show name is required")
            try:
                updated = Rundown.model_validate({**current.model_dump(), **fields})
            except ValidationError as exc:
                raise RundownValidationError(
                    f"Invalid value for rundown: {exc.errors()[0]['msg']}"
                ) from exc
        self.state.current = updated
        self._recompute_timing()
        self._publish("header")
        self.autosave.trigger(self._snapshot())
        return updated

    def set_target_time(self, text: str) -> Rundown:
        """Set the target duration from an ``MM:SS`` string."""
        with self._surface():
            seconds = parse_time_strict(text)
        return self.update_header(target_duration=seconds)

    def cycle_status(self, direction: int = 1) -> Rundown:
        current = self._require_current()
        return self.update_header(status=cycle_status(current.status, direction))

    # ------------------------------------------------------------------
    # Segments
    # ------------------------------------------------------------------

    def add_segment(
        self,
        title: str = "",
        duration: int = 0,
        notes: str = "",
        segment_type: str = "custom",
        after_segment_id: Optional[Identifier] = None,
    ) -> Segment:
        with self._surface():
            self._require_current()
            seg = self.segments.insert_segment(
                {"title": title, "duration": duration, "notes": notes, "segment_type": segment_type},
                after_segment_id=after_segment_id,
            )
        self.state.selected_segment_id = seg.id
        return seg

    def remove_segment(self, segment_id: Identifier) -> Segment:
        with self._surface():
            removed = self.segments.remove_segment(segment_id)
        if str(self.state.selected_segment_id) == str(segment_id):
            self.state.selected_segment_id = self.segments.segments[0].id if len(self.segments) else None
        return removed

    def move_segment(self, from_index: int, to_index: int) -> None:
        with self._surface():
            self.segments.move_segment(from_index, to_index)

    def update_segment(self, segment_id: Identifier, **fields: Any) -> Segment:
        with self._surface():
            return self.segments.update_segment(segment_id, **fields)

    def duplicate_segment(self, segment_id: Identifier) -> Segment:
        with self._surface():
            return self.segments.duplicate_segment(segment_id)

    def cycle_segment_status(self, segment_id: Identifier, direction: int = 1) -> Segment:
        with self._surface():
            seg = self.segments.get(segment_id)
        return self.update_segment(segment_id, status=cycle_status(seg.status, direction))

    def select_adjacent_segment(self, step: int) -> Optional[Identifier]:
        """Move the selection *step* segments up or down, clamped to the ends."""
        if not len(self.segments):
            return None
        if self.state.selected_segment_id is None:
            self.state.selected_segment_id = self.segments.segments[0].id
        else:
            self.state.selected_segment_id = self.segments.neighbour(
                self.state.selected_segment_id, step
            )
        self._publish("selection")
        return self.state.selected_segment_id

    def toggle_segment(self, segment_id: Identifier) -> bool:
        is_open = self.segments.toggle_open(segment_id)
        self._publish("view")
        return is_open

    def expand_all(self) -> None:
        self.segments.expand_all()
        self._publish("view")

    def collapse_all(self) -> None:
        self.segments.collapse_all()
        self._publish("view")

    def segment_reorder(
        self,
        geometry: Geometry,
        *,
        is_handle: Optional[Callable[[Segment, object], bool]] = None,
        indicator: Optional[Indicator] = None,
    ) -> DragReorderController[Segment]:
        """Drag controller whose drops move segments in this rundown."""
        return DragReorderController(
            lambda: self.segments.segments,
            geometry,
            lambda _seg, original, new: self.move_segment(original, new),
            is_handle=is_handle,
            indicator=indicator,
        )

    # ------------------------------------------------------------------
    # Talent
    # ------------------------------------------------------------------

    def add_talent(self, role: Union[TalentRole, str], name: str) -> Talent:
        with self._surface():
            self._require_current()
            return self.talent.add(role, name)

    def remove_talent(self, role: Union[TalentRole, str], index: int) -> Talent:
        with self._surface():
            return self.talent.remove(role, index)

    def rename_talent(self, role: Union[TalentRole, str], index: int, name: str) -> Talent:
        with self._surface():
            return self.talent.rename(role, index, name)

    def talent_reorder(
        self,
        role: Union[TalentRole, str],
        geometry: Geometry,
        *,
        indicator: Optional[Indicator] = None,
    ) -> DragReorderController[Talent]:
        bucket = (lambda: self.talent.hosts) if TalentRole(role) is TalentRole.HOST else (lambda: self.talent.guests)
        return DragReorderController(
            bucket,
            geometry,
            lambda _person, original, new: self.talent.move(role, original, new),
            indicator=indicator,
        )

    # ------------------------------------------------------------------
    # Stories
    # ------------------------------------------------------------------

    def search_stories(self, term: str = "") -> List[Story]:
        return self.stories.search(term)

    def attach_story(
        self,
        story: Union[Story, Identifier],
        target_segment_id: Optional[Identifier] = None,
        notes: str = "",
    ) -> Optional[StoryIntegration]:
        with self._surface():
            self._require_current()
            if target_segment_id is not None:
                self.segments.index_of(target_segment_id)
        if not isinstance(story, Story):
            cached = [s for s in self.stories.results if str(s.id) == str(story)]
            story = cached[0] if cached else Story(id=story)
        integration = self.stories.attach(story, target_segment_id, notes)
        if integration is not None:
            self._publish("stories")
        return integration

    def update_story_notes(self, integration_id: Identifier, notes: str) -> bool:
        updated = self.stories.update_notes(integration_id, notes)
        if updated:
            self._publish("stories")
        return updated

    def detach_story(self, integration_id: Identifier) -> bool:
        removed = self.stories.detach(integration_id)
        if removed:
            self._publish("stories")
        return removed

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save_payload(self) -> Dict[str, Any]:
        """Body of ``PUT /rundowns/{id}``: header, segments and talent."""
        current = self._require_current()
        payload = current.model_dump(mode="json", exclude={"id"})
        payload["segments"] = self.segments.to_payload()
        payload["talent"] = self.talent.to_payload()
        return payload

    def _snapshot(self) -> Snapshot:
        return self._require_current().id, self.save_payload()

    def _persist(self, snapshot: Snapshot) -> None:
        rundown_id, payload = snapshot
        self.client.update_rundown(rundown_id, payload)
        logger.debug("Persisted rundown %s", rundown_id)

    def save(self) -> None:
        """Persist now.  Unlike auto-save, failures are notified and raised."""
        with self._surface():
            self.autosave.save_now(self._snapshot())
        self.notifier.success("Rundown saved")

    def export_pdf(self, dest: Union[str, Path], rundown_id: Optional[Identifier] = None) -> Path:
        with self._surface():
            if rundown_id is None:
                rundown_id = self._require_current().id
            content = self.client.export_pdf(rundown_id)
        dest = Path(dest)
        dest.write_bytes(content or b"")
        self.notifier.success(f"Exported PDF to {dest}")
        return dest

    def set_visible(self, visible: bool) -> None:
        self.autosave.set_visible(visible)

    def close(self) -> None:
        """Flush outstanding edits and stop the auto-save timer."""
        self.autosave.flush()
        self.autosave.close()
