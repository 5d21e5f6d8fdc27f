"""Search the story catalog and attach stories to the current rundown.

Failures of these explicit actions are surfaced through the notifier.  A
duplicate attach (``ErrorKind.CONFLICT``) gets its own warning; every other
failure shows the server's message.  Unauthorized errors propagate: the API
client has already cleared the credential and sent the user to log in.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from rundown_api.client import RundownApiClient
from rundown_api.errors import ApiError, ErrorKind
from rundown_editor.models import Identifier, Story, StoryIntegration
from rundown_editor.notify import Confirm, Notifier, always_confirm

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50

ALREADY_ATTACHED_MESSAGE = "Story is already in this rundown"


class StoryIntegrationPanel:
    """Story search results plus the integrations of one rundown.

    Args:
        client:    API client.
        notifier:  Receives success, warning and error messages.
        confirm:   Asked before a story is detached.
        page_size: Fixed ``limit`` sent with every search.
    """

    def __init__(
        self,
        client: RundownApiClient,
        notifier: Optional[Notifier] = None,
        confirm: Confirm = always_confirm,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self.client = client
        self.notifier = notifier or Notifier()
        self.confirm = confirm
        self.page_size = page_size
        self.rundown_id: Optional[Identifier] = None
        self.integrations: List[StoryIntegration] = []
        self.results: List[Story] = []

    def load(self, rundown_id: Optional[Identifier], integrations=()) -> None:
        self.rundown_id = rundown_id
        self.integrations = [
            i if isinstance(i, StoryIntegration) else StoryIntegration.model_validate(i)
            for i in integrations
        ]
        self.results = []

    def clear(self) -> None:
        self.load(None)

    def _attached_story_ids(self) -> set:
        return {str(i.story_id) for i in self.integrations}

    def _mark_results(self) -> None:
        attached = self._attached_story_ids()
        for story in self.results:
            story.already_in_rundown = story.already_in_rundown or str(story.id) in attached

    def _require_rundown(self) -> Identifier:
        if self.rundown_id is None:
            raise ValueError("No rundown selected")
        return self.rundown_id

    def _report(self, exc: ApiError) -> None:
        if exc.kind is ErrorKind.UNAUTHORIZED:
            raise exc
        self.notifier.error(exc.message)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def search(self, term: str = "") -> List[Story]:
        """Query one page of available stories; an empty term gets the latest."""
        try:
            rows = self.client.search_stories((term or "").strip(), self.page_size)
        except ApiError as exc:
            self._report(exc)
            return []
        self.results = [Story.model_validate(r) for r in rows]
        self._mark_results()
        logger.debug("Story search %r returned %d result(s)", term, len(self.results))
        return list(self.results)

    def attach(
        self,
        story: Story,
        target_segment_id: Optional[Identifier] = None,
        notes: str = "",
    ) -> Optional[StoryIntegration]:
        rundown_id = self._require_rundown()
        try:
            data = self.client.attach_story(rundown_id, story.id, target_segment_id, notes)
        except ApiError as exc:
            if exc.kind is ErrorKind.CONFLICT:
                story.already_in_rundown = True
                self.notifier.warning(ALREADY_ATTACHED_MESSAGE)
                return None
            self._report(exc)
            return None
        integration = StoryIntegration.model_validate(data)
        if not integration.title:
            integration.title = story.title
        self.integrations.append(integration)
        story.already_in_rundown = True
        self._mark_results()
        self.notifier.success(f"Added '{story.title or story.id}' to rundown")
        return integration

    def update_notes(self, integration_id: Identifier, notes: str) -> bool:
        try:
            self.client.update_story_notes(integration_id, notes)
        except ApiError as exc:
            self._report(exc)
            return False
        for i, integration in enumerate(self.integrations):
            if str(integration.id) == str(integration_id):
                self.integrations[i] = integration.model_copy(update={"notes": notes})
        return True

    def detach(self, integration_id: Identifier) -> bool:
        """Remove an integration after the user confirms.  True when removed."""
        if not self.confirm("Remove this story from the rundown?"):
            return False
        try:
            self.client.detach_story(integration_id)
        except ApiError as exc:
            self._report(exc)
            return False
        removed = [i for i in self.integrations if str(i.id) == str(integration_id)]
        self.integrations = [i for i in self.integrations if str(i.id) != str(integration_id)]
        removed_ids = {str(i.story_id) for i in removed}
        for story in self.results:
            if str(story.id) in removed_ids:
                story.already_in_rundown = False
        self.notifier.success("Story removed from rundown")
        return True
