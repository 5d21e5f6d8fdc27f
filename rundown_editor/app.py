"""Composition root: build the API client and controller from an EditorConfig."""
from __future__ import annotations

import threading
from typing import Callable, Optional

import requests

from rundown_api.client import RundownApiClient
from rundown_api.credentials import CredentialStore
from rundown_editor.config import EditorConfig
from rundown_editor.controller import RundownController
from rundown_editor.notify import Confirm, Notifier, always_confirm


def build_client(
    config: EditorConfig,
    *,
    on_unauthorized: Optional[Callable[[], None]] = None,
    session: Optional[requests.Session] = None,
) -> RundownApiClient:
    return RundownApiClient(
        config.api_url,
        CredentialStore(config.credentials_path),
        session=session,
        timeout=config.http_timeout,
        on_unauthorized=on_unauthorized,
    )


def build_controller(
    config: EditorConfig,
    notifier: Optional[Notifier] = None,
    confirm: Confirm = always_confirm,
    *,
    on_unauthorized: Optional[Callable[[], None]] = None,
    session: Optional[requests.Session] = None,
    timer_factory=threading.Timer,
) -> RundownController:
    client = build_client(config, on_unauthorized=on_unauthorized, session=session)
    return RundownController(
        client,
        notifier,
        confirm,
        autosave_delay=config.autosave_delay,
        story_page_size=config.story_page_size,
        timer_factory=timer_factory,
    )
