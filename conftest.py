"""Shared test fakes: scripted HTTP session, manual timer, recording notifier."""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import pytest

from rundown_api.client import RundownApiClient
from rundown_api.credentials import CredentialStore
from rundown_editor.notify import Notifier


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, content: Optional[bytes] = None):
        self.status_code = status_code
        if content is not None:
            self.content = content
        elif body is None:
            self.content = b""
        else:
            self.content = json.dumps(body).encode("utf-8")

    def json(self) -> Any:
        return json.loads(self.content.decode("utf-8"))


class FakeSession:
    """Replays queued responses and records every request.

    ``routes`` maps ``(METHOD, path-suffix)`` to a response or a list of
    responses consumed in order; an exception instance is raised instead.
    """

    def __init__(self) -> None:
        self.routes: Dict[tuple, List[Any]] = {}
        self.calls: List[Dict[str, Any]] = []

    def add(self, method: str, path: str, *responses: Any) -> None:
        self.routes.setdefault((method, path), []).extend(responses)

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        self.calls.append({
            "method": method, "url": url, "params": params,
            "json": json, "headers": headers, "timeout": timeout,
        })
        for (m, path), queue in self.routes.items():
            if m == method and url.endswith(path) and queue:
                response = queue.pop(0) if len(queue) > 1 else queue[0]
                if isinstance(response, Exception):
                    raise response
                return response
        return FakeResponse(404, {"error": f"no route for {method} {url}"})

    def calls_to(self, method: str, path: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["method"] == method and c["url"].endswith(path)]


# ---------------------------------------------------------------------------
# Timers and notifications
# ---------------------------------------------------------------------------

class FakeTimer:
    """Stands in for threading.Timer; tests call ``fire()`` explicitly."""

    def __init__(self, interval: float, function, registry: list) -> None:
        self.interval = interval
        self.function = function
        self.daemon = False
        self.started = False
        self.cancelled = False
        self.fired = False
        registry.append(self)

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if self.started and not self.cancelled and not self.fired:
            self.fired = True
            self.function()


class TimerRegistry(list):
    def factory(self, interval, function) -> FakeTimer:
        return FakeTimer(interval, function, self)

    @property
    def live(self) -> List[FakeTimer]:
        return [t for t in self if t.started and not t.cancelled and not t.fired]

    def fire_all(self) -> None:
        for timer in list(self.live):
            timer.fire()


class RecordingNotifier(Notifier):
    def __init__(self) -> None:
        self.messages: List[tuple] = []

    def _emit(self, level, message) -> None:
        self.messages.append((level.value, message))

    def of(self, level: str) -> List[str]:
        return [m for lvl, m in self.messages if lvl == level]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def credentials(tmp_path) -> CredentialStore:
    store = CredentialStore(tmp_path / "credentials.json")
    store.save_token("test-token")
    return store


@pytest.fixture
def client(session, credentials) -> RundownApiClient:
    return RundownApiClient("http://api.test/api", credentials, session=session)


@pytest.fixture
def timers() -> TimerRegistry:
    return TimerRegistry()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


def rundown_detail(**overrides: Any) -> Dict[str, Any]:
    detail = {
        "id": 7,
        "show_name": "Morning Show",
        "air_date": "2026-10-19",
        "target_duration": 300,
        "share_with_class": False,
        "class_id": None,
        "status": "Draft",
        "segments": [
            {"id": 1, "title": "Show Intro", "order_index": 0, "duration": 60,
             "type": "intro", "is_pinned": True, "status": "Draft"},
            {"id": 2, "title": "Headlines", "order_index": 1, "duration": 120,
             "notes": "", "type": "custom", "is_pinned": False, "status": "Draft"},
            {"id": 3, "title": "Weather", "order_index": 2, "duration": 75,
             "notes": None, "type": "custom", "is_pinned": False, "status": "Draft"},
            {"id": 4, "title": "Show Outro", "order_index": 3, "duration": 45,
             "type": "outro", "is_pinned": True, "status": "Draft"},
        ],
        "talent": {"hosts": [{"id": 11, "name": "Ana", "role": "host"}], "guests": []},
        "stories": [{"id": 31, "story_id": 501, "segment_id": 2, "notes": "", "idea_title": "Bake sale"}],
    }
    detail.update(overrides)
    return detail
