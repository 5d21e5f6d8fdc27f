"""
client.py: HTTP client for the rundown REST API.

All network calls funnel through ``RundownApiClient._request``.  It is the one
place that:

  * attaches the bearer token from the CredentialStore,
  * turns transport failures into ``ApiError(kind=NETWORK)``,
  * handles 401 uniformly: clear the stored credential, fire the
    ``on_unauthorized`` hook, raise ``ApiError(kind=UNAUTHORIZED)``,
  * re-raises every other non-2xx response as an ``ApiError`` carrying the
    server's message (falling back to ``"HTTP <status>"``).

Contract violations from ``validate_payload`` are raised as ``ApiError`` too:
``VALIDATION`` for a request that would not conform, ``UNKNOWN`` for a response
that does not.

Callers decide whether to surface or swallow; the client never retries.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Union

import jsonschema
import requests

from .contract import validate_payload
from .credentials import CredentialStore
from .errors import ApiError, ErrorKind, classify_error

logger = logging.getLogger(__name__)

Identifier = Union[int, str]

DEFAULT_TIMEOUT = 10.0


class RundownApiClient:
    """Thin client over the rundown API endpoints.

    Args:
        base_url:        API root, e.g. ``"https://example.org/api"``.
        credentials:     Store holding the bearer token.
        session:         Optional ``requests.Session`` (tests inject a fake).
        timeout:         Per-request timeout in seconds.
        on_unauthorized: Called once after a 401 clears the credential; the
                         application uses it to send the user to log in.
    """

    def __init__(
        self,
        base_url: str,
        credentials: CredentialStore,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        on_unauthorized: Optional[Callable[[], None]] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.credentials = credentials
        self.session = session or requests.Session()
        self.timeout = timeout
        self.on_unauthorized = on_unauthorized

    # ------------------------------------------------------------------
    # Shared request helper
    # ------------------------------------------------------------------

    def _unauthorized(self, message: str, status: Optional[int]) -> ApiError:
        self.credentials.clear()
        if self.on_unauthorized is not None:
            self.on_unauthorized()
        return ApiError(ErrorKind.UNAUTHORIZED, message, status)

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        raw: bool = False,
    ) -> Any:
        token = self.credentials.load_token()
        if not token:
            raise self._unauthorized("Authentication required", None)

        url = f"{self.base_url}{path}"
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.debug("%s %s failed: %s", method, url, exc)
            raise ApiError(ErrorKind.NETWORK, f"Network error: {exc}") from exc

        status = response.status_code
        logger.debug("%s %s -> %s", method, url, status)

        if status == 401:
            raise self._unauthorized("Session expired. Please log in again.", status)

        if not 200 <= status < 300:
            try:
                body = response.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            message = body.get("error") or body.get("message") or f"HTTP {status}"
            kind = classify_error(status, message, body.get("code"))
            raise ApiError(kind, message, status)

        if raw:
            return response.content
        if status == 204 or not response.content:
            return None
        return response.json()

    @staticmethod
    def _check(name: str, data: Any, *, response: bool = True) -> None:
        try:
            validate_payload(name, data)
        except jsonschema.ValidationError as exc:
            where = "/".join(str(p) for p in exc.absolute_path) or "<root>"
            if response:
                logger.warning("Response failed %s: %s: %s", name, where, exc.message)
                raise ApiError(
                    ErrorKind.UNKNOWN,
                    f"Unexpected response from the rundown API: {where}: {exc.message}",
                ) from exc
            raise ApiError(ErrorKind.VALIDATION, f"Invalid request: {where}: {exc.message}") from exc

    # ------------------------------------------------------------------
    # Rundowns
    # ------------------------------------------------------------------

    def list_rundowns(self) -> List[Dict[str, Any]]:
        data = self._request("GET", "/rundowns")
        if isinstance(data, dict):
            # older backends wrap the list with pagination metadata
            data = data.get("rundowns", [])
        return list(data or [])

    def get_rundown(self, rundown_id: Identifier) -> Dict[str, Any]:
        """Fetch a rundown with nested segments, talent and stories."""
        data = self._request("GET", f"/rundowns/{rundown_id}")
        self._check("RundownDetail.v1.json", data)
        return data

    def create_rundown(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self._check("RundownCreate.v1.json", payload, response=False)
        data = self._request("POST", "/rundowns", json_body=payload)
        if isinstance(data, dict) and isinstance(data.get("rundown"), dict):
            data = data["rundown"]
        return data

    def update_rundown(self, rundown_id: Identifier, fields: Dict[str, Any]) -> Any:
        return self._request("PUT", f"/rundowns/{rundown_id}", json_body=fields)

    def delete_rundown(self, rundown_id: Identifier) -> None:
        self._request("DELETE", f"/rundowns/{rundown_id}")

    # ------------------------------------------------------------------
    # Story integrations
    # ------------------------------------------------------------------

    def search_stories(self, search: str = "", limit: int = 50) -> List[Dict[str, Any]]:
        data = self._request(
            "GET",
            "/rundown-stories/available",
            params={"search": search, "limit": limit},
        )
        if isinstance(data, dict):
            data = data.get("stories", [])
        return list(data or [])

    def attach_story(
        self,
        rundown_id: Identifier,
        story_id: Identifier,
        segment_id: Optional[Identifier] = None,
        notes: str = "",
    ) -> Dict[str, Any]:
        data = self._request(
            "POST",
            f"/rundown-stories/rundown/{rundown_id}",
            json_body={"story_id": story_id, "segment_id": segment_id, "notes": notes},
        )
        self._check("StoryIntegration.v1.json", data)
        return data

    def update_story_notes(self, integration_id: Identifier, notes: str) -> Any:
        return self._request(
            "PUT", f"/rundown-stories/{integration_id}", json_body={"notes": notes}
        )

    def detach_story(self, integration_id: Identifier) -> None:
        self._request("DELETE", f"/rundown-stories/{integration_id}")

    def export_pdf(self, rundown_id: Identifier) -> bytes:
        """Download the server-rendered PDF for a rundown as raw bytes."""
        return self._request(
            "GET", f"/rundown-stories/rundown/{rundown_id}/export/pdf", raw=True
        )
