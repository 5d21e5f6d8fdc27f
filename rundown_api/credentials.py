"""
credentials.py: Persisted bearer-token store.

The token lives in a small JSON file (``{"token": "..."}``) written with
sorted keys and a trailing newline so repeated saves are byte-identical.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class CredentialStore:
    """Load, save and clear the API bearer token.

    Args:
        path: Location of the credentials JSON file.  Parent directories are
              created on first save.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def load_token(self) -> Optional[str]:
        """Return the stored token, or None when absent or unreadable."""
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt credentials file at %s", self.path)
            return None
        token = data.get("token") if isinstance(data, dict) else None
        return token or None

    def save_token(self, token: str) -> None:
        if not token:
            raise ValueError("token must be a non-empty string")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({"token": token}, f, sort_keys=True, indent=2)
            f.write("\n")

    def clear(self) -> None:
        """Remove the stored token.  Clearing an empty store is a no-op."""
        if self.path.exists():
            self.path.unlink()
            logger.info("Cleared stored credentials at %s", self.path)
