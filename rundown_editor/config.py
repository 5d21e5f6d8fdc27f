"""Editor configuration from environment variables (and an optional .env)."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from rundown_editor.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:3000/api"
DEFAULT_CREDENTIALS_PATH = "~/.config/rundown-editor/credentials.json"


@dataclass(frozen=True)
class EditorConfig:
    api_url: str = DEFAULT_API_URL
    credentials_path: str = DEFAULT_CREDENTIALS_PATH
    autosave_delay_ms: int = 300
    story_page_size: int = 50
    http_timeout: float = 10.0
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @property
    def autosave_delay(self) -> float:
        """Debounce window in seconds."""
        return self.autosave_delay_ms / 1000.0


def _int(env: Mapping[str, str], name: str, default: int, minimum: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")
    return value


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value


def load_config(env: Optional[Mapping[str, str]] = None) -> EditorConfig:
    """Build an ``EditorConfig``.

    With no explicit mapping, a ``.env`` file in the working directory is
    loaded into the process environment first (existing variables win).

    Raises:
        ConfigurationError: a numeric variable is malformed or out of range.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    log_level = (env.get("LOG_LEVEL") or "INFO").strip().upper()
    if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigurationError(f"LOG_LEVEL must be a logging level name, got {log_level!r}")

    config = EditorConfig(
        api_url=(env.get("RUNDOWN_API_URL") or DEFAULT_API_URL).rstrip("/"),
        credentials_path=env.get("RUNDOWN_CREDENTIALS_PATH") or DEFAULT_CREDENTIALS_PATH,
        autosave_delay_ms=_int(env, "RUNDOWN_AUTOSAVE_DELAY_MS", 300, 0),
        story_page_size=_int(env, "RUNDOWN_STORY_PAGE_SIZE", 50, 1),
        http_timeout=_float(env, "RUNDOWN_HTTP_TIMEOUT", 10.0),
        log_level=log_level,
        log_file=env.get("RUNDOWN_LOG_FILE") or None,
    )
    logger.debug("Loaded config: api_url=%s", config.api_url)
    return config
