"""Tests for rundown_editor/config.py and rundown_editor/logging_config.py."""
from __future__ import annotations

import logging
import logging.handlers

import pytest

from rundown_editor.config import DEFAULT_API_URL, EditorConfig, load_config
from rundown_editor.errors import ConfigurationError
from rundown_editor.logging_config import LOG_FORMAT, setup_logging


# ---------------------------------------------------------------------------
# load_config
# ---------------------------------------------------------------------------

class TestLoadConfig:

    def test_defaults(self):
        config = load_config({})
        assert config == EditorConfig()
        assert config.api_url == DEFAULT_API_URL
        assert config.autosave_delay == pytest.approx(0.3)
        assert config.story_page_size == 50
        assert config.log_file is None

    def test_overrides(self):
        config = load_config({
            "RUNDOWN_API_URL": "https://school.example/api/",
            "RUNDOWN_AUTOSAVE_DELAY_MS": "750",
            "RUNDOWN_STORY_PAGE_SIZE": "10",
            "RUNDOWN_HTTP_TIMEOUT": "2.5",
            "LOG_LEVEL": "debug",
            "RUNDOWN_LOG_FILE": "/tmp/editor.log",
        })
        assert config.api_url == "https://school.example/api"
        assert config.autosave_delay == pytest.approx(0.75)
        assert config.story_page_size == 10
        assert config.http_timeout == 2.5
        assert config.log_level == "DEBUG"
        assert config.log_file == "/tmp/editor.log"

    def test_blank_values_fall_back_to_defaults(self):
        config = load_config({"RUNDOWN_AUTOSAVE_DELAY_MS": "", "RUNDOWN_API_URL": ""})
        assert config.autosave_delay_ms == 300
        assert config.api_url == DEFAULT_API_URL

    @pytest.mark.parametrize("name,value,match", [
        ("RUNDOWN_AUTOSAVE_DELAY_MS", "fast", "must be an integer"),
        ("RUNDOWN_AUTOSAVE_DELAY_MS", "-1", "must be >= 0"),
        ("RUNDOWN_STORY_PAGE_SIZE", "0", "must be >= 1"),
        ("RUNDOWN_HTTP_TIMEOUT", "0", "must be positive"),
        ("LOG_LEVEL", "LOUD", "logging level"),
    ])
    def test_invalid_values(self, name, value, match):
        with pytest.raises(ConfigurationError, match=match):
            load_config({name: value})

    def test_reads_process_environment(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("RUNDOWN_STORY_PAGE_SIZE", "12")
        assert load_config().story_page_size == 12

    def test_config_is_frozen(self):
        config = load_config({})
        with pytest.raises(AttributeError):
            config.api_url = "x"


# ---------------------------------------------------------------------------
# setup_logging
# ---------------------------------------------------------------------------

def _own_handlers(root):
    return [h for h in root.handlers if getattr(h, "_rundown_editor_handler", False)]


@pytest.fixture
def clean_root():
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in _own_handlers(root):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)


class TestSetupLogging:

    def test_console_only_by_default(self, clean_root):
        setup_logging("WARNING")
        handlers = _own_handlers(clean_root)
        assert len(handlers) == 1
        assert clean_root.level == logging.WARNING
        assert handlers[0].formatter._fmt == LOG_FORMAT

    def test_rotating_file_handler(self, clean_root, tmp_path):
        log_file = tmp_path / "logs" / "editor.log"
        setup_logging("INFO", str(log_file))
        rotating = [h for h in _own_handlers(clean_root)
                    if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert len(rotating) == 1
        assert rotating[0].maxBytes == 10 * 1024 * 1024
        assert rotating[0].backupCount == 5

        logging.getLogger("rundown_editor.test").info("hello")
        rotating[0].flush()
        assert " - INFO - rundown_editor.test - hello" in log_file.read_text(encoding="utf-8")

    def test_repeated_setup_replaces_handlers(self, clean_root):
        setup_logging("INFO")
        setup_logging("DEBUG")
        assert len(_own_handlers(clean_root)) == 1
        assert clean_root.level == logging.DEBUG
