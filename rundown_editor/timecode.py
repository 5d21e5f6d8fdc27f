"""MM:SS duration codec.

Durations are canonical integer seconds everywhere in the editor; ``MM:SS``
strings exist only at the input/display boundary.

``parse_time`` is deliberately permissive: partially typed or malformed input
returns 0 instead of raising, so live editing never throws.  Code outside the
live-input boundary (CLI arguments, the target-time setter) uses
``parse_time_strict``.
"""
from __future__ import annotations

import re
from typing import Optional

from rundown_editor.errors import RundownValidationError

_TIME_RE = re.compile(r"(\d{1,2}):(\d{2})")
_STRIP_RE = re.compile(r"[^0-9:]")


class TimeFormatError(RundownValidationError):
    """Raised by parse_time_strict for input that is not a valid MM:SS."""


def parse_time_strict(text: Optional[str]) -> int:
    """Parse ``M:SS`` / ``MM:SS`` into seconds.

    Raises:
        TimeFormatError: wrong shape, or seconds greater than 59.
    """
    m = _TIME_RE.fullmatch(text.strip()) if isinstance(text, str) else None
    if m is None:
        raise TimeFormatError(f"Invalid time {text!r}; use MM:SS (e.g. 20:00)")
    minutes, seconds = int(m.group(1)), int(m.group(2))
    if seconds > 59:
        raise TimeFormatError(f"Invalid time {text!r}; seconds must be 00-59")
    return minutes * 60 + seconds


def parse_time(text: Optional[str]) -> int:
    """Parse ``MM:SS`` into seconds; 0 for empty, malformed or >59-second input."""
    try:
        return parse_time_strict(text)
    except TimeFormatError:
        return 0


def format_time(seconds: Optional[int]) -> str:
    """Format seconds as ``MM:SS``.

    No hour rollover: 7500 formats as ``"125:00"``.
    """
    if not seconds or seconds < 0:
        return "00:00"
    seconds = int(seconds)
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def validate_live_input(text: Optional[str]) -> bool:
    """True when an in-progress edit is a complete, valid ``MM:SS`` value."""
    if not isinstance(text, str):
        return False
    m = _TIME_RE.fullmatch(text)
    return m is not None and int(m.group(2)) <= 59


def auto_format_keystroke(text: Optional[str]) -> str:
    """Incrementally reformat a duration field after each keystroke.

    - characters outside ``[0-9:]`` are dropped
    - two bare digits gain a separating colon (``"12"`` -> ``"12:"``)
    - a colon typed as the third character gains a placeholder digit
      (``"12:"`` -> ``"12:0"``)
    - three or more bare digits get the colon after the second digit
      (``"1234"`` -> ``"12:34"``)
    - at most two seconds digits are kept
    """
    cleaned = _STRIP_RE.sub("", text or "")
    if ":" not in cleaned:
        if len(cleaned) == 2:
            return cleaned + ":"
        if len(cleaned) > 2:
            return f"{cleaned[:2]}:{cleaned[2:4]}"
        return cleaned
    if len(cleaned) == 3 and cleaned[2] == ":":
        return cleaned + "0"
    minutes, _, rest = cleaned.partition(":")
    return f"{minutes}:{rest.replace(':', '')[:2]}"
