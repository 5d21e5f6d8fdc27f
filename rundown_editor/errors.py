"""Editor-side exceptions.

Validation errors are raised before any network call and never reach the
server.  Failures of the remote API are ``rundown_api.errors.ApiError``.
"""


class RundownValidationError(ValueError):
    """User input was rejected locally (missing field, bad value)."""


class SegmentError(RundownValidationError):
    """A segment operation referenced a missing segment or broke a rule."""


class TalentError(RundownValidationError):
    """A talent roster operation broke a rule (unknown slot, size limit)."""


class ConfigurationError(Exception):
    """The editor configuration is missing or malformed."""
