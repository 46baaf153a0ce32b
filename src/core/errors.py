"""
Error types for Soundify.

ConfigurationError is raised eagerly while rules, pools and settings are
built. PlaybackError wraps failures of the external audio, speech and haptic
services; the dispatch engine reports it and never lets it escape trigger().
"""


class SoundifyError(Exception):
    """Base class for all Soundify errors."""


class ConfigurationError(SoundifyError, ValueError):
    """Invalid rule, action, pool or settings parameters."""


class PlaybackError(SoundifyError):
    """An external feedback service failed to carry out a request."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause
