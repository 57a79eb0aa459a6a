"""Player errors: bad input, failed playback, unsupported controls."""

import os


class PlayerError(Exception):
    """Base class for all player errors."""


class InvalidInput(PlayerError, ValueError):
    """Empty playlist, or a None/empty file path."""


class PlaybackFailure(PlayerError, RuntimeError):
    """A file could not be opened, decoded or played."""

    def __init__(self, message: str, path: str | os.PathLike | None = None):
        super().__init__(message)
        self.path = path


class UnsupportedOperation(PlayerError, NotImplementedError):
    """The decoder has no way to do this (pause/resume)."""
