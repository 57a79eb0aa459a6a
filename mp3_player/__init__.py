"""MP3 player: a ring of audio files played one at a time on a background worker."""

from mp3_player.errors import (
    InvalidInput,
    PlaybackFailure,
    PlayerError,
    UnsupportedOperation,
)
from mp3_player.player import PlaybackCoordinator
from mp3_player.playlist import Playlist
from mp3_player.session import SessionResult
from mp3_player.version import __version__

__all__ = [
    'InvalidInput',
    'PlaybackCoordinator',
    'PlaybackFailure',
    'PlayerError',
    'Playlist',
    'SessionResult',
    'UnsupportedOperation',
    '__version__',
]
