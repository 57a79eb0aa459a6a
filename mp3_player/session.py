"""One playback session: an open file stream plus the decoder playing it."""

import logging
import os
import threading
from dataclasses import dataclass
from typing import BinaryIO, Callable

from mp3_player.decoder import Decoder
from mp3_player.errors import PlaybackFailure

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionResult:
    """How a session ended. Neither completed nor failed means it was stopped."""

    path: str | os.PathLike
    completed: bool
    error: PlaybackFailure | None = None

    @property
    def stopped(self) -> bool:
        return not self.completed and self.error is None


def open_stream(path: str | os.PathLike) -> BinaryIO:
    """Open path for reading, as PlaybackFailure if it cannot be opened."""
    try:
        return open(path, 'rb')
    except OSError as e:
        raise PlaybackFailure(f'Cannot open audio file {os.fspath(path)!r}: {e}', path) from e


class PlaybackSession:
    """
    Owns one open stream and one decoder.

    run() is called once, on the worker thread, and closes the stream when it returns.
    abort() may be called from any thread, before, during or after run().
    """

    def __init__(self, path: str | os.PathLike, stream: BinaryIO, decoder: Decoder) -> None:
        self.path = path
        self._stream = stream
        self._decoder = decoder
        self._lock = threading.Lock()
        self._aborted = False

    @classmethod
    def open(cls, path: str | os.PathLike, decoder_factory: Callable[[], Decoder]) -> 'PlaybackSession':
        stream = open_stream(path)
        try:
            decoder = decoder_factory()
        except Exception as e:
            stream.close()
            raise PlaybackFailure(f'Cannot create decoder for {os.fspath(path)!r}: {e}', path) from e
        return cls(path, stream, decoder)

    def is_aborted(self) -> bool:
        return self._aborted

    def run(self) -> SessionResult:
        """Play to the end or until aborted. Never raises; failures land in the result."""
        try:
            if self._aborted:
                return SessionResult(self.path, completed=False)
            log.info('Playing %s', self.path)
            try:
                finished = self._decoder.play(self._stream)
            except Exception as e:
                if self._aborted:
                    log.debug('Decoder raised after stop on %s: %s', self.path, e)
                    return SessionResult(self.path, completed=False)
                log.error('Playback failed for %s', self.path, exc_info=True)
                failure = PlaybackFailure(f'Cannot play audio file {os.fspath(self.path)!r}: {e}', self.path)
                failure.__cause__ = e
                return SessionResult(self.path, completed=False, error=failure)
            completed = bool(finished) and not self._aborted
            log.info('%s %s', 'Finished' if completed else 'Stopped', self.path)
            return SessionResult(self.path, completed=completed)
        finally:
            self._decoder.close()
            self._stream.close()

    def abort(self) -> None:
        """Ask the decoder to stop. Idempotent."""
        with self._lock:
            if self._aborted:
                return
            self._aborted = True
        self._decoder.close()
