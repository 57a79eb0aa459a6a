"""Playback coordinator: a ring of files, one worker thread, next/all-once/loop/stop."""

import logging
import queue
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable

from mp3_player.decoder import Decoder
from mp3_player.errors import PlaybackFailure, UnsupportedOperation
from mp3_player.playlist import PathLike, Playlist
from mp3_player.session import PlaybackSession, SessionResult
from mp3_player.settings import PlayerSettings

log = logging.getLogger(__name__)

WORKER_JOIN_TIMEOUT_SEC = 5.0


class Mode(Enum):
    NEXT = 'next'
    ALL_ONCE = 'all_once'
    LOOP = 'loop'


@dataclass
class _Command:
    """One unit of worker work. Stale once the coordinator's generation moves past it."""

    mode: Mode
    generation: int
    count: int = 0
    session: PlaybackSession | None = None
    cancelled: threading.Event = field(default_factory=threading.Event)
    future: Future = field(default_factory=Future)


class PlaybackCoordinator:
    """
    Plays a ring of audio files one at a time on a single background worker.

    play_next() returns at once; play_all_once() and loop_all() block by default
    (except when called from a callback on the worker thread)
    and return a Future with wait=False. Futures resolve to the list of
    SessionResult for the files the command touched. on_session_end(result) and
    on_error(result) are invoked from the worker thread.
    """

    def __init__(
        self,
        files: PathLike | Iterable[PathLike],
        decoder_factory: Callable[[], Decoder] | None = None,
        on_session_end: Callable[[SessionResult], None] | None = None,
        on_error: Callable[[SessionResult], None] | None = None,
    ) -> None:
        self._playlist = Playlist(files)
        if decoder_factory is None:
            decoder_factory = PlayerSettings().decoder_factory()
        self._decoder_factory = decoder_factory
        self.on_session_end = on_session_end
        self.on_error = on_error

        self._lock = threading.Lock()
        self._playing = False
        self._looping = False
        self._closed = False
        self._generation = 0
        self._command: _Command | None = None
        self._session: PlaybackSession | None = None

        self._commands: queue.Queue[_Command | None] = queue.Queue()
        self._worker = threading.Thread(target=self._worker_loop, name='mp3-player', daemon=True)
        self._worker.start()

    # State

    def is_playing(self) -> bool:
        return self._playing

    def is_looping(self) -> bool:
        return self._looping

    def playlist(self) -> list[PathLike]:
        """Snapshot of the ring, next file first."""
        with self._lock:
            return self._playlist.items()

    # Controls

    def play_next(self) -> Future | None:
        """Rotate the ring and play its old head in the background. None if already playing."""
        with self._lock:
            self._check_open()
            if self._playing:
                log.debug('play_next ignored: already playing')
                return None
            path = self._playlist.rotate()
            session = PlaybackSession.open(path, self._decoder_factory)
            command = self._begin(Mode.NEXT, session=session)
        self._commands.put(command)
        return command.future

    def play_all_once(self, wait: bool = True) -> list[SessionResult] | Future | None:
        """Play each file once, in ring order. None if already playing."""
        with self._lock:
            self._check_open()
            if self._playing:
                log.debug('play_all_once ignored: already playing')
                return None
            command = self._begin(Mode.ALL_ONCE, count=len(self._playlist))
        return self._submit(command, wait)

    def loop_all(self, wait: bool = True) -> list[SessionResult] | Future | None:
        """Play the ring over and over until stop(). None if already playing."""
        with self._lock:
            self._check_open()
            if self._playing:
                log.debug('loop_all ignored: already playing')
                return None
            command = self._begin(Mode.LOOP)
        return self._submit(command, wait)

    def stop(self) -> None:
        """Stop the current file and any looping. No-op when idle."""
        with self._lock:
            self._playing = False
            self._looping = False
            command, self._command = self._command, None
            session = self._session
            if command is None:
                return
            self._generation += 1
            command.cancelled.set()
        log.info('Stopping playback')
        if session is not None:
            session.abort()

    def pause(self) -> None:
        raise UnsupportedOperation('Pause not supported: the decoder can only play or close')

    def resume(self) -> None:
        raise UnsupportedOperation('Resume not supported: the decoder can only play or close')

    def close(self) -> None:
        """Stop playback and shut the worker down. Start operations fail afterwards."""
        self.stop()
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._commands.put(None)
        self._worker.join(WORKER_JOIN_TIMEOUT_SEC)

    def __enter__(self) -> 'PlaybackCoordinator':
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # Internals (callers of _begin/_check_open hold self._lock)

    def _check_open(self) -> None:
        if self._closed:
            raise PlaybackFailure('Player is closed')

    def _begin(self, mode: Mode, count: int = 0, session: PlaybackSession | None = None) -> _Command:
        self._generation += 1
        self._playing = True
        self._looping = mode is Mode.LOOP
        command = _Command(mode, self._generation, count=count, session=session)
        self._command = command
        return command

    def _submit(self, command: _Command, wait: bool) -> list[SessionResult] | Future:
        self._commands.put(command)
        if wait and threading.current_thread() is self._worker:
            # Called from a callback: the worker cannot wait on a command only it can run.
            log.debug('%s from the worker thread: returning the future', command.mode.value)
            return command.future
        if wait:
            return command.future.result()
        return command.future

    def _worker_loop(self) -> None:
        while True:
            command = self._commands.get()
            if command is None:
                return
            try:
                results = self._execute(command)
            except Exception as e:
                log.exception('Worker failed running %s', command.mode.value)
                self._finish(command)
                command.future.set_exception(e)
            else:
                self._finish(command)
                command.future.set_result(results)

    def _execute(self, command: _Command) -> list[SessionResult]:
        if command.mode is Mode.NEXT:
            return [self._play(command, command.session)]
        if command.mode is Mode.ALL_ONCE:
            return self._play_pass(command, command.count)
        results: list[SessionResult] = []
        while self._still_looping(command):
            pass_results = self._play_pass(command, len(self._playlist))
            results.extend(pass_results)
            if pass_results and all(r.error is not None for r in pass_results):
                log.error('Every file in the playlist failed; looping stopped')
                break
        return results

    def _still_looping(self, command: _Command) -> bool:
        with self._lock:
            return (
                self._looping
                and not command.cancelled.is_set()
                and self._generation == command.generation
            )

    def _play_pass(self, command: _Command, count: int) -> list[SessionResult]:
        results: list[SessionResult] = []
        for _ in range(count):
            with self._lock:
                if command.cancelled.is_set():
                    break
                path = self._playlist.rotate()
            try:
                session = PlaybackSession.open(path, self._decoder_factory)
            except PlaybackFailure as e:
                log.error('%s', e)
                result = SessionResult(path, completed=False, error=e)
                self._report(result)
                results.append(result)
                continue
            results.append(self._play(command, session))
        return results

    def _play(self, command: _Command, session: PlaybackSession) -> SessionResult:
        with self._lock:
            if command.cancelled.is_set():
                session.abort()
            else:
                self._session = session
        result = session.run()
        with self._lock:
            if self._session is session:
                self._session = None
        self._report(result)
        return result

    def _report(self, result: SessionResult) -> None:
        callbacks = [self.on_session_end]
        if result.error is not None:
            callbacks.append(self.on_error)
        for callback in callbacks:
            if callback is None:
                continue
            try:
                callback(result)
            except Exception:
                log.exception('Callback failed for %s', result.path)

    def _finish(self, command: _Command) -> None:
        """Back to idle, unless stop() or a newer command has moved the generation on."""
        with self._lock:
            if self._generation != command.generation:
                return
            self._playing = False
            self._looping = False
            self._command = None
