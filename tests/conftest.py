"""Shared fixtures: a fake decoder backend and small audio files on disk."""

import os
import threading

import pytest


class FakeDecoder:
    """Records what it plays; blocks until the backend releases it or it is closed."""

    def __init__(self, backend: 'FakeBackend'):
        self.backend = backend
        self.closed = threading.Event()

    def play(self, stream) -> bool:
        data = stream.read()
        if data.startswith(b'BAD'):
            raise ValueError('not an audio stream')
        self.backend.played.append(os.path.basename(stream.name))
        self.backend.started.set()
        while not self.backend.release.is_set():
            if self.closed.wait(0.01):
                return False
        return not self.closed.is_set()

    def close(self) -> None:
        self.closed.set()


class FakeBackend:
    """Decoder factory. blocking=True keeps every play running until release is set."""

    def __init__(self, blocking: bool = False):
        self.played: list[str] = []
        self.decoders: list[FakeDecoder] = []
        self.started = threading.Event()
        self.release = threading.Event()
        if not blocking:
            self.release.set()

    def __call__(self) -> FakeDecoder:
        decoder = FakeDecoder(self)
        self.decoders.append(decoder)
        return decoder


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def blocking_backend():
    b = FakeBackend(blocking=True)
    yield b
    b.release.set()


@pytest.fixture
def audio_files(tmp_path):
    """Two playable files: a.mp3, b.mp3."""
    paths = []
    for name in ('a.mp3', 'b.mp3'):
        p = tmp_path / name
        p.write_bytes(b'ID3' + name.encode('ascii'))
        paths.append(str(p))
    return paths


@pytest.fixture
def bad_file(tmp_path):
    p = tmp_path / 'bad.mp3'
    p.write_bytes(b'BAD')
    return str(p)
