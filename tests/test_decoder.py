"""Tests for mp3_player.decoder: the block loop against a fake PortAudio output."""

import io
import threading
import types

import numpy as np
import pytest

from mp3_player import decoder

FRAMES = 1000
BLOCKSIZE = 100


class FakePortAudioError(Exception):
    pass


class FakeOutputStream:
    """Records written blocks. write() can block until abort() or raise on demand."""

    def __init__(self, hooks, **kwargs):
        self.kwargs = kwargs
        self.written = []
        self.aborted = threading.Event()
        self.hooks = hooks
        hooks.streams.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return None

    def write(self, block):
        self.written.append(block.copy())
        if self.hooks.on_write is not None:
            self.hooks.on_write(self)

    def abort(self):
        self.aborted.set()


@pytest.fixture
def fake_sd(monkeypatch):
    """Replace sounddevice with a fake module; soundfile stays real."""
    sf = pytest.importorskip('soundfile')
    hooks = types.SimpleNamespace(streams=[], on_write=None)
    fake = types.SimpleNamespace(
        OutputStream=lambda **kwargs: FakeOutputStream(hooks, **kwargs),
        PortAudioError=FakePortAudioError,
    )
    monkeypatch.setattr(decoder, 'sd', fake)
    monkeypatch.setattr(decoder, 'sf', sf)
    monkeypatch.setattr(decoder, 'AUDIO_AVAILABLE', True)
    return hooks


@pytest.fixture
def wav_file(tmp_path):
    sf = pytest.importorskip('soundfile')
    path = tmp_path / 'tone.wav'
    data = np.full((FRAMES, 2), 0.5, dtype=np.float32)
    sf.write(str(path), data, 8000, subtype='FLOAT')
    return path


class TestSoundDeviceDecoder:
    def test_unavailable_backend_raises(self, monkeypatch):
        monkeypatch.setattr(decoder, 'AUDIO_AVAILABLE', False)
        with pytest.raises(RuntimeError):
            decoder.SoundDeviceDecoder().play(io.BytesIO(b''))

    def test_close_without_play(self):
        d = decoder.SoundDeviceDecoder()
        d.close()
        d.close()

    def test_play_after_close_returns_false(self, monkeypatch):
        monkeypatch.setattr(decoder, 'AUDIO_AVAILABLE', True)
        d = decoder.SoundDeviceDecoder()
        d.close()
        assert d.play(io.BytesIO(b'')) is False


class TestBlockLoop:
    """play() streams decoded blocks into the output stream."""

    def test_plays_every_frame_scaled_by_volume(self, fake_sd, wav_file):
        d = decoder.SoundDeviceDecoder(device='fake', blocksize=BLOCKSIZE, volume=0.5)
        with open(wav_file, 'rb') as f:
            assert d.play(f) is True
        out = fake_sd.streams[0]
        assert out.kwargs['samplerate'] == 8000
        assert out.kwargs['channels'] == 2
        assert out.kwargs['device'] == 'fake'
        assert len(out.written) == FRAMES // BLOCKSIZE
        frames = np.concatenate(out.written)
        assert frames.shape == (FRAMES, 2)
        assert np.allclose(frames, 0.25)

    def test_full_volume_passes_samples_through(self, fake_sd, wav_file):
        d = decoder.SoundDeviceDecoder(blocksize=BLOCKSIZE)
        with open(wav_file, 'rb') as f:
            d.play(f)
        assert np.allclose(np.concatenate(fake_sd.streams[0].written), 0.5)

    def test_close_between_blocks_stops_loop(self, fake_sd, wav_file):
        d = decoder.SoundDeviceDecoder(blocksize=BLOCKSIZE)
        fake_sd.on_write = lambda out: d.close()
        with open(wav_file, 'rb') as f:
            assert d.play(f) is False
        out = fake_sd.streams[0]
        assert len(out.written) == 1
        assert out.aborted.is_set()

    def test_close_from_other_thread_aborts_pending_write(self, fake_sd, wav_file):
        writing = threading.Event()

        def block_until_aborted(out):
            writing.set()
            if not out.aborted.wait(5.0):
                raise AssertionError('write never aborted')
            raise FakePortAudioError('stream aborted')

        fake_sd.on_write = block_until_aborted
        d = decoder.SoundDeviceDecoder(blocksize=BLOCKSIZE)
        result = []
        with open(wav_file, 'rb') as f:
            player = threading.Thread(target=lambda: result.append(d.play(f)))
            player.start()
            assert writing.wait(5.0)
            d.close()
            player.join(5.0)
        assert result == [False]
        assert fake_sd.streams[0].aborted.is_set()

    def test_portaudio_error_without_close_propagates(self, fake_sd, wav_file):
        def fail(out):
            raise FakePortAudioError('device lost')

        fake_sd.on_write = fail
        d = decoder.SoundDeviceDecoder(blocksize=BLOCKSIZE)
        with open(wav_file, 'rb') as f:
            with pytest.raises(FakePortAudioError):
                d.play(f)
