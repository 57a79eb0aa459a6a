"""Decode an audio byte stream with soundfile and play it through sounddevice."""

import logging
import threading
from typing import BinaryIO, Protocol

import numpy as np

try:
    import sounddevice as sd
    import soundfile as sf
    AUDIO_AVAILABLE = True
except (ImportError, OSError):
    # OSError: PortAudio or libsndfile shared library missing
    sd = None
    sf = None
    AUDIO_AVAILABLE = False

log = logging.getLogger(__name__)

DEFAULT_BLOCKSIZE = 2048


class Decoder(Protocol):
    """Blocking play of one stream; close() from another thread aborts it."""

    def play(self, stream: BinaryIO) -> bool:
        """Play until the end (True) or until closed (False)."""
        ...

    def close(self) -> None:
        ...


class SoundDeviceDecoder:
    """
    Play one file stream on a PortAudio output.

    - libsndfile (via soundfile) decodes MP3, OGG, FLAC and WAV from the open stream.
    - Blocks of float32 frames are scaled by volume and written to a blocking OutputStream.
    - close() sets a flag checked between blocks and aborts the output so a pending write returns.
    """

    def __init__(
        self,
        device: str | int | None = None,
        blocksize: int = DEFAULT_BLOCKSIZE,
        volume: float = 1.0,
    ) -> None:
        self._device = device
        self._blocksize = blocksize
        self._volume = volume
        self._closed = threading.Event()
        self._out = None

    def play(self, stream: BinaryIO) -> bool:
        if not AUDIO_AVAILABLE:
            raise RuntimeError('sounddevice/soundfile not available')
        if self._closed.is_set():
            return False
        with sf.SoundFile(stream) as snd:
            log.debug('Decoding %s: %d Hz, %d ch', snd.format, snd.samplerate, snd.channels)
            with sd.OutputStream(
                samplerate=snd.samplerate,
                channels=snd.channels,
                dtype='float32',
                device=self._device,
            ) as out:
                self._out = out
                try:
                    for block in snd.blocks(blocksize=self._blocksize, dtype='float32', always_2d=True):
                        if self._closed.is_set():
                            return False
                        if self._volume != 1.0:
                            np.multiply(block, self._volume, out=block)
                        try:
                            out.write(block)
                        except sd.PortAudioError:
                            if self._closed.is_set():
                                return False
                            raise
                finally:
                    self._out = None
        return not self._closed.is_set()

    def close(self) -> None:
        self._closed.set()
        out = self._out
        if out is not None:
            try:
                out.abort()
            except sd.PortAudioError as e:
                log.debug('Abort on closing output: %s', e)
