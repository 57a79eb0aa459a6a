"""Output settings persisted as JSON: device, block size, volume."""

import functools
import json
import os

DEFAULTS: dict[str, str | int | float | None] = {
    "device": None,
    "blocksize": 2048,
    "volume": 1.0,
}


class PlayerSettings:
    """Load/save decoder output settings in settings_dir/settings.json."""

    def __init__(self, settings_dir: str = ""):
        self._dir = settings_dir or os.path.join(os.path.expanduser("~"), ".mp3_player")
        self._path = os.path.join(self._dir, "settings.json")
        self._data: dict[str, str | int | float | None] = dict(DEFAULTS)
        self.load()

    @property
    def settings_dir(self) -> str:
        return self._dir

    def load(self) -> None:
        self._data = dict(DEFAULTS)
        if not os.path.isfile(self._path):
            return
        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError):
            return
        if isinstance(data, dict):
            self._data.update((k, v) for k, v in data.items() if k in DEFAULTS)

    def save(self) -> None:
        if not self._dir:
            return
        try:
            os.makedirs(self._dir, exist_ok=True)
            with open(self._path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2)
        except OSError:
            pass

    @property
    def device(self) -> str | int | None:
        return self._data["device"]

    @device.setter
    def device(self, value: str | int | None) -> None:
        self._data["device"] = value
        self.save()

    @property
    def blocksize(self) -> int:
        try:
            size = int(self._data["blocksize"])
        except (TypeError, ValueError):
            return DEFAULTS["blocksize"]
        return size if size > 0 else DEFAULTS["blocksize"]

    @blocksize.setter
    def blocksize(self, value: int) -> None:
        self._data["blocksize"] = int(value)
        self.save()

    @property
    def volume(self) -> float:
        try:
            vol = float(self._data["volume"])
        except (TypeError, ValueError):
            return DEFAULTS["volume"]
        return max(0.0, min(1.0, vol))

    @volume.setter
    def volume(self, value: float) -> None:
        self._data["volume"] = max(0.0, min(1.0, float(value)))
        self.save()

    def decoder_factory(self):
        """Zero-argument callable making a SoundDeviceDecoder with these settings."""
        from mp3_player.decoder import SoundDeviceDecoder
        return functools.partial(
            SoundDeviceDecoder,
            device=self.device,
            blocksize=self.blocksize,
            volume=self.volume,
        )
