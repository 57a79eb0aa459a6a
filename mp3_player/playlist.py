"""Playlist state: a ring of audio file paths (no playback)."""

import os
from collections import deque
from typing import Iterable

from mp3_player.errors import InvalidInput

PathLike = str | bytes | os.PathLike


def _check_path(path: PathLike | None) -> PathLike:
    if path is None:
        raise InvalidInput('Null file or empty file name in playlist')
    try:
        name = os.fspath(path)
    except TypeError as e:
        raise InvalidInput(f'Not a file path: {path!r}') from e
    if not name:
        raise InvalidInput('Null file or empty file name in playlist')
    return path


class Playlist:
    """Ring of file paths. Taking the head puts it back at the tail, so order never changes."""

    def __init__(self, files: PathLike | Iterable[PathLike]) -> None:
        if files is None:
            raise InvalidInput('Playlist needs at least one file')
        if isinstance(files, (str, bytes, os.PathLike)):
            files = [files]
        try:
            files = iter(files)
        except TypeError as e:
            raise InvalidInput(f'Not a file path or list of paths: {files!r}') from e
        self._items: deque[PathLike] = deque(_check_path(f) for f in files)
        if not self._items:
            raise InvalidInput('Playlist needs at least one file')

    def items(self) -> list[PathLike]:
        """Copy of the ring, head first."""
        return list(self._items)

    def peek(self) -> PathLike:
        return self._items[0]

    def rotate(self) -> PathLike:
        """Remove the head, append it at the tail and return it."""
        path = self._items.popleft()
        self._items.append(path)
        return path

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(self.items())
