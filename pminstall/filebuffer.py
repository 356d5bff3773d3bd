"""Random access to the characters of a file through a sliding window."""

from __future__ import annotations

import os

BUFFER_SIZE = 8192
REVERSE_PREFETCH = 384


class FileBuffer:
    """Reads single characters from a file, keeping a window in memory.

    When a position outside the window is requested, the window is reloaded
    starting a little before that position, so that walking backwards from
    it stays cheap.
    """

    def __init__(self, filename: str | os.PathLike[str]) -> None:
        self._file = open(filename, "rb")
        self._closed = False
        self._start = 0
        self._buffer = self._file.read(BUFFER_SIZE)

    def char_at(self, position: int) -> str | None:
        """Return the character at ``position``, or None past the end."""
        if self._closed:
            raise ValueError("FileBuffer is closed")
        if position < 0:
            return None
        offset = position - self._start
        if not 0 <= offset < len(self._buffer):
            self._start = max(position - REVERSE_PREFETCH, 0)
            self._file.seek(self._start)
            self._buffer = self._file.read(BUFFER_SIZE)
            offset = position - self._start
            if offset >= len(self._buffer):
                return None
        return chr(self._buffer[offset])

    def close(self) -> None:
        """Close the underlying file."""
        if not self._closed:
            self._file.close()
            self._closed = True

    def __enter__(self) -> FileBuffer:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()