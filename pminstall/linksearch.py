"""Find a direct download link to a named file inside an HTML page."""

from __future__ import annotations

import os

from pminstall.filebuffer import FileBuffer

MAX_RESULT_SIZE = 384

_PREFIXES = ('href="http://', 'href="https://')
_URI_CHARS = frozenset(":@&=+$,;/?")
# Distance from the start of 'href="' to the start of the URL itself.
_LINK_OFFSET = 6


def _is_domain_char(ch: str) -> bool:
    return ch in ".-" or (ch.isascii() and ch.isalnum())


class DirectLinkSearch:
    """Searches a saved HTML page for an ``href`` pointing at a file."""

    def __init__(self, filename: str | os.PathLike[str]) -> None:
        self._filename = filename

    def search(self, filename: str) -> str | None:
        """Return the full http(s) link ending in ``filename``, or None."""
        if not filename:
            return None
        length = len(filename)
        shifts = {ch: length - index - 1 for index, ch in enumerate(filename[:-1])}

        with FileBuffer(self._filename) as buffer:
            end = length - 1
            while (last := buffer.char_at(end)) is not None:
                matched = all(
                    buffer.char_at(end - k) == filename[length - 1 - k]
                    for k in range(length)
                )
                if not matched:
                    end += shifts.get(last, length)
                    continue
                link_start = self._link_start(buffer, end - length + 1)
                if link_start is not None:
                    return "".join(buffer.char_at(p) for p in range(link_start, end + 1))
                end += length
        return None

    @staticmethod
    def _link_start(buffer: FileBuffer, position: int) -> int | None:
        """Walk back from ``position`` looking for ``href="http(s)://``.

        Returns the position where the URL starts, or None if the characters
        before ``position`` do not form such a link.
        """
        cursors = [len(prefix) - 1 for prefix in _PREFIXES]
        lowest = max(position - MAX_RESULT_SIZE, 0)

        while position >= lowest:
            ch = buffer.char_at(position)
            if ch is None:
                return None
            if not _is_domain_char(ch) and ch not in _URI_CHARS:
                expecting_quote = any(
                    prefix[cursor] == '"' for prefix, cursor in zip(_PREFIXES, cursors)
                )
                if not (ch == '"' and expecting_quote):
                    return None

            for index, prefix in enumerate(_PREFIXES):
                if prefix[cursors[index]] == ch:
                    if cursors[index] == 0:
                        return position + _LINK_OFFSET
                    cursors[index] -= 1
                else:
                    cursors[index] = len(prefix) - 1
            position -= 1

        return None