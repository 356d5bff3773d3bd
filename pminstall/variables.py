"""Named variables that can be substituted into ``$NAME$`` placeholders."""

from __future__ import annotations

from collections.abc import Iterator


class VariableHandler:
    """Holds named string values and expands ``$NAME$`` references."""

    def __init__(self) -> None:
        self._variables: dict[str, str] = {}

    def set_variable(self, name: str, value: str) -> None:
        """Set (or overwrite) the variable ``name``."""
        self._variables[name] = value

    def get_variable(self, name: str) -> str:
        """Return the value of ``name``, or an empty string if it is not set."""
        return self._variables.get(name, "")

    def replace_variables(self, source: str) -> str:
        """Return ``source`` with every ``$NAME$`` replaced by its value.

        Unknown names expand to an empty string.  A ``$`` with no closing
        ``$`` is left as it is.  Substituted values are not expanded again.
        """
        parts: list[str] = []
        position = 0
        while True:
            start = source.find("$", position)
            if start == -1:
                break
            end = source.find("$", start + 1)
            if end == -1:
                break
            parts.append(source[position:start])
            parts.append(self.get_variable(source[start + 1:end]))
            position = end + 1
        parts.append(source[position:])
        return "".join(parts)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        """Yield ``(name, value)`` pairs in name order."""
        return iter(sorted(self._variables.items()))