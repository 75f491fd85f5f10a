"""Loading of ``key=value`` configuration files."""

from __future__ import annotations

import io
import os
from typing import Union

PathType = Union[str, "os.PathLike[str]"]


def trim(text: str) -> str:
    """Strip leading and trailing spaces.

    Only the space character is removed. A string made of spaces alone is
    returned unchanged.
    """
    stripped = text.strip(" ")
    return stripped if stripped else text


class Config:
    """Settings read from ``key=value`` lines.

    Lines whose first non-space character is ``#`` are comments, lines
    without ``=`` are ignored, and the first value given for a key wins.
    """

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    def load_file(self, path: PathType) -> None:
        """Read settings from the file at *path*."""
        with open(path, encoding="utf-8", newline="\n") as handle:
            self.parse(handle.read())

    def parse(self, text: str) -> None:
        """Read settings from configuration *text*."""
        for raw in io.StringIO(text, newline="\n"):
            line = trim(raw)
            if not line or line.startswith("#"):
                continue
            key, sep, rest = line.partition("=")
            if not sep:
                continue
            value = rest.split("\n", 1)[0]
            self._entries.setdefault(trim(key), trim(value))

    def load(self, key: str) -> str:
        """Return the value stored for *key*, or an empty string."""
        return self._entries.get(key, "")