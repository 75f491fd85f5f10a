"""Process-wide start-up: command-line parsing and the shared configuration."""

from __future__ import annotations

import getopt
import sys
from typing import Optional, Sequence

from .config import Config

USAGE = "format: command -i <configfile>"

_config = Config()


class UsageError(Exception):
    """Raised when the command line does not name a configuration file."""

    def __init__(self, detail: str = "") -> None:
        super().__init__(f"{detail}\n{USAGE}" if detail else USAGE)


def parse_args(argv: Optional[Sequence[str]] = None) -> str:
    """Return the configuration file named by ``-i`` in *argv*.

    *argv* holds the arguments after the program name; it defaults to
    ``sys.argv[1:]``.
    """
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        raise UsageError()
    try:
        options, _ = getopt.gnu_getopt(args, "i:")
    except getopt.GetoptError as exc:
        raise UsageError(str(exc)) from exc
    config_file = ""
    for _, value in options:
        config_file = value
    if not config_file:
        raise UsageError("no configuration file given")
    return config_file


def init(argv: Optional[Sequence[str]] = None) -> Config:
    """Load the configuration file named on the command line into the shared configuration."""
    _config.load_file(parse_args(argv))
    return _config


def get_config() -> Config:
    """Return the shared configuration."""
    return _config