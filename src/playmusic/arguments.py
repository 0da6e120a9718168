"""Command-line argument parsing.

The parser is an explicit state machine over the raw argument tokens rather
than an ``argparse`` parser: short options cluster (``-m`` swallows the rest
of its cluster as the pattern), ``--`` switches every following token to a
directory, and empty tokens are ignored.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from .errors import InfoRequested, UsageError

LOGGER = logging.getLogger(__name__)

DEFAULT_PROGRAM_NAME = "play-music"
MAX_DIRECTORIES = 50


@dataclass(frozen=True)
class Options:
    program_name: str = DEFAULT_PROGRAM_NAME
    shuffle_enabled: bool = True
    repeat_enabled: bool = True
    skip_unplayable: bool = True
    verbose: bool = False
    match_pattern: str | None = None
    directories: tuple[str, ...] = ()


class ParserState(Enum):
    BASE = "base"
    END_OF_OPTIONS = "end-of-options"
    MATCH_PENDING = "match-pending"


# Long options that exit immediately with informational output.
_INFO_LONG_OPTIONS = {
    "--help": "help",
    "--version": "version",
    "--license": "license",
}

_INFO_SHORT_OPTIONS = {
    "h": "help",
    "v": "version",
    "l": "license",
}


class ArgumentParser:
    """Single-use parser turning ``argv`` into :class:`Options`."""

    def __init__(self, argv: Sequence[str]) -> None:
        self._tokens: deque[str] = deque(argv)
        self.program_name = self._tokens.popleft() if self._tokens else DEFAULT_PROGRAM_NAME
        self.state = ParserState.BASE
        self._pending_option: str | None = None

        self._shuffle_enabled = True
        self._repeat_enabled = True
        self._skip_unplayable = True
        self._verbose = False
        self._match_pattern: str | None = None
        self._directories: list[str] = []

    def parse(self) -> Options:
        while self._tokens:
            token = self._tokens.popleft()
            if self.state is ParserState.BASE:
                self._handle_base(token)
            elif self.state is ParserState.END_OF_OPTIONS:
                self._append_directory(token)
            elif self.state is ParserState.MATCH_PENDING:
                self._match_pattern = token
                self.state = ParserState.BASE
            else:  # pragma: no cover - exhaustive
                raise AssertionError(f"unreachable parser state: {self.state}")

        if self.state is ParserState.MATCH_PENDING:
            raise UsageError(f"Option '{self._pending_option}' expects a regular expression as an argument")

        options = Options(
            program_name=self.program_name,
            shuffle_enabled=self._shuffle_enabled,
            repeat_enabled=self._repeat_enabled,
            skip_unplayable=self._skip_unplayable,
            verbose=self._verbose,
            match_pattern=self._match_pattern,
            directories=tuple(self._directories),
        )
        LOGGER.debug("Parsed arguments: %s", options)
        return options

    def _handle_base(self, token: str) -> None:
        if not token:
            return

        if token in _INFO_LONG_OPTIONS:
            raise InfoRequested(_INFO_LONG_OPTIONS[token])
        if token == "--no-shuffle":
            self._shuffle_enabled = False
        elif token == "--no-repeat":
            self._repeat_enabled = False
        elif token == "--no-skip-unplayable":
            self._skip_unplayable = False
        elif token == "--verbose":
            self._verbose = True
        elif token == "--match":
            self._pending_option = token
            self.state = ParserState.MATCH_PENDING
        elif token == "--":
            self.state = ParserState.END_OF_OPTIONS
        elif token.startswith("--"):
            raise UsageError(f"Unknown option '{token}'")
        elif token.startswith("-"):
            self._parse_short_options(token[1:])
        else:
            self._append_directory(token)

    def _parse_short_options(self, cluster: str) -> None:
        for index, option in enumerate(cluster):
            if option in _INFO_SHORT_OPTIONS:
                raise InfoRequested(_INFO_SHORT_OPTIONS[option])
            if option == "m":
                remainder = cluster[index + 1 :]
                if remainder:
                    self._match_pattern = remainder
                elif self._tokens:
                    self._match_pattern = self._tokens.popleft()
                else:
                    raise UsageError("Option '-m' expects a regular expression as an argument")
                return
            raise UsageError(f"Unknown option '-{option}'")

    def _append_directory(self, directory: str) -> None:
        if len(self._directories) >= MAX_DIRECTORIES:
            raise UsageError(f"Too many directories specified (at most {MAX_DIRECTORIES} are supported)")
        self._directories.append(directory)


def parse_arguments(argv: Sequence[str]) -> Options:
    """Parse raw process arguments (including the program name) into :class:`Options`.

    Raises:
        InfoRequested: ``-h``/``-v``/``-l`` or their long forms were given.
        UsageError: The arguments are malformed.
    """
    return ArgumentParser(argv).parse()
