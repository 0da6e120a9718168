"""Error taxonomy for play-music.

Every failure the core can produce is raised as a subclass of
:class:`PlayMusicError`. The command-line glue in :mod:`playmusic.cli` is the
only place these are turned into diagnostics and exit statuses.
"""

from __future__ import annotations

from .logging_utils import display_text


class PlayMusicError(Exception):
    """Base class for failures that terminate a run."""

    exit_code: int = 1
    show_short_help: bool = False


class UsageError(PlayMusicError):
    """Malformed flags, missing option values or missing directories."""

    show_short_help = True


class ConfigError(PlayMusicError):
    """Raised when the configuration file or environment is invalid."""


class InvalidPatternError(PlayMusicError):
    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Failed to compile match expression '{display_text(pattern)}': {reason}")
        self.pattern = pattern
        self.reason = reason


class ResourceError(PlayMusicError):
    """A filesystem or system resource could not be acquired."""


class DirectoryOpenError(ResourceError):
    def __init__(self, directory: str, reason: str) -> None:
        super().__init__(f"Unable to open directory '{display_text(directory)}': {reason}")
        self.directory = directory
        self.reason = reason


class UnplayableFormatError(PlayMusicError):
    def __init__(self, format_name: str, file_path: str | None = None) -> None:
        message = f"No available strategy to play {format_name} files"
        if file_path is not None:
            message += f". Offending file: {display_text(file_path)}"
        super().__init__(message)
        self.format_name = format_name
        self.file_path = file_path


class EmptyPlaylistError(PlayMusicError):
    def __init__(self) -> None:
        super().__init__("No songs loaded")


class ChildLaunchError(PlayMusicError):
    def __init__(self, program: str, reason: str) -> None:
        super().__init__(f"Failed to run command '{display_text(program)}': {reason}")
        self.program = program
        self.reason = reason


class InfoRequested(Exception):
    """Raised by the argument parser when help, version or license output was requested.

    Not an error: the caller prints the requested text and exits with status 0.
    """

    TOPICS = ("help", "version", "license")

    def __init__(self, topic: str) -> None:
        if topic not in self.TOPICS:
            raise ValueError(f"Unknown info topic: {topic}")
        super().__init__(topic)
        self.topic = topic
