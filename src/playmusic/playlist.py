"""Playlist construction from music directories.

Directories are read in filesystem enumeration order (never sorted). Entries
are kept when their extension is a recognized music extension and, if a match
pattern is given, when their file name matches it case-insensitively.
"""

from __future__ import annotations

import logging
import os
import random
import re
import time
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from .errors import DirectoryOpenError, EmptyPlaylistError, InvalidPatternError, UnplayableFormatError
from .formats import AudioFormat
from .logging_utils import display_text, render_fields_block

if TYPE_CHECKING:  # pragma: no cover
    from .players import SoundSystem

LOGGER = logging.getLogger(__name__)


class RandomSource(Protocol):
    def randrange(self, start: int, stop: int) -> int: ...


_PROCESS_RANDOM: random.Random | None = None


def seeded_random() -> random.Random:
    """Return the process-wide random source, seeding it on first use.

    The seed is the monotonic clock in whole seconds. Shuffling is cosmetic,
    so neither security nor reproducibility across runs matters.
    """
    global _PROCESS_RANDOM
    if _PROCESS_RANDOM is None:
        _PROCESS_RANDOM = random.Random(int(time.monotonic()))
    return _PROCESS_RANDOM


def compile_match_pattern(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        raise InvalidPatternError(pattern, str(exc)) from exc


@dataclass(slots=True)
class Song:
    file_path: str
    format: AudioFormat


class Playlist:
    def __init__(self) -> None:
        self.songs: list[Song] = []

    def __len__(self) -> int:
        return len(self.songs)

    def __iter__(self) -> Iterator[Song]:
        return iter(self.songs)

    @property
    def entries(self) -> list[str]:
        return [song.file_path for song in self.songs]

    def append_from_directory(
        self,
        directory: str,
        pattern: re.Pattern[str] | None = None,
        *,
        sound_system: SoundSystem | None = None,
        skip_unplayable: bool = True,
    ) -> int:
        """Append the music files found directly inside ``directory``.

        Args:
            directory: Directory to read; entries are appended as ``directory + "/" + name``
            pattern: Compiled match pattern; only file names it matches are appended
            sound_system: If given, songs without an available play strategy are not appended
            skip_unplayable: Warn and skip unplayable songs instead of raising

        Returns:
            The number of songs appended.

        Raises:
            DirectoryOpenError: The directory cannot be opened or read.
            UnplayableFormatError: An unplayable song was found and skip_unplayable is False.
        """
        try:
            with os.scandir(directory) as iterator:
                names = [entry.name for entry in iterator]
        except OSError as exc:
            raise DirectoryOpenError(directory, exc.strerror or str(exc)) from exc

        appended = 0
        for name in names:
            audio_format = AudioFormat.from_file(name)
            if audio_format is None:
                continue
            if pattern is not None and pattern.search(name) is None:
                continue

            file_path = directory + "/" + name
            if sound_system is not None and not sound_system.is_playable(audio_format):
                if not skip_unplayable:
                    raise UnplayableFormatError(audio_format.value, file_path)
                LOGGER.warning(
                    render_fields_block(
                        "Skipping Unplayable Song",
                        {
                            "File": file_path,
                            "Reason": f"no available strategy to play {audio_format.value} files",
                        },
                    )
                )
                continue

            self.songs.append(Song(file_path, audio_format))
            appended += 1

        return appended

    def shuffle(self, random_source: RandomSource) -> None:
        """Shuffle the playlist in place (Fisher-Yates)."""
        songs = self.songs
        count = len(songs)
        for i in range(count):
            j = random_source.randrange(i, count)
            songs[i], songs[j] = songs[j], songs[i]


def build_playlist(
    directories: Sequence[str],
    pattern: re.Pattern[str] | None = None,
    *,
    sound_system: SoundSystem | None = None,
    skip_unplayable: bool = True,
) -> Playlist:
    """Accumulate the songs of every directory into one playlist.

    An empty directory only produces a warning; an empty playlist overall is
    an error.

    Raises:
        EmptyPlaylistError: No songs were found in any directory.
    """
    playlist = Playlist()
    for directory in directories:
        LOGGER.info("Loading music from directory '%s'...", display_text(directory))
        songs_loaded = playlist.append_from_directory(
            directory,
            pattern,
            sound_system=sound_system,
            skip_unplayable=skip_unplayable,
        )
        if songs_loaded == 0:
            LOGGER.warning("Directory empty. Skipping: %s", display_text(directory))
            continue
        LOGGER.info("%d song(s) loaded from directory: %s", songs_loaded, display_text(directory))

    if len(playlist) == 0:
        raise EmptyPlaylistError()
    return playlist
