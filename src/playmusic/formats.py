"""Recognition of playable audio files by extension."""

from __future__ import annotations

from enum import Enum


class AudioFormat(Enum):
    MP3 = "mp3"
    FLAC = "flac"
    WAV = "wav"
    VORBIS = "vorbis"

    @classmethod
    def from_file(cls, path: str) -> AudioFormat | None:
        """Return the format for ``path``, or None if it is not a music file."""
        return EXTENSION_FORMATS.get(file_extension(path))

    @classmethod
    def from_name(cls, name: str) -> AudioFormat:
        """Look up a format by value or by one of its extensions (``ogg``, ``.flac``)."""
        normalized = name.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        dotted = normalized if normalized.startswith(".") else f".{normalized}"
        try:
            return EXTENSION_FORMATS[dotted]
        except KeyError:
            raise ValueError(f"Unknown audio format: {name}") from None


# Case-sensitive: ".MP3" is not recognized.
EXTENSION_FORMATS: dict[str, AudioFormat] = {
    ".mp3": AudioFormat.MP3,
    ".flac": AudioFormat.FLAC,
    ".wav": AudioFormat.WAV,
    ".ogg": AudioFormat.VORBIS,
}

MUSIC_FILE_EXTENSIONS = frozenset(EXTENSION_FORMATS)


def file_extension(path: str) -> str:
    """Return the extension of the last path component, including the dot.

    A component without any ``.`` is returned whole, so it never matches a
    recognized extension.
    """
    name = path.rpartition("/")[2]
    dot = name.rfind(".")
    if dot == -1:
        return name
    return name[dot:]


def is_music_file(path: str) -> bool:
    return file_extension(path) in MUSIC_FILE_EXTENSIONS
