from __future__ import annotations

import io
import os
import random
from collections import Counter
from itertools import permutations
from pathlib import Path

import pytest

from playmusic.errors import DirectoryOpenError, EmptyPlaylistError, InvalidPatternError, UnplayableFormatError
from playmusic.formats import AudioFormat
from playmusic.logging_utils import configure_logging
from playmusic.players import PlayStrategy, SoundSystem
from playmusic.playlist import Playlist, Song, build_playlist, compile_match_pattern, seeded_random


class ScriptedRandom:
    """Random source returning a fixed sequence of offsets from the lower bound."""

    def __init__(self, offsets: list[int]) -> None:
        self.offsets = list(offsets)
        self.calls: list[tuple[int, int]] = []

    def randrange(self, start: int, stop: int) -> int:
        self.calls.append((start, stop))
        value = start + self.offsets.pop(0)
        assert start <= value < stop
        return value


def playlist_of(*paths: str) -> Playlist:
    playlist = Playlist()
    for path in paths:
        audio_format = AudioFormat.from_file(path)
        assert audio_format is not None
        playlist.songs.append(Song(path, audio_format))
    return playlist


class TestAppendFromDirectory:
    def test_filters_by_extension(self, music_dir) -> None:
        directory = music_dir("rock", "a.mp3", "b.txt", "c.flac")
        playlist = Playlist()

        appended = playlist.append_from_directory(str(directory))

        assert appended == 2
        assert sorted(playlist.entries) == [f"{directory}/a.mp3", f"{directory}/c.flac"]

    def test_entries_are_directory_slash_name(self, music_dir) -> None:
        directory = music_dir("rock", "a.mp3")
        playlist = Playlist()

        playlist.append_from_directory(f"{directory}/")

        assert playlist.entries == [f"{directory}//a.mp3"]

    def test_extension_match_is_case_sensitive(self, music_dir) -> None:
        directory = music_dir("rock", "LOUD.MP3", "quiet.mp3")
        playlist = Playlist()

        assert playlist.append_from_directory(str(directory)) == 1
        assert playlist.entries == [f"{directory}/quiet.mp3"]

    def test_match_pattern(self, music_dir) -> None:
        directory = music_dir("live", "live1.mp3", "studio1.mp3")
        playlist = Playlist()

        playlist.append_from_directory(str(directory), compile_match_pattern("^live"))

        assert playlist.entries == [f"{directory}/live1.mp3"]

    def test_match_pattern_is_case_insensitive_and_partial(self, music_dir) -> None:
        directory = music_dir("mixed", "Best-Of LIVE.ogg", "demo.wav", "alive.txt")
        playlist = Playlist()

        playlist.append_from_directory(str(directory), compile_match_pattern("live"))

        assert playlist.entries == [f"{directory}/Best-Of LIVE.ogg"]

    def test_pattern_matches_file_name_only(self, music_dir) -> None:
        directory = music_dir("live-shows", "encore.mp3")
        playlist = Playlist()

        assert playlist.append_from_directory(str(directory), compile_match_pattern("live")) == 0

    def test_accumulates_across_directories(self, music_dir) -> None:
        first = music_dir("first", "a.mp3")
        second = music_dir("second", "b.wav", "c.ogg")
        playlist = Playlist()

        assert playlist.append_from_directory(str(first)) == 1
        assert playlist.append_from_directory(str(second)) == 2
        assert playlist.entries[0] == f"{first}/a.mp3"
        assert sorted(playlist.entries[1:]) == [f"{second}/b.wav", f"{second}/c.ogg"]

    def test_each_file_appears_once(self, music_dir) -> None:
        directory = music_dir("many", *(f"track{i:02d}.flac" for i in range(30)))
        playlist = Playlist()

        playlist.append_from_directory(str(directory))

        assert len(playlist) == 30
        assert len(set(playlist.entries)) == 30

    def test_songs_carry_format(self, music_dir) -> None:
        directory = music_dir("one", "a.ogg")
        playlist = Playlist()

        playlist.append_from_directory(str(directory))

        assert list(playlist) == [Song(f"{directory}/a.ogg", AudioFormat.VORBIS)]

    def test_missing_directory(self, tmp_path: Path) -> None:
        missing = tmp_path / "does-not-exist"
        with pytest.raises(DirectoryOpenError) as excinfo:
            Playlist().append_from_directory(str(missing))
        assert excinfo.value.directory == str(missing)

    def test_file_instead_of_directory(self, tmp_path: Path) -> None:
        path = tmp_path / "song.mp3"
        path.write_bytes(b"")
        with pytest.raises(DirectoryOpenError):
            Playlist().append_from_directory(str(path))


class TestUnplayableSongs:
    def _sound_system(self, *formats: AudioFormat) -> SoundSystem:
        strategy = PlayStrategy("fakeplayer", formats=frozenset(formats))
        return SoundSystem([strategy], which=lambda program: f"/usr/bin/{program}")

    def test_skips_unplayable_formats(self, music_dir) -> None:
        directory = music_dir("mixed", "a.mp3", "b.flac")
        playlist = Playlist()

        appended = playlist.append_from_directory(
            str(directory),
            sound_system=self._sound_system(AudioFormat.MP3),
        )

        assert appended == 1
        assert playlist.entries == [f"{directory}/a.mp3"]

    def test_raises_when_not_skipping(self, music_dir) -> None:
        directory = music_dir("mixed", "b.flac")

        with pytest.raises(UnplayableFormatError) as excinfo:
            Playlist().append_from_directory(
                str(directory),
                sound_system=self._sound_system(AudioFormat.MP3),
                skip_unplayable=False,
            )
        assert excinfo.value.file_path == f"{directory}/b.flac"
        assert excinfo.value.format_name == "flac"


class TestBuildPlaylist:
    def test_scenario_rock(self, music_dir) -> None:
        directory = music_dir("rock", "a.mp3", "b.txt", "c.flac")

        playlist = build_playlist([str(directory)])

        assert sorted(playlist.entries) == [f"{directory}/a.mp3", f"{directory}/c.flac"]

    def test_one_empty_directory_among_several_is_allowed(self, music_dir) -> None:
        full = music_dir("full", "a.mp3")
        empty = music_dir("empty", "notes.txt")

        playlist = build_playlist([str(empty), str(full)])

        assert playlist.entries == [f"{full}/a.mp3"]

    def test_no_songs_at_all(self, music_dir) -> None:
        empty = music_dir("empty", "notes.txt")
        with pytest.raises(EmptyPlaylistError, match="No songs loaded"):
            build_playlist([str(empty)])

    def test_filter_removes_everything(self, music_dir) -> None:
        directory = music_dir("studio", "studio1.mp3")
        with pytest.raises(EmptyPlaylistError):
            build_playlist([str(directory)], compile_match_pattern("^live"))


class TestUndecodableNames:
    def test_entry_keeps_original_bytes(self, music_dir) -> None:
        directory = music_dir("rock", os.fsdecode(b"caf\xe9.mp3"))

        playlist = build_playlist([str(directory)])

        expected = os.fsencode(str(directory)) + b"/caf\xe9.mp3"
        assert [os.fsencode(entry) for entry in playlist.entries] == [expected]

    def test_directory_name_is_logged_escaped(self, tmp_path: Path) -> None:
        directory = tmp_path / os.fsdecode(b"m\xfcsik")
        directory.mkdir()
        (directory / "a.mp3").write_bytes(b"")
        stdout = io.TextIOWrapper(io.BytesIO(), encoding="utf-8", write_through=True)
        configure_logging("INFO", stdout=stdout, stderr=io.StringIO())

        build_playlist([str(directory)])

        logged = stdout.buffer.getvalue().decode("utf-8")
        assert f"INFO: Loading music from directory '{tmp_path}/m\\xfcsik'..." in logged
        assert f"INFO: 1 song(s) loaded from directory: {tmp_path}/m\\xfcsik" in logged

    def test_unplayable_warning_escapes_file_name(self, music_dir) -> None:
        directory = music_dir("rock", os.fsdecode(b"caf\xe9.flac"))
        stderr = io.TextIOWrapper(io.BytesIO(), encoding="utf-8", write_through=True)
        configure_logging("INFO", stdout=io.StringIO(), stderr=stderr)
        sound_system = SoundSystem([PlayStrategy("mp3only", formats=frozenset({AudioFormat.MP3}))], which=lambda p: p)

        assert Playlist().append_from_directory(str(directory), sound_system=sound_system) == 0

        assert "caf\\xe9.flac" in stderr.buffer.getvalue().decode("utf-8")


class TestCompileMatchPattern:
    def test_invalid_pattern(self) -> None:
        with pytest.raises(InvalidPatternError) as excinfo:
            compile_match_pattern("(unclosed")
        assert excinfo.value.pattern == "(unclosed"

    def test_extended_syntax(self) -> None:
        pattern = compile_match_pattern("^(live|demo)[0-9]+")
        assert pattern.search("LIVE12.mp3")
        assert pattern.search("demo3.ogg")
        assert not pattern.search("studio1.mp3")


class TestShuffle:
    def test_exact_permutation_with_scripted_source(self) -> None:
        playlist = playlist_of("a.mp3", "b.mp3", "c.mp3", "d.mp3")
        source = ScriptedRandom([2, 0, 1, 0])

        playlist.shuffle(source)

        # i=0 swaps with 2, i=1 stays, i=2 swaps with 3, i=3 stays.
        assert playlist.entries == ["c.mp3", "b.mp3", "d.mp3", "a.mp3"]
        assert source.calls == [(0, 4), (1, 4), (2, 4), (3, 4)]

    @pytest.mark.parametrize("count", [0, 1])
    def test_tiny_playlists_unchanged(self, count: int) -> None:
        paths = [f"{i}.mp3" for i in range(count)]
        playlist = playlist_of(*paths)

        playlist.shuffle(random.Random(1234))

        assert playlist.entries == paths

    @pytest.mark.parametrize("seed", [0, 1, 42, 2024])
    def test_shuffle_is_a_permutation(self, seed: int) -> None:
        paths = [f"track{i}.flac" for i in range(25)]
        playlist = playlist_of(*paths)

        playlist.shuffle(random.Random(seed))

        assert Counter(playlist.entries) == Counter(paths)

    def test_every_permutation_is_reachable(self) -> None:
        paths = ["a.mp3", "b.mp3", "c.mp3"]
        seen = set()
        for first in range(3):
            for second in range(2):
                playlist = playlist_of(*paths)
                playlist.shuffle(ScriptedRandom([first, second, 0]))
                seen.add(tuple(playlist.entries))

        assert seen == set(permutations(paths))

    def test_shuffle_is_in_place(self) -> None:
        playlist = playlist_of("a.mp3", "b.mp3")
        songs = playlist.songs

        playlist.shuffle(random.Random(7))

        assert playlist.songs is songs


class TestSeededRandom:
    def test_process_wide_source_is_reused(self) -> None:
        assert seeded_random() is seeded_random()
