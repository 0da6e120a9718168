from __future__ import annotations

import logging
import sys
from collections.abc import Sequence

from rich.console import Console

from .arguments import DEFAULT_PROGRAM_NAME, Options, parse_arguments
from .config import load_config
from .errors import InfoRequested, PlayMusicError, UsageError
from .help_text import format_license, format_short_help, format_version, print_help
from .logging_utils import configure_logging, display_text, render_fields_block
from .players import Runner, SoundSystem
from .playlist import Playlist, RandomSource, build_playlist, compile_match_pattern, seeded_random

LOGGER = logging.getLogger(__name__)

EXIT_INTERRUPTED = 130


def _print_info(topic: str, program: str) -> None:
    console = Console(highlight=False, emoji=False)
    if topic == "help":
        print_help(program, console)
    elif topic == "version":
        console.print(format_version(program), markup=False)
    else:
        console.print(format_license(), markup=False, end="")


def _report_error(exc: PlayMusicError, program: str) -> None:
    LOGGER.error("%s", exc)
    if exc.show_short_help:
        print(format_short_help(program), file=sys.stderr)


def play_playlist(
    playlist: Playlist,
    sound_system: SoundSystem,
    *,
    repeat: bool,
    runner: Runner | None = None,
) -> None:
    """Play every song in order, looping over the same order forever if ``repeat``."""
    while True:
        for song in playlist:
            LOGGER.info("Now playing: %s", display_text(song.file_path))
            status = sound_system.play(song.file_path, song.format, runner=runner)
            if status != 0:
                LOGGER.warning("Player exited with status %d: %s", status, display_text(song.file_path))
        if not repeat:
            break


def run_player(
    options: Options,
    *,
    random_source: RandomSource | None = None,
    runner: Runner | None = None,
) -> int:
    if not options.directories:
        raise UsageError("No directories specified")

    settings = load_config()
    configure_logging(logging.DEBUG if options.verbose else settings.log_level)
    skip_unplayable = settings.skip_unplayable and options.skip_unplayable

    LOGGER.debug(
        render_fields_block(
            "Play Music Startup",
            {
                "Config": settings.source,
                "Directories": list(options.directories),
                "Match": options.match_pattern,
                "Shuffle": options.shuffle_enabled,
                "Repeat": options.repeat_enabled,
                "Skip Unplayable": skip_unplayable,
                "Players": [strategy.program for strategy in settings.players],
            },
        )
    )

    pattern = compile_match_pattern(options.match_pattern) if options.match_pattern is not None else None
    sound_system = SoundSystem(settings.players)
    playlist = build_playlist(
        options.directories,
        pattern,
        sound_system=sound_system,
        skip_unplayable=skip_unplayable,
    )

    if options.shuffle_enabled:
        playlist.shuffle(random_source or seeded_random())
    LOGGER.info("%d song(s) loaded in total", len(playlist))

    play_playlist(playlist, sound_system, repeat=options.repeat_enabled, runner=runner)
    return 0


def main(
    argv: Sequence[str] | None = None,
    *,
    random_source: RandomSource | None = None,
    runner: Runner | None = None,
) -> int:
    """Run play-music and return the process exit status."""
    argv = list(sys.argv if argv is None else argv)
    program = argv[0] if argv else DEFAULT_PROGRAM_NAME
    configure_logging(logging.INFO)
    # Seed the process-wide source at startup, before any parsing.
    random_source = random_source or seeded_random()

    try:
        options = parse_arguments(argv)
    except InfoRequested as info:
        _print_info(info.topic, program)
        return 0
    except UsageError as exc:
        _report_error(exc, program)
        return exc.exit_code

    try:
        return run_player(options, random_source=random_source, runner=runner)
    except PlayMusicError as exc:
        _report_error(exc, program)
        return exc.exit_code
    except KeyboardInterrupt:
        LOGGER.info("Interrupted")
        return EXIT_INTERRUPTED


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
