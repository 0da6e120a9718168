"""Help, version and license output.

Help is rendered with Rich when the console is a terminal and falls back to
plain text otherwise (pipes, tests, redirected output).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .version import __version__


@dataclass
class CommandHelp:
    """Structured help content shown below the option list."""

    options: List[Tuple[str, str]] = field(default_factory=list)
    """List of (flags, description) tuples."""

    examples: List[Tuple[str, str]] = field(default_factory=list)
    """List of (description, command) tuples; ``{prog}`` is replaced by the program name."""

    env_vars: List[Tuple[str, str]] = field(default_factory=list)
    """List of (variable_name, description) tuples."""


DESCRIPTION = "Plays the music files located in DIRECTORY."

STRATEGIES_TEXT = [
    "Available play strategies (in order of priority):",
    "  1. With mpv, if present.",
    "  2. With cvlc, if present.",
]

PLAY_COMMAND_HELP = CommandHelp(
    options=[
        ("-h, --help", "Display help and exit."),
        ("-v, --version", "Display version and exit."),
        ("-l, --license", "Display license and exit."),
        (
            "-m, --match REGEX",
            "Only plays songs whose file name matches REGEX. REGEX is not case "
            "sensitive and succeeds on a partial match.",
        ),
        (
            "--no-shuffle",
            "Plays the songs in the order they appear in the directory, instead of "
            "randomly shuffling them.",
        ),
        (
            "--no-repeat",
            "Exits once all the songs have been played, instead of repeating them "
            "in an endless loop.",
        ),
        (
            "--no-skip-unplayable",
            "Exits if some of the songs cannot be played, instead of skipping them.",
        ),
        ("--verbose", "Enable debug logging."),
    ],
    examples=[
        ("Shuffle and loop everything in two directories", "{prog} ~/Music/rock ~/Music/jazz"),
        ("Play live recordings once, in directory order", "{prog} --no-shuffle --no-repeat -m '^live' ~/Music"),
        ("Directory names that start with a dash", "{prog} -- -b-sides"),
    ],
    env_vars=[
        ("PLAY_MUSIC_CONFIG", "Path to the YAML configuration file"),
        ("PLAY_MUSIC_LOG_LEVEL", "Log level (DEBUG, INFO, WARNING, ERROR)"),
        ("PLAY_MUSIC_SKIP_UNPLAYABLE", "Skip songs without a play strategy (true/false)"),
        ("PLAY_MUSIC_PLAYERS", "Comma-separated player programs, in priority order"),
    ],
)

LICENSE_TEXT = """\
play-music is free software: you can redistribute it and/or modify it under
the terms of the GNU General Public License as published by the Free Software
Foundation, either version 3 of the License, or (at your option) any later
version.

play-music is distributed in the hope that it will be useful, but WITHOUT ANY
WARRANTY; without even the implied warranty of MERCHANTABILITY or FITNESS FOR
A PARTICULAR PURPOSE. See the GNU General Public License for more details.

You should have received a copy of the GNU General Public License along with
play-music. If not, see <https://www.gnu.org/licenses/>.
"""


def usage_line(program: str) -> str:
    return f"  {program} [OPTION...] [--] DIRECTORY..."


def format_help(program: str, help_content: CommandHelp = PLAY_COMMAND_HELP) -> str:
    """Return the full help as plain text."""
    lines = ["Usages:", usage_line(program), "", DESCRIPTION, ""]
    lines.extend(STRATEGIES_TEXT)
    lines.extend(["", "Options:"])
    for flags, description in help_content.options:
        lines.append(f"  {flags}")
        lines.append(f"    {description}")
    if help_content.examples:
        lines.extend(["", "Examples:"])
        for description, command in help_content.examples:
            lines.append(f"  {description}:")
            lines.append(f"    $ {command.format(prog=program)}")
    if help_content.env_vars:
        lines.extend(["", "Environment Variables:"])
        width = max(len(name) for name, _ in help_content.env_vars)
        for name, description in help_content.env_vars:
            lines.append(f"  {name:<{width}}  {description}")
    return "\n".join(lines) + "\n"


def _print_rich_help(program: str, console: Console, help_content: CommandHelp) -> None:
    console.print(Text("Usages:", style="bold bright_cyan"))
    console.print(Text(usage_line(program), style="bright_white"))
    console.print()
    console.print(DESCRIPTION)
    console.print()
    for line in STRATEGIES_TEXT:
        console.print(line, markup=False)
    console.print()

    console.print(Text("Options:", style="bold bright_cyan"))
    options = Table(show_header=False, box=None, padding=(0, 2))
    options.add_column("Flags", style="bright_green bold", no_wrap=True)
    options.add_column("Description", style="bright_white")
    for flags, description in help_content.options:
        options.add_row(flags, description)
    console.print(options)

    if help_content.examples:
        console.print()
        console.print(Text("Examples:", style="bold bright_cyan"))
        for i, (description, command) in enumerate(help_content.examples, 1):
            desc_text = Text()
            desc_text.append(f"  {i}. ", style="dim cyan")
            desc_text.append(description, style="bright_white")
            console.print(desc_text)
            console.print(Text(f"     $ {command.format(prog=program)}", style="bright_yellow"))

    if help_content.env_vars:
        console.print()
        console.print(Text("Environment Variables:", style="bold bright_cyan"))
        env_table = Table(show_header=False, box=None, padding=(0, 2))
        env_table.add_column("Variable", style="bright_green bold", no_wrap=True)
        env_table.add_column("Description", style="bright_white")
        for name, description in help_content.env_vars:
            env_table.add_row(name, description)
        console.print(env_table)


def print_help(program: str, console: Console | None = None, help_content: CommandHelp = PLAY_COMMAND_HELP) -> None:
    console = console or Console()
    if console.is_terminal:
        _print_rich_help(program, console, help_content)
        return
    console.file.write(format_help(program, help_content))


def format_short_help(program: str) -> str:
    return f"Try '{program} -h' for more information"


def format_version(program: str) -> str:
    return f"{program} {__version__}"


def format_license() -> str:
    return LICENSE_TEXT
