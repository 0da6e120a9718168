"""Child process launching for the external media player.

One child runs at a time: :func:`run_command` spawns the player and blocks
until it exits. There is no timeout, so a hung player blocks the caller.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence

from rich.console import Console

from .errors import ChildLaunchError
from .logging_utils import display_text

LOGGER = logging.getLogger(__name__)

_STDOUT_CONSOLE = Console(highlight=False, soft_wrap=True, emoji=False)


def build_argv(program: str, arguments: Sequence[str]) -> list[str]:
    """Return the argument vector for ``program``, with the program name as argv[0]."""
    return [program, *arguments]


def format_command(argv: Sequence[str]) -> str:
    """Join ``argv`` for display. The arguments handed to the child are not altered."""
    return " ".join(display_text(arg) for arg in argv)


def run_command(
    program: str,
    arguments: Sequence[str],
    *,
    console: Console | None = None,
) -> int:
    """Run ``program`` with ``arguments`` and wait for it to exit.

    The expanded command line is always echoed to standard output before the
    child starts.

    Args:
        program: Executable name, looked up on the search path
        arguments: Arguments following argv[0]
        console: Console the command is echoed to (stdout if None)

    Returns:
        The child's exit status.

    Raises:
        ChildLaunchError: The child process could not be started.
    """
    argv = build_argv(program, arguments)
    console = console or _STDOUT_CONSOLE
    console.print(f"INFO: Running command '{format_command(argv)}'", markup=False)

    try:
        completed = subprocess.run(argv, check=False)
    except FileNotFoundError as exc:
        raise ChildLaunchError(program, "executable not found on the search path") from exc
    except PermissionError as exc:
        raise ChildLaunchError(program, "permission denied") from exc
    except OSError as exc:
        raise ChildLaunchError(program, exc.strerror or str(exc)) from exc

    LOGGER.debug("Command '%s' exited with status %d", display_text(program), completed.returncode)
    return completed.returncode
