"""Play strategies and per-format strategy selection.

A :class:`PlayStrategy` describes how to hand one song to an external player.
The :class:`SoundSystem` picks, for each :class:`AudioFormat`, the first
strategy (in priority order) that supports the format and whose program is
available on the search path.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

from .errors import UnplayableFormatError
from .formats import AudioFormat
from .launcher import run_command

LOGGER = logging.getLogger(__name__)

Runner = Callable[[str, Sequence[str]], int]
Which = Callable[[str], "str | None"]


@dataclass(frozen=True)
class PlayStrategy:
    program: str
    arguments: tuple[str, ...] = ()
    formats: frozenset[AudioFormat] = field(default_factory=lambda: frozenset(AudioFormat))

    def supports(self, audio_format: AudioFormat) -> bool:
        return audio_format in self.formats

    def command_arguments(self, file_path: str) -> list[str]:
        # The file path is always the single positional argument. A relative
        # path starting with "-" would be read as an option by the player.
        if file_path.startswith("-"):
            file_path = f"./{file_path}"
        return [*self.arguments, file_path]


DEFAULT_STRATEGIES: tuple[PlayStrategy, ...] = (
    PlayStrategy("mpv", ("--no-audio-display",)),
    PlayStrategy("cvlc", ("--play-and-exit",)),
)


class SoundSystem:
    def __init__(
        self,
        strategies: Iterable[PlayStrategy] = DEFAULT_STRATEGIES,
        *,
        which: Which | None = None,
    ) -> None:
        which = which or shutil.which
        self.strategies: tuple[PlayStrategy, ...] = tuple(strategies)
        self._available: dict[str, bool] = {}
        self._format_strategies: dict[AudioFormat, PlayStrategy] = {}

        for audio_format in AudioFormat:
            for strategy in self.strategies:
                if not strategy.supports(audio_format):
                    continue
                if self._is_available(strategy.program, which):
                    self._format_strategies[audio_format] = strategy
                    break

        for audio_format in AudioFormat:
            strategy = self._format_strategies.get(audio_format)
            LOGGER.debug(
                "Play strategy for %s files: %s",
                audio_format.value,
                strategy.program if strategy else "(none)",
            )

    def _is_available(self, program: str, which: Which) -> bool:
        if program not in self._available:
            self._available[program] = which(program) is not None
        return self._available[program]

    def is_playable(self, audio_format: AudioFormat) -> bool:
        return audio_format in self._format_strategies

    def strategy_for(self, audio_format: AudioFormat) -> PlayStrategy:
        try:
            return self._format_strategies[audio_format]
        except KeyError:
            raise UnplayableFormatError(audio_format.value) from None

    def play(self, file_path: str, audio_format: AudioFormat, runner: Runner | None = None) -> int:
        """Play one song with its format's strategy, returning the player's exit status."""
        strategy = self.strategy_for(audio_format)
        runner = runner or run_command
        return runner(strategy.program, strategy.command_arguments(file_path))
