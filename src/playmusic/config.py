from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError
from .formats import AudioFormat
from .logging_utils import parse_log_level
from .players import DEFAULT_STRATEGIES, PlayStrategy

LOGGER = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PLAY_MUSIC_CONFIG"
LOG_LEVEL_ENV_VAR = "PLAY_MUSIC_LOG_LEVEL"
SKIP_UNPLAYABLE_ENV_VAR = "PLAY_MUSIC_SKIP_UNPLAYABLE"
PLAYERS_ENV_VAR = "PLAY_MUSIC_PLAYERS"


_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off"})


@dataclass
class Settings:
    players: list[PlayStrategy] = field(default_factory=lambda: list(DEFAULT_STRATEGIES))
    skip_unplayable: bool = True
    log_level: str = "INFO"
    source: Path | None = None  # Config file the settings were read from, if any


def default_config_path() -> Path:
    config_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(config_home).expanduser() / "play-music" / "config.yaml"


def _expand_env(value: Any) -> Any:
    """Expand ``$VAR`` references in every string of a loaded YAML document."""
    if isinstance(value, str):
        return os.path.expandvars(value)
    if isinstance(value, list):
        return [_expand_env(item) for item in value]
    if isinstance(value, dict):
        return {key: _expand_env(val) for key, val in value.items()}
    return value


def _read_yaml(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return _expand_env(yaml.safe_load(handle) or {})


def _env_flag(name: str) -> bool | None:
    """Read a yes/no environment variable; unset or blank means no override."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    lowered = raw.strip().lower()
    if lowered in _TRUE_STRINGS:
        return True
    if lowered in _FALSE_STRINGS:
        return False
    raise ConfigError(f"{name}: expected a boolean such as yes or no, got '{raw}'")


def _env_program_names(name: str) -> list[str]:
    raw = os.getenv(name) or ""
    return [part.strip() for part in raw.split(",") if part.strip()]


def _ensure_string_list(value: Any, *, field_name: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ConfigError(f"'{field_name}' must be a string or a list of strings")
    result: list[str] = []
    for item in value:
        if not isinstance(item, (str, int, float)):
            raise ConfigError(f"'{field_name}' entries must be strings")
        result.append(str(item))
    return result


def _build_play_strategy(data: Any, index: int) -> PlayStrategy:
    prefix = f"players[{index}]"
    if isinstance(data, str):
        data = {"program": data}
    if not isinstance(data, Mapping):
        raise ConfigError(f"'{prefix}' must be a program name or a mapping")

    program = data.get("program")
    if not isinstance(program, str) or not program.strip():
        raise ConfigError(f"'{prefix}.program' must be a non-empty string")

    arguments = _ensure_string_list(data.get("arguments"), field_name=f"{prefix}.arguments")

    format_names = _ensure_string_list(data.get("formats"), field_name=f"{prefix}.formats")
    if format_names:
        try:
            formats = frozenset(AudioFormat.from_name(name) for name in format_names)
        except ValueError as exc:
            raise ConfigError(f"'{prefix}.formats': {exc}") from exc
    else:
        formats = frozenset(AudioFormat)

    return PlayStrategy(program.strip(), tuple(arguments), formats)


def _restrict_players(players: list[PlayStrategy], names: list[str]) -> list[PlayStrategy]:
    """Reorder and filter strategies by program name, keeping unknown names as bare strategies."""
    by_program = {strategy.program: strategy for strategy in players}
    return [by_program.get(name, PlayStrategy(name)) for name in names]


def build_settings(data: Mapping[str, Any], *, source: Path | None = None) -> Settings:
    if not isinstance(data, Mapping):
        raise ConfigError("Configuration must be a mapping")

    settings = Settings(source=source)

    if "players" in data:
        players_raw = data.get("players") or []
        if not isinstance(players_raw, list):
            raise ConfigError("'players' must be provided as a list")
        settings.players = [_build_play_strategy(entry, index) for index, entry in enumerate(players_raw)]

    skip_unplayable = data.get("skip_unplayable", True)
    if not isinstance(skip_unplayable, bool):
        raise ConfigError("'skip_unplayable' must be a boolean")
    settings.skip_unplayable = skip_unplayable

    log_level = str(data.get("log_level", "INFO"))
    try:
        parse_log_level(log_level)
    except ValueError as exc:
        raise ConfigError(f"'log_level': {exc}") from exc
    settings.log_level = log_level.upper()

    return settings


def apply_env_overrides(settings: Settings) -> Settings:
    log_level = os.getenv(LOG_LEVEL_ENV_VAR)
    if log_level:
        try:
            parse_log_level(log_level)
        except ValueError as exc:
            raise ConfigError(f"{LOG_LEVEL_ENV_VAR}: {exc}") from exc
        settings.log_level = log_level.strip().upper()

    skip_unplayable = _env_flag(SKIP_UNPLAYABLE_ENV_VAR)
    if skip_unplayable is not None:
        settings.skip_unplayable = skip_unplayable

    players = _env_program_names(PLAYERS_ENV_VAR)
    if players:
        settings.players = _restrict_players(settings.players, players)

    return settings


def load_config(path: Path | None = None) -> Settings:
    """Load settings from YAML and apply environment overrides.

    With no explicit ``path``, ``$PLAY_MUSIC_CONFIG`` is used (and must exist),
    falling back to the default location, which is optional.
    """
    required = True
    if path is None:
        env_path = os.getenv(CONFIG_ENV_VAR)
        if env_path:
            path = Path(env_path).expanduser()
        else:
            path = default_config_path()
            required = False

    if not path.exists():
        if required:
            raise ConfigError(f"Configuration file not found: {path}")
        LOGGER.debug("No configuration file at %s; using defaults", path)
        return apply_env_overrides(Settings())

    try:
        data = _read_yaml(path)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Unable to parse configuration file {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Unable to read configuration file {path}: {exc}") from exc

    return apply_env_overrides(build_settings(data, source=path))
