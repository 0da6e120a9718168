from __future__ import annotations

import logging
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep the user's config file and PLAY_MUSIC_* variables out of every test."""
    config_home = tmp_path / "xdg-config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    for name in (
        "PLAY_MUSIC_CONFIG",
        "PLAY_MUSIC_LOG_LEVEL",
        "PLAY_MUSIC_SKIP_UNPLAYABLE",
        "PLAY_MUSIC_PLAYERS",
        "PLAY_MUSIC_BUILD_VERSION",
    ):
        monkeypatch.delenv(name, raising=False)
    return config_home


@pytest.fixture(autouse=True)
def reset_playmusic_logging():
    """Drop handlers bound to a previous test's captured streams."""
    yield
    logger = logging.getLogger("playmusic")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def music_dir(tmp_path: Path):
    """Return a factory creating a directory populated with empty files."""

    def _make(name: str, *files: str) -> Path:
        directory = tmp_path / name
        directory.mkdir(parents=True)
        for file_name in files:
            (directory / file_name).write_bytes(b"")
        return directory

    return _make
