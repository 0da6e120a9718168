"""Version detection for installed and source-tree builds."""

from __future__ import annotations

import os
import re
from importlib import metadata
from pathlib import Path

DISTRIBUTION_NAME = "play-music"

# Fallback version if nothing else works
_FALLBACK_VERSION = "unknown"

# Pattern to match version lines like: ## [0.2.0] - 2025-03-14
_VERSION_PATTERN = re.compile(r"^## \[(\d+\.\d+\.\d+)\]")


def _find_changelog() -> Path | None:
    """Find CHANGELOG.md at the repository root when running from a source tree."""
    candidate = Path(__file__).parent.parent.parent / "CHANGELOG.md"
    return candidate if candidate.exists() else None


def _get_version_from_changelog() -> str | None:
    changelog_path = _find_changelog()
    if not changelog_path:
        return None

    try:
        with open(changelog_path, encoding="utf-8") as f:
            for line in f:
                match = _VERSION_PATTERN.match(line)
                if match:
                    return match.group(1)
    except OSError:
        pass

    return None


def _get_version_from_metadata() -> str | None:
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        return None


def get_version() -> str:
    """Get the current version string.

    Priority:
    1. PLAY_MUSIC_BUILD_VERSION environment variable (set by packagers)
    2. CHANGELOG.md release heading when running from a source tree
    3. Installed distribution metadata
    4. Fallback to "unknown"
    """
    build_version = os.environ.get("PLAY_MUSIC_BUILD_VERSION")
    if build_version:
        return build_version.strip()

    return _get_version_from_changelog() or _get_version_from_metadata() or _FALLBACK_VERSION


# Cache the version on module load
__version__ = get_version()
