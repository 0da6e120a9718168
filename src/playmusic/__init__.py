"""play-music core package.

The package is organized into focused modules:

- **arguments**: Command-line parsing as an explicit state machine
- **formats**: Recognition of music files by extension
- **playlist**: Directory scanning, match filtering and shuffling
- **players**: Play strategies and per-format strategy selection
- **launcher**: Spawning the external player and waiting for it
- **config**: YAML configuration and environment overrides
- **cli**: Top-level orchestration and exit statuses

The main entry point is ``playmusic.cli.main``.
"""

from .arguments import Options, parse_arguments
from .playlist import Playlist, build_playlist
from .version import __version__

__all__ = [
    "__version__",
    "Options",
    "Playlist",
    "build_playlist",
    "parse_arguments",
]
